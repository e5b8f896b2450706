# estimator/pricing/margin.py
"""Re-price a whole estimate to one target margin."""

from __future__ import annotations

from dataclasses import replace
from typing import List

from estimator.pricing.items import EstimateItem
from estimator.pricing.numbers import as_float, markup_percent, rate_for_margin
from estimator.pricing.snapshot import PricingSnapshot


def cost_basis(item: EstimateItem, snapshot: PricingSnapshot) -> float:
    """True per-unit cost of an item: loaded labor cost for Labor, stored cost otherwise."""
    return snapshot.loaded_labor_cost if item.is_labor else item.cost


def apply_margin(items: List[EstimateItem], target_margin_percent: float,
                 snapshot: PricingSnapshot) -> List[EstimateItem]:
    """
    Recompute every item's rate so that each line earns ``target_margin_percent``.

    Prior per-item rates are discarded. The target is clamped to [0, 99] for
    the division but stored on the items as given. Items without a positive
    cost basis end up with a rate of 0. Applying the same target twice gives
    the same items.
    """
    target = as_float(target_margin_percent)
    out = []
    for item in items:
        cost = cost_basis(item, snapshot)
        rate = rate_for_margin(cost, target) if cost > 0 else 0.0
        changes = dict(rate=rate, total=rate * item.quantity, margin_percent=target)
        if not item.is_labor and item.cost > 0:
            changes["markup_percent"] = markup_percent(rate, item.cost)
        out.append(replace(item, **changes))
    return out
