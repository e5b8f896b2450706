# estimator/pricing/items.py
"""Estimate line items and the single-field edit reconciler.

Each line item carries four linked numbers: cost, rate (sale price per
unit), margin % and markup %. When the user edits one of them the others are
recomputed so that, after every call,

    total == quantity * rate
    margin % == (rate - cost) / rate * 100
    markup % == (rate - cost) / cost * 100

Labor items are special: their cost is not a user input. It is always the
loaded labor cost taken from the estimate's pricing snapshot, so the stored
``cost`` field on a Labor item is informational only.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, asdict, fields, replace
from typing import Any, Dict, List, Literal, Optional

from estimator.pricing.numbers import (
    as_float,
    margin_percent,
    markup_percent,
    rate_for_margin,
)
from estimator.pricing.snapshot import PricingSnapshot

ItemType = Literal["Labor", "Material", "Equipment", "Subcontractor", "Fee", "Other"]
ITEM_TYPES = ("Labor", "Material", "Equipment", "Subcontractor", "Fee", "Other")
LABOR = "Labor"

# Fields the reconciler derives itself; never taken from an edit.
DERIVED_FIELDS = frozenset({"id", "total"})


@dataclass(frozen=True)
class EstimateItem:
    id: str
    type: ItemType = "Material"
    description: str = ""
    quantity: float = 0.0
    cost: float = 0.0
    rate: float = 0.0
    total: float = 0.0
    margin_percent: Optional[float] = None
    markup_percent: float = 0.0
    calc_basis: Optional[str] = None
    is_overridden: bool = False
    zone_id: Optional[str] = None
    unit: Optional[str] = None
    category: Optional[str] = None

    @property
    def is_labor(self) -> bool:
        return self.type == LABOR

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "EstimateItem":
        item_type = data.get("type") or "Material"
        if item_type not in ITEM_TYPES:
            item_type = "Other"
        margin = data.get("margin_percent")
        return cls(
            id=str(data.get("id") or new_item_id()),
            type=item_type,
            description=data.get("description") or "",
            quantity=as_float(data.get("quantity")),
            cost=as_float(data.get("cost")),
            rate=as_float(data.get("rate")),
            total=as_float(data.get("total")),
            margin_percent=None if margin is None else as_float(margin),
            markup_percent=as_float(data.get("markup_percent")),
            calc_basis=data.get("calc_basis"),
            is_overridden=bool(data.get("is_overridden", False)),
            zone_id=data.get("zone_id"),
            unit=data.get("unit"),
            category=data.get("category"),
        )

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def new_item_id() -> str:
    return uuid.uuid4().hex[:12]


def new_item(item_type: ItemType = "Material", quantity: float = 1.0, cost: float = 0.0,
             rate: float = 0.0, **extra) -> EstimateItem:
    """Build a freehand item with a fresh id and a consistent total."""
    return EstimateItem(
        id=extra.pop("id", None) or new_item_id(),
        type=item_type,
        quantity=quantity,
        cost=cost,
        rate=rate,
        total=quantity * rate,
        **extra,
    )


def add_item(items: List[EstimateItem], item: EstimateItem) -> List[EstimateItem]:
    return [*items, item]


def remove_item(items: List[EstimateItem], item_id: str) -> List[EstimateItem]:
    return [i for i in items if i.id != item_id]


def find_item(items: List[EstimateItem], item_id: str) -> Optional[EstimateItem]:
    return next((i for i in items if i.id == item_id), None)


def _accepted_changes(changes: Dict[str, Any]) -> Dict[str, Any]:
    allowed = {f.name for f in fields(EstimateItem)} - DERIVED_FIELDS
    out = {}
    for key, value in changes.items():
        if key not in allowed:
            continue
        if key in ("quantity", "cost", "rate", "markup_percent"):
            value = as_float(value)
        elif key == "margin_percent" and value is not None:
            value = as_float(value)
        elif key == "type" and value not in ITEM_TYPES:
            value = "Other"
        out[key] = value
    return out


def reconcile_item(item: EstimateItem, changes: Dict[str, Any],
                   snapshot: PricingSnapshot) -> EstimateItem:
    """
    Apply ``changes`` to ``item`` and recompute the dependent fields.

    One field is expected per call. When several are present they are
    applied in the fixed order quantity -> cost -> margin_percent -> rate,
    each rule working on the result of the previous one. A rule that moves
    the rate overwrites the rate sent in the same call: with both a margin
    and a rate, the rate derived from the margin survives and the rate rule
    only re-derives total, margin and markup from it.

    Whether the Labor rules apply is decided by the item's type before the
    edit.
    """
    changes = _accepted_changes(changes)
    updated = replace(item, **changes)
    labor = item.is_labor
    loaded_cost = snapshot.loaded_labor_cost

    # 1. quantity: keep rate, recompute total
    if "quantity" in changes:
        updated = replace(updated, total=updated.quantity * updated.rate)
        if item.calc_basis:
            updated = replace(updated, is_overridden=True)

    # 2. cost: hold margin, move rate (Labor cost comes from the snapshot)
    if "cost" in changes and not labor:
        rate = rate_for_margin(updated.cost, updated.margin_percent)
        updated = replace(
            updated,
            rate=rate,
            total=updated.quantity * rate,
            markup_percent=markup_percent(rate, updated.cost),
        )

    # 3. margin: move rate off the cost basis
    if "margin_percent" in changes:
        if labor:
            rate = rate_for_margin(loaded_cost, changes["margin_percent"])
            updated = replace(
                updated,
                rate=rate,
                total=updated.quantity * rate,
                cost=loaded_cost,
            )
        elif updated.cost > 0:
            rate = rate_for_margin(updated.cost, changes["margin_percent"])
            updated = replace(
                updated,
                rate=rate,
                total=updated.quantity * rate,
                markup_percent=markup_percent(rate, updated.cost),
            )

    # 4. rate: back-derive margin (and markup for non-Labor)
    if "rate" in changes:
        updated = replace(updated, total=updated.quantity * updated.rate)
        if labor:
            updated = replace(updated, margin_percent=margin_percent(updated.rate, loaded_cost))
        elif updated.cost > 0:
            updated = replace(
                updated,
                markup_percent=markup_percent(updated.rate, updated.cost),
                margin_percent=margin_percent(updated.rate, updated.cost),
            )

    return updated


def update_item(items: List[EstimateItem], item_id: str, changes: Dict[str, Any],
                snapshot: PricingSnapshot) -> List[EstimateItem]:
    """Return a new collection with ``item_id`` reconciled; others untouched."""
    return [
        reconcile_item(item, changes, snapshot) if item.id == item_id else item
        for item in items
    ]
