# estimator/pricing/totals.py
"""Estimate-level totals: business-rule adjustments, tax and profit report."""

from __future__ import annotations

from dataclasses import dataclass, asdict
from typing import Any, Dict, List

from estimator.pricing.items import EstimateItem
from estimator.pricing.numbers import as_float, safe_div
from estimator.pricing.settings import BusinessRules
from estimator.pricing.snapshot import PricingSnapshot

# Assumed cost shares of fees layered on the subtotal. These are fixed
# approximations used for the profit report, not measured data.
TRIP_CHARGE_COST_SHARE = 0.5         # vehicle cost
EMERGENCY_SURCHARGE_COST_SHARE = 0.66  # overtime pay

DEFAULT_TAX_RATE = 8.25


@dataclass(frozen=True)
class EstimateAdjustments:
    trip_charge: bool = False
    emergency_surcharge: bool = False
    apply_tax: bool = False
    tax_labor: bool = False
    tax_rate: float = DEFAULT_TAX_RATE
    min_job_fee_applied: bool = False

    @classmethod
    def from_dict(cls, data: Dict[str, Any] | None, tax_labor_default: bool = False,
                  default_tax_rate: float = DEFAULT_TAX_RATE) -> "EstimateAdjustments":
        d = data or {}
        tax_labor = d.get("tax_labor")
        return cls(
            trip_charge=bool(d.get("trip_charge", False)),
            emergency_surcharge=bool(d.get("emergency_surcharge", False)),
            apply_tax=bool(d.get("apply_tax", False)),
            tax_labor=tax_labor_default if tax_labor is None else bool(tax_labor),
            tax_rate=as_float(d.get("tax_rate"), default_tax_rate),
            min_job_fee_applied=bool(d.get("min_job_fee_applied", False)),
        )

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class EstimateTotals:
    items_total: float
    labor_total: float
    non_labor_total: float
    labor_surcharge: float
    trip_fee: float
    sub_total: float
    min_job_gap: float
    final_min_fee: float
    taxable_amount: float
    tax_amount: float
    grand_total: float
    total_cost: float
    net_profit: float
    margin_percent: float

    def to_dict(self) -> Dict[str, float]:
        return asdict(self)


def reconstruct_cost_basis(items: List[EstimateItem], adjustments: EstimateAdjustments,
                           rules: BusinessRules, snapshot: PricingSnapshot,
                           labor_surcharge: float) -> float:
    """
    Total true cost of the job, rebuilt from the snapshot.

    Labor is costed at the snapshot's loaded labor cost rather than the
    item's stored cost, since a Labor line may have been rate-overridden.
    """
    loaded = snapshot.loaded_labor_cost
    total_cost = 0.0
    for item in items:
        unit_cost = loaded if item.is_labor else item.cost
        total_cost += item.quantity * unit_cost
    if adjustments.trip_charge:
        total_cost += rules.trip_charge * TRIP_CHARGE_COST_SHARE
    if adjustments.emergency_surcharge:
        total_cost += labor_surcharge * EMERGENCY_SURCHARGE_COST_SHARE
    return total_cost


def compute_totals(items: List[EstimateItem], adjustments: EstimateAdjustments,
                   rules: BusinessRules, snapshot: PricingSnapshot) -> EstimateTotals:
    # base totals
    items_total = sum(i.total for i in items)
    labor_total = sum(i.total for i in items if i.is_labor)
    non_labor_total = items_total - labor_total

    # adjustments
    labor_surcharge = (
        labor_total * (rules.emergency_surcharge_percent / 100)
        if adjustments.emergency_surcharge else 0.0
    )
    trip_fee = rules.trip_charge if adjustments.trip_charge else 0.0
    sub_total = items_total + trip_fee + labor_surcharge
    min_job_gap = max(0.0, rules.min_service_call - sub_total)
    final_min_fee = min_job_gap if adjustments.min_job_fee_applied else 0.0

    # tax
    taxable_amount = (sub_total + final_min_fee) if adjustments.tax_labor else non_labor_total
    tax_amount = taxable_amount * (adjustments.tax_rate / 100) if adjustments.apply_tax else 0.0

    grand_total = sub_total + final_min_fee + tax_amount

    # profit
    total_cost = reconstruct_cost_basis(items, adjustments, rules, snapshot, labor_surcharge)
    revenue_pre_tax = sub_total + final_min_fee
    net_profit = revenue_pre_tax - total_cost
    margin = safe_div(net_profit, revenue_pre_tax) * 100 if revenue_pre_tax > 0 else 0.0

    return EstimateTotals(
        items_total=items_total,
        labor_total=labor_total,
        non_labor_total=non_labor_total,
        labor_surcharge=labor_surcharge,
        trip_fee=trip_fee,
        sub_total=sub_total,
        min_job_gap=min_job_gap,
        final_min_fee=final_min_fee,
        taxable_amount=taxable_amount,
        tax_amount=tax_amount,
        grand_total=grand_total,
        total_cost=total_cost,
        net_profit=net_profit,
        margin_percent=margin,
    )
