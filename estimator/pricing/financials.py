# estimator/pricing/financials.py
"""Job costing for won work: actual labor and expenses against revenue."""

from __future__ import annotations

from dataclasses import dataclass, asdict
from typing import Any, Dict, Iterable

from estimator.pricing.metrics import BusinessMetrics
from estimator.pricing.numbers import as_float, safe_div


@dataclass(frozen=True)
class JobCostReport:
    labor_cost_rate: float
    actual_labor_cost: float
    expenses_total: float
    total_actual_cost: float
    revenue: float
    profit: float
    margin_percent: float
    invoiced_total: float
    paid_total: float
    below_target: bool

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def labor_cost_rate(metrics: BusinessMetrics) -> float:
    """Current company loaded labor cost per hour (not an estimate snapshot)."""
    return (
        metrics.avg_hourly_wage * (1 + metrics.avg_labor_burden_percent / 100)
        + metrics.overhead_per_man_hour
    )


def analyze_job_costs(revenue: float, actual_labor_hours: float,
                      expenses: Iterable[Dict[str, Any]], invoices: Iterable[Dict[str, Any]],
                      metrics: BusinessMetrics, target_margin_percent: float) -> JobCostReport:
    invoices = list(invoices or [])
    rate = labor_cost_rate(metrics)
    actual_labor_cost = as_float(actual_labor_hours) * rate
    expenses_total = sum(as_float(e.get("amount")) for e in expenses or [])
    total_actual_cost = actual_labor_cost + expenses_total

    revenue = as_float(revenue)
    profit = revenue - total_actual_cost
    margin = safe_div(profit, revenue) * 100 if revenue > 0 else 0.0

    return JobCostReport(
        labor_cost_rate=rate,
        actual_labor_cost=actual_labor_cost,
        expenses_total=expenses_total,
        total_actual_cost=total_actual_cost,
        revenue=revenue,
        profit=profit,
        margin_percent=margin,
        invoiced_total=sum(as_float(i.get("amount")) for i in invoices),
        paid_total=sum(as_float(i.get("amount")) for i in invoices if i.get("status") == "Paid"),
        below_target=margin < target_margin_percent,
    )
