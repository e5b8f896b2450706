# estimator/pricing/snapshot.py
"""Per-estimate frozen copy of the company rates.

A snapshot is captured once, when an estimate is first opened for editing,
and stored with the estimate. Later changes to company settings never reach
an estimate that already has one.
"""

from __future__ import annotations

from dataclasses import dataclass, asdict
from typing import Any, Dict

from estimator.pricing.metrics import BusinessMetrics
from estimator.pricing.numbers import as_float
from estimator.pricing.settings import BusinessSettings


@dataclass(frozen=True)
class PricingSnapshot:
    overhead_per_man_hour: float = 0.0
    labor_burden_percent: float = 0.0
    target_margin_percent: float = 0.0
    base_labor_cost: float = 0.0
    target_hourly_rate: float = 0.0
    material_markup_percent: float = 0.0

    @property
    def loaded_labor_cost(self) -> float:
        """Wage plus payroll burden plus allocated overhead, per labor hour."""
        return (
            self.base_labor_cost * (1 + self.labor_burden_percent / 100)
            + self.overhead_per_man_hour
        )

    @classmethod
    def from_dict(cls, data: Dict[str, Any] | None) -> "PricingSnapshot":
        # missing fields price at 0; the host warns about a $0 labor cost
        d = data or {}
        return cls(**{name: as_float(d.get(name)) for name in cls.__dataclass_fields__})

    def to_dict(self) -> Dict[str, float]:
        return asdict(self)


def capture_snapshot(settings: BusinessSettings, metrics: BusinessMetrics) -> PricingSnapshot:
    return PricingSnapshot(
        overhead_per_man_hour=metrics.overhead_per_man_hour,
        labor_burden_percent=metrics.avg_labor_burden_percent,
        target_margin_percent=settings.pricing.target_margin_percent,
        base_labor_cost=metrics.avg_hourly_wage,
        target_hourly_rate=metrics.target_hourly_rate,
        material_markup_percent=settings.pricing.default_material_markup_percent,
    )
