# estimator/pricing/settings.py
"""Company-wide business settings consumed by the pricing engine.

Settings are stored as a JSON document by the persistence layer. Older
documents are not always well-formed: the roster and overhead lists were
sometimes saved as mappings keyed by id, and early versions kept the pricing
fields at top level. :meth:`BusinessSettings.from_dict` accepts all of these
shapes and always returns a complete, normalized object.
"""

from __future__ import annotations

from dataclasses import dataclass, field, asdict
from typing import Any, Dict, List, Literal

from estimator.pricing.numbers import as_float

PayType = Literal["Hourly", "Salary"]
Frequency = Literal["Monthly", "Annual"]

DEFAULT_SEASON = {"weeks_per_year": 35, "days_per_week": 5, "hours_per_day": 8}
DEFAULT_PRICING = {
    "target_margin_percent": 20.0,
    "default_material_markup_percent": 30.0,
    "tax_labor_default": False,
}
DEFAULT_RULES = {
    "min_service_call": 50.0,
    "min_hours": 1.0,
    "trip_charge": 15.0,
    "emergency_surcharge_percent": 50.0,
}


def normalize_array(data: Any) -> list:
    """Return ``data`` as a list; mappings contribute their values."""
    if not data:
        return []
    if isinstance(data, list):
        return data
    if isinstance(data, dict):
        return list(data.values())
    return []


def _pay_type(value: Any) -> PayType:
    return "Salary" if str(value or "").strip().lower() == "salary" else "Hourly"


def _frequency(value: Any) -> Frequency:
    return "Monthly" if str(value or "").strip().lower() == "monthly" else "Annual"


@dataclass(frozen=True)
class Season:
    weeks_per_year: float = DEFAULT_SEASON["weeks_per_year"]
    days_per_week: float = DEFAULT_SEASON["days_per_week"]
    hours_per_day: float = DEFAULT_SEASON["hours_per_day"]

    @classmethod
    def from_dict(cls, data: Dict[str, Any] | None) -> "Season":
        d = data or DEFAULT_SEASON
        return cls(
            weeks_per_year=as_float(d.get("weeks_per_year")),
            days_per_week=as_float(d.get("days_per_week")),
            hours_per_day=as_float(d.get("hours_per_day")),
        )


@dataclass(frozen=True)
class Employee:
    id: str = ""
    name: str = ""
    role: str = ""
    pay_type: PayType = "Hourly"
    wage: float = 0.0
    labor_burden_percent: float = 0.0
    utilization_percent: float = 0.0

    @property
    def is_hourly(self) -> bool:
        return self.pay_type == "Hourly"

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Employee":
        return cls(
            id=str(data.get("id") or ""),
            name=data.get("name") or "",
            role=data.get("role") or "",
            pay_type=_pay_type(data.get("pay_type")),
            wage=as_float(data.get("wage")),
            labor_burden_percent=as_float(data.get("labor_burden_percent")),
            utilization_percent=as_float(data.get("utilization_percent")),
        )


@dataclass(frozen=True)
class OverheadItem:
    id: str = ""
    name: str = ""
    amount: float = 0.0
    frequency: Frequency = "Annual"

    @property
    def annual_amount(self) -> float:
        return self.amount * 12 if self.frequency == "Monthly" else self.amount

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "OverheadItem":
        return cls(
            id=str(data.get("id") or ""),
            name=data.get("name") or "",
            amount=as_float(data.get("amount")),
            frequency=_frequency(data.get("frequency")),
        )


@dataclass(frozen=True)
class PricingRules:
    target_margin_percent: float = DEFAULT_PRICING["target_margin_percent"]
    default_material_markup_percent: float = DEFAULT_PRICING["default_material_markup_percent"]
    tax_labor_default: bool = False

    @classmethod
    def from_dict(cls, data: Dict[str, Any] | None) -> "PricingRules":
        d = data or DEFAULT_PRICING
        return cls(
            target_margin_percent=as_float(d.get("target_margin_percent")),
            default_material_markup_percent=as_float(d.get("default_material_markup_percent")),
            tax_labor_default=bool(d.get("tax_labor_default", False)),
        )


@dataclass(frozen=True)
class BusinessRules:
    min_service_call: float = DEFAULT_RULES["min_service_call"]
    min_hours: float = DEFAULT_RULES["min_hours"]
    trip_charge: float = DEFAULT_RULES["trip_charge"]
    emergency_surcharge_percent: float = DEFAULT_RULES["emergency_surcharge_percent"]

    @classmethod
    def from_dict(cls, data: Dict[str, Any] | None) -> "BusinessRules":
        d = data or DEFAULT_RULES
        return cls(
            min_service_call=as_float(d.get("min_service_call")),
            min_hours=as_float(d.get("min_hours")),
            trip_charge=as_float(d.get("trip_charge")),
            emergency_surcharge_percent=as_float(d.get("emergency_surcharge_percent")),
        )


@dataclass(frozen=True)
class BusinessSettings:
    season: Season = field(default_factory=Season)
    employees: List[Employee] = field(default_factory=list)
    overhead: List[OverheadItem] = field(default_factory=list)
    pricing: PricingRules = field(default_factory=PricingRules)
    rules: BusinessRules = field(default_factory=BusinessRules)

    @classmethod
    def from_dict(cls, data: Dict[str, Any] | None) -> "BusinessSettings":
        """Build settings from a stored document, filling in defaults.

        Raises ``ValueError`` if a numeric field holds something that is not
        a number.
        """
        data = data or {}
        pricing = data.get("pricing")
        if not pricing and (
            data.get("target_margin_percent") is not None
            or data.get("default_material_markup_percent") is not None
        ):
            # legacy flat layout
            pricing = {
                "target_margin_percent": data.get("target_margin_percent") or 20,
                "default_material_markup_percent": data.get("default_material_markup_percent") or 30,
                "tax_labor_default": False,
            }
        return cls(
            season=Season.from_dict(data.get("season")),
            employees=[Employee.from_dict(e) for e in normalize_array(data.get("employees"))],
            overhead=[OverheadItem.from_dict(o) for o in normalize_array(data.get("overhead"))],
            pricing=PricingRules.from_dict(pricing),
            rules=BusinessRules.from_dict(data.get("rules")),
        )

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)
