"""Estimate pricing engine.

Pure functions over explicit collections: nothing in this package touches
Flask, the database or global settings. Callers pass the settings and the
estimate's pricing snapshot in and persist whatever comes back.
"""

from estimator.pricing.settings import BusinessSettings, BusinessRules  # noqa: F401
from estimator.pricing.metrics import BusinessMetrics, compute_business_metrics  # noqa: F401
from estimator.pricing.snapshot import PricingSnapshot, capture_snapshot  # noqa: F401
from estimator.pricing.items import (  # noqa: F401
    EstimateItem,
    add_item,
    new_item,
    remove_item,
    update_item,
)
from estimator.pricing.margin import apply_margin  # noqa: F401
from estimator.pricing.zones import EstimateZone, add_zone, update_zone, remove_zone  # noqa: F401
from estimator.pricing.totals import EstimateAdjustments, EstimateTotals, compute_totals  # noqa: F401
