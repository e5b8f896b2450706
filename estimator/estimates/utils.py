# estimator/estimates/utils.py

"""Glue between stored estimates and the pricing engine.

Routes load an estimate's items, zones, adjustments and snapshot through
these helpers, hand them to the pure functions in ``estimator.pricing`` and
store whatever comes back with :func:`save_state`.
"""

import logging

from flask import current_app

from estimator import db
from estimator.pricing import (
    BusinessSettings,
    EstimateAdjustments,
    EstimateItem,
    EstimateZone,
    PricingSnapshot,
    capture_snapshot,
    compute_business_metrics,
    compute_totals,
)
from estimator.pricing.zones import group_by_zone
from estimator.settings.utils import load_settings

logger = logging.getLogger(__name__)


def ensure_snapshot(est, settings: BusinessSettings | None = None) -> PricingSnapshot:
    """
    Return the estimate's pricing snapshot, capturing it on first use.

    An existing snapshot is never recaptured, so changing company settings
    does not reprice estimates that were already opened.
    """
    if est.pricing_snapshot is None:
        settings = settings or load_settings()
        snap = capture_snapshot(settings, compute_business_metrics(settings))
        est.pricing_snapshot = snap.to_dict()
        db.session.commit()
        logger.info("estimate %s: captured pricing snapshot %s", est.id, est.pricing_snapshot)
    snap = est.snapshot
    if snap.loaded_labor_cost <= 0:
        logger.warning(
            "estimate %s: pricing snapshot has no labor cost; Labor lines will price at $0",
            est.id,
        )
    return snap


def current_adjustments(est, settings: BusinessSettings) -> EstimateAdjustments:
    return est.adjustments_for(settings, current_app.config['DEFAULT_TAX_RATE'])


def save_state(est, items: list[EstimateItem] | None = None,
               zones: list[EstimateZone] | None = None,
               adjustments: EstimateAdjustments | None = None) -> None:
    """Persist the engine's output and refresh the stored grand total."""
    if items is not None:
        est.items = [i.to_dict() for i in items]
    if zones is not None:
        est.zones = [z.to_dict() for z in zones]
    if adjustments is not None:
        est.adjustments = adjustments.to_dict()
    est.total = estimate_totals(est).grand_total
    db.session.commit()


def estimate_totals(est, settings: BusinessSettings | None = None):
    settings = settings or load_settings()
    return compute_totals(
        est.line_items,
        current_adjustments(est, settings),
        settings.rules,
        est.snapshot,
    )


def serialize_estimate(est) -> dict:
    settings = load_settings()
    items = est.line_items
    zones = est.site_zones
    groups = group_by_zone(zones, items)
    return {
        'id'              : est.id,
        'client_name'     : est.client_name,
        'status'          : est.status,
        'items'           : [i.to_dict() for i in items],
        'zones'           : [z.to_dict() for z in zones],
        'unzoned_item_ids': [i.id for i in groups[None]],
        'adjustments'     : current_adjustments(est, settings).to_dict(),
        'pricing_snapshot': est.pricing_snapshot,
        'totals'          : estimate_totals(est, settings).to_dict(),
        'total'           : est.total,
    }
