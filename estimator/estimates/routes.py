# estimator/estimates/routes.py

import logging
from dataclasses import replace

from flask import Blueprint, current_app, request, jsonify

from estimator import db
from estimator.models import Estimate
from estimator.pricing import (
    EstimateAdjustments,
    EstimateItem,
    EstimateZone,
    add_item,
    add_zone,
    apply_margin,
    remove_item,
    remove_zone,
    update_item,
    update_zone,
)
from estimator.pricing.items import find_item
from estimator.pricing.numbers import as_float
from estimator.settings.utils import load_settings
from estimator.estimates.utils import (
    current_adjustments,
    ensure_snapshot,
    estimate_totals,
    save_state,
    serialize_estimate,
)

bp = Blueprint('estimates', __name__)
logger = logging.getLogger(__name__)


def _json_body():
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else None


@bp.route('/')
def list_estimates():
    ests = Estimate.query.order_by(Estimate.id.desc()).all()
    return jsonify(estimates=[{
        'id'         : e.id,
        'client_name': e.client_name,
        'status'     : e.status,
        'total'      : e.total,
    } for e in ests])


@bp.route('/create', methods=['POST'])
def create_estimate():
    """Create a draft and capture its pricing snapshot straight away."""
    data = _json_body() or {}
    est = Estimate(client_name=data.get('client_name', ''), status='draft')
    db.session.add(est)
    db.session.commit()
    ensure_snapshot(est)
    return jsonify(estimate_id=est.id, success=True), 201


@bp.route('/<int:estimate_id>')
def view_estimate(estimate_id):
    est = db.get_or_404(Estimate, estimate_id)
    return jsonify(estimate=serialize_estimate(est))


@bp.route('/<int:estimate_id>/edit', methods=['GET', 'POST'])
def edit_estimate(estimate_id):
    est = db.get_or_404(Estimate, estimate_id)
    if request.method == 'POST':
        data = _json_body() or request.form
        est.client_name = data.get('client_name', est.client_name)
        est.status      = data.get('status', est.status)
        db.session.commit()
        return jsonify(success=True)

    # Opening for edit freezes the company rates onto the estimate
    ensure_snapshot(est)
    return jsonify(estimate=serialize_estimate(est))


@bp.route('/<int:estimate_id>/totals')
def estimate_totals_endpoint(estimate_id):
    est = db.get_or_404(Estimate, estimate_id)
    return jsonify(totals=estimate_totals(est).to_dict())


@bp.route('/<int:estimate_id>/add-item', methods=['POST'])
def add_estimate_item(estimate_id):
    data = _json_body()
    if data is None:
        return jsonify(error='Expected a JSON object'), 400
    est = db.get_or_404(Estimate, estimate_id)
    ensure_snapshot(est)
    try:
        item = EstimateItem.from_dict(data)
    except (TypeError, ValueError) as e:
        return jsonify(error=f'Invalid item: {e}'), 400
    items = est.line_items
    if find_item(items, item.id) is not None:
        return jsonify(error=f'Item id {item.id} already exists'), 409
    # total is derived, whatever the client sent
    item = replace(item, total=item.quantity * item.rate)
    save_state(est, items=add_item(items, item))
    return jsonify(item=item.to_dict(), total=est.total, success=True)


@bp.route('/<int:estimate_id>/update-item/<item_id>', methods=['POST'])
def update_estimate_item(estimate_id, item_id):
    data = _json_body()
    if data is None:
        return jsonify(error='Expected a JSON object'), 400
    est = db.get_or_404(Estimate, estimate_id)
    items = est.line_items
    if find_item(items, item_id) is None:
        return jsonify(error='Item not found'), 404
    snapshot = ensure_snapshot(est)
    try:
        items = update_item(items, item_id, data, snapshot)
    except (TypeError, ValueError) as e:
        return jsonify(error=f'Invalid update: {e}'), 400
    save_state(est, items=items)
    return jsonify(item=find_item(items, item_id).to_dict(), total=est.total, success=True)


@bp.route('/<int:estimate_id>/remove-item/<item_id>', methods=['POST'])
def remove_estimate_item(estimate_id, item_id):
    est = db.get_or_404(Estimate, estimate_id)
    items = est.line_items
    if find_item(items, item_id) is None:
        return jsonify(error='Item not found'), 404
    save_state(est, items=remove_item(items, item_id))
    return jsonify(total=est.total, success=True)


@bp.route('/<int:estimate_id>/apply-margin', methods=['POST'])
def apply_estimate_margin(estimate_id):
    """Re-price every line to one target margin: { margin_percent }."""
    data = _json_body() or {}
    if data.get('margin_percent') is None:
        return jsonify(error='margin_percent is required'), 400
    try:
        target = as_float(data['margin_percent'])
    except (TypeError, ValueError) as e:
        return jsonify(error=f'Invalid margin_percent: {e}'), 400
    est = db.get_or_404(Estimate, estimate_id)
    snapshot = ensure_snapshot(est)
    items = apply_margin(est.line_items, target, snapshot)
    save_state(est, items=items)
    logger.info("estimate %s: applied %.2f%% margin to %d items", est.id, target, len(items))
    return jsonify(items=[i.to_dict() for i in items], total=est.total, success=True)


@bp.route('/<int:estimate_id>/adjustments', methods=['POST'])
def update_adjustments(estimate_id):
    data = _json_body()
    if data is None:
        return jsonify(error='Expected a JSON object'), 400
    est = db.get_or_404(Estimate, estimate_id)
    settings = load_settings()
    merged = {**current_adjustments(est, settings).to_dict(), **data}
    try:
        adjustments = EstimateAdjustments.from_dict(
            merged,
            tax_labor_default=settings.pricing.tax_labor_default,
            default_tax_rate=current_app.config['DEFAULT_TAX_RATE'],
        )
    except (TypeError, ValueError) as e:
        return jsonify(error=f'Invalid adjustments: {e}'), 400
    save_state(est, adjustments=adjustments)
    return jsonify(adjustments=adjustments.to_dict(), total=est.total, success=True)


@bp.route('/<int:estimate_id>/zones', methods=['POST'])
def add_estimate_zone(estimate_id):
    data = _json_body()
    name = (data or {}).get('name')
    if not isinstance(name, str) or not name.strip():
        return jsonify(error='Zone name required'), 400
    est = db.get_or_404(Estimate, estimate_id)
    zones = est.site_zones
    zone = EstimateZone.from_dict({**data, 'name': name.strip()})
    if any(z.id == zone.id for z in zones):
        return jsonify(error=f'Zone id {zone.id} already exists'), 409
    save_state(est, zones=add_zone(zones, zone))
    return jsonify(zone=zone.to_dict(), success=True)


@bp.route('/<int:estimate_id>/zones/<zone_id>/update', methods=['POST'])
def update_estimate_zone(estimate_id, zone_id):
    data = _json_body()
    if data is None:
        return jsonify(error='Expected a JSON object'), 400
    est = db.get_or_404(Estimate, estimate_id)
    zones = est.site_zones
    if not any(z.id == zone_id for z in zones):
        return jsonify(error='Zone not found'), 404
    save_state(est, zones=update_zone(zones, zone_id, data))
    return jsonify(success=True)


@bp.route('/<int:estimate_id>/zones/<zone_id>/remove', methods=['POST'])
def remove_estimate_zone(estimate_id, zone_id):
    """Delete a zone; its items are kept and become unzoned."""
    est = db.get_or_404(Estimate, estimate_id)
    zones, items = remove_zone(est.site_zones, est.line_items, zone_id)
    save_state(est, items=items, zones=zones)
    return jsonify(success=True)


@bp.route('/<int:estimate_id>/delete', methods=['POST'])
def delete_estimate(estimate_id):
    est = db.get_or_404(Estimate, estimate_id)
    db.session.delete(est)
    db.session.commit()
    return jsonify(success=True)
