# estimator/settings/routes.py

from flask import Blueprint, request, jsonify

from estimator.pricing import compute_business_metrics
from estimator.pricing.financials import analyze_job_costs
from estimator.settings.utils import load_settings, save_settings

bp = Blueprint('settings', __name__)


@bp.route('/', methods=['GET'])
def get_settings():
    return jsonify(settings=load_settings().to_dict())


@bp.route('/', methods=['POST'])
def update_settings():
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        return jsonify(error='Expected a JSON object'), 400
    try:
        settings = save_settings(data)
    except (TypeError, ValueError) as e:
        return jsonify(error=f'Invalid settings: {e}'), 400
    return jsonify(
        success=True,
        settings=settings.to_dict(),
        metrics=compute_business_metrics(settings).to_dict(),
    )


@bp.route('/metrics')
def get_metrics():
    """Derived company rates for the stored settings."""
    return jsonify(metrics=compute_business_metrics(load_settings()).to_dict())


@bp.route('/job-costing', methods=['POST'])
def job_costing():
    """
    Actual-vs-revenue report for a job.
    Body: { revenue, actual_labor_hours, expenses: [{amount}], invoices: [{amount,status}] }
    """
    data = request.get_json(silent=True) or {}
    settings = load_settings()
    try:
        report = analyze_job_costs(
            revenue=data.get('revenue', 0),
            actual_labor_hours=data.get('actual_labor_hours', 0),
            expenses=data.get('expenses') or [],
            invoices=data.get('invoices') or [],
            metrics=compute_business_metrics(settings),
            target_margin_percent=settings.pricing.target_margin_percent,
        )
    except (AttributeError, TypeError, ValueError) as e:
        return jsonify(error=f'Invalid job data: {e}'), 400
    return jsonify(report=report.to_dict())
