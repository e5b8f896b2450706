import logging

import click
from flask.cli import with_appcontext

from estimator import db
from estimator.models import Estimate
from estimator.pricing import apply_margin, compute_business_metrics
from estimator.settings.utils import load_settings
from estimator.estimates.utils import ensure_snapshot, save_state


@click.group("pricing")
def pricing_cli() -> None:
    """Pricing engine commands."""


@pricing_cli.command("metrics")
@with_appcontext
def metrics_command() -> None:
    """Print the derived company rates for the stored settings."""
    metrics = compute_business_metrics(load_settings())
    for key, value in metrics.to_dict().items():
        click.echo(f"{key:<26}{value:>14,.2f}")


@pricing_cli.command("apply-margin")
@click.argument("estimate_id", type=int)
@click.argument("margin_percent", type=float)
@with_appcontext
def apply_margin_command(estimate_id: int, margin_percent: float) -> None:
    """Re-price every line of ESTIMATE_ID to MARGIN_PERCENT."""
    est = db.session.get(Estimate, estimate_id)
    if est is None:
        raise click.ClickException(f"Estimate {estimate_id} not found")
    snapshot = ensure_snapshot(est)
    try:
        items = apply_margin(est.line_items, margin_percent, snapshot)
    except ValueError as e:
        raise click.BadParameter(str(e), param_hint="MARGIN_PERCENT")
    save_state(est, items=items)
    logging.info("estimate %s repriced to %.2f%% across %d items", est.id, margin_percent, len(items))
    click.echo(f"Estimate {est.id}: {len(items)} items, grand total {est.total:,.2f}")
