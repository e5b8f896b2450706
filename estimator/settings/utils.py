# estimator/settings/utils.py

"""Loading and saving the company settings document."""

import logging

from estimator import db
from estimator.models import CompanySettings
from estimator.pricing import BusinessSettings, compute_business_metrics

logger = logging.getLogger(__name__)


def _settings_row() -> CompanySettings | None:
    return CompanySettings.query.order_by(CompanySettings.id).first()


def load_settings() -> BusinessSettings:
    """Current company settings; defaults when nothing has been saved yet."""
    row = _settings_row()
    return row.settings if row else BusinessSettings()


def save_settings(data: dict) -> BusinessSettings:
    """
    Normalize and store a settings document.

    The stored document is the normalized form, so legacy layouts are
    migrated on first save. Raises ``ValueError`` for non-numeric amounts.
    """
    settings = BusinessSettings.from_dict(data)
    row = _settings_row()
    if row is None:
        row = CompanySettings()
        db.session.add(row)
    row.data = settings.to_dict()
    db.session.commit()
    metrics = compute_business_metrics(settings)
    logger.info(
        "settings saved: break_even=%.2f target_rate=%.2f overhead/hr=%.2f",
        metrics.break_even_rate, metrics.target_hourly_rate, metrics.overhead_per_man_hour,
    )
    return settings
