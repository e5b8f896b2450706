from estimator import db
from estimator.pricing import (
    BusinessSettings,
    EstimateAdjustments,
    EstimateItem,
    EstimateZone,
    PricingSnapshot,
)


class CompanySettings(db.Model):
    """Single-row store for the company settings document."""
    __tablename__ = 'company_settings'
    id         = db.Column(db.Integer, primary_key=True)
    data       = db.Column(db.JSON, nullable=False, default=dict)
    updated_at = db.Column(db.DateTime, default=db.func.now(), onupdate=db.func.now())

    @property
    def settings(self) -> BusinessSettings:
        return BusinessSettings.from_dict(self.data)


class Estimate(db.Model):
    __tablename__ = 'estimate'
    id               = db.Column(db.Integer, primary_key=True)
    client_name      = db.Column(db.String(200), nullable=False, default='')
    status           = db.Column(db.String(32), nullable=False, default='draft')
    items            = db.Column(db.JSON, nullable=False, default=list)
    zones            = db.Column(db.JSON, nullable=False, default=list)
    adjustments      = db.Column(db.JSON, nullable=True)
    # Captured once on first edit, then never rewritten
    pricing_snapshot = db.Column(db.JSON, nullable=True)
    total            = db.Column(db.Float, default=0.0)
    created_at       = db.Column(db.DateTime, default=db.func.now())
    updated_at       = db.Column(db.DateTime, default=db.func.now(), onupdate=db.func.now())

    @property
    def line_items(self) -> list[EstimateItem]:
        return [EstimateItem.from_dict(i) for i in self.items or []]

    @property
    def site_zones(self) -> list[EstimateZone]:
        return [EstimateZone.from_dict(z) for z in self.zones or []]

    @property
    def snapshot(self) -> PricingSnapshot:
        return PricingSnapshot.from_dict(self.pricing_snapshot)

    def adjustments_for(self, settings: BusinessSettings,
                        default_tax_rate: float) -> EstimateAdjustments:
        return EstimateAdjustments.from_dict(
            self.adjustments,
            tax_labor_default=settings.pricing.tax_labor_default,
            default_tax_rate=default_tax_rate,
        )
