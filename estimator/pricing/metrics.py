# estimator/pricing/metrics.py
"""Derived company rates: capacity, loaded labor cost and hourly targets."""

from __future__ import annotations

from dataclasses import dataclass, asdict

from estimator.pricing.numbers import safe_div
from estimator.pricing.settings import BusinessSettings


@dataclass(frozen=True)
class BusinessMetrics:
    production_days: float = 0.0
    season_hours: float = 0.0
    total_billable_hours: float = 0.0
    total_annual_cost: float = 0.0
    total_overhead: float = 0.0
    overhead_per_man_hour: float = 0.0
    break_even_rate: float = 0.0
    target_hourly_rate: float = 0.0
    avg_hourly_wage: float = 0.0
    avg_labor_burden_percent: float = 0.0

    def to_dict(self) -> dict:
        return asdict(self)


def compute_business_metrics(settings: BusinessSettings) -> BusinessMetrics:
    """
    Derive hourly cost rates from the season, roster and overhead list.

    Every employee is assumed to work the full season. Salaried staff count
    toward payroll, burden and billable hours but not toward the average
    hourly wage, which only reflects hourly employees.
    """
    season = settings.season

    # Capacity
    production_days = season.weeks_per_year * season.days_per_week
    season_hours = production_days * season.hours_per_day

    # Labor
    total_billable_hours = 0.0
    total_gross_payroll = 0.0
    total_burden_cost = 0.0
    total_wage_sum = 0.0
    hourly_count = 0

    for emp in settings.employees:
        annual_hours = season_hours
        gross_pay = emp.wage * annual_hours if emp.is_hourly else emp.wage
        total_gross_payroll += gross_pay
        total_burden_cost += gross_pay * (emp.labor_burden_percent / 100)
        total_billable_hours += annual_hours * (emp.utilization_percent / 100)
        if emp.is_hourly:
            total_wage_sum += emp.wage
            hourly_count += 1

    avg_hourly_wage = safe_div(total_wage_sum, hourly_count)
    avg_labor_burden_percent = safe_div(total_burden_cost, total_gross_payroll) * 100

    # Overhead
    total_overhead = sum(item.annual_amount for item in settings.overhead)
    overhead_per_man_hour = safe_div(total_overhead, total_billable_hours)

    # Rates
    total_annual_cost = total_gross_payroll + total_burden_cost + total_overhead
    break_even_rate = safe_div(total_annual_cost, total_billable_hours)
    target_margin = settings.pricing.target_margin_percent / 100
    target_hourly_rate = (
        safe_div(break_even_rate, 1 - target_margin) if break_even_rate > 0 else 0.0
    )

    return BusinessMetrics(
        production_days=production_days,
        season_hours=season_hours,
        total_billable_hours=total_billable_hours,
        total_annual_cost=total_annual_cost,
        total_overhead=total_overhead,
        overhead_per_man_hour=overhead_per_man_hour,
        break_even_rate=break_even_rate,
        target_hourly_rate=target_hourly_rate,
        avg_hourly_wage=avg_hourly_wage,
        avg_labor_burden_percent=avg_labor_burden_percent,
    )
