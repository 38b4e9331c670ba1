from __future__ import annotations

import calendar
from dataclasses import dataclass, field
from typing import Optional, Sequence

from .aggregator import Aggregator
from .models import MonthlyOutage

SECONDS_PER_DAY = 86400


def is_leap_year(year: int) -> bool:
    return year % 4 == 0 and (year % 100 != 0 or year % 400 == 0)


def days_in_month(year: int, month: int) -> int:
    if not 1 <= month <= 12:
        raise ValueError(f"month must be in 1..12, got {month}")
    if month in (4, 6, 9, 11):
        return 30
    if month == 2:
        return 29 if is_leap_year(year) else 28
    return 31


@dataclass
class MonthlyCost:
    year: int
    month: int
    num_outages: int
    total_seconds: int
    days_in_month: int
    downtime_percentage: float
    cost: float
    hourly_rate: float

    @property
    def month_name(self) -> str:
        return calendar.month_name[self.month]


@dataclass
class CostSummary:
    total_cost: float
    total_seconds: int
    month_count: int
    avg_cost_per_month: float
    avg_monthly_downtime_hours: float
    cost_per_hour: float

    @property
    def total_hours(self) -> float:
        return self.total_seconds / 3600


@dataclass
class CostReport:
    currency: str
    monthly_rate: float
    months: list[MonthlyCost] = field(default_factory=list)
    summary: Optional[CostSummary] = None  # None when nothing is recorded

    @property
    def has_outages(self) -> bool:
        return bool(self.months)


def month_cost(group: MonthlyOutage, monthly_rate: float) -> MonthlyCost:
    days = days_in_month(group.year, group.month)
    seconds_in_month = days * SECONDS_PER_DAY
    share = group.total_seconds / seconds_in_month
    return MonthlyCost(
        year=group.year,
        month=group.month,
        num_outages=group.num_outages,
        total_seconds=group.total_seconds,
        days_in_month=days,
        downtime_percentage=share * 100,
        cost=share * monthly_rate,
        hourly_rate=monthly_rate / (days * 24),
    )


def compute_cost_report(
    monthly: Sequence[MonthlyOutage], monthly_rate: float, currency: str
) -> CostReport:
    """Downtime share, prorated cost and hourly rate per month, plus rollups."""
    report = CostReport(currency=currency, monthly_rate=monthly_rate)
    report.months = [month_cost(g, monthly_rate) for g in monthly]
    if not report.months:
        return report

    count = len(report.months)
    total_cost = sum(m.cost for m in report.months)
    total_seconds = sum(m.total_seconds for m in report.months)
    report.summary = CostSummary(
        total_cost=total_cost,
        total_seconds=total_seconds,
        month_count=count,
        avg_cost_per_month=total_cost / count,
        avg_monthly_downtime_hours=total_seconds / count / 3600,
        cost_per_hour=total_cost / (total_seconds / 3600) if total_seconds else 0.0,
    )
    return report


class CostReporter:
    def __init__(self, aggregator: Aggregator):
        self.aggregator = aggregator

    def report(self, monthly_rate: float, currency: str) -> CostReport:
        return compute_cost_report(self.aggregator.monthly(), monthly_rate, currency)
