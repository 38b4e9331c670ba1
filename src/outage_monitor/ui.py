from __future__ import annotations

from typing import Sequence

from rich import box
from rich.table import Table

from . import config
from .cost import CostReport
from .models import OutageRecord, OutageStats


def format_duration(seconds: float) -> str:
    if seconds < 60:
        return f"{seconds:.0f}s"
    elif seconds < 3600:
        return f"{seconds / 60:.1f}m"
    elif seconds < 86400:
        return f"{seconds / 3600:.1f}h"
    else:
        return f"{seconds / 86400:.1f}d"


def format_hms(seconds: int) -> str:
    hours, rest = divmod(seconds, 3600)
    minutes, secs = divmod(rest, 60)
    return f"{hours:02}:{minutes:02}:{secs:02}"


def build_stats_table(stats: OutageStats) -> Table:
    table = Table(
        title="Internet Outage Statistics",
        box=box.MINIMAL_DOUBLE_HEAD,
        show_header=False,
    )
    table.add_column("Metric", style="bold")
    table.add_column("Value", justify="right")
    table.add_row("Total number of outages", str(stats.total_outages))
    table.add_row(
        "Total outage duration",
        f"{stats.total_duration} seconds ({format_duration(stats.total_duration)})",
    )
    table.add_row("Average outage duration", f"{stats.average_duration:.2f} seconds")
    table.add_row("Longest outage", f"{stats.longest_outage} seconds")
    table.add_row("Shortest outage", f"{stats.shortest_outage} seconds")
    return table


def build_recent_table(records: Sequence[OutageRecord]) -> Table:
    table = Table(title="Recent Outages", box=box.MINIMAL_DOUBLE_HEAD)
    table.add_column("Start Time")
    table.add_column("End Time")
    table.add_column("Duration (seconds)", justify="right")
    for rec in records:
        table.add_row(
            rec.start_time.astimezone().strftime(config.LOG_TIME_FORMAT),
            rec.end_time.astimezone().strftime(config.LOG_TIME_FORMAT),
            str(rec.duration_seconds),
        )
    return table


def build_cost_table(report: CostReport) -> Table:
    cur = report.currency
    table = Table(title="Monthly Cost Analysis", box=box.MINIMAL_DOUBLE_HEAD)
    table.add_column("Year")
    table.add_column("Month")
    table.add_column("Outages", justify="right")
    table.add_column("Total Time", justify="right")
    table.add_column("% Downtime", justify="right")
    table.add_column("Cost Impact", justify="right")
    table.add_column("Rate/Hour", justify="right")
    for m in report.months:
        table.add_row(
            str(m.year),
            m.month_name,
            str(m.num_outages),
            format_hms(m.total_seconds),
            f"{m.downtime_percentage:.3f}%",
            f"{cur}{m.cost:.3f}",
            f"{cur}{m.hourly_rate:.3f}/h",
        )
    return table


def build_cost_summary_table(report: CostReport) -> Table:
    summary = report.summary
    cur = report.currency
    table = Table(title="Summary", box=box.MINIMAL_DOUBLE_HEAD)
    table.add_column("Metric", style="bold")
    table.add_column("Value", justify="right")
    table.add_row("Total cost of outages", f"{cur}{summary.total_cost:.3f}")
    table.add_row("Average monthly cost", f"{cur}{summary.avg_cost_per_month:.3f}")
    table.add_row(
        "Total downtime",
        f"{summary.total_hours:.1f} hours "
        f"({summary.avg_monthly_downtime_hours:.1f} hours/month avg)",
    )
    table.add_row("Cost per hour of downtime", f"{cur}{summary.cost_per_hour:.3f}/h")
    return table
