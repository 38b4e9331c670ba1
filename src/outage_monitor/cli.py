from __future__ import annotations

import io
import logging
import math
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.markup import escape

from . import config
from .aggregator import Aggregator
from .cost import CostReporter
from .errors import ConfigError, OutageMonitorError
from .ledger import OutageLedger
from .logs import setup_logging
from .main import run_monitor
from .ui import (
    build_cost_summary_table,
    build_cost_table,
    build_recent_table,
    build_stats_table,
)

logger = logging.getLogger(__name__)

console = Console()
err_console = Console(stderr=True)
cli_app = typer.Typer(
    name="outage-monitor",
    help="Watch internet connectivity and report on recorded outages.",
    no_args_is_help=True,
)


def _open_ledger(ctx: typer.Context) -> OutageLedger:
    ledger = OutageLedger(ctx.obj["db"])
    try:
        ledger.initialize()
    except OutageMonitorError:
        ledger.close()
        raise
    return ledger


def _fail(exc: OutageMonitorError):
    err_console.print(f"[bold red]Error:[/bold red] {escape(str(exc))}")
    raise typer.Exit(code=1)


def parse_limit(raw: str) -> int:
    """Recent-list limit, falling back to the default when unparseable."""
    try:
        return int(raw)
    except (TypeError, ValueError):
        logger.warning(
            "Invalid limit %r, using default of %d", raw, config.DEFAULT_RECENT_LIMIT
        )
        return config.DEFAULT_RECENT_LIMIT


def validate_rate(rate: float) -> float:
    if not math.isfinite(rate) or rate < 0:
        raise ConfigError(f"Monthly rate must be a non-negative number, got {rate}")
    return rate


@cli_app.callback()
def root(
    ctx: typer.Context,
    db: str = typer.Option(config.DB_PATH, "--db", help="Path to the outage database"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
):
    ctx.obj = {"db": db, "verbose": verbose}
    setup_logging(verbose)


@cli_app.command("monitor")
def monitor(
    ctx: typer.Context,
    ip: str = typer.Option(config.TARGET_HOST, "--ip", "-i", help="Address to check"),
    port: int = typer.Option(
        config.TARGET_PORT, "--port", "-p", min=1, max=65535, help="Port to check"
    ),
    interval: float = typer.Option(
        config.PROBE_INTERVAL_SECONDS, "--interval", "-I", help="Interval in seconds"
    ),
    timeout: float = typer.Option(
        config.PROBE_TIMEOUT_SECONDS, "--timeout", "-t", help="Probe timeout in seconds"
    ),
    log_file: str = typer.Option(
        config.LOG_FILE, "--log-file", help="Event log file ('' to disable)"
    ),
):
    """Watch for internet outages."""
    try:
        if interval <= 0:
            raise ConfigError(f"Interval must be positive, got {interval}")
        if timeout <= 0:
            raise ConfigError(f"Timeout must be positive, got {timeout}")
        setup_logging(ctx.obj["verbose"], log_file or None)
        with _open_ledger(ctx) as ledger:
            run_monitor(ledger, ip, port, interval, timeout, console=console)
    except OutageMonitorError as exc:
        _fail(exc)


cli_app.command("watch", hidden=True)(monitor)


@cli_app.command("stats")
def stats(ctx: typer.Context):
    """Print statistics about internet outages."""
    try:
        with _open_ledger(ctx) as ledger:
            result = Aggregator(ledger).stats()
    except OutageMonitorError as exc:
        _fail(exc)
    console.print(build_stats_table(result))


@cli_app.command("recent")
def recent(
    ctx: typer.Context,
    limit: str = typer.Option(
        str(config.DEFAULT_RECENT_LIMIT), "--limit", "-l", help="Amount of outages to display"
    ),
):
    """View recent internet outages."""
    try:
        with _open_ledger(ctx) as ledger:
            records = Aggregator(ledger).recent(parse_limit(limit))
    except OutageMonitorError as exc:
        _fail(exc)
    if not records:
        console.print("[dim]No outages recorded yet.[/dim]")
        return
    console.print(build_recent_table(records))


@cli_app.command("export")
def export(
    ctx: typer.Context,
    output: Optional[Path] = typer.Argument(
        None, help="Output file path (if not provided, data will be printed to stdout)"
    ),
):
    """Export internet outages to a CSV file or stdout."""
    buf = io.StringIO()
    try:
        with _open_ledger(ctx) as ledger:
            Aggregator(ledger).export_csv(buf)
    except OutageMonitorError as exc:
        _fail(exc)

    if output is None:
        typer.echo(buf.getvalue(), nl=False)
        return
    try:
        output.write_text(buf.getvalue(), encoding="utf-8")
    except OSError as exc:
        err_console.print(f"[bold red]Error:[/bold red] cannot write {output}: {escape(str(exc))}")
        raise typer.Exit(code=1)
    console.print(f"Data exported to {output}")


@cli_app.command("cost")
def cost(
    ctx: typer.Context,
    rate: float = typer.Argument(..., help="Monthly rate for cost analysis"),
    currency: str = typer.Option(config.DEFAULT_CURRENCY, "--currency", "-c", help="Currency symbol"),
):
    """Calculate cost impact of internet outages."""
    try:
        validate_rate(rate)
        with _open_ledger(ctx) as ledger:
            report = CostReporter(Aggregator(ledger)).report(rate, currency)
    except OutageMonitorError as exc:
        _fail(exc)

    if not report.has_outages:
        console.print("\nNo outages recorded yet.\n")
        return
    console.print(build_cost_table(report))
    console.print(build_cost_summary_table(report))


def main():
    cli_app()


if __name__ == "__main__":  # pragma: no cover
    main()
