from __future__ import annotations

import asyncio
import logging
import signal
from typing import Optional

from rich.console import Console

from . import config
from .ledger import OutageLedger
from .models import Endpoint
from .monitor import OutageMonitor

logger = logging.getLogger(__name__)


async def main_async(
    monitor: OutageMonitor,
    console: Console,
    stop_event: Optional[asyncio.Event] = None,
):
    """Run the monitor until SIGINT/SIGTERM (or ``stop_event``) stops it."""
    stop_event = stop_event or asyncio.Event()
    loop = asyncio.get_running_loop()

    def _signal_handler():
        stop_event.set()

    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, _signal_handler)
        except NotImplementedError:  # Windows
            signal.signal(sig, lambda s, f: loop.call_soon_threadsafe(_signal_handler))

    console.print("Starting internet connectivity monitoring...")
    console.print(
        f"Checking {monitor.endpoint} every {monitor.interval:g} seconds"
    )
    console.print("Press Ctrl+C to stop monitoring.")

    await monitor.run(stop_event)

    # An outage still open at shutdown has no end time and is not recorded
    if not monitor.state.is_connected:
        logger.warning(
            "Stopped during an outage that began at %s; it was not recorded",
            monitor.state.outage_start.strftime(config.LOG_TIME_FORMAT),
        )
    console.print("Monitoring stopped.")


def run_monitor(
    ledger: OutageLedger,
    host: str = config.TARGET_HOST,
    port: int = config.TARGET_PORT,
    interval: float = config.PROBE_INTERVAL_SECONDS,
    timeout: float = config.PROBE_TIMEOUT_SECONDS,
    console: Optional[Console] = None,
):
    monitor = OutageMonitor(
        ledger, Endpoint(host, port), interval=interval, timeout=timeout
    )
    try:
        asyncio.run(main_async(monitor, console or Console()))
    except KeyboardInterrupt:
        pass
