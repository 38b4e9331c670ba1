from __future__ import annotations

import asyncio
import contextlib
import logging
import time
from datetime import datetime
from typing import Awaitable, Callable, Optional

from . import config
from .ledger import OutageLedger
from .models import ConnectivityState, Endpoint, OutageRecord, now_local
from .probe import check

logger = logging.getLogger(__name__)

Probe = Callable[[Endpoint, float], Awaitable[bool]]


class OutageMonitor:
    """Connected/Disconnected state machine fed by one probe per tick.

    A loss opens an outage in memory only; the matching restoration writes
    exactly one record to the ledger. The open timestamp is cleared only once
    that write has committed, so a failed write leaves the monitor
    disconnected and the next successful probe tries again.
    """

    def __init__(
        self,
        ledger: OutageLedger,
        endpoint: Endpoint,
        interval: float = config.PROBE_INTERVAL_SECONDS,
        timeout: float = config.PROBE_TIMEOUT_SECONDS,
        probe: Probe = check,
        clock: Callable[[], datetime] = now_local,
    ):
        self.ledger = ledger
        self.endpoint = endpoint
        self.interval = interval
        self.timeout = timeout
        self.state = ConnectivityState()
        self._probe = probe
        self._clock = clock

    def observe(self, reachable: bool) -> Optional[OutageRecord]:
        """Apply one probe result. Returns the record written, if any."""
        if self.state.is_connected:
            if not reachable:
                now = self._clock()
                self.state.mark_lost(now)
                logger.warning(
                    "%s Internet connection lost at %s",
                    config.EMOJI_DOWN,
                    now.strftime(config.LOG_TIME_FORMAT),
                )
            return None

        if not reachable:
            return None

        start = self.state.outage_start
        end = self._clock()
        if end < start:
            logger.warning(
                "Clock moved backwards during outage (start %s, end %s); "
                "recording zero duration",
                start.isoformat(),
                end.isoformat(),
            )
            end = start
        record = OutageRecord.closing(start, end)
        # raises StorageWriteError; outage stays open
        row_id = self.ledger.append(record)
        self.state.mark_restored()
        logger.info(
            "%s Internet connection restored at %s. Outage duration: %d seconds",
            config.EMOJI_UP,
            end.strftime(config.LOG_TIME_FORMAT),
            record.duration_seconds,
        )
        return OutageRecord(record.start_time, record.end_time, record.duration_seconds, row_id)

    async def tick(self) -> Optional[OutageRecord]:
        reachable = await self._probe(self.endpoint, self.timeout)
        return self.observe(reachable)

    async def run(self, stop_event: asyncio.Event):
        """Probe every ``interval`` seconds until ``stop_event`` is set.

        Storage errors end the loop and propagate to the caller.
        """
        while not stop_event.is_set():
            start = time.monotonic()
            await self.tick()
            remaining = max(0.0, self.interval - (time.monotonic() - start))
            with contextlib.suppress(asyncio.TimeoutError):
                await asyncio.wait_for(stop_event.wait(), timeout=remaining)
