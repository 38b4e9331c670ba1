from __future__ import annotations

import ipaddress
import math
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from .errors import MalformedRecordError


def now_local() -> datetime:
    """Current local time with its UTC offset, truncated to whole seconds."""
    return datetime.now().astimezone().replace(microsecond=0)


def format_timestamp(ts: datetime) -> str:
    """RFC3339 text for a timezone-aware instant."""
    if ts.tzinfo is None or ts.utcoffset() is None:
        raise ValueError(f"timestamp {ts!r} has no timezone offset")
    return ts.isoformat()


def parse_timestamp(text: str, row_id: Optional[int] = None) -> datetime:
    """Parse stored RFC3339 text back into an aware datetime.

    Naive or unparseable values raise MalformedRecordError rather than being
    guessed at, since a wrong instant would skew every aggregate.
    """
    try:
        ts = datetime.fromisoformat(text)
    except (TypeError, ValueError) as exc:
        raise MalformedRecordError(
            f"row {row_id}: invalid timestamp {text!r}", row_id, text, exc
        ) from exc
    if ts.tzinfo is None or ts.utcoffset() is None:
        raise MalformedRecordError(
            f"row {row_id}: timestamp {text!r} has no timezone offset",
            row_id,
            text,
        )
    return ts


@dataclass(frozen=True)
class Endpoint:
    host: str
    port: int

    def __str__(self) -> str:
        try:
            if ipaddress.ip_address(self.host).version == 6:
                return f"[{self.host}]:{self.port}"
        except ValueError:
            pass
        return f"{self.host}:{self.port}"


@dataclass(frozen=True)
class OutageRecord:
    start_time: datetime
    end_time: datetime
    duration_seconds: int
    id: Optional[int] = None

    @classmethod
    def closing(cls, start_time: datetime, end_time: datetime) -> "OutageRecord":
        """Build the record for an interval, flooring the duration to seconds."""
        duration = math.floor((end_time - start_time).total_seconds())
        return cls(start_time, end_time, duration)


@dataclass
class ConnectivityState:
    """Process-lifetime connectivity state; connected iff no outage is open."""

    outage_start: Optional[datetime] = None

    @property
    def is_connected(self) -> bool:
        return self.outage_start is None

    def mark_lost(self, at: datetime):
        self.outage_start = at

    def mark_restored(self):
        self.outage_start = None


@dataclass
class OutageStats:
    total_outages: int = 0
    total_duration: int = 0
    average_duration: float = 0.0
    longest_outage: int = 0
    shortest_outage: int = 0


@dataclass
class MonthlyOutage:
    year: int
    month: int
    num_outages: int
    total_seconds: int
