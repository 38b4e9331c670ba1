from __future__ import annotations

import logging
import os
import sqlite3
from datetime import tzinfo
from typing import Iterable, Optional, Union

from . import config
from .errors import StorageInitError, StorageReadError, StorageWriteError
from .models import (
    MonthlyOutage,
    OutageRecord,
    OutageStats,
    format_timestamp,
    parse_timestamp,
)

logger = logging.getLogger(__name__)

SCHEMA = """
CREATE TABLE IF NOT EXISTS outages (
    id INTEGER PRIMARY KEY,
    start_time TEXT NOT NULL,
    end_time TEXT NOT NULL,
    duration_seconds INTEGER NOT NULL CHECK (duration_seconds >= 0)
)
"""

COLUMNS = "id, start_time, end_time, duration_seconds"


class OutageLedger:
    """Append-only store of closed outages, kept in a single SQLite table.

    Rows are only ever inserted. Reads parse the stored RFC3339 text back into
    aware datetimes; a row that does not parse fails the whole query.
    """

    def __init__(self, path: Union[str, os.PathLike] = config.DB_PATH):
        self.path = os.fspath(path)
        try:
            self._conn = sqlite3.connect(self.path)
        except sqlite3.Error as exc:
            raise StorageInitError(f"Failed to open database {self.path}", exc) from exc

    def __enter__(self) -> "OutageLedger":
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()

    def close(self):
        self._conn.close()

    def initialize(self):
        """Create the outages table if it is missing. Safe on every startup."""
        try:
            with self._conn:
                self._conn.execute(SCHEMA)
        except sqlite3.Error as exc:
            raise StorageInitError(
                f"Failed to initialise database {self.path}", exc
            ) from exc
        logger.debug("ledger ready at %s", self.path)

    def append(self, record: OutageRecord) -> int:
        """Insert one closed outage and return its row id."""
        try:
            with self._conn:
                cur = self._conn.execute(
                    "INSERT INTO outages (start_time, end_time, duration_seconds) "
                    "VALUES (?, ?, ?)",
                    (
                        format_timestamp(record.start_time),
                        format_timestamp(record.end_time),
                        record.duration_seconds,
                    ),
                )
        except (sqlite3.Error, ValueError) as exc:
            raise StorageWriteError("Failed to record outage", exc) from exc
        logger.debug("stored outage %s (%ss)", cur.lastrowid, record.duration_seconds)
        return cur.lastrowid

    def query_stats(self) -> OutageStats:
        row = self._fetchone(
            "SELECT COUNT(*), COALESCE(SUM(duration_seconds), 0), "
            "COALESCE(AVG(duration_seconds), 0.0), "
            "COALESCE(MAX(duration_seconds), 0), "
            "COALESCE(MIN(duration_seconds), 0) FROM outages"
        )
        return OutageStats(
            total_outages=row[0],
            total_duration=row[1],
            average_duration=float(row[2]),
            longest_outage=row[3],
            shortest_outage=row[4],
        )

    def query_recent(self, limit: int) -> list[OutageRecord]:
        """Newest outages first, at most ``limit`` of them."""
        if limit <= 0:
            return []
        return self._ordered_records(reverse=True)[:limit]

    def query_all_ordered(self) -> list[OutageRecord]:
        return self._ordered_records()

    def _ordered_records(self, reverse: bool = False) -> list[OutageRecord]:
        # Stored offsets can differ (DST, zone changes), so order by instant
        records = [_to_record(r) for r in self._fetchall(f"SELECT {COLUMNS} FROM outages")]
        records.sort(key=lambda rec: (rec.start_time, rec.id), reverse=reverse)
        return records

    def query_monthly(self, tz: Optional[tzinfo] = None) -> list[MonthlyOutage]:
        """Outage count and seconds per calendar month of the start time.

        Months are taken in ``tz`` (local time when None), newest month first.
        SQLite's strftime would bucket by UTC, so the grouping is done here.
        """
        rows = self._fetchall("SELECT id, start_time, duration_seconds FROM outages")
        groups: dict[tuple[int, int], MonthlyOutage] = {}
        for row_id, start_text, duration in rows:
            start = parse_timestamp(start_text, row_id).astimezone(tz)
            key = (start.year, start.month)
            group = groups.get(key)
            if group is None:
                group = groups[key] = MonthlyOutage(start.year, start.month, 0, 0)
            group.num_outages += 1
            group.total_seconds += duration
        return [groups[k] for k in sorted(groups, reverse=True)]

    def _fetchone(self, sql: str, params: Iterable = ()) -> tuple:
        try:
            return self._conn.execute(sql, tuple(params)).fetchone()
        except sqlite3.Error as exc:
            raise StorageReadError("Failed to query outages", exc) from exc

    def _fetchall(self, sql: str, params: Iterable = ()) -> list[tuple]:
        try:
            return self._conn.execute(sql, tuple(params)).fetchall()
        except sqlite3.Error as exc:
            raise StorageReadError("Failed to query outages", exc) from exc


def _to_record(row: tuple) -> OutageRecord:
    row_id, start_text, end_text, duration = row
    return OutageRecord(
        start_time=parse_timestamp(start_text, row_id),
        end_time=parse_timestamp(end_text, row_id),
        duration_seconds=duration,
        id=row_id,
    )
