from __future__ import annotations

import csv
from datetime import tzinfo
from typing import Optional, TextIO

from . import config
from .ledger import OutageLedger
from .models import MonthlyOutage, OutageRecord, OutageStats, format_timestamp


class Aggregator:
    """Read-only views over the outage ledger."""

    def __init__(self, ledger: OutageLedger):
        self.ledger = ledger

    def stats(self) -> OutageStats:
        return self.ledger.query_stats()

    def recent(self, limit: int = config.DEFAULT_RECENT_LIMIT) -> list[OutageRecord]:
        return self.ledger.query_recent(limit)

    def monthly(self, tz: Optional[tzinfo] = None) -> list[MonthlyOutage]:
        return self.ledger.query_monthly(tz)

    def export_csv(self, out: TextIO) -> int:
        """Write every outage, oldest first, as CSV. Returns the row count.

        Timestamps keep the offset they were stored with.
        """
        records = self.ledger.query_all_ordered()
        writer = csv.writer(out, lineterminator="\n")
        writer.writerow(config.CSV_HEADER)
        for rec in records:
            writer.writerow(
                [
                    format_timestamp(rec.start_time),
                    format_timestamp(rec.end_time),
                    rec.duration_seconds,
                ]
            )
        return len(records)
