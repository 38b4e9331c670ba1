from datetime import datetime, timedelta, timezone

import pytest

from outage_monitor.ledger import OutageLedger
from outage_monitor.models import OutageRecord

UTC = timezone.utc


def outage(start: datetime, seconds: int) -> OutageRecord:
    return OutageRecord.closing(start, start + timedelta(seconds=seconds))


@pytest.fixture
def ledger(tmp_path):
    led = OutageLedger(tmp_path / "outages.db")
    led.initialize()
    yield led
    led.close()
