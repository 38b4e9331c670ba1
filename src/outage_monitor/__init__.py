"""Internet outage monitor with a durable outage ledger and cost reports."""

__version__ = "0.1.0"
