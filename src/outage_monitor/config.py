from __future__ import annotations

import os

# Probe target (Google DNS over TCP)
TARGET_HOST = "8.8.8.8"
TARGET_PORT = 53

# Probe settings
PROBE_INTERVAL_SECONDS = 5.0  # how often the target is probed
PROBE_TIMEOUT_SECONDS = 1.0  # fail if the handshake takes longer than this

# Storage
DB_PATH = os.environ.get("OUTAGE_MONITOR_DB", "internet_outages.db")

# Logging
LOG_FILE = os.environ.get("OUTAGE_MONITOR_LOG", "outage_monitor.log")
LOG_MAX_AGE_DAYS = 90
LOG_TIME_FORMAT = "%Y-%m-%d %H:%M:%S"

# Reports
DEFAULT_RECENT_LIMIT = 5
DEFAULT_CURRENCY = "€"
CSV_HEADER = ("Start Time", "End Time", "Duration (seconds)")

# Emoji/status mapping
EMOJI_UP = "✅"
EMOJI_DOWN = "🔴"
