"""Millisecond timestamp utilities."""

import time
from datetime import datetime, timezone


def now_millis():
    """Current wall-clock time in whole milliseconds since Unix epoch."""
    return int(time.time() * 1000)


def format_timestamp(epoch_ms=None):
    """Format timestamp as ISO 8601 with milliseconds."""
    if epoch_ms is None:
        epoch_ms = now_millis()

    dt = datetime.fromtimestamp(epoch_ms // 1000, tz=timezone.utc)
    return dt.strftime("%Y-%m-%dT%H:%M:%S.") + f"{epoch_ms % 1000:03d}Z"
