"""Millisecond timestamps used for all persisted times."""

import time
from datetime import UTC, datetime


def now_ms() -> int:
    return int(time.time() * 1000)


def ms_to_iso(value: int | None) -> str | None:
    """Format a millisecond timestamp as an ISO-8601 UTC string."""
    if value is None:
        return None
    return datetime.fromtimestamp(value / 1000, tz=UTC).isoformat()
