"""Time helpers for record timestamps."""

import time
from datetime import UTC, datetime


def now() -> datetime:
    """Current UTC time, timezone-aware."""
    return datetime.now(UTC)


def timestamp() -> int:
    """Current time in whole epoch seconds."""
    return int(time.time())


def isoformat(moment: datetime | None = None) -> str:
    """ISO 8601 UTC string for *moment* (default: now)."""
    return (moment or now()).isoformat()


def parse(value: str) -> datetime | None:
    """Parse an ISO 8601 string; None when it is missing or malformed."""
    if not value:
        return None
    try:
        parsed = datetime.fromisoformat(value)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed
