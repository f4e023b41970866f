"""
Timestamp utilities for ledger-style integer time.

All timestamps handled by the engine are integer seconds since the Unix epoch
in UTC. These helpers convert between that representation and datetimes.
"""

from datetime import datetime, timezone
from typing import Optional


def current_timestamp() -> int:
    """Current wall-clock time as integer UTC seconds."""
    return int(datetime.now(timezone.utc).timestamp())


def to_timestamp(value: datetime) -> int:
    """
    Convert a datetime to integer UTC seconds.

    Naive datetimes are interpreted as UTC.
    """
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return int(value.timestamp())


def from_timestamp(ts: int) -> datetime:
    """Convert integer UTC seconds to an aware datetime."""
    return datetime.fromtimestamp(ts, tz=timezone.utc)


def format_timestamp(ts: Optional[int]) -> Optional[str]:
    """Format integer UTC seconds as ISO 8601, None passes through."""
    if ts is None:
        return None
    return from_timestamp(ts).isoformat()


def seconds_until(deadline: int, now: int) -> int:
    """Seconds remaining before a deadline, never negative."""
    return max(0, deadline - now)
