"""Partition identifiers and resolvers.

A partition is the unit of upstream data that is fetched, converted and cached
as one artifact. Identifiers are deterministic: the same timestamp always
resolves to the same identifier, and therefore to the same cache entry.

Only the partition containing ``from_time_ms`` is resolved. A window that
crosses a partition boundary is answered from that single partition.
"""

from datetime import datetime, timedelta, timezone
from typing import NamedTuple

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


class RollingPartition(NamedTuple):
    """The single partition of an always-current rolling feed."""

    feed: str

    @property
    def key(self) -> str:
        return self.feed


class MonthPartition(NamedTuple):
    """One calendar month (UTC) of a monthly archive."""

    year: int
    month: int

    @property
    def key(self) -> str:
        return f"{self.year:04d}-{self.month:02d}"


Partition = RollingPartition | MonthPartition


def ms_to_datetime(ms: int) -> datetime:
    """Convert epoch milliseconds to an aware UTC datetime.

    Uses timedelta arithmetic so pre-1970 (negative) values floor correctly.
    """
    return _EPOCH + timedelta(milliseconds=ms)


def resolve_rolling(from_time_ms: int, feed: str) -> RollingPartition:
    """Resolve a timestamp against a rolling feed: always the one partition."""
    return RollingPartition(feed)


def resolve_month(from_time_ms: int) -> MonthPartition:
    """Resolve a timestamp to the UTC calendar month containing it.

    Args:
        from_time_ms: Epoch milliseconds

    Returns:
        MonthPartition(year, month)
    """
    dt = ms_to_datetime(from_time_ms)
    return MonthPartition(dt.year, dt.month)
