"""
Timestamp conversions (stdlib-only).

Messages carry time as ``(seconds, nanos)`` pairs. Queries answer with
:class:`datetime.datetime` and :class:`datetime.timedelta` so callers never
do the arithmetic themselves. Sub-microsecond precision is truncated.

Examples:
    >>> from runindex.messages import Timestamp
    >>> between(Timestamp(seconds=1), Timestamp(seconds=3, nanos=500_000_000))
    datetime.timedelta(seconds=2, microseconds=500000)
"""

from __future__ import annotations

from datetime import UTC, datetime, timedelta
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from runindex.messages import Duration, Timestamp


def to_datetime(timestamp: Timestamp) -> datetime:
    """Timezone-aware UTC datetime of a message timestamp."""
    return datetime.fromtimestamp(timestamp.seconds, UTC) + timedelta(microseconds=timestamp.nanos // 1000)


def to_timedelta(duration: Duration) -> timedelta:
    return timedelta(seconds=duration.seconds, microseconds=duration.nanos // 1000)


def between(started: Timestamp, finished: Timestamp) -> timedelta:
    """Wall-clock time from ``started`` to ``finished``."""
    return to_datetime(finished) - to_datetime(started)


def sort_key(timestamp: Timestamp) -> tuple[int, int]:
    return (timestamp.seconds, timestamp.nanos)


__all__ = ["to_datetime", "to_timedelta", "between", "sort_key"]
