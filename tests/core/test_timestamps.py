"""Tests for runindex.core.timestamps."""

from datetime import UTC, datetime, timedelta

from runindex.core.timestamps import between, sort_key, to_datetime, to_timedelta
from runindex.messages import Duration, Timestamp


class TestConversions:
    def test_to_datetime_is_utc(self):
        dt = to_datetime(Timestamp(seconds=0, nanos=1_500_000))
        assert dt == datetime(1970, 1, 1, 0, 0, 0, 1500, tzinfo=UTC)

    def test_to_timedelta_truncates_nanos(self):
        assert to_timedelta(Duration(seconds=2, nanos=1999)) == timedelta(seconds=2, microseconds=1)

    def test_between(self):
        delta = between(Timestamp(seconds=10), Timestamp(seconds=12, nanos=250_000_000))
        assert delta == timedelta(seconds=2, milliseconds=250)

    def test_sort_key_orders_by_seconds_then_nanos(self):
        stamps = [Timestamp(2, 0), Timestamp(1, 5), Timestamp(1, 1)]
        assert sorted(stamps, key=sort_key) == [Timestamp(1, 1), Timestamp(1, 5), Timestamp(2, 0)]
