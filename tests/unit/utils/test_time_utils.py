"""Tests for time utilities."""

from datetime import datetime, timedelta, timezone

import pytest

from duracron.utils.time import (
    UTC,
    ensure_utc,
    from_epoch_millis,
    get_timezone,
    parse_iso_datetime,
    to_epoch_millis,
    to_iso,
    utc_now,
)


class TestTimeUtils:
    def test_utc_now_is_aware(self):
        assert utc_now().utcoffset() == timedelta(0)

    def test_get_timezone(self):
        assert str(get_timezone("Asia/Seoul")) == "Asia/Seoul"

    def test_get_timezone_invalid(self):
        with pytest.raises(ValueError, match="Invalid timezone"):
            get_timezone("Not/AZone")

    def test_ensure_utc_naive(self):
        assert ensure_utc(datetime(2025, 6, 15, 10, 0)) == datetime(2025, 6, 15, 10, 0, tzinfo=UTC)

    def test_ensure_utc_converts_offset(self):
        kst = timezone(timedelta(hours=9))
        result = ensure_utc(datetime(2025, 6, 15, 19, 0, tzinfo=kst))
        assert result == datetime(2025, 6, 15, 10, 0, tzinfo=UTC)
        assert result.utcoffset() == timedelta(0)

    def test_iso_round_trip_keeps_instant(self):
        value = datetime(2025, 6, 15, 10, 35, tzinfo=UTC)
        assert to_iso(value) == "2025-06-15T10:35:00+00:00"
        assert parse_iso_datetime(to_iso(value)) == value

    def test_parse_z_suffix(self):
        assert parse_iso_datetime("2025-06-15T10:35:00Z") == datetime(2025, 6, 15, 10, 35, tzinfo=UTC)

    def test_parse_invalid(self):
        with pytest.raises(ValueError):
            parse_iso_datetime("not-a-time")

    def test_epoch_millis(self):
        value = datetime(2025, 6, 15, 10, 35, tzinfo=UTC)
        assert to_epoch_millis(value) == 1749983700000
        assert from_epoch_millis("1749983700000") == value
