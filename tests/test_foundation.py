"""Tests for the clock and timestamp boundary helpers."""

from datetime import datetime, timedelta, timezone

import pytest

from lobby_reveal.foundation.clock import FrozenClock, utc_now
from lobby_reveal.foundation.identifiers import new_lobby_code
from lobby_reveal.foundation.timestamps import parse_timestamp, to_iso

_BASE = datetime(2026, 1, 15, 14, 0, 0, tzinfo=timezone.utc)


class TestClock:
    def test_utc_now_is_aware(self) -> None:
        assert utc_now().tzinfo is not None

    def test_frozen_clock_holds_still(self) -> None:
        clock = FrozenClock(_BASE)
        assert clock() == _BASE
        assert clock() == _BASE

    def test_frozen_clock_advance_and_set(self) -> None:
        clock = FrozenClock(_BASE)
        assert clock.advance(timedelta(minutes=5)) == _BASE + timedelta(minutes=5)
        clock.set(_BASE)
        assert clock() == _BASE


class TestParseTimestamp:
    def test_z_suffix(self) -> None:
        assert parse_timestamp("2026-01-15T14:00:00Z") == _BASE

    def test_offset_is_normalised_to_utc(self) -> None:
        parsed = parse_timestamp("2026-01-15T15:00:00+01:00")
        assert parsed == _BASE
        assert parsed.utcoffset() == timedelta(0)

    def test_naive_assumed_utc(self) -> None:
        assert parse_timestamp("2026-01-15T14:00:00") == _BASE

    def test_datetime_passthrough(self) -> None:
        assert parse_timestamp(_BASE) == _BASE

    @pytest.mark.parametrize("value", [None, "", "   ", "tomorrow", "2026-13-45T99:00:00Z"])
    def test_invalid_is_none(self, value) -> None:
        assert parse_timestamp(value) is None

    @pytest.mark.parametrize("value", ["9999-12-31T23:00:00-05:00", "0001-01-01T00:30:00+01:00"])
    def test_outside_utc_range_is_none(self, value: str) -> None:
        assert parse_timestamp(value) is None

    def test_aware_datetime_outside_utc_range_is_none(self) -> None:
        late = datetime(9999, 12, 31, 23, 0, tzinfo=timezone(timedelta(hours=-5)))
        assert parse_timestamp(late) is None

    def test_to_iso_round_trip(self) -> None:
        assert to_iso(_BASE) == "2026-01-15T14:00:00Z"
        assert to_iso(None) is None


def test_lobby_code_alphabet() -> None:
    code = new_lobby_code()
    assert len(code) == 6
    assert not set(code) & set("01IO")
