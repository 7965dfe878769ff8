# SPDX-License-Identifier: LGPL-3.0-only
# Copyright (c) 2026 Mirrowel

"""Tests for relative and absolute date parsing."""

from datetime import datetime, timedelta, timezone

import pytest

from helicone_library.core.errors import UserInputError
from helicone_library.timerange import (
    format_iso,
    parse_date,
    parse_time_range,
    resolve_window,
)

NOW = datetime(2024, 6, 15, 12, 0, tzinfo=timezone.utc)


class TestParseTimeRange:
    """Tests for <n><unit> ranges."""

    @pytest.mark.parametrize(
        "value,delta",
        [
            ("24h", timedelta(hours=24)),
            ("7d", timedelta(days=7)),
            ("2w", timedelta(days=14)),
            ("1m", timedelta(days=30)),
            ("0d", timedelta(0)),
        ],
    )
    def test_units(self, value, delta):
        assert parse_time_range(value, now=NOW) == NOW - delta

    @pytest.mark.parametrize("value", ["7x", "d7", "7", "-1d", "1.5d"])
    def test_invalid_ranges_raise(self, value):
        with pytest.raises(UserInputError, match="Invalid time range format"):
            parse_time_range(value, now=NOW)


class TestParseDate:
    """Tests for the relative-or-ISO date parser."""

    def test_relative_takes_precedence(self):
        assert parse_date("7d", now=NOW) == NOW - timedelta(days=7)

    def test_date_only_is_utc_midnight(self):
        assert parse_date("2024-01-15") == datetime(2024, 1, 15, tzinfo=timezone.utc)

    def test_z_suffix(self):
        assert parse_date("2024-01-15T10:30:00Z") == datetime(
            2024, 1, 15, 10, 30, tzinfo=timezone.utc
        )

    def test_offset_is_normalized_to_utc(self):
        parsed = parse_date("2024-01-15T10:30:00+02:00")
        assert parsed == datetime(2024, 1, 15, 8, 30, tzinfo=timezone.utc)
        assert parsed.utcoffset() == timedelta(0)

    @pytest.mark.parametrize("value", ["yesterday", "2024-13-45", ""])
    def test_garbage_raises(self, value):
        with pytest.raises(UserInputError, match="Invalid date format"):
            parse_date(value)


class TestResolveWindow:
    """Tests for --since/--until resolution."""

    def test_defaults(self):
        assert resolve_window(None, None, "7d", now=NOW) == (NOW - timedelta(days=7), NOW)

    def test_explicit_bounds(self):
        start, end = resolve_window("2024-06-01", "24h", "7d", now=NOW)
        assert start == datetime(2024, 6, 1, tzinfo=timezone.utc)
        assert end == NOW - timedelta(hours=24)


def test_format_iso_has_millis_and_z():
    assert format_iso(datetime(2024, 1, 1, 8, 5, 3, 123456, tzinfo=timezone.utc)) == (
        "2024-01-01T08:05:03.123Z"
    )
