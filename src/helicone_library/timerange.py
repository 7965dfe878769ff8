# SPDX-License-Identifier: LGPL-3.0-only
# Copyright (c) 2026 Mirrowel

"""
Relative and absolute date parsing.

Relative ranges ("24h", "7d", "4w", "1m") resolve to an instant in the past
relative to ``now``. Everything else is read as an ISO-8601 instant. All
returned datetimes are timezone-aware UTC.
"""

import re
from datetime import datetime, timedelta, timezone
from typing import Optional, Tuple

from .core.errors import UserInputError

DURATION_PATTERN = re.compile(r"^(\d+)([hdwm])$")

# Month is approximated as 30 days
UNIT_DELTAS = {
    "h": timedelta(hours=1),
    "d": timedelta(days=1),
    "w": timedelta(weeks=1),
    "m": timedelta(days=30),
}


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _ensure_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def parse_time_range(value: str, now: Optional[datetime] = None) -> datetime:
    """
    Resolve a relative range such as "7d" to ``now`` minus that duration.

    Raises:
        UserInputError: If the value is not ``<integer><h|d|w|m>``
    """
    match = DURATION_PATTERN.match(value.strip())
    if not match:
        raise UserInputError(
            f'Invalid time range format: {value}. Use formats like "24h", "7d", "4w", "1m"'
        )

    reference = _ensure_utc(now) if now is not None else utc_now()
    magnitude = int(match.group(1))
    return reference - magnitude * UNIT_DELTAS[match.group(2)]


def parse_date(value: str, now: Optional[datetime] = None) -> datetime:
    """
    Parse either a relative range or an ISO-8601 date/instant.

    The relative pattern is tried first; ISO parsing is only attempted when it
    does not match. Naive ISO values are taken as UTC.

    Raises:
        UserInputError: If neither form parses
    """
    text = value.strip()
    if DURATION_PATTERN.match(text):
        return parse_time_range(text, now=now)

    try:
        parsed = datetime.fromisoformat(text.replace("Z", "+00:00"))
    except ValueError:
        raise UserInputError(
            f"Invalid date format: {value}. Use ISO format (YYYY-MM-DD) or relative (7d, 24h)"
        ) from None

    return _ensure_utc(parsed)


def resolve_window(
    since: Optional[str],
    until: Optional[str],
    default_since: str,
    now: Optional[datetime] = None,
) -> Tuple[datetime, datetime]:
    """Parse a --since/--until pair, filling in defaults (``until`` = now)."""
    reference = _ensure_utc(now) if now is not None else utc_now()
    start = parse_date(since or default_since, now=reference)
    end = parse_date(until, now=reference) if until else reference
    return start, end


def local_timezone_difference() -> int:
    """Minutes between UTC and local time, positive west of Greenwich."""
    offset = datetime.now().astimezone().utcoffset() or timedelta(0)
    return -int(offset.total_seconds() // 60)


def format_iso(value: datetime) -> str:
    """ISO-8601 with millisecond precision and a Z suffix, as the API expects."""
    return (
        _ensure_utc(value).isoformat(timespec="milliseconds").replace("+00:00", "Z")
    )
