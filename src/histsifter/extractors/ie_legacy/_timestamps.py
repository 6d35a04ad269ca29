"""
Windows timestamp conversion utilities.

Internet Explorer stores activity times as FILETIME values: signed 64-bit
counts of 100-nanosecond intervals since January 1, 1601 (UTC). This module
converts them to Unix (seconds, nanoseconds) pairs and renders the strings
used in the MODIFIED TIME / ACCESS TIME columns.

Usage:
    from histsifter.extractors.ie_legacy._timestamps import (
        filetime_to_unix,
        format_filetime,
    )

    seconds, nanoseconds = filetime_to_unix(132456789012345678)
    format_filetime(132456789012345678, TimestampFormat.ISO8601)
"""

from __future__ import annotations

from datetime import datetime, timezone, tzinfo
from typing import Optional, Tuple

from ...core.enums import TimestampFormat


# ============================================================================
# Constants
# ============================================================================

# Difference between Windows FILETIME epoch (1601-01-01) and Unix epoch (1970-01-01)
# in seconds
FILETIME_UNIX_DIFF = 11644473600

# Difference in 100-nanosecond intervals
FILETIME_UNIX_DIFF_100NS = FILETIME_UNIX_DIFF * 10_000_000

TICKS_PER_SECOND = 10_000_000
NANOSECONDS_PER_TICK = 100

# 9999-12-31T23:59:59Z, the last second datetime can represent
MAX_UNIX_SECONDS = 253402300799

# Placeholders emitted instead of a timestamp
OVERFLOW_MARKER = "#overflow#"
OUT_OF_RANGE_MARKER = "#Out of range#"
DATA_CORRUPTED_MARKER = "#data corrupted#"


# ============================================================================
# FILETIME Conversion
# ============================================================================

def filetime_to_unix(filetime: int) -> Tuple[int, int]:
    """
    Convert Windows FILETIME to a Unix (seconds, nanoseconds) pair.

    Division truncates toward zero, so negative FILETIME values keep a
    negative remainder and always land before the Unix epoch.

    Args:
        filetime: Signed 64-bit FILETIME value

    Returns:
        Tuple of (seconds since 1970-01-01 UTC, nanoseconds)

    Example:
        >>> filetime_to_unix(116444736000000000)
        (0, 0)
    """
    whole, remainder = divmod(abs(filetime), TICKS_PER_SECOND)
    if filetime < 0:
        whole, remainder = -whole, -remainder
    return whole - FILETIME_UNIX_DIFF, remainder * NANOSECONDS_PER_TICK


def datetime_to_filetime(dt: datetime) -> int:
    """
    Convert datetime to Windows FILETIME.

    Args:
        dt: datetime object (naive values are treated as UTC)

    Returns:
        64-bit FILETIME value
    """
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)

    delta = dt - datetime(1970, 1, 1, tzinfo=timezone.utc)
    ticks = (delta.days * 86400 + delta.seconds) * TICKS_PER_SECOND + delta.microseconds * 10
    return ticks + FILETIME_UNIX_DIFF_100NS


def _format_utc_offset(dt: datetime) -> str:
    offset = dt.utcoffset()
    total = int(offset.total_seconds()) if offset is not None else 0
    if total == 0:
        return "Z"
    sign = "+" if total > 0 else "-"
    minutes = abs(total) // 60
    return f"{sign}{minutes // 60:02d}:{minutes % 60:02d}"


def _format_iso(dt: datetime, nanoseconds: int) -> str:
    text = (
        f"{dt.year:04d}-{dt.month:02d}-{dt.day:02d}"
        f"T{dt.hour:02d}:{dt.minute:02d}:{dt.second:02d}"
    )
    if nanoseconds:
        text += f".{nanoseconds:09d}"
    return text + _format_utc_offset(dt)


def format_filetime(
    filetime: int,
    fmt: TimestampFormat = TimestampFormat.CALENDAR,
    tz: Optional[tzinfo] = None,
) -> str:
    """
    Render a FILETIME for tabular output.

    Args:
        filetime: Signed 64-bit FILETIME value
        fmt: ISO-8601 (with explicit UTC offset) or ctime()-style calendar string
        tz: Target zone; None renders in the process local time zone

    Returns:
        "" for an absent (zero) timestamp, a placeholder marker when the value
        cannot be represented, otherwise the formatted local time

    Example:
        >>> format_filetime(116444736000000000, TimestampFormat.ISO8601, timezone.utc)
        '1970-01-01T00:00:00Z'
    """
    if filetime == 0:
        return ""

    seconds, nanoseconds = filetime_to_unix(filetime)
    if seconds < 0:
        return OVERFLOW_MARKER
    if seconds > MAX_UNIX_SECONDS:
        return OUT_OF_RANGE_MARKER

    try:
        dt = datetime.fromtimestamp(seconds, tz=timezone.utc).astimezone(tz)
    except (OverflowError, ValueError):
        return OUT_OF_RANGE_MARKER
    except OSError:
        return DATA_CORRUPTED_MARKER

    if fmt == TimestampFormat.ISO8601:
        return _format_iso(dt, nanoseconds)
    return dt.ctime()
