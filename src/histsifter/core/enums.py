"""
Core Enumerations

Centralized enum definitions for consistent typing across the codebase.
Using StrEnum (Python 3.11+) for string-based enums that serialize naturally.
"""

from enum import StrEnum


class ScanMode(StrEnum):
    """How candidate record offsets are discovered in an index.dat file."""

    ACTIVE = "active"    # Walk the hash directory (live records)
    DELETED = "deleted"  # Step through every 0x80 block (undelete)


class TimestampFormat(StrEnum):
    """Rendering used for MODIFIED TIME / ACCESS TIME columns."""

    ISO8601 = "iso8601"
    CALENDAR = "calendar"  # ctime() style, e.g. "Thu Jan  1 00:00:00 1970"
