"""Bounded string extraction and output sanitizing for index.dat records."""

from __future__ import annotations

from typing import NamedTuple, Optional

from ....core.logging import get_logger
from ..._shared.extraction_warnings import ExtractionWarningCollector
from ._reader import ByteSource

LOGGER = get_logger("extractors.ie_legacy.index_dat.fields")

# Bytes outside 0x20..0x7E become a space
_PRINTABLE_TABLE = bytes(b if 0x20 <= b < 0x7F else 0x20 for b in range(256))


def printable_string(raw: bytes) -> str:
    """Replace control and non-ASCII bytes with spaces; length is preserved."""
    return raw.translate(_PRINTABLE_TABLE).decode("ascii")


class BoundedString(NamedTuple):
    value: bytes
    truncated: bool


def read_bounded_cstring(
    source: ByteSource,
    start_offset: int,
    max_length: int,
    file_size: int,
) -> BoundedString:
    """
    Read a NUL-terminated string of at most ``max_length`` bytes.

    The scan stops at the first NUL, at ``file_size`` or after ``max_length``
    bytes, whichever comes first. When the whole budget is consumed without
    a terminator the string is returned as-is and flagged ``truncated``.
    """
    if max_length <= 0 or start_offset < 0 or start_offset >= file_size:
        return BoundedString(b"", False)

    budget = min(max_length, file_size - start_offset)
    data = source.read_clamped(start_offset, budget)

    terminator = data.find(b"\x00")
    if terminator >= 0:
        return BoundedString(data[:terminator], False)
    return BoundedString(data, len(data) == max_length)


def report_truncated_field(
    decoder: str,
    field_name: str,
    record_offset: int,
    warnings: Optional[ExtractionWarningCollector] = None,
) -> None:
    """Emit the corruption diagnostic for a string field that hit its budget."""
    LOGGER.warning(
        "corrupted data or unknown structure in %s, %s field: offset: 0x%x",
        decoder, field_name, record_offset,
    )
    if warnings is not None:
        warnings.add_truncated_field(decoder, field_name, record_offset)
