"""
Activity record decoders.

One candidate offset in, exactly one :class:`NormalizedRecord` out. The
4-byte tag at the offset selects the decoder:

- ``REDR``          redirect; URL only
- ``URL `` / ``LEAK``  visit or cache entry; timestamps, URL, cached file
                    name, cache directory and stored HTTP headers
- anything else     empty record, no further reads
"""

from __future__ import annotations

import struct
from dataclasses import astuple, dataclass
from datetime import tzinfo
from typing import Optional, Tuple

from ....core.enums import TimestampFormat
from ....core.logging import get_logger
from ..._shared.extraction_warnings import ExtractionWarningCollector
from ...exceptions import OutOfBoundsError
from .._timestamps import format_filetime
from ._fields import printable_string, read_bounded_cstring, report_truncated_field
from ._reader import ByteSource
from ._schemas import (
    BLOCK_SIZE,
    DIRECTORY_ENTRY_STRIDE,
    DIRECTORY_NAME_SIZE,
    DIRECTORY_TABLE_OFFSET,
    RECORD_SIZE_OFFSET,
    REDR_URL_OFFSET,
    TAG_SIZE,
    URL_ACCESS_TIME_OFFSET,
    URL_DIRECTORY_INDEX_FIELD,
    URL_FILENAME_OFFSET_FIELD,
    URL_HEADER_SIZE,
    URL_HEADERS_OFFSET_FIELD,
    URL_MODIFIED_TIME_OFFSET,
    URL_URL_OFFSET_FIELD,
    is_redirect_tag,
    is_url_tag,
)

LOGGER = get_logger("extractors.ie_legacy.index_dat.records")

REDR_DECODER = "parse_redr"
URL_DECODER = "parse_url"


@dataclass(frozen=True, slots=True)
class NormalizedRecord:
    """
    One decoded activity record, every field already sanitized.

    ``offset`` is the absolute record start; it is not an output column.
    """
    record_type: str = ""
    url: str = ""
    modified_time: str = ""
    access_time: str = ""
    filename: str = ""
    directory: str = ""
    http_headers: str = ""
    offset: int = 0

    @property
    def is_empty(self) -> bool:
        """True for unknown/unsupported records."""
        return not self.record_type

    def to_row(self) -> Tuple[str, ...]:
        """Column values in output order (TYPE .. HTTP HEADERS)."""
        return astuple(self)[:-1]

    def to_line(self, delimiter: str = "\t") -> str:
        return delimiter.join(self.to_row())


def record_length(source: ByteSource, record_offset: int) -> int:
    """
    Record size in bytes (units at +4 times 0x80), capped at the file size.

    The cap keeps a corrupted unit count from sizing scan budgets beyond
    the data that can exist.
    """
    try:
        units = source.read_u32(record_offset + RECORD_SIZE_OFFSET)
    except OutOfBoundsError:
        return 0
    return min(units * BLOCK_SIZE, source.size)


def lookup_directory(index: int, source: ByteSource, file_size: int) -> str:
    """Cache directory name for a one-byte table index; "" when outside the file."""
    offset = DIRECTORY_TABLE_OFFSET + DIRECTORY_ENTRY_STRIDE * index
    if offset + DIRECTORY_NAME_SIZE >= file_size:
        return ""
    try:
        raw = source.read(offset, DIRECTORY_NAME_SIZE)
    except OutOfBoundsError:
        return ""
    return printable_string(raw.split(b"\x00", 1)[0])


def _read_string_field(
    source: ByteSource,
    start_offset: int,
    max_length: int,
    decoder: str,
    field_name: str,
    record_offset: int,
    warnings: Optional[ExtractionWarningCollector],
) -> str:
    value, truncated = read_bounded_cstring(source, start_offset, max_length, source.size)
    if truncated:
        report_truncated_field(decoder, field_name, record_offset, warnings)
    return printable_string(value)


def decode_redirect(
    source: ByteSource,
    record_offset: int,
    tag: bytes,
    warnings: Optional[ExtractionWarningCollector] = None,
) -> NormalizedRecord:
    """REDR: URL from +0x10; redirects carry no times, file or headers."""
    length = record_length(source, record_offset)
    url = _read_string_field(
        source, record_offset + REDR_URL_OFFSET, length,
        REDR_DECODER, "url", record_offset, warnings,
    )
    return NormalizedRecord(
        record_type=printable_string(tag),
        url=url,
        offset=record_offset,
    )


def decode_url(
    source: ByteSource,
    record_offset: int,
    tag: bytes,
    timestamp_format: TimestampFormat = TimestampFormat.CALENDAR,
    warnings: Optional[ExtractionWarningCollector] = None,
    tz: Optional[tzinfo] = None,
) -> NormalizedRecord:
    """URL / LEAK: visit or cache entry."""
    length = record_length(source, record_offset)

    # Fields past the readable end decode as zero
    header = source.read_clamped(record_offset, URL_HEADER_SIZE).ljust(URL_HEADER_SIZE, b"\x00")
    (modified_ticks,) = struct.unpack_from("<q", header, URL_MODIFIED_TIME_OFFSET)
    (access_ticks,) = struct.unpack_from("<q", header, URL_ACCESS_TIME_OFFSET)
    url_offset = header[URL_URL_OFFSET_FIELD]
    directory_index = header[URL_DIRECTORY_INDEX_FIELD]
    (filename_offset,) = struct.unpack_from("<I", header, URL_FILENAME_OFFSET_FIELD)
    (headers_offset,) = struct.unpack_from("<I", header, URL_HEADERS_OFFSET_FIELD)

    url = _read_string_field(
        source, record_offset + url_offset, length,
        URL_DECODER, "url", record_offset, warnings,
    )
    filename = _read_string_field(
        source, record_offset + filename_offset, length,
        URL_DECODER, "filename", record_offset, warnings,
    )
    http_headers = _read_string_field(
        source, record_offset + headers_offset, length,
        URL_DECODER, "httpheaders", record_offset, warnings,
    )

    record_type = printable_string(tag)
    if record_type[3:] == " ":
        record_type = record_type[:3]

    return NormalizedRecord(
        record_type=record_type,
        url=url,
        modified_time=format_filetime(modified_ticks, timestamp_format, tz),
        access_time=format_filetime(access_ticks, timestamp_format, tz),
        filename=filename,
        directory=lookup_directory(directory_index, source, source.size),
        http_headers=http_headers,
        offset=record_offset,
    )


def decode_unknown(record_offset: int) -> NormalizedRecord:
    return NormalizedRecord(offset=record_offset)


def decode_record(
    source: ByteSource,
    record_offset: int,
    timestamp_format: TimestampFormat = TimestampFormat.CALENDAR,
    warnings: Optional[ExtractionWarningCollector] = None,
    tz: Optional[tzinfo] = None,
) -> NormalizedRecord:
    """Dispatch on the 4-byte tag at ``record_offset``; never raises for bad data."""
    try:
        tag = source.read(record_offset, TAG_SIZE)
    except OutOfBoundsError:
        LOGGER.debug("record offset 0x%x outside readable area", record_offset)
        return decode_unknown(record_offset)

    if is_redirect_tag(tag):
        return decode_redirect(source, record_offset, tag, warnings)
    if is_url_tag(tag):
        return decode_url(source, record_offset, tag, timestamp_format, warnings, tz)
    return decode_unknown(record_offset)
