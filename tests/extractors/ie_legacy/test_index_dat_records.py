"""
Unit tests for index.dat activity record decoders (REDR, URL/LEAK, unknown)
and the cache directory table.
"""

import logging
from datetime import datetime, timezone

import pytest

from histsifter.core.enums import TimestampFormat
from histsifter.extractors._shared.extraction_warnings import ExtractionWarningCollector
from histsifter.extractors.ie_legacy._timestamps import OVERFLOW_MARKER, datetime_to_filetime
from histsifter.extractors.ie_legacy.index_dat import (
    NormalizedRecord,
    decode_record,
    lookup_directory,
    record_length,
)
from tests.fixtures.index_dat import IndexDatBuilder

UTC = timezone.utc


def _collector() -> ExtractionWarningCollector:
    return ExtractionWarningCollector(extractor_name="test")


class TestNormalizedRecord:
    """The emitted unit."""

    def test_row_excludes_offset(self):
        record = NormalizedRecord("URL", "http://a", "m", "a", "f", "d", "h", offset=0x200)
        assert record.to_row() == ("URL", "http://a", "m", "a", "f", "d", "h")

    def test_to_line(self):
        record = NormalizedRecord("REDR", "http://a", offset=0x80)
        assert record.to_line("|") == "REDR|http://a|||||"

    def test_empty(self):
        assert NormalizedRecord(offset=0x80).is_empty
        assert not NormalizedRecord("LEAK").is_empty

    def test_frozen(self):
        record = NormalizedRecord("URL")
        with pytest.raises(AttributeError):
            record.url = "changed"


class TestRecordLength:
    """Length in units times 0x80, capped at the file size."""

    def test_units(self):
        builder = IndexDatBuilder(size=0x400)
        builder.add_redr_record(0x200, b"x", units=2)
        assert record_length(builder.source(), 0x200) == 0x100

    def test_capped_at_file_size(self):
        builder = IndexDatBuilder(size=0x400)
        builder.add_redr_record(0x200, b"x", units=0xFFFFFFFF)
        assert record_length(builder.source(), 0x200) == 0x400

    def test_unreadable_is_zero(self):
        source = IndexDatBuilder(size=0x400).source()
        assert record_length(source, 0x3FE) == 0


class TestRedirectRecord:
    """REDR decoding."""

    def test_url_only(self):
        builder = IndexDatBuilder()
        builder.add_redr_record(0x200, b"http://example.com/redirected\x00")
        record = decode_record(builder.source(), 0x200)
        assert record == NormalizedRecord(
            record_type="REDR", url="http://example.com/redirected", offset=0x200,
        )

    def test_url_sanitized(self):
        builder = IndexDatBuilder()
        builder.add_redr_record(0x200, b"http://a\x01b\xffc\x00")
        assert decode_record(builder.source(), 0x200).url == "http://a b c"

    def test_truncated_url(self, caplog):
        """A URL filling the whole record budget is kept and reported once."""
        builder = IndexDatBuilder(size=0x400)
        builder.add_redr_record(0x200, b"A" * 0x100, units=1)
        collector = _collector()
        with caplog.at_level(logging.WARNING, logger="histsifter"):
            record = decode_record(builder.source(), 0x200, warnings=collector)
        assert record.url == "A" * 0x80
        assert collector.count == 1
        assert collector.warnings[0].context_json == {"decoder": "parse_redr"}
        assert collector.warnings[0].item_name == "url"
        assert len([r for r in caplog.records if "parse_redr" in r.getMessage()]) == 1

    def test_zero_units(self):
        """A zero-length redirect yields an empty URL without diagnostics."""
        builder = IndexDatBuilder()
        builder.add_redr_record(0x200, b"http://example.com\x00", units=0)
        collector = _collector()
        record = decode_record(builder.source(), 0x200, warnings=collector)
        assert record.record_type == "REDR"
        assert record.url == ""
        assert collector.count == 0


class TestUrlRecord:
    """URL / LEAK decoding."""

    def test_basic_fields(self):
        modified = datetime_to_filetime(datetime(2004, 3, 15, 8, 30, 5, tzinfo=UTC))
        accessed = datetime_to_filetime(datetime(2004, 3, 16, 9, 0, 0, tzinfo=UTC))
        builder = IndexDatBuilder()
        builder.set_directory(2, b"Q8ZB3X1K")
        builder.add_url_record(
            0x200, b"http://example.com/page.html",
            units=2, modified=modified, accessed=accessed,
            filename=b"page[1].htm",
            headers=b"HTTP/1.1 200 OK\r\nContent-Type: text/html\r\n",
            directory_index=2,
        )
        record = decode_record(builder.source(), 0x200, TimestampFormat.ISO8601, tz=UTC)
        assert record.record_type == "URL"
        assert record.url == "http://example.com/page.html"
        assert record.modified_time == "2004-03-15T08:30:05Z"
        assert record.access_time == "2004-03-16T09:00:00Z"
        assert record.filename == "page[1].htm"
        assert record.directory == "Q8ZB3X1K"
        assert record.http_headers == "HTTP/1.1 200 OK  Content-Type: text/html  "
        assert record.offset == 0x200

    def test_calendar_format(self):
        ticks = datetime_to_filetime(datetime(2004, 3, 15, 8, 30, 5, tzinfo=UTC))
        builder = IndexDatBuilder()
        builder.add_url_record(0x200, b"http://a", modified=ticks, accessed=ticks)
        record = decode_record(builder.source(), 0x200, TimestampFormat.CALENDAR, tz=UTC)
        assert record.modified_time == "Mon Mar 15 08:30:05 2004"
        assert record.access_time == "Mon Mar 15 08:30:05 2004"

    def test_zero_timestamps_are_empty(self):
        builder = IndexDatBuilder()
        builder.add_url_record(0x200, b"http://a", modified=0, accessed=0)
        record = decode_record(builder.source(), 0x200, TimestampFormat.ISO8601, tz=UTC)
        assert record.modified_time == ""
        assert record.access_time == ""

    def test_pre_epoch_timestamp_overflow(self):
        builder = IndexDatBuilder()
        builder.add_url_record(0x200, b"http://a", modified=1, accessed=-5)
        record = decode_record(builder.source(), 0x200, TimestampFormat.ISO8601, tz=UTC)
        assert record.modified_time == OVERFLOW_MARKER
        assert record.access_time == OVERFLOW_MARKER

    def test_url_tag_trimmed(self):
        builder = IndexDatBuilder()
        builder.add_url_record(0x200, b"http://a", tag=b"URL ")
        assert decode_record(builder.source(), 0x200).record_type == "URL"

    def test_leak_tag_kept(self):
        builder = IndexDatBuilder()
        builder.add_url_record(0x200, b"http://a", tag=b"LEAK")
        assert decode_record(builder.source(), 0x200).record_type == "LEAK"

    def test_url_tag_with_control_byte(self):
        """The tag is sanitized before trimming."""
        builder = IndexDatBuilder()
        builder.add_url_record(0x200, b"http://a", tag=b"URL\x01")
        assert decode_record(builder.source(), 0x200).record_type == "URL"

    def test_directory_out_of_range(self):
        builder = IndexDatBuilder(size=0x400)
        builder.add_url_record(0x200, b"http://a", directory_index=0xFF)
        assert decode_record(builder.source(), 0x200).directory == ""

    def test_truncated_filename_reported(self):
        """Each string field reports its own truncation; the record is still emitted."""
        builder = IndexDatBuilder(size=0x400)
        builder.add_url_record(0x200, b"http://a", units=1)
        # Point the filename at a run of bytes with no terminator
        builder.set_u32(0x200 + 0x3C, 0x80)
        builder.put(0x280, b"F" * 0x100)
        collector = _collector()
        record = decode_record(builder.source(), 0x200, warnings=collector)
        assert record.url == "http://a"
        assert record.filename == "F" * 0x80
        assert collector.count == 1
        assert collector.warnings[0].item_name == "filename"
        assert collector.warnings[0].context_json == {"decoder": "parse_url"}

    def test_field_offsets_outside_file(self):
        builder = IndexDatBuilder(size=0x400)
        builder.add_url_record(0x200, b"http://a")
        builder.set_u32(0x200 + 0x3C, 0xFFFFFF00)
        builder.set_u32(0x200 + 0x44, 0x7FFFFFFF)
        record = decode_record(builder.source(), 0x200)
        assert record.url == "http://a"
        assert record.filename == ""
        assert record.http_headers == ""

    def test_zero_units(self):
        builder = IndexDatBuilder()
        builder.add_url_record(0x200, b"http://example.com", units=0)
        collector = _collector()
        record = decode_record(builder.source(), 0x200, warnings=collector)
        assert record.record_type == "URL"
        assert record.url == ""
        assert record.filename == ""
        assert collector.count == 0

    def test_header_past_end_of_file(self):
        """A tag in the last bytes decodes with zeroed fields instead of failing."""
        builder = IndexDatBuilder(size=0x400)
        builder.put(0x3F8, b"URL ")
        builder.set_u32(0x3FC, 1)
        record = decode_record(builder.source(), 0x3F8)
        assert record.record_type == "URL"
        assert record.modified_time == ""


class TestUnknownRecord:
    """Unsupported tags produce an empty record."""

    @pytest.mark.parametrize("tag", [b"HASH", b"\x00\x00\x00\x00", b"LEA ", b"REDX", b"url "])
    def test_unknown_tags(self, tag):
        builder = IndexDatBuilder()
        builder.put(0x200, tag)
        record = decode_record(builder.source(), 0x200)
        assert record.is_empty
        assert record.to_row() == ("",) * 7
        assert record.offset == 0x200

    def test_offset_outside_file(self):
        source = IndexDatBuilder(size=0x400).source()
        record = decode_record(source, 0x0BADF00E)
        assert record.is_empty


class TestDirectoryTable:
    """Cache directory lookups."""

    def test_lookup(self):
        builder = IndexDatBuilder()
        builder.set_directory(0, b"ABCDEFGH")
        builder.set_directory(1, b"XYZ")
        source = builder.source()
        assert lookup_directory(0, source, source.size) == "ABCDEFGH"
        assert lookup_directory(1, source, source.size) == "XYZ"

    def test_name_not_terminated(self):
        """Names use all eight bytes; the following entry is not read."""
        builder = IndexDatBuilder()
        builder.put(0x50, b"ABCDEFGHIJKL")
        source = builder.source()
        assert lookup_directory(0, source, source.size) == "ABCDEFGH"

    def test_out_of_range(self):
        source = IndexDatBuilder(size=0x400).source()
        assert lookup_directory(0xFF, source, source.size) == ""

    def test_boundary(self):
        """offset + 8 equal to the file size is already out of range."""
        index = (0x400 - 8 - 0x50) // 12
        offset = 0x50 + 12 * index
        assert offset + 8 == 0x400
        builder = IndexDatBuilder(size=0x400)
        builder.set_directory(index - 1, b"INSIDE01")
        builder.set_directory(index, b"OUTSIDE1")
        source = builder.source()
        assert lookup_directory(index - 1, source, source.size) == "INSIDE01"
        assert lookup_directory(index, source, source.size) == ""

    def test_physical_short_read(self):
        builder = IndexDatBuilder(size=0x60, declared_size=0x1000)
        source = builder.source()
        assert lookup_directory(2, source, source.size) == ""
