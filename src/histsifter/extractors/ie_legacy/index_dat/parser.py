"""
index.dat decoding entry points.

    with ByteSource.open(path) as source:
        stream = decode(source, ScanMode.ACTIVE, TimestampFormat.ISO8601, "|")
        for line in stream.iter_lines():
            print(line)

``decode`` is lazy: nothing is read until the stream is iterated, and every
iteration rescans the file from the start.
"""

from __future__ import annotations

from collections import Counter
from datetime import tzinfo
from pathlib import Path
from typing import Iterable, Iterator, List, Optional, TextIO, Union

from ....core.config import DEFAULT_MAX_HASH_BLOCKS
from ....core.enums import ScanMode, TimestampFormat
from ....core.logging import get_logger
from ..._shared.extraction_warnings import (
    ExtractionWarningCollector,
    SEVERITY_INFO,
    WARNING_TYPE_BAD_SIGNATURE,
)
from ._reader import ByteSource
from ._records import NormalizedRecord, decode_record
from ._scanners import HashDirectoryWalker, LinearBlockScanner
from ._schemas import COLUMN_NAMES

LOGGER = get_logger("extractors.ie_legacy.index_dat.parser")


def header_line(delimiter: str = "\t") -> str:
    return delimiter.join(COLUMN_NAMES)


class RecordStream:
    """Restartable, lazy sequence of NormalizedRecord for one source."""

    def __init__(
        self,
        source: ByteSource,
        mode: ScanMode = ScanMode.ACTIVE,
        timestamp_format: TimestampFormat = TimestampFormat.CALENDAR,
        delimiter: str = "\t",
        *,
        warnings: Optional[ExtractionWarningCollector] = None,
        max_hash_blocks: int = DEFAULT_MAX_HASH_BLOCKS,
        tz: Optional[tzinfo] = None,
    ):
        self.source = source
        self.mode = ScanMode(mode)
        self.timestamp_format = TimestampFormat(timestamp_format)
        self.delimiter = delimiter
        self.warnings = warnings
        self.max_hash_blocks = max_hash_blocks
        self.tz = tz

    def candidate_offsets(self) -> Iterable[int]:
        if self.mode == ScanMode.DELETED:
            return LinearBlockScanner(self.source)
        return HashDirectoryWalker(self.source, self.max_hash_blocks, self.warnings)

    def __iter__(self) -> Iterator[NormalizedRecord]:
        counts: Counter = Counter()
        for offset in self.candidate_offsets():
            record = decode_record(
                self.source, offset, self.timestamp_format, self.warnings, self.tz,
            )
            counts[record.record_type or "unknown"] += 1
            yield record
        LOGGER.debug("%s scan of %s: %s", self.mode, self.source.name or "<memory>", dict(counts))

    def iter_lines(self, include_unknown: bool = True) -> Iterator[str]:
        """Header line, then one delimited line per record."""
        yield header_line(self.delimiter)
        for record in self:
            if record.is_empty and not include_unknown:
                continue
            yield record.to_line(self.delimiter)

    def write(self, out: TextIO, include_unknown: bool = True) -> int:
        """
        Write header and records to ``out``.

        Returns:
            Number of record lines written
        """
        written = -1
        for line in self.iter_lines(include_unknown):
            out.write(line + "\n")
            written += 1
        return written


def decode(
    source: ByteSource,
    mode: ScanMode = ScanMode.ACTIVE,
    timestamp_format: TimestampFormat = TimestampFormat.CALENDAR,
    delimiter: str = "\t",
    *,
    warnings: Optional[ExtractionWarningCollector] = None,
    max_hash_blocks: int = DEFAULT_MAX_HASH_BLOCKS,
    tz: Optional[tzinfo] = None,
) -> RecordStream:
    """
    Decode every candidate record of an index.dat source.

    Args:
        source: Opened ByteSource
        mode: ACTIVE walks the hash directory, DELETED steps every 0x80 block
        timestamp_format: ISO-8601 or calendar rendering for both time columns
        delimiter: Column separator used by RecordStream.iter_lines()
        warnings: Optional collector for corruption findings
        max_hash_blocks: Upper bound on hash directory blocks followed
        tz: Time zone for timestamps (None = local)

    Returns:
        RecordStream yielding exactly one record per candidate offset
    """
    if not source.has_valid_signature:
        LOGGER.warning(
            "%s: unexpected signature %r, decoding anyway",
            source.name or "<memory>", source.signature.split(b"\x00", 1)[0],
        )
        if warnings is not None:
            warnings.add_warning(
                WARNING_TYPE_BAD_SIGNATURE, "signature",
                severity=SEVERITY_INFO, offset=0,
                item_value=source.signature.hex(),
            )
    return RecordStream(
        source, mode, timestamp_format, delimiter,
        warnings=warnings, max_hash_blocks=max_hash_blocks, tz=tz,
    )


def decode_file(
    path: Union[str, Path],
    mode: ScanMode = ScanMode.ACTIVE,
    timestamp_format: TimestampFormat = TimestampFormat.CALENDAR,
    *,
    warnings: Optional[ExtractionWarningCollector] = None,
    max_hash_blocks: int = DEFAULT_MAX_HASH_BLOCKS,
    tz: Optional[tzinfo] = None,
) -> List[NormalizedRecord]:
    """Open ``path``, decode it completely and close it again."""
    with ByteSource.open(path) as source:
        return list(decode(
            source, mode, timestamp_format,
            warnings=warnings, max_hash_blocks=max_hash_blocks, tz=tz,
        ))
