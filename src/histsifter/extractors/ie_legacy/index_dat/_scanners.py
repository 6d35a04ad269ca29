"""
Candidate record offset generators.

- HashDirectoryWalker: follows the HASH block chain (live records)
- LinearBlockScanner: every 0x80-aligned offset (deleted records)

Both are re-iterable; each ``iter()`` starts a fresh scan.
"""

from __future__ import annotations

import struct
from typing import Iterator, Optional, Set

from ....core.config import DEFAULT_MAX_HASH_BLOCKS
from ....core.logging import get_logger
from ..._shared.extraction_warnings import (
    ExtractionWarningCollector,
    WARNING_TYPE_HASH_BLOCK_UNREADABLE,
    WARNING_TYPE_HASH_CHAIN_CYCLE,
    WARNING_TYPE_HASH_CHAIN_LIMIT,
)
from ...exceptions import OutOfBoundsError
from ._reader import ByteSource
from ._schemas import (
    BLOCK_SIZE,
    HASH_BLOCK_SIZE_OFFSET,
    HASH_FIRST_SLOT_OFFSET,
    HASH_FLAG_NOT_RECORD,
    HASH_MAGIC,
    HASH_NEXT_BLOCK_OFFSET,
    HASH_SLOT_RECORD_OFFSET,
    HASH_SLOT_SIZE,
    HASH_UNUSED_SLOT,
)

LOGGER = get_logger("extractors.ie_legacy.index_dat.scanners")


class HashDirectoryWalker:
    """
    Enumerate record offsets referenced by the hash directory.

    Slots flagged 0x03, empty slots and 0x0BADF00D slots are skipped. The
    walk stops on a revisited block, after ``max_blocks`` blocks, or when a
    block header cannot be read; each case is reported as a warning.
    """

    def __init__(
        self,
        source: ByteSource,
        max_blocks: int = DEFAULT_MAX_HASH_BLOCKS,
        warnings: Optional[ExtractionWarningCollector] = None,
    ):
        self.source = source
        self.max_blocks = max_blocks
        self.warnings = warnings

    def _report(self, warning_type: str, block_offset: int, detail: str) -> None:
        LOGGER.warning("hash directory at 0x%x: %s", block_offset, detail)
        if self.warnings is not None:
            self.warnings.add_hash_directory_issue(warning_type, block_offset, detail)

    def iter_blocks(self) -> Iterator[int]:
        """Yield the offset of each HASH block in chain order."""
        source = self.source
        block_offset = source.hash_directory_offset
        visited: Set[int] = set()

        while block_offset != 0:
            if block_offset in visited:
                self._report(WARNING_TYPE_HASH_CHAIN_CYCLE, block_offset, "block already visited, chain stopped")
                return
            if len(visited) >= self.max_blocks:
                self._report(
                    WARNING_TYPE_HASH_CHAIN_LIMIT, block_offset,
                    f"more than {self.max_blocks} blocks, chain stopped",
                )
                return
            visited.add(block_offset)

            try:
                next_offset = source.read_u32(block_offset + HASH_NEXT_BLOCK_OFFSET)
            except OutOfBoundsError:
                self._report(WARNING_TYPE_HASH_BLOCK_UNREADABLE, block_offset, "block header outside file")
                return

            yield block_offset
            block_offset = next_offset

    def iter_block_slots(self, block_offset: int) -> Iterator[int]:
        """Yield live record offsets from one HASH block."""
        source = self.source
        try:
            units = source.read_u32(block_offset + HASH_BLOCK_SIZE_OFFSET)
        except OutOfBoundsError:
            return
        if source.read_clamped(block_offset, 4) != HASH_MAGIC:
            LOGGER.debug("block at 0x%x has no HASH magic", block_offset)

        # read_clamped stops at the readable end of the file
        data = source.read_clamped(block_offset, units * BLOCK_SIZE)
        for slot in range(HASH_FIRST_SLOT_OFFSET, len(data) - HASH_SLOT_SIZE + 1, HASH_SLOT_SIZE):
            if data[slot] == HASH_FLAG_NOT_RECORD:
                continue
            (record_offset,) = struct.unpack_from("<I", data, slot + HASH_SLOT_RECORD_OFFSET)
            if record_offset == 0 or record_offset == HASH_UNUSED_SLOT:
                continue
            yield record_offset

    def __iter__(self) -> Iterator[int]:
        for block_offset in self.iter_blocks():
            yield from self.iter_block_slots(block_offset)


class LinearBlockScanner:
    """Every 0x80-aligned offset below the declared file size."""

    def __init__(self, source: ByteSource):
        self.source = source

    def __len__(self) -> int:
        return -(-self.source.size // BLOCK_SIZE)

    def __iter__(self) -> Iterator[int]:
        return iter(range(0, self.source.size, BLOCK_SIZE))
