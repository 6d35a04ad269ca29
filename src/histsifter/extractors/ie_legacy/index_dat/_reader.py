"""
Bounds-checked random access over an index.dat file.

Every read names an absolute offset and a length. The readable area is the
smaller of the size the file declares in its own header (offset 0x1C) and
the number of bytes physically present, so a corrupt size field can never
make a read return partial data as if it were complete.
"""

from __future__ import annotations

import io
import os
import struct
from pathlib import Path
from typing import BinaryIO, Optional, Union

from ....core.logging import get_logger
from ...exceptions import OutOfBoundsError, UnopenableSourceError
from ._schemas import (
    FILE_SIZE_OFFSET,
    HASH_TABLE_OFFSET,
    HEADER_SIZE,
    SIGNATURE_PREFIX,
    SIGNATURE_SIZE,
)

LOGGER = get_logger("extractors.ie_legacy.index_dat.reader")


class ByteSource:
    """
    Read-only view over an index.dat file.

    Wraps a seekable binary handle. Use :meth:`open` for paths and
    :meth:`from_bytes` for in-memory data; both validate that the fixed
    header is present.

    Example:
        with ByteSource.open(Path("index.dat")) as source:
            root = source.hash_directory_offset
            tag = source.read(root, 4)
    """

    def __init__(self, handle: BinaryIO, *, name: Optional[str] = None, owns_handle: bool = False):
        self._handle = handle
        self._owns_handle = owns_handle
        self.name = name

        handle.seek(0, os.SEEK_END)
        self._physical_size = handle.tell()
        if self._physical_size < HEADER_SIZE:
            raise UnopenableSourceError(
                name, f"file is {self._physical_size} bytes, header needs {HEADER_SIZE}"
            )

        header = self._pread(0, HEADER_SIZE)
        self._signature = header[:SIGNATURE_SIZE]
        (self._declared_size,) = struct.unpack_from("<I", header, FILE_SIZE_OFFSET)
        (self._hash_directory_offset,) = struct.unpack_from("<I", header, HASH_TABLE_OFFSET)
        self._limit = min(self._declared_size, self._physical_size)

        if self._declared_size != self._physical_size:
            LOGGER.debug(
                "%s: declared size %d differs from physical size %d",
                name or "<memory>", self._declared_size, self._physical_size,
            )

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------

    @classmethod
    def open(cls, path: Union[str, Path]) -> "ByteSource":
        """Open a file for reading; raises UnopenableSourceError on failure."""
        path = Path(path)
        try:
            handle = path.open("rb")
        except OSError as exc:
            raise UnopenableSourceError(str(path), exc.strerror or str(exc)) from exc
        try:
            return cls(handle, name=str(path), owns_handle=True)
        except Exception:
            handle.close()
            raise

    @classmethod
    def from_bytes(cls, data: bytes, *, name: Optional[str] = None) -> "ByteSource":
        return cls(io.BytesIO(data), name=name, owns_handle=True)

    def close(self) -> None:
        if self._owns_handle:
            self._handle.close()

    def __enter__(self) -> "ByteSource":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    # ------------------------------------------------------------------
    # Header fields
    # ------------------------------------------------------------------

    @property
    def size(self) -> int:
        """Logical size declared by the file header (offset 0x1C)."""
        return self._declared_size

    @property
    def physical_size(self) -> int:
        return self._physical_size

    @property
    def readable_size(self) -> int:
        """Upper bound for every read."""
        return self._limit

    @property
    def hash_directory_offset(self) -> int:
        """Offset of the first HASH block (offset 0x20); 0 when there is none."""
        return self._hash_directory_offset

    @property
    def signature(self) -> bytes:
        return self._signature

    @property
    def has_valid_signature(self) -> bool:
        return self._signature.startswith(SIGNATURE_PREFIX)

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def _pread(self, offset: int, length: int) -> bytes:
        self._handle.seek(offset)
        return self._handle.read(length)

    def read(self, offset: int, length: int) -> bytes:
        """
        Read exactly ``length`` bytes at ``offset``.

        Raises:
            OutOfBoundsError: offset or length negative, or range past the readable area
        """
        if offset < 0 or length < 0 or offset + length > self._limit:
            raise OutOfBoundsError(offset, length, self._limit)
        if length == 0:
            return b""
        data = self._pread(offset, length)
        if len(data) != length:
            raise OutOfBoundsError(offset, length, offset + len(data))
        return data

    def read_clamped(self, offset: int, length: int) -> bytes:
        """Read up to ``length`` bytes at ``offset``, stopping at the readable end."""
        if offset < 0 or length <= 0 or offset >= self._limit:
            return b""
        return self._pread(offset, min(length, self._limit - offset))

    def read_u8(self, offset: int) -> int:
        return self.read(offset, 1)[0]

    def read_u32(self, offset: int) -> int:
        return struct.unpack("<I", self.read(offset, 4))[0]

    def read_i64(self, offset: int) -> int:
        return struct.unpack("<q", self.read(offset, 8))[0]

    def __repr__(self) -> str:
        return (
            f"ByteSource(name={self.name!r}, size=0x{self._declared_size:x}, "
            f"physical=0x{self._physical_size:x})"
        )
