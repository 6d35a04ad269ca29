"""
Exceptions for extractor modules.
"""

from typing import Optional


class ExtractorError(Exception):
    """Base exception for extractor errors."""
    pass


class ConfigurationError(ExtractorError):
    """Raised when extractor configuration is invalid."""
    pass


class IndexDatError(ExtractorError):
    """Base exception for index.dat decoding errors."""
    pass


class OutOfBoundsError(IndexDatError):
    """Raised when a read would leave the readable area of the source."""

    def __init__(self, offset: int, length: int, limit: int):
        self.offset = offset
        self.length = length
        self.limit = limit
        super().__init__(
            f"Read of {length} bytes at offset 0x{offset:x} exceeds limit 0x{limit:x}"
            if offset >= 0 else
            f"Read of {length} bytes at negative offset {offset}"
        )


class UnopenableSourceError(IndexDatError):
    """Raised when the input cannot be read at all. Fatal."""

    def __init__(self, path: Optional[str], reason: str = ""):
        self.path = path
        self.reason = reason
        message = f"The index.dat file cannot be opened: {path}"
        if reason:
            message += f" ({reason})"
        super().__init__(message)
