"""
Extractor modules for legacy browser artifacts.

Folder Structure:
- ie_legacy/       Internet Explorer index.dat decoding (index_dat/) and FILETIME helpers
- _shared/         Shared utilities (extraction warnings)
"""

from .exceptions import (  # noqa: F401
    ExtractorError,
    IndexDatError,
    OutOfBoundsError,
    UnopenableSourceError,
    ConfigurationError,
)
