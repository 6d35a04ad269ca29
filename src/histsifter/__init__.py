"""HistSifter: forensic reader for legacy Internet Explorer ``index.dat`` history files."""

from .extractors.ie_legacy.index_dat import (  # noqa: F401
    ByteSource,
    NormalizedRecord,
    RecordStream,
    decode,
    decode_file,
)
from .core.enums import ScanMode, TimestampFormat  # noqa: F401
