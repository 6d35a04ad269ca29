"""
Internet Explorer index.dat (Client UrlCache MMF Ver 5.2) decoder.

Forensic Value:
- URL / LEAK records: visited and cached URLs with modified/accessed times
- Cache records name the local file and cache directory holding the content
- REDR records preserve redirect targets
- DELETED mode recovers records no longer reachable from the hash directory

Usage:
    from histsifter.extractors.ie_legacy.index_dat import ByteSource, decode

    with ByteSource.open("index.dat") as source:
        for record in decode(source):
            print(record.record_type, record.url)
"""

from ._reader import ByteSource
from ._fields import BoundedString, printable_string, read_bounded_cstring
from ._records import (
    NormalizedRecord,
    decode_record,
    decode_redirect,
    decode_unknown,
    decode_url,
    lookup_directory,
    record_length,
)
from ._scanners import HashDirectoryWalker, LinearBlockScanner
from .parser import RecordStream, decode, decode_file, header_line

__all__ = [
    "ByteSource",
    "BoundedString",
    "printable_string",
    "read_bounded_cstring",
    "NormalizedRecord",
    "decode_record",
    "decode_redirect",
    "decode_unknown",
    "decode_url",
    "lookup_directory",
    "record_length",
    "HashDirectoryWalker",
    "LinearBlockScanner",
    "RecordStream",
    "decode",
    "decode_file",
    "header_line",
]
