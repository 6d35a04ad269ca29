"""
index.dat layout constants (Client UrlCache MMF Ver 5.2).

File header:
- 0x00  signature "Client UrlCache MMF Ver 5.2\\0" (0x1C bytes)
- 0x1C  declared file size (u32 LE)
- 0x20  offset of the first HASH directory block (u32 LE)
- 0x50  cache directory table, 12-byte entries, 8-byte names

HASH directory block:
- +0x00 "HASH", +0x04 size in blocks (u32), +0x08 next HASH block (u32)
- +0x10 8-byte slots: flag byte, 3 bytes hash, record offset (u32)

URL/LEAK activity record:
- +0x00 tag, +0x04 size in blocks, +0x08 modified FILETIME, +0x10 accessed FILETIME
- +0x34 URL offset (u8), +0x39 directory index (u8)
- +0x3C filename offset (u32), +0x44 HTTP headers offset (u32)

REDR activity record:
- +0x00 tag, +0x04 size in blocks, +0x10 URL
"""

from __future__ import annotations

# Allocation granularity; every length in the file counts these units
BLOCK_SIZE = 0x80

SIGNATURE_PREFIX = b"Client UrlCache MMF"
SIGNATURE_SIZE = 0x1C
FILE_SIZE_OFFSET = 0x1C
HASH_TABLE_OFFSET = 0x20
HEADER_SIZE = 0x24

DIRECTORY_TABLE_OFFSET = 0x50
DIRECTORY_ENTRY_STRIDE = 12
DIRECTORY_NAME_SIZE = 8

# Hash directory
HASH_MAGIC = b"HASH"
HASH_BLOCK_SIZE_OFFSET = 4
HASH_NEXT_BLOCK_OFFSET = 8
HASH_FIRST_SLOT_OFFSET = 16
HASH_SLOT_SIZE = 8
HASH_SLOT_RECORD_OFFSET = 4
HASH_FLAG_NOT_RECORD = 0x03
HASH_UNUSED_SLOT = 0x0BADF00D

# Activity records
TAG_SIZE = 4
TAG_REDR = b"REDR"
TAG_LEAK = b"LEAK"
TAG_URL_PREFIX = b"URL"

RECORD_SIZE_OFFSET = 4

REDR_URL_OFFSET = 0x10

URL_MODIFIED_TIME_OFFSET = 0x08
URL_ACCESS_TIME_OFFSET = 0x10
URL_URL_OFFSET_FIELD = 0x34
URL_DIRECTORY_INDEX_FIELD = 0x39
URL_FILENAME_OFFSET_FIELD = 0x3C
URL_HEADERS_OFFSET_FIELD = 0x44
URL_HEADER_SIZE = 0x48

COLUMN_NAMES = (
    "TYPE",
    "URL",
    "MODIFIED TIME",
    "ACCESS TIME",
    "FILENAME",
    "DIRECTORY",
    "HTTP HEADERS",
)


def is_redirect_tag(tag: bytes) -> bool:
    """REDR records carry only a URL."""
    return tag == TAG_REDR


def is_url_tag(tag: bytes) -> bool:
    """URL and LEAK records share one layout; any "URL?" tag qualifies."""
    return tag[:3] == TAG_URL_PREFIX or tag == TAG_LEAK
