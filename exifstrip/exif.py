"""EXIF (TIFF-structured) sub-parser for the APP1 payload.

Only IFD0 is walked, and only far enough to find the Orientation tag.
Everything else in the TIFF structure is skipped unread.
"""

import struct
from typing import Dict, Optional

from exifstrip.cursor import ByteCursor
from exifstrip.errors import (
    InvalidByteOrderError,
    InvalidExifHeaderError,
    InvalidOffsetError,
)
from exifstrip.jpeg import Segment

EXIF_HEADER = b'Exif\x00\x00'
BYTE_ORDER_BE = b'MM'
BYTE_ORDER_LE = b'II'
TIFF_MAGIC = 0x002A
ORIENTATION_TAG = 0x0112
IFD_ENTRY_SIZE = 12

# TIFF header size: byte-order mark + magic + IFD0 offset
TIFF_HEADER_SIZE = 8

# TIFF SHORT data-format code
TYPE_SHORT = 3

ORIENTATION_NAMES: Dict[int, str] = {
    1: 'Horizontal (normal)',
    2: 'Mirror horizontal',
    3: 'Rotate 180',
    4: 'Mirror vertical',
    5: 'Mirror horizontal and rotate 270 CW',
    6: 'Rotate 90 CW',
    7: 'Mirror horizontal and rotate 90 CW',
    8: 'Rotate 270 CW',
}


class ExifHeader:
    """Parsed EXIF identifier plus TIFF header."""
    __slots__ = ('byte_order_mark', 'endian', 'ifd0_offset')

    def __init__(self, byte_order_mark: bytes, endian: str, ifd0_offset: int):
        self.byte_order_mark = byte_order_mark   # b'MM' or b'II', written back verbatim
        self.endian = endian                     # struct prefix, '>' or '<'
        self.ifd0_offset = ifd0_offset


class ExifInfo:
    """Result of walking IFD0: the header and the raw Orientation entry, if any."""
    __slots__ = ('header', 'orientation_entry', 'tag_count')

    def __init__(self, header: ExifHeader, orientation_entry: Optional[bytes],
                 tag_count: int):
        self.header = header
        self.orientation_entry = orientation_entry
        self.tag_count = tag_count

    @property
    def has_orientation(self) -> bool:
        return self.orientation_entry is not None

    @property
    def orientation(self) -> Optional[int]:
        if self.orientation_entry is None:
            return None
        return orientation_value(self.orientation_entry, self.header.endian)


def read_exif_header(cur: ByteCursor) -> ExifHeader:
    """Read the EXIF identifier and TIFF header, leaving cur at IFD0."""
    if cur.read(4) != EXIF_HEADER[:4]:
        raise InvalidExifHeaderError()
    cur.skip(2)

    mark = cur.read(2)
    if mark == BYTE_ORDER_BE:
        endian = '>'
    elif mark == BYTE_ORDER_LE:
        endian = '<'
    else:
        raise InvalidByteOrderError(mark)

    cur.skip(2)  # TIFF magic, not validated

    offset = cur.unpack(endian + 'I')
    if offset < TIFF_HEADER_SIZE:
        raise InvalidOffsetError(offset)
    cur.skip(offset - TIFF_HEADER_SIZE)

    return ExifHeader(mark, endian, offset)


def find_orientation_entry(cur: ByteCursor, header: ExifHeader):
    """Scan IFD0 entries for the first Orientation tag.

    Returns (entry, tag_count) where entry is the raw 12-byte IFD entry or
    None. Later duplicates of the tag are never looked at.
    """
    endian = header.endian
    tag_count = cur.unpack(endian + 'H')

    for _ in range(tag_count):
        tag_id = cur.unpack(endian + 'H')
        if tag_id != ORIENTATION_TAG:
            cur.skip(IFD_ENTRY_SIZE - 2)
            continue
        return struct.pack(endian + 'H', tag_id) + cur.read(IFD_ENTRY_SIZE - 2), tag_count

    return None, tag_count


def parse_exif_payload(data: bytes, start: int = 0, end: int = None) -> ExifInfo:
    """Parse an EXIF payload located at data[start:end].

    start points at the 'Exif' identifier, i.e. just past the APP1 length
    field. Reads never go beyond end.
    """
    cur = ByteCursor(data, start, end)
    header = read_exif_header(cur)
    entry, tag_count = find_orientation_entry(cur, header)
    return ExifInfo(header, entry, tag_count)


def parse_app1(data: bytes, segment: Segment) -> ExifInfo:
    """Parse the EXIF payload of an APP1 segment found by the scanner."""
    return parse_exif_payload(data, segment.payload_offset, segment.end)


def orientation_value(entry: bytes, endian: str) -> Optional[int]:
    """Decode the value of a raw Orientation entry.

    Orientation is a single SHORT stored left-justified in the value field.
    Returns None for entries with any other format or count.
    """
    dtype, count = struct.unpack_from(endian + 'HI', entry, 2)
    if dtype != TYPE_SHORT or count != 1:
        return None
    return struct.unpack_from(endian + 'H', entry, 8)[0]
