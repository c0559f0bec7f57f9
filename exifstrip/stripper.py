"""EXIF removal -- splice the APP1 segment out of a JPEG byte buffer.

Two modes:
  - strip_all: drop the first APP1 segment entirely.
  - strip: replace it with a minimal EXIF segment holding only the
    Orientation entry, or drop it when there is no Orientation tag.

Both are pure functions over bytes. Any parse error propagates before
output is built.
"""

import struct
from typing import Tuple

from exifstrip.exif import (
    EXIF_HEADER,
    TIFF_HEADER_SIZE,
    TIFF_MAGIC,
    ExifHeader,
    parse_app1,
)
from exifstrip.jpeg import MARKER_APP1, Segment, find_app1_segment

# Length field of the synthesized segment: length(2) + Exif header(6)
# + TIFF header(8) + tag count(2) + one IFD entry(12)
ORIENTATION_SEGMENT_LENGTH = 0x001E


def build_orientation_segment(header: ExifHeader, entry: bytes) -> bytes:
    """Build a complete APP1 segment whose IFD0 holds only ``entry``.

    The marker and length belong to the JPEG layer and are always
    big-endian. The TIFF fields follow the source byte order.
    """
    if len(entry) != 12:
        raise ValueError(f'IFD entry must be 12 bytes, got {len(entry)}')
    endian = header.endian
    return (
        struct.pack('>HH', MARKER_APP1, ORIENTATION_SEGMENT_LENGTH)
        + EXIF_HEADER
        + header.byte_order_mark
        + struct.pack(endian + 'H', TIFF_MAGIC)
        + struct.pack(endian + 'I', TIFF_HEADER_SIZE)
        + struct.pack(endian + 'H', 1)
        + entry
    )


def is_orientation_only_segment(data: bytes, segment: Segment) -> bool:
    """True if segment is exactly the minimal form build_orientation_segment emits."""
    if segment.length != ORIENTATION_SEGMENT_LENGTH:
        return False
    info = parse_app1(data, segment)
    if not info.has_orientation:
        return False
    expected = build_orientation_segment(info.header, info.orientation_entry)
    return data[segment.offset:segment.end] == expected


def _splice(data: bytes, segment: Segment, replacement: bytes = b'') -> bytes:
    return data[:segment.offset] + replacement + data[segment.end:]


def rewrite(data: bytes, keep_orientation: bool = True) -> Tuple[bytes, bool]:
    """Splice out the first APP1 segment in a single pass.

    Returns (output, orientation_kept). With keep_orientation the segment is
    parsed and replaced by a minimal Orientation segment when it carries the
    tag. Without it the payload is never read.
    """
    segment = find_app1_segment(data)
    if not keep_orientation:
        return _splice(data, segment), False
    info = parse_app1(data, segment)
    if not info.has_orientation:
        return _splice(data, segment), False
    replacement = build_orientation_segment(info.header, info.orientation_entry)
    return _splice(data, segment, replacement), True


def strip_all(data: bytes) -> bytes:
    """Remove the first APP1 segment.

    Raises ExifNotPresentError (or another ExifStripError) when there is
    nothing to remove or the marker walk fails.
    """
    return rewrite(data, keep_orientation=False)[0]


def strip(data: bytes) -> bytes:
    """Remove EXIF, keeping only the Orientation tag when one is present."""
    return rewrite(data, keep_orientation=True)[0]


def strip_exif(data: bytes, keep_orientation: bool = True) -> bytes:
    """Dispatch to strip or strip_all."""
    if keep_orientation:
        return strip(data)
    return strip_all(data)
