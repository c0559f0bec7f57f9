"""JPEG marker-segment scanner -- stdlib only (struct module).

Walks the top-level marker sequence from SOI onward, treating every marker
as length-prefixed, until the first APP1 segment. Segment payloads are
skipped as opaque bytes.
"""

import struct
from typing import Dict, Iterator

from exifstrip.cursor import ByteCursor
from exifstrip.errors import (
    ExifNotPresentError,
    InvalidBlockSizeError,
    MalformedMarkerError,
    MissingStartMarkerError,
)

MARKER_SOI = 0xFFD8
MARKER_APP1 = 0xFFE1
MARKER_SOS = 0xFFDA

# Names for the markers commonly seen before the first scan
MARKER_NAMES: Dict[int, str] = {
    0xFFC0: 'SOF0', 0xFFC1: 'SOF1', 0xFFC2: 'SOF2', 0xFFC3: 'SOF3',
    0xFFC4: 'DHT', 0xFFCC: 'DAC', 0xFFD8: 'SOI', 0xFFD9: 'EOI',
    0xFFDA: 'SOS', 0xFFDB: 'DQT', 0xFFDD: 'DRI', 0xFFFE: 'COM',
    0xFFE0: 'APP0', 0xFFE1: 'APP1', 0xFFE2: 'APP2', 0xFFE3: 'APP3',
    0xFFE4: 'APP4', 0xFFE5: 'APP5', 0xFFE6: 'APP6', 0xFFE7: 'APP7',
    0xFFE8: 'APP8', 0xFFE9: 'APP9', 0xFFEA: 'APP10', 0xFFEB: 'APP11',
    0xFFEC: 'APP12', 0xFFED: 'APP13', 0xFFEE: 'APP14', 0xFFEF: 'APP15',
}


class Segment:
    """A single length-prefixed marker segment."""
    __slots__ = ('marker', 'offset', 'length')

    def __init__(self, marker: int, offset: int, length: int):
        self.marker = marker
        self.offset = offset    # position of the 0xFF marker byte
        self.length = length    # declared length, includes the length field

    @property
    def name(self) -> str:
        return MARKER_NAMES.get(self.marker, f'0x{self.marker:04X}')

    @property
    def payload_offset(self) -> int:
        return self.offset + 4

    @property
    def end(self) -> int:
        """Offset of the first byte after this segment."""
        return self.offset + 2 + self.length

    def __repr__(self):
        return f'Segment({self.name}, offset={self.offset}, length={self.length})'


def check_soi(data: bytes):
    """Raise MissingStartMarkerError unless data begins with FFD8."""
    if len(data) < 2 or struct.unpack_from('>H', data, 0)[0] != MARKER_SOI:
        raise MissingStartMarkerError()


def iter_segments(data: bytes) -> Iterator[Segment]:
    """Yield each marker segment following SOI, in file order.

    Stops quietly at end of buffer. A segment is yielded before its payload
    is skipped, so callers that stop early never pay for a truncated tail.

    Raises:
        MissingStartMarkerError: data does not begin with SOI.
        MalformedMarkerError: a marker lacks the 0xFF prefix.
        InvalidBlockSizeError: a segment length is below 2.
        ShortReadError: a skipped payload runs past the buffer end.
    """
    check_soi(data)
    cur = ByteCursor(data, 2)

    while cur.remaining >= 4:
        offset = cur.pos
        marker = cur.unpack('>H')
        length = cur.unpack('>H')
        if marker >> 8 != 0xFF:
            raise MalformedMarkerError(offset, marker)
        if length < 2:
            raise InvalidBlockSizeError(offset, length)

        yield Segment(marker, offset, length)

        cur.skip(length - 2)


def find_app1_segment(data: bytes) -> Segment:
    """Locate the first APP1 segment.

    Raises ExifNotPresentError if the walk reaches the end of the buffer
    without one. Other structural problems raise the errors listed in
    iter_segments.
    """
    for segment in iter_segments(data):
        if segment.marker == MARKER_APP1:
            return segment
    raise ExifNotPresentError()

