"""Tests for the EXIF/IFD0 sub-parser."""

import struct
import pytest

from exifstrip.cursor import ByteCursor
from exifstrip.errors import (
    InvalidByteOrderError,
    InvalidExifHeaderError,
    InvalidOffsetError,
    ShortReadError,
)
from exifstrip.exif import (
    ORIENTATION_NAMES,
    ORIENTATION_TAG,
    find_orientation_entry,
    orientation_value,
    parse_app1,
    parse_exif_payload,
    read_exif_header,
)
from exifstrip.jpeg import find_app1_segment
from tests.conftest import (
    build_exif_jpeg,
    build_exif_payload,
    build_ifd_entry,
    orientation_entry,
    standard_exif_entries,
)


class TestByteCursor:
    def test_sequential_reads(self):
        cur = ByteCursor(b'\x01\x02\x03\x04\x05')
        assert cur.read(2) == b'\x01\x02'
        cur.skip(1)
        assert cur.unpack('>H') == 0x0405
        assert cur.remaining == 0

    def test_short_read(self):
        cur = ByteCursor(b'\x01\x02', 1)
        with pytest.raises(ShortReadError) as exc:
            cur.read(2)
        assert exc.value.position == 1
        assert exc.value.wanted == 2
        assert exc.value.available == 1

    def test_end_bound(self):
        cur = ByteCursor(b'\x00' * 10, 2, 4)
        assert cur.remaining == 2
        with pytest.raises(ShortReadError):
            cur.skip(3)

    def test_end_clamped_to_buffer(self):
        cur = ByteCursor(b'\x00' * 4, 0, 100)
        assert cur.remaining == 4


class TestReadExifHeader:
    def test_big_endian(self):
        cur = ByteCursor(build_exif_payload([], '>'))
        header = read_exif_header(cur)
        assert header.byte_order_mark == b'MM'
        assert header.endian == '>'
        assert header.ifd0_offset == 8
        assert cur.pos == 14

    def test_little_endian(self):
        header = read_exif_header(ByteCursor(build_exif_payload([], '<')))
        assert header.byte_order_mark == b'II'
        assert header.endian == '<'

    def test_larger_offset_skips_gap(self):
        cur = ByteCursor(build_exif_payload([], '>', ifd0_offset=20))
        header = read_exif_header(cur)
        assert header.ifd0_offset == 20
        assert cur.pos == 6 + 20

    def test_bad_identifier(self):
        payload = build_exif_payload([], identifier=b'Exig\x00\x00')
        with pytest.raises(InvalidExifHeaderError):
            read_exif_header(ByteCursor(payload))

    def test_xmp_payload(self):
        with pytest.raises(InvalidExifHeaderError):
            read_exif_header(ByteCursor(b'http://ns.adobe.com/xap/1.0/\x00'))

    def test_padding_not_validated(self):
        payload = build_exif_payload([], identifier=b'Exif\xaa\xbb')
        assert read_exif_header(ByteCursor(payload)).endian == '>'

    def test_magic_not_validated(self):
        payload = bytearray(build_exif_payload([], '>'))
        payload[8:10] = b'\x00\x00'
        assert read_exif_header(ByteCursor(bytes(payload))).ifd0_offset == 8

    def test_invalid_byte_order(self):
        payload = build_exif_payload([], byte_order_mark=b'MI')
        with pytest.raises(InvalidByteOrderError) as exc:
            read_exif_header(ByteCursor(payload))
        assert exc.value.mark == b'MI'

    @pytest.mark.parametrize('offset', [0, 4, 7])
    def test_offset_below_eight(self, offset):
        payload = build_exif_payload([], ifd0_offset=offset)
        with pytest.raises(InvalidOffsetError) as exc:
            read_exif_header(ByteCursor(payload))
        assert exc.value.offset == offset

    def test_offset_beyond_payload(self):
        payload = b'Exif\x00\x00MM\x00\x2a' + struct.pack('>I', 5000)
        with pytest.raises(ShortReadError):
            read_exif_header(ByteCursor(payload))

    def test_truncated_header(self):
        with pytest.raises(ShortReadError):
            read_exif_header(ByteCursor(b'Exif\x00\x00MM'))


class TestFindOrientationEntry:
    def _scan(self, entries, endian='>'):
        cur = ByteCursor(build_exif_payload(entries, endian))
        header = read_exif_header(cur)
        return find_orientation_entry(cur, header)

    def test_found_among_others(self):
        entry, count = self._scan(standard_exif_entries('>', 6))
        assert entry == orientation_entry(6, '>')
        assert count == 5

    def test_found_little_endian(self):
        entry, _ = self._scan(standard_exif_entries('<', 3), '<')
        assert entry == orientation_entry(3, '<')
        assert entry[:2] == b'\x12\x01'

    def test_absent(self):
        entry, count = self._scan(standard_exif_entries('>', None))
        assert entry is None
        assert count == 4

    def test_empty_ifd(self):
        entry, count = self._scan([])
        assert entry is None
        assert count == 0

    def test_first_duplicate_wins(self):
        entries = [orientation_entry(6), orientation_entry(3)]
        entry, _ = self._scan(entries)
        assert entry == orientation_entry(6)

    def test_payload_kept_verbatim(self):
        # LONG format, odd count: captured without interpretation
        odd = build_ifd_entry(ORIENTATION_TAG, 4, 7, b'\xde\xad\xbe\xef')
        entry, _ = self._scan([odd])
        assert entry == odd

    def test_stops_after_orientation(self):
        # Declares 5 entries but holds one; the missing ones are never read.
        payload = build_exif_payload([orientation_entry(6)], trailer=b'')
        payload = payload[:14] + struct.pack('>H', 5) + payload[16:]
        cur = ByteCursor(payload)
        entry, count = find_orientation_entry(cur, read_exif_header(cur))
        assert entry == orientation_entry(6)
        assert count == 5

    def test_truncated_entries(self):
        payload = build_exif_payload(standard_exif_entries('>', None), trailer=b'')[:-6]
        cur = ByteCursor(payload)
        with pytest.raises(ShortReadError):
            find_orientation_entry(cur, read_exif_header(cur))


class TestParse:
    def test_parse_app1(self):
        data = build_exif_jpeg('>', orientation=8)
        info = parse_app1(data, find_app1_segment(data))
        assert info.has_orientation
        assert info.orientation == 8
        assert info.tag_count == 5
        assert info.header.byte_order_mark == b'MM'

    def test_parse_without_orientation(self):
        data = build_exif_jpeg('<', orientation=None)
        info = parse_app1(data, find_app1_segment(data))
        assert not info.has_orientation
        assert info.orientation is None

    def test_reads_bounded_by_segment(self):
        # IFD0 offset points past the APP1 segment into the image data
        payload = b'Exif\x00\x00MM\x00\x2a' + struct.pack('>I', 40) + b'\x00' * 4
        data = b'\xff\xd8\xff\xe1' + struct.pack('>H', len(payload) + 2) + payload
        data += b'\x00' * 200
        with pytest.raises(ShortReadError):
            parse_app1(data, find_app1_segment(data))

    def test_parse_payload_with_offsets(self):
        payload = build_exif_payload([orientation_entry(1)])
        data = b'junk' + payload
        info = parse_exif_payload(data, 4)
        assert info.orientation == 1


class TestOrientationValue:
    @pytest.mark.parametrize('endian', ['>', '<'])
    @pytest.mark.parametrize('value', [1, 6, 8])
    def test_short(self, endian, value):
        assert orientation_value(orientation_entry(value, endian), endian) == value

    def test_non_short_format(self):
        entry = build_ifd_entry(ORIENTATION_TAG, 4, 1, 6)
        assert orientation_value(entry, '>') is None

    def test_names_cover_all_values(self):
        assert sorted(ORIENTATION_NAMES) == list(range(1, 9))
