"""Shared test fixtures -- synthetic JPEG/EXIF byte builders and sample files."""

import struct
import pytest

SOI = b'\xff\xd8'

# A DQT segment, an SOS header and some entropy-coded bytes. Walking past the
# SOS lands on 0x12 0x34, which is not a marker, like a real scan would.
IMAGE_TAIL = (
    b'\xff\xdb\x00\x04\x00\x01'
    b'\xff\xda\x00\x02'
    b'\x12\x34\x56\x78\x9a'
    b'\xff\xd9'
)

# JFIF APP0 segment (length 16)
APP0_JFIF = b'\xff\xe0\x00\x10JFIF\x00\x01\x01\x00\x00\x01\x00\x01\x00\x00'


def build_ifd_entry(tag_id, type_id, count, value, endian='>'):
    """Pack one 12-byte IFD entry with a raw 4-byte value field.

    value may be an int (packed as a 4-byte LONG) or 4 raw bytes.
    """
    if isinstance(value, bytes):
        assert len(value) == 4
        return struct.pack(endian + 'HHI', tag_id, type_id, count) + value
    return struct.pack(endian + 'HHII', tag_id, type_id, count, value)


def orientation_entry(value, endian='>'):
    """Orientation (0x0112) as a SHORT, left-justified in the value field."""
    return struct.pack(endian + 'HHI', 0x0112, 3, 1) + struct.pack(endian + 'HH', value, 0)


def build_exif_payload(entries, endian='>', ifd0_offset=8, identifier=b'Exif\x00\x00',
                       byte_order_mark=None, trailer=b'\x00\x00\x00\x00'):
    """Build an APP1 EXIF payload (starting at the 'Exif' identifier).

    Args:
        entries: List of raw 12-byte IFD entries.
        endian: '>' or '<'; selects the TIFF byte order.
        ifd0_offset: IFD0 offset to declare. Bytes between the TIFF header and
            IFD0 are zero-filled.
        identifier: EXIF identifier bytes (overridable for header errors).
        byte_order_mark: Override the byte-order mark.
        trailer: Bytes after the entries (normally the next-IFD offset).
    """
    bo = byte_order_mark or (b'MM' if endian == '>' else b'II')
    tiff = bo + struct.pack(endian + 'H', 42) + struct.pack(endian + 'I', ifd0_offset)
    tiff += b'\x00' * max(ifd0_offset - 8, 0)
    tiff += struct.pack(endian + 'H', len(entries)) + b''.join(entries) + trailer
    return identifier + tiff


def build_app1(payload):
    """Wrap a payload in an APP1 marker segment."""
    return b'\xff\xe1' + struct.pack('>H', len(payload) + 2) + payload


def build_jpeg(*segments, tail=IMAGE_TAIL):
    """SOI + the given raw segments + image tail."""
    return SOI + b''.join(segments) + tail


def standard_exif_entries(endian='>', orientation=6):
    """A realistic IFD0: Make, Model, Orientation, XResolution, DateTime."""
    entries = [
        build_ifd_entry(0x010F, 2, 4, b'Acme', endian),
        build_ifd_entry(0x0110, 2, 4, b'X100', endian),
    ]
    if orientation is not None:
        entries.append(orientation_entry(orientation, endian))
    entries += [
        build_ifd_entry(0x011A, 5, 1, 0, endian),
        build_ifd_entry(0x0132, 2, 20, 0, endian),
    ]
    return entries


def build_exif_jpeg(endian='>', orientation=6, with_app0=True):
    """A complete synthetic JPEG carrying an EXIF APP1 segment."""
    app1 = build_app1(build_exif_payload(standard_exif_entries(endian, orientation), endian))
    if with_app0:
        return build_jpeg(APP0_JFIF, app1)
    return build_jpeg(app1)


def build_xmp_app1(packet=b'<x:xmpmeta xmlns:x="adobe:ns:meta/"/>'):
    """An XMP APP1 segment (same marker as EXIF, different identifier)."""
    return build_app1(b'http://ns.adobe.com/xap/1.0/\x00' + packet)


def build_exif_xmp_jpeg(endian='>', orientation=6, xmp_first=False):
    """APP0 + EXIF APP1 + XMP APP1, or with the two APP1 segments swapped."""
    exif = build_app1(build_exif_payload(standard_exif_entries(endian, orientation), endian))
    xmp = build_xmp_app1()
    if xmp_first:
        return build_jpeg(APP0_JFIF, xmp, exif)
    return build_jpeg(APP0_JFIF, exif, xmp)


# ---------------------------------------------------------------------------
# File fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def tmp_jpeg(tmp_path):
    """Big-endian EXIF with Orientation = 6."""
    filepath = tmp_path / 'photo.jpg'
    filepath.write_bytes(build_exif_jpeg('>', orientation=6))
    return filepath


@pytest.fixture
def tmp_jpeg_le(tmp_path):
    """Little-endian EXIF with Orientation = 8."""
    filepath = tmp_path / 'photo_le.jpeg'
    filepath.write_bytes(build_exif_jpeg('<', orientation=8))
    return filepath


@pytest.fixture
def tmp_jpeg_no_orientation(tmp_path):
    filepath = tmp_path / 'no_orientation.jpg'
    filepath.write_bytes(build_exif_jpeg('>', orientation=None))
    return filepath


@pytest.fixture
def tmp_jpeg_no_exif(tmp_path):
    filepath = tmp_path / 'plain.jpg'
    filepath.write_bytes(build_jpeg(APP0_JFIF))
    return filepath


@pytest.fixture
def tmp_jpeg_dir(tmp_path):
    """Directory tree with a mix of EXIF, plain and non-JPEG files."""
    root = tmp_path / 'photos'
    (root / 'sub').mkdir(parents=True)
    (root / 'a.jpg').write_bytes(build_exif_jpeg('>', orientation=3))
    (root / 'b.JPG').write_bytes(build_jpeg(APP0_JFIF))
    (root / 'sub' / 'c.jpeg').write_bytes(build_exif_jpeg('<', orientation=None))
    (root / 'notes.txt').write_text('not an image')
    return root


@pytest.fixture
def pil_jpeg(tmp_path):
    """A real JPEG written by Pillow with an Orientation tag of 6."""
    Image = pytest.importorskip('PIL.Image')
    img = Image.new('RGB', (16, 8), (200, 120, 40))
    exif = Image.Exif()
    exif[0x0112] = 6
    exif[0x010F] = 'Acme'
    filepath = tmp_path / 'pil.jpg'
    img.save(str(filepath), format='JPEG', exif=exif)
    return filepath
