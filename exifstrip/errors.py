"""Exception types raised by the JPEG/EXIF parser.

Every parse failure aborts the whole operation; no partial output is ever
returned alongside an error.
"""


class ExifStripError(ValueError):
    """Base class for all JPEG/EXIF parse failures."""


class MissingStartMarkerError(ExifStripError):
    """The buffer does not start with the JPEG SOI marker (FFD8)."""

    def __init__(self, msg='missing JPEG SOI marker'):
        super().__init__(msg)


class ExifNotPresentError(ExifStripError):
    """No APP1 segment was found. Expected for JPEGs without metadata."""

    def __init__(self, msg='EXIF not present'):
        super().__init__(msg)


class MalformedMarkerError(ExifNotPresentError):
    """A byte without the 0xFF prefix sits where a marker was expected.

    Subclasses ExifNotPresentError so callers treating both as "nothing to
    strip" keep working; stricter callers can catch this one separately.
    """

    def __init__(self, offset: int, marker: int):
        self.offset = offset
        self.marker = marker
        super().__init__(
            f'EXIF not present (malformed marker 0x{marker:04X} at offset {offset})')


class InvalidBlockSizeError(ExifStripError):
    """A segment declares a length smaller than its own length field."""

    def __init__(self, offset: int, length: int):
        self.offset = offset
        self.length = length
        super().__init__(f'invalid block size {length} at offset {offset}')


class InvalidExifHeaderError(ExifStripError):
    def __init__(self, msg='invalid EXIF header'):
        super().__init__(msg)


class InvalidByteOrderError(ExifStripError):
    def __init__(self, mark: bytes):
        self.mark = mark
        super().__init__(f'invalid byte order flag {mark!r}')


class InvalidOffsetError(ExifStripError):
    def __init__(self, offset: int):
        self.offset = offset
        super().__init__(f'invalid IFD0 offset {offset}')


class ShortReadError(ExifStripError):
    """Fewer bytes remain than a parse step requires."""

    def __init__(self, position: int, wanted: int, available: int):
        self.position = position
        self.wanted = wanted
        self.available = available
        super().__init__(
            f'short read at offset {position}: wanted {wanted} byte(s), '
            f'{available} available')
