"""exifstrip -- remove EXIF metadata from JPEG files, optionally keeping orientation."""

__version__ = "1.0.0"

from exifstrip.errors import (
    ExifNotPresentError,
    ExifStripError,
    InvalidBlockSizeError,
    InvalidByteOrderError,
    InvalidExifHeaderError,
    InvalidOffsetError,
    MalformedMarkerError,
    MissingStartMarkerError,
    ShortReadError,
)
from exifstrip.models import BatchResult, CheckResult, StripResult
from exifstrip.stripper import strip, strip_all, strip_exif
from exifstrip.processor import strip_file, strip_batch
from exifstrip.verify import check_bytes, check_file, verify_file, verify_batch

__all__ = [
    "__version__",
    "strip",
    "strip_all",
    "strip_exif",
    "strip_file",
    "strip_batch",
    "check_bytes",
    "check_file",
    "verify_file",
    "verify_batch",
    "StripResult",
    "BatchResult",
    "CheckResult",
    "ExifStripError",
    "MissingStartMarkerError",
    "ExifNotPresentError",
    "MalformedMarkerError",
    "InvalidBlockSizeError",
    "InvalidExifHeaderError",
    "InvalidByteOrderError",
    "InvalidOffsetError",
    "ShortReadError",
]
