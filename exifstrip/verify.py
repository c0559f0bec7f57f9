"""Verification -- re-check files to confirm EXIF has been removed."""

import logging
from pathlib import Path
from typing import Callable, Iterable, List, Optional

from exifstrip.errors import ExifStripError, MalformedMarkerError
from exifstrip.exif import EXIF_HEADER, parse_app1
from exifstrip.jpeg import MARKER_APP1, MARKER_SOS, Segment, iter_segments
from exifstrip.models import CheckResult
from exifstrip.processor import collect_jpeg_files
from exifstrip.stripper import is_orientation_only_segment

logger = logging.getLogger(__name__)


def is_exif_segment(data: bytes, segment: Segment) -> bool:
    """True for an APP1 segment whose payload starts with the EXIF identifier.

    Other APP1 users (XMP in particular) share the marker but not the
    identifier.
    """
    start = segment.payload_offset
    return (segment.marker == MARKER_APP1
            and data[start:start + len(EXIF_HEADER)] == EXIF_HEADER)


def find_exif_segments(data: bytes) -> List[Segment]:
    """Collect every EXIF APP1 segment ahead of the first scan.

    A malformed marker ends the walk the same way the end of the buffer
    does. Other walk errors propagate.
    """
    found = []
    try:
        for segment in iter_segments(data):
            if segment.marker == MARKER_SOS:
                break
            if is_exif_segment(data, segment):
                found.append(segment)
    except MalformedMarkerError as e:
        logger.debug("marker walk ended early: %s", e)
    return found


def check_bytes(data: bytes, filepath: Path = None) -> CheckResult:
    """Inspect a JPEG buffer for EXIF APP1 segments.

    Offset, length and orientation describe the first EXIF segment. The
    buffer counts as orientation-only when every EXIF segment is the minimal
    Orientation segment. Parse errors propagate to the caller.
    """
    result = CheckResult(filepath=Path(filepath) if filepath else None,
                         file_size=len(data))
    segments = find_exif_segments(data)
    if not segments:
        return result

    first = segments[0]
    result.has_exif = True
    result.segment_offset = first.offset
    result.segment_length = first.length
    result.orientation = parse_app1(data, first).orientation
    result.orientation_only = all(
        is_orientation_only_segment(data, segment) for segment in segments)
    return result


def check_file(filepath: Path) -> CheckResult:
    """Inspect a file; read and parse failures land in CheckResult.error."""
    filepath = Path(filepath)
    try:
        data = filepath.read_bytes()
    except OSError as e:
        return CheckResult(filepath=filepath, error=str(e))
    try:
        return check_bytes(data, filepath)
    except ExifStripError as e:
        return CheckResult(filepath=filepath, file_size=len(data), error=str(e))


def verify_file(filepath: Path) -> CheckResult:
    """Verify that a file carries no EXIF beyond the Orientation tag.

    Returns CheckResult where is_clean=True means nothing else remains.
    """
    return check_file(filepath)


def verify_batch(
    path: Path,
    extensions: Optional[Iterable[str]] = None,
    progress_callback: Optional[Callable] = None,
) -> List[CheckResult]:
    """Verify a batch of files.

    Args:
        path: File or directory to verify.
        extensions: File extensions to collect (defaults to the JPEG set).
        progress_callback: Called with (index, total, filepath, result) after each file.
    """
    files = collect_jpeg_files(Path(path), extensions)
    total = len(files)
    results = []

    for i, filepath in enumerate(files):
        result = verify_file(filepath)
        results.append(result)

        if progress_callback:
            progress_callback(i + 1, total, filepath, result)

    return results
