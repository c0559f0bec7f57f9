"""Data models for exifstrip file-level results."""

from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional


@dataclass
class CheckResult:
    """Result of inspecting a single JPEG for EXIF."""
    filepath: Path
    has_exif: bool = False
    segment_offset: Optional[int] = None
    segment_length: Optional[int] = None
    orientation: Optional[int] = None
    orientation_only: bool = False
    file_size: int = 0
    error: Optional[str] = None

    @property
    def is_clean(self) -> bool:
        """No EXIF, or only the minimal orientation-only segment remains."""
        if self.error:
            return False
        return not self.has_exif or self.orientation_only


@dataclass
class StripResult:
    """Result of stripping a single file."""
    source_path: Path
    output_path: Path
    mode: str  # "copy" | "inplace"
    had_exif: bool = False
    orientation_kept: bool = False
    bytes_removed: int = 0
    verified: bool = False
    strip_time_ms: float = 0.0
    error: Optional[str] = None


@dataclass
class BatchResult:
    """Result of a batch strip run."""
    results: List[StripResult] = field(default_factory=list)
    total_files: int = 0
    files_stripped: int = 0
    files_without_exif: int = 0
    files_errored: int = 0
    bytes_removed: int = 0
    total_time_seconds: float = 0.0
