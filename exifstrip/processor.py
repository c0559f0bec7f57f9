"""File-level EXIF stripping -- copy mode, in-place mode, and batch processing.

Supports both sequential and parallel (thread pool) batch processing.
The byte-level work is done by exifstrip.stripper; this module only reads,
writes and tallies.
"""

import logging
import os
import shutil
import threading
import time
from concurrent.futures import ThreadPoolExecutor, as_completed
from pathlib import Path
from typing import Callable, Iterable, List, Optional

from exifstrip.config import DEFAULT_EXTENSIONS
from exifstrip.errors import ExifNotPresentError, ExifStripError
from exifstrip.models import BatchResult, StripResult
from exifstrip.stripper import rewrite

logger = logging.getLogger(__name__)


def _write_atomic(target: Path, data: bytes):
    """Write data next to target, then rename over it."""
    tmp = target.with_name(target.name + '.exifstrip-tmp')
    try:
        tmp.write_bytes(data)
        shutil.copystat(str(target), str(tmp))
        os.replace(str(tmp), str(target))
    finally:
        if tmp.exists():
            tmp.unlink()


def strip_file(
    filepath: Path,
    output_path: Optional[Path] = None,
    keep_orientation: bool = True,
    verify: bool = True,
    dry_run: bool = False,
) -> StripResult:
    """Strip EXIF from a single JPEG file.

    Args:
        filepath: Path to the source file.
        output_path: If provided, write the result here (copy mode).
                     If None, rewrite the source in place.
        keep_orientation: Keep a minimal segment with the Orientation tag.
        verify: Re-check the written file for leftover EXIF.
        dry_run: Only inspect; write nothing.

    Returns:
        StripResult. Files without EXIF are not errors: had_exif is False,
        and in copy mode the file is copied unchanged.
    """
    filepath = Path(filepath)
    t0 = time.monotonic()

    if output_path is not None:
        mode = "copy"
        target = Path(output_path)
    else:
        mode = "inplace"
        target = filepath

    def _result(**kwargs):
        return StripResult(
            source_path=filepath, output_path=target, mode=mode,
            strip_time_ms=(time.monotonic() - t0) * 1000, **kwargs)

    if not filepath.exists():
        return _result(error=f"File not found: {filepath}")

    try:
        data = filepath.read_bytes()
    except OSError as e:
        return _result(error=str(e))

    try:
        stripped, orientation_kept = rewrite(data, keep_orientation=keep_orientation)
    except ExifNotPresentError as e:
        logger.debug("no EXIF in %s: %s", filepath, e)
        if mode == "copy" and not dry_run:
            target.parent.mkdir(parents=True, exist_ok=True)
            shutil.copy2(str(filepath), str(target))
        return _result(had_exif=False)
    except ExifStripError as e:
        return _result(error=str(e))

    removed = len(data) - len(stripped)
    if dry_run:
        return _result(had_exif=True, orientation_kept=orientation_kept,
                       bytes_removed=removed)

    try:
        if mode == "copy":
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_bytes(stripped)
            shutil.copystat(str(filepath), str(target))
        else:
            _write_atomic(target, stripped)
    except OSError as e:
        return _result(had_exif=True, error=str(e))

    verified = False
    if verify:
        from exifstrip.verify import verify_file
        verified = verify_file(target).is_clean

    return _result(had_exif=True, orientation_kept=orientation_kept,
                   bytes_removed=removed, verified=verified)


def collect_jpeg_files(path: Path, extensions: Optional[Iterable[str]] = None) -> List[Path]:
    """Collect all JPEG files from a path (file or directory).

    A single file is returned as-is regardless of its extension.
    """
    path = Path(path)
    if path.is_file():
        return [path]

    exts = {e.lower() for e in (extensions or DEFAULT_EXTENSIONS)}
    files = []
    for root, _, filenames in os.walk(path):
        for fname in filenames:
            if Path(fname).suffix.lower() in exts:
                files.append(Path(root) / fname)
    files.sort()
    return files


def strip_batch(
    input_path: Path,
    output_dir: Optional[Path] = None,
    keep_orientation: bool = True,
    verify: bool = True,
    dry_run: bool = False,
    extensions: Optional[Iterable[str]] = None,
    progress_callback: Optional[Callable] = None,
    workers: int = 1,
) -> BatchResult:
    """Strip EXIF from a batch of JPEG files.

    Args:
        input_path: File or directory containing JPEG files.
        output_dir: If provided, write results here, mirroring the input tree.
        keep_orientation: Keep the Orientation tag.
        verify: Re-check each written file.
        dry_run: Inspect only.
        extensions: File extensions to collect (defaults to the JPEG set).
        progress_callback: Called with (index, total, filepath, result) after each file.
        workers: Number of parallel workers. 1 = sequential (default).

    Returns:
        BatchResult with summary statistics.
    """
    input_path = Path(input_path)
    t0 = time.monotonic()

    files = collect_jpeg_files(input_path, extensions)
    total = len(files)
    batch = BatchResult(total_files=total)

    file_pairs = []
    for filepath in files:
        if output_dir is not None:
            relative = filepath.relative_to(input_path) if input_path.is_dir() else filepath.name
            out = Path(output_dir) / relative
        else:
            out = None
        file_pairs.append((filepath, out))

    options = dict(keep_orientation=keep_orientation, verify=verify, dry_run=dry_run)
    if workers > 1 and total > 1:
        results = _batch_parallel(file_pairs, options, workers, progress_callback, batch)
    else:
        results = _batch_sequential(file_pairs, options, progress_callback, batch)

    batch.results = results
    batch.total_time_seconds = time.monotonic() - t0
    return batch


def _strip_one(filepath: Path, out: Optional[Path], options: dict) -> StripResult:
    try:
        return strip_file(filepath, output_path=out, **options)
    except Exception as e:
        logger.exception("strip_file failed for %s", filepath)
        return StripResult(
            source_path=filepath,
            output_path=out or filepath,
            mode="copy" if out else "inplace",
            error=str(e),
        )


def _batch_sequential(
    file_pairs: List,
    options: dict,
    progress_callback: Optional[Callable],
    batch: BatchResult,
) -> List[StripResult]:
    results = []
    total = len(file_pairs)

    for i, (filepath, out) in enumerate(file_pairs):
        result = _strip_one(filepath, out, options)
        results.append(result)
        _update_batch_stats(batch, result)

        if progress_callback:
            progress_callback(i + 1, total, filepath, result)

    return results


def _batch_parallel(
    file_pairs: List,
    options: dict,
    workers: int,
    progress_callback: Optional[Callable],
    batch: BatchResult,
) -> List[StripResult]:
    """Process files in a thread pool.

    Results are stored in submission order; progress is reported in
    completion order.
    """
    total = len(file_pairs)
    results = [None] * total
    lock = threading.Lock()
    completed = 0

    with ThreadPoolExecutor(max_workers=workers) as executor:
        futures = {
            executor.submit(_strip_one, filepath, out, options): (i, filepath)
            for i, (filepath, out) in enumerate(file_pairs)
        }

        for future in as_completed(futures):
            index, filepath = futures[future]
            result = future.result()
            results[index] = result

            with lock:
                _update_batch_stats(batch, result)
                completed += 1
                if progress_callback:
                    progress_callback(completed, total, filepath, result)

    return results


def _update_batch_stats(batch: BatchResult, result: StripResult):
    if result.error:
        batch.files_errored += 1
    elif result.had_exif:
        batch.files_stripped += 1
        batch.bytes_removed += result.bytes_removed
    else:
        batch.files_without_exif += 1
