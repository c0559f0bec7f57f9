"""CLI interface for exifstrip -- strip, verify, info subcommands."""

import sys
import time
from pathlib import Path

import click

import exifstrip
from exifstrip import log
from exifstrip.config import StripConfig
from exifstrip.errors import ExifStripError
from exifstrip.exif import ORIENTATION_NAMES, parse_app1
from exifstrip.jpeg import MARKER_SOS, iter_segments
from exifstrip.processor import collect_jpeg_files, strip_batch
from exifstrip.verify import check_file, is_exif_segment, verify_batch


def _load_config(config_path) -> StripConfig:
    if not config_path:
        return StripConfig.default()
    try:
        return StripConfig.from_json(config_path)
    except (OSError, ValueError) as e:
        raise click.BadParameter(str(e), param_hint='--config')


@click.group()
@click.version_option(version=exifstrip.__version__, prog_name='exifstrip')
@click.option('--no-color', is_flag=True, help='Disable colored output.')
def main(no_color):
    """exifstrip -- remove EXIF metadata from JPEG files.

    By default the Orientation tag is kept so images still display upright.
    """
    if no_color:
        log.set_color_enabled(False)


@main.command()
@click.argument('path', type=click.Path(exists=True))
@click.option('--output', '-o', type=click.Path(),
              help='Output directory (copy mode). If omitted, strips in-place.')
@click.option('--in-place', is_flag=True,
              help='Explicitly confirm in-place stripping (required if no --output).')
@click.option('--all', 'strip_everything', is_flag=True,
              help='Remove the Orientation tag too.')
@click.option('--dry-run', is_flag=True, help='Inspect only, don\'t modify files.')
@click.option('--no-verify', is_flag=True, help='Skip post-strip verification.')
@click.option('--workers', '-w', type=click.IntRange(min=1), default=None,
              help='Number of parallel workers (default: 1, sequential).')
@click.option('--config', 'config_path', type=click.Path(exists=True, dir_okay=False),
              help='JSON settings file; command-line flags take precedence.')
@click.option('--log', 'log_path', type=click.Path(), help='Write log to file.')
@click.option('--verbose', '-v', is_flag=True, help='Show files without EXIF too.')
def strip(path, output, in_place, strip_everything, dry_run, no_verify, workers,
          config_path, log_path, verbose):
    """Strip EXIF from JPEG files.

    PATH can be a single file or a directory to process recursively.
    """
    config = _load_config(config_path)
    input_path = Path(path)
    output_dir = Path(output) if output else None

    if output_dir is None and not in_place and not dry_run:
        click.echo(log.cli_error('Error: Must specify --output for copy mode, or '
                                 '--in-place to modify originals directly.'), err=True)
        sys.exit(1)

    keep_orientation = config.keep_orientation and not strip_everything
    verify = config.verify and not no_verify
    workers = workers or config.workers

    log_file = open(log_path, 'w') if log_path else None

    def log_msg(msg, styled=None, level=log.log_info):
        click.echo(styled or msg)
        if log_file:
            log_file.write(level(msg) + '\n')
            log_file.flush()

    try:
        files = collect_jpeg_files(input_path, config.extensions)
        if not files:
            log_msg(f'No JPEG files found in {input_path}')
            return

        mode_str = 'DRY RUN' if dry_run else ('copy' if output_dir else 'in-place')
        what = 'keeping orientation' if keep_orientation else 'all EXIF'
        log_msg(f'exifstrip v{exifstrip.__version__} -- {mode_str}, {what}',
                log.cli_header(f'exifstrip v{exifstrip.__version__} -- {mode_str}, {what}'))
        log_msg(f'Processing {len(files)} file(s)...')

        def progress(i, total, filepath, result):
            prefix = f'  [{i}/{total}] {filepath.name}'
            if result.error:
                msg = f'{prefix} | ERROR: {result.error}'
                log_msg(msg, log.cli_error(msg), log.log_error)
            elif result.had_exif:
                status = f'removed {result.bytes_removed} bytes'
                if result.orientation_kept:
                    status += ', orientation kept'
                if result.verified:
                    status += ' [verified]'
                elif verify and not dry_run:
                    msg = f'{prefix} | {status}, verification FAILED: EXIF still present'
                    log_msg(msg, log.cli_warning(msg), log.log_warn)
                    return
                msg = f'{prefix} | {status}'
                log_msg(msg, log.cli_success(msg))
            elif verbose:
                msg = f'{prefix} | no EXIF'
                log_msg(msg, log.cli_dim(msg))

        t0 = time.time()
        batch = strip_batch(
            input_path, output_dir=output_dir,
            keep_orientation=keep_orientation, verify=verify, dry_run=dry_run,
            extensions=config.extensions, progress_callback=progress,
            workers=workers,
        )

        log_msg(f'\nDone in {time.time() - t0:.1f}s')
        log_msg(f'  Total:         {batch.total_files}')
        log_msg(f'  Stripped:      {batch.files_stripped}')
        log_msg(f'  No EXIF:       {batch.files_without_exif}')
        log_msg(f'  Errors:        {batch.files_errored}')
        log_msg(f'  Bytes removed: {batch.bytes_removed}')
    finally:
        if log_file:
            log_file.close()

    if batch.files_errored > 0:
        sys.exit(1)


@main.command()
@click.argument('path', type=click.Path(exists=True))
@click.option('--config', 'config_path', type=click.Path(exists=True, dir_okay=False),
              help='JSON settings file; its extensions select the files to check.')
@click.option('--verbose', '-v', is_flag=True, help='Show clean files too.')
def verify(path, config_path, verbose):
    """Verify that files carry no EXIF beyond the Orientation tag."""
    config = _load_config(config_path)
    input_path = Path(path)
    files = collect_jpeg_files(input_path, config.extensions)

    if not files:
        click.echo(f'No JPEG files found in {input_path}')
        return

    click.echo(f'Verifying {len(files)} file(s)...')

    clean_count = 0
    dirty_count = 0

    def progress(i, total, filepath, result):
        nonlocal clean_count, dirty_count
        if result.is_clean:
            clean_count += 1
            if verbose:
                click.echo(log.cli_success(f'  [{i}/{total}] {filepath.name} -- CLEAN'))
        elif result.error:
            dirty_count += 1
            click.echo(log.cli_error(f'  [{i}/{total}] {filepath.name} -- ERROR: {result.error}'))
        else:
            dirty_count += 1
            click.echo(log.cli_warning(
                f'  [{i}/{total}] {filepath.name} -- EXIF FOUND '
                f'({result.segment_length} bytes at offset {result.segment_offset})'))

    verify_batch(input_path, extensions=config.extensions, progress_callback=progress)

    click.echo(f'\nVerification: {clean_count} clean, {dirty_count} with remaining EXIF')
    if dirty_count > 0:
        click.echo(log.cli_warning('WARNING: Some files still contain EXIF!'))
        sys.exit(1)
    else:
        click.echo(log.cli_success('All files verified clean.'))


@main.command()
@click.argument('path', type=click.Path(exists=True, dir_okay=False))
def info(path):
    """Show the marker segments and EXIF status of a JPEG file."""
    filepath = Path(path)
    data = filepath.read_bytes()

    click.echo(log.cli_bold(f'File: {filepath.name}'))
    click.echo(f'Size: {len(data)} bytes')
    click.echo(log.cli_separator())

    try:
        for segment in iter_segments(data):
            click.echo(f'  {segment.name:<6} offset {segment.offset:>8}  length {segment.length:>6}')
            if segment.marker == MARKER_SOS:
                break
            if is_exif_segment(data, segment):
                exif = parse_app1(data, segment)
                click.echo(log.cli_info(
                    f'         EXIF {exif.header.byte_order_mark.decode("ascii")}, '
                    f'{exif.tag_count} tag(s) in IFD0'))
    except ExifStripError as e:
        click.echo(log.cli_dim(f'  (walk stopped: {e})'))

    click.echo(log.cli_separator())
    result = check_file(filepath)
    if result.error:
        click.echo(log.cli_error(f'EXIF Status: ERROR ({result.error})'))
        sys.exit(1)
    if not result.has_exif:
        click.echo(log.cli_success('EXIF Status: none'))
        return

    if result.orientation_only:
        click.echo(log.cli_success('EXIF Status: orientation only'))
    else:
        click.echo(log.cli_warning(f'EXIF Status: present ({result.segment_length} bytes)'))
    if result.orientation is not None:
        name = ORIENTATION_NAMES.get(result.orientation, 'unknown')
        click.echo(f'Orientation: {result.orientation} ({name})')


if __name__ == '__main__':
    main()
