#!/usr/bin/env python3
"""
PixelStack Command Line Interface

Main CLI entry point for rendering edit histories onto images and
managing edit history files.
"""

import click
import logging
from pathlib import Path
from typing import Optional

from pixelstack.config import load_config, get_config_value, EngineSettings
from pixelstack.cli.edit_commands import history
from pixelstack.errors import PixelStackError
from pixelstack.io.bitmap import load_image, save_image
from pixelstack.processing.engine import CompositionEngine
from pixelstack.processing.history import EditHistory
from pixelstack.utils.logging import setup_console_logging

logger = logging.getLogger(__name__)


@click.group()
@click.option('--config', '-c', type=click.Path(exists=True),
              help='Configuration file path')
@click.option('--verbose', '-v', is_flag=True, help='Enable verbose logging')
@click.option('--quiet', '-q', is_flag=True, help='Suppress non-error output')
@click.pass_context
def main(ctx, config: Optional[str] = None, verbose: bool = False, quiet: bool = False):
    """
    PixelStack - non-destructive image editing

    Replays crop, rotate, filter and adjustment edits stored in an edit
    history file onto an original image.
    """
    if ctx.obj is None:
        ctx.obj = {}

    cfg = load_config(config) if config else load_config()

    root_logger = logging.getLogger()
    if not root_logger.handlers:
        setup_console_logging(
            level=get_config_value(cfg, 'logging.level', 'INFO'),
            fmt=get_config_value(cfg, 'logging.format',
                                 '%(asctime)s - %(name)s - %(levelname)s - %(message)s'),
        )
    if verbose:
        root_logger.setLevel(logging.DEBUG)
    elif quiet:
        root_logger.setLevel(logging.ERROR)

    ctx.obj['config'] = cfg
    ctx.obj['verbose'] = verbose
    ctx.obj['quiet'] = quiet


@main.command()
@click.argument('image', type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.argument('history_file', type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option('--output', '-o', required=True, type=click.Path(dir_okay=False, path_type=Path),
              help='Where to write the rendered image')
@click.option('--format', '-f', 'fmt', help='Output format (default: from the output suffix)')
@click.option('--quality', type=click.IntRange(1, 100), help='Quality for lossy formats')
@click.pass_context
def render(ctx, image: Path, history_file: Path, output: Path,
           fmt: Optional[str] = None, quality: Optional[int] = None):
    """
    Render an edit history onto an image.

    IMAGE: Original image file
    HISTORY_FILE: JSON edit history
    """
    config = ctx.obj.get('config', {})
    quiet = ctx.obj.get('quiet', False)

    if quality is None:
        quality = int(get_config_value(config, 'export.quality', 90))

    try:
        original = load_image(image)
        edits = EditHistory.load(history_file)
        engine = CompositionEngine(EngineSettings.from_config(config))
        result = engine.composite_full(original, edits)
        save_image(result, output, fmt=fmt, quality=quality)
    except (PixelStackError, OSError, ValueError) as e:
        logger.error(f"Render failed: {e}")
        raise click.ClickException(str(e))

    if not quiet:
        summary = engine.last_stats.get_summary()
        click.echo(f"Rendered {image.name}: {original.width}x{original.height} -> "
                   f"{result.width}x{result.height}")
        click.echo(f"  Applied edits: {summary['applied_edits']}/{summary['total_edits']}")
        if summary['skipped_edits']:
            click.echo(f"  Skipped edits: {summary['skipped_edits']}")
        click.echo(f"  Output: {output}")


main.add_command(history)


if __name__ == '__main__':
    main()
