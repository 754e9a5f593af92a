"""
Edit history CLI commands for PixelStack

Provides command-line interface for building and inspecting edit history files.
"""

import click
import logging
from pathlib import Path

from ..errors import PixelStackError
from ..processing.filters import FilterType
from ..processing.history import (
    EditHistory, crop_edit, rotate_edit, filter_edit, adjustment_edit,
)

logger = logging.getLogger(__name__)

HISTORY_PATH = click.Path(dir_okay=False, path_type=Path)


def _load(path: Path) -> EditHistory:
    if not path.exists():
        return EditHistory()
    try:
        return EditHistory.load(path)
    except PixelStackError as e:
        raise click.ClickException(f"Cannot read {path}: {e}")


def _append(path: Path, edit) -> None:
    edits = _load(path)
    edits.append(edit)
    edits.save(path)
    click.echo(f"✓ Added {edit.kind_name} edit {edit.id}: {edit.description}")


@click.group()
def history():
    """Edit history management commands"""
    pass


@history.command()
@click.argument('history_file', type=click.Path(exists=True, dir_okay=False, path_type=Path))
def show(history_file):
    """List edits in replay order"""
    edits = _load(history_file)
    if not edits.is_edited:
        click.echo("No edits.")
        return

    click.echo(f"{'#':<4} {'ID':<38} {'Type':<12} {'Created':<34} Description")
    click.echo("=" * 110)
    for index, edit in enumerate(edits.ordered_for_replay(), start=1):
        click.echo(f"{index:<4} {edit.id:<38} {edit.kind_name:<12} "
                   f"{edit.created_at:<34} {edit.description}")


@history.command('add-crop')
@click.argument('history_file', type=HISTORY_PATH)
@click.option('--x', 'x', type=int, required=True, help='Left edge of the crop')
@click.option('--y', 'y', type=int, required=True, help='Top edge of the crop')
@click.option('--width', '-w', type=click.IntRange(min=1), required=True, help='Crop width')
@click.option('--height', '-h', type=click.IntRange(min=1), required=True, help='Crop height')
def add_crop(history_file, x, y, width, height):
    """Append a crop edit"""
    _append(history_file, crop_edit(x, y, width, height))


@history.command('add-rotate')
@click.argument('history_file', type=HISTORY_PATH)
@click.option('--angle', '-a', type=float, required=True,
              help='Rotation in degrees, positive = clockwise')
def add_rotate(history_file, angle):
    """Append a rotate edit"""
    _append(history_file, rotate_edit(angle))


@history.command('add-filter')
@click.argument('history_file', type=HISTORY_PATH)
@click.argument('filter_type', type=click.Choice([f.value for f in FilterType],
                                                 case_sensitive=False))
@click.option('--intensity', '-i', type=click.FloatRange(0, 100), default=100.0,
              show_default=True, help='Filter strength')
def add_filter(history_file, filter_type, intensity):
    """Append a color filter edit"""
    _append(history_file, filter_edit(filter_type, intensity))


@history.command('add-adjustment')
@click.argument('history_file', type=HISTORY_PATH)
@click.option('--brightness', '-b', type=click.FloatRange(-100, 100), default=0.0)
@click.option('--contrast', '-c', type=click.FloatRange(-100, 100), default=0.0)
@click.option('--saturation', '-s', type=click.FloatRange(-100, 100), default=0.0)
@click.option('--blur', type=click.FloatRange(0, 20), default=0.0)
def add_adjustment(history_file, brightness, contrast, saturation, blur):
    """Append a tonal adjustment edit"""
    edit = adjustment_edit(brightness, contrast, saturation, blur)
    if edit is None:
        raise click.UsageError("At least one adjustment must be non-zero")
    _append(history_file, edit)


@history.command()
@click.argument('history_file', type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.argument('edit_id')
def remove(history_file, edit_id):
    """Remove an edit by id"""
    edits = _load(history_file)
    if edits.remove(edit_id):
        edits.save(history_file)
        click.echo(f"✓ Removed edit {edit_id}")
    else:
        click.echo(f"Edit {edit_id} not found, nothing removed")


@history.command()
@click.argument('history_file', type=click.Path(exists=True, dir_okay=False, path_type=Path))
def undo(history_file):
    """Remove the most recent edit"""
    edits = _load(history_file)
    removed = edits.pop()
    if removed is None:
        click.echo("Nothing to undo")
        return
    edits.save(history_file)
    click.echo(f"✓ Undid {removed.description}")


@history.command()
@click.argument('history_file', type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.confirmation_option(prompt='Remove every edit from this history?')
def clear(history_file):
    """Remove all edits"""
    edits = _load(history_file)
    count = len(edits)
    edits.clear()
    edits.save(history_file)
    click.echo(f"✓ Cleared {count} edits")
