"""
Composition engine for PixelStack

Replays an edit history onto a copy of the original image. Every call owns
its working buffer, so the original is never modified and concurrent calls
share no mutable state.
"""

import time
import logging
from typing import Iterable, Optional

from pixelstack.config import EngineSettings
from pixelstack.core.buffer import PixelBuffer
from pixelstack.errors import DegenerateGeometryError, InvalidBufferError, UnknownEditKindError
from pixelstack.processing import geometry
from pixelstack.processing.adjustments import apply_adjustments
from pixelstack.processing.filters import apply_filter
from pixelstack.processing.history import CropParameters, Edit, EditHistory, EditKind
from pixelstack.utils.logging import CompositeStats, StructuredLogger

logger = logging.getLogger(__name__)


class CompositionEngine:
    """
    Applies edits to pixel buffers.

    ``composite_full`` is a pure function of (original, history): the same
    inputs always produce pixel-identical output.
    """

    def __init__(self, settings: Optional[EngineSettings] = None):
        """
        Initialize the engine.

        Args:
            settings: Engine tunables; defaults match the packaged config.yaml
        """
        self.settings = settings or EngineSettings()
        self.last_stats: Optional[CompositeStats] = None
        self._log = StructuredLogger(__name__)

    @staticmethod
    def _validate_source(buffer: PixelBuffer, role: str) -> None:
        if not isinstance(buffer, PixelBuffer):
            raise InvalidBufferError(f"{role} must be a PixelBuffer, got {type(buffer).__name__}")
        if buffer.is_empty:
            raise InvalidBufferError(f"{role} buffer is zero-sized ({buffer.width}x{buffer.height})")

    def composite_full(self, original: PixelBuffer,
                       history: EditHistory) -> PixelBuffer:
        """
        Replay every edit of ``history`` onto a clone of ``original``.

        Edits that cannot be applied are skipped and logged; the rest of the
        stack still runs.

        Raises:
            InvalidBufferError: If ``original`` is zero-sized or malformed
        """
        self._validate_source(original, "Original")
        edits = history.ordered_for_replay() if isinstance(history, EditHistory) \
            else sorted(history, key=lambda edit: edit.timestamp)

        working = original.clone()
        stats = CompositeStats(mode="full")
        stats.set_total(len(edits))
        self._replay(working, edits, stats)
        self._finish(stats, working)
        return working

    def composite_incremental(self, current_composited: PixelBuffer,
                              new_edit: Edit) -> PixelBuffer:
        """
        Apply one new edit to a clone of an already composited buffer.

        Matches ``composite_full`` with ``new_edit`` appended, provided
        ``current_composited`` was produced from the unmodified history and
        ``new_edit`` sorts after every edit in it. That precondition is not
        re-checked here; EditSession verifies it before taking this path.
        """
        self._validate_source(current_composited, "Composited")
        working = current_composited.clone()
        stats = CompositeStats(mode="incremental")
        stats.set_total(1)
        self._replay(working, [new_edit], stats)
        self._finish(stats, working)
        return working

    def _replay(self, working: PixelBuffer, edits: Iterable[Edit],
                stats: CompositeStats) -> None:
        for edit in edits:
            edit_log = self._log.for_edit(edit.id, edit.kind_name)
            started = time.perf_counter()
            try:
                degenerate = self.apply_edit(working, edit)
            except UnknownEditKindError as e:
                edit_log.warning("Skipping edit", reason=str(e))
                stats.add_skipped(edit.id, str(e))
                continue
            except Exception as e:
                edit_log.error("Failed to apply edit", error=f"{type(e).__name__}: {e}")
                stats.add_skipped(edit.id, f"{type(e).__name__}: {e}")
                continue
            if degenerate:
                edit_log.warning("Crop left no area, buffer collapsed",
                                 size=f"{working.width}x{working.height}")
                stats.add_degenerate(edit.id)
            stats.add_applied(edit.id, time.perf_counter() - started)

    def _finish(self, stats: CompositeStats, working: PixelBuffer) -> None:
        self.last_stats = stats
        summary = stats.get_summary()
        if stats.skipped_count:
            self._log.warning("Composite finished with skipped edits",
                              skipped=summary['skip_reasons'])
        logger.debug(
            f"Composite ({stats.mode}) applied {summary['applied_edits']}/{summary['total_edits']} "
            f"edits -> {working.width}x{working.height} in {summary['elapsed_time']:.3f}s"
        )

    def apply_edit(self, buffer: PixelBuffer, edit: Edit) -> bool:
        """
        Apply a single edit to ``buffer`` in place.

        Returns:
            True if a geometry edit degenerated to the minimal buffer

        Raises:
            UnknownEditKindError: If the edit kind is not recognized
        """
        kind = edit.kind
        params = edit.parameters

        if kind is EditKind.CROP:
            return self._apply_crop(buffer, params)
        elif kind is EditKind.ROTATE:
            if params.angle_degrees is not None:
                geometry.rotate(buffer, params.angle_degrees,
                                interpolation=self.settings.rotate_interpolation)
            return False
        elif kind is EditKind.FILTER:
            if params.filter_type is not None:
                apply_filter(buffer, params.filter_type, params.intensity)
            return False
        elif kind is EditKind.ADJUSTMENT:
            apply_adjustments(
                buffer,
                brightness=params.brightness,
                contrast=params.contrast,
                saturation=params.saturation,
                blur=params.blur,
                blur_passes=self.settings.blur_passes,
            )
            return False
        raise UnknownEditKindError(kind)

    def _apply_crop(self, buffer: PixelBuffer, params: CropParameters) -> bool:
        if not params.is_complete:
            logger.debug("Crop edit without a complete rectangle, leaving buffer unchanged")
            return False
        try:
            rect = geometry.clamp_crop_rect(buffer.width, buffer.height,
                                            params.x, params.y, params.width, params.height)
        except DegenerateGeometryError as e:
            logger.debug(f"Degenerate crop: {e}")
            geometry.collapse(buffer, self.settings.min_buffer_size)
            return True
        geometry.extract_region(buffer, rect)
        return False
