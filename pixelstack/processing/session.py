"""
Editing session for a single image.

Keeps the original buffer, its edit history and the last composite. New
edits take the incremental path only when the cached composite is known to
come from the current history; removals, updates, undo and any external
change to the history force a full replay.
"""

import logging
from typing import Any, Optional

from pixelstack.core.buffer import PixelBuffer
from pixelstack.processing.engine import CompositionEngine
from pixelstack.processing.history import Edit, EditHistory

logger = logging.getLogger(__name__)


class EditSession:
    """Original image + edit history + cached composite."""

    def __init__(self, original: PixelBuffer,
                 engine: Optional[CompositionEngine] = None,
                 history: Optional[EditHistory] = None):
        """
        Start a session.

        Args:
            original: Decoded original image; copied, never modified
            engine: Composition engine, a default one if omitted
            history: Existing edits to resume from
        """
        self.engine = engine or CompositionEngine()
        self.engine._validate_source(original, "Original")
        self._original = original.clone()
        self.history = history.copy() if history is not None else EditHistory()

        self._composite: Optional[PixelBuffer] = None
        self._composite_fingerprint: Optional[tuple] = None
        if not self.history.is_edited:
            self._store(self._original.clone())

    @property
    def original(self) -> PixelBuffer:
        return self._original.clone()

    @property
    def is_edited(self) -> bool:
        return self.history.is_edited

    def _store(self, composite: PixelBuffer) -> None:
        self._composite = composite
        self._composite_fingerprint = self.history.fingerprint()

    def _invalidate(self) -> None:
        self._composite = None
        self._composite_fingerprint = None

    def _cache_is_current(self) -> bool:
        return (self._composite is not None
                and self._composite_fingerprint == self.history.fingerprint())

    def render(self) -> PixelBuffer:
        """Composite of the current history (caller owns the returned buffer)."""
        if not self._cache_is_current():
            self._store(self.engine.composite_full(self._original, self.history))
        return self._composite.clone()

    def add_edit(self, edit: Edit) -> PixelBuffer:
        """
        Append an edit and return the new composite.
        """
        ordered = self.history.ordered_for_replay()
        sorts_last = not ordered or edit.timestamp >= ordered[-1].timestamp
        incremental = (self.engine.settings.incremental
                       and self._cache_is_current()
                       and sorts_last)

        self.history.append(edit)
        if incremental:
            logger.debug(f"Applying edit {edit.id} incrementally")
            self._store(self.engine.composite_incremental(self._composite, edit))
        else:
            logger.debug(f"Replaying full history after adding edit {edit.id}")
            self._store(self.engine.composite_full(self._original, self.history))
        return self._composite.clone()

    def remove_edit(self, edit_id: str) -> bool:
        """Remove an edit; the next render replays the remaining history."""
        removed = self.history.remove(edit_id)
        if removed:
            self._invalidate()
        return removed

    def update_edit(self, edit_id: str, **changes: Any) -> Optional[Edit]:
        updated = self.history.update(edit_id, **changes)
        if updated is not None:
            self._invalidate()
        return updated

    def undo(self) -> Optional[Edit]:
        """Drop the last edit in replay order."""
        removed = self.history.pop()
        if removed is not None:
            self._invalidate()
            logger.debug(f"Undid edit {removed.id}")
        return removed

    def reset(self) -> None:
        """Discard every edit and return to the original image."""
        self.history.clear()
        self._store(self._original.clone())
        logger.info("Reset edit session to original image")
