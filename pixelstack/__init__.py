"""
PixelStack: non-destructive image edit engine

Applies ordered, replayable stacks of crop, rotate, filter and adjustment
edits to decoded RGBA images.
"""

__version__ = "0.1.0"
__author__ = "Sam Scarrow"

from .config import load_config, EngineSettings
from .core.buffer import PixelBuffer
from .processing.history import Edit, EditHistory, EditKind, create_edit
from .processing.engine import CompositionEngine
from .processing.session import EditSession

__all__ = [
    "load_config",
    "EngineSettings",
    "PixelBuffer",
    "Edit",
    "EditHistory",
    "EditKind",
    "create_edit",
    "CompositionEngine",
    "EditSession",
]
