"""
Edit processing modules for PixelStack

Includes color filters, tonal adjustments, geometry operations, edit
histories and the composition engine that replays them.
"""

from .filters import FilterType, apply_filter, get_filter_name
from .adjustments import apply_adjustments
from .geometry import crop, rotate
from .history import (
    EditKind,
    CropParameters,
    RotateParameters,
    FilterParameters,
    AdjustmentParameters,
    Edit,
    EditHistory,
    create_edit,
    crop_edit,
    rotate_edit,
    filter_edit,
    adjustment_edit,
)
from .engine import CompositionEngine
from .session import EditSession

__all__ = [
    "FilterType",
    "apply_filter",
    "get_filter_name",
    "apply_adjustments",
    "crop",
    "rotate",
    "EditKind",
    "CropParameters",
    "RotateParameters",
    "FilterParameters",
    "AdjustmentParameters",
    "Edit",
    "EditHistory",
    "create_edit",
    "crop_edit",
    "rotate_edit",
    "filter_edit",
    "adjustment_edit",
    "CompositionEngine",
    "EditSession",
]
