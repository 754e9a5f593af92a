"""
Color filter kernels for PixelStack

Each filter maps the RGB of a pixel to a transformed RGB and blends the
result with the original by ``intensity / 100``. Alpha is never touched.
"""

import numpy as np
from typing import Callable, Dict, Optional, Union
import logging
from enum import Enum

from pixelstack.core.buffer import PixelBuffer

logger = logging.getLogger(__name__)


class FilterType(Enum):
    """Available color filters"""
    NONE = "none"
    GRAYSCALE = "grayscale"
    SEPIA = "sepia"
    INVERT = "invert"
    VINTAGE = "vintage"
    BLUEPRINT = "blueprint"
    NOIR = "noir"


FILTER_NAMES: Dict[FilterType, str] = {
    FilterType.NONE: "None",
    FilterType.GRAYSCALE: "Grayscale",
    FilterType.SEPIA: "Sepia",
    FilterType.INVERT: "Invert",
    FilterType.VINTAGE: "Vintage",
    FilterType.BLUEPRINT: "Blueprint",
    FilterType.NOIR: "Noir",
}

SEPIA_MATRIX = np.array([
    [0.393, 0.769, 0.189],
    [0.349, 0.686, 0.168],
    [0.272, 0.534, 0.131],
])

VINTAGE_MATRIX = np.array([
    [0.90, 0.05, 0.05],
    [0.05, 0.90, 0.05],
    [0.05, 0.05, 0.90],
])

BLUEPRINT_TINT = np.array([0.1, 0.3, 1.0])

NOIR_WEIGHTS = np.array([0.3, 0.59, 0.11])
NOIR_GAIN = 1.5


def coerce_filter_type(value: Union[FilterType, str, None]) -> Optional[FilterType]:
    """Resolve a filter type from an enum member or its string value; None if unknown."""
    if isinstance(value, FilterType):
        return value
    if value is None:
        return None
    try:
        return FilterType(str(value).lower())
    except ValueError:
        return None


def get_filter_name(filter_type: Union[FilterType, str, None]) -> str:
    """Display name of a filter type, 'Unknown' for unrecognized values."""
    resolved = coerce_filter_type(filter_type)
    if resolved is None:
        return "Unknown"
    return FILTER_NAMES[resolved]


def to_uint8(values: np.ndarray) -> np.ndarray:
    """Clamp to [0, 255] and round half to even, as clamped 8-bit stores do."""
    return np.rint(np.clip(values, 0.0, 255.0)).astype(np.uint8)


def _grayscale(rgb: np.ndarray) -> np.ndarray:
    avg = rgb.sum(axis=-1, keepdims=True) / 3.0
    return np.repeat(avg, 3, axis=-1)


def _sepia(rgb: np.ndarray) -> np.ndarray:
    return rgb @ SEPIA_MATRIX.T


def _invert(rgb: np.ndarray) -> np.ndarray:
    return 255.0 - rgb


def _vintage(rgb: np.ndarray) -> np.ndarray:
    return rgb @ VINTAGE_MATRIX.T


def _blueprint(rgb: np.ndarray) -> np.ndarray:
    avg = rgb.sum(axis=-1, keepdims=True) / 3.0
    return avg * BLUEPRINT_TINT


def _noir(rgb: np.ndarray) -> np.ndarray:
    gray = rgb @ NOIR_WEIGHTS
    boosted = np.minimum(255.0, gray * NOIR_GAIN)
    return np.repeat(boosted[..., np.newaxis], 3, axis=-1)


FILTER_TRANSFORMS: Dict[FilterType, Callable[[np.ndarray], np.ndarray]] = {
    FilterType.GRAYSCALE: _grayscale,
    FilterType.SEPIA: _sepia,
    FilterType.INVERT: _invert,
    FilterType.VINTAGE: _vintage,
    FilterType.BLUEPRINT: _blueprint,
    FilterType.NOIR: _noir,
}


def apply_filter(buffer: PixelBuffer, filter_type: Union[FilterType, str, None],
                 intensity: float = 100.0) -> PixelBuffer:
    """
    Apply a color filter to a buffer in place.

    Args:
        buffer: Buffer to modify
        filter_type: Filter to apply; NONE leaves the buffer untouched
        intensity: Blend strength 0-100 (0 = identity, 100 = full effect)

    Returns:
        The same buffer, for chaining
    """
    resolved = coerce_filter_type(filter_type)
    if resolved is None:
        logger.warning(f"Ignoring unknown filter type: {filter_type!r}")
        return buffer
    if resolved is FilterType.NONE or buffer.is_empty:
        return buffer

    intensity = float(intensity)
    if not 0.0 <= intensity <= 100.0:
        logger.debug(f"Clamping filter intensity {intensity} to [0, 100]")
        intensity = min(100.0, max(0.0, intensity))
    factor = intensity / 100.0

    samples = buffer.samples
    rgb = samples[..., :3].astype(np.float64)
    transformed = FILTER_TRANSFORMS[resolved](rgb)
    samples[..., :3] = to_uint8(rgb * (1.0 - factor) + transformed * factor)
    return buffer
