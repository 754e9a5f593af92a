"""
Geometry operations for PixelStack

Crop replaces the working buffer with a clamped sub-rectangle. Rotate turns
the content about the buffer center while keeping the canvas size, so
corners that leave the canvas are cut off and uncovered areas become
transparent.
"""

import numpy as np
import cv2
from typing import Tuple
import logging

from pixelstack.core.buffer import PixelBuffer
from pixelstack.errors import DegenerateGeometryError

logger = logging.getLogger(__name__)

CropRect = Tuple[int, int, int, int]  # (x0, y0, x1, y1), end-exclusive

INTERPOLATION_FLAGS = {
    'nearest': cv2.INTER_NEAREST,
    'bilinear': cv2.INTER_LINEAR,
}


def clamp_crop_rect(buffer_width: int, buffer_height: int,
                    x: float, y: float, width: float, height: float) -> CropRect:
    """
    Clamp a crop rectangle to the buffer extent.

    Args:
        buffer_width: Width of the buffer being cropped
        buffer_height: Height of the buffer being cropped
        x, y: Top-left corner of the requested rectangle (may be negative)
        width, height: Requested rectangle size

    Returns:
        (x0, y0, x1, y1) with 0 <= x0 < x1 <= buffer_width and
        0 <= y0 < y1 <= buffer_height

    Raises:
        DegenerateGeometryError: If nothing of the rectangle lies inside the buffer
    """
    x, y = int(round(x)), int(round(y))
    width, height = int(round(width)), int(round(height))

    x0 = min(max(x, 0), buffer_width)
    y0 = min(max(y, 0), buffer_height)
    x1 = min(max(x + width, 0), buffer_width)
    y1 = min(max(y + height, 0), buffer_height)

    if x1 <= x0 or y1 <= y0:
        raise DegenerateGeometryError(
            f"Crop {width}x{height} at ({x}, {y}) has no area inside "
            f"{buffer_width}x{buffer_height} buffer"
        )
    return x0, y0, x1, y1


def collapse(buffer: PixelBuffer, min_size: int = 1) -> PixelBuffer:
    """Reduce the buffer to a transparent ``min_size`` square."""
    buffer.resize(min_size, min_size)
    return buffer


def extract_region(buffer: PixelBuffer, rect: CropRect) -> PixelBuffer:
    """Make the given (already clamped) region the whole buffer."""
    x0, y0, x1, y1 = rect
    buffer.replace(buffer.samples[y0:y1, x0:x1].copy())
    return buffer


def crop(buffer: PixelBuffer, x: float, y: float, width: float, height: float,
         min_size: int = 1) -> PixelBuffer:
    """
    Crop a buffer in place to the given rectangle.

    Out-of-range rectangles are clamped; a rectangle with no overlap leaves
    a minimal transparent buffer instead of failing.
    """
    try:
        rect = clamp_crop_rect(buffer.width, buffer.height, x, y, width, height)
    except DegenerateGeometryError as e:
        logger.warning(f"Degenerate crop, collapsing buffer: {e}")
        return collapse(buffer, min_size)
    return extract_region(buffer, rect)


def rotation_matrix(width: int, height: int, angle_degrees: float) -> np.ndarray:
    """
    Forward affine matrix rotating clockwise about the pixel-grid center.

    OpenCV treats positive angles as counter-clockwise, hence the negation.
    """
    center = ((width - 1) / 2.0, (height - 1) / 2.0)
    return cv2.getRotationMatrix2D(center, -angle_degrees, 1.0)


def rotate(buffer: PixelBuffer, angle_degrees: float,
           interpolation: str = 'bilinear') -> PixelBuffer:
    """
    Rotate a buffer in place, keeping its dimensions.

    Each destination pixel is sampled from the source through the inverse
    rotation; samples landing outside the source are transparent black.

    Args:
        buffer: Buffer to rotate
        angle_degrees: Rotation angle, positive = clockwise
        interpolation: 'nearest' or 'bilinear'
    """
    if interpolation not in INTERPOLATION_FLAGS:
        raise ValueError(
            f"Unknown interpolation: {interpolation}. "
            f"Valid types: {', '.join(INTERPOLATION_FLAGS)}"
        )

    angle = float(angle_degrees) % 360.0
    if angle == 0.0 or buffer.is_empty:
        return buffer

    height, width = buffer.height, buffer.width
    matrix = rotation_matrix(width, height, angle)
    rotated = cv2.warpAffine(
        buffer.samples, matrix, (width, height),
        flags=INTERPOLATION_FLAGS[interpolation],
        borderMode=cv2.BORDER_CONSTANT,
        borderValue=(0, 0, 0, 0),
    )
    buffer.samples[...] = rotated
    return buffer
