"""
Tonal adjustment kernels for PixelStack

Brightness, contrast and saturation are per-pixel functions; blur is a
whole-buffer convolution. ``apply_adjustments`` runs them in that fixed
order and each step stores 8-bit results before the next one reads them.
"""

import math
import numpy as np
import cv2
import logging

from pixelstack.core.buffer import PixelBuffer
from pixelstack.processing.filters import to_uint8

logger = logging.getLogger(__name__)

# Rec. 601 luma weights used by the saturation adjustment
SATURATION_WEIGHTS = np.array([0.2989, 0.5870, 0.1140])

MAX_BLUR = 20.0


def _rgb(buffer: PixelBuffer) -> np.ndarray:
    return buffer.samples[..., :3].astype(np.float64)


def apply_brightness(buffer: PixelBuffer, brightness: float) -> PixelBuffer:
    """Shift every color channel by ``255 * brightness / 100``."""
    if brightness == 0 or buffer.is_empty:
        return buffer
    offset = 255.0 * (brightness / 100.0)
    buffer.samples[..., :3] = to_uint8(_rgb(buffer) + offset)
    return buffer


def apply_contrast(buffer: PixelBuffer, contrast: float) -> PixelBuffer:
    """Scale channels around mid-gray by ``(contrast + 100) / 100``."""
    if contrast == 0 or buffer.is_empty:
        return buffer
    factor = (contrast + 100.0) / 100.0
    normalized = _rgb(buffer) / 255.0
    buffer.samples[..., :3] = to_uint8(((normalized - 0.5) * factor + 0.5) * 255.0)
    return buffer


def apply_saturation(buffer: PixelBuffer, saturation: float) -> PixelBuffer:
    """Push channels away from (or toward) the pixel's own luma."""
    if saturation == 0 or buffer.is_empty:
        return buffer
    factor = (saturation + 100.0) / 100.0
    rgb = _rgb(buffer)
    gray = (rgb @ SATURATION_WEIGHTS)[..., np.newaxis]
    buffer.samples[..., :3] = to_uint8(gray + factor * (rgb - gray))
    return buffer


def blur_kernel_size(blur: float) -> int:
    """
    Box width whose repeated application approximates a gaussian of
    standard deviation ``blur``. Always odd so the box stays centered, and
    at least 3 wide for any positive blur.
    """
    if blur <= 0:
        return 1
    size = int(math.floor(blur * 3.0 * math.sqrt(2.0 * math.pi) / 4.0 + 0.5))
    if size % 2 == 0:
        size += 1
    return max(3, size)


def apply_blur(buffer: PixelBuffer, blur: float, passes: int = 3) -> PixelBuffer:
    """
    Blur all four channels with repeated box filters.

    Edge pixels are replicated rather than wrapped, so no sample outside the
    buffer is ever read.

    Args:
        buffer: Buffer to modify
        blur: Blur radius in pixels (0-20); 0 is a no-op
        passes: Number of box passes
    """
    if blur <= 0 or buffer.is_empty:
        return buffer
    if blur > MAX_BLUR:
        logger.debug(f"Clamping blur {blur} to {MAX_BLUR}")
        blur = MAX_BLUR

    size = blur_kernel_size(blur)
    blurred = buffer.samples
    for _ in range(passes):
        blurred = cv2.blur(blurred, (size, size), borderType=cv2.BORDER_REPLICATE)
    buffer.samples[...] = blurred
    return buffer


def apply_adjustments(buffer: PixelBuffer, brightness: float = 0.0, contrast: float = 0.0,
                      saturation: float = 0.0, blur: float = 0.0,
                      blur_passes: int = 3) -> PixelBuffer:
    """
    Apply tonal adjustments to a buffer in place.

    Only non-zero values take effect, in the order brightness, contrast,
    saturation, blur.

    Returns:
        The same buffer, for chaining
    """
    apply_brightness(buffer, brightness)
    apply_contrast(buffer, contrast)
    apply_saturation(buffer, saturation)
    apply_blur(buffer, blur, passes=blur_passes)
    return buffer
