"""
Core data types for PixelStack
"""

from .buffer import PixelBuffer, RgbaColor, TRANSPARENT

__all__ = [
    "PixelBuffer",
    "RgbaColor",
    "TRANSPARENT",
]
