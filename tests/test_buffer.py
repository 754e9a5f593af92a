"""
Tests for the RGBA pixel buffer.
"""

import pytest
import numpy as np

from pixelstack.core.buffer import PixelBuffer
from pixelstack.errors import InvalidBufferError, OutOfBoundsError


class TestAllocation:
    """Test buffer creation."""

    def test_allocate_dimensions(self):
        """Allocated buffers hold width*height*4 zeroed samples."""
        buf = PixelBuffer.allocate(5, 3)

        assert buf.width == 5
        assert buf.height == 3
        assert buf.size == (5, 3)
        assert buf.samples.size == 5 * 3 * 4
        assert not buf.samples.any()

    def test_allocate_with_fill(self):
        buf = PixelBuffer.allocate(2, 2, fill=(255, 0, 0, 255))
        assert buf.get(1, 1) == (255, 0, 0, 255)

    def test_negative_dimensions_rejected(self):
        with pytest.raises(InvalidBufferError):
            PixelBuffer.allocate(-1, 4)

    def test_from_bytes_checks_length(self):
        """Packed data must match width*height*4 exactly."""
        buf = PixelBuffer.from_bytes(2, 1, bytes([1, 2, 3, 4, 5, 6, 7, 8]))
        assert buf.get(1, 0) == (5, 6, 7, 8)

        with pytest.raises(InvalidBufferError):
            PixelBuffer.from_bytes(2, 2, bytes(8))

    def test_from_array_rgb_gets_opaque_alpha(self):
        rgb = np.full((2, 3, 3), 40, dtype=np.uint8)
        buf = PixelBuffer.from_array(rgb)

        assert buf.size == (3, 2)
        assert buf.get(2, 1) == (40, 40, 40, 255)

    def test_from_array_float_scaled(self):
        gray = np.full((2, 2), 1.0, dtype=np.float32)
        buf = PixelBuffer.from_array(gray)
        assert buf.get(0, 0) == (255, 255, 255, 255)

    def test_wrong_dtype_rejected(self):
        with pytest.raises(InvalidBufferError):
            PixelBuffer(np.zeros((2, 2, 4), dtype=np.float32))

    def test_wrong_channel_count_rejected(self):
        with pytest.raises(InvalidBufferError):
            PixelBuffer(np.zeros((2, 2, 3), dtype=np.uint8))


class TestAccess:
    """Test bounds-checked pixel access."""

    def test_set_then_get(self):
        buf = PixelBuffer.allocate(3, 3)
        buf.set(2, 1, (10, 20, 30, 40))

        assert buf.get(2, 1) == (10, 20, 30, 40)
        # Row-major: y indexes rows
        assert tuple(buf.samples[1, 2]) == (10, 20, 30, 40)

    @pytest.mark.parametrize("x,y", [(3, 0), (0, 3), (-1, 0), (0, -1)])
    def test_out_of_bounds_get(self, x, y):
        buf = PixelBuffer.allocate(3, 3)
        with pytest.raises(OutOfBoundsError):
            buf.get(x, y)

    def test_out_of_bounds_set(self):
        buf = PixelBuffer.allocate(3, 3)
        with pytest.raises(IndexError):
            buf.set(3, 3, (0, 0, 0, 0))
        assert not buf.samples.any()

    def test_set_requires_four_channels(self):
        buf = PixelBuffer.allocate(1, 1)
        with pytest.raises(ValueError):
            buf.set(0, 0, (1, 2, 3))


class TestOwnership:
    """Test cloning, resizing and comparison."""

    def test_clone_is_independent(self):
        buf = PixelBuffer.allocate(2, 2, fill=(1, 2, 3, 4))
        copy = buf.clone()
        copy.set(0, 0, (9, 9, 9, 9))

        assert buf.get(0, 0) == (1, 2, 3, 4)
        assert copy != buf

    def test_resize_reallocates(self):
        buf = PixelBuffer.allocate(4, 4, fill=(255, 255, 255, 255))
        buf.resize(2, 3)

        assert buf.size == (2, 3)
        assert buf.samples.size == 2 * 3 * 4
        assert not buf.samples.any()

    def test_equality(self):
        a = PixelBuffer.allocate(2, 2, fill=(5, 5, 5, 5))
        b = PixelBuffer.allocate(2, 2, fill=(5, 5, 5, 5))
        c = PixelBuffer.allocate(4, 1, fill=(5, 5, 5, 5))

        assert a == b
        assert a != c

    def test_is_empty(self):
        assert PixelBuffer.allocate(0, 5).is_empty
        assert not PixelBuffer.allocate(1, 1).is_empty
