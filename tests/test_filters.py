"""
Tests for color filter kernels.
"""

import pytest
import numpy as np

from pixelstack.core.buffer import PixelBuffer
from pixelstack.processing.filters import FilterType, apply_filter, get_filter_name


def solid(color, width=4, height=4):
    return PixelBuffer.allocate(width, height, fill=color)


@pytest.fixture
def noisy_buffer():
    rng = np.random.default_rng(42)
    return PixelBuffer(rng.integers(0, 256, size=(6, 5, 4), dtype=np.uint8))


class TestFilterIdentity:
    """Filters that must leave the buffer untouched."""

    @pytest.mark.parametrize("intensity", [0, 50, 100])
    def test_none_filter_is_noop(self, noisy_buffer, intensity):
        """A NONE filter never changes a sample, whatever the intensity."""
        before = noisy_buffer.clone()
        apply_filter(noisy_buffer, FilterType.NONE, intensity)
        assert noisy_buffer == before

    @pytest.mark.parametrize("filter_type", list(FilterType))
    def test_zero_intensity_is_identity(self, noisy_buffer, filter_type):
        before = noisy_buffer.clone()
        apply_filter(noisy_buffer, filter_type, 0)
        assert noisy_buffer == before

    def test_unknown_filter_is_ignored(self, noisy_buffer):
        before = noisy_buffer.clone()
        apply_filter(noisy_buffer, "sparkle", 100)
        assert noisy_buffer == before

    @pytest.mark.parametrize("filter_type", list(FilterType))
    def test_alpha_never_changes(self, noisy_buffer, filter_type):
        alpha = noisy_buffer.samples[..., 3].copy()
        apply_filter(noisy_buffer, filter_type, 100)
        np.testing.assert_array_equal(noisy_buffer.samples[..., 3], alpha)


class TestFilterFormulas:
    """Full-intensity filter results."""

    def test_grayscale_red(self):
        """All-red pixels average to (85, 85, 85)."""
        buf = solid((255, 0, 0, 255))
        apply_filter(buf, FilterType.GRAYSCALE, 100)

        assert np.all(buf.samples == np.array([85, 85, 85, 255], dtype=np.uint8))

    def test_sepia(self):
        buf = solid((10, 20, 30, 255), 1, 1)
        apply_filter(buf, FilterType.SEPIA, 100)
        # 24.98, 22.25, 17.33
        assert buf.get(0, 0) == (25, 22, 17, 255)

    def test_sepia_clamps(self):
        buf = solid((255, 255, 255, 255), 1, 1)
        apply_filter(buf, "sepia", 100)
        # red and green overflow, blue is 238.935
        assert buf.get(0, 0) == (255, 255, 239, 255)

    def test_invert(self):
        buf = solid((10, 20, 30, 128), 2, 2)
        apply_filter(buf, FilterType.INVERT, 100)
        assert buf.get(1, 1) == (245, 235, 225, 128)

    def test_invert_half_intensity(self):
        """Half-inverting meets in the middle at 127.5, stored as 128."""
        buf = solid((10, 20, 30, 255), 1, 1)
        apply_filter(buf, FilterType.INVERT, 50)
        assert buf.get(0, 0) == (128, 128, 128, 255)

    def test_vintage(self):
        buf = solid((100, 0, 0, 255), 1, 1)
        apply_filter(buf, FilterType.VINTAGE, 100)
        assert buf.get(0, 0) == (90, 5, 5, 255)

    def test_blueprint(self):
        buf = solid((30, 60, 90, 255), 1, 1)
        apply_filter(buf, FilterType.BLUEPRINT, 100)
        assert buf.get(0, 0) == (6, 18, 60, 255)

    def test_noir(self):
        buf = solid((100, 100, 100, 255), 1, 1)
        apply_filter(buf, FilterType.NOIR, 100)
        assert buf.get(0, 0) == (150, 150, 150, 255)

    def test_noir_caps_at_white(self):
        buf = solid((200, 200, 200, 255), 1, 1)
        apply_filter(buf, FilterType.NOIR, 100)
        assert buf.get(0, 0) == (255, 255, 255, 255)

    def test_partial_intensity_blends(self):
        """25% grayscale on red: 255*0.75 + 85*0.25 = 212.5 -> 212, 0 + 21.25 -> 21."""
        buf = solid((255, 0, 0, 255), 1, 1)
        apply_filter(buf, FilterType.GRAYSCALE, 25)
        assert buf.get(0, 0) == (212, 21, 21, 255)

    def test_pixels_are_independent(self):
        """Each pixel is filtered from its own values only."""
        buf = PixelBuffer.allocate(2, 1)
        buf.set(0, 0, (255, 0, 0, 255))
        buf.set(1, 0, (0, 0, 255, 255))
        apply_filter(buf, FilterType.GRAYSCALE, 100)

        assert buf.get(0, 0) == (85, 85, 85, 255)
        assert buf.get(1, 0) == (85, 85, 85, 255)


class TestFilterNames:
    """Display names for filters."""

    def test_known_names(self):
        assert get_filter_name(FilterType.NONE) == "None"
        assert get_filter_name("blueprint") == "Blueprint"
        assert get_filter_name("NOIR") == "Noir"

    def test_unknown_name(self):
        assert get_filter_name("sparkle") == "Unknown"
        assert get_filter_name(None) == "Unknown"
