"""
Tests for bitmap decoding and encoding.
"""

import pytest
import numpy as np
from PIL import Image

from pixelstack.core.buffer import PixelBuffer
from pixelstack.io.bitmap import (
    data_url_to_base64, encode_image, from_data_url, from_image, load_image,
    save_image, to_data_url, to_image,
)


@pytest.fixture
def buffer():
    rng = np.random.default_rng(9)
    return PixelBuffer(rng.integers(0, 256, size=(6, 7, 4), dtype=np.uint8))


def test_png_round_trip(tmp_path, buffer):
    path = save_image(buffer, tmp_path / "out.png")
    assert load_image(path) == buffer


def test_rgb_image_gets_opaque_alpha():
    image = Image.new("RGB", (3, 2), (10, 20, 30))
    buf = from_image(image)

    assert buf.size == (3, 2)
    assert buf.get(2, 1) == (10, 20, 30, 255)


def test_to_image_mode(buffer):
    image = to_image(buffer)
    assert image.mode == "RGBA"
    assert image.size == (7, 6)


def test_jpeg_drops_alpha(tmp_path, buffer):
    path = save_image(buffer, tmp_path / "out.jpg", quality=80)
    with Image.open(path) as image:
        assert image.format == "JPEG"
        assert image.mode == "RGB"


def test_data_url_prefix(buffer):
    url = to_data_url(buffer)
    assert url.startswith("data:image/webp;base64,")


def test_data_url_to_base64():
    assert data_url_to_base64("data:image/png;base64,QUJD") == "QUJD"
    with pytest.raises(ValueError):
        data_url_to_base64("QUJD")


def test_lossless_data_url_round_trip(buffer):
    url = to_data_url(buffer, fmt="PNG")
    assert url.startswith("data:image/png;base64,")
    assert from_data_url(url) == buffer


def test_unknown_format_rejected(tmp_path, buffer):
    with pytest.raises(ValueError, match="Unsupported image format"):
        encode_image(buffer, "XYZ")
    with pytest.raises(ValueError):
        save_image(buffer, tmp_path / "out.xyz")
    assert not (tmp_path / "out.xyz").exists()


def test_encode_webp_bytes(buffer):
    data = encode_image(buffer, "webp", quality=90)
    assert data[:4] == b"RIFF"
    assert data[8:12] == b"WEBP"
