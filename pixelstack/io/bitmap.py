"""
Bitmap conversion for PixelStack

Decodes image files into PixelBuffers and encodes composites back to
files or data URLs. The edit engine itself never touches encoded formats.
"""

import base64
import io
import logging
from pathlib import Path
from typing import Optional, Union

import numpy as np
from PIL import Image

from pixelstack.core.buffer import PixelBuffer
from pixelstack.errors import InvalidBufferError

logger = logging.getLogger(__name__)

DEFAULT_EXPORT_FORMAT = "WEBP"
DEFAULT_EXPORT_QUALITY = 90

# Formats without an alpha channel
_OPAQUE_FORMATS = {"JPEG", "JPG", "BMP"}


def from_image(image: Image.Image) -> PixelBuffer:
    """Convert a Pillow image of any mode to an RGBA PixelBuffer."""
    if not hasattr(image, "convert"):
        raise TypeError(f"Expected PIL Image, got {type(image)}")
    if image.mode != "RGBA":
        image = image.convert("RGBA")
    return PixelBuffer(np.array(image, dtype=np.uint8))


def to_image(buffer: PixelBuffer) -> Image.Image:
    """Convert a PixelBuffer to an RGBA Pillow image."""
    if buffer.is_empty:
        raise InvalidBufferError("Cannot convert an empty buffer to an image")
    return Image.fromarray(buffer.to_array())


def load_image(path: Union[str, Path]) -> PixelBuffer:
    """
    Decode an image file into a PixelBuffer.

    Raises:
        FileNotFoundError: If the file does not exist
        PIL.UnidentifiedImageError: If the file is not a readable image
    """
    path = Path(path)
    with Image.open(path) as image:
        image.load()
        buffer = from_image(image)
    logger.debug(f"Loaded {path} as {buffer.width}x{buffer.height} RGBA")
    return buffer


def _prepare_for_format(buffer: PixelBuffer, fmt: str) -> Image.Image:
    image = to_image(buffer)
    if fmt.upper() in _OPAQUE_FORMATS:
        image = image.convert("RGB")
    return image


def encode_image(buffer: PixelBuffer, fmt: str = DEFAULT_EXPORT_FORMAT,
                 quality: int = DEFAULT_EXPORT_QUALITY) -> bytes:
    """
    Encode a buffer to bytes in the given Pillow format.

    Raises:
        ValueError: If Pillow has no encoder for ``fmt``
    """
    fmt = fmt.upper()
    if fmt == "JPG":
        fmt = "JPEG"
    Image.init()
    if fmt not in Image.SAVE:
        raise ValueError(f"Unsupported image format: {fmt}")
    image = _prepare_for_format(buffer, fmt)
    out = io.BytesIO()
    save_kwargs = {}
    if fmt in ("WEBP", "JPEG"):
        save_kwargs["quality"] = int(quality)
    image.save(out, format=fmt, **save_kwargs)
    return out.getvalue()


def save_image(buffer: PixelBuffer, path: Union[str, Path],
               fmt: Optional[str] = None, quality: int = DEFAULT_EXPORT_QUALITY) -> Path:
    """
    Encode a buffer to a file.

    Args:
        buffer: Buffer to write
        path: Destination file
        fmt: Pillow format name; inferred from the suffix when omitted
        quality: Quality for lossy formats
    """
    path = Path(path)
    if fmt is None:
        suffix = path.suffix.lstrip(".").upper()
        fmt = {"JPG": "JPEG", "": "PNG"}.get(suffix, suffix)
    path.write_bytes(encode_image(buffer, fmt, quality))
    logger.info(f"Saved {buffer.width}x{buffer.height} image to {path}")
    return path


def to_data_url(buffer: PixelBuffer, fmt: str = DEFAULT_EXPORT_FORMAT,
                quality: int = DEFAULT_EXPORT_QUALITY) -> str:
    """Encode a buffer as a base64 data URL (WEBP at quality 90 by default)."""
    fmt = fmt.upper()
    mime = "image/jpeg" if fmt in ("JPEG", "JPG") else f"image/{fmt.lower()}"
    payload = base64.b64encode(encode_image(buffer, fmt, quality)).decode("ascii")
    return f"data:{mime};base64,{payload}"


def data_url_to_base64(data_url: str) -> str:
    """Strip the ``data:...;base64,`` prefix from a data URL."""
    _, sep, payload = data_url.partition(",")
    if not sep:
        raise ValueError("Not a data URL")
    return payload


def from_data_url(data_url: str) -> PixelBuffer:
    """Decode a base64 data URL into a PixelBuffer."""
    raw = base64.b64decode(data_url_to_base64(data_url))
    with Image.open(io.BytesIO(raw)) as image:
        image.load()
        return from_image(image)
