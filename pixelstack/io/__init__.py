"""
Image decoding and encoding adapters for PixelStack.
"""

from .bitmap import (
    from_image,
    to_image,
    load_image,
    save_image,
    encode_image,
    to_data_url,
    from_data_url,
    data_url_to_base64,
)

__all__ = [
    "from_image",
    "to_image",
    "load_image",
    "save_image",
    "encode_image",
    "to_data_url",
    "from_data_url",
    "data_url_to_base64",
]
