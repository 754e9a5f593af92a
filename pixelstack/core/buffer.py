"""
RGBA pixel buffer used as the working surface of the edit engine.

A PixelBuffer owns a contiguous ``uint8`` array of shape ``(height, width, 4)``
so ``samples.size == width * height * 4`` always holds. Geometry and kernel
code operates on ``samples`` directly with numpy; ``get``/``set`` are the
bounds-checked single-pixel accessors.
"""

from typing import Tuple, Sequence, Union
import numpy as np

from pixelstack.errors import InvalidBufferError, OutOfBoundsError

RgbaColor = Tuple[int, int, int, int]

TRANSPARENT: RgbaColor = (0, 0, 0, 0)


class PixelBuffer:
    """Width, height and RGBA samples of one image."""

    __slots__ = ("_samples",)

    def __init__(self, samples: np.ndarray):
        """
        Wrap an existing sample array without copying it.

        Args:
            samples: ``uint8`` array of shape (height, width, 4)

        Raises:
            InvalidBufferError: If the array has the wrong dtype or shape
        """
        if not isinstance(samples, np.ndarray):
            raise InvalidBufferError(f"Expected numpy array, got {type(samples)}")
        if samples.dtype != np.uint8:
            raise InvalidBufferError(f"Expected uint8 samples, got {samples.dtype}")
        if samples.ndim != 3 or samples.shape[2] != 4:
            raise InvalidBufferError(f"Expected (height, width, 4) samples, got {samples.shape}")
        self._samples = np.ascontiguousarray(samples)

    @classmethod
    def allocate(cls, width: int, height: int,
                 fill: Sequence[int] = TRANSPARENT) -> 'PixelBuffer':
        """Allocate a buffer filled with a single color (transparent black by default)."""
        if width < 0 or height < 0:
            raise InvalidBufferError(f"Buffer dimensions must be non-negative, got {width}x{height}")
        samples = np.empty((int(height), int(width), 4), dtype=np.uint8)
        samples[...] = np.asarray(fill, dtype=np.uint8)
        return cls(samples)

    @classmethod
    def from_array(cls, array: np.ndarray, copy: bool = True) -> 'PixelBuffer':
        """
        Build a buffer from an image array.

        Grayscale (H, W) and RGB (H, W, 3) arrays are expanded to RGBA with
        an opaque alpha channel. Float arrays are treated as 0-1 data.
        """
        array = np.asarray(array)
        if array.dtype != np.uint8:
            if np.issubdtype(array.dtype, np.floating):
                array = np.rint(np.clip(array, 0.0, 1.0) * 255.0).astype(np.uint8)
            else:
                array = np.clip(array, 0, 255).astype(np.uint8)
            copy = False

        if array.ndim == 2:
            array = np.stack([array] * 3, axis=-1)
            copy = False
        if array.ndim != 3 or array.shape[2] not in (3, 4):
            raise InvalidBufferError(f"Unsupported image array shape: {array.shape}")
        if array.shape[2] == 3:
            alpha = np.full(array.shape[:2] + (1,), 255, dtype=np.uint8)
            array = np.concatenate([array, alpha], axis=-1)
            copy = False

        return cls(array.copy() if copy else array)

    @classmethod
    def from_bytes(cls, width: int, height: int, data: Union[bytes, bytearray]) -> 'PixelBuffer':
        """Build a buffer from packed RGBA bytes in row-major order."""
        expected = width * height * 4
        if len(data) != expected:
            raise InvalidBufferError(
                f"Expected {expected} bytes for {width}x{height} RGBA, got {len(data)}"
            )
        samples = np.frombuffer(bytes(data), dtype=np.uint8).reshape(height, width, 4)
        return cls(samples.copy())

    @property
    def samples(self) -> np.ndarray:
        return self._samples

    @property
    def width(self) -> int:
        return self._samples.shape[1]

    @property
    def height(self) -> int:
        return self._samples.shape[0]

    @property
    def size(self) -> Tuple[int, int]:
        """(width, height)"""
        return self.width, self.height

    @property
    def is_empty(self) -> bool:
        return self.width == 0 or self.height == 0

    def clone(self) -> 'PixelBuffer':
        return PixelBuffer(self._samples.copy())

    def _check_bounds(self, x: int, y: int) -> None:
        if x < 0 or y < 0 or x >= self.width or y >= self.height:
            raise OutOfBoundsError(x, y, self.width, self.height)

    def get(self, x: int, y: int) -> RgbaColor:
        """Return the RGBA sample at column x, row y."""
        self._check_bounds(x, y)
        r, g, b, a = self._samples[y, x]
        return int(r), int(g), int(b), int(a)

    def set(self, x: int, y: int, rgba: Sequence[int]) -> None:
        """Store an RGBA sample at column x, row y."""
        self._check_bounds(x, y)
        if len(rgba) != 4:
            raise ValueError(f"Expected 4 channel values, got {len(rgba)}")
        self._samples[y, x] = np.clip(np.asarray(rgba, dtype=np.int64), 0, 255).astype(np.uint8)

    def resize(self, new_width: int, new_height: int) -> None:
        """
        Reallocate the sample storage at a new size.

        Contents are cleared to transparent black; no resampling happens.
        """
        if new_width < 0 or new_height < 0:
            raise InvalidBufferError(
                f"Buffer dimensions must be non-negative, got {new_width}x{new_height}"
            )
        self._samples = np.zeros((int(new_height), int(new_width), 4), dtype=np.uint8)

    def replace(self, samples: np.ndarray) -> None:
        """Swap in a new sample array (used by geometry ops that change dimensions)."""
        self._samples = PixelBuffer(samples)._samples

    def to_bytes(self) -> bytes:
        return self._samples.tobytes()

    def to_array(self) -> np.ndarray:
        return self._samples.copy()

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, PixelBuffer):
            return NotImplemented
        return (self._samples.shape == other._samples.shape
                and bool(np.array_equal(self._samples, other._samples)))

    __hash__ = None

    def __repr__(self) -> str:
        return f"PixelBuffer(width={self.width}, height={self.height})"
