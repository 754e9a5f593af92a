"""
Exception types raised by the PixelStack edit engine.
"""


class PixelStackError(Exception):
    """Base exception for edit engine operations."""
    pass


class OutOfBoundsError(PixelStackError, IndexError):
    """Raised when a pixel access falls outside the allocated buffer."""

    def __init__(self, x: int, y: int, width: int, height: int):
        self.x = x
        self.y = y
        self.width = width
        self.height = height
        super().__init__(
            f"Pixel ({x}, {y}) is outside buffer of size {width}x{height}"
        )


class DegenerateGeometryError(PixelStackError):
    """Raised when a geometry operation reduces the buffer to an empty region."""
    pass


class UnknownEditKindError(PixelStackError):
    """Raised when an edit carries a kind the engine cannot dispatch."""

    def __init__(self, kind):
        self.kind = kind
        super().__init__(f"Unknown edit kind: {kind!r}")


class InvalidBufferError(PixelStackError, ValueError):
    """Raised when a pixel buffer is zero-sized or malformed."""
    pass


class EditParseError(PixelStackError, ValueError):
    """Raised when a serialized edit record cannot be decoded."""
    pass
