"""Exceptions raised by the raster helpers."""


class RasterError(ValueError):
    """Base class for all pngraster errors."""


class ShapeError(RasterError):
    """Input grid is empty or not rectangular."""


class OutOfRange(RasterError, IndexError):
    """A coordinate lies outside the image."""

    def __init__(self, x, y, width: int, height: int):
        super().__init__(
            f"Coordinate ({x!r}, {y!r}) outside {width}x{height} image")
        self.x = x
        self.y = y


class InvalidDimension(RasterError):
    """Width, height or buffer length of a decoded image do not agree."""
