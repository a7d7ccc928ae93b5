"""In-memory RGBA8 raster image.

Pixels live in one bytearray, row by row, four bytes (r, g, b, a) per
pixel. ``for_each_point`` is the single generic mutation primitive;
``create`` and ``from_array`` fill their images through it.
"""

import logging
import numbers

import numpy as np

from . import png_writer
from .art import parse_art
from .color import (
    Color, DEFAULT_FILL, clamp_channel, coerce_dimension, is_number,
    partial_channels,
)
from .errors import InvalidDimension, OutOfRange, ShapeError

log = logging.getLogger(__name__)


class RasterImage:
    """A width x height RGBA8 image owning its pixel buffer.

    Invariant: ``len(buffer) == width * height * 4``.
    """

    def __init__(self, width: int, height: int, buffer=None):
        if not _positive_int(width) or not _positive_int(height):
            raise InvalidDimension(
                f"Image dimensions must be positive ints, got {width!r}x{height!r}")
        size = width * height * 4
        if buffer is None:
            buffer = bytearray(size)
        elif not isinstance(buffer, bytearray):
            buffer = bytearray(buffer)
        if len(buffer) != size:
            raise InvalidDimension(
                f"Buffer holds {len(buffer)} bytes, {width}x{height} RGBA "
                f"needs {size}")
        self.width = width
        self.height = height
        self.buffer = buffer

    # ---- construction ----

    @classmethod
    def create(cls, width, height, fill=DEFAULT_FILL) -> 'RasterImage':
        """A blank image filled with ``fill`` (opaque black by default).

        Width and height are truncated to ints; anything that is not a
        positive number becomes 1.
        """
        img = cls(coerce_dimension(width), coerce_dimension(height))
        return img.for_each_point(lambda x, y, color: fill)

    @classmethod
    def from_decoded(cls, decoded) -> 'RasterImage':
        """Wrap an already decoded image (width, height, data/buffer).

        A bytearray buffer is adopted as-is, not copied.
        """
        buffer = getattr(decoded, 'data', None)
        if buffer is None:
            buffer = getattr(decoded, 'buffer', None)
        if buffer is None:
            raise InvalidDimension(f"{type(decoded).__name__} has no pixel data")
        return cls(decoded.width, decoded.height, buffer)

    @classmethod
    def from_array(cls, rows) -> 'RasterImage':
        """Build an image from rows of colors; ``rows[y][x]`` is pixel (x, y)."""
        rows = [list(row) for row in rows]
        if not rows or not rows[0]:
            raise ShapeError("Color array is empty")
        width = len(rows[0])
        for y, row in enumerate(rows):
            if len(row) != width:
                raise ShapeError(
                    f"Color array row {y} has {len(row)} entries, expected {width}")
        img = cls(width, len(rows))
        return img.for_each_point(lambda x, y, color: rows[y][x])

    @classmethod
    def from_character_art(cls, text: str, color_map=None,
                           rng=None) -> 'RasterImage':
        """Build an image from character art.

        Args:
            text: One row per line, one pixel per character
            color_map: Character -> color. Characters it lacks get a
                random opaque color, added to this dict in place.
            rng: Optional random.Random for those colors
        """
        if color_map is None:
            color_map = {}
        return cls.from_array(parse_art(text, color_map, rng))

    @classmethod
    def from_png(cls, data: bytes) -> 'RasterImage':
        return cls.from_decoded(png_writer.decode_png(data))

    @classmethod
    def from_pil(cls, img) -> 'RasterImage':
        return cls.from_decoded(png_writer.pil_to_decoded(img))

    @classmethod
    def from_numpy(cls, array) -> 'RasterImage':
        """Build from a (height, width, 4) array; values clipped to [0, 255]."""
        arr = np.asarray(array)
        if arr.ndim != 3 or arr.shape[2] != 4 or arr.shape[0] == 0 or arr.shape[1] == 0:
            raise ShapeError(f"Expected a (height, width, 4) array, got {arr.shape}")
        if arr.dtype != np.uint8:
            arr = np.clip(np.nan_to_num(arr), 0, 255).astype(np.uint8)
        height, width = arr.shape[:2]
        return cls(width, height, bytearray(np.ascontiguousarray(arr).tobytes()))

    def copy(self) -> 'RasterImage':
        return RasterImage(self.width, self.height, bytearray(self.buffer))

    # ---- pixel access ----

    def index(self, x: int, y: int) -> int:
        """Offset of pixel (x, y) in the buffer."""
        if not (_coordinate(x, self.width) and _coordinate(y, self.height)):
            raise OutOfRange(x, y, self.width, self.height)
        return (self.width * y + x) * 4

    def get_color(self, x: int, y: int) -> Color:
        i = self.index(x, y)
        return Color(*self.buffer[i:i + 4])

    def set_color(self, x: int, y: int, color) -> Color:
        """Write some or all channels of pixel (x, y).

        Numeric channel values are truncated and clamped to [0, 255];
        missing or non-numeric ones leave the stored byte alone, so
        ``set_color(x, y, {'a': 10})`` only touches alpha.

        Returns:
            The pixel as stored after the write.
        """
        i = self.index(x, y)
        buffer = self.buffer
        for offset, value in enumerate(partial_channels(color)):
            if is_number(value):
                buffer[i + offset] = clamp_channel(value)
        return self.get_color(x, y)

    def for_each_point(self, fn) -> 'RasterImage':
        """Call ``fn(x, y, color)`` for every pixel in raster scan order.

        A non-None return value is written back with ``set_color``
        semantics; None leaves the pixel as it was. Returns self.
        """
        for y in range(self.height):
            for x in range(self.width):
                color = self.get_color(x, y)
                out = fn(x, y, color)
                self.set_color(x, y, color if out is None else out)
        return self

    def points(self):
        """Yield (x, y, color) for every pixel in raster scan order."""
        buffer = self.buffer
        i = 0
        for y in range(self.height):
            for x in range(self.width):
                yield x, y, Color(*buffer[i:i + 4])
                i += 4

    # ---- resizing ----

    def scale(self, factor) -> 'RasterImage':
        """Nearest-neighbor upscale by an integer factor (minimum 1).

        Each source pixel becomes a factor x factor block.
        """
        factor = coerce_dimension(factor)
        pixels = np.frombuffer(self.buffer, dtype=np.uint8).reshape(
            self.height, self.width, 4)
        scaled = pixels.repeat(factor, axis=0).repeat(factor, axis=1)
        buffer = bytearray(scaled.tobytes())
        log.debug("Scaled %dx%d by %d", self.width, self.height, factor)
        self.width, self.height, self.buffer = (
            self.width * factor, self.height * factor, buffer)
        return self

    # ---- export ----

    def to_png_bytes(self) -> bytes:
        return png_writer.raster_to_png_bytes(self)

    def to_base64(self, callback=None):
        """Encode as PNG and base64 in the background.

        Returns a concurrent.futures.Future resolving to the text;
        ``callback(text)`` is also called once when it is ready.
        """
        return png_writer.encode_base64_async(
            self.width, self.height, self.buffer, callback=callback)

    def to_base64_data_uri(self, callback=None):
        """Like to_base64, with a ``data:image/png;base64,`` prefix."""
        return png_writer.encode_base64_async(
            self.width, self.height, self.buffer,
            prefix=png_writer.DATA_URI_PREFIX, callback=callback)

    def to_pil(self):
        return png_writer.rgba_to_pil(self.width, self.height, self.buffer)

    def to_numpy(self) -> np.ndarray:
        return np.frombuffer(self.buffer, dtype=np.uint8).reshape(
            self.height, self.width, 4).copy()

    # ----

    def __eq__(self, other):
        if not isinstance(other, RasterImage):
            return NotImplemented
        return (self.width == other.width and self.height == other.height
                and self.buffer == other.buffer)

    __hash__ = None

    def __repr__(self):
        return f"RasterImage({self.width}x{self.height})"


def _positive_int(value) -> bool:
    return (isinstance(value, numbers.Integral) and not isinstance(value, bool)
            and value > 0)


def _coordinate(value, limit: int) -> bool:
    return (isinstance(value, numbers.Integral) and not isinstance(value, bool)
            and 0 <= value < limit)
