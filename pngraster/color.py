"""RGBA colors and the numeric coercion rules shared by the raster code.

Channel values are truncated toward zero and clamped to [0, 255] before they
reach a buffer. Dimensions and scale factors are truncated the same way and
clamped to a minimum of 1.
"""

import math
import numbers
import random
import string
from collections.abc import Mapping
from dataclasses import astuple, dataclass

CHANNELS = ('r', 'g', 'b', 'a')


@dataclass(frozen=True)
class Color:
    r: int = 0
    g: int = 0
    b: int = 0
    a: int = 255

    def __iter__(self):
        return iter(astuple(self))

    def as_tuple(self) -> tuple:
        return astuple(self)

    def as_dict(self) -> dict:
        return dict(zip(CHANNELS, astuple(self)))

    @classmethod
    def from_hex(cls, text: str) -> 'Color':
        """Parse '#rrggbb' or '#rrggbbaa' (the '#' is optional)."""
        digits = text[1:] if text.startswith('#') else text
        if len(digits) not in (6, 8) or not all(c in string.hexdigits for c in digits):
            raise ValueError(f"Not a hex color: {text!r}")
        return cls(*(int(digits[i:i + 2], 16) for i in range(0, len(digits), 2)))

    @classmethod
    def random(cls, rng=None) -> 'Color':
        """An opaque color with uniformly random r, g and b."""
        rng = rng or random
        return cls(rng.randint(0, 255), rng.randint(0, 255),
                   rng.randint(0, 255), 255)

    def to_hex(self) -> str:
        return '#' + ''.join(f'{v:02x}' for v in astuple(self))


DEFAULT_FILL = Color(0, 0, 0, 255)
LEGACY_FILL = Color(0, 255, 0, 255)


def is_number(value) -> bool:
    return isinstance(value, numbers.Real) and not isinstance(value, bool)


def to_int(value) -> int:
    """Truncate toward zero; 0 for anything that is not a finite number.

    Infinity has no integer value here, so an infinite width or factor
    falls back to 1 like any other non-number. Channels differ: they are
    bounded, so clamp_channel saturates infinity to 255.
    """
    if isinstance(value, numbers.Integral):
        return int(value)
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0
    if math.isnan(number) or math.isinf(number):
        return 0
    return int(number)


def coerce_dimension(value) -> int:
    """Width, height or scale factor: an int of at least 1."""
    return max(1, to_int(value))


def clamp_channel(value) -> int:
    if isinstance(value, numbers.Integral):
        return min(255, max(0, int(value)))
    # NaN compares false against everything, so test it first.
    if math.isnan(value) or value <= 0:
        return 0
    if value >= 255:
        return 255
    return int(value)


def partial_channels(partial) -> tuple:
    """Normalize a full or partial color to a 4-tuple.

    Accepts a Color, a mapping with any of the keys r, g, b, a, or a
    sequence of 3 or 4 values (3 leaves alpha alone). Missing channels
    come back as None.
    """
    if isinstance(partial, Color):
        return partial.as_tuple()
    if isinstance(partial, Mapping):
        return tuple(partial.get(name) for name in CHANNELS)
    if isinstance(partial, (str, bytes)):
        raise TypeError(f"Not a color: {partial!r}")
    try:
        values = tuple(partial)
    except TypeError:
        raise TypeError(f"Not a color: {partial!r}") from None
    if len(values) not in (3, 4):
        raise TypeError(f"Color sequence needs 3 or 4 values, got {len(values)}")
    return values + (None,) * (4 - len(values))


def to_color(value) -> Color:
    """Build a complete Color, treating missing channels as 0 (alpha 255)."""
    if isinstance(value, str):
        return Color.from_hex(value)
    defaults = astuple(Color())
    channels = partial_channels(value)
    return Color(*(clamp_channel(v) if is_number(v) else d
                   for v, d in zip(channels, defaults)))
