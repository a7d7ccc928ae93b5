"""Character art: text grids where each character names a color.

    RasterImage.from_character_art('.##.\\n#..#', {'#': Color(255, 0, 0)})

Every line is a row and every character a pixel. Characters missing from
the color map get a random opaque color, which is written back into the
map so the same character always gets the same color.
"""

import json

from .color import Color, to_color
from .errors import ShapeError


def split_art(text: str) -> list:
    """Split art text into rows of single characters."""
    rows = [list(line) for line in text.splitlines()]
    if not rows:
        raise ShapeError("Character art is empty")
    width = len(rows[0])
    for lineno, row in enumerate(rows, 1):
        if len(row) != width:
            raise ShapeError(
                f"Character art line {lineno} has {len(row)} characters, "
                f"expected {width}")
    return rows


def parse_art(text: str, color_map: dict, rng=None) -> list:
    """Turn art text into a 2D grid of colors.

    Args:
        text: The art, one row per line
        color_map: Character -> color. Mutated: unmapped characters
            are added with a random color.
        rng: Optional random.Random used for unmapped characters

    Returns:
        List of rows, each a list of colors.
    """
    grid = []
    for row in split_art(text):
        colors = []
        for ch in row:
            if ch not in color_map:
                color_map[ch] = Color.random(rng)
            colors.append(color_map[ch])
        grid.append(colors)
    return grid


def color_map_from_dict(raw: dict) -> dict:
    """Build a character -> Color map from JSON-style values.

    Values may be '#rrggbb[aa]' strings, [r, g, b(, a)] lists or
    {"r": .., "g": .., "b": .., "a": ..} objects.
    """
    result = {}
    for key, value in raw.items():
        if len(key) != 1:
            raise ValueError(f"Color map key must be one character: {key!r}")
        try:
            result[key] = to_color(value)
        except TypeError as e:
            raise ValueError(f"Bad color for {key!r}: {value!r}") from e
    return result


def load_color_map(text: str) -> dict:
    raw = json.loads(text)
    if not isinstance(raw, dict):
        raise ValueError("Color map must be a JSON object")
    return color_map_from_dict(raw)
