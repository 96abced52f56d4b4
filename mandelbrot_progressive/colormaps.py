"""
Colour scheme definitions for Mandelbrot visualization.

Each scheme is a function of t in [0, 1) returning an (r, g, b) triple.
build_palette() turns a scheme into a lookup table with one row per
iteration count, plus a final row for points inside the set (black).

To add a new scheme:
1. Define a scheme_xxx(t) function
2. Append it to COLOR_SCHEMES at the bottom of this file
"""

import numpy as np


IN_SET_COLOR = (0, 0, 0)


def scheme_blue_gold(t):
    """
    Blue-Gold: deep blue -> gold -> near-white.

    Two linear segments meeting at t = 0.5.
    """
    if t < 0.5:
        s = t * 2
        return s * 200, s * 170 + 30, 255 - s * 100
    s = (t - 0.5) * 2
    return 200 + s * 55, 200 - s * 150, 155 - s * 155


def scheme_fire(t):
    """
    Fire: black -> red -> yellow -> white.

    Red saturates first, then green, then blue (classic "hot" look).
    """
    return t * 3 * 255, max(0, t * 3 - 1) * 255, max(0, t * 3 - 2) * 255


def scheme_ocean(t):
    """Ocean: ramps biased toward blue and green."""
    return t * 50, t * 150 + 50, 150 + t * 105


def scheme_rainbow(t):
    """
    Rainbow: a single hue sweep over [0, 360) degrees.

    Full chroma, converted with the standard six-sector hue formula.
    """
    hue = t * 360
    x = 1 - abs((hue / 60) % 2 - 1)

    if hue < 60:
        r, g, b = 1, x, 0
    elif hue < 120:
        r, g, b = x, 1, 0
    elif hue < 180:
        r, g, b = 0, 1, x
    elif hue < 240:
        r, g, b = 0, x, 1
    elif hue < 300:
        r, g, b = x, 0, 1
    else:
        r, g, b = 1, 0, x
    return r * 255, g * 255, b * 255


def scheme_grayscale(t):
    """Grayscale: black -> white."""
    v = t * 255
    return v, v, v


# Registry of all available schemes, indexed by scheme id.
# Values are (display name, scheme function).
COLOR_SCHEMES = [
    ('Blue-Gold', scheme_blue_gold),
    ('Fire', scheme_fire),
    ('Ocean', scheme_ocean),
    ('Rainbow', scheme_rainbow),
    ('Grayscale', scheme_grayscale),
]

GRAYSCALE = 4


def _resolve_scheme(scheme):
    """Map a scheme id to its registry entry; unknown ids fall back to Grayscale."""
    if isinstance(scheme, (int, np.integer)) and 0 <= scheme < len(COLOR_SCHEMES):
        return COLOR_SCHEMES[int(scheme)]
    return COLOR_SCHEMES[GRAYSCALE]


def get_scheme_name(scheme):
    """Display name of a scheme id (Grayscale for unknown ids)."""
    return _resolve_scheme(scheme)[0]


def list_scheme_names():
    """Get list of available scheme names, in id order."""
    return [name for name, _ in COLOR_SCHEMES]


def build_palette(scheme, max_iter):
    """
    Build the lookup table for a colour scheme.

    Args:
        scheme: Scheme id (see COLOR_SCHEMES); unknown ids use Grayscale
        max_iter: Maximum iteration count, must be >= 1

    Returns:
        Read-only uint8 array of shape (max_iter + 1, 3). Row max_iter is
        the in-set colour.
    """
    _, color_fn = _resolve_scheme(scheme)
    table = np.zeros((max_iter + 1, 3), dtype=np.uint8)

    for i in range(max_iter):
        r, g, b = color_fn(i / max_iter)
        table[i, 0] = max(0, min(255, int(r)))
        table[i, 1] = max(0, min(255, int(g)))
        table[i, 2] = max(0, min(255, int(b)))
    table[max_iter] = IN_SET_COLOR

    table.setflags(write=False)
    return table


class PaletteCache:
    """
    Single-slot cache for palette tables.

    Holds at most one table, keyed by (scheme, max_iter). Asking for the
    same key again returns the very same array; a different key rebuilds
    and replaces the slot.
    """

    def __init__(self):
        self.key = None
        self.table = None

    def build(self, scheme, max_iter):
        key = (scheme, max_iter)
        if key != self.key or self.table is None:
            self.table = build_palette(scheme, max_iter)
            self.key = key
        return self.table

    def clear(self):
        self.key = None
        self.table = None
