"""
Mandelbrot computation functions using Numba JIT compilation.

This module contains the performance-critical per-pixel code:
- Escape-time iteration of z <- z² + c with |z| > 2 bailout
- Smooth (continuous) colour index from the final orbit state
- A full pass over a pixel grid, written straight into an RGBA buffer

Kernels run on a single thread; renderer.py splits the work into
progressive passes so each call stays short.
"""

import logging
import math
from collections import namedtuple

import numpy as np
from numba import jit


logger = logging.getLogger(__name__)

BAILOUT = 4.0  # |z|² > 4 means |z| > 2
LOG_BAILOUT = math.log(BAILOUT)
LOG2 = math.log(2.0)
EPSILON = 1e-12


EscapeResult = namedtuple('EscapeResult', ['iterations', 'escaped', 'final_magnitude_squared'])


@jit(nopython=True, cache=True)
def escape_time(cr, ci, max_iter):
    """
    Iterate z <- z² + c from z = 0 until escape or max_iter.

    Args:
        cr, ci: Real and imaginary parts of c
        max_iter: Iteration budget (>= 1)

    Returns:
        (iterations, escaped, |z|²). Points that never escape report
        iterations == max_iter and escaped == False.
    """
    zr = 0.0
    zi = 0.0
    zr2 = 0.0
    zi2 = 0.0
    iteration = 0

    while iteration < max_iter and zr2 + zi2 <= BAILOUT:
        zi = 2.0 * zr * zi + ci
        zr = zr2 - zi2 + cr
        zr2 = zr * zr
        zi2 = zi * zi
        iteration += 1

    mag2 = zr2 + zi2
    return iteration, mag2 > BAILOUT, mag2


@jit(nopython=True, cache=True)
def smooth_color_index(iterations, escaped, mag2, max_iter):
    """
    Convert an escape result to a palette row.

    Uses the fractional iteration count
        nu = log(log(|z|²) / 2 / log 4) / log 2
        smooth = iterations + 1 - nu
    wrapped with np.fmod(smooth, max_iter) and clamped to [0, max_iter - 1].
    Falls back to the integer count when the logarithms are undefined.
    """
    if not escaped:
        return max_iter

    smooth = float(iterations)
    if mag2 > 1.0 + EPSILON:
        ratio = math.log(mag2) * 0.5 / LOG_BAILOUT
        if ratio > EPSILON:
            smooth = iterations + 1 - math.log(ratio) / LOG2
    if not math.isfinite(smooth):
        smooth = float(iterations)

    idx = int(math.floor(np.fmod(smooth, float(max_iter))))
    if idx < 0:
        return 0
    if idx > max_iter - 1:
        return max_iter - 1
    return idx


@jit(nopython=True, cache=True)
def compute_pass(x_min, y_min, dx, dy, width, height, max_iter, palette):
    """
    Compute one full RGBA frame.

    Args:
        x_min, y_min: Complex-plane coordinate of pixel (0, 0)
        dx, dy: Complex-plane step per pixel
        width, height: Output dimensions in pixels
        max_iter: Maximum iteration count
        palette: (max_iter + 1, 3) uint8 lookup table

    Returns:
        New uint8 array of shape (height, width, 4)
    """
    out = np.empty((height, width, 4), dtype=np.uint8)

    for py in range(height):
        ci = y_min + py * dy
        for px in range(width):
            cr = x_min + px * dx
            iterations, escaped, mag2 = escape_time(cr, ci, max_iter)
            idx = smooth_color_index(iterations, escaped, mag2, max_iter)
            out[py, px, 0] = palette[idx, 0]
            out[py, px, 1] = palette[idx, 1]
            out[py, px, 2] = palette[idx, 2]
            out[py, px, 3] = 255

    return out


def evaluate(c, max_iter):
    """
    Escape-time evaluation of a single point.

    Args:
        c: Point in the complex plane
        max_iter: Iteration budget, must be >= 1

    Returns:
        EscapeResult(iterations, escaped, final_magnitude_squared)
    """
    assert max_iter >= 1, "max_iter must be at least 1"
    c = complex(c)
    iterations, escaped, mag2 = escape_time(c.real, c.imag, int(max_iter))
    return EscapeResult(int(iterations), bool(escaped), float(mag2))


def render_pass(width, height, view, max_iter, palette):
    """
    Render the view at the given pixel resolution.

    The view is mapped across the pixel grid with the vertical extent
    scaled by height / width so pixels stay square. Row 0 is y_min.

    Args:
        width, height: Pass resolution in pixels (both >= 1)
        view: Object with bounds(width, height) -> (x_min, x_max, y_min, y_max)
        max_iter: Maximum iteration count
        palette: Table from colormaps.build_palette(scheme, max_iter)

    Returns:
        New uint8 RGBA array of shape (height, width, 4)
    """
    assert width >= 1 and height >= 1, "pass resolution must be positive"
    assert palette.shape[0] == max_iter + 1, "palette does not match max_iter"

    x_min, x_max, y_min, y_max = view.bounds(width, height)
    dx = (x_max - x_min) / width
    dy = (y_max - y_min) / height
    return compute_pass(
        float(x_min), float(y_min), float(dx), float(dy),
        int(width), int(height), int(max_iter), palette
    )


def warmup_jit():
    """
    Warm up JIT compilation with a tiny dummy frame.

    Call this once at startup to pre-compile the Numba functions,
    avoiding a delay on the first real pass.
    """
    logger.info("Compiling Mandelbrot kernels")
    palette = np.zeros((11, 3), dtype=np.uint8)
    palette.setflags(write=False)
    compute_pass(-2.0, -1.0, 0.3, 0.2, 10, 10, 10, palette)
