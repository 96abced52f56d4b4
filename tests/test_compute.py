import math

import numpy as np
import pytest

from mandelbrot_progressive.colormaps import build_palette
from mandelbrot_progressive.compute import (
    EscapeResult,
    evaluate,
    render_pass,
    smooth_color_index,
)
from mandelbrot_progressive.renderer import View


@pytest.mark.parametrize("max_iter", [1, 2, 10, 100, 1000])
def test_origin_never_escapes(max_iter):
    result = evaluate(0, max_iter)
    assert result == EscapeResult(max_iter, False, 0.0)


def test_far_point_escapes_on_first_iteration():
    result = evaluate(3 + 0j, 50)
    assert result.escaped
    assert result.iterations == 1
    assert result.final_magnitude_squared == 9.0


def test_bailout_is_strict():
    # c = -2 settles on z = 2, exactly on the bailout circle
    result = evaluate(-2, 100)
    assert not result.escaped
    assert result.iterations == 100
    assert result.final_magnitude_squared == 4.0


def test_escape_after_two_iterations():
    result = evaluate(2, 10)
    assert result == EscapeResult(2, True, 36.0)


def test_evaluate_is_deterministic():
    c = complex(-0.7435, 0.1314)
    assert evaluate(c, 500) == evaluate(c, 500)


def test_evaluate_rejects_zero_budget():
    with pytest.raises(AssertionError):
        evaluate(0, 0)


def test_smooth_index_in_set():
    assert smooth_color_index(50, False, 0.1, 50) == 50


def test_smooth_index_values():
    # |z|² = 20: nu ~ 0.11, smooth ~ 3.89
    assert smooth_color_index(3, True, 20.0, 50) == 3
    # |z|² = 300: nu ~ 1.04, smooth ~ 4.96
    assert smooth_color_index(5, True, 300.0, 50) == 4
    # |z|² = 9 after one iteration: smooth ~ 2.34
    assert smooth_color_index(1, True, 9.0, 50) == 2


def test_smooth_index_wraps_modulo_max_iter():
    assert smooth_color_index(12, True, 20.0, 10) == 2


def test_smooth_index_negative_is_clamped_to_zero():
    # nu = 3 gives smooth = -1
    assert smooth_color_index(1, True, 4.0 ** 16, 10) == 0


def test_smooth_index_falls_back_without_valid_logarithm():
    assert smooth_color_index(7, True, 0.5, 50) == 7
    assert smooth_color_index(7, True, 1.0, 50) == 7


def test_render_pass_shape_and_alpha():
    palette = build_palette(0, 20)
    pixels = render_pass(16, 9, View(complex(-0.5, 0), 1.0), 20, palette)
    assert pixels.shape == (9, 16, 4)
    assert pixels.dtype == np.uint8
    assert np.all(pixels[:, :, 3] == 255)


def test_render_pass_colors_match_palette():
    max_iter = 100
    palette = build_palette(0, max_iter)
    pixels = render_pass(64, 64, View(complex(-0.5, 0), 1.0), max_iter, palette)

    # Pixel (32, 32) maps to c = -0.5, inside the main cardioid
    assert tuple(pixels[32, 32, :3]) == (0, 0, 0)

    # Pixel (0, 0) maps to c = -2.25 - 1.75i, escaping at once
    x_min, x_max, y_min, y_max = View(complex(-0.5, 0), 1.0).bounds(64, 64)
    result = evaluate(complex(x_min, y_min), max_iter)
    idx = smooth_color_index(result.iterations, result.escaped,
                             result.final_magnitude_squared, max_iter)
    assert result.iterations == 1
    assert tuple(pixels[0, 0, :3]) == tuple(palette[idx])


def test_render_pass_does_not_touch_inputs():
    palette = build_palette(3, 30)
    before = palette.copy()
    view = View(complex(-0.5, 0), 2.0)
    render_pass(8, 8, view, 30, palette)
    assert np.array_equal(palette, before)
    assert view == View(complex(-0.5, 0), 2.0)


def test_render_pass_is_deterministic():
    palette = build_palette(1, 64)
    view = View(complex(-0.75, 0.1), 4.0)
    first = render_pass(20, 15, view, 64, palette)
    second = render_pass(20, 15, view, 64, palette)
    assert first is not second
    assert np.array_equal(first, second)


def test_render_pass_keeps_pixels_square():
    view = View(complex(-0.5, 0), 1.0)
    x_min, x_max, y_min, y_max = view.bounds(200, 100)
    assert math.isclose((x_max - x_min) / 200, (y_max - y_min) / 100)


def test_escape_on_last_allowed_iteration():
    # z: 0 -> 2 (on the bailout circle) -> 6
    assert evaluate(2, 2) == EscapeResult(2, True, 36.0)
