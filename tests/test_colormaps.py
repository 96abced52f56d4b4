import numpy as np
import pytest

from mandelbrot_progressive.colormaps import (
    COLOR_SCHEMES,
    PaletteCache,
    build_palette,
    get_scheme_name,
    list_scheme_names,
)


@pytest.mark.parametrize("scheme", range(len(COLOR_SCHEMES)))
def test_palette_shape_and_in_set_row(scheme):
    table = build_palette(scheme, 40)
    assert table.shape == (41, 3)
    assert table.dtype == np.uint8
    assert tuple(table[40]) == (0, 0, 0)


def test_palette_is_read_only():
    table = build_palette(0, 10)
    with pytest.raises(ValueError):
        table[0, 0] = 1


def test_blue_gold_endpoints():
    table = build_palette(0, 100)
    assert tuple(table[0]) == (0, 30, 255)
    assert tuple(table[50]) == (200, 200, 155)


def test_fire_saturates_red_first():
    table = build_palette(1, 30)
    assert tuple(table[0]) == (0, 0, 0)
    assert tuple(table[15]) == (255, 127, 0)
    assert tuple(table[25]) == (255, 255, 127)
    assert tuple(table[29]) == (255, 255, 229)


def test_ocean_start():
    table = build_palette(2, 10)
    assert tuple(table[0]) == (0, 50, 150)


def test_rainbow_primary_hues():
    table = build_palette(3, 6)
    assert tuple(table[0]) == (255, 0, 0)
    assert tuple(table[2]) == (0, 255, 0)
    assert tuple(table[4]) == (0, 0, 255)


def test_grayscale_ramp():
    table = build_palette(4, 10)
    assert tuple(table[5]) == (127, 127, 127)
    assert np.all(table[:, 0] == table[:, 1])
    assert np.all(table[:, 1] == table[:, 2])


@pytest.mark.parametrize("scheme", [-1, 5, 99])
def test_unknown_scheme_falls_back_to_grayscale(scheme):
    assert np.array_equal(build_palette(scheme, 25), build_palette(4, 25))


def test_scheme_names():
    assert list_scheme_names() == ['Blue-Gold', 'Fire', 'Ocean', 'Rainbow', 'Grayscale']
    assert get_scheme_name(1) == 'Fire'
    assert get_scheme_name(42) == 'Grayscale'


def test_cache_returns_same_instance():
    cache = PaletteCache()
    first = cache.build(2, 100)
    assert cache.build(2, 100) is first


def test_cache_replaces_slot_on_new_key():
    cache = PaletteCache()
    first = cache.build(0, 100)
    second = cache.build(0, 200)
    assert second is not first
    assert second.shape == (201, 3)
    assert cache.key == (0, 200)
    # The old table is gone, asking again rebuilds it
    assert cache.build(0, 100) is not first


def test_cache_clear():
    cache = PaletteCache()
    first = cache.build(1, 50)
    cache.clear()
    assert cache.table is None
    assert cache.build(1, 50) is not first
