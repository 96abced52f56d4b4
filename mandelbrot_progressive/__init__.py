"""
Progressive Mandelbrot Renderer Package

An interactive Mandelbrot set viewer that stays responsive by rendering
each view in passes of increasing resolution (1/8, 1/4, 1/2, full),
one pass per frame. Pygame handles display, Numba the per-pixel work.

Quick Start:
    from mandelbrot_progressive import run
    run()

Or from command line:
    python -m mandelbrot_progressive

Package Structure:
    - compute.py: JIT-compiled escape-time and pass computation
    - colormaps.py: Colour schemes and the palette cache
    - renderer.py: Progressive pass scheduler and its data model
    - overlay.py: Compositing and HUD drawing
    - settings.py: Defaults and settings.json loading
    - app.py: Main application and event loop

Controls:
    - +/-: Zoom in/out
    - Left/Right: Pan along the real axis
    - [ / ]: Fewer/more iterations
    - C: Next colour scheme
    - R: Reset to default view
    - S: Save image
    - ESC: Quit
"""

from .app import run, MandelbrotApp
from .renderer import (
    BackgroundRenderer,
    MandelbrotRenderer,
    PixelBuffer,
    RenderParameters,
    View,
)
from .colormaps import COLOR_SCHEMES, PaletteCache, build_palette, list_scheme_names
from .compute import EscapeResult, evaluate, render_pass

__version__ = "1.0.0"
__all__ = [
    "run",
    "MandelbrotApp",
    "MandelbrotRenderer",
    "BackgroundRenderer",
    "RenderParameters",
    "PixelBuffer",
    "View",
    "COLOR_SCHEMES",
    "PaletteCache",
    "build_palette",
    "list_scheme_names",
    "EscapeResult",
    "evaluate",
    "render_pass",
]
