"""
Progressive Mandelbrot renderer.

The MandelbrotRenderer class handles:
- Reading the host's parameter map (clamped, never raising)
- Restarting the pass sequence when the parameters change
- Computing one resolution pass per update() (1/8, 1/4, 1/2, full)
- Publishing each completed pass as a new immutable PixelBuffer
- Caching the palette for the current scheme / iteration count

BackgroundRenderer does the same work on a worker thread so that
update() never computes on the caller's thread.
"""

import logging
import math
import threading
from dataclasses import dataclass

import numpy as np

from .colormaps import COLOR_SCHEMES, PaletteCache, get_scheme_name
from .compute import render_pass
from .overlay import Overlay


logger = logging.getLogger(__name__)

# View of the whole set at zoom level 1
BASE_CENTER = complex(-0.5, 0.0)
BASE_RANGE = 3.5

PASS_DIVISORS = (8, 4, 2, 1)

MIN_ITERATIONS = 10
MAX_ITERATIONS = 1000
MIN_ZOOM_LEVEL = -20.0
MAX_ZOOM_LEVEL = 50.0


@dataclass(frozen=True)
class View:
    """Visible window of the complex plane."""

    center: complex
    zoom_level: float

    @property
    def zoom_factor(self):
        return 2.0 ** (self.zoom_level - 1)

    @property
    def range(self):
        """Width of the window along the real axis."""
        return BASE_RANGE / self.zoom_factor

    def bounds(self, width, height):
        """(x_min, x_max, y_min, y_max) for a width x height pixel grid."""
        half_x = self.range / 2
        half_y = half_x * (height / width)
        return (
            self.center.real - half_x,
            self.center.real + half_x,
            self.center.imag - half_y,
            self.center.imag + half_y,
        )


def _read_number(params, keys, default):
    """First finite numeric value among keys, else default."""
    for key in keys:
        if key not in params:
            continue
        try:
            value = float(params[key])
        except (TypeError, ValueError, OverflowError):
            return default
        return value if math.isfinite(value) else default
    return default


def _clamp(value, low, high):
    return max(low, min(high, value))


@dataclass(frozen=True)
class RenderParameters:
    """
    Externally supplied render configuration.

    Always holds valid values: from_mapping() clamps or defaults anything
    out of range. Two parameter sets are equal when their keys are equal.
    """

    max_iterations: int = 100
    color_scheme: int = 0
    zoom_level: float = 1.0
    center_offset: float = 0.0

    @classmethod
    def from_mapping(cls, params):
        """
        Build parameters from the host's map.

        Reads maxIterations, colorScheme, zoomLevel and centerOffset
        (centerXOffset is accepted too). Missing, non-numeric and
        non-finite values fall back to the defaults.
        """
        params = params or {}
        max_iter = math.floor(_read_number(params, ('maxIterations',), cls.max_iterations))
        scheme = math.floor(_read_number(params, ('colorScheme',), cls.color_scheme))
        zoom = _read_number(params, ('zoomLevel',), cls.zoom_level)
        offset = _read_number(params, ('centerOffset', 'centerXOffset'), cls.center_offset)

        return cls(
            max_iterations=_clamp(max_iter, MIN_ITERATIONS, MAX_ITERATIONS),
            color_scheme=_clamp(scheme, 0, len(COLOR_SCHEMES) - 1),
            zoom_level=_clamp(zoom, MIN_ZOOM_LEVEL, MAX_ZOOM_LEVEL),
            center_offset=offset,
        )

    @property
    def key(self):
        """Composite identity, rounded so float noise does not restart passes."""
        return '%d-%d-%.4f-%.4f' % (
            self.max_iterations, self.color_scheme,
            self.zoom_level, self.center_offset,
        )

    @property
    def view(self):
        return View(BASE_CENTER + self.center_offset, self.zoom_level)

    def __eq__(self, other):
        if not isinstance(other, RenderParameters):
            return NotImplemented
        return self.key == other.key

    def __hash__(self):
        return hash(self.key)


@dataclass(frozen=True)
class PixelBuffer:
    """A completed pass: read-only RGBA pixels plus its resolution divisor."""

    pixels: np.ndarray
    divisor: int

    @property
    def width(self):
        return self.pixels.shape[1]

    @property
    def height(self):
        return self.pixels.shape[0]


class MandelbrotRenderer:
    """
    Progressive, single-threaded Mandelbrot renderer.

    Usage:
        renderer = MandelbrotRenderer(800, 600)

        # In your game loop:
        renderer.update(dt, {'maxIterations': 200, 'zoomLevel': 3})
        renderer.render(screen)

    Each update() computes at most one pass, so a frame never waits for
    more than one pass at the current (possibly coarse) resolution.

    Attributes:
        width, height: Target surface dimensions
        divisors: Resolution divisor for each pass, coarsest first
        time: Accumulated delta time from update() calls
    """

    def __init__(self, width, height, divisors=PASS_DIVISORS):
        if not divisors or any(int(d) < 1 for d in divisors):
            raise ValueError("pass divisors must be positive integers")
        self.divisors = tuple(int(d) for d in divisors)
        self.palettes = PaletteCache()
        self.overlay = Overlay()
        self.params = RenderParameters()
        self.palette = None
        self.init(width, height)

    def init(self, width, height):
        """Set the target size and start over from the first pass."""
        self.width = max(0, int(width))
        self.height = max(0, int(height))
        self.time = 0.0
        self.pass_index = 0
        self.converged = False
        self.last_key = None
        self._buffer = None

    @property
    def total_passes(self):
        return len(self.divisors)

    @property
    def buffer(self):
        """Most recently completed PixelBuffer, or None."""
        return self._buffer

    @property
    def view(self):
        return self.params.view

    @property
    def progress(self):
        """(completed passes, total passes) since the last restart."""
        return self.pass_index, self.total_passes

    def pass_resolution(self, pass_index):
        """Pixel size of a pass, never below 1x1."""
        d = self.divisors[min(pass_index, self.total_passes - 1)]
        return max(1, self.width // d), max(1, self.height // d)

    def update(self, dt, params):
        """
        Advance the renderer by at most one pass.

        Args:
            dt: Seconds since the previous frame
            params: Host parameter map (see RenderParameters.from_mapping)

        Returns:
            True if a new buffer was published
        """
        self.time += dt
        self._apply_params(RenderParameters.from_mapping(params))

        if self.converged:
            return False
        if self.width == 0 or self.height == 0:
            logger.debug("Skipping pass %d: zero-area target", self.pass_index)
            return False

        pass_index = self.pass_index
        w, h = self.pass_resolution(pass_index)
        pixels = render_pass(w, h, self.view, self.params.max_iterations, self.palette)
        self._publish(pixels, pass_index)
        return True

    def _apply_params(self, params):
        """Restart the pass sequence if the parameter key changed."""
        key = params.key
        if key == self.last_key:
            return False

        logger.debug("Parameters changed to %s, restarting passes", key)
        self.params = params
        self.last_key = key
        self.palette = self.palettes.build(params.color_scheme, params.max_iterations)
        self._restart(discard=True)
        return True

    def _restart(self, discard):
        self.pass_index = 0
        self.converged = False
        if discard:
            self._buffer = None

    def _publish(self, pixels, pass_index):
        pixels.setflags(write=False)
        self._buffer = PixelBuffer(pixels, self.divisors[pass_index])
        self.pass_index = pass_index + 1
        logger.debug("Pass %d/%d done at %dx%d",
                     self.pass_index, self.total_passes, pixels.shape[1], pixels.shape[0])
        if self.pass_index >= self.total_passes:
            self.converged = True
            logger.info("Converged at %dx%d (%s)", pixels.shape[1], pixels.shape[0], self.last_key)

    def render(self, surface):
        """Draw the latest buffer scaled to the surface, plus the overlay."""
        self.overlay.draw(surface, self)

    def resize(self, width, height):
        """
        Change the target size and restart at the first pass.

        A zero-area size keeps the previous buffer so it can still be drawn.
        """
        self.width = max(0, int(width))
        self.height = max(0, int(height))
        self._restart(discard=self.width > 0 and self.height > 0)

    def reset(self):
        """Forget the last parameters and start over."""
        self.time = 0.0
        self.last_key = None
        self._restart(discard=True)

    def destroy(self):
        """Release the buffer and palette cache."""
        self._buffer = None
        self.palette = None
        self.palettes.clear()
        self.last_key = None

    def status_lines(self):
        """Text lines for the overlay box."""
        view = self.view
        return [
            'z(n+1) = z(n)² + c',
            'Center: (%.4f, %.4f)' % (view.center.real, view.center.imag),
            'Range: %.4f' % view.range,
            'Zoom: %.1fx' % view.zoom_factor,
            'Max iterations: %d' % self.params.max_iterations,
        ]

    @property
    def scheme_name(self):
        return get_scheme_name(self.params.color_scheme)

    def get_state_description(self):
        """Human-readable summary of what is on screen."""
        view = self.view
        return (
            "Displaying the Mandelbrot set, defined by iterating z = z^2 + c "
            "starting from z = 0 for each point c in the complex plane. Points "
            "whose orbit stays bounded (|z| never exceeds 2) are in the set and "
            "drawn black. Escape-time coloring uses %d max iterations with the "
            "%s color scheme. Currently centered at (%.4f, %.4f) with range %.4f "
            "(zoom %.1fx)."
            % (self.params.max_iterations, self.scheme_name.lower(),
               view.center.real, view.center.imag, view.range, view.zoom_factor)
        )


class BackgroundRenderer(MandelbrotRenderer):
    """
    Progressive renderer that computes passes on a worker thread.

    update() only hands work to the worker and returns. At most one pass
    is in flight; every restart bumps a generation counter and a pass
    that finishes for an older generation is thrown away. Completed
    buffers are published under a lock.
    """

    def __init__(self, width, height, divisors=PASS_DIVISORS):
        self.lock = threading.Lock()
        self.idle = threading.Event()
        self.idle.set()
        self.generation = 0
        self.computing = False
        super().__init__(width, height, divisors)

    def init(self, width, height):
        with self.lock:
            super().init(width, height)
            self.generation += 1

    @property
    def buffer(self):
        with self.lock:
            return self._buffer

    def update(self, dt, params):
        """
        Start the next pass in the background if none is running.

        Returns:
            True if a pass was handed to the worker
        """
        params = RenderParameters.from_mapping(params)
        with self.lock:
            self.time += dt
            self._apply_params(params)
            if self.computing or self.converged:
                return False
            if self.width == 0 or self.height == 0:
                return False

            pass_index = self.pass_index
            job = (self.generation, pass_index, self.pass_resolution(pass_index),
                   self.view, self.params.max_iterations, self.palette)
            self.computing = True
            self.idle.clear()

        thread = threading.Thread(target=self._compute_thread, args=job)
        thread.daemon = True
        thread.start()
        return True

    def _compute_thread(self, generation, pass_index, size, view, max_iter, palette):
        """Background thread for one pass."""
        try:
            pixels = render_pass(size[0], size[1], view, max_iter, palette)
            with self.lock:
                if generation == self.generation:
                    self._publish(pixels, pass_index)
                else:
                    logger.debug("Discarding stale pass %d (generation %d)", pass_index, generation)
        except Exception:
            logger.exception("Background pass %d failed", pass_index)
        finally:
            with self.lock:
                self.computing = False
                self.idle.set()

    def _restart(self, discard):
        super()._restart(discard)
        self.generation += 1

    def wait(self, timeout=None):
        """Block until no pass is in flight. Returns False on timeout."""
        return self.idle.wait(timeout)

    def resize(self, width, height):
        with self.lock:
            super().resize(width, height)

    def reset(self):
        with self.lock:
            super().reset()

    def destroy(self):
        with self.lock:
            super().destroy()
            self.generation += 1
