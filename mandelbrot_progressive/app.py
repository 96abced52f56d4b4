"""
Main application module for the Mandelbrot viewer.

Contains the MandelbrotApp class which handles:
- Window setup and main loop
- Keyboard controls that edit the parameter map
- Feeding update()/render() to the progressive renderer once per frame
- Saving the current image
"""

import logging
import os
from datetime import datetime

import pygame

from .colormaps import COLOR_SCHEMES
from .compute import warmup_jit
from .overlay import buffer_to_surface
from .renderer import (
    MAX_ITERATIONS,
    MAX_ZOOM_LEVEL,
    MIN_ITERATIONS,
    MIN_ZOOM_LEVEL,
    BackgroundRenderer,
    MandelbrotRenderer,
)
from .settings import load_settings


logger = logging.getLogger(__name__)

CAPTION = "Mandelbrot Set - +/- zoom, arrows pan, [ ] iterations, C scheme, R reset"


class MandelbrotApp:
    """
    Main application class for the Mandelbrot viewer.

    Handles the pygame window and event loop, and acts as the host
    driver for the renderer: it owns the parameter map and calls
    update(dt, params) and render(screen) every frame.
    """

    def __init__(self, width=None, height=None, max_iter=None, color_scheme=None,
                 background=False, settings=None):
        """
        Initialize the application.

        Args:
            width, height: Window size in pixels (default from settings)
            max_iter: Starting maximum iteration count
            color_scheme: Starting colour scheme id
            background: Compute passes on a worker thread
            settings: Settings dict (default: load_settings())
        """
        self.settings = settings or load_settings()
        window = self.settings['window']
        self.width = width or window['width']
        self.height = height or window['height']
        self.fps = window['fps']
        self.resizable = window['resizable']
        self.controls = self.settings['controls']
        self.background = background

        self.params = dict(self.settings['parameters'])
        if max_iter is not None:
            self.params['maxIterations'] = max_iter
        if color_scheme is not None:
            self.params['colorScheme'] = color_scheme
        self.default_params = dict(self.params)

        # Pygame state (initialized in run())
        self.screen = None
        self.clock = None
        self.renderer = None

        self.running = False

    def run(self):
        """Run the application main loop."""
        self._init_pygame()
        self._init_renderer()

        self.running = True
        while self.running:
            dt = self.clock.tick(self.fps) / 1000.0

            self._handle_events()
            self.renderer.update(dt, self.params)
            self.renderer.render(self.screen)
            self._update_caption()

            pygame.display.flip()

        self.renderer.destroy()
        pygame.quit()

    def _init_pygame(self):
        """Initialize pygame and create window."""
        pygame.init()
        flags = pygame.DOUBLEBUF
        if self.resizable:
            flags |= pygame.RESIZABLE
        self.screen = pygame.display.set_mode((self.width, self.height), flags)
        pygame.display.set_caption("Compiling (first run only)...")
        self.clock = pygame.time.Clock()

    def _init_renderer(self):
        """Warm up the JIT and create the renderer."""
        warmup_jit()
        divisors = self.settings['render']['pass_divisors']
        renderer_cls = BackgroundRenderer if self.background else MandelbrotRenderer
        self.renderer = renderer_cls(self.width, self.height, divisors)
        pygame.display.set_caption(CAPTION)

    def _handle_events(self):
        """Process all pending pygame events."""
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                self.running = False
            elif event.type == pygame.VIDEORESIZE:
                self.width, self.height = event.w, event.h
                self.renderer.resize(self.width, self.height)
            elif event.type == pygame.KEYDOWN:
                self.handle_key(event.key)

    def handle_key(self, key):
        """Apply a key press to the parameter map."""
        params = self.params
        zoom_step = self.controls['zoom_step']
        pan_step = self.controls['pan_step']
        iteration_step = self.controls['iteration_step']

        if key in (pygame.K_PLUS, pygame.K_EQUALS, pygame.K_KP_PLUS):
            params['zoomLevel'] = min(MAX_ZOOM_LEVEL, params['zoomLevel'] + zoom_step)
        elif key in (pygame.K_MINUS, pygame.K_KP_MINUS):
            params['zoomLevel'] = max(MIN_ZOOM_LEVEL, params['zoomLevel'] - zoom_step)
        elif key in (pygame.K_LEFT, pygame.K_RIGHT):
            # Pan by a fraction of the visible range
            step = pan_step * self.renderer.view.range if self.renderer else pan_step
            params['centerOffset'] += step if key == pygame.K_RIGHT else -step
        elif key == pygame.K_RIGHTBRACKET:
            params['maxIterations'] = min(MAX_ITERATIONS, params['maxIterations'] + iteration_step)
        elif key == pygame.K_LEFTBRACKET:
            params['maxIterations'] = max(MIN_ITERATIONS, params['maxIterations'] - iteration_step)
        elif key == pygame.K_c:
            params['colorScheme'] = (int(params['colorScheme']) + 1) % len(COLOR_SCHEMES)
        elif key == pygame.K_r:
            self.params = dict(self.default_params)
            if self.renderer:
                self.renderer.reset()
        elif key == pygame.K_s:
            self.save_image()
        elif key == pygame.K_ESCAPE:
            self.running = False

    def _update_caption(self):
        done, total = self.renderer.progress
        if self.renderer.converged:
            pygame.display.set_caption(CAPTION)
        else:
            pygame.display.set_caption("Rendering pass %d/%d..." % (done + 1, total))

    def save_image(self, directory=None):
        """
        Save the latest completed pass as a PNG.

        Returns:
            Path of the written file, or None if nothing has been rendered
        """
        buffer = self.renderer.buffer if self.renderer else None
        if buffer is None:
            logger.warning("Nothing rendered yet, not saving")
            return None

        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        directory = directory or os.getcwd()
        filename = os.path.join(directory, f"mandelbrot_{timestamp}.png")

        pygame.image.save(buffer_to_surface(buffer), filename)
        print(f"Image saved to: {filename}")
        return filename


def run(width=None, height=None, max_iter=None, color_scheme=None, background=False):
    """
    Run the Mandelbrot viewer.

    Args:
        width, height: Window size (default from settings.json)
        max_iter: Maximum iterations (default from settings.json)
        color_scheme: Colour scheme id (default from settings.json)
        background: Compute passes on a worker thread
    """
    app = MandelbrotApp(width, height, max_iter, color_scheme, background)
    try:
        app.run()
    except KeyboardInterrupt:
        pygame.quit()
