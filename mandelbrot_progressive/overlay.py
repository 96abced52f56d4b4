"""
Compositing and HUD drawing for the Mandelbrot viewer.

Draws the renderer's latest pass scaled to the window, then the status
box, colour scheme label, title and (while passes are still running)
a progress bar.
"""

import numpy as np
import pygame


BOX_COLOR = (0, 0, 0, 166)
TEXT_COLOR = (255, 255, 255)
PROGRESS_COLOR = (0, 255, 0)
PADDING = 8


def buffer_to_surface(buffer):
    """
    Convert a PixelBuffer to a pygame Surface.

    The buffer's row 0 is the bottom of the view, so it is flipped to
    make the imaginary axis point up on screen.
    """
    rgb = np.flipud(buffer.pixels[:, :, :3])
    return pygame.surfarray.make_surface(rgb.swapaxes(0, 1))


def _draw_box(screen, rect):
    box = pygame.Surface((rect.width, rect.height), pygame.SRCALPHA)
    box.fill(BOX_COLOR)
    screen.blit(box, rect.topleft)


class Overlay:
    """Draws a renderer's state onto a pygame surface."""

    def __init__(self):
        self.font = None
        self.mono_font = None
        self.small_font = None
        self.title_font = None
        self.font_size = None

    def init_fonts(self, size):
        pygame.font.init()
        self.font_size = size
        self.font = pygame.font.SysFont('Arial', size)
        self.mono_font = pygame.font.SysFont('monospace', size)
        self.small_font = pygame.font.SysFont('Arial', max(10, size - 1))
        self.title_font = pygame.font.SysFont('Arial', max(12, size + 1), bold=True)

    def draw(self, screen, renderer):
        """Draw the latest buffer and the HUD for the renderer."""
        width, height = screen.get_size()
        screen.fill((0, 0, 0))
        if width == 0 or height == 0:
            return

        self.draw_buffer(screen, renderer.buffer, smooth=not renderer.converged)

        size = int(max(11, min(height * 0.022, 14)))
        if self.font is None or self.font_size != size:
            self.init_fonts(size)

        self._draw_status(screen, renderer.status_lines())
        self._draw_scheme_label(screen, renderer.scheme_name)
        if not renderer.converged:
            self._draw_progress(screen, *renderer.progress)
        self._draw_title(screen)

    def draw_buffer(self, screen, buffer, smooth=True):
        """Scale a buffer to fill the screen. Coarse passes look better smoothed."""
        if buffer is None:
            return
        surface = buffer_to_surface(buffer)
        size = screen.get_size()
        if surface.get_size() == size:
            screen.blit(surface, (0, 0))
        elif smooth:
            screen.blit(pygame.transform.smoothscale(surface, size), (0, 0))
        else:
            screen.blit(pygame.transform.scale(surface, size), (0, 0))

    def _draw_status(self, screen, lines):
        width = screen.get_width()
        line_height = self.font_size + 4
        box_w = int(max(180, width * 0.25))
        box_h = len(lines) * line_height + PADDING * 2
        rect = pygame.Rect(width - box_w - 10, 10, box_w, box_h)
        _draw_box(screen, rect)

        for i, line in enumerate(lines):
            text = self.mono_font.render(line, True, TEXT_COLOR)
            screen.blit(text, (rect.x + PADDING, rect.y + PADDING + i * line_height))

    def _draw_scheme_label(self, screen, name):
        height = screen.get_height()
        _draw_box(screen, pygame.Rect(10, height - 30, 120, 22))
        text = self.font.render('Scheme: %s' % name, True, TEXT_COLOR)
        screen.blit(text, (16, height - 27))

    def _draw_progress(self, screen, done, total):
        _draw_box(screen, pygame.Rect(10, 10, 130, 20))
        fill = int(126 * done / total) if total else 0
        if fill > 0:
            pygame.draw.rect(screen, PROGRESS_COLOR, (12, 12, fill, 16))
        text = self.small_font.render('Rendering... %d/%d' % (done, total), True, TEXT_COLOR)
        screen.blit(text, text.get_rect(center=(75, 20)))

    def _draw_title(self, screen):
        height = screen.get_height()
        _draw_box(screen, pygame.Rect(10, height - 58, 180, 24))
        text = self.title_font.render('Mandelbrot Set', True, TEXT_COLOR)
        screen.blit(text, (16, height - 55))
