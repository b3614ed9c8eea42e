#!/usr/bin/env python3

"""
PyGame Renderer Plugin

Draws framebuffer snapshots onto an SDL window surface via PyGame.  The
surface is allocated at the emulated resolution, and then the contents are
stretched (using 'Nearest Neighbour' translation) to fit the window itself.
This means we don't have to draw the same pixel multiple times.
"""

__copyright__ = "Copyright (C) 2022 Gregory Maynard-Hoare"
__license__ = "GNU Affero General Public License v3.0"

import pygame
from .r_null import RendererError, Renderer as RendererBase
from ..constants import APP_NAME

COLOUR_OFF = 0x222222
COLOUR_ON = 0xDDDDDD


class Renderer(RendererBase):
    def __init__(self, scale=None, **kwargs):
        if scale is None:
            scale = 512  # Default window width if not supplied

        if scale < 64:
            raise RendererError("Window width must be at least 64 pixels.")

        pygame.display.init()
        self.set_title(APP_NAME)
        self.rgb_buffer = None
        self.scaled_size = (scale, scale // 2)
        self.display_surface = pygame.display.set_mode(self.scaled_size)

        # Split compound RGB values for faster byte-based lookup later
        self.rgb_map = [bytes([i >> 16, (i >> 8) & 0xFF, i & 0xFF]) for i in (COLOUR_OFF, COLOUR_ON)]

        super().__init__(scale)

    def set_resolution(self, width, height):
        self.rgb_buffer = memoryview(bytearray(width * height * 3))  # 24-bit
        super().set_resolution(width, height)

    def draw_screen(self, screen):
        if not super().draw_screen(screen):
            return False

        height = len(screen)
        width = len(screen[0]) if height else 0

        if (width, height) != (self.width, self.height):
            self.set_resolution(width, height)

        # Update RGB buffer in-place to minimise allocations and PyGame calls
        rgb_buffer = self.rgb_buffer
        rgb_map = self.rgb_map
        rgb_location = 0

        for row in screen:
            for pixel in row:
                rgb_buffer[rgb_location:rgb_location + 3] = rgb_map[pixel]
                rgb_location += 3

        # Blit the bytearray straight to the surface
        render_surface = pygame.image.frombuffer(rgb_buffer, (width, height), "RGB")
        scaled_win = pygame.transform.scale(render_surface, self.scaled_size)
        self.display_surface.blit(scaled_win, (0, 0))
        pygame.display.flip()
        return True

    def set_title(self, title):
        pygame.display.set_caption(title)

    def shutdown(self):
        # PyGame currently segfaults if display.quit is called via __del__
        pygame.display.quit()
        super().shutdown()
