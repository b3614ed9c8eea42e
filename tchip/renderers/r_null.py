#!/usr/bin/env python3

"""
Null Renderer Plugin

This serves as a base class for other rendering plugins, and can be used on
its own to run a program headless.

Renderers are handed a whole framebuffer snapshot (rows of booleans) and only
redraw when it differs from the last one they were given.
"""

__copyright__ = "Copyright (C) 2022 Gregory Maynard-Hoare"
__license__ = "GNU Affero General Public License v3.0"


class RendererError(Exception):
    pass


class Renderer:
    def __init__(self, scale=None, **kwargs):  # pylint: disable=unused-argument
        self.scale = 1 if scale is None else scale
        self.last_screen = None
        self.set_resolution(0, 0)

    def set_resolution(self, width, height):
        self.width = width
        self.height = height

    def draw_screen(self, screen):
        # Returns True if anything needed redrawing
        if screen == self.last_screen:
            return False

        self.last_screen = screen
        return True

    def set_title(self, title):
        pass

    def shutdown(self):
        pass
