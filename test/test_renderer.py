#!/usr/bin/env python3

__copyright__ = "Copyright (C) 2022 Gregory Maynard-Hoare"
__license__ = "GNU Affero General Public License v3.0"

import unittest
from tchip.framebuffer import Framebuffer
from tchip.renderers.r_null import Renderer


class TestRenderer(unittest.TestCase):
    def setUp(self):
        self.renderer = Renderer()
        self.framebuffer = Framebuffer(4, 2)

    def test_renderer_init(self):
        self.assertEqual(1, self.renderer.scale)
        self.assertEqual((0, 0), (self.renderer.width, self.renderer.height))

    def test_renderer_draw_only_changes(self):
        self.assertTrue(self.renderer.draw_screen(self.framebuffer.snapshot()))
        self.assertFalse(self.renderer.draw_screen(self.framebuffer.snapshot()))
        self.framebuffer.xor_pixel(1, 1)
        self.assertTrue(self.renderer.draw_screen(self.framebuffer.snapshot()))
