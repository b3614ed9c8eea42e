#!/usr/bin/env python3

"""
Framebuffer Emulator

Programs for this system cannot write directly into video RAM.  Instead,
sprites are drawn to the screen using an XOR method, and the only other way of
changing the screen is to clear it completely.

Pixels are held in their own bank of RAM, one byte per pixel (0x00 or 0xFF).
Sprites wrap around both edges of the screen.  Collisions (where any pixel was
set, but was unset by an XOR) are reported back to the caller.

The host never sees this bank directly.  It takes a snapshot, which is an
immutable copy and so is safe to hold on to while the CPU keeps drawing.
"""

__copyright__ = "Copyright (C) 2022 Gregory Maynard-Hoare"
__license__ = "GNU Affero General Public License v3.0"

from .ram import RAM


class Framebuffer:
    def __init__(self, vid_width, vid_height):
        self.vid_width = vid_width
        self.vid_height = vid_height
        self.vid_size = vid_width * vid_height
        self.ram_bank = RAM(self.vid_size)

    def clear(self):
        self.ram_bank.clear()

    def xor_pixel(self, x, y):
        # Returns True if a lit pixel was erased
        x %= self.vid_width
        y %= self.vid_height
        vram_loc = y * self.vid_width + x
        pixel = self.ram_bank.read(vram_loc)
        self.ram_bank.write(vram_loc, pixel ^ 0xFF)

        return pixel != 0

    def draw_sprite(self, x, y, sprite):
        # Each byte of the sprite is one row, most-significant bit leftmost.  The origin wraps, and so does every pixel
        # after it, so a sprite that runs off the right or bottom reappears on the left or top.
        vx_pos = x % self.vid_width
        vy_pos = y % self.vid_height
        collided = False

        for row, spr_data in enumerate(sprite):
            for col in range(8):
                if spr_data & (0x80 >> col):
                    if self.xor_pixel(vx_pos + col, vy_pos + row):
                        # Don't stop drawing.  Set the flag, and never unset it for this sprite.
                        collided = True

        return collided

    def get_pixel(self, x, y):
        return self.ram_bank.read(y * self.vid_width + x) != 0

    def snapshot(self):
        mem = self.ram_bank.mem
        vid_width = self.vid_width

        return tuple(
            tuple(mem[loc] != 0 for loc in range(row_loc, row_loc + vid_width))
            for row_loc in range(0, self.vid_size, vid_width)
        )
