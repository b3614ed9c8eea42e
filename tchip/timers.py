#!/usr/bin/env python3

"""
Timer Emulator

CHIP-8 has two 8-bit countdown timers, delay (DT) and sound (ST).  A program
sets them, and they count down towards zero at 60Hz, stopping there.  Nothing
here knows about time: the clock driver calls tick() at the right rate.
"""

__copyright__ = "Copyright (C) 2022 Gregory Maynard-Hoare"
__license__ = "GNU Affero General Public License v3.0"


class Timer:
    def __init__(self):
        self.value = 0

    def set(self, value):
        self.value = value & 0xFF

    def get(self):
        return self.value

    def tick(self):
        if self.value > 0:
            self.value -= 1
