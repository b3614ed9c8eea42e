#!/usr/bin/env python3

"""
Keypad (Input Latch)

Holds the up/down state of the 16 hexadecimal keys.  The host sets keys from
its own thread whenever input events arrive, and the CPU reads them during
instruction execution, so every access goes through a lock.

As with the host input plugins, this also stores the last key released, and
has the appropriate 'reset' switch that needs to be called before waiting on
it.  A press only counts once the key comes back up.
"""

__copyright__ = "Copyright (C) 2022 Gregory Maynard-Hoare"
__license__ = "GNU Affero General Public License v3.0"

from threading import Lock
from .constants import NUM_KEYS


class KeypadError(Exception):
    pass


class Keypad:
    def __init__(self):
        self.lock = Lock()
        self.key_down = [False] * NUM_KEYS
        self.last_keypress = None

    def _check_key(self, key):
        if not 0 <= key < NUM_KEYS:
            raise KeypadError("Key 0x{:x} is out of range -- keys must be 0x0 to 0xf".format(key))

    def set_key(self, key, pressed):
        self._check_key(key)
        pressed = bool(pressed)

        with self.lock:
            if self.key_down[key] and not pressed:
                self.last_keypress = key

            self.key_down[key] = pressed

    def is_key_down(self, key):
        self._check_key(key)

        with self.lock:
            return self.key_down[key]

    def setup_keypress(self):
        with self.lock:
            self.last_keypress = None

    def get_keypress(self):
        with self.lock:
            return self.last_keypress

    def get_keys(self):
        with self.lock:
            return tuple(self.key_down)
