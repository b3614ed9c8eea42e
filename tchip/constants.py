#!/usr/bin/env python3

__copyright__ = "Copyright (C) 2022 Gregory Maynard-Hoare"
__license__ = "GNU Affero General Public License v3.0"

# App identification
APP_NAME = "ThreadChip Emulator"
APP_VERSION = "1.0.0"
APP_COPYRIGHT = "Copyright (C) 2022 Gregory Maynard-Hoare, licensed under GNU Affero General Public License v3.0"
APP_INTRO = "{} V{} -- ".format(APP_NAME, APP_VERSION)

# Memory map
MEM_SIZE = 0x1000        # 4K of system RAM
FONT_LOCATION = 0x000    # Hex digit sprites live at the very bottom of RAM
FONT_CHAR_SIZE = 5       # Each digit is 8x5 pixels
PROGRAM_LOCATION = 0x200

# Register file
NUM_REGISTERS = 0x10
STACK_SIZE = 16

# Display
VID_WIDTH = 64
VID_HEIGHT = 32

# Input
NUM_KEYS = 0x10

# Clocks
CLOCK_SPEED = 1000  # Instructions per second (approximate, paced by sleeping)
TIMER_FREQ = 60.0   # Delay and sound timers both tick at 60Hz
DISPLAY_FREQ = 60.0

# Default mappings for keys 0-F, later populated into a dictionary.  Note that the keyscans (on a UK QWERTY keyboard)
# and ASCII characters for these are the same code
DEFAULT_KEYMAP = "120,49,50,51,113,119,101,97,115,100,122,99,52,114,102,118"

# CPU quirks.  All are off by default apart from shift, which gives the classic behaviour
CPU_QUIRKS = ["shift", "load", "logic", "random", "jump"]
