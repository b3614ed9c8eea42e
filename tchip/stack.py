#!/usr/bin/env python3

"""
Stack Emulator

The call stack is kept out of system RAM, as no program can address it.  It is
modelled as a fixed number of 16-bit return address slots and a stack pointer
(SP) which always refers to the next free slot, so SP is also the current call
depth.
"""

__copyright__ = "Copyright (C) 2022 Gregory Maynard-Hoare"
__license__ = "GNU Affero General Public License v3.0"


class StackError(Exception):
    pass


class Stack:
    def __init__(self, size):
        self.slots = [0] * size
        self.size = size
        self.sp = 0

    def push(self, address):
        if self.sp >= self.size:
            raise StackError("Stack overflow")

        self.slots[self.sp] = address & 0xFFFF
        self.sp += 1

    def pop(self):
        if self.sp <= 0:
            raise StackError("Stack underflow")

        self.sp -= 1
        return self.slots[self.sp]

    def get_items(self):
        # Live return addresses only, oldest first.  For tracing
        return self.slots[:self.sp]
