#!/usr/bin/env python3

"""
RAM Emulator

A flat, byte-addressable memory space.  Supports reading and writing of blocks
of memory or individual bytes, and zeroing of memory blocks.

Every access is bounds checked.  Addresses do not wrap, so a runaway index
register or a program which is too large is reported instead of being silently
truncated.
"""

__copyright__ = "Copyright (C) 2022 Gregory Maynard-Hoare"
__license__ = "GNU Affero General Public License v3.0"


class RAMError(Exception):
    pass


class RAM:
    def __init__(self, mem_size):
        self.mem = memoryview(bytearray(mem_size))
        self.mem_top = mem_size - 1
        self.mem_size = mem_size

    def read(self, location):
        self.check_overflow(location)
        return self.mem[location]

    def read_block(self, location, size=1):
        self.check_overflow(location)
        self.check_overflow(location + size - 1)
        return bytes(self.mem[location:location + size])

    def write(self, location, byte):
        self.check_overflow(location)
        self.mem[location] = byte & 0xFF

    def write_block(self, location, block):
        block_size = len(block)

        if not block_size:
            return

        block_top = location + block_size
        self.check_overflow(location)
        self.check_overflow(block_top - 1)
        self.mem[location:block_top] = block

    def check_overflow(self, location):
        if location < 0 or location > self.mem_top:
            raise RAMError("Memory access out of range at address 0x{:04x}".format(location))

    def zero_block(self, offset, size):
        block_top = offset + size
        self.check_overflow(offset)
        self.check_overflow(block_top - 1)
        self.mem[offset:block_top] = bytes(size)

    def clear(self):
        self.zero_block(0, self.mem_size)
