#!/usr/bin/env python3

"""
CPU Tracer

If live output is enabled, this will print a line before each instruction is
executed:
    * All 16 of the [V] registers, starting with most significant (Vf) and
      reducing to least significant (V0)
    * I  - Index register
    * DT - Delay timer
    * ST - Sound timer
    * PC - Program counter (address the opcode was fetched from)
    * OP - OpCode number
    * IN - Decoded instruction

When a fault occurs, all of the above is included in the report, with the
addition of:
    * SP    - Stack pointer
    * Stack - Stack contents
"""

__copyright__ = "Copyright (C) 2022 Gregory Maynard-Hoare"
__license__ = "GNU Affero General Public License v3.0"


class Tracer:
    def __init__(self, live=False):
        self.live = live

    def trace(self, cpu, instruction, verbose=False):
        trace_str = (
            "V: 0x" + ("{:02x}" * 16) + " I: 0x{:04x} DT: 0x{:02x} ST: 0x{:02x} PC: 0x{:03x} OP: 0x{:04x} IN: {}"
        ).format(
            *[cpu.v[reg_num] for reg_num in range(15, -1, -1)] +
            [cpu.i, cpu.delay_timer.get(), cpu.sound_timer.get(), cpu.debug_pc, cpu.opcode, instruction]
        )

        if verbose:
            stack_items = cpu.stack.get_items()
            stack_str = (" 0x{:03x}" * len(stack_items)).format(*stack_items)
            trace_str += "\nSP: {}\nStack:{}".format(cpu.stack.sp, stack_str or " (Empty)")

        return trace_str

    def is_live(self):
        return self.live

    def output(self, cpu, instruction):
        print(self.trace(cpu, instruction))

    def report(self, message):
        print(message)
