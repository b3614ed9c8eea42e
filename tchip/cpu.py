#!/usr/bin/env python3

"""
CPU Emulator (CHIP-8)

Like a real computer, this is where most of the processing happens.  The CPU
owns the general purpose registers (V0-Vf), the index register (I) and the
program counter (PC), and borrows everything else: RAM, the call stack, the
framebuffer, the keypad and both timers.

This class does not keep time.  Each call to cycle() performs exactly one
fetch-decode-execute step, and the clock driver decides how often that happens.
Any fault (unknown opcode, memory out of range, stack overflow/underflow) is
raised from cycle() and nothing else is executed.
"""

__copyright__ = "Copyright (C) 2022 Gregory Maynard-Hoare"
__license__ = "GNU Affero General Public License v3.0"

from random import randint
from .constants import APP_INTRO, FONT_LOCATION, FONT_CHAR_SIZE, NUM_REGISTERS, PROGRAM_LOCATION

CPU_ENDIAN = "big"  # CHIP-8 is big-endian


class CPUError(Exception):
    pass


class CPU:
    def __init__(self, ram, stack, framebuffer, keypad, delay_timer, sound_timer, tracer, shift_quirks=None,
                 load_quirks=None, logic_quirks=None, random_quirks=None, jump_quirks=None):

        self.ram = ram
        self.stack = stack
        self.framebuffer = framebuffer
        self.keypad = keypad
        self.delay_timer = delay_timer
        self.sound_timer = sound_timer
        self.tracer = tracer
        self.live_debug = self.tracer.is_live()

        """
        Quirks
        ------

        - Shift quirks : Enabled.  SHR/SHL shift Vx in place, rather than copying Vy first.
        - Load quirks  : Disabled.  When enabled, Fx55/Fx65 leave I pointing past the last register.
        - Logic quirks : Disabled.  When enabled, OR/AND/XOR reset Vf.
        - Random quirks: Disabled.  When enabled, RND masks the random byte with the immediate operand.
        - Jump quirks  : Disabled.  When enabled, Bnnn adds Vx instead of V0.
        """

        self.shift_quirks = True if shift_quirks is None else shift_quirks
        self.load_quirks = False if load_quirks is None else load_quirks
        self.logic_quirks = False if logic_quirks is None else logic_quirks
        self.random_quirks = False if random_quirks is None else random_quirks
        self.jump_quirks = False if jump_quirks is None else jump_quirks

        # Handlers keyed by first nibble, then by masked opcode.  Fields: x/y register, kk byte, nnn address, n nibble
        self.instructions = {
            0x0: self._0nnn,  # Exact match
            0x1: self._1nnn,
            0x2: self._2nnn,
            0x3: self._3xkk,
            0x4: self._4xkk,
            0x5: self._5nnn_8nnn_9nnn,  # Masked with 0xF00F
            0x6: self._6xkk,
            0x7: self._7xkk,
            0x8: self._5nnn_8nnn_9nnn,
            0x9: self._5nnn_8nnn_9nnn,
            0xA: self._Annn,
            0xB: self._Bnnn,
            0xC: self._Cxkk,
            0xD: self._Dxyn,
            0xE: self._Ennn_Fnnn,  # Masked with 0xF0FF
            0xF: self._Ennn_Fnnn,
            # 0x0 group
            0x00E0: self._00E0,
            0x00EE: self._00EE,
            # 0x5, 0x8 and 0x9 groups
            0x5000: self._5xy0,
            0x8000: self._8xy0,
            0x8001: self._8xy1,
            0x8002: self._8xy2,
            0x8003: self._8xy3,
            0x8004: self._8xy4,
            0x8005: self._8xy5,
            0x8006: self._8xy6,
            0x8007: self._8xy7,
            0x800E: self._8xyE,
            0x9000: self._9xy0,
            # 0xE and 0xF groups
            0xE09E: self._Ex9E,
            0xE0A1: self._ExA1,
            0xF007: self._Fx07,
            0xF00A: self._Fx0A,
            0xF015: self._Fx15,
            0xF018: self._Fx18,
            0xF01E: self._Fx1E,
            0xF029: self._Fx29,
            0xF033: self._Fx33,
            0xF055: self._Fx55,
            0xF065: self._Fx65
        }

        self.v = memoryview(bytearray(NUM_REGISTERS))  # Each cell holds one byte
        self.i = 0  # Index register
        self.i_bitmask = 0xFFFF  # I is 16 bits wide, although only 0x000-0xFFF can be dereferenced

        self.pc = PROGRAM_LOCATION
        self.debug_pc = PROGRAM_LOCATION
        self.opcode = 0

        self.awaiting_keypress = False

    def cycle(self):
        self.debug_pc = self.pc  # Address of the instruction being run, for fault reports
        self.opcode = 0  # A failed fetch leaves no opcode behind
        self.opcode = self.fetch()
        self.inc_pc()  # Handlers see PC pointing at the next instruction
        self.decode_exec()

    def fetch(self):
        return int.from_bytes(self.ram.read_block(self.pc, 2), CPU_ENDIAN, signed=False)

    def _call_masked_instruction(self, masked_opcode):
        instruction = self.instructions.get(masked_opcode)

        if instruction is None:
            self._opcode_unsupported()

        instruction()

    def decode_exec(self):
        self._call_masked_instruction((0xF000 & self.opcode) >> 12)

    def inc_pc(self):
        self.pc = (self.pc + 2) & 0xFFFF

    def dec_pc(self):
        # Re-runs the current instruction on the next cycle
        self.pc = (self.pc - 2) & 0xFFFF

    # Opcode fields, decoded on every access
    @property
    def vx(self):
        return (self.opcode & 0xF00) >> 8

    @property
    def vy(self):
        return (self.opcode & 0xF0) >> 4

    @property
    def addr(self):
        return self.opcode & 0xFFF

    @property
    def byte(self):
        return self.opcode & 0xFF

    @property
    def nibble(self):
        return self.opcode & 0xF

    def _opcode_unsupported(self):
        raise CPUError(
            (
                "Emulation halted.\n\n" +
                "{}Trace:\n" +
                "{}\n\nOpcode 0x{:04x} at address 0x{:03x} is not a recognised instruction."
            ).format(
                APP_INTRO, self.tracer.trace(self, "???", verbose=True), self.opcode, self.debug_pc
            )
        ) from None

    def debug(self, instruction):
        self.tracer.output(self, instruction)

    def _0nnn(self):
        opcode = self.opcode

        if opcode < 0x10:
            # These keys belong to the first-nibble table
            self._opcode_unsupported()

        # SYS calls into native code are not supported, so only CLS and RET resolve
        self._call_masked_instruction(opcode)

    def _5nnn_8nnn_9nnn(self):
        self._call_masked_instruction(self.opcode & 0xF00F)

    def _Ennn_Fnnn(self):
        self._call_masked_instruction(self.opcode & 0xF0FF)

    def _00E0(self):  # CLS
        if self.live_debug:
            self.debug("CLS")

        self.framebuffer.clear()

    def _00EE(self):  # RET
        if self.live_debug:
            self.debug("RET")

        self.pc = self.stack.pop()

    def _1nnn(self):  # JP addr
        if self.live_debug:
            self.debug("JP 0x{:03x}".format(self.addr))

        self.pc = self.addr

    def _2nnn(self):  # CALL addr
        if self.live_debug:
            self.debug("CALL 0x{:03x}".format(self.addr))

        # PC has already moved past this instruction, so that's where RET will come back to
        self.stack.push(self.pc)
        self.pc = self.addr

    def _3xkk(self):  # SE Vx, byte
        if self.live_debug:
            self.debug("SE V{:01x}, 0x{:02x}".format(self.vx, self.byte))

        if self.v[self.vx] == self.byte:
            self.inc_pc()

    def _4xkk(self):  # SNE Vx, byte
        if self.live_debug:
            self.debug("SNE V{:01x}, 0x{:02x}".format(self.vx, self.byte))

        if self.v[self.vx] != self.byte:
            self.inc_pc()

    def _5xy0(self):  # SE Vx, Vy
        if self.live_debug:
            self.debug("SE V{:01x}, V{:01x}".format(self.vx, self.vy))

        if self.v[self.vx] == self.v[self.vy]:
            self.inc_pc()

    def _6xkk(self):  # LD Vx, byte
        if self.live_debug:
            self.debug("LD V{:01x}, 0x{:02x}".format(self.vx, self.byte))

        self.v[self.vx] = self.byte

    def _7xkk(self):  # ADD Vx, byte
        vx = self.vx
        byte = self.byte

        if self.live_debug:
            self.debug("ADD V{:01x}, 0x{:02x}".format(vx, byte))

        # Vf is left alone
        byte += self.v[vx]
        self.v[vx] = byte & 0xFF

    def _post_8xy1_8xy2_8xy3(self):
        if self.logic_quirks:
            self.v[0xF] = 0

    def _8xy0(self):  # LD Vx, Vy
        if self.live_debug:
            self.debug("LD V{:01x}, V{:01x}".format(self.vx, self.vy))

        self.v[self.vx] = self.v[self.vy]

    def _8xy1(self):  # OR Vx, Vy
        if self.live_debug:
            self.debug("OR V{:01x}, V{:01x}".format(self.vx, self.vy))

        self.v[self.vx] |= self.v[self.vy]
        self._post_8xy1_8xy2_8xy3()

    def _8xy2(self):  # AND Vx, Vy
        if self.live_debug:
            self.debug("AND V{:01x}, V{:01x}".format(self.vx, self.vy))

        self.v[self.vx] &= self.v[self.vy]
        self._post_8xy1_8xy2_8xy3()

    def _8xy3(self):  # XOR Vx, Vy
        if self.live_debug:
            self.debug("XOR V{:01x}, V{:01x}".format(self.vx, self.vy))

        self.v[self.vx] ^= self.v[self.vy]
        self._post_8xy1_8xy2_8xy3()

    def _8xy4(self):  # ADD Vx, Vy
        vx = self.vx
        vy = self.vy

        if self.live_debug:
            self.debug("ADD V{:01x}, V{:01x}".format(vx, vy))

        val = self.v[vx] + self.v[vy]
        self.v[vx] = val & 0xFF
        self.v[0xF] = int(val > 0xFF)  # Carry

    def _post_8xy5_8xy7(self, val):
        self.v[self.vx] = val & 0xFF
        # 1 means no borrow.  Written last so the flag wins when x is F
        self.v[0xF] = int(val >= 0)

    def _8xy5(self):  # SUB Vx, Vy
        if self.live_debug:
            self.debug("SUB V{:01x}, V{:01x}".format(self.vx, self.vy))

        self._post_8xy5_8xy7(self.v[self.vx] - self.v[self.vy])

    def _debug_8xy6_8xyE(self, direction):
        self.debug(
            "{} V{:01x}".format(direction, self.vx) if self.shift_quirks else
            "{} V{:01x}, V{:01x}".format(direction, self.vx, self.vy)
        )

    def _8xy6(self):  # SHR Vx {, Vy}
        if self.live_debug:
            self._debug_8xy6_8xyE("SHR")

        val = self.v[self.vx if self.shift_quirks else self.vy]
        self.v[self.vx] = val >> 1
        self.v[0xF] = val & 1

    def _8xy7(self):  # SUBN Vx, Vy
        if self.live_debug:
            self.debug("SUBN V{:01x}, V{:01x}".format(self.vx, self.vy))

        self._post_8xy5_8xy7(self.v[self.vy] - self.v[self.vx])

    def _8xyE(self):  # SHL Vx {, Vy}
        if self.live_debug:
            self._debug_8xy6_8xyE("SHL")

        val = self.v[self.vx if self.shift_quirks else self.vy]
        self.v[self.vx] = (val << 1) & 0xFF
        self.v[0xF] = val >> 7

    def _9xy0(self):  # SNE Vx, Vy
        if self.live_debug:
            self.debug("SNE V{:01x}, V{:01x}".format(self.vx, self.vy))

        if self.v[self.vx] != self.v[self.vy]:
            self.inc_pc()

    def _Annn(self):  # LD I, addr
        if self.live_debug:
            self.debug("LD I, 0x{:03x}".format(self.addr))

        self.i = self.addr

    def _Bnnn(self):  # JP V0, addr
        vr = self.vx if self.jump_quirks else 0

        if self.live_debug:
            self.debug("JP V{:01x}, 0x{:03x}".format(vr, self.addr))

        # May land past the end of RAM, in which case the next fetch faults
        self.pc = self.v[vr] + self.addr

    def _Cxkk(self):  # RND Vx, byte
        if self.live_debug:
            self.debug("RND V{:01x}, 0x{:02x}".format(self.vx, self.byte))

        val = randint(0, 0xFF)

        if self.random_quirks:
            # A mask, not an upper bound
            val &= self.byte

        self.v[self.vx] = val

    def _Dxyn(self):  # DRW Vx, Vy, nibble
        height = self.nibble

        if self.live_debug:
            self.debug("DRW V{:01x}, V{:01x}, 0x{:01x}".format(self.vx, self.vy, height))

        # Read the whole sprite first, so a sprite running off the end of RAM faults before anything is drawn
        sprite = self.ram.read_block(self.i, height) if height else b""
        collided = self.framebuffer.draw_sprite(self.v[self.vx], self.v[self.vy], sprite)
        self.v[0xF] = int(collided)

    def _Ex9E(self):  # SKP Vx
        if self.live_debug:
            self.debug("SKP V{:01x}".format(self.vx))

        if self.keypad.is_key_down(self.v[self.vx] & 0xF):
            self.inc_pc()

    def _ExA1(self):  # SKNP Vx
        if self.live_debug:
            self.debug("SKNP V{:01x}".format(self.vx))

        if not self.keypad.is_key_down(self.v[self.vx] & 0xF):
            self.inc_pc()

    def _Fx07(self):  # LD Vx, DT
        if self.live_debug:
            self.debug("LD V{:01x}, DT".format(self.vx))

        self.v[self.vx] = self.delay_timer.get()

    def _Fx0A(self):  # LD Vx, K
        if self.live_debug:
            self.debug("LD V{:01x}, K".format(self.vx))

        # Waiting happens one cycle at a time, so the timers and stop() are never blocked
        if self.awaiting_keypress:
            key = self.keypad.get_keypress()
        else:
            self.keypad.setup_keypress()  # Forget about any key released before this instruction started
            self.awaiting_keypress = True
            key = None

        if key is None:
            # Nothing released yet
            self.dec_pc()
        else:
            self.v[self.vx] = key
            self.awaiting_keypress = False

    def _Fx15(self):  # LD DT, Vx
        if self.live_debug:
            self.debug("LD DT, V{:01x}".format(self.vx))

        self.delay_timer.set(self.v[self.vx])

    def _Fx18(self):  # LD ST, Vx
        if self.live_debug:
            self.debug("LD ST, V{:01x}".format(self.vx))

        self.sound_timer.set(self.v[self.vx])

    def _Fx1E(self):  # ADD I, Vx
        if self.live_debug:
            self.debug("ADD I, V{:01x}".format(self.vx))

        self.i = (self.i + self.v[self.vx]) & self.i_bitmask

    def _Fx29(self):  # LD F, Vx
        if self.live_debug:
            self.debug("LD F, V{:01x}".format(self.vx))

        # Only the low nibble selects a digit
        self.i = FONT_LOCATION + FONT_CHAR_SIZE * (self.v[self.vx] & 0xF)

    def _Fx33(self):  # LD B, Vx
        if self.live_debug:
            self.debug("LD B, V{:01x}".format(self.vx))

        val = self.v[self.vx]
        # Written as one block, so nothing is stored if the last digit would fall outside RAM
        self.ram.write_block(self.i, bytes((val // 100, (val // 10) % 10, val % 10)))

    def _post_Fx55_Fx65(self):
        if self.load_quirks:
            self.i = (self.i + self.vx + 1) & self.i_bitmask

    def _Fx55(self):  # LD [I], Vx
        if self.live_debug:
            self.debug("LD [I], V{:01x}".format(self.vx))

        # V0 to Vx inclusive
        self.ram.write_block(self.i, self.v[:self.vx + 1])
        self._post_Fx55_Fx65()

    def _Fx65(self):  # LD Vx, [I]
        if self.live_debug:
            self.debug("LD V{:01x}, [I]".format(self.vx))

        vx = self.vx
        self.v[:vx + 1] = self.ram.read_block(self.i, vx + 1)
        self._post_Fx55_Fx65()
