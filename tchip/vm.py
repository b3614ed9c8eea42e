#!/usr/bin/env python3

"""
Virtual Machine and Clock Driver

Wires a CPU up to its RAM, stack, framebuffer, keypad and timers, and drives
three activities on their own threads:
    * The instruction cycle, at roughly the configured clock speed
    * The delay timer, at 60Hz
    * The sound timer, at 60Hz

Every change to machine state happens while holding a single state lock, so
an instruction or a timer tick is always applied in full.  The keypad has its
own lock, as the host writes to it from outside.

All three threads share one stop event.  Stopping the VM sets it and joins
every thread before returning.  A fault in the instruction cycle, or any other
exception escaping it, sets the same event, so the timers come down with it.

Faults are returned from cycle() as a Fault value rather than raised, so the
caller decides what to do with them.  The threaded driver records the fault,
reports it, and stops.
"""

__copyright__ = "Copyright (C) 2022 Gregory Maynard-Hoare"
__license__ = "GNU Affero General Public License v3.0"

from collections import namedtuple
from threading import Event, Lock, Thread, current_thread
from .constants import (
    CLOCK_SPEED, FONT_LOCATION, MEM_SIZE, PROGRAM_LOCATION, STACK_SIZE, TIMER_FREQ, VID_HEIGHT, VID_WIDTH
)
from .cpu import CPU, CPUError
from .fonts import SYSTEM_FONT
from .framebuffer import Framebuffer
from .keypad import Keypad
from .ram import RAM, RAMError
from .stack import Stack, StackError
from .timers import Timer
from .tracer import Tracer

TIMER_INTERVAL = 1.0 / TIMER_FREQ

# Fault kinds
FAULT_DECODE = "decode"
FAULT_MEMORY = "memory"
FAULT_STACK = "stack"
FAULT_INTERNAL = "internal"

Fault = namedtuple("Fault", ["kind", "opcode", "pc", "message"])


class VMError(Exception):
    pass


class Chip8:
    def __init__(self, program, clock_speed=None, tracer=None, on_fault=None, **quirk_settings):
        self.tracer = Tracer() if tracer is None else tracer
        self.on_fault = on_fault

        # User can specify 0 for uncapped
        auto_clock_speed = CLOCK_SPEED if clock_speed is None else clock_speed
        self.core_interval = 0.0 if auto_clock_speed <= 0 else 1.0 / auto_clock_speed

        self.ram = RAM(MEM_SIZE)
        self.ram.write_block(FONT_LOCATION, SYSTEM_FONT)

        if PROGRAM_LOCATION + len(program) > MEM_SIZE:
            raise RAMError("Program is too large ({} bytes) to fit in memory".format(len(program)))

        self.ram.write_block(PROGRAM_LOCATION, bytes(program))

        self.stack = Stack(STACK_SIZE)
        self.framebuffer = Framebuffer(VID_WIDTH, VID_HEIGHT)
        self.keypad = Keypad()
        self.delay_timer = Timer()
        self.sound_timer = Timer()
        self.cpu = CPU(
            self.ram, self.stack, self.framebuffer, self.keypad, self.delay_timer, self.sound_timer, self.tracer,
            **quirk_settings
        )

        self.state_lock = Lock()
        self.stop_event = Event()
        self.threads = []
        self.fault = None

    # Host interface

    def start(self):
        if self.threads:
            raise VMError("VM has already been started")

        self.threads = [
            Thread(target=self._run_cpu, name="cpu", daemon=True),
            Thread(target=self._run_timer, args=(self.tick_delay_timer,), name="delay-timer", daemon=True),
            Thread(target=self._run_timer, args=(self.tick_sound_timer,), name="sound-timer", daemon=True)
        ]

        for thread in self.threads:
            thread.start()

    def stop(self):
        if not self.threads:
            raise VMError("VM was never started")

        self.stop_event.set()
        this_thread = current_thread()

        for thread in self.threads:
            # on_fault runs on the CPU thread, and may call this.  That thread finishes straight after the callback
            if thread is not this_thread:
                thread.join()

    def is_running(self):
        return any(thread.is_alive() for thread in self.threads)

    def get_screen(self):
        # Hosts may tear between frames, but never see a half-drawn sprite
        with self.state_lock:
            return self.framebuffer.snapshot()

    def set_key(self, key, pressed):
        self.keypad.set_key(key, pressed)

    # Single steps.  These are what the threads run, and can be called directly when the VM isn't started

    def cycle(self):
        with self.state_lock:
            try:
                self.cpu.cycle()
            except CPUError as e:
                return self._make_fault(FAULT_DECODE, e)
            except RAMError as e:
                return self._make_fault(FAULT_MEMORY, e)
            except StackError as e:
                return self._make_fault(FAULT_STACK, e)

        return None

    def tick_delay_timer(self):
        with self.state_lock:
            self.delay_timer.tick()

    def tick_sound_timer(self):
        with self.state_lock:
            self.sound_timer.tick()

    # Threads

    def _make_fault(self, kind, error):
        cpu = self.cpu
        return Fault(kind, cpu.opcode, cpu.debug_pc, str(error))

    def _run_cpu(self):
        stop_event = self.stop_event
        core_interval = self.core_interval
        fault = None

        try:
            while not stop_event.is_set():
                fault = self.cycle()

                if fault is not None:
                    break

                # Fixed wait rather than a precise schedule.  Waiting on the event means stop() doesn't wait out a
                # sleep
                stop_event.wait(core_interval)
        except Exception as e:  # pylint: disable=broad-except
            # Anything else that escapes an instruction (e.g. trace output failing) still halts the VM
            fault = self._make_fault(FAULT_INTERNAL, e)
        finally:
            # Bring the timers down as well, however this thread ends
            self.fault = fault
            stop_event.set()

        if fault is None:
            return

        self.tracer.report(
            "Fault ({}) at 0x{:03x}, opcode 0x{:04x}: {}".format(fault.kind, fault.pc, fault.opcode, fault.message)
        )

        if self.on_fault is not None:
            self.on_fault(fault)

    def _run_timer(self, tick):
        stop_event = self.stop_event

        # wait() returns True as soon as the VM is stopped
        while not stop_event.wait(TIMER_INTERVAL):
            tick()
