#!/usr/bin/env python3

"""
Main Startup Module

Simply call main(args) to start the emulator, replacing args with a dictionary
of options.  This can be done via the Terminal or GUI.

All options must be supplied.  Defaults can be specified with a 'None'.

The VM runs on its own threads.  This module is the host: it loads the ROM,
starts the VM, and then at 60Hz passes input events in and draws the screen
until the user quits or the VM faults.  The VM is always stopped on the way
out.
"""

__copyright__ = "Copyright (C) 2022 Gregory Maynard-Hoare"
__license__ = "GNU Affero General Public License v3.0"

from time import sleep
from .constants import APP_INTRO, APP_COPYRIGHT, CPU_QUIRKS, DISPLAY_FREQ
from .hostio import Loader
from .tracer import Tracer
from .vm import Chip8

DISPLAY_INTERVAL = 1.0 / DISPLAY_FREQ


class StartupError(Exception):
    pass


class EmulationError(Exception):
    pass


def main(args):
    print("".join((APP_INTRO, APP_COPYRIGHT)))
    quirk_settings = {}

    for cpu_quirk in CPU_QUIRKS:
        quirk_label = "{}_quirks".format(cpu_quirk)
        quirk_setting = args[quirk_label]
        quirk_settings[quirk_label] = None if quirk_setting is None else bool(quirk_setting)

    opt_renderer = args["renderer"]
    auto_select_renderer = opt_renderer is None  # If necessary, try PyGame first, then fall back to headless

    # flake8: noqa: F401
    if auto_select_renderer or opt_renderer == "pygame":
        # pylint: disable=unused-import, import-outside-toplevel, raise-missing-from
        try:
            import pygame
        except ImportError:
            if auto_select_renderer:
                opt_renderer = "null"
            else:
                raise StartupError(
                    "PyGame does not appear to be installed."
                )
        else:
            from .inputs.i_pygame import Inputs
            from .renderers.r_pygame import Renderer

    if opt_renderer == "null":
        # pylint: disable=import-outside-toplevel
        from .inputs.i_null import Inputs
        from .renderers.r_null import Renderer

    # Read ROM binary.  Any I/O error is reported before anything is started
    program = Loader().load_binary(args["filename"])

    tracer = Tracer(live=args["debug"])
    vm = Chip8(program, clock_speed=args["clock_speed"], tracer=tracer, **quirk_settings)

    # Inputs first, as a bad keymap should fail before a window is opened
    inputs = Inputs(args["keymap"], vm)
    renderer = Renderer(scale=args["scale"])

    vm.start()

    try:
        while vm.is_running():
            if inputs.process_messages():
                break

            renderer.draw_screen(vm.get_screen())
            sleep(DISPLAY_INTERVAL)
    finally:
        # The host has quit or the VM has stopped, so shut everything down.  __del__ cannot be relied upon when using
        # PyPy
        vm.stop()
        inputs.shutdown()
        renderer.shutdown()

    if vm.fault is not None:
        raise EmulationError(vm.fault.message)
