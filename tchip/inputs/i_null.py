#!/usr/bin/env python3

"""
Null Input Plugin

Serves as a base class for other Input plugins.  Can be used on its own if zero
input functionality is required.

Plugins translate host key codes into the 16 hexadecimal keys using a keymap,
and pass every change of state straight on to the VM.
"""

__copyright__ = "Copyright (C) 2022 Gregory Maynard-Hoare"
__license__ = "GNU Affero General Public License v3.0"

from ..keypad import KeypadError


class Inputs:
    def __init__(self, keymap, vm):
        self.keymap_dict = {}
        self.vm = vm
        keymap_split = keymap.split(",")

        if len(keymap_split) != 0x10:
            raise KeypadError("Incorrect number of keys defined -- 16 required.  Use commas to split numbers")

        for key_num, key_defined in enumerate(keymap_split):
            try:
                key_defined_ord = int(key_defined)
            except ValueError:
                raise KeypadError("Defined keys are not all integer values") from None

            if key_defined_ord in self.keymap_dict:
                raise KeypadError("Duplicate keys defined")

            self.keymap_dict[key_defined_ord] = key_num

    def process_messages(self):
        return False  # Don't exit the program

    def host_key(self, host_code, pressed):
        # Returns the hex key the host code mapped to, if any
        hex_key = self.keymap_dict.get(host_code)

        if hex_key is not None:
            self.vm.set_key(hex_key, pressed)

        return hex_key

    def shutdown(self):
        pass
