"""CHIP-8 / SCHIP / XO-CHIP virtual machine core."""

from chip8x.quirks import InterpreterMode, Quirks, QUIRKS, quirks_for
from chip8x.state import EmulatorState, DisplayState, StackState, create_state
from chip8x.emulator import execute, fetch, step, run_n_cycles, decrement_timers, load_rom, load_rom_file, is_defined
from chip8x.decode import DecodedInstruction, decode
from chip8x.errors import (
    Chip8Error, MachineFault, IllegalOpcodeError, StackOverflowError, StackUnderflowError,
    RomTooLargeError, ConfigurationError, MachineNotPoweredError,
)
from chip8x.machine import Chip8, CycleResult
from chip8x.constants import *

__all__ = [
    "Chip8",
    "CycleResult",
    "InterpreterMode",
    "Quirks",
    "QUIRKS",
    "quirks_for",
    "EmulatorState",
    "DisplayState",
    "StackState",
    "create_state",
    "fetch",
    "execute",
    "step",
    "run_n_cycles",
    "decrement_timers",
    "load_rom",
    "load_rom_file",
    "is_defined",
    "DecodedInstruction",
    "decode",
    "Chip8Error",
    "MachineFault",
    "IllegalOpcodeError",
    "StackOverflowError",
    "StackUnderflowError",
    "RomTooLargeError",
    "ConfigurationError",
    "MachineNotPoweredError",
    "PROGRAM_START",
    "FONT_START",
    "BIG_FONT_START",
    "SCREEN_WIDTH",
    "SCREEN_HEIGHT",
]
