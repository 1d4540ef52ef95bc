"""CHIP-8 system instructions (0x0xxx)."""

from functools import lru_cache

import jax
import jax.lax
import jax.numpy as jnp
from chip8x.state import EmulatorState
from chip8x.decode import DecodedInstruction
from chip8x.dispatch import build_table
from chip8x.quirks import Quirks
from chip8x.stack import pop
from chip8x.display import clear, scroll_horizontal, scroll_vertical, set_hires


def no_op(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """No operation."""
    return state


def rewind(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """Re-execute the current instruction on the next cycle."""
    return state.replace(pc=state.pc - 2)


def _redraw(state: EmulatorState, new_display) -> EmulatorState:
    return state.replace(display=new_display, draw=jnp.ones((), dtype=jnp.bool_))


def execute_clear_screen(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """00E0 - Clear display."""
    return _redraw(state, clear(state.display))


def execute_return(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """00EE - Return from subroutine."""
    stack, address = pop(state.stack)
    return state.replace(stack=stack, pc=address)


def execute_scroll_down(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """00CN - Scroll display N rows down."""
    return _redraw(state, scroll_vertical(state.display, instruction.n))


def execute_scroll_up(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """00DN - Scroll display N rows up (XO-CHIP)."""
    return _redraw(state, scroll_vertical(state.display, instruction.n, up=True))


def execute_scroll_right(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """00FB - Scroll display 4 pixels right."""
    return _redraw(state, scroll_horizontal(state.display, right=True))


def execute_scroll_left(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """00FC - Scroll display 4 pixels left."""
    return _redraw(state, scroll_horizontal(state.display, right=False))


def execute_exit(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """00FD - Exit interpreter. Execution stalls on this instruction."""
    return rewind(state, instruction).replace(halted=jnp.ones((), dtype=jnp.bool_))


def execute_lores(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """00FE - Switch to 64x32 resolution."""
    return _redraw(state, set_hires(state.display, False))


def execute_hires(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """00FF - Switch to 128x64 resolution."""
    return _redraw(state, set_hires(state.display, True))


@lru_cache(maxsize=None)
def system_operations(quirks: Quirks) -> dict:
    """Low byte -> handler for 00NN instructions available under ``quirks``."""
    operations = {0xE0: execute_clear_screen, 0xEE: execute_return}
    if quirks.extended_opcodes:
        operations.update({0xC0 | n: execute_scroll_down for n in range(1, 16)})
        operations.update({
            0xFB: execute_scroll_right,
            0xFC: execute_scroll_left,
            0xFD: execute_exit,
            0xFE: execute_lores,
            0xFF: execute_hires,
        })
    if quirks.xo_opcodes:
        operations.update({0xD0 | n: execute_scroll_up for n in range(1, 16)})
    return operations


@lru_cache(maxsize=None)
def system_dispatch(quirks: Quirks):
    return build_table(system_operations(quirks), 256, rewind)


def execute_system_instruction(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """Dispatch system instructions. Anything unrecognised, including 0NNN machine code calls, rewinds."""
    branches, table = system_dispatch(state.quirks)
    rewind_index = len(branches) - 1
    index = jnp.where(instruction.x == 0, jnp.asarray(table)[instruction.nn], rewind_index)
    return jax.lax.switch(index, branches, state, instruction)
