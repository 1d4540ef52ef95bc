"""CHIP-8 miscellaneous instructions (Fxxx)."""

from functools import lru_cache

import jax
import jax.lax
import jax.numpy as jnp
from chip8x.state import EmulatorState
from chip8x.decode import DecodedInstruction
from chip8x.constants import (
    ADDRESS_MASK, MEMORY_SIZE, NUM_REGISTERS, NUM_RPL_FLAGS, FLAG_REGISTER,
    FONT_START, FONT_GLYPH_SIZE, BIG_FONT_START, BIG_FONT_GLYPH_SIZE,
)
from chip8x.dispatch import build_table
from chip8x.quirks import Quirks
from chip8x.instructions.system import no_op


def execute_get_delay_timer(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """FX07 - Set VX to delay timer value."""
    return state.replace(V=state.V.at[instruction.x].set(state.delay_timer))


def execute_set_delay_timer(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """FX15 - Set delay timer to VX."""
    return state.replace(delay_timer=state.V[instruction.x])


def execute_set_sound_timer(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """FX18 - Set sound timer to VX."""
    return state.replace(sound_timer=state.V[instruction.x])


def execute_add_to_index(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """FX1E - Add VX to I register."""
    new_i = jnp.astype(state.I, jnp.int32) + state.V[instruction.x]
    if not state.quirks.index_overflow_flag:
        return state.replace(I=jnp.astype(new_i & ADDRESS_MASK, jnp.uint16))
    return state.replace(
        I=jnp.astype(new_i & ADDRESS_MASK, jnp.uint16),
        V=state.V.at[FLAG_REGISTER].set(jnp.astype(new_i > ADDRESS_MASK, jnp.uint8))
    )


def execute_wait_for_key(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """FX0A - Wait for key press. Rewinds PC until a key is held."""
    def key_pressed_action(state):
        pressed_key = jnp.astype(jnp.argmax(state.keypad), jnp.uint8)
        return state.replace(V=state.V.at[instruction.x].set(pressed_key))

    def wait_action(state):
        return state.replace(pc=state.pc - 2)

    return jax.lax.cond(jnp.any(state.keypad), key_pressed_action, wait_action, state)


def execute_font_character(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """FX29 - Set I to location of sprite for digit VX."""
    font_address = FONT_START + jnp.astype(state.V[instruction.x], jnp.int32) * FONT_GLYPH_SIZE
    return state.replace(I=jnp.astype(font_address, jnp.uint16))


def execute_big_font_character(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """FX30 - Set I to location of the 8x10 sprite for digit VX (SCHIP)."""
    digit = jnp.astype(state.V[instruction.x], jnp.int32) & 0xF
    return state.replace(I=jnp.astype(BIG_FONT_START + digit * BIG_FONT_GLYPH_SIZE, jnp.uint16))


def execute_bcd_conversion(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """FX33 - Store BCD representation of VX at I, I+1, I+2."""
    value = state.V[instruction.x]

    digits = jnp.array([
        value // 100,
        (value // 10) % 10,
        value % 10
    ], dtype=jnp.uint8)

    indices = (jnp.arange(3) + state.I) & ADDRESS_MASK
    return state.replace(memory=state.memory.at[indices].set(digits))


def _advance_index(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    if not state.quirks.index_increments:
        return state
    new_i = (jnp.astype(state.I, jnp.int32) + instruction.x + 1) & ADDRESS_MASK
    return state.replace(I=jnp.astype(new_i, jnp.uint16))


def execute_store_registers(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """FX55 - Store V0 through VX in memory starting at I."""
    offsets = jnp.arange(NUM_REGISTERS)
    addresses = (jnp.astype(state.I, jnp.int32) + offsets) & ADDRESS_MASK
    targets = jnp.where(offsets <= instruction.x, addresses, MEMORY_SIZE)
    state = state.replace(memory=state.memory.at[targets].set(state.V, mode="drop"))
    return _advance_index(state, instruction)


def execute_load_registers(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """FX65 - Load V0 through VX from memory starting at I."""
    register_mask = jnp.arange(NUM_REGISTERS) <= instruction.x
    addresses = (jnp.astype(state.I, jnp.int32) + jnp.arange(NUM_REGISTERS)) & ADDRESS_MASK
    state = state.replace(V=jnp.where(register_mask, state.memory[addresses], state.V))
    return _advance_index(state, instruction)


def execute_save_flags(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """FX75 - Store V0 through VX (X <= 7) in the RPL flags."""
    mask = jnp.arange(NUM_RPL_FLAGS) <= instruction.x
    return state.replace(rpl=jnp.where(mask, state.V[:NUM_RPL_FLAGS], state.rpl))


def execute_load_flags(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """FX85 - Load V0 through VX (X <= 7) from the RPL flags."""
    mask = jnp.arange(NUM_RPL_FLAGS) <= instruction.x
    return state.replace(V=state.V.at[:NUM_RPL_FLAGS].set(jnp.where(mask, state.rpl, state.V[:NUM_RPL_FLAGS])))


def execute_long_index(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """F000 NNNN - Load I from the following word and skip over it (XO-CHIP)."""
    pc = state.pc & ADDRESS_MASK
    address = (jnp.astype(state.memory[pc], jnp.uint16) << 8) | state.memory[(pc + 1) & ADDRESS_MASK]
    return state.replace(I=jnp.astype(address, jnp.uint16), pc=state.pc + 2)


@lru_cache(maxsize=None)
def misc_operations(quirks: Quirks) -> dict:
    """Low byte -> handler for FXNN instructions available under ``quirks``."""
    operations = {
        0x07: execute_get_delay_timer,
        0x0A: execute_wait_for_key,
        0x15: execute_set_delay_timer,
        0x18: execute_set_sound_timer,
        0x1E: execute_add_to_index,
        0x29: execute_font_character,
        0x33: execute_bcd_conversion,
        0x55: execute_store_registers,
        0x65: execute_load_registers,
    }
    if quirks.extended_opcodes:
        operations.update({
            0x30: execute_big_font_character,
            0x75: execute_save_flags,
            0x85: execute_load_flags,
        })
    if quirks.xo_opcodes:
        operations[0x00] = execute_long_index
    return operations


@lru_cache(maxsize=None)
def misc_dispatch(quirks: Quirks):
    return build_table(misc_operations(quirks), 256, no_op)


def execute_misc_instruction(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """Dispatch misc instructions through the FXNN handler table."""
    branches, table = misc_dispatch(state.quirks)
    return jax.lax.switch(jnp.asarray(table)[instruction.nn], branches, state, instruction)
