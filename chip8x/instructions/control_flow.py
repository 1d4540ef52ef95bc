"""CHIP-8 control flow instructions."""

import jax
import jax.lax
import jax.numpy as jnp
from chip8x.state import EmulatorState
from chip8x.decode import DecodedInstruction
from chip8x.constants import ADDRESS_MASK, LONG_INDEX_PREFIX
from chip8x.dispatch import build_table
from chip8x.stack import push
from chip8x.instructions.system import no_op
from chip8x.instructions.memory import execute_save_range, execute_load_range


def execute_jump(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """1NNN - Jump to address NNN."""
    return state.replace(pc=jnp.astype(instruction.nnn, jnp.uint16))


def execute_call(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """2NNN - Call subroutine at NNN."""
    state = state.replace(stack=push(state.stack, state.pc))
    return execute_jump(state, instruction)


def skip_length(state: EmulatorState) -> jnp.ndarray:
    """Bytes to skip: 2, or 4 over an XO-CHIP F000 NNNN long instruction."""
    if not state.quirks.xo_opcodes:
        return jnp.asarray(2, dtype=jnp.uint16)
    pc = state.pc & ADDRESS_MASK
    next_word = (jnp.astype(state.memory[pc], jnp.uint16) << 8) | state.memory[(pc + 1) & ADDRESS_MASK]
    return jnp.where(next_word == LONG_INDEX_PREFIX, 4, 2).astype(jnp.uint16)


def make_skip_instruction(condition_fn):
    """Factory for skip instructions."""
    def skip_instruction(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
        condition = condition_fn(state, instruction)
        return jax.lax.cond(
            condition,
            lambda s: s.replace(pc=s.pc + skip_length(s)),
            lambda s: s,
            state
        )
    return skip_instruction


execute_skip_if_equal_immediate = make_skip_instruction(
    lambda state, inst: state.V[inst.x] == inst.nn
)

execute_skip_if_not_equal_immediate = make_skip_instruction(
    lambda state, inst: state.V[inst.x] != inst.nn
)

execute_skip_if_equal_register = make_skip_instruction(
    lambda state, inst: state.V[inst.x] == state.V[inst.y]
)

execute_skip_if_not_equal_register = make_skip_instruction(
    lambda state, inst: state.V[inst.x] != state.V[inst.y]
)

execute_skip_if_key_pressed = make_skip_instruction(
    lambda state, inst: state.keypad[state.V[inst.x] & 0xF]
)

execute_skip_if_key_not_pressed = make_skip_instruction(
    lambda state, inst: ~state.keypad[state.V[inst.x] & 0xF]
)


def execute_register_group(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """5XYN - Skip if VX == VY; on XO-CHIP 5XY2/5XY3 save/load VX..VY."""
    if not state.quirks.xo_opcodes:
        return execute_skip_if_equal_register(state, instruction)
    index = jnp.select([instruction.n == 2, instruction.n == 3], [1, 2], 0)
    return jax.lax.switch(
        index,
        [execute_skip_if_equal_register, execute_save_range, execute_load_range],
        state, instruction
    )


def execute_jump_with_offset(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """BNNN - Jump to NNN + V0, or XNN + VX when the jump quirk is set."""
    register = instruction.x if state.quirks.jump_uses_vx else 0
    offset = jnp.astype(state.V[register], jnp.uint16)
    jump_address = (jnp.astype(instruction.nnn, jnp.uint16) + offset) & ADDRESS_MASK
    return state.replace(pc=jnp.astype(jump_address, jnp.uint16))


KEY_OPERATIONS = {
    0x9E: execute_skip_if_key_pressed,
    0xA1: execute_skip_if_key_not_pressed,
}
KEY_BRANCHES, KEY_TABLE = build_table(KEY_OPERATIONS, 256, no_op)


def execute_key_instruction(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """EX9E/EXA1 - Skip if key VX pressed/not pressed."""
    return jax.lax.switch(jnp.asarray(KEY_TABLE)[instruction.nn], KEY_BRANCHES, state, instruction)
