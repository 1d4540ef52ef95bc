"""CHIP-8 memory and register operations."""

import jax
import jax.numpy as jnp
from chip8x.state import EmulatorState
from chip8x.decode import DecodedInstruction
from chip8x.constants import ADDRESS_MASK, MEMORY_SIZE, NUM_REGISTERS


def execute_set(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """6XNN - Set VX = NN."""
    return state.replace(V=state.V.at[instruction.x].set(jnp.astype(instruction.nn, jnp.uint8)))


def execute_add(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """7XNN - Add NN to VX. VF is not affected."""
    result = (jnp.astype(state.V[instruction.x], jnp.int32) + instruction.nn) & 0xFF
    return state.replace(V=state.V.at[instruction.x].set(jnp.astype(result, jnp.uint8)))


def execute_set_index(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """ANNN - Set I = NNN."""
    return state.replace(I=jnp.astype(instruction.nnn, jnp.uint16))


def execute_random(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """CXNN - Set VX = random & NN."""
    key, subkey = jax.random.split(state.rng)
    random_value = jax.random.randint(subkey, shape=(), minval=0, maxval=256, dtype=jnp.int32)
    masked = jnp.astype(random_value & instruction.nn, jnp.uint8)
    return state.replace(V=state.V.at[instruction.x].set(masked), rng=key)


def _register_range(instruction: DecodedInstruction, index: jnp.ndarray):
    """Registers VX..VY in order (descending when X > Y) and the addresses I + k they map to."""
    step = jnp.where(instruction.x <= instruction.y, 1, -1)
    count = jnp.abs(jnp.astype(instruction.y, jnp.int32) - instruction.x) + 1
    offsets = jnp.arange(NUM_REGISTERS)
    in_range = offsets < count
    registers = (instruction.x + step * offsets) & 0xF
    addresses = (jnp.astype(index, jnp.int32) + offsets) & ADDRESS_MASK
    return registers, addresses, in_range


def execute_save_range(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """5XY2 - Store VX..VY in memory starting at I. I is not changed (XO-CHIP)."""
    registers, addresses, in_range = _register_range(instruction, state.I)
    targets = jnp.where(in_range, addresses, MEMORY_SIZE)
    return state.replace(memory=state.memory.at[targets].set(state.V[registers], mode="drop"))


def execute_load_range(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """5XY3 - Load VX..VY from memory starting at I. I is not changed (XO-CHIP)."""
    registers, addresses, in_range = _register_range(instruction, state.I)
    targets = jnp.where(in_range, registers, NUM_REGISTERS)
    return state.replace(V=state.V.at[targets].set(state.memory[addresses], mode="drop"))
