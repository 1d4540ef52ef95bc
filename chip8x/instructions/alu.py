"""CHIP-8 ALU operations (8xxx).

Every operation maps (VX, VY, VF) to (result, VF). Operations that produce a
flag write VX first and VF second, so VF as a destination holds the flag.
Operations that pass VF through write it first, so VF as a destination holds
the result.
"""

import jax
import jax.lax
import jax.numpy as jnp
import numpy as np
from chip8x.state import EmulatorState
from chip8x.decode import DecodedInstruction
from chip8x.dispatch import build_table
from chip8x.constants import FLAG_REGISTER


def _flag(value) -> jnp.ndarray:
    return jnp.astype(value, jnp.uint8)


def alu_set(vx, vy, vf):
    """8XY0 - Set: VX = VY."""
    return vy, vf


def alu_or(vx, vy, vf):
    """8XY1 - Binary OR: VX |= VY."""
    return vx | vy, vf


def alu_and(vx, vy, vf):
    """8XY2 - Binary AND: VX &= VY."""
    return vx & vy, vf


def alu_xor(vx, vy, vf):
    """8XY3 - Logical XOR: VX ^= VY."""
    return vx ^ vy, vf


def alu_add(vx, vy, vf):
    """8XY4 - Add: VX += VY, VF = carry."""
    result = jnp.astype(vx, jnp.int32) + vy
    return jnp.astype(result & 0xFF, jnp.uint8), _flag(result > 255)


def alu_sub_xy(vx, vy, vf):
    """8XY5 - Subtract: VX -= VY, VF = NOT borrow."""
    result = (jnp.astype(vx, jnp.int32) - vy) & 0xFF
    return jnp.astype(result, jnp.uint8), _flag(vx >= vy)


def alu_shift_right(vx, vy, vf):
    """8XY6 - Shift right: VX = VY >> 1, VF = bit shifted out."""
    return vy >> 1, _flag(vy & 1)


def alu_sub_yx(vx, vy, vf):
    """8XY7 - Subtract: VX = VY - VX, VF = NOT borrow."""
    result = (jnp.astype(vy, jnp.int32) - vx) & 0xFF
    return jnp.astype(result, jnp.uint8), _flag(vy >= vx)


def alu_shift_left(vx, vy, vf):
    """8XYE - Shift left: VX = VY << 1, VF = bit shifted out."""
    return jnp.astype((jnp.astype(vy, jnp.int32) << 1) & 0xFF, jnp.uint8), _flag(vy >> 7)


ALU_OPERATIONS = {
    0x0: alu_set,
    0x1: alu_or,
    0x2: alu_and,
    0x3: alu_xor,
    0x4: alu_add,
    0x5: alu_sub_xy,
    0x6: alu_shift_right,
    0x7: alu_sub_yx,
    0xE: alu_shift_left,
}

LOGIC_OPERATIONS = (alu_or, alu_and, alu_xor)
SHIFT_OPERATIONS = (alu_shift_right, alu_shift_left)


def alu_undefined(vx, vy, vf):
    """Undefined ALU operation. Leaves VX and VF unchanged."""
    return vx, vf


def execute_alu_operation(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """8XYN - ALU operations dispatcher."""
    quirks = state.quirks
    vx = state.V[instruction.x]
    vy = state.V[instruction.y]
    vf = state.V[FLAG_REGISTER]

    def with_quirks(operation):
        if operation in SHIFT_OPERATIONS and quirks.shift_in_place:
            return lambda vx, vy, vf: operation(vx, vx, vf)
        if operation in LOGIC_OPERATIONS and quirks.logic_resets_flag:
            return lambda vx, vy, vf: (operation(vx, vy, vf)[0], jnp.zeros((), dtype=jnp.uint8))
        return operation

    def keeps_flag(operation):
        if operation is alu_set:
            return True
        return operation in LOGIC_OPERATIONS and not quirks.logic_resets_flag

    operations = {n: with_quirks(operation) for n, operation in ALU_OPERATIONS.items()}
    branches, table = build_table(operations, 16, alu_undefined)
    result, flag = jax.lax.switch(jnp.asarray(table)[instruction.n], branches, vx, vy, vf)
    result = jnp.astype(result, jnp.uint8)
    flag = jnp.astype(flag, jnp.uint8)

    # Pass-through operations write VF first so the result wins when X is F
    flag_table = np.array([keeps_flag(ALU_OPERATIONS.get(n)) for n in range(16)])
    flag_first = state.V.at[FLAG_REGISTER].set(flag).at[instruction.x].set(result)
    flag_last = state.V.at[instruction.x].set(result).at[FLAG_REGISTER].set(flag)
    new_V = jnp.where(jnp.asarray(flag_table)[instruction.n], flag_first, flag_last)
    return state.replace(V=new_V)
