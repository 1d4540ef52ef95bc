"""CHIP-8 display operations."""

import jax.numpy as jnp
from chip8x.state import EmulatorState
from chip8x.decode import DecodedInstruction
from chip8x.constants import ADDRESS_MASK, FLAG_REGISTER, MAX_SPRITE_ROWS
from chip8x.display import blit


def execute_display(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """DXYN - Draw sprite at (VX, VY) with height N.

    In high resolution on SCHIP-family machines DXY0 draws a 16x16 sprite
    stored as sixteen big-endian words. VF is 1 if any lit pixel was erased,
    or, when the row-counting quirk is set and the display is in high
    resolution, the number of rows that collided or were clipped.
    """
    quirks = state.quirks
    hires = state.display.hires

    addresses = (jnp.astype(state.I, jnp.int32) + jnp.arange(2 * MAX_SPRITE_ROWS)) & ADDRESS_MASK
    data = jnp.astype(state.memory[addresses], jnp.uint16)
    byte_rows = data[:MAX_SPRITE_ROWS]
    word_rows = (data[0::2] << 8) | data[1::2]

    big_sprite = hires & (instruction.n == 0) & quirks.extended_opcodes
    rows = jnp.where(big_sprite, word_rows, byte_rows)
    width = jnp.where(big_sprite, 16, 8)
    height = jnp.where(big_sprite, MAX_SPRITE_ROWS, instruction.n)

    new_display, hits, clipped = blit(state.display, state.V[instruction.x], state.V[instruction.y], rows, width, height)

    if quirks.collision_counts_rows:
        flag = jnp.where(hires, jnp.sum(hits | clipped), jnp.any(hits))
    else:
        flag = jnp.any(hits)

    return state.replace(
        display=new_display,
        V=state.V.at[FLAG_REGISTER].set(jnp.astype(flag, jnp.uint8)),
        draw=jnp.ones((), dtype=jnp.bool_),
    )
