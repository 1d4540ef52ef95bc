"""CHIP-8 emulator state structures."""

import jax
import jax.numpy as jnp
from flax.struct import dataclass, PyTreeNode, field

from chip8x.constants import (
    MEMORY_SIZE, PROGRAM_START, FONT_START, FONT_DATA, BIG_FONT_START, BIG_FONT_DATA,
    SCREEN_WIDTH, SCREEN_HEIGHT, NUM_REGISTERS, NUM_KEYS, NUM_RPL_FLAGS,
)
from chip8x.quirks import Quirks, quirks_for


@dataclass(frozen=True)
class StackState:
    """Stack state for subroutine calls. Capacity is fixed by the array length."""
    data: jnp.ndarray
    pointer: jnp.ndarray

    @property
    def capacity(self) -> int:
        return self.data.shape[0]


class DisplayState(PyTreeNode):
    """128x64 pixel grid, indexed [x, y].

    In low resolution every logical pixel covers a 2x2 block of the grid.
    """
    pixels: jnp.ndarray
    hires: jnp.ndarray
    wraparound: bool = field(pytree_node=False, default=False)


class EmulatorState(PyTreeNode):
    """Main CHIP-8 emulator state."""
    rng: jax.Array
    memory: jnp.ndarray
    pc: jnp.ndarray
    display: DisplayState
    stack: StackState
    delay_timer: jnp.ndarray
    sound_timer: jnp.ndarray
    keypad: jnp.ndarray
    V: jnp.ndarray
    rpl: jnp.ndarray
    I: jnp.ndarray
    draw: jnp.ndarray
    halted: jnp.ndarray
    quirks: Quirks = field(pytree_node=False, default=quirks_for())

    @property
    def mode(self):
        return self.quirks.mode


def create_display(wraparound: bool = False) -> DisplayState:
    """Create a blank low-resolution display."""
    return DisplayState(
        pixels=jnp.zeros((SCREEN_WIDTH, SCREEN_HEIGHT), dtype=jnp.bool_),
        hires=jnp.zeros((), dtype=jnp.bool_),
        wraparound=wraparound,
    )


def create_stack(capacity: int) -> StackState:
    return StackState(data=jnp.zeros(capacity, dtype=jnp.uint16), pointer=jnp.zeros((), dtype=jnp.int32))


def create_state(rng: jax.Array = None, quirks: Quirks = None, mode=None) -> EmulatorState:
    """Create initial emulator state with font data loaded.

    Args:
        rng: PRNG key consumed by CXNN, defaults to PRNGKey(0)
        quirks: Quirk policy; takes precedence over ``mode``
        mode: Interpreter mode whose default quirks are used

    Returns:
        Powered-on state with PC at the program start
    """
    if rng is None:
        rng = jax.random.PRNGKey(0)
    if quirks is None:
        quirks = quirks_for() if mode is None else quirks_for(mode)

    memory = jnp.zeros(MEMORY_SIZE, dtype=jnp.uint8)
    memory = memory.at[FONT_START:FONT_START + len(FONT_DATA)].set(FONT_DATA)
    memory = memory.at[BIG_FONT_START:BIG_FONT_START + len(BIG_FONT_DATA)].set(BIG_FONT_DATA)

    return EmulatorState(
        rng=rng,
        memory=memory,
        pc=jnp.asarray(PROGRAM_START, dtype=jnp.uint16),
        display=create_display(quirks.wraparound),
        stack=create_stack(quirks.stack_size),
        delay_timer=jnp.zeros((), dtype=jnp.uint8),
        sound_timer=jnp.zeros((), dtype=jnp.uint8),
        keypad=jnp.zeros(NUM_KEYS, dtype=jnp.bool_),
        V=jnp.zeros(NUM_REGISTERS, dtype=jnp.uint8),
        rpl=jnp.zeros(NUM_RPL_FLAGS, dtype=jnp.uint8),
        I=jnp.zeros((), dtype=jnp.uint16),
        draw=jnp.zeros((), dtype=jnp.bool_),
        halted=jnp.zeros((), dtype=jnp.bool_),
        quirks=quirks,
    )
