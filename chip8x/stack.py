"""CHIP-8 stack operations.

The pointer stays within [0, capacity]: a push onto a full stack and a pop from
an empty one leave it where it is. The engine reports both as faults before they
execute; the raw ``step`` and ``run_n_cycles`` paths rely on this clamping.
"""

import jax.numpy as jnp
from chip8x.constants import ADDRESS_MASK
from chip8x.state import StackState


def push(stack: StackState, address: jnp.ndarray) -> StackState:
    """Push address onto stack. Dropped when the stack is full."""
    masked_address = jnp.astype(address & ADDRESS_MASK, jnp.uint16)
    new_data = stack.data.at[stack.pointer].set(masked_address, mode="drop")
    return stack.replace(data=new_data, pointer=jnp.minimum(stack.pointer + 1, stack.capacity))


def pop(stack: StackState) -> tuple[StackState, jnp.ndarray]:
    """Pop address from stack. An empty stack yields address 0."""
    empty = stack.pointer <= 0
    new_pointer = jnp.maximum(stack.pointer - 1, 0)
    popped_address = jnp.where(empty, jnp.zeros((), dtype=jnp.uint16), stack.data[new_pointer])
    new_data = stack.data.at[new_pointer].set(0, mode="drop")
    return stack.replace(data=new_data, pointer=new_pointer), popped_address


def is_full(stack: StackState) -> bool:
    return int(stack.pointer) >= stack.capacity


def is_empty(stack: StackState) -> bool:
    return int(stack.pointer) <= 0
