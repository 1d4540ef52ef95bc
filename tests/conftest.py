"""Test configuration and fixtures for CHIP-8 emulator tests."""

import pytest
import jax.numpy as jnp
from chip8x import create_state, InterpreterMode


@pytest.fixture
def fresh_state():
    """Provide a fresh emulator state for each test (SCHIP mode)."""
    return create_state()


@pytest.fixture
def cosmac_state():
    """Provide a fresh state in COSMAC VIP mode."""
    return create_state(mode=InterpreterMode.COSMAC_VIP)


@pytest.fixture
def schip_state():
    """Provide a fresh state in SCHIP mode."""
    return create_state(mode=InterpreterMode.SCHIP)


@pytest.fixture
def xochip_state():
    """Provide a fresh state in XO-CHIP mode."""
    return create_state(mode=InterpreterMode.XO_CHIP)


def setup_sprite_in_memory(state, address, sprite_bytes):
    """Helper to put sprite data in memory."""
    return state.replace(
        memory=state.memory.at[address:address+len(sprite_bytes)].set(
            jnp.array(sprite_bytes, dtype=jnp.uint8)
        )
    )


def set_registers(state, **registers):
    """Helper to set registers by name, e.g. set_registers(state, V1=3, VF=1)."""
    V = state.V
    for name, value in registers.items():
        V = V.at[int(name[1:], 16)].set(value)
    return state.replace(V=V)


def lores_pixel(state, x, y):
    """Value of a low-resolution pixel (top-left of its 2x2 block)."""
    return int(state.display.pixels[2 * x, 2 * y])


def hires_state(state):
    """Switch a state to 128x64 addressing."""
    return state.replace(display=state.display.replace(hires=jnp.ones((), dtype=jnp.bool_)))
