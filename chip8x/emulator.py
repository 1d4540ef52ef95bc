"""Main CHIP-8 emulator execution engine."""

from functools import partial

import jax
import jax.lax
import jax.numpy as jnp
from chip8x.state import EmulatorState
from chip8x.decode import DecodedInstruction, decode
from chip8x.constants import ADDRESS_MASK, PROGRAM_START, MAX_ROM_SIZE
from chip8x.errors import RomTooLargeError
from chip8x.quirks import Quirks
from chip8x.instructions.system import execute_system_instruction
from chip8x.instructions.control_flow import (
    execute_jump, execute_call, execute_skip_if_equal_immediate,
    execute_skip_if_not_equal_immediate, execute_register_group,
    execute_skip_if_not_equal_register, execute_jump_with_offset,
    execute_key_instruction, KEY_OPERATIONS
)
from chip8x.instructions.alu import execute_alu_operation, ALU_OPERATIONS
from chip8x.instructions.memory import execute_set, execute_add, execute_set_index, execute_random
from chip8x.instructions.display import execute_display
from chip8x.instructions.misc import execute_misc_instruction, misc_operations

OPCODE_HANDLERS = [
    execute_system_instruction,
    execute_jump,
    execute_call,
    execute_skip_if_equal_immediate,
    execute_skip_if_not_equal_immediate,
    execute_register_group,
    execute_set,
    execute_add,
    execute_alu_operation,
    execute_skip_if_not_equal_register,
    execute_set_index,
    execute_jump_with_offset,
    execute_random,
    execute_display,
    execute_key_instruction,
    execute_misc_instruction,
]


def execute(state: EmulatorState, instruction: int) -> EmulatorState:
    """Execute single CHIP-8 instruction.

    Instructions without a handler in the active mode leave the state
    untouched; use :func:`is_defined` to detect them.
    """
    decoded_instruction = decode(instruction)

    return jax.lax.switch(
        decoded_instruction.opcode,
        OPCODE_HANDLERS,
        state, decoded_instruction
    )


def is_defined(instruction: DecodedInstruction, quirks: Quirks) -> bool:
    """Whether a concrete decoded instruction has a handler under ``quirks``.

    The 0x0 group never faults: unknown system instructions rewind instead.
    """
    opcode = int(instruction.opcode)
    if opcode == 0x8:
        return int(instruction.n) in ALU_OPERATIONS
    if opcode == 0xE:
        return int(instruction.nn) in KEY_OPERATIONS
    if opcode == 0xF:
        nn = int(instruction.nn)
        if nn == 0x00:
            return int(instruction.raw) == 0xF000 and nn in misc_operations(quirks)
        return nn in misc_operations(quirks)
    return True


def _pack_u16(high: jnp.uint8, low: jnp.uint8) -> jnp.uint16:
    """Pack two bytes into uint16."""
    return (high.astype(jnp.uint16) << 8) | low.astype(jnp.uint16)


def fetch(state: EmulatorState) -> tuple[EmulatorState, jnp.uint16]:
    """Fetch next instruction from memory and advance PC past it."""
    pc = state.pc & ADDRESS_MASK
    instruction = _pack_u16(state.memory[pc], state.memory[(pc + 1) & ADDRESS_MASK])
    return state.replace(pc=pc + 2, draw=jnp.zeros((), dtype=jnp.bool_)), instruction


@jax.jit
def step(state: EmulatorState) -> tuple[EmulatorState, jnp.uint16]:
    """Fetch and execute one instruction."""
    state, instruction = fetch(state)
    return execute(state, instruction), instruction


def run_instruction(state, _):
    state, _ = step(state)
    return state, None


@partial(jax.jit, static_argnums=1)
def run_n_cycles(state: EmulatorState, n: int) -> EmulatorState:
    """Run ``n`` cycles without timer updates or fault checks.

    Illegal opcodes execute as no-ops. A call on a full stack jumps without
    saving its return address and a return on an empty stack jumps to 0x000;
    the stack pointer never leaves [0, capacity].
    """
    state, _ = jax.lax.scan(run_instruction, state, length=n)
    return state


def decrement_timers(state: EmulatorState) -> EmulatorState:
    """Count delay and sound timers down by one, stopping at zero. Call at 60 Hz."""
    def tick(timer):
        return jnp.where(timer > 0, timer - 1, timer).astype(jnp.uint8)

    return state.replace(delay_timer=tick(state.delay_timer), sound_timer=tick(state.sound_timer))


def load_rom(state: EmulatorState, rom_data: bytes) -> EmulatorState:
    """Load ROM data into CHIP-8 memory starting at 0x200.

    Raises:
        RomTooLargeError: If the ROM does not fit; the state is not modified
    """
    rom_data = bytes(rom_data)
    if len(rom_data) > MAX_ROM_SIZE:
        raise RomTooLargeError(len(rom_data), MAX_ROM_SIZE)
    if not rom_data:
        return state
    rom_array = jnp.array(list(rom_data), dtype=jnp.uint8)
    new_memory = state.memory.at[PROGRAM_START:PROGRAM_START + len(rom_data)].set(rom_array)
    return state.replace(memory=new_memory)


def load_rom_file(state: EmulatorState, filename: str) -> EmulatorState:
    """Load a ROM image from disk into memory starting at 0x200."""
    with open(filename, 'rb') as f:
        rom_data = f.read()
    return load_rom(state, rom_data)
