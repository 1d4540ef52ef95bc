"""Host-facing CHIP-8 engine that owns the machine state."""

import os
from dataclasses import dataclass
from typing import Mapping, Optional

import jax
import jax.numpy as jnp

from chip8x.constants import ADDRESS_MASK, NUM_KEYS
from chip8x.decode import decode
from chip8x.emulator import fetch, execute, decrement_timers, load_rom, is_defined
from chip8x.errors import (
    ConfigurationError, IllegalOpcodeError, MachineFault, MachineNotPoweredError,
    StackOverflowError, StackUnderflowError,
)
from chip8x.logging import MachineLogger
from chip8x.quirks import InterpreterMode, parse_mode, quirks_for
from chip8x.stack import is_empty, is_full
from chip8x.state import EmulatorState, create_state

_fetch = jax.jit(fetch)
_execute = jax.jit(execute)
_decrement_timers = jax.jit(decrement_timers)


@dataclass(frozen=True)
class CycleResult:
    """Outcome of one :meth:`Chip8.cycle`.

    Attributes:
        draw: The display changed and should be presented again
        fault: Fault raised by the instruction, or None
    """
    draw: bool
    fault: Optional[MachineFault] = None

    @property
    def ok(self) -> bool:
        return self.fault is None

    def raise_for_fault(self):
        """Raise the fault, if any."""
        if self.fault is not None:
            raise self.fault


class Chip8:
    """CHIP-8 virtual machine.

    The engine exclusively owns an immutable :class:`EmulatorState` and
    replaces it on every mutation, so states handed out by :meth:`snapshot`
    or the read accessors never change underneath the host.

    Example:
        >>> machine = Chip8(mode="schip", seed=0)
        >>> machine.power_and_load(bytes([0x60, 0x05, 0x70, 0x03]))
        >>> _ = machine.cycle()
        >>> _ = machine.cycle()
        >>> int(machine.V[0])
        8
    """

    def __init__(
        self,
        mode=InterpreterMode.SCHIP,
        seed: Optional[int] = None,
        rng: Optional[jax.Array] = None,
        quirks: Optional[Mapping[str, object]] = None,
        raise_on_fault: bool = False,
        logger: Optional[MachineLogger] = None,
    ):
        """Create an unpowered machine.

        Args:
            mode: Interpreter mode, an InterpreterMode or its string value
            seed: Seed for the CXNN random source; None draws one from OS entropy
            rng: Explicit jax PRNG key, mutually exclusive with ``seed``
            quirks: Overrides for fields of the mode's Quirks record
            raise_on_fault: Raise faults from :meth:`cycle` instead of returning them
            logger: Logger for lifecycle events, defaults to a WARNING-level MachineLogger
        """
        self.quirk_overrides = dict(quirks or {})
        self.quirks = quirks_for(mode, **self.quirk_overrides)
        self.raise_on_fault = raise_on_fault
        self.logger = logger or MachineLogger()
        self.powered = False
        self._state = create_state(_resolve_rng(seed, rng), quirks=self.quirks)

    @property
    def mode(self) -> InterpreterMode:
        return self.quirks.mode

    def power_and_load(self, rom_data: bytes, mode=None):
        """Reset the machine, load ``rom_data`` at 0x200 and power on.

        RPL flags and the random source carry over from the previous state.

        Raises:
            RomTooLargeError: If the ROM does not fit; nothing is changed
        """
        quirks = self.quirks if mode is None else quirks_for(parse_mode(mode), **self.quirk_overrides)
        state = create_state(self._state.rng, quirks=quirks).replace(rpl=self._state.rpl)
        state = load_rom(state, rom_data)

        self.quirks = quirks
        self._state = state
        self.powered = True
        self.logger.log_power_on(quirks, len(rom_data))

    def set_input(self, key: int, pressed: bool):
        """Latch the state of one of the 16 keypad keys."""
        if not 0 <= key < NUM_KEYS:
            raise ValueError(f"Key must be in 0..{NUM_KEYS - 1}, got {key}")
        self._state = self._state.replace(keypad=self._state.keypad.at[key].set(bool(pressed)))

    def cycle(self) -> CycleResult:
        """Fetch, decode and execute one instruction.

        A faulting instruction keeps only the PC advance and is reported in the
        result (or raised when ``raise_on_fault`` is set).
        """
        if not self.powered:
            raise MachineNotPoweredError("Load a ROM with power_and_load() before cycling")

        address = int(self._state.pc) & ADDRESS_MASK
        state, word = _fetch(self._state)
        instruction = decode(int(word))

        fault = self._check(state, instruction, address)
        if fault is not None:
            self._state = state
            self.logger.log_fault(fault)
            if self.raise_on_fault:
                raise fault
            return CycleResult(draw=False, fault=fault)

        was_halted = bool(state.halted)
        self._state = _execute(state, word)
        self.logger.log_registers(self._state, instruction)
        if not was_halted and bool(self._state.halted):
            self.logger.log_halt(address)
        return CycleResult(draw=bool(self._state.draw))

    def _check(self, state: EmulatorState, instruction, address: int) -> Optional[MachineFault]:
        if not is_defined(instruction, self.quirks):
            return IllegalOpcodeError(instruction.raw, address)
        if instruction.opcode == 0x2 and is_full(state.stack):
            return StackOverflowError(instruction.raw, address)
        if instruction.raw == 0x00EE and is_empty(state.stack):
            return StackUnderflowError(instruction.raw, address)
        return None

    def decrement_timers(self):
        """Count the delay and sound timers down once. Call at 60 Hz."""
        self._state = _decrement_timers(self._state)

    def snapshot(self) -> EmulatorState:
        """Return the current state. States are immutable, so this is safe to keep."""
        return self._state

    def restore(self, state: EmulatorState):
        """Replace the machine state with a snapshot taken from a machine with the same quirks."""
        if state.quirks != self.quirks:
            raise ConfigurationError(
                f"Snapshot was taken in {state.quirks.mode.value} mode with different quirks"
            )
        self._state = state
        self.powered = True

    @property
    def state(self) -> EmulatorState:
        return self._state

    @property
    def V(self) -> jnp.ndarray:
        return self._state.V

    @property
    def I(self) -> int:
        return int(self._state.I)

    @property
    def pc(self) -> int:
        return int(self._state.pc)

    @property
    def sp(self) -> int:
        return int(self._state.stack.pointer)

    @property
    def stack(self) -> jnp.ndarray:
        return self._state.stack.data

    @property
    def memory(self) -> jnp.ndarray:
        return self._state.memory

    @property
    def rpl(self) -> jnp.ndarray:
        return self._state.rpl

    @property
    def delay_timer(self) -> int:
        return int(self._state.delay_timer)

    @property
    def sound_timer(self) -> int:
        return int(self._state.sound_timer)

    @property
    def keypad(self) -> jnp.ndarray:
        return self._state.keypad

    @property
    def display(self) -> jnp.ndarray:
        """Pixel grid of shape (128, 64), indexed [x, y]."""
        return self._state.display.pixels

    @property
    def hires(self) -> bool:
        return bool(self._state.display.hires)

    @property
    def draw(self) -> bool:
        return bool(self._state.draw)

    @property
    def halted(self) -> bool:
        return bool(self._state.halted)


def _resolve_rng(seed: Optional[int], rng: Optional[jax.Array]) -> jax.Array:
    """Build the PRNG key for CXNN from a seed, an explicit key, or OS entropy."""
    if seed is not None and rng is not None:
        raise ConfigurationError("Pass either seed or rng, not both")
    if rng is not None:
        try:
            jax.random.split(rng)
        except (TypeError, ValueError) as e:
            raise ConfigurationError(f"rng is not a usable jax PRNG key: {e}") from e
        return rng
    if seed is None:
        seed = int.from_bytes(os.urandom(4), "little") & 0x7FFFFFFF
    if not isinstance(seed, int) or isinstance(seed, bool):
        raise ConfigurationError(f"seed must be an int, got {type(seed).__name__}")
    return jax.random.PRNGKey(seed)
