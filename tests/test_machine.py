"""Tests for the host-facing Chip8 engine."""

import io

import jax
import pytest
from chip8x import (
    Chip8, CycleResult, InterpreterMode, ConfigurationError, IllegalOpcodeError,
    MachineNotPoweredError, RomTooLargeError, StackOverflowError, StackUnderflowError,
    MAX_ROM_SIZE,
)
from chip8x.logging import MachineLogger


def run(machine, cycles):
    return [machine.cycle() for _ in range(cycles)]


class TestCycle:

    def test_set_then_add(self):
        machine = Chip8(seed=0)
        machine.power_and_load(bytes([0x60, 0x05, 0x70, 0x03]))

        results = run(machine, 2)

        assert int(machine.V[0]) == 8
        assert machine.pc == 0x204
        assert all(result.ok for result in results)

    def test_draw_flag(self):
        machine = Chip8(seed=0)
        machine.power_and_load(bytes([0xA0, 0x00, 0xD0, 0x05, 0x00, 0xE0, 0x60, 0x01]))

        results = run(machine, 4)

        assert [result.draw for result in results] == [False, True, True, False]
        assert not bool(machine.display.any())

    @pytest.mark.parametrize("mode,setup,expected_vy", [
        ("schip", bytes([0x61, 0x03, 0x62, 0x00]), 0x00),
        ("cosmac_vip", bytes([0x61, 0x00, 0x62, 0x03]), 0x03),
    ])
    def test_shift_right_per_mode(self, mode, setup, expected_vy):
        machine = Chip8(mode=mode, seed=0)
        machine.power_and_load(setup + bytes([0x81, 0x26]))

        run(machine, 3)

        assert int(machine.V[1]) == 1
        assert int(machine.V[0xF]) == 1
        assert int(machine.V[2]) == expected_vy

    def test_call_and_return(self):
        # 200: 2206  202: 6001  204: 1204  206: 00EE
        machine = Chip8(seed=0)
        machine.power_and_load(bytes([0x22, 0x06, 0x60, 0x01, 0x12, 0x04, 0x00, 0xEE]))

        machine.cycle()
        assert machine.pc == 0x206
        assert machine.sp == 1

        machine.cycle()
        assert machine.pc == 0x202
        assert machine.sp == 0

    @pytest.mark.parametrize("mode,expected_i", [("schip", 0x300), ("cosmac_vip", 0x304)])
    def test_store_registers_index(self, mode, expected_i):
        machine = Chip8(mode=mode, seed=0)
        machine.power_and_load(bytes([0xA3, 0x00, 0xF3, 0x55]))

        run(machine, 2)

        assert machine.I == expected_i

    def test_not_powered(self):
        with pytest.raises(MachineNotPoweredError):
            Chip8(seed=0).cycle()

    def test_exit_halts(self):
        machine = Chip8(seed=0)
        machine.power_and_load(bytes([0x00, 0xFD]))

        run(machine, 3)

        assert machine.halted
        assert machine.pc == 0x200


class TestFaults:

    def test_illegal_opcode_is_returned(self):
        machine = Chip8(seed=0)
        machine.power_and_load(bytes([0x60, 0x05, 0x81, 0x28]))

        machine.cycle()
        result = machine.cycle()

        assert not result.ok
        assert isinstance(result.fault, IllegalOpcodeError)
        assert result.fault.word == 0x8128
        assert result.fault.address == 0x202
        assert machine.pc == 0x204
        assert int(machine.V[0]) == 5

    def test_raise_for_fault(self):
        result = CycleResult(draw=False, fault=IllegalOpcodeError(0xF1FF, 0x200))
        with pytest.raises(IllegalOpcodeError, match="F1FF"):
            result.raise_for_fault()
        CycleResult(draw=True).raise_for_fault()

    def test_raise_on_fault(self):
        machine = Chip8(seed=0, raise_on_fault=True)
        machine.power_and_load(bytes([0xFF, 0xFF]))
        with pytest.raises(IllegalOpcodeError):
            machine.cycle()
        assert machine.pc == 0x202

    def test_extended_opcode_illegal_on_cosmac(self):
        machine = Chip8(mode="cosmac_vip", seed=0)
        machine.power_and_load(bytes([0xF0, 0x75]))
        assert isinstance(machine.cycle().fault, IllegalOpcodeError)

    def test_stack_overflow(self):
        # 200: 2200 calls itself forever
        machine = Chip8(mode="cosmac_vip", seed=0)
        machine.power_and_load(bytes([0x22, 0x00]))

        results = run(machine, 13)

        assert all(result.ok for result in results[:12])
        assert isinstance(results[12].fault, StackOverflowError)
        assert machine.sp == 12

    def test_stack_underflow(self):
        machine = Chip8(seed=0)
        machine.power_and_load(bytes([0x00, 0xEE]))

        result = machine.cycle()

        assert isinstance(result.fault, StackUnderflowError)
        assert machine.sp == 0
        assert machine.pc == 0x202


class TestBoundary:

    def test_rom_too_large_leaves_state(self):
        machine = Chip8(seed=0)
        machine.power_and_load(bytes([0x60, 0x05]))
        machine.cycle()
        before = machine.snapshot()

        with pytest.raises(RomTooLargeError):
            machine.power_and_load(bytes(MAX_ROM_SIZE + 1))

        assert machine.snapshot() is before
        assert int(machine.V[0]) == 5

    def test_power_and_load_resets(self):
        machine = Chip8(seed=0)
        machine.power_and_load(bytes([0x60, 0x05]))
        machine.cycle()
        machine.power_and_load(bytes([0x00, 0xE0]))
        assert int(machine.V[0]) == 0
        assert machine.pc == 0x200

    def test_power_and_load_switches_mode(self):
        machine = Chip8(mode="schip", seed=0)
        machine.power_and_load(b"\x00\xE0", mode="cosmac_vip")
        assert machine.mode == InterpreterMode.COSMAC_VIP
        assert machine.stack.shape == (12,)

    def test_rpl_flags_survive_reload(self):
        machine = Chip8(seed=0)
        machine.power_and_load(bytes([0x60, 0x2A, 0xF0, 0x75]))
        run(machine, 2)

        machine.power_and_load(bytes([0xF0, 0x85]))
        machine.cycle()

        assert int(machine.rpl[0]) == 0x2A
        assert int(machine.V[0]) == 0x2A

    def test_set_input(self):
        machine = Chip8(seed=0)
        machine.power_and_load(bytes([0xF3, 0x0A]))

        machine.cycle()
        assert machine.pc == 0x200

        machine.set_input(0x7, True)
        machine.cycle()
        assert machine.pc == 0x202
        assert int(machine.V[3]) == 7

        machine.set_input(0x7, False)
        assert not bool(machine.keypad.any())

    @pytest.mark.parametrize("key", [-1, 16])
    def test_set_input_rejects_bad_key(self, key):
        with pytest.raises(ValueError):
            Chip8(seed=0).set_input(key, True)

    def test_timers(self):
        machine = Chip8(seed=0)
        machine.power_and_load(bytes([0x60, 0x02, 0xF0, 0x15, 0xF0, 0x18]))
        run(machine, 3)

        machine.decrement_timers()
        assert machine.delay_timer == 1
        assert machine.sound_timer == 1

        machine.decrement_timers()
        machine.decrement_timers()
        assert machine.delay_timer == 0
        assert machine.sound_timer == 0


class TestSnapshots:

    RANDOM_ROM = bytes([0xC0, 0xFF, 0xC1, 0xFF, 0xC2, 0xFF])

    def test_restore_replays_random_draws(self):
        machine = Chip8(seed=1234)
        machine.power_and_load(self.RANDOM_ROM)
        saved = machine.snapshot()

        run(machine, 3)
        first = [int(v) for v in machine.V[:3]]

        machine.restore(saved)
        run(machine, 3)

        assert [int(v) for v in machine.V[:3]] == first

    def test_same_seed_same_draws(self):
        values = []
        for _ in range(2):
            machine = Chip8(seed=99)
            machine.power_and_load(self.RANDOM_ROM)
            run(machine, 3)
            values.append([int(v) for v in machine.V[:3]])
        assert values[0] == values[1]

    def test_snapshot_is_not_aliased(self):
        machine = Chip8(seed=0)
        machine.power_and_load(bytes([0x60, 0x05]))
        saved = machine.snapshot()
        machine.cycle()
        assert int(saved.V[0]) == 0

    def test_restore_other_mode(self):
        schip = Chip8(mode="schip", seed=0)
        schip.power_and_load(b"")
        with pytest.raises(ConfigurationError):
            Chip8(mode="xo_chip", seed=0).restore(schip.snapshot())

    def test_restore_powers_on(self):
        source = Chip8(seed=0)
        source.power_and_load(bytes([0x60, 0x05]))
        target = Chip8(seed=0)
        target.restore(source.snapshot())
        target.cycle()
        assert int(target.V[0]) == 5


class TestConfiguration:

    def test_unknown_mode(self):
        with pytest.raises(ConfigurationError):
            Chip8(mode="chip48")

    def test_seed_and_rng(self):
        with pytest.raises(ConfigurationError):
            Chip8(seed=1, rng=jax.random.PRNGKey(1))

    def test_bad_rng(self):
        with pytest.raises(ConfigurationError):
            Chip8(rng="not a key")

    def test_bad_seed(self):
        with pytest.raises(ConfigurationError):
            Chip8(seed="abc")

    def test_explicit_rng(self):
        machine = Chip8(rng=jax.random.PRNGKey(5))
        machine.power_and_load(bytes([0xC0, 0xFF]))
        assert machine.cycle().ok

    def test_entropy_seed(self):
        machine = Chip8()
        machine.power_and_load(bytes([0xC0, 0x0F]))
        machine.cycle()
        assert int(machine.V[0]) <= 0x0F

    def test_quirk_overrides(self):
        machine = Chip8(mode="cosmac_vip", seed=0, quirks={"logic_resets_flag": False})
        machine.power_and_load(bytes([0x6F, 0x01, 0x81, 0x21]))
        run(machine, 2)
        assert int(machine.V[0xF]) == 1

    def test_unknown_quirk(self):
        with pytest.raises(ConfigurationError):
            Chip8(quirks={"turbo": True})


class TestLogging:

    def _machine(self, level, **kwargs):
        stream = io.StringIO()
        logger = MachineLogger(log_level=level, stream=stream, show_timestamps=False)
        return Chip8(seed=0, logger=logger, **kwargs), stream

    def test_silent_by_default(self):
        machine, stream = self._machine("WARNING")
        machine.power_and_load(bytes([0x60, 0x05]))
        machine.cycle()
        assert stream.getvalue() == ""

    def test_power_on_info(self):
        machine, stream = self._machine("INFO")
        machine.power_and_load(bytes([0x60, 0x05]))
        assert "schip mode with a 2-byte ROM" in stream.getvalue()

    def test_fault_logged(self):
        machine, stream = self._machine("WARNING")
        machine.power_and_load(bytes([0xFF, 0xFF]))
        machine.cycle()
        output = stream.getvalue()
        assert "ERROR" in output
        assert "Illegal opcode FFFF at 200" in output

    def test_halt_logged_once(self):
        machine, stream = self._machine("WARNING")
        machine.power_and_load(bytes([0x00, 0xFD]))
        run(machine, 3)
        assert stream.getvalue().count("Program exited at 200") == 1

    def test_register_dump(self):
        machine, stream = self._machine("DEBUG")
        machine.power_and_load(bytes([0x6A, 0x05]))
        machine.cycle()
        output = stream.getvalue()
        assert "6A05" in output
        assert "VA=05" in output
        assert "PC=202" in output
