"""Tests for interpreter modes and quirk resolution."""

import pytest
from chip8x import quirks_for, InterpreterMode, QUIRKS, ConfigurationError, create_state
from chip8x.quirks import parse_mode


def test_default_mode_is_schip():
    assert quirks_for().mode == InterpreterMode.SCHIP


@pytest.mark.parametrize("value", ["cosmac_vip", "schip", "xo_chip"])
def test_parse_mode_strings(value):
    assert parse_mode(value).value == value


def test_parse_mode_unknown():
    with pytest.raises(ConfigurationError, match="Unknown interpreter mode"):
        parse_mode("chip48")


def test_stack_sizes():
    assert QUIRKS[InterpreterMode.COSMAC_VIP].stack_size == 12
    assert QUIRKS[InterpreterMode.SCHIP].stack_size == 16
    assert QUIRKS[InterpreterMode.XO_CHIP].stack_size == 16


def test_override():
    quirks = quirks_for("cosmac_vip", logic_resets_flag=False)
    assert not quirks.logic_resets_flag
    assert quirks.mode == InterpreterMode.COSMAC_VIP
    assert QUIRKS[InterpreterMode.COSMAC_VIP].logic_resets_flag


def test_override_unknown_field():
    with pytest.raises(ConfigurationError, match="turbo"):
        quirks_for("schip", turbo=True)


def test_override_mode_rejected():
    with pytest.raises(ConfigurationError):
        quirks_for("schip", mode=InterpreterMode.XO_CHIP)


def test_stack_size_must_be_positive():
    with pytest.raises(ConfigurationError):
        quirks_for("schip", stack_size=0)


def test_stack_size_override_shapes_state():
    state = create_state(quirks=quirks_for("schip", stack_size=4))
    assert state.stack.capacity == 4


def test_wraparound_reaches_display():
    assert create_state(mode="xo_chip").display.wraparound
    assert not create_state(mode="schip").display.wraparound


def test_quirks_are_hashable():
    assert quirks_for("schip") == quirks_for("schip")
    assert len({quirks_for(mode) for mode in InterpreterMode}) == 3
