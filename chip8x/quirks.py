"""Interpreter modes and their quirk policies."""

import dataclasses
import enum
from dataclasses import dataclass

from chip8x.errors import ConfigurationError


class InterpreterMode(str, enum.Enum):
    """CHIP-8 interpreter lineage a ROM was written against."""
    COSMAC_VIP = "cosmac_vip"
    SCHIP = "schip"
    XO_CHIP = "xo_chip"


@dataclass(frozen=True)
class Quirks:
    """Per-mode behaviour of instructions that diverge across interpreters.

    Attributes:
        mode: Interpreter lineage this record was derived from
        logic_resets_flag: 8XY1/8XY2/8XY3 clear VF
        shift_in_place: 8XY6/8XYE shift VX instead of VY
        jump_uses_vx: BXNN jumps to XNN + VX instead of NNN + V0
        index_increments: FX55/FX65 leave I at I + X + 1
        index_overflow_flag: FX1E sets VF when I passes 0xFFF
        wraparound: Sprites wrap around screen edges instead of clipping
        collision_counts_rows: In hires, DXYN reports collided rows in VF
        stack_size: Number of return addresses the stack holds
        extended_opcodes: SCHIP instructions (hires, scrolling, RPL, big font)
        xo_opcodes: XO-CHIP instructions (scroll up, register ranges, long I)
    """
    mode: InterpreterMode
    logic_resets_flag: bool
    shift_in_place: bool
    jump_uses_vx: bool
    index_increments: bool
    index_overflow_flag: bool
    wraparound: bool
    collision_counts_rows: bool
    stack_size: int
    extended_opcodes: bool
    xo_opcodes: bool


QUIRKS = {
    InterpreterMode.COSMAC_VIP: Quirks(
        mode=InterpreterMode.COSMAC_VIP,
        logic_resets_flag=True,
        shift_in_place=False,
        jump_uses_vx=False,
        index_increments=True,
        index_overflow_flag=True,
        wraparound=False,
        collision_counts_rows=False,
        stack_size=12,
        extended_opcodes=False,
        xo_opcodes=False,
    ),
    InterpreterMode.SCHIP: Quirks(
        mode=InterpreterMode.SCHIP,
        logic_resets_flag=False,
        shift_in_place=True,
        jump_uses_vx=True,
        index_increments=False,
        index_overflow_flag=True,
        wraparound=False,
        collision_counts_rows=True,
        stack_size=16,
        extended_opcodes=True,
        xo_opcodes=False,
    ),
    InterpreterMode.XO_CHIP: Quirks(
        mode=InterpreterMode.XO_CHIP,
        logic_resets_flag=False,
        shift_in_place=False,
        jump_uses_vx=False,
        index_increments=True,
        index_overflow_flag=True,
        wraparound=True,
        collision_counts_rows=False,
        stack_size=16,
        extended_opcodes=True,
        xo_opcodes=True,
    ),
}


def parse_mode(mode) -> InterpreterMode:
    """Accept an InterpreterMode or its string value."""
    try:
        return InterpreterMode(mode)
    except ValueError:
        valid = ", ".join(m.value for m in InterpreterMode)
        raise ConfigurationError(f"Unknown interpreter mode {mode!r}. Supported modes: {valid}") from None


def quirks_for(mode=InterpreterMode.SCHIP, **overrides) -> Quirks:
    """Resolve the quirk record for a mode, with optional field overrides."""
    quirks = QUIRKS[parse_mode(mode)]
    if not overrides:
        return quirks

    known = {f.name for f in dataclasses.fields(Quirks)} - {"mode"}
    unknown = set(overrides) - known
    if unknown:
        raise ConfigurationError(f"Unknown quirk(s): {', '.join(sorted(unknown))}")
    if "stack_size" in overrides and int(overrides["stack_size"]) < 1:
        raise ConfigurationError("stack_size must be at least 1")
    return dataclasses.replace(quirks, **overrides)
