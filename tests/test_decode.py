"""Tests for instruction decoding."""

from chip8x import decode


def test_decode_fields():
    """All addressing fields are extracted from one word."""
    instruction = decode(0xD12F)

    assert instruction.raw == 0xD12F
    assert instruction.opcode == 0xD
    assert instruction.x == 0x1
    assert instruction.y == 0x2
    assert instruction.n == 0xF
    assert instruction.nn == 0x2F
    assert instruction.nnn == 0x12F


def test_decode_extremes():
    """Zero and all-ones words decode without error."""
    zero = decode(0x0000)
    ones = decode(0xFFFF)

    assert (zero.opcode, zero.x, zero.y, zero.n, zero.nn, zero.nnn) == (0, 0, 0, 0, 0, 0)
    assert (ones.opcode, ones.x, ones.y, ones.n, ones.nn, ones.nnn) == (0xF, 0xF, 0xF, 0xF, 0xFF, 0xFFF)


def test_decode_is_pure():
    """Decoding the same word twice gives equal results."""
    assert decode(0x8AB6) == decode(0x8AB6)


def test_decode_str():
    """String form lists the operands in hex."""
    assert str(decode(0x6A05)) == "6A05 (X: A, Y: 0, N: 5, NN: 05, NNN: A05)"
