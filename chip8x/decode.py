"""CHIP-8 instruction decoding."""

from chex import dataclass

from chip8x.constants import ADDRESS_MASK


@dataclass(frozen=True)
class DecodedInstruction:
    """Operand fields of one 16-bit instruction word.

    Fields are plain ints for a concrete word and traced scalars under jit.

    Attributes:
        raw: The whole word
        opcode: Top nibble, selects the instruction family
        x: Second nibble, usually the VX register index
        y: Third nibble, usually the VY register index
        n: Low nibble, sub-opcode or sprite height
        nn: Low byte, immediate value or sub-opcode
        nnn: Low 12 bits, an address
    """
    raw: int
    opcode: int
    x: int
    y: int
    n: int
    nn: int
    nnn: int

    def __str__(self):
        return (f"{int(self.raw):04X} (X: {int(self.x):X}, Y: {int(self.y):X}, N: {int(self.n):X}, "
                f"NN: {int(self.nn):02X}, NNN: {int(self.nnn):03X})")


def decode(instruction: int) -> DecodedInstruction:
    """Split a 16-bit word into its addressing fields. Pure; never fails."""
    return DecodedInstruction(
        raw=instruction,
        opcode=instruction >> 12 & 0xF,
        x=instruction >> 8 & 0xF,
        y=instruction >> 4 & 0xF,
        n=instruction & 0xF,
        nn=instruction & 0xFF,
        nnn=instruction & ADDRESS_MASK,
    )
