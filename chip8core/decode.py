"""CHIP-8 instruction decoding."""

from chex import dataclass


@dataclass(frozen=True)
class DecodedInstruction:
    """Instruction word split into its operand fields."""
    raw: int
    family: int  # Top nibble, selects the executor
    x: int       # Second nibble (VX register)
    y: int       # Third nibble (VY register)
    n: int       # Low nibble (sprite height, ALU sub-operation)
    nn: int      # Low byte (immediate, F/E sub-operation)
    nnn: int     # Low 12 bits (address)


def decode(instruction: int) -> DecodedInstruction:
    """Split a 16-bit big-endian instruction word into its fields."""
    return DecodedInstruction(
        raw=instruction,
        family=(instruction & 0xF000) >> 12,
        x=(instruction & 0x0F00) >> 8,
        y=(instruction & 0x00F0) >> 4,
        n=instruction & 0x000F,
        nn=instruction & 0x00FF,
        nnn=instruction & 0x0FFF
    )
