"""CHIP-8 ALU operations (8xxx).

Every operation maps the register file to a new register file. Operations
that set VF write it at the point the classic interpreter does: 8XY4 after
the result, 8XY5 and 8XY7 clear it before comparing, 8XY6 and 8XYE before
shifting. When X or Y is 0xF the operand is read after those writes.
"""

import jax
import jax.lax
import jax.numpy as jnp
from chip8core.state import EmulatorState
from chip8core.decode import DecodedInstruction
from chip8core.constants import FLAG_REGISTER
from chip8core.instructions.system import unknown_instruction


def _byte(value) -> jnp.ndarray:
    return jnp.astype(value & 0xFF, jnp.uint8)


def _wide(value) -> jnp.ndarray:
    return jnp.astype(value, jnp.int32)


def alu_set(V: jnp.ndarray, x: int, y: int) -> jnp.ndarray:
    """8XY0 - Set: VX = VY."""
    return V.at[x].set(V[y])


def alu_or(V: jnp.ndarray, x: int, y: int) -> jnp.ndarray:
    """8XY1 - Binary OR: VX |= VY."""
    return V.at[x].set(V[x] | V[y])


def alu_and(V: jnp.ndarray, x: int, y: int) -> jnp.ndarray:
    """8XY2 - Binary AND: VX &= VY."""
    return V.at[x].set(V[x] & V[y])


def alu_xor(V: jnp.ndarray, x: int, y: int) -> jnp.ndarray:
    """8XY3 - Logical XOR: VX ^= VY."""
    return V.at[x].set(V[x] ^ V[y])


def alu_add(V: jnp.ndarray, x: int, y: int) -> jnp.ndarray:
    """8XY4 - Add: VX += VY.

    VF is 1 unless the stored result plus VY reaches 0xFF. The sum is taken
    after VX has been written, so 0xFF + 0x01 stores 0x00 and sets VF to 1.
    """
    V = V.at[x].set(_byte(_wide(V[x]) + V[y]))
    total = _wide(V[x]) + V[y]
    return V.at[FLAG_REGISTER].set(jnp.astype(total < 0xFF, jnp.uint8))


def alu_add_canonical(V: jnp.ndarray, x: int, y: int) -> jnp.ndarray:
    """8XY4 - Add: VX += VY, VF = 1 on 8-bit carry."""
    total = _wide(V[x]) + V[y]
    V = V.at[x].set(_byte(total))
    return V.at[FLAG_REGISTER].set(jnp.astype(total > 0xFF, jnp.uint8))


def alu_sub_xy(V: jnp.ndarray, x: int, y: int) -> jnp.ndarray:
    """8XY5 - Subtract: VX -= VY, VF = 1 if VX > VY.

    VF is cleared before the comparison, so an operand held in VF reads as 0.
    """
    V = V.at[FLAG_REGISTER].set(0)
    V = V.at[FLAG_REGISTER].set(jnp.astype(V[x] > V[y], jnp.uint8))
    return V.at[x].set(_byte(_wide(V[x]) - V[y]))


def alu_shift_right(V: jnp.ndarray, x: int, y: int) -> jnp.ndarray:
    """8XY6 - Shift right: VX >>= 1, VF = old least significant bit."""
    V = V.at[FLAG_REGISTER].set(V[x] & 0x1)
    return V.at[x].set(V[x] >> 1)


def alu_sub_yx(V: jnp.ndarray, x: int, y: int) -> jnp.ndarray:
    """8XY7 - Subtract: VX = VY - VX, VF = 1 if VY > VX.

    VF is cleared before the comparison, as in 8XY5.
    """
    V = V.at[FLAG_REGISTER].set(0)
    V = V.at[FLAG_REGISTER].set(jnp.astype(V[y] > V[x], jnp.uint8))
    return V.at[x].set(_byte(_wide(V[y]) - V[x]))


def alu_shift_left(V: jnp.ndarray, x: int, y: int) -> jnp.ndarray:
    """8XYE - Shift left: VX <<= 1, VF = old VX & 0x80 (0x00 or 0x80)."""
    V = V.at[FLAG_REGISTER].set(V[x] & 0x80)
    return V.at[x].set(_byte(_wide(V[x]) << 1))


def alu_shift_left_canonical(V: jnp.ndarray, x: int, y: int) -> jnp.ndarray:
    """8XYE - Shift left: VX <<= 1, VF = old most significant bit."""
    shifted_bit = (V[x] >> 7) & 0x1
    V = V.at[x].set(_byte(_wide(V[x]) << 1))
    return V.at[FLAG_REGISTER].set(shifted_bit)


# Sub-operations 0-7 and E exist, everything else is a decode fault
VALID_OPS = jnp.array([1, 1, 1, 1, 1, 1, 1, 1, 0, 0, 0, 0, 0, 0, 1, 0], dtype=bool)


def execute_alu_operation(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """8XYN - ALU operations dispatcher."""
    operations = [
        alu_set, alu_or, alu_and, alu_xor,
        alu_add_canonical if state.canonical_flags else alu_add,
        alu_sub_xy, alu_shift_right, alu_sub_yx,
        alu_shift_left_canonical if state.canonical_flags else alu_shift_left,
    ]

    def run(state: EmulatorState) -> EmulatorState:
        # Map 0-7 and E onto 0-8
        index = jnp.where(instruction.n == 0xE, 8, jnp.minimum(instruction.n, 7))
        V = jax.lax.switch(index, operations, state.V, instruction.x, instruction.y)
        return state.replace(V=V)

    return jax.lax.cond(
        VALID_OPS[instruction.n],
        run,
        lambda s: unknown_instruction(s, instruction),
        state
    )
