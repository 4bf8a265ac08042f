"""CHIP-8 sprite drawing (DXYN)."""

import jax.numpy as jnp
from chip8core.state import EmulatorState
from chip8core.decode import DecodedInstruction
from chip8core.constants import ADDRESS_MASK, FLAG_REGISTER
from chip8core.display import sprite_mask, blit

MAX_SPRITE_HEIGHT = 15


def execute_display(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """DXYN - Draw sprite at (VX, VY) with height N.

    VF is cleared before drawing and set to 1 if any lit pixel was switched
    off. Sprite rows are read from memory at I, wrapping at the end of memory.
    """
    V = state.V.at[FLAG_REGISTER].set(0)
    addresses = (jnp.astype(state.I, jnp.int32) + jnp.arange(MAX_SPRITE_HEIGHT)) & ADDRESS_MASK
    rows = state.memory[addresses]

    mask = sprite_mask(rows, V[instruction.x], V[instruction.y], instruction.n)
    display, collision = blit(state.display, mask)

    return state.replace(
        display=display,
        V=V.at[FLAG_REGISTER].set(jnp.astype(collision, jnp.uint8))
    )
