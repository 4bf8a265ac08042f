"""CHIP-8 register load and immediate operations."""

import jax
import jax.numpy as jnp
from chip8core.state import EmulatorState
from chip8core.decode import DecodedInstruction


def execute_set(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """6XNN - Set VX = NN."""
    return state.replace(V=state.V.at[instruction.x].set(jnp.astype(instruction.nn, jnp.uint8)))


def execute_add(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """7XNN - Add NN to VX, wrapping, VF untouched."""
    result = (jnp.astype(state.V[instruction.x], jnp.int32) + instruction.nn) & 0xFF
    return state.replace(V=state.V.at[instruction.x].set(jnp.astype(result, jnp.uint8)))


def execute_set_index(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """ANNN - Set I = NNN."""
    return state.replace(I=jnp.astype(instruction.nnn, jnp.uint16))


def execute_random(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """CXNN - Set VX = random & NN."""
    key, subkey = jax.random.split(state.rng)
    random_value = jax.random.randint(subkey, shape=(), minval=0, maxval=256, dtype=jnp.int32)
    value = jnp.astype(random_value & instruction.nn, jnp.uint8)
    return state.replace(V=state.V.at[instruction.x].set(value), rng=key)
