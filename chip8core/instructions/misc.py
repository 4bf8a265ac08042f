"""CHIP-8 miscellaneous instructions (Fxxx)."""

import jax
import jax.lax
import jax.numpy as jnp
from chip8core.state import EmulatorState, PendingKey
from chip8core.decode import DecodedInstruction
from chip8core.constants import ADDRESS_MASK, FONT_START, FONT_SPRITE_SIZE, NUM_REGISTERS
from chip8core.instructions.system import unknown_instruction


def execute_get_delay_timer(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """FX07 - Set VX to delay timer value."""
    return state.replace(V=state.V.at[instruction.x].set(state.delay_timer))


def execute_wait_for_key(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """FX0A - Pause until the next key press, which is stored in VX."""
    return state.replace(
        paused=jnp.ones((), dtype=jnp.bool_),
        pending_key=PendingKey(
            active=jnp.ones((), dtype=jnp.bool_),
            register=jnp.astype(instruction.x, jnp.uint8),
        ),
    )


def execute_set_delay_timer(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """FX15 - Set delay timer to VX."""
    return state.replace(delay_timer=state.V[instruction.x])


def execute_set_sound_timer(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """FX18 - Set sound timer to VX."""
    return state.replace(sound_timer=state.V[instruction.x])


def execute_add_to_index(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """FX1E - Add VX to I register (16-bit wraparound, VF untouched)."""
    new_i = (jnp.astype(state.I, jnp.int32) + state.V[instruction.x]) & 0xFFFF
    return state.replace(I=jnp.astype(new_i, jnp.uint16))


def execute_font_character(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """FX29 - Set I to location of sprite for digit VX."""
    font_address = FONT_START + jnp.astype(state.V[instruction.x], jnp.int32) * FONT_SPRITE_SIZE
    return state.replace(I=jnp.astype(font_address, jnp.uint16))


def execute_bcd_conversion(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """FX33 - Store BCD representation of VX at I, I+1, I+2."""
    value = state.V[instruction.x]

    digits = jnp.array([
        value // 100,
        (value // 10) % 10,
        value % 10
    ], dtype=jnp.uint8)

    indices = (jnp.astype(state.I, jnp.int32) + jnp.arange(3)) & ADDRESS_MASK
    return state.replace(memory=state.memory.at[indices].set(digits))


def _register_block(state: EmulatorState, instruction: DecodedInstruction):
    """Registers V0..V(X-1) and their memory addresses from I onward.

    The upper bound is exclusive: FX55/FX65 never touch VX itself.
    """
    register_mask = jnp.arange(NUM_REGISTERS) < instruction.x
    addresses = (jnp.astype(state.I, jnp.int32) + jnp.arange(NUM_REGISTERS)) & ADDRESS_MASK
    return register_mask, addresses


def execute_store_registers(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """FX55 - Store V0 through V(X-1) in memory starting at I."""
    register_mask, addresses = _register_block(state, instruction)
    new_values = jnp.where(register_mask, state.V, state.memory[addresses])
    return state.replace(memory=state.memory.at[addresses].set(new_values))


def execute_load_registers(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """FX65 - Load V0 through V(X-1) from memory starting at I."""
    register_mask, addresses = _register_block(state, instruction)
    return state.replace(V=jnp.where(register_mask, state.memory[addresses], state.V))


MISC_OPERATIONS = {
    0x07: execute_get_delay_timer,
    0x0A: execute_wait_for_key,
    0x15: execute_set_delay_timer,
    0x18: execute_set_sound_timer,
    0x1E: execute_add_to_index,
    0x29: execute_font_character,
    0x33: execute_bcd_conversion,
    0x55: execute_store_registers,
    0x65: execute_load_registers,
}

# Low byte -> branch index, anything unlisted goes to the decode fault branch
_MISC_INDEX = jnp.full(256, len(MISC_OPERATIONS), dtype=jnp.int32).at[
    jnp.array(list(MISC_OPERATIONS.keys()))
].set(jnp.arange(len(MISC_OPERATIONS)))


def execute_misc_instruction(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """Dispatch Fxxx instructions on their low byte."""
    return jax.lax.switch(
        _MISC_INDEX[instruction.nn],
        list(MISC_OPERATIONS.values()) + [unknown_instruction],
        state, instruction
    )
