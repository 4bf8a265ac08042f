"""CHIP-8 system instructions (0x0xxx) and fault recording."""

import jax
import jax.lax
import jax.numpy as jnp
from chip8core.state import EmulatorState
from chip8core.decode import DecodedInstruction
from chip8core.constants import FAULT_NONE, FAULT_DECODE, FAULT_STACK_UNDERFLOW
from chip8core.display import clear
from chip8core.stack import pop


def record_fault(state: EmulatorState, code: int, instruction: DecodedInstruction) -> EmulatorState:
    """Record a fatal fault for the instruction just fetched.

    Only the first fault is kept; a faulted processor never executes again.
    """
    first = state.fault == FAULT_NONE
    return state.replace(
        fault=jnp.where(first, jnp.astype(code, jnp.uint8), state.fault),
        fault_instruction=jnp.where(first, jnp.astype(instruction.raw, jnp.uint16), state.fault_instruction),
        fault_pc=jnp.where(first, jnp.astype(state.pc - 2, jnp.uint16), state.fault_pc),
    )


def unknown_instruction(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """Any word outside the instruction set."""
    return record_fault(state, FAULT_DECODE, instruction)


def execute_clear_screen(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """00E0 - Clear display."""
    return state.replace(display=clear(state.display))


def execute_return(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """00EE - Return from subroutine."""
    stack, address, underflow = pop(state.stack)
    return jax.lax.cond(
        underflow,
        lambda s: record_fault(s, FAULT_STACK_UNDERFLOW, instruction),
        lambda s: s.replace(stack=stack, pc=address),
        state
    )


def execute_system_instruction(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """Dispatch system instructions."""
    return jax.lax.cond(
        0x00E0 == instruction.raw,
        execute_clear_screen,
        lambda state, instruction: jax.lax.cond(
            0x00EE == instruction.raw,
            execute_return,
            unknown_instruction,
            state, instruction
        ),
        state, instruction
    )
