"""Main CHIP-8 execution engine: interpreter, cycle driver and key events."""

from functools import partial

import jax
import jax.lax
import jax.numpy as jnp
from chip8core.state import EmulatorState, PendingKey
from chip8core.decode import decode
from chip8core.constants import (
    ADDRESS_MASK, MEMORY_SIZE, PROGRAM_START,
    FAULT_NONE, FAULT_DECODE, FAULT_STACK_UNDERFLOW, FAULT_STACK_OVERFLOW,
)
from chip8core.errors import DecodeError, StackUnderflowError, StackOverflowError, ProgramTooLargeError
from chip8core.keypad import is_valid_key, press, release
from chip8core.logging import fori_loop_with_progress
from chip8core.instructions.system import execute_system_instruction
from chip8core.instructions.control_flow import (
    execute_jump, execute_call, execute_skip_if_equal_immediate,
    execute_skip_if_not_equal_immediate, execute_skip_if_equal_register,
    execute_skip_if_not_equal_register, execute_jump_with_offset, execute_skip_if_key
)
from chip8core.instructions.alu import execute_alu_operation
from chip8core.instructions.memory import execute_set, execute_add, execute_set_index, execute_random
from chip8core.instructions.display import execute_display
from chip8core.instructions.misc import execute_misc_instruction


def execute(state: EmulatorState, instruction: int) -> EmulatorState:
    """Execute single CHIP-8 instruction.

    Expects ``pc`` to already point past the instruction (see ``fetch``).
    Unknown words and stack misuse are recorded in ``state.fault``.
    """
    decoded_instruction = decode(instruction)

    return jax.lax.switch(
        decoded_instruction.family,
        [
            execute_system_instruction,
            execute_jump,
            execute_call,
            execute_skip_if_equal_immediate,
            execute_skip_if_not_equal_immediate,
            execute_skip_if_equal_register,
            execute_set,
            execute_add,
            execute_alu_operation,
            execute_skip_if_not_equal_register,
            execute_set_index,
            execute_jump_with_offset,
            execute_random,
            execute_display,
            execute_skip_if_key,
            execute_misc_instruction,
        ],
        state, decoded_instruction
    )


def _pack_u16(high: jnp.uint8, low: jnp.uint8) -> jnp.uint16:
    """Pack two bytes into uint16."""
    return (high.astype(jnp.uint16) << 8) | low.astype(jnp.uint16)


def fetch(state: EmulatorState) -> tuple[EmulatorState, jnp.uint16]:
    """Fetch next instruction from memory and advance pc past it."""
    address = jnp.astype(state.pc, jnp.int32)
    instruction = _pack_u16(state.memory[address & ADDRESS_MASK], state.memory[(address + 1) & ADDRESS_MASK])
    return state.replace(pc=jnp.astype(state.pc + 2, jnp.uint16)), instruction


def step(state: EmulatorState) -> EmulatorState:
    """Fetch and execute one instruction unless paused or faulted."""
    def _step(state):
        state, instruction = fetch(state)
        return execute(state, instruction)

    return jax.lax.cond(state.halted, lambda s: s, _step, state)


def update_timers(state: EmulatorState) -> EmulatorState:
    """Decrement both timers toward zero."""
    return state.replace(
        delay_timer=jnp.where(state.delay_timer > 0, state.delay_timer - 1, state.delay_timer),
        sound_timer=jnp.where(state.sound_timer > 0, state.sound_timer - 1, state.sound_timer),
    )


@jax.jit
def run_cycle(state: EmulatorState) -> EmulatorState:
    """Run one external tick: the instruction quantum, then the timers.

    Each step is skipped while the processor awaits a key, and the timers are
    left alone when the tick ends paused or faulted.
    """
    state = jax.lax.fori_loop(0, state.instructions_per_cycle, lambda _, s: step(s), state)
    return jax.lax.cond(state.halted, lambda s: s, update_timers, state)


@partial(jax.jit, static_argnames=("frames", "progress"))
def run_frames(state: EmulatorState, frames: int, progress: bool = False) -> EmulatorState:
    """Run ``frames`` consecutive ticks without a host in the loop."""
    def body(i, state):
        return run_cycle(state)

    if progress:
        body = fori_loop_with_progress(frames)(body)

    return jax.lax.fori_loop(0, frames, body, state)


@jax.jit
def press_key(state: EmulatorState, key) -> EmulatorState:
    """Deliver a key press.

    If an await-key instruction is pending, the key is written into its
    target register, the processor resumes and the pending action is cleared.
    Keys outside 0x0-0xF change nothing.
    """
    state = state.replace(keypad=press(state.keypad, key))

    def resolve(state):
        V = state.V.at[state.pending_key.register].set(jnp.astype(key, jnp.uint8))
        return state.replace(V=V, paused=jnp.zeros((), dtype=jnp.bool_), pending_key=PendingKey())

    return jax.lax.cond(is_valid_key(key) & state.pending_key.active, resolve, lambda s: s, state)


@jax.jit
def release_key(state: EmulatorState, key) -> EmulatorState:
    """Deliver a key release. Keys outside 0x0-0xF change nothing."""
    return state.replace(keypad=release(state.keypad, key))


def load_program(state: EmulatorState, program: bytes) -> EmulatorState:
    """Copy a raw program image into memory starting at 0x200."""
    capacity = MEMORY_SIZE - PROGRAM_START
    if len(program) > capacity:
        raise ProgramTooLargeError(len(program), capacity)
    program_array = jnp.array(list(program), dtype=jnp.uint8)
    new_memory = state.memory.at[PROGRAM_START:PROGRAM_START + len(program)].set(program_array)
    return state.replace(memory=new_memory)


def raise_for_fault(state: EmulatorState) -> None:
    """Raise the exception matching the fault recorded in ``state``, if any."""
    fault = int(state.fault)
    if fault == FAULT_NONE:
        return

    instruction = int(state.fault_instruction)
    pc = int(state.fault_pc)
    if fault == FAULT_DECODE:
        raise DecodeError(instruction, pc)
    if fault == FAULT_STACK_UNDERFLOW:
        raise StackUnderflowError(pc, instruction)
    if fault == FAULT_STACK_OVERFLOW:
        raise StackOverflowError(pc, instruction)
    raise ValueError(f"Unknown fault code {fault}")
