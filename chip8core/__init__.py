"""CHIP-8 virtual machine core."""

from chip8core.state import EmulatorState, StackState, PendingKey, create_state
from chip8core.emulator import (
    execute, fetch, step, run_cycle, run_frames, update_timers,
    press_key, release_key, load_program, raise_for_fault,
)
from chip8core.decode import DecodedInstruction, decode
from chip8core.errors import (
    Chip8Error, DecodeError, StackUnderflowError, StackOverflowError, ProgramTooLargeError,
)
from chip8core.session import Session
from chip8core.constants import *

__all__ = [
    "EmulatorState",
    "StackState",
    "PendingKey",
    "create_state",
    "fetch",
    "execute",
    "step",
    "run_cycle",
    "run_frames",
    "update_timers",
    "press_key",
    "release_key",
    "load_program",
    "raise_for_fault",
    "DecodedInstruction",
    "decode",
    "Chip8Error",
    "DecodeError",
    "StackUnderflowError",
    "StackOverflowError",
    "ProgramTooLargeError",
    "Session",
    "PROGRAM_START",
    "FONT_START",
    "SCREEN_WIDTH",
    "SCREEN_HEIGHT",
]
