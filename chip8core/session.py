"""Host-facing CHIP-8 session.

The processor functions in :mod:`chip8core.emulator` are pure and jittable.
A :class:`Session` owns one evolving :class:`EmulatorState` on behalf of an
external driver (window, event loop, audio) and exposes only what that driver
needs: load a program, run one cycle per tick, forward key events and read
the display and sound signal back between cycles.
"""

from typing import Optional

import jax
import numpy as np

from chip8core.constants import INSTRUCTIONS_PER_CYCLE, NUM_KEYS, STACK_SIZE
from chip8core.display import is_lit
from chip8core.emulator import load_program, run_cycle, press_key, release_key, raise_for_fault
from chip8core.errors import Chip8Error
from chip8core.logging import SessionLogger
from chip8core.state import EmulatorState, create_state


class Session:
    """One emulation session.

    The call stack has a fixed capacity of ``stack_size`` return addresses and
    a call beyond it is fatal. Programs that recurse deeply may need a larger
    ``stack_size`` than the default 16.

    Example:
        >>> session = Session()
        >>> session.load_program(rom_bytes)
        >>> while running:
        ...     session.run_cycle()
        ...     frame = session.display
    """

    def __init__(
        self,
        rng: Optional[jax.random.PRNGKey] = None,
        instructions_per_cycle: int = INSTRUCTIONS_PER_CYCLE,
        canonical_flags: bool = False,
        stack_size: int = STACK_SIZE,
        logger: Optional[SessionLogger] = None,
    ):
        """Create a session with font data loaded and no program.

        Args:
            rng: JAX random key for the random instruction (defaults to key 0)
            instructions_per_cycle: Instructions executed per ``run_cycle``
            canonical_flags: Use the textbook VF rules for 8XY4 and 8XYE
            stack_size: Call stack capacity; raise it for deeply nested programs
            logger: Logger for session events
        """
        self.rng = rng if rng is not None else jax.random.PRNGKey(0)
        self.instructions_per_cycle = instructions_per_cycle
        self.canonical_flags = canonical_flags
        self.stack_size = stack_size
        self.logger = logger or SessionLogger()

        self.program = b""
        self.cycles = 0
        self.state = self._fresh_state()

    def _fresh_state(self) -> EmulatorState:
        return create_state(
            self.rng,
            instructions_per_cycle=self.instructions_per_cycle,
            canonical_flags=self.canonical_flags,
            stack_size=self.stack_size,
        )

    def load_program(self, program: bytes):
        """Load a raw program image at 0x200 into a fresh processor."""
        program = bytes(program)
        self.state = load_program(self._fresh_state(), program)
        self.program = program
        self.cycles = 0
        self.logger.log_program_loaded(len(program), self.instructions_per_cycle, self.canonical_flags)

    def reset(self):
        """Restart the last loaded program from a fresh processor."""
        self.load_program(self.program)

    def run_cycle(self):
        """Advance one external tick.

        Raises:
            Chip8Error: The emulated program hit a fatal condition (unknown
                instruction, stack underflow or overflow)
        """
        was_paused = self.paused
        self.state = run_cycle(self.state)
        self.cycles += 1

        try:
            raise_for_fault(self.state)
        except Chip8Error as error:
            self.logger.log_fault(error, self.cycles)
            raise

        if self.paused and not was_paused:
            self.logger.log_await_key(int(self.state.pending_key.register))

    def press(self, key: int):
        """Forward a key press in the 0x0-0xF key space."""
        if not 0 <= key < NUM_KEYS:
            self.logger.log_rejected_key(key)
            return

        awaiting = bool(self.state.pending_key.active)
        register = int(self.state.pending_key.register)
        self.state = press_key(self.state, key)
        self.logger.log_key_event(key, pressed=True)
        if awaiting:
            self.logger.log_key_resolved(register, key)

    def release(self, key: int):
        """Forward a key release in the 0x0-0xF key space."""
        if not 0 <= key < NUM_KEYS:
            self.logger.log_rejected_key(key)
            return

        self.state = release_key(self.state, key)
        self.logger.log_key_event(key, pressed=False)

    @property
    def display(self) -> np.ndarray:
        """Read-only copy of the display as a (64, 32) bool array indexed [x, y]."""
        pixels = np.array(self.state.display, dtype=np.bool_)
        pixels.flags.writeable = False
        return pixels

    def is_lit(self, x: int, y: int) -> bool:
        return bool(is_lit(self.state.display, x, y))

    @property
    def paused(self) -> bool:
        """True while the processor waits for a key press."""
        return bool(self.state.paused)

    @property
    def sound_active(self) -> bool:
        """True while the sound timer is running; the host plays a tone."""
        return int(self.state.sound_timer) > 0

    @property
    def registers(self) -> list[int]:
        return [int(v) for v in self.state.V]

    @property
    def pc(self) -> int:
        return int(self.state.pc)

    @property
    def index(self) -> int:
        return int(self.state.I)
