"""CHIP-8 processor state structures."""

import jax
import jax.numpy as jnp
from flax.struct import dataclass, PyTreeNode, field

from chip8core.constants import (
    PROGRAM_START, FONT_START, FONT_DATA, MEMORY_SIZE, NUM_REGISTERS, STACK_SIZE,
    INSTRUCTIONS_PER_CYCLE, FAULT_NONE,
)
from chip8core.display import create_display
from chip8core.keypad import create_keypad


@dataclass(frozen=True)
class StackState:
    """Stack state for subroutine calls."""
    data: jnp.ndarray = field(default_factory=lambda: jnp.zeros(STACK_SIZE, dtype=jnp.uint16))
    pointer: jnp.ndarray = field(default_factory=lambda: jnp.zeros((), dtype=jnp.int32))


@dataclass(frozen=True)
class PendingKey:
    """One-shot action run on the next key press.

    While ``active``, the next pressed key is written into ``V[register]``
    and the processor leaves the awaiting-key state.
    """
    active: jnp.ndarray = field(default_factory=lambda: jnp.zeros((), dtype=jnp.bool_))
    register: jnp.ndarray = field(default_factory=lambda: jnp.zeros((), dtype=jnp.uint8))


class EmulatorState(PyTreeNode):
    """Main CHIP-8 processor state."""
    rng: jax.random.PRNGKey
    memory: jnp.ndarray = field(default_factory=lambda: jnp.zeros(MEMORY_SIZE, dtype=jnp.uint8))
    pc: jnp.ndarray = field(default_factory=lambda: jnp.astype(PROGRAM_START, jnp.uint16))
    display: jnp.ndarray = field(default_factory=lambda: create_display())
    stack: StackState = StackState()
    delay_timer: jnp.ndarray = field(default_factory=lambda: jnp.zeros((), dtype=jnp.uint8))
    sound_timer: jnp.ndarray = field(default_factory=lambda: jnp.zeros((), dtype=jnp.uint8))
    keypad: jnp.ndarray = field(default_factory=lambda: create_keypad())
    V: jnp.ndarray = field(default_factory=lambda: jnp.zeros(NUM_REGISTERS, dtype=jnp.uint8))
    I: jnp.ndarray = field(default_factory=lambda: jnp.zeros((), dtype=jnp.uint16))
    paused: jnp.ndarray = field(default_factory=lambda: jnp.zeros((), dtype=jnp.bool_))
    pending_key: PendingKey = PendingKey()
    fault: jnp.ndarray = field(default_factory=lambda: jnp.astype(FAULT_NONE, jnp.uint8))
    fault_instruction: jnp.ndarray = field(default_factory=lambda: jnp.zeros((), dtype=jnp.uint16))
    fault_pc: jnp.ndarray = field(default_factory=lambda: jnp.zeros((), dtype=jnp.uint16))
    instructions_per_cycle: int = field(pytree_node=False, default=INSTRUCTIONS_PER_CYCLE)
    canonical_flags: bool = field(pytree_node=False, default=False)

    @property
    def halted(self) -> jnp.ndarray:
        """True while awaiting a key or after a fatal fault."""
        return self.paused | (self.fault != FAULT_NONE)


def create_state(
    rng: jax.random.PRNGKey = jax.random.PRNGKey(0),
    instructions_per_cycle: int = INSTRUCTIONS_PER_CYCLE,
    canonical_flags: bool = False,
    stack_size: int = STACK_SIZE,
) -> EmulatorState:
    """Create initial processor state with font data loaded.

    Args:
        rng: JAX random key consumed by the random instruction (CXNN)
        instructions_per_cycle: Instructions executed per ``run_cycle`` tick
        canonical_flags: Use the textbook VF rules for 8XY4 and 8XYE
        stack_size: Number of return addresses the call stack holds
    """
    if instructions_per_cycle < 1:
        raise ValueError(f"instructions_per_cycle must be positive, got {instructions_per_cycle}")
    if stack_size < 1:
        raise ValueError(f"stack_size must be positive, got {stack_size}")

    state = EmulatorState(
        rng,
        stack=StackState(data=jnp.zeros(stack_size, dtype=jnp.uint16)),
        instructions_per_cycle=instructions_per_cycle,
        canonical_flags=canonical_flags,
    )
    return state.replace(memory=state.memory.at[FONT_START:FONT_START + len(FONT_DATA)].set(FONT_DATA))
