"""Test configuration and fixtures for CHIP-8 core tests."""

import pytest
import jax.numpy as jnp
from chip8core import create_state, Session
from chip8core.logging import SessionLogger


@pytest.fixture
def fresh_state():
    """Provide a fresh processor state for each test."""
    return create_state()


@pytest.fixture
def canonical_state():
    """Provide a fresh state using the textbook VF rules."""
    return create_state(canonical_flags=True)


@pytest.fixture
def session():
    """Provide a quiet session with no program loaded."""
    return Session(logger=SessionLogger(log_level="CRITICAL", use_colors=False))


def setup_sprite_in_memory(state, address, sprite_bytes):
    """Helper to put sprite data in memory."""
    return state.replace(
        memory=state.memory.at[address:address+len(sprite_bytes)].set(
            jnp.array(sprite_bytes, dtype=jnp.uint8)
        )
    )


def with_registers(state, **registers):
    """Helper to set registers by name, e.g. ``with_registers(state, V1=0x10)``."""
    V = state.V
    for name, value in registers.items():
        V = V.at[int(name[1:], 16)].set(value)
    return state.replace(V=V)


def program(*words):
    """Assemble instruction words into a big-endian program image."""
    return b"".join(word.to_bytes(2, "big") for word in words)
