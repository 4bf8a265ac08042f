"""CHIP-8 hexadecimal keypad state."""

import jax.numpy as jnp

from chip8core.constants import NUM_KEYS


def create_keypad() -> jnp.ndarray:
    """Create a keypad with every key released."""
    return jnp.zeros(NUM_KEYS, dtype=jnp.bool_)


def is_valid_key(key) -> jnp.ndarray:
    key = jnp.asarray(key, jnp.int32)
    return (key >= 0) & (key < NUM_KEYS)


def _set(keypad: jnp.ndarray, key, value: bool) -> jnp.ndarray:
    valid = is_valid_key(key)
    index = jnp.where(valid, jnp.asarray(key, jnp.int32), 0)
    return keypad.at[index].set(jnp.where(valid, value, keypad[index]))


def press(keypad: jnp.ndarray, key) -> jnp.ndarray:
    """Mark ``key`` as pressed. Keys outside 0x0-0xF are ignored."""
    return _set(keypad, key, True)


def release(keypad: jnp.ndarray, key) -> jnp.ndarray:
    """Mark ``key`` as released. Keys outside 0x0-0xF are ignored."""
    return _set(keypad, key, False)


def is_pressed(keypad: jnp.ndarray, key) -> jnp.ndarray:
    """Whether ``key`` is held. Unknown keys read as released."""
    valid = is_valid_key(key)
    index = jnp.where(valid, jnp.asarray(key, jnp.int32), 0)
    return valid & keypad[index]
