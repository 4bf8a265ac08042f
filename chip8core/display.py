"""CHIP-8 display buffer: a 64x32 monochrome bitmap drawn with XOR.

The buffer is a boolean array indexed ``[x, y]``. All coordinates wrap
around the screen edges, so no drawing operation can fail.
"""

import jax.numpy as jnp

from chip8core.constants import SCREEN_WIDTH, SCREEN_HEIGHT, SPRITE_WIDTH

# Pre-computed coordinate grids for sprite masks
xx, yy = jnp.meshgrid(jnp.arange(SCREEN_WIDTH), jnp.arange(SCREEN_HEIGHT), indexing='ij')


def create_display() -> jnp.ndarray:
    """Create an all-unlit display."""
    return jnp.zeros((SCREEN_WIDTH, SCREEN_HEIGHT), dtype=jnp.bool_)


def _wrap(x, y) -> tuple[jnp.ndarray, jnp.ndarray]:
    return jnp.asarray(x, jnp.int32) % SCREEN_WIDTH, jnp.asarray(y, jnp.int32) % SCREEN_HEIGHT


def toggle(display: jnp.ndarray, x, y) -> tuple[jnp.ndarray, jnp.ndarray]:
    """XOR the pixel at the wrapped coordinate.

    Returns:
        Tuple of (new display, new pixel value). A False result means a lit
        pixel was switched off, which the caller reports as a collision.
    """
    wx, wy = _wrap(x, y)
    lit = ~display[wx, wy]
    return display.at[wx, wy].set(lit), lit


def is_lit(display: jnp.ndarray, x, y) -> jnp.ndarray:
    """Read the pixel at the wrapped coordinate."""
    wx, wy = _wrap(x, y)
    return display[wx, wy]


def clear(display: jnp.ndarray) -> jnp.ndarray:
    """Switch every pixel off."""
    return jnp.zeros_like(display)


def sprite_mask(rows: jnp.ndarray, x, y, height) -> jnp.ndarray:
    """Expand sprite rows into a full-screen mask of the pixels to toggle.

    Args:
        rows: Up to 15 sprite bytes, most significant bit leftmost
        x: Left column of the sprite (wrapped)
        y: Top row of the sprite (wrapped)
        height: Number of rows of ``rows`` that take part in the draw

    Returns:
        Boolean array of display shape, True where a set sprite bit lands
    """
    sprite_x, sprite_y = _wrap(x, y)

    # Offsets from the sprite origin, taken around the torus
    col_offset = (xx - sprite_x) % SCREEN_WIDTH
    row_offset = (yy - sprite_y) % SCREEN_HEIGHT
    covered = (col_offset < SPRITE_WIDTH) & (row_offset < height)

    row_bytes = rows[jnp.clip(row_offset, 0, rows.shape[0] - 1)]
    bits = (row_bytes >> (SPRITE_WIDTH - 1 - jnp.clip(col_offset, 0, SPRITE_WIDTH - 1))) & 1
    return covered & (bits == 1)


def blit(display: jnp.ndarray, mask: jnp.ndarray) -> tuple[jnp.ndarray, jnp.ndarray]:
    """Toggle every pixel selected by ``mask``.

    Returns:
        Tuple of (new display, collision) where collision is True when at
        least one lit pixel was switched off.
    """
    collision = jnp.any(display & mask)
    return display ^ mask, collision
