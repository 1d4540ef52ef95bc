"""Pixel grid operations: sprite drawing, scrolling and collision detection.

All functions are pure and return a new :class:`DisplayState`. Coordinates
passed in are logical: 0-63 x 0-31 in low resolution, 0-127 x 0-63 in high
resolution. The grid itself is always 128x64; low resolution draws each
logical pixel as a 2x2 block.
"""

import jax.numpy as jnp

from chip8x.constants import (
    SCREEN_WIDTH, SCREEN_HEIGHT, LORES_WIDTH, LORES_HEIGHT, SCROLL_STEP, MAX_SPRITE_ROWS,
)
from chip8x.state import DisplayState

# Pre-computed coordinate grids for display operations
xx, yy = jnp.meshgrid(jnp.arange(SCREEN_WIDTH), jnp.arange(SCREEN_HEIGHT), indexing='ij')
sprite_rows = jnp.arange(MAX_SPRITE_ROWS)


def resolution(display: DisplayState) -> tuple[jnp.ndarray, jnp.ndarray]:
    """Logical (width, height) of the active resolution."""
    width = jnp.where(display.hires, SCREEN_WIDTH, LORES_WIDTH)
    height = jnp.where(display.hires, SCREEN_HEIGHT, LORES_HEIGHT)
    return width, height


def clear(display: DisplayState) -> DisplayState:
    """Set every pixel to 0."""
    return display.replace(pixels=jnp.zeros_like(display.pixels))


def set_hires(display: DisplayState, enabled) -> DisplayState:
    """Select the addressing mode. The grid is left as is."""
    return display.replace(hires=jnp.asarray(enabled, dtype=jnp.bool_))


def _pad_rows(rows) -> jnp.ndarray:
    rows = jnp.asarray(rows, dtype=jnp.uint16)
    return jnp.pad(rows, (0, MAX_SPRITE_ROWS - rows.shape[0]))


def blit(display: DisplayState, x, y, rows, width, height) -> tuple[DisplayState, jnp.ndarray, jnp.ndarray]:
    """XOR a sprite onto the grid.

    The sprite origin is taken modulo the active resolution. Pixels past the
    edges wrap when ``display.wraparound`` is set and are dropped otherwise.

    Args:
        display: Current display
        x: Logical x coordinate of the top-left corner
        y: Logical y coordinate of the top-left corner
        rows: Up to 16 sprite rows, most significant bit leftmost
        width: Bits per row used (8 or 16)
        height: Number of rows drawn

    Returns:
        (display, hits, clipped): boolean masks over the 16 sprite rows telling
        which rows erased a lit pixel and which rows fell off the bottom edge
        with at least one bit set. ``clipped`` is all False when wrapping.
    """
    rows = _pad_rows(rows)
    res_width, res_height = resolution(display)
    scale = jnp.where(display.hires, 1, 2)

    origin_x = jnp.astype(x, jnp.int32) % res_width
    origin_y = jnp.astype(y, jnp.int32) % res_height

    col = xx // scale - origin_x
    row = yy // scale - origin_y
    if display.wraparound:
        col = col % res_width
        row = row % res_height

    in_sprite = (col >= 0) & (col < width) & (row >= 0) & (row < height)
    row_index = jnp.clip(row, 0, MAX_SPRITE_ROWS - 1)
    bit_index = jnp.clip(width - 1 - col, 0, 15)
    bits = (jnp.astype(rows[row_index], jnp.int32) >> bit_index) & 1
    sprite = in_sprite & (bits == 1)

    erased = display.pixels & sprite
    hits = jnp.zeros(MAX_SPRITE_ROWS, dtype=jnp.int32).at[row_index].max(jnp.astype(erased, jnp.int32)) > 0

    if display.wraparound:
        clipped = jnp.zeros(MAX_SPRITE_ROWS, dtype=jnp.bool_)
    else:
        clipped = (origin_y + sprite_rows >= res_height) & (sprite_rows < height) & (rows != 0)

    return display.replace(pixels=display.pixels ^ sprite), hits, clipped


def draw_sprite_lores(display: DisplayState, x, y, height, sprite) -> tuple[DisplayState, jnp.ndarray]:
    """Draw an 8-pixel wide sprite of ``height`` rows (at most 15).

    Returns:
        (display, collided) where collided is True if any lit pixel was erased
    """
    display, hits, _ = blit(display, x, y, sprite, 8, height)
    return display, jnp.any(hits)


def draw_sprite_hires(display: DisplayState, x, y, rows) -> tuple[DisplayState, jnp.ndarray]:
    """Draw a 16x16 sprite from sixteen 16-bit rows (SCHIP 1.1 big sprite).

    Returns:
        (display, rows_collided): number of rows that erased a lit pixel or
        were clipped at the bottom edge
    """
    display, hits, clipped = blit(display, x, y, rows, 16, MAX_SPRITE_ROWS)
    return display, jnp.sum(hits | clipped)


def scroll_horizontal(display: DisplayState, right: bool) -> DisplayState:
    """Shift the grid 4 pixels sideways (2 logical pixels in low resolution)."""
    shift = SCROLL_STEP if right else -SCROLL_STEP
    pixels = jnp.roll(display.pixels, shift, axis=0)
    vacated = xx < SCROLL_STEP if right else xx >= SCREEN_WIDTH - SCROLL_STEP
    return display.replace(pixels=pixels & ~vacated)


def scroll_vertical(display: DisplayState, count, up: bool = False) -> DisplayState:
    """Shift the grid ``count`` rows, rounded down to even in low resolution."""
    count = jnp.astype(count, jnp.int32)
    count = jnp.where(display.hires, count, count & ~1)
    pixels = jnp.roll(display.pixels, -count if up else count, axis=1)
    vacated = yy >= SCREEN_HEIGHT - count if up else yy < count
    return display.replace(pixels=pixels & ~vacated)
