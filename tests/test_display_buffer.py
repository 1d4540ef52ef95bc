"""Tests for the pixel grid operations in chip8x.display."""

import jax.numpy as jnp
import pytest
from chip8x import display
from chip8x.state import create_display


def lit(buffer):
    return int(jnp.sum(buffer.pixels))


class TestClearAndMode:

    def test_clear(self):
        buffer = create_display()
        buffer, _ = display.draw_sprite_lores(buffer, 0, 0, 4, [0xFF] * 4)
        assert lit(buffer) > 0

        buffer = display.clear(buffer)

        assert lit(buffer) == 0
        assert buffer.pixels.dtype == jnp.bool_

    def test_set_hires_keeps_pixels(self):
        buffer, _ = display.draw_sprite_lores(create_display(), 0, 0, 1, [0x80])

        buffer = display.set_hires(buffer, True)

        assert bool(buffer.hires)
        assert lit(buffer) == 4

    def test_resolution(self):
        lores = create_display()
        hires = display.set_hires(lores, True)
        assert tuple(int(v) for v in display.resolution(lores)) == (64, 32)
        assert tuple(int(v) for v in display.resolution(hires)) == (128, 64)


class TestLoresSprites:

    def test_collision_flag(self):
        buffer, collided = display.draw_sprite_lores(create_display(), 5, 5, 1, [0x81])
        assert not bool(collided)

        buffer, collided = display.draw_sprite_lores(buffer, 12, 5, 1, [0x80])
        assert bool(collided)
        assert lit(buffer) == 4

    def test_clipping_never_indexes_out_of_bounds(self):
        buffer, collided = display.draw_sprite_lores(create_display(), 63, 31, 15, [0xFF] * 15)
        assert lit(buffer) == 4
        assert not bool(collided)

    def test_wraparound(self):
        buffer = create_display(wraparound=True)
        buffer, _ = display.draw_sprite_lores(buffer, 63, 31, 2, [0xC0, 0xC0])

        for x, y in [(63, 31), (0, 31), (63, 0), (0, 0)]:
            assert bool(buffer.pixels[2 * x, 2 * y])
        assert lit(buffer) == 16

    def test_pixels_stay_binary(self):
        buffer = create_display()
        for _ in range(3):
            buffer, _ = display.draw_sprite_lores(buffer, 1, 1, 3, [0xAA, 0x55, 0xFF])
        assert set(jnp.unique(buffer.pixels.astype(jnp.uint8)).tolist()) <= {0, 1}


class TestHiresSprites:

    def test_big_sprite_reports_row_count(self):
        buffer = display.set_hires(create_display(), True)
        rows = [0xFFFF] * 16

        buffer, count = display.draw_sprite_hires(buffer, 0, 0, rows)
        assert int(count) == 0
        assert lit(buffer) == 256

        buffer, count = display.draw_sprite_hires(buffer, 8, 8, rows)
        assert int(count) == 8

    def test_big_sprite_clipped_rows(self):
        buffer = display.set_hires(create_display(), True)
        rows = [0x8000] * 8 + [0] * 8

        buffer, count = display.draw_sprite_hires(buffer, 0, 60, rows)

        # rows 4-7 fall off the bottom; empty rows are not counted
        assert int(count) == 4
        assert lit(buffer) == 4

    def test_big_sprite_right_edge_clipped(self):
        buffer = display.set_hires(create_display(), True)
        buffer, _ = display.draw_sprite_hires(buffer, 120, 0, [0xFFFF] + [0] * 15)
        assert lit(buffer) == 8


class TestScrolling:

    def _column(self, x):
        buffer = display.set_hires(create_display(), True)
        buffer, _, _ = display.blit(buffer, x, 0, [0x80] * 16, 8, 16)
        return buffer

    def test_scroll_right(self):
        buffer = self._column(10)

        buffer = display.scroll_horizontal(buffer, right=True)

        assert bool(buffer.pixels[14, 0])
        assert not bool(buffer.pixels[10, 0])
        assert lit(buffer) == 16

    def test_scroll_left_drops_pixels(self):
        buffer = self._column(2)

        buffer = display.scroll_horizontal(buffer, right=False)

        assert lit(buffer) == 0

    def test_scroll_right_fills_with_zeros(self):
        buffer = self._column(126)

        buffer = display.scroll_horizontal(buffer, right=True)

        assert lit(buffer) == 0

    def test_scroll_down(self):
        buffer = display.set_hires(create_display(), True)
        buffer, _ = display.draw_sprite_lores(buffer, 0, 62, 1, [0x80])
        buffer, _ = display.draw_sprite_lores(buffer, 0, 0, 1, [0x80])

        buffer = display.scroll_vertical(buffer, 3)

        assert bool(buffer.pixels[0, 3])
        assert not bool(buffer.pixels[0, 0])
        assert lit(buffer) == 1

    def test_scroll_down_lores_rounds_to_even(self):
        buffer, _ = display.draw_sprite_lores(create_display(), 0, 0, 1, [0x80])

        buffer = display.scroll_vertical(buffer, 3)

        # 3 physical rows rounds down to 2, one low-resolution row
        assert bool(buffer.pixels[0, 2]) and bool(buffer.pixels[0, 3])
        assert not bool(buffer.pixels[0, 1])

    def test_scroll_up(self):
        buffer = display.set_hires(create_display(), True)
        buffer, _ = display.draw_sprite_lores(buffer, 5, 10, 1, [0x80])

        buffer = display.scroll_vertical(buffer, 4, up=True)

        assert bool(buffer.pixels[5, 6])
        assert lit(buffer) == 1
