"""
Sprite drawing and collision tests
"""
import numpy as np
import pytest

from chip8.framebuffer import Framebuffer, SpriteEdge
from chip8.signals import Signal
from conftest import assemble


@pytest.fixture
def fb():
    return Framebuffer()


class TestFramebuffer:
    def test_starts_blank(self, fb):
        assert fb.pixels.shape == (32, 64)
        assert fb.is_blank()

    def test_draw_row_msb_first(self, fb):
        assert fb.draw_sprite([0b10100000], 2, 3) is False
        assert fb.get_pixel(2, 3)
        assert not fb.get_pixel(3, 3)
        assert fb.get_pixel(4, 3)
        assert fb.lit_count() == 2

    def test_draw_twice_erases_and_collides(self, fb):
        assert fb.draw_sprite([0xFF], 10, 10) is False
        assert fb.lit_count() == 8
        assert fb.draw_sprite([0xFF], 10, 10) is True
        assert fb.is_blank()

    def test_partial_overlap(self, fb):
        fb.draw_sprite([0xF0], 0, 0)
        assert fb.draw_sprite([0x0F], 0, 0) is False
        assert fb.lit_count() == 8
        assert fb.draw_sprite([0x80], 0, 0) is True
        assert fb.lit_count() == 7

    def test_clip_drops_pixels_past_edges(self, fb):
        fb.draw_sprite([0xFF, 0xFF], 60, 31, SpriteEdge.CLIP)
        assert fb.lit_count() == 4
        assert fb.pixels[31, 60:64].all()
        assert not fb.pixels[0].any()
        assert not fb.pixels[:, 0:4].any()

    def test_clip_entirely_off_screen(self, fb):
        assert fb.draw_sprite([0xFF], 64, 0, SpriteEdge.CLIP) is False
        assert fb.draw_sprite([0xFF], 0, 32, SpriteEdge.CLIP) is False
        assert fb.is_blank()

    def test_wrap_draws_on_opposite_edges(self, fb):
        fb.draw_sprite([0xFF, 0xFF], 60, 31, SpriteEdge.WRAP)
        assert fb.lit_count() == 16
        assert fb.pixels[31, 60:64].all()
        assert fb.pixels[31, 0:4].all()
        assert fb.pixels[0, 60:64].all()
        assert fb.pixels[0, 0:4].all()

    def test_wrap_start_coordinates(self, fb):
        fb.draw_sprite([0x80], 64 + 5, 32 + 2, SpriteEdge.WRAP)
        assert fb.get_pixel(5, 2)

    def test_empty_sprite(self, fb):
        assert fb.draw_sprite([], 0, 0) is False
        assert fb.is_blank()

    def test_clear(self, fb):
        fb.draw_sprite([0xFF] * 5, 0, 0)
        fb.clear()
        assert fb.is_blank()

    def test_to_text(self, fb):
        fb.draw_sprite([0xC0], 0, 0)
        assert fb.to_text().splitlines()[0].startswith("##..")


class TestDrawInstruction:
    def test_draw_font_glyph(self, load):
        # V0 = 0, I = glyph for 0, draw 5 rows at (V1, V2)
        cpu = load(0xF029, 0x6108, 0x6204, 0xD125)
        for _ in range(3):
            cpu.step()
        assert cpu.step() == Signal.DISPLAY_CHANGED
        pixels = cpu.state.framebuffer.pixels
        assert list(pixels[4, 8:12]) == [1, 1, 1, 1]
        assert list(pixels[5, 8:12]) == [1, 0, 0, 1]
        assert cpu.state.registers[0xF] == 0
        assert cpu.state.pc == 0x208

    def test_collision_flag_on_second_draw(self, load):
        cpu = load(0xA20A, 0xD011, 0xD011, 0x0000, 0x0000, 0xFF00)
        cpu.step()
        cpu.step()
        assert cpu.state.registers[0xF] == 0
        assert cpu.state.framebuffer.lit_count() == 8
        cpu.step()
        assert cpu.state.registers[0xF] == 1
        assert cpu.state.framebuffer.is_blank()

    def test_draw_clears_stale_flag(self, load):
        cpu = load(0xD011)
        cpu.state.registers[0xF] = 1
        cpu.step()
        assert cpu.state.registers[0xF] == 0

    def test_sprite_read_out_of_bounds(self, load):
        cpu = load(0xAFFE, 0xD013)
        cpu.state.registers[0xF] = 1
        cpu.step()
        assert cpu.step() == Signal.SPRITE_OUT_OF_BOUNDS
        assert cpu.state.framebuffer.is_blank()
        assert cpu.state.registers[0xF] == 1
        assert cpu.state.pc == 0x202

    def test_sprite_ending_on_last_byte(self, load):
        cpu = load(0xAFFE, 0xD012)
        cpu.state.memory.write_byte(0xFFE, 0xFF)
        cpu.state.memory.write_byte(0xFFF, 0xFF)
        cpu.step()
        assert cpu.step() == Signal.DISPLAY_CHANGED
        assert cpu.state.framebuffer.lit_count() == 16

    def test_edge_mode_is_per_cpu(self, state, cpu, wrap_cpu):
        program = [0xA000, 0x603E, 0xD015]  # glyph 0 at x=62, half off screen
        for engine, expected in ((cpu, 7), (wrap_cpu, 14)):
            state.initialize(assemble(*program))
            for _ in range(3):
                engine.step()
            assert state.framebuffer.lit_count() == expected

    def test_clear_screen(self, load):
        cpu = load(0x00E0)
        cpu.state.framebuffer.pixels[:] = 1
        assert cpu.step() == Signal.DISPLAY_CHANGED
        assert not np.any(cpu.state.framebuffer.pixels)
        assert cpu.state.pc == 0x202
