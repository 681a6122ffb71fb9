"""
Host session tests, run headless
"""
import logging

import pytest

from chip8.config import EmulatorConfig
from chip8.emulator import Chip8
from chip8.memory import MAX_ROM_SIZE, PROGRAM_START
from chip8.signals import Signal, EmulationError
from conftest import assemble


@pytest.fixture
def make_chip8(clock):
    def _make(*words, **options):
        options.setdefault("headless", True)
        chip8 = Chip8(EmulatorConfig(**options), clock=clock)
        chip8.load_bytes(assemble(*words))
        return chip8
    return _make


class TestLoading:
    def test_load_rom_from_file(self, tmp_path, clock):
        rom = tmp_path / "test.ch8"
        rom.write_bytes(assemble(0x6001, 0x1202))
        chip8 = Chip8(EmulatorConfig(headless=True), clock=clock)
        assert chip8.load_rom(rom) is False
        assert chip8.rom_name == str(rom)
        assert chip8.state.memory.read_word(PROGRAM_START) == 0x6001

    def test_missing_rom(self, tmp_path):
        chip8 = Chip8(EmulatorConfig(headless=True))
        with pytest.raises(FileNotFoundError):
            chip8.load_rom(tmp_path / "missing.ch8")

    def test_oversized_rom_is_truncated_with_warning(self, caplog):
        chip8 = Chip8(EmulatorConfig(headless=True))
        with caplog.at_level(logging.WARNING):
            assert chip8.load_bytes(bytes(MAX_ROM_SIZE + 1)) is True
        assert "truncated" in caplog.text

    def test_reload_clears_pending_key_wait(self, make_chip8):
        chip8 = make_chip8(0xF00A)
        chip8.step()
        assert chip8.waiting_for_key
        chip8.load_bytes(assemble(0x6001))
        assert not chip8.waiting_for_key
        assert chip8.cpu.ready
        assert chip8.step() == Signal.OK


class TestServicing:
    def test_random_is_seeded(self, make_chip8):
        values = []
        for _ in range(2):
            chip8 = make_chip8(0xC0FF, seed=1234)
            assert chip8.step() == Signal.NEEDS_RANDOM
            assert chip8.cpu.ready
            assert chip8.state.pc == 0x202
            values.append(chip8.state.registers[0])
        assert values[0] == values[1]

    def test_random_is_masked(self, make_chip8):
        chip8 = make_chip8(*([0xC30F] * 20), seed=99)
        for _ in range(20):
            chip8.step()
            assert chip8.state.registers[3] <= 0x0F

    def test_delay_timer_counts_down_with_clock(self, make_chip8, clock):
        chip8 = make_chip8(0x603C, 0xF015, 0xF107)
        chip8.step()
        assert chip8.step() == Signal.DELAY_TIMER_WRITTEN
        clock.advance(0.5)
        assert chip8.step() == Signal.NEEDS_DELAY
        assert chip8.state.registers[1] == 30

    def test_sound_timer_write(self, make_chip8):
        chip8 = make_chip8(0x6005, 0xF018)
        chip8.step()
        assert chip8.step() == Signal.SOUND_TIMER_WRITTEN
        assert chip8.sound_timer.remaining() == 5

    def test_key_wait_blocks_until_key_down(self, make_chip8):
        chip8 = make_chip8(0xF20A, 0x7201)
        assert chip8.step() == Signal.NEEDS_KEY
        assert chip8.step() is None
        assert chip8.state.pc == 0x200

        chip8.key_down(7)
        assert not chip8.waiting_for_key
        assert chip8.state.registers[2] == 7
        assert chip8.state.is_key_pressed(7)
        assert chip8.step() == Signal.OK
        assert chip8.state.registers[2] == 8

        chip8.key_up(7)
        assert not chip8.state.is_key_pressed(7)

    def test_key_down_without_wait_only_sets_state(self, make_chip8):
        chip8 = make_chip8(0x6001)
        chip8.key_down(0xA)
        assert chip8.state.is_key_pressed(0xA)
        assert chip8.cpu.ready

    def test_draw_marks_frame_dirty(self, make_chip8):
        chip8 = make_chip8(0xD015)
        chip8.frame_dirty = False
        assert chip8.step() == Signal.DISPLAY_CHANGED
        assert chip8.frame_dirty


class TestErrors:
    def test_invalid_instruction_raises(self, make_chip8):
        chip8 = make_chip8(0x6001, 0x0123)
        chip8.step()
        with pytest.raises(EmulationError) as exc_info:
            chip8.step()
        error = exc_info.value
        assert error.signal == Signal.INVALID_INSTRUCTION
        assert error.pc == 0x202
        assert error.word == 0x0123
        assert "0x0123" in str(error)
        assert not chip8.running

    def test_fetch_out_of_bounds_has_no_word(self, make_chip8):
        chip8 = make_chip8(0x1FFF)
        chip8.step()
        with pytest.raises(EmulationError) as exc_info:
            chip8.step()
        assert exc_info.value.signal == Signal.FETCH_OUT_OF_BOUNDS
        assert exc_info.value.word is None

    def test_history_is_reported(self, make_chip8, caplog):
        chip8 = make_chip8(0x6001, 0x7001, 0x00EE, debug=True)
        with caplog.at_level(logging.ERROR):
            with pytest.raises(EmulationError):
                for _ in range(3):
                    chip8.step()
        assert list(chip8.history) == [(0x200, 0x6001), (0x202, 0x7001), (0x204, 0x00EE)]
        assert Signal.STACK_UNDERFLOW.description in caplog.text
        assert "LD V0, 0x01" in caplog.text

    def test_history_off_by_default(self, make_chip8):
        chip8 = make_chip8(0x6001)
        chip8.step()
        assert len(chip8.history) == 0


class TestRunLoop:
    def test_run_frame_executes_a_batch(self, make_chip8):
        chip8 = make_chip8(0x7001, 0x1200, instructions_per_frame=6)
        assert chip8.run_frame() == 6
        assert chip8.state.registers[0] == 3
        assert chip8.frames == 1

    def test_run_frame_stops_at_key_wait(self, make_chip8):
        chip8 = make_chip8(0x7001, 0xF00A, 0x1200)
        assert chip8.run_frame() == 2
        assert chip8.run_frame() == 0

    def test_headless_run_honours_max_frames(self, make_chip8):
        chip8 = make_chip8(0x1200, max_frames=3)
        chip8.run()
        assert chip8.frames == 3
        assert not chip8.running

    def test_run_propagates_emulation_errors(self, make_chip8):
        chip8 = make_chip8(0x00EE, max_frames=3)
        with pytest.raises(EmulationError):
            chip8.run()
        assert not chip8.running
