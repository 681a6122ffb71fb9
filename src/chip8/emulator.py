"""
Main CHIP-8 Emulator class
Owns one machine, answers the CPU's requests for randomness, keys and
timer readings, and drives the window and audio.
"""
import logging
import time
from collections import deque

import numpy as np
import pygame

from .config import EmulatorConfig
from .cpu import CPU
from .decode import disassemble
from .memory import MAX_ROM_SIZE
from .signals import Signal, EmulationError
from .state import MachineState
from .timer import Timer

logger = logging.getLogger(__name__)

HISTORY_LENGTH = 64


class Chip8:
    def __init__(self, config=None, clock=time.monotonic):
        self.config = config or EmulatorConfig()
        self.state = MachineState()
        self.cpu = CPU(self.state, self.config.sprite_edge, debug=self.config.trace)

        self.delay_timer = Timer("delay timer", clock)
        self.sound_timer = Timer("sound timer", clock)
        self.rng = np.random.default_rng(self.config.seed)

        # Recent (pc, word) pairs, reported when emulation fails
        self.history = deque(maxlen=HISTORY_LENGTH)
        self.record_history = self.config.debug or self.config.trace

        self.waiting_for_key = False
        self.frame_dirty = True
        self.running = False
        self.frames = 0
        self.rom_name = "CHIP-8"

        self.screen = None
        self.beeper = None

    def load_rom(self, rom_path):
        """Load a ROM file. Returns True if it was truncated to fit."""
        try:
            with open(rom_path, 'rb') as f:
                rom_data = f.read()
        except FileNotFoundError:
            raise FileNotFoundError(f"ROM file not found: {rom_path}")

        self.rom_name = str(rom_path)
        return self.load_bytes(rom_data)

    def load_bytes(self, rom_data):
        truncated = self.state.initialize(rom_data)
        if truncated:
            logger.warning("ROM was truncated because it exceeded the maximum size of %d bytes (%d bytes given)",
                           MAX_ROM_SIZE, len(rom_data))
        logger.info("Loaded %s (%d bytes)", self.rom_name, min(len(rom_data), MAX_ROM_SIZE))

        self.cpu.suspended = None
        self.waiting_for_key = False
        self.frame_dirty = True
        self.history.clear()
        self.delay_timer.reset()
        self.sound_timer.reset()
        return truncated

    def step(self):
        """Execute one instruction and service its signal.

        Returns None without executing anything while waiting for a key.
        """
        if self.waiting_for_key:
            return None

        pc = self.state.pc
        word = self.cpu.current_word()
        if self.record_history and word is not None:
            self.history.append((pc, word))

        signal = self.cpu.step()
        self._service(signal, pc, word)
        return signal

    def _service(self, signal, pc, word):
        if signal == Signal.OK:
            return
        elif signal == Signal.DISPLAY_CHANGED:
            self.frame_dirty = True
        elif signal == Signal.NEEDS_RANDOM:
            self.cpu.supply_random(int(self.rng.integers(0, 256)))
        elif signal == Signal.NEEDS_DELAY:
            self.cpu.supply_delay(self.delay_timer.remaining())
        elif signal == Signal.NEEDS_KEY:
            self.waiting_for_key = True
        elif signal == Signal.DELAY_TIMER_WRITTEN:
            self.delay_timer.set(self.state.delay_value)
        elif signal == Signal.SOUND_TIMER_WRITTEN:
            self.sound_timer.set(self.state.sound_value)
            self._update_sound()
        elif signal.is_error:
            self._fail(signal, pc, word)

    def _fail(self, signal, pc, word):
        if word is None:
            logger.error("%s PC=0x%03X", signal.description, pc)
        else:
            logger.error("%s PC=0x%03X instruction=0x%04X (%s)", signal.description, pc, word, disassemble(word))
        logger.error("Registers: %s", self.state.register_dump())
        if self.history:
            logger.error("Last %d instructions:", len(self.history))
            for hist_pc, hist_word in self.history:
                logger.error("  %03X: %04X  %s", hist_pc, hist_word, disassemble(hist_word))
        if self.config.debug and self.state.memory.in_range(pc, 1):
            start = max(0, pc - 16)
            logger.debug("Memory around PC:\n%s", self.state.memory.dump(start, min(pc + 16, 0x1000)))
        self.running = False
        raise EmulationError(signal, pc, word)

    def key_down(self, key):
        self.state.press_key(key)
        if self.waiting_for_key:
            self.cpu.supply_key(key)
            self.waiting_for_key = False

    def key_up(self, key):
        self.state.release_key(key)

    def _update_sound(self):
        if self.beeper is not None:
            self.beeper.update(self.sound_timer.active())

    def run_frame(self):
        """Run one frame's worth of instructions. Returns the number executed."""
        executed = 0
        for _ in range(self.config.instructions_per_frame):
            if self.step() is None:
                break
            executed += 1
        self._update_sound()
        self.frames += 1
        return executed

    def open_window(self):
        from .display import Screen
        from .apu import Beeper

        self.screen = Screen(self.state.framebuffer, self.config.scale,
                             self.config.foreground, self.config.background, title=self.rom_name)
        if self.config.audio:
            self.beeper = Beeper(self.config.tone_hz, self.config.volume)

    def run(self):
        """Run the emulator main loop"""
        headless = self.config.headless
        if not headless and self.screen is None:
            self.open_window()

        clock = None if headless else pygame.time.Clock()
        self.running = True
        try:
            while self.running:
                if self.screen is not None and not self.screen.poll_events(self):
                    break

                self.run_frame()

                if self.screen is not None and self.frame_dirty:
                    self.screen.render()
                    self.frame_dirty = False

                if self.config.max_frames is not None and self.frames >= self.config.max_frames:
                    logger.info("Stopping after %d frames", self.frames)
                    break

                if clock is not None:
                    clock.tick(self.config.target_fps)
        except KeyboardInterrupt:
            logger.info("Emulation interrupted after %d frames", self.frames)
        finally:
            self.running = False
            self.shutdown()

    def stop(self):
        """Stop the emulator"""
        self.running = False

    def shutdown(self):
        if self.beeper is not None:
            self.beeper.close()
            self.beeper = None
        if self.screen is not None:
            self.screen.close()
            self.screen = None
        if not self.config.headless:
            pygame.quit()
