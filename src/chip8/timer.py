"""
CHIP-8 Timers
The delay and sound timers count down at 60 Hz. The CPU only records the
value a program writes; the host keeps the clock and derives the remaining
ticks from the time elapsed since the write.
"""
import logging
import time

import cython

logger = logging.getLogger(__name__)

TICK_RATE = 60  # Hz


class Timer:
    def __init__(self, name="timer", clock=time.monotonic):
        self.name = name
        self.clock = clock

        self.value: cython.int = 0
        self.set_at: cython.double = clock()

    def set(self, value: cython.int) -> None:
        """Load the timer; it starts counting down immediately"""
        self.value = value & 0xFF
        self.set_at = self.clock()
        logger.debug("%s set to %d", self.name, self.value)

    def elapsed_ticks(self) -> cython.int:
        return round((self.clock() - self.set_at) * TICK_RATE)

    def remaining(self) -> cython.int:
        """Ticks left before the timer reaches zero, clamped to 0-255"""
        ticks = self.value - self.elapsed_ticks()
        if ticks < 0:
            return 0
        return min(ticks, 0xFF)

    def active(self):
        return self.remaining() > 0

    def reset(self):
        self.value = 0
        self.set_at = self.clock()
