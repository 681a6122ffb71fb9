"""
CHIP-8 step results
Every call into the engine reports what happened as a Signal value.
Error conditions and suspensions are values too, so the host decides policy.
"""
from enum import IntEnum


class Signal(IntEnum):
    OK = 0
    DISPLAY_CHANGED = 1
    DELAY_TIMER_WRITTEN = 2
    SOUND_TIMER_WRITTEN = 3

    # Deferred completion: the host must supply a value before the next step
    NEEDS_RANDOM = 10
    NEEDS_KEY = 11
    NEEDS_DELAY = 12

    # Errors: machine state is left exactly as it was before the step
    INVALID_INSTRUCTION = 20
    FETCH_OUT_OF_BOUNDS = 21
    STACK_UNDERFLOW = 22
    STACK_OVERFLOW = 23
    SPRITE_OUT_OF_BOUNDS = 24
    BCD_OUT_OF_BOUNDS = 25
    REGISTER_DUMP_OUT_OF_BOUNDS = 26
    REGISTER_LOAD_OUT_OF_BOUNDS = 27
    BAD_KEY_INDEX = 28
    BAD_FONT_DIGIT = 29

    @property
    def is_error(self):
        return self >= Signal.INVALID_INSTRUCTION

    @property
    def is_suspension(self):
        return Signal.NEEDS_RANDOM <= self <= Signal.NEEDS_DELAY

    @property
    def is_memory_error(self):
        return self in _MEMORY_ERRORS

    @property
    def description(self):
        return _DESCRIPTIONS[self]


_MEMORY_ERRORS = frozenset({
    Signal.FETCH_OUT_OF_BOUNDS,
    Signal.SPRITE_OUT_OF_BOUNDS,
    Signal.BCD_OUT_OF_BOUNDS,
    Signal.REGISTER_DUMP_OUT_OF_BOUNDS,
    Signal.REGISTER_LOAD_OUT_OF_BOUNDS,
})

_DESCRIPTIONS = {
    Signal.OK: "Instruction completed.",
    Signal.DISPLAY_CHANGED: "The framebuffer was cleared or drawn to.",
    Signal.DELAY_TIMER_WRITTEN: "The delay timer has been written to.",
    Signal.SOUND_TIMER_WRITTEN: "The sound timer has been written to.",
    Signal.NEEDS_RANDOM: "A random byte is needed to complete the current instruction.",
    Signal.NEEDS_KEY: "Waiting for a key press.",
    Signal.NEEDS_DELAY: "The delay timer must be read to complete the current instruction.",
    Signal.INVALID_INSTRUCTION: "Invalid instruction.",
    Signal.FETCH_OUT_OF_BOUNDS: "Tried to fetch an instruction out of bounds.",
    Signal.STACK_UNDERFLOW: "Tried to return from a subroutine but the call stack was empty.",
    Signal.STACK_OVERFLOW: "Tried to call a subroutine but the call stack was full.",
    Signal.SPRITE_OUT_OF_BOUNDS: "The sprite drawing instruction tried to read memory out of bounds.",
    Signal.BCD_OUT_OF_BOUNDS: "Tried to write a binary coded decimal out of bounds.",
    Signal.REGISTER_DUMP_OUT_OF_BOUNDS: "Tried to write the V registers to memory out of bounds.",
    Signal.REGISTER_LOAD_OUT_OF_BOUNDS: "Tried to read memory into the V registers out of bounds.",
    Signal.BAD_KEY_INDEX: "Tried to test a key with an index greater than 0xF.",
    Signal.BAD_FONT_DIGIT: "Tried to select a font digit greater than 0xF.",
}


class ProtocolError(RuntimeError):
    """Raised when the host breaks the suspend/supply contract"""


class EmulationError(Exception):
    """An error signal surfaced by the host session"""

    def __init__(self, signal, pc, word):
        self.signal = signal
        self.pc = pc
        self.word = word
        if word is None:
            detail = f"PC=0x{pc:03X}"
        else:
            detail = f"PC=0x{pc:03X}, instruction=0x{word:04X}"
        super().__init__(f"{signal.description} ({detail})")
