"""
CHIP-8 machine state
Everything one virtual machine owns: registers, call stack, keypad bits,
memory, framebuffer and the raw timer values last written by the program.
"""
from .memory import Memory, PROGRAM_START
from .framebuffer import Framebuffer

REGISTER_COUNT = 16
FLAG_REGISTER = 0xF
STACK_DEPTH = 16
KEY_COUNT = 16
INSTRUCTION_SIZE = 2


class MachineState:
    def __init__(self):
        self.memory = Memory()
        self.framebuffer = Framebuffer()

        self.registers: list = [0] * REGISTER_COUNT  # V0-VF
        self.index = 0  # I
        self.pc = PROGRAM_START
        self.stack: list = []  # return addresses, innermost last
        self.keys = 0  # one bit per pad key

        # Raw values written by LD DT / LD ST. The host owns the clocks.
        self.delay_value = 0
        self.sound_value = 0

    @classmethod
    def from_rom(cls, image, length=None):
        state = cls()
        state.initialize(image, length)
        return state

    def initialize(self, image, length=None):
        """Reset the machine and load a program image at 0x200.

        Returns:
            bool: True if the image did not fit and was truncated
        """
        self.registers = [0] * REGISTER_COUNT
        self.index = 0
        self.pc = PROGRAM_START
        self.stack = []
        self.keys = 0
        self.delay_value = 0
        self.sound_value = 0

        self.memory.clear()
        self.framebuffer.clear()
        return self.memory.load_rom(image, length)

    @property
    def flag(self):
        return self.registers[FLAG_REGISTER]

    @property
    def stack_depth(self):
        return len(self.stack)

    def fetch_word(self):
        """Instruction word at PC, or None if PC does not reference two bytes"""
        if not self.memory.in_range(self.pc, INSTRUCTION_SIZE):
            return None
        return self.memory.read_word(self.pc)

    # Keypad bits, driven by the input layer

    def set_key(self, key, pressed):
        if not 0 <= key < KEY_COUNT:
            raise ValueError(f"Key index out of range: {key}")
        if pressed:
            self.keys |= 1 << key
        else:
            self.keys &= ~(1 << key)

    def press_key(self, key):
        self.set_key(key, True)

    def release_key(self, key):
        self.set_key(key, False)

    def is_key_pressed(self, key):
        return bool(self.keys & (1 << key))

    def register_dump(self):
        """One-line register summary for logs"""
        regs = " ".join(f"V{i:X}={v:02X}" for i, v in enumerate(self.registers))
        return f"PC={self.pc:03X} I={self.index:03X} SP={len(self.stack)} {regs}"
