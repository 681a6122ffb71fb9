"""
CHIP-8 Memory
4 KiB of byte-addressable RAM. The digit glyphs live at 0x000-0x04F and
programs are loaded at 0x200.
"""
import logging

import cython

logger = logging.getLogger(__name__)

MEMORY_SIZE = 0x1000
ADDRESS_MASK = 0xFFF
PROGRAM_START = 0x200
MAX_ROM_SIZE = MEMORY_SIZE - PROGRAM_START  # 0xE00

FONT_START = 0x000
GLYPH_HEIGHT = 5

# Digit glyphs 0-F, 4 pixels wide (high nibble), 5 rows each
FONT_SET = (
    0xF0, 0x90, 0x90, 0x90, 0xF0,  # 0
    0x20, 0x60, 0x20, 0x20, 0x70,  # 1
    0xF0, 0x10, 0xF0, 0x80, 0xF0,  # 2
    0xF0, 0x10, 0xF0, 0x10, 0xF0,  # 3
    0x90, 0x90, 0xF0, 0x10, 0x10,  # 4
    0xF0, 0x80, 0xF0, 0x10, 0xF0,  # 5
    0xF0, 0x80, 0xF0, 0x90, 0xF0,  # 6
    0xF0, 0x10, 0x20, 0x40, 0x40,  # 7
    0xF0, 0x90, 0xF0, 0x90, 0xF0,  # 8
    0xF0, 0x90, 0xF0, 0x10, 0xF0,  # 9
    0xF0, 0x90, 0xF0, 0x90, 0x90,  # A
    0xE0, 0x90, 0xE0, 0x90, 0xE0,  # B
    0xF0, 0x80, 0x80, 0x80, 0xF0,  # C
    0xE0, 0x90, 0x90, 0x90, 0xE0,  # D
    0xF0, 0x80, 0xF0, 0x80, 0xF0,  # E
    0xF0, 0x80, 0xF0, 0x80, 0x80,  # F
)


class Memory:
    def __init__(self):
        self.ram: list = [0] * MEMORY_SIZE
        self.load_font()

    def load_font(self):
        """Write the digit glyph table to low memory"""
        self.ram[FONT_START:FONT_START + len(FONT_SET)] = FONT_SET

    def clear(self):
        self.ram = [0] * MEMORY_SIZE
        self.load_font()

    def load_rom(self, rom_data, length=None):
        """Copy a program image to 0x200.

        Images larger than MAX_ROM_SIZE are cut to fit. The caller decides
        whether that is worth a warning.

        Returns:
            bool: True if the image was truncated
        """
        if length is None:
            length = len(rom_data)
        length = min(length, len(rom_data))

        truncated = length > MAX_ROM_SIZE
        if truncated:
            length = MAX_ROM_SIZE

        self.ram[PROGRAM_START:PROGRAM_START + length] = bytes(rom_data[:length])
        logger.debug("Loaded %d bytes at 0x%03X (truncated=%s)", length, PROGRAM_START, truncated)
        return truncated

    def in_range(self, address: cython.int, count: cython.int = 1) -> cython.bint:
        """Check that `count` bytes starting at `address` are addressable"""
        return count >= 0 and 0 <= address and address + count - 1 <= ADDRESS_MASK

    def read_byte(self, address: cython.int) -> cython.int:
        return self.ram[address]

    def write_byte(self, address: cython.int, value: cython.int) -> None:
        self.ram[address] = value & 0xFF

    def read_word(self, address: cython.int) -> cython.int:
        """Read a big-endian 16-bit word"""
        return (self.ram[address] << 8) | self.ram[address + 1]

    def read_block(self, address, count):
        return self.ram[address:address + count]

    def dump(self, start=0, end=MEMORY_SIZE):
        """Return a hex dump of a memory range, 16 bytes per line"""
        lines = []
        for base in range(start - start % 16, end, 16):
            row = self.ram[base:min(base + 16, end)]
            lines.append(f"{base:03X}: " + " ".join(f"{b:02X}" for b in row))
        return "\n".join(lines)
