"""
Pytest configuration and shared fixtures for CHIP-8 Emulator tests
"""
import pytest
import sys
import os

# Add src to Python path so we can import chip8 modules
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from chip8.memory import Memory
from chip8.state import MachineState
from chip8.cpu import CPU
from chip8.framebuffer import SpriteEdge


def assemble(*words):
    """Pack 16-bit instruction words into a big-endian program image."""
    image = bytearray()
    for word in words:
        image += bytes(((word >> 8) & 0xFF, word & 0xFF))
    return bytes(image)


class FakeClock:
    """Manually advanced clock for timer tests."""

    def __init__(self, now=1000.0):
        self.now = now

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


@pytest.fixture
def memory():
    """Create a fresh Memory instance for testing."""
    return Memory()


@pytest.fixture
def state():
    """Create a machine state with an empty program."""
    return MachineState.from_rom(b'')


@pytest.fixture
def cpu(state):
    """Create a CPU that clips sprites at the screen edge."""
    return CPU(state, SpriteEdge.CLIP)


@pytest.fixture
def wrap_cpu(state):
    """Create a CPU that wraps sprites around the screen edge."""
    return CPU(state, SpriteEdge.WRAP)


@pytest.fixture
def load(cpu):
    """Load instruction words at 0x200 and return the CPU."""
    def _load(*words):
        cpu.state.initialize(assemble(*words))
        return cpu
    return _load


@pytest.fixture
def clock():
    return FakeClock()
