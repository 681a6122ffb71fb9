#!/usr/bin/env python3
"""
CHIP-8 Emulator
A Python implementation of the CHIP-8 virtual machine.
"""

import argparse
import logging
import os
import sys

sys.path.insert(0, os.path.join(os.path.dirname(os.path.abspath(__file__)), 'src'))

from chip8.config import EmulatorConfig
from chip8.emulator import Chip8
from chip8.signals import EmulationError


def build_parser():
    parser = argparse.ArgumentParser(
        description='CHIP-8 Emulator',
        epilog='Keypad: 1234 / QWER / ASDF / ZXCV. F11 toggles fullscreen, ESC quits.')
    parser.add_argument('rom_file', help='Path to the CHIP-8 ROM file')
    parser.add_argument('--scale', type=int, default=10, help='Window pixels per CHIP-8 pixel')
    parser.add_argument('--speed', type=int, default=10, help='Instructions executed per frame')
    parser.add_argument('--fps', type=int, default=60, help='Frames per second')
    parser.add_argument('--wrap', action='store_true', help='Wrap sprites around the screen edges instead of clipping')
    parser.add_argument('--no-audio', action='store_true', help='Disable the sound timer tone')
    parser.add_argument('--seed', type=int, default=None, help='Seed for the random number generator')
    parser.add_argument('--foreground', default='FFFFFF', help='Foreground colour (RRGGBB)')
    parser.add_argument('--background', default='000000', help='Background colour (RRGGBB)')
    parser.add_argument('--headless', action='store_true', help='Run without a window or audio')
    parser.add_argument('--max-frames', type=int, default=None, help='Stop after this many frames')
    parser.add_argument('--debug', action='store_true', help='Enable debug logging')
    parser.add_argument('--trace', action='store_true', help='Log every executed instruction')
    return parser


def main():
    parser = build_parser()
    args = parser.parse_args()

    try:
        config = EmulatorConfig.from_args(args)
    except ValueError as e:
        parser.error(str(e))

    logging.basicConfig(level=logging.DEBUG if (config.debug or config.trace) else logging.INFO,
                        format='%(asctime)s - %(levelname)s - %(message)s')

    try:
        print("Starting CHIP-8 emulator...")
        chip8 = Chip8(config)

        print("Loading ROM...")
        chip8.load_rom(args.rom_file)

        print("Starting emulation...")
        chip8.run()
        print("Emulation finished.")
    except FileNotFoundError:
        print(f"Error: ROM file '{args.rom_file}' not found.")
        sys.exit(1)
    except EmulationError as e:
        print(f"Error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
