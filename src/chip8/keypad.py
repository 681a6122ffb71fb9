"""
Keyboard to keypad mapping

    Keyboard        CHIP-8 pad index
    1 2 3 4         0 1 2 3
    Q W E R   ->    4 5 6 7
    A S D F         8 9 A B
    Z X C V         C D E F
"""
import pygame

KEY_MAP = {
    pygame.K_1: 0x0, pygame.K_2: 0x1, pygame.K_3: 0x2, pygame.K_4: 0x3,
    pygame.K_q: 0x4, pygame.K_w: 0x5, pygame.K_e: 0x6, pygame.K_r: 0x7,
    pygame.K_a: 0x8, pygame.K_s: 0x9, pygame.K_d: 0xA, pygame.K_f: 0xB,
    pygame.K_z: 0xC, pygame.K_x: 0xD, pygame.K_c: 0xE, pygame.K_v: 0xF,
}


def key_for(key):
    """Pad index for a pygame key code, or None if the key is not mapped"""
    return KEY_MAP.get(key)

