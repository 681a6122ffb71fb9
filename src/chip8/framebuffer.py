"""
CHIP-8 Framebuffer
64x32 monochrome display. Sprites are XORed onto the grid and a pixel
that goes from on to off counts as a collision.
"""
from enum import Enum

import numpy

SCREEN_WIDTH = 64
SCREEN_HEIGHT = 32
SPRITE_WIDTH = 8


class SpriteEdge(str, Enum):
    """What happens to sprite pixels that fall past the right or bottom edge"""
    CLIP = "clip"  # dropped
    WRAP = "wrap"  # drawn on the opposite edge


class Framebuffer:
    def __init__(self, width=SCREEN_WIDTH, height=SCREEN_HEIGHT):
        self.width = width
        self.height = height
        # Row-major: pixels[y, x]
        self.pixels = numpy.zeros((height, width), dtype=numpy.uint8)

    def clear(self):
        self.pixels.fill(0)

    def get_pixel(self, x, y):
        return bool(self.pixels[y, x])

    def lit_count(self):
        return int(numpy.count_nonzero(self.pixels))

    def is_blank(self):
        return not self.pixels.any()

    def draw_sprite(self, rows, x, y, edge=SpriteEdge.CLIP):
        """XOR an 8-pixel-wide sprite onto the display.

        Args:
            rows: sprite bytes, one per row, MSB is the leftmost pixel
            x, y: position of the sprite's top-left corner
            edge: SpriteEdge policy for pixels beyond the display

        Returns:
            bool: True if any lit pixel was turned off
        """
        if len(rows) == 0:
            return False

        bits = numpy.unpackbits(numpy.asarray(rows, dtype=numpy.uint8)[:, None], axis=1)
        ys = y + numpy.arange(bits.shape[0])
        xs = x + numpy.arange(SPRITE_WIDTH)

        if edge == SpriteEdge.WRAP:
            ys %= self.height
            xs %= self.width
        else:
            keep_rows = ys < self.height
            keep_cols = xs < self.width
            ys = ys[keep_rows]
            xs = xs[keep_cols]
            bits = bits[keep_rows][:, keep_cols]
            if ys.size == 0 or xs.size == 0:
                return False

        window = numpy.ix_(ys, xs)
        collision = bool((self.pixels[window] & bits).any())
        self.pixels[window] ^= bits
        return collision

    def to_text(self, on="#", off="."):
        """Render the display as lines of text"""
        return "\n".join("".join(on if p else off for p in row) for row in self.pixels)
