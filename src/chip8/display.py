"""
CHIP-8 window
Presents the framebuffer in a resizable pygame window and turns keyboard
events into keypad presses for the session.
"""
import logging

import numpy
import pygame

from .keypad import key_for

logger = logging.getLogger(__name__)


class Screen:
    def __init__(self, framebuffer, scale=10, foreground=(255, 255, 255), background=(0, 0, 0),
                 title="CHIP-8"):
        self.framebuffer = framebuffer
        self.scale = scale
        self.palette = numpy.array([background, foreground], dtype=numpy.uint8)
        self.fullscreen = False

        pygame.display.init()
        self.window_size = (framebuffer.width * scale, framebuffer.height * scale)
        self.screen = pygame.display.set_mode(self.window_size, pygame.RESIZABLE)
        pygame.display.set_caption(title)
        logger.debug("Window created: %dx%d", *self.window_size)

    def render(self):
        """Draw the framebuffer scaled to the current window size"""
        # Map each bit to its colour, then swap axes since surfarray is (x, y)
        rgb = self.palette[self.framebuffer.pixels]
        frame_surface = pygame.surfarray.make_surface(rgb.swapaxes(0, 1))
        scaled = pygame.transform.scale(frame_surface, self.screen.get_size())
        self.screen.blit(scaled, (0, 0))
        pygame.display.flip()

    def toggle_fullscreen(self):
        self.fullscreen = not self.fullscreen
        if self.fullscreen:
            self.screen = pygame.display.set_mode((0, 0), pygame.FULLSCREEN)
        else:
            self.screen = pygame.display.set_mode(self.window_size, pygame.RESIZABLE)
        logger.debug("Fullscreen: %s", self.fullscreen)
        self.render()

    def poll_events(self, session):
        """Forward window events to the session.

        Returns:
            bool: False once the user asked to quit
        """
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                return False
            elif event.type == pygame.KEYDOWN:
                if event.key == pygame.K_ESCAPE:
                    return False
                if event.key == pygame.K_F11:
                    self.toggle_fullscreen()
                    continue
                pad = key_for(event.key)
                if pad is not None:
                    session.key_down(pad)
            elif event.type == pygame.KEYUP:
                pad = key_for(event.key)
                if pad is not None:
                    session.key_up(pad)
            elif event.type == pygame.VIDEORESIZE:
                if not self.fullscreen:
                    self.screen = pygame.display.set_mode(event.size, pygame.RESIZABLE)
                self.render()
        return True

    def close(self):
        pygame.display.quit()
