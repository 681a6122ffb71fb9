"""
CHIP-8 sound
The machine has a single tone that plays while the sound timer is non-zero.
A one-second square wave is synthesized with numpy and looped through the
pygame mixer.
"""
import logging

import numpy as np
import pygame

logger = logging.getLogger(__name__)


def square_wave(frequency, sample_rate, volume, channels=1):
    """Build one second of a square wave as int16 samples"""
    # Whole number of periods so the loop point is seamless
    period = max(2, int(round(sample_rate / frequency)))
    length = period * max(1, sample_rate // period)
    t = np.arange(length)
    amplitude = int(volume * 32767)
    wave = np.where((t % period) < period // 2, amplitude, -amplitude).astype(np.int16)
    if channels > 1:
        wave = np.repeat(wave[:, None], channels, axis=1)
    return wave


class Beeper:
    def __init__(self, frequency=440.0, volume=0.25, sample_rate=44100):
        self.frequency = frequency
        self.volume = volume
        self.sample_rate = sample_rate
        self.sound = None
        self.channel = None
        self.playing = False
        self.init_audio()

    def init_audio(self):
        """Initialize the pygame mixer and prepare the tone"""
        try:
            if not pygame.mixer.get_init():
                pygame.mixer.init(frequency=self.sample_rate, size=-16, channels=1, buffer=512)
            rate, _size, channels = pygame.mixer.get_init()
            samples = square_wave(self.frequency, rate, self.volume, channels)
            self.sound = pygame.sndarray.make_sound(samples)
            logger.debug("Audio initialized: %dHz, %d channel(s), %.0fHz tone", rate, channels, self.frequency)
        except pygame.error as e:
            logger.warning("Failed to initialize audio, sound disabled: %s", e)
            self.sound = None

    @property
    def available(self):
        return self.sound is not None

    def update(self, active):
        """Start or stop the tone to match the sound timer"""
        if active and not self.playing:
            self.start()
        elif not active and self.playing:
            self.stop()

    def start(self):
        if self.sound is None:
            return
        self.channel = self.sound.play(loops=-1)
        self.playing = True

    def stop(self):
        if self.sound is not None:
            self.sound.stop()
        self.channel = None
        self.playing = False

    def close(self):
        self.stop()
        if pygame.mixer.get_init():
            pygame.mixer.quit()
