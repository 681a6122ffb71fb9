"""Runtime configuration for the CHIP-8 emulator."""

import os
from dataclasses import dataclass
from typing import Optional, Tuple

from .framebuffer import SpriteEdge

# Environment switches, checked when the config is built
ENV_DEBUG = "CHIP8_DEBUG"
ENV_TRACE = "CHIP8_TRACE"

Color = Tuple[int, int, int]


def parse_color(text) -> Color:
    """Parse an RRGGBB hex colour (a leading '#' is allowed)"""
    value = text.lstrip("#")
    if len(value) != 6:
        raise ValueError(f"Colour must be RRGGBB hex: {text!r}")
    try:
        return (int(value[0:2], 16), int(value[2:4], 16), int(value[4:6], 16))
    except ValueError:
        raise ValueError(f"Colour must be RRGGBB hex: {text!r}") from None


def env_flag(name) -> bool:
    return os.environ.get(name, "").lower() in ("1", "true", "yes", "on")


@dataclass
class EmulatorConfig:
    scale: int = 10                  # window pixels per CHIP-8 pixel
    instructions_per_frame: int = 10
    target_fps: int = 60
    sprite_edge: SpriteEdge = SpriteEdge.CLIP
    audio: bool = True
    tone_hz: float = 440.0
    volume: float = 0.25
    seed: Optional[int] = None
    foreground: Color = (255, 255, 255)
    background: Color = (0, 0, 0)
    headless: bool = False
    debug: bool = False
    trace: bool = False
    max_frames: Optional[int] = None

    def __post_init__(self):
        self.sprite_edge = SpriteEdge(self.sprite_edge)
        if self.scale < 1:
            raise ValueError(f"scale must be at least 1, got {self.scale}")
        if self.instructions_per_frame < 1:
            raise ValueError(f"instructions_per_frame must be at least 1, got {self.instructions_per_frame}")
        if self.target_fps < 1:
            raise ValueError(f"target_fps must be at least 1, got {self.target_fps}")
        if not 0.0 <= self.volume <= 1.0:
            raise ValueError(f"volume must be between 0 and 1, got {self.volume}")
        if self.tone_hz <= 0:
            raise ValueError(f"tone_hz must be positive, got {self.tone_hz}")
        if self.max_frames is not None and self.max_frames < 0:
            raise ValueError(f"max_frames must not be negative, got {self.max_frames}")
        for color in (self.foreground, self.background):
            if len(color) != 3 or not all(0 <= c <= 255 for c in color):
                raise ValueError(f"Colours must be three 0-255 components, got {color}")

    @property
    def wrap_sprites(self):
        return self.sprite_edge == SpriteEdge.WRAP

    @classmethod
    def from_args(cls, args):
        """Build a config from parsed command line arguments"""
        return cls(
            scale=args.scale,
            instructions_per_frame=args.speed,
            target_fps=args.fps,
            sprite_edge=SpriteEdge.WRAP if args.wrap else SpriteEdge.CLIP,
            audio=not args.no_audio,
            seed=args.seed,
            foreground=parse_color(args.foreground),
            background=parse_color(args.background),
            headless=args.headless,
            debug=args.debug or env_flag(ENV_DEBUG),
            trace=args.trace or env_flag(ENV_TRACE),
            max_frames=args.max_frames,
        )
