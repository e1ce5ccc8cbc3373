"""Pytest configuration for headless pygame tests."""

from __future__ import annotations

import os
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

os.environ.setdefault("SDL_VIDEODRIVER", "dummy")
os.environ.setdefault("SDL_AUDIODRIVER", "dummy")

import pygame  # noqa: E402
import pytest  # noqa: E402

from bugcross.sprites import SpriteBank, SpriteInfo  # noqa: E402


@pytest.fixture(scope="session", autouse=True)
def _pygame():
    pygame.init()
    yield
    pygame.quit()


@pytest.fixture
def bank() -> SpriteBank:
    sprites = SpriteBank()
    sprites.load_all()
    return sprites


def solid_sprite(width: int, height: int, opaque: pygame.Rect | None = None) -> SpriteInfo:
    """Sprite that is fully transparent except for `opaque` (default: everything)."""
    surface = transparent_surface(width, height)
    surface.fill((255, 255, 255, 255), opaque or surface.get_rect())
    return SpriteInfo.from_surface(surface)


def transparent_surface(width: int, height: int) -> pygame.Surface:
    surface = pygame.Surface((width, height), pygame.SRCALPHA)
    surface.fill((0, 0, 0, 0))
    return surface


class RecordingCanvas:
    """Canvas that records draw calls instead of drawing."""

    def __init__(self) -> None:
        self.calls: list[tuple] = []

    def clear(self, color) -> None:
        self.calls.append(("clear", tuple(color)))

    def draw_sprite(self, sprite_id: str, x: float, y: float) -> None:
        self.calls.append(("sprite", sprite_id, x, y))

    def fill_rect(self, rect, color) -> None:
        self.calls.append(("fill_rect", tuple(rect)))

    def stroke_rect(self, rect, color, width: int = 1) -> None:
        self.calls.append(("stroke_rect", tuple(rect)))

    def fill_overlay(self, rect, color) -> None:
        self.calls.append(("overlay", tuple(rect)))

    def draw_text(self, text: str, center, color, size: str = "body", shadow: bool = False) -> None:
        self.calls.append(("text", text))

    def sprites(self) -> list[str]:
        return [call[1] for call in self.calls if call[0] == "sprite"]

    def texts(self) -> list[str]:
        return [call[1] for call in self.calls if call[0] == "text"]
