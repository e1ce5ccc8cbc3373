"""Drawing surface used by the game core."""

from __future__ import annotations

from typing import Protocol, Sequence
import pygame

from .sprites import SpriteBank
from .utils import SHADOW_COLOR

Color = Sequence[int]
RectLike = tuple[float, float, float, float]


class Canvas(Protocol):
    """Declarative draw calls issued by screens, entities, and widgets."""

    def clear(self, color: Color) -> None: ...

    def draw_sprite(self, sprite_id: str, x: float, y: float) -> None: ...

    def fill_rect(self, rect: RectLike, color: Color) -> None: ...

    def stroke_rect(self, rect: RectLike, color: Color, width: int = 1) -> None: ...

    def fill_overlay(self, rect: RectLike, color: Color) -> None: ...

    def draw_text(
        self,
        text: str,
        center: tuple[float, float],
        color: Color,
        size: str = "body",
        shadow: bool = False,
    ) -> None: ...


class PygameCanvas:
    """Canvas backed by a pygame surface."""

    def __init__(self, surface: pygame.Surface, sprites: SpriteBank) -> None:
        self.surface = surface
        self.sprites = sprites
        self.fonts = {
            "title": pygame.font.SysFont("avenir,arial", 48, bold=True),
            "body": pygame.font.SysFont("avenir,arial", 22),
            "small": pygame.font.SysFont("avenir,arial", 18),
        }

    def clear(self, color: Color) -> None:
        self.surface.fill(color)

    def draw_sprite(self, sprite_id: str, x: float, y: float) -> None:
        self.surface.blit(self.sprites.get(sprite_id).image, (int(x), int(y)))

    def fill_rect(self, rect: RectLike, color: Color) -> None:
        pygame.draw.rect(self.surface, color, pygame.Rect(rect))

    def stroke_rect(self, rect: RectLike, color: Color, width: int = 1) -> None:
        pygame.draw.rect(self.surface, color, pygame.Rect(rect), width)

    def fill_overlay(self, rect: RectLike, color: Color) -> None:
        overlay = pygame.Surface((int(rect[2]), int(rect[3])), pygame.SRCALPHA)
        overlay.fill(color)
        self.surface.blit(overlay, (int(rect[0]), int(rect[1])))

    def draw_text(
        self,
        text: str,
        center: tuple[float, float],
        color: Color,
        size: str = "body",
        shadow: bool = False,
    ) -> None:
        font = self.fonts[size]
        if shadow:
            back = font.render(text, True, SHADOW_COLOR)
            self.surface.blit(back, back.get_rect(center=(center[0] + 3, center[1] + 3)))
        line = font.render(text, True, color)
        self.surface.blit(line, line.get_rect(center=(int(center[0]), int(center[1]))))
