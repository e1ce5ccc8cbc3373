"""Sprite loading, caching, and alpha metadata for collision tests."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable
import logging
import pygame

from .errors import SpriteNotReady
from .settings import CHARACTERS
from .utils import ALPHA_THRESHOLD, COL_WIDTH

logger = logging.getLogger(__name__)

SPRITE_HEIGHT = 171

TILE_SPRITES = ("water-block", "stone-block", "grass-block")
ENTITY_SPRITES = (
    "enemy-bug",
    "gem-blue",
    "gem-orange",
    "gem-green",
    "key",
    "rock",
    "heart",
    "selector",
)

CHARACTER_COLORS = {
    "char-boy": (66, 135, 245),
    "char-cat-girl": (240, 150, 60),
    "char-horn-girl": (150, 90, 200),
    "char-pink-girl": (245, 120, 180),
    "char-princess-girl": (250, 210, 80),
}
GEM_COLORS = {
    "gem-blue": (40, 110, 230),
    "gem-orange": (245, 140, 30),
    "gem-green": (50, 190, 90),
}
TILE_COLORS = {
    "water-block": ((60, 130, 220), (40, 95, 175)),
    "stone-block": ((150, 150, 150), (110, 110, 110)),
    "grass-block": ((90, 190, 80), (120, 85, 50)),
}


@dataclass(slots=True)
class SpriteInfo:
    """Image and alpha metadata for one named sprite."""

    width: int
    height: int
    image: pygame.Surface
    mask: pygame.mask.Mask = field(init=False)

    def __post_init__(self) -> None:
        # A set bit means alpha >= ALPHA_THRESHOLD.
        self.mask = pygame.mask.from_surface(self.image, ALPHA_THRESHOLD - 1)

    @classmethod
    def from_surface(cls, image: pygame.Surface) -> "SpriteInfo":
        width, height = image.get_size()
        return cls(width=width, height=height, image=image)

    def alpha_at(self, x: int, y: int) -> int:
        """Return the alpha byte of a pixel in sprite-local coordinates."""
        if not (0 <= x < self.width and 0 <= y < self.height):
            return 0
        return self.image.get_at((x, y)).a


class SpriteBank:
    """Loads sprites once and serves them by id.

    Images are read from ``<root>/assets/images/<id>.png`` when present,
    otherwise a procedural stand-in of the same size is drawn.
    """

    def __init__(self, root: Path | None = None) -> None:
        self.root = root
        self._cache: dict[str, SpriteInfo] = {}

    @property
    def image_dir(self) -> Path | None:
        if self.root is None:
            return None
        return self.root / "assets" / "images"

    @property
    def ready(self) -> bool:
        return all(sprite_id in self._cache for sprite_id in self.required_ids())

    @staticmethod
    def required_ids() -> tuple[str, ...]:
        return TILE_SPRITES + ENTITY_SPRITES + CHARACTERS

    def load_all(self) -> None:
        """Load every sprite the game references."""
        image_dir = self.image_dir
        if image_dir is not None and not image_dir.exists():
            logger.warning("Asset directory %s not found, using drawn sprites", image_dir)
        for sprite_id in self.required_ids():
            self.load(sprite_id)
        logger.info("Loaded %d sprites", len(self._cache))

    def load(self, sprite_id: str) -> SpriteInfo:
        """Load a single sprite, returning the cached entry when present."""
        cached = self._cache.get(sprite_id)
        if cached is not None:
            return cached
        image = self._load_file(sprite_id)
        if image is None:
            image = draw_sprite(sprite_id)
            logger.debug("Using drawn sprite for %s", sprite_id)
        info = SpriteInfo.from_surface(image)
        self._cache[sprite_id] = info
        return info

    def register(self, sprite_id: str, info: SpriteInfo) -> None:
        """Insert a sprite directly, replacing any cached entry."""
        self._cache[sprite_id] = info

    def get(self, sprite_id: str) -> SpriteInfo:
        """Return loaded metadata for a sprite id."""
        try:
            return self._cache[sprite_id]
        except KeyError:
            raise SpriteNotReady(f"Sprite {sprite_id!r} has not been loaded") from None

    def _load_file(self, sprite_id: str) -> pygame.Surface | None:
        image_dir = self.image_dir
        if image_dir is None:
            return None
        path = image_dir / f"{sprite_id}.png"
        if not path.exists():
            return None
        try:
            image = pygame.image.load(str(path))
        except pygame.error:
            logger.warning("Could not decode %s", path)
            return None
        if pygame.display.get_surface() is not None:
            return image.convert_alpha()
        return image


def _blank() -> pygame.Surface:
    return pygame.Surface((COL_WIDTH, SPRITE_HEIGHT), pygame.SRCALPHA)


def _draw_tile(surface: pygame.Surface, sprite_id: str) -> None:
    top, side = TILE_COLORS[sprite_id]
    pygame.draw.rect(surface, side, pygame.Rect(0, 50, COL_WIDTH, 121))
    pygame.draw.rect(surface, top, pygame.Rect(0, 50, COL_WIDTH, 83))


def _draw_character(surface: pygame.Surface, sprite_id: str) -> None:
    color = CHARACTER_COLORS[sprite_id]
    pygame.draw.ellipse(surface, (0, 0, 0, 60), pygame.Rect(18, 128, 65, 16))
    pygame.draw.rect(surface, color, pygame.Rect(30, 92, 41, 44), border_radius=8)
    pygame.draw.circle(surface, (250, 220, 190), (50, 80), 20)
    pygame.draw.circle(surface, (20, 20, 20), (43, 78), 3)
    pygame.draw.circle(surface, (20, 20, 20), (57, 78), 3)


def _draw_bug(surface: pygame.Surface, _sprite_id: str) -> None:
    pygame.draw.ellipse(surface, (0, 0, 0, 60), pygame.Rect(6, 128, 89, 16))
    pygame.draw.ellipse(surface, (200, 30, 30), pygame.Rect(2, 78, 80, 60))
    pygame.draw.circle(surface, (40, 20, 20), (84, 106), 16)
    pygame.draw.circle(surface, (255, 255, 255), (90, 100), 4)
    pygame.draw.line(surface, (40, 20, 20), (42, 80), (42, 136), 2)


def _draw_gem(surface: pygame.Surface, sprite_id: str) -> None:
    color = GEM_COLORS[sprite_id]
    points = [(50, 66), (80, 96), (50, 140), (20, 96)]
    pygame.draw.polygon(surface, color, points)
    pygame.draw.polygon(surface, (255, 255, 255), points, 2)


def _draw_key(surface: pygame.Surface, _sprite_id: str) -> None:
    gold = (240, 200, 40)
    pygame.draw.circle(surface, gold, (50, 76), 14, 6)
    pygame.draw.rect(surface, gold, pygame.Rect(46, 88, 8, 48))
    pygame.draw.rect(surface, gold, pygame.Rect(54, 118, 12, 6))
    pygame.draw.rect(surface, gold, pygame.Rect(54, 130, 10, 6))


def _draw_rock(surface: pygame.Surface, _sprite_id: str) -> None:
    pygame.draw.ellipse(surface, (105, 100, 95), pygame.Rect(6, 70, 89, 76))
    pygame.draw.ellipse(surface, (140, 135, 128), pygame.Rect(22, 80, 40, 24))


def _draw_heart(surface: pygame.Surface, _sprite_id: str) -> None:
    red = (225, 40, 70)
    pygame.draw.circle(surface, red, (37, 90), 16)
    pygame.draw.circle(surface, red, (63, 90), 16)
    pygame.draw.polygon(surface, red, [(22, 96), (78, 96), (50, 132)])


def _draw_selector(surface: pygame.Surface, _sprite_id: str) -> None:
    pygame.draw.ellipse(surface, (255, 235, 59, 140), pygame.Rect(4, 110, 93, 50))


_PAINTERS: dict[str, Callable[[pygame.Surface, str], None]] = {
    "enemy-bug": _draw_bug,
    "key": _draw_key,
    "rock": _draw_rock,
    "heart": _draw_heart,
    "selector": _draw_selector,
}
_PAINTERS.update({name: _draw_tile for name in TILE_SPRITES})
_PAINTERS.update({name: _draw_character for name in CHARACTERS})
_PAINTERS.update({name: _draw_gem for name in GEM_COLORS})


def draw_sprite(sprite_id: str) -> pygame.Surface:
    """Draw the stand-in art for a sprite id."""
    painter = _PAINTERS.get(sprite_id)
    if painter is None:
        raise SpriteNotReady(f"No image or drawing for sprite {sprite_id!r}")
    surface = _blank()
    painter(surface, sprite_id)
    return surface
