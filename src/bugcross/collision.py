"""Broad-phase box tests and narrow-phase alpha-mask tests."""

from __future__ import annotations

from typing import Protocol, Sequence
import logging
import math
import pygame

from .errors import CollisionDataUnavailable, SpriteNotReady
from .sprites import SpriteBank
from .utils import BOARD_HEIGHT, BOARD_WIDTH

logger = logging.getLogger(__name__)


class Collidable(Protocol):
    x: float
    y: float
    sprite: str | None
    sprite_width: int | None
    sprite_height: int | None


def _rect_collides(
    x: float, y: float, r: float, b: float, x2: float, y2: float, r2: float, b2: float
) -> bool:
    return not (r <= x2 or x >= r2 or b <= y2 or y >= b2)


def box_collides(
    pos: Sequence[float], size: Sequence[float], pos2: Sequence[float], size2: Sequence[float]
) -> bool:
    """Return whether two axis-aligned boxes overlap.

    Boxes are half-open, so edges that only touch do not collide.
    """
    return _rect_collides(
        pos[0], pos[1], pos[0] + size[0], pos[1] + size[1],
        pos2[0], pos2[1], pos2[0] + size2[0], pos2[1] + size2[1],
    )


def collision_region(a: Collidable, b: Collidable) -> tuple[int, int, int, int]:
    """Return (min_x, min_y, max_x, max_y) of the pixel region compared for a pair.

    X uses the intersection of the two boxes while Y uses their union.
    """
    ax, ay = math.floor(a.x), math.floor(a.y)
    bx, by = math.floor(b.x), math.floor(b.y)
    min_x = max(ax, bx)
    min_y = min(ay, by)
    max_x = min(ax + _width(a), bx + _width(b))
    max_y = max(ay + _height(a), by + _height(b))
    return min_x, min_y, max_x, max_y


def _width(entity: Collidable) -> int:
    if entity.sprite_width is None:
        raise SpriteNotReady(f"{type(entity).__name__} has no sprite size")
    return entity.sprite_width


def _height(entity: Collidable) -> int:
    if entity.sprite_height is None:
        raise SpriteNotReady(f"{type(entity).__name__} has no sprite size")
    return entity.sprite_height


class CollisionChecker:
    """Runs pixel-accurate collision tests against a sprite bank.

    Masks are compared as if each sprite were drawn at its floored position
    on an empty board-sized canvas, so pixels outside the board never count.
    """

    def __init__(
        self,
        sprites: SpriteBank,
        board_size: tuple[int, int] = (BOARD_WIDTH, BOARD_HEIGHT),
    ) -> None:
        self.sprites = sprites
        self.board = pygame.Rect(0, 0, *board_size)
        self.pixel_tests = 0

    def boxes_overlap(self, a: Collidable, b: Collidable) -> bool:
        return box_collides(
            (a.x, a.y), (_width(a), _height(a)),
            (b.x, b.y), (_width(b), _height(b)),
        )

    def check(self, a: Collidable, b: Collidable) -> bool:
        """Box test first, then the mask test only when the boxes overlap."""
        if not self.boxes_overlap(a, b):
            return False
        return self.collides_with(a, b)

    def collides_with(self, a: Collidable, b: Collidable) -> bool:
        """Return whether two entities share an opaque pixel."""
        self.pixel_tests += 1
        try:
            return self._masks_overlap(a, b)
        except CollisionDataUnavailable as exc:
            logger.debug("Treating pair as non-colliding: %s", exc)
            return False

    def _masks_overlap(self, a: Collidable, b: Collidable) -> bool:
        min_x, min_y, max_x, max_y = collision_region(a, b)
        if max_x <= min_x or max_y <= min_y:
            raise CollisionDataUnavailable(
                f"Empty region ({min_x}, {min_y}, {max_x}, {max_y})"
            )
        region = pygame.Rect(min_x, min_y, max_x - min_x, max_y - min_y).clip(self.board)
        if region.width == 0 or region.height == 0:
            return False

        mask_a = self._mask(a)
        mask_b = self._mask(b)
        ax, ay = math.floor(a.x), math.floor(a.y)
        bx, by = math.floor(b.x), math.floor(b.y)

        both = mask_a.overlap_mask(mask_b, (bx - ax, by - ay))
        window = pygame.mask.Mask(region.size, fill=True)
        return both.overlap(window, (region.x - ax, region.y - ay)) is not None

    def _mask(self, entity: Collidable) -> pygame.mask.Mask:
        if entity.sprite is None:
            raise CollisionDataUnavailable(f"{type(entity).__name__} has no sprite")
        try:
            return self.sprites.get(entity.sprite).mask
        except SpriteNotReady as exc:
            raise CollisionDataUnavailable(str(exc)) from exc
