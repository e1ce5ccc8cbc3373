"""Per-tick input snapshots and keyboard polling."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable
import pygame

from .settings import ControlScheme
from .utils import DIRECTION_NAMES


@dataclass(slots=True)
class InputSnapshot:
    """Pointer and direction-key state for a single tick."""

    pointer_x: float = -1.0
    pointer_y: float = -1.0
    pointer_pressed: bool = False
    directions: dict[str, bool] = field(
        default_factory=lambda: {name: False for name in DIRECTION_NAMES}
    )

    @property
    def pointer(self) -> tuple[float, float]:
        return (self.pointer_x, self.pointer_y)


def scheme_bindings(schemes: Iterable[ControlScheme]) -> dict[int, str]:
    """Map pygame key codes to direction names."""
    bindings: dict[int, str] = {}
    for scheme in schemes:
        bindings[scheme.left] = "left"
        bindings[scheme.up] = "up"
        bindings[scheme.right] = "right"
        bindings[scheme.down] = "down"
    return bindings


def poll_input(bindings: dict[int, str]) -> InputSnapshot:
    """Read the current mouse and keyboard state from pygame."""
    mx, my = pygame.mouse.get_pos()
    pressed = pygame.mouse.get_pressed()[0]
    keys = pygame.key.get_pressed()
    directions = {name: False for name in DIRECTION_NAMES}
    for key, name in bindings.items():
        if keys[key]:
            directions[name] = True
    return InputSnapshot(
        pointer_x=mx,
        pointer_y=my,
        pointer_pressed=bool(pressed),
        directions=directions,
    )
