"""Player, enemy, and board object entities."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import ClassVar, Iterable
import logging
import pygame

from .collision import CollisionChecker, box_collides
from .errors import ConfigurationError, SpriteNotReady
from .settings import Difficulty, profile_for
from .sprites import SpriteBank
from .utils import (
    BOARD_HEIGHT,
    BOARD_WIDTH,
    DIRECTION_NAMES,
    ENEMY_START_X,
    PLAYER_START,
    column_to_x,
    row_to_y,
    step_for,
)

logger = logging.getLogger(__name__)


@dataclass(eq=False)
class Entity(pygame.sprite.Sprite):
    """Anything with a board position and a sprite."""

    x: float = 0.0
    y: float = 0.0
    sprite: str | None = None
    sprite_width: int | None = field(default=None, init=False)
    sprite_height: int | None = field(default=None, init=False)

    def __post_init__(self) -> None:
        pygame.sprite.Sprite.__init__(self)

    def setup_sprite_params(self, bank: SpriteBank) -> None:
        """Copy the sprite's size from the bank."""
        info = bank.get(self.sprite)
        self.sprite_width = info.width
        self.sprite_height = info.height

    @property
    def position(self) -> tuple[float, float]:
        return (self.x, self.y)

    @property
    def size(self) -> tuple[int, int]:
        if self.sprite_width is None or self.sprite_height is None:
            raise SpriteNotReady(f"{type(self).__name__} has no sprite size")
        return (self.sprite_width, self.sprite_height)


@dataclass(eq=False)
class Enemy(Entity):
    """A bug that sweeps its lane left to right forever."""

    starting_row: int = 2
    speed: float = 100.0

    def __post_init__(self) -> None:
        super().__post_init__()
        self.sprite = "enemy-bug"
        self.x = ENEMY_START_X
        self.y = row_to_y(self.starting_row)

    def update(self, dt: float, board_width: int = BOARD_WIDTH) -> None:
        """Advance by dt seconds, respawning at the left once off the right edge."""
        self.x += dt * self.speed
        if self.x > board_width:
            self.x = ENEMY_START_X
            self.y = row_to_y(self.starting_row)


@dataclass(eq=False)
class Player(Entity):
    """The character steered by the arrow keys."""

    lives: int = 0
    score: int = 0
    movement_speed: float = 0
    goal_reachable: bool = False
    board_size: tuple[int, int] = (BOARD_WIDTH, BOARD_HEIGHT)
    key_states: dict[str, bool] = field(
        default_factory=lambda: {name: False for name in DIRECTION_NAMES}
    )

    def __post_init__(self) -> None:
        super().__post_init__()
        self.reset_position()

    def setup_sprite(self, character: str, bank: SpriteBank) -> None:
        """Use a character sprite for the player."""
        self.sprite = character
        self.setup_sprite_params(bank)

    def init_properties(self, difficulty: Difficulty | str) -> None:
        """Set lives and movement speed for a difficulty."""
        profile = profile_for(difficulty)
        self.lives = profile.lives
        self.movement_speed = profile.movement_speed

    def reset_position(self) -> None:
        self.x, self.y = PLAYER_START

    def reset_score(self) -> None:
        self.score = 0

    def add_score(self, amount: int) -> None:
        self.score += amount

    def lose_life(self) -> None:
        """Take one life and send the player back to the start cell."""
        self.lives = max(0, self.lives - 1)
        self.reset_position()
        logger.debug("Player hit, %d lives left", self.lives)

    def handle_input(self, event_type: str, direction: str | None) -> None:
        """Track a keydown/keyup event for a direction."""
        if direction not in self.key_states:
            return
        if event_type == "keydown":
            self.key_states[direction] = True
        elif event_type == "keyup":
            self.key_states[direction] = False

    def set_key_states(self, directions: dict[str, bool]) -> None:
        for name in DIRECTION_NAMES:
            self.key_states[name] = bool(directions.get(name, False))

    def release_keys(self) -> None:
        for name in DIRECTION_NAMES:
            self.key_states[name] = False

    def future_position(self, direction: str) -> tuple[float, float]:
        dx, dy = step_for(direction, self.movement_speed)
        return (self.x + dx, self.y + dy)

    def move(self, direction: str) -> None:
        """Move one step of movement_speed in a direction."""
        self.x, self.y = self.future_position(direction)

    def in_bounds(self, x: float, y: float) -> bool:
        width, height = self.board_size
        return 0 <= x <= width - self.size[0] and 0 <= y <= height - self.size[1]

    def collides_with_blockers(
        self,
        direction: str,
        objects: Iterable["BoardObject"],
        checker: CollisionChecker,
    ) -> bool:
        """Return whether stepping in a direction would run into a blocker."""
        previous = (self.x, self.y)
        future = self.future_position(direction)
        blocked = False
        for obj in objects:
            if obj.is_pickable:
                continue
            if not box_collides(future, self.size, obj.position, obj.size):
                continue
            self.x, self.y = future
            try:
                if checker.collides_with(self, obj):
                    blocked = True
            finally:
                self.x, self.y = previous
            if blocked:
                break
        return blocked

    def update(self, objects: Iterable["BoardObject"], checker: CollisionChecker) -> None:
        """Apply held direction keys, one step per direction per tick."""
        blockers = [obj for obj in objects if not obj.is_pickable]
        for direction in DIRECTION_NAMES:
            if not self.key_states[direction]:
                continue
            if not self.in_bounds(*self.future_position(direction)):
                continue
            if self.collides_with_blockers(direction, blockers, checker):
                continue
            self.move(direction)


class ObjectKind(str, Enum):
    """Variants of board objects."""

    GEM = "gem"
    KEY = "key"
    ROCK = "rock"
    HEART = "heart"


@dataclass(eq=False)
class BoardObject(Entity):
    """An object placed on a board cell."""

    column: int = 1
    row: int = 1
    visible: bool = field(default=True, init=False)

    kind: ClassVar[ObjectKind]
    is_pickable = True

    def __post_init__(self) -> None:
        super().__post_init__()
        self.x = column_to_x(self.column)
        self.y = row_to_y(self.row)

    def handle_collision(self, player: Player) -> None:
        """React to the player touching this object."""

    def pick_up(self) -> None:
        """Hide the object and drop it from every group it belongs to."""
        self.visible = False
        self.kill()


GEM_COLORS: dict[int, tuple[str, int]] = {
    1: ("blue", 5000),
    2: ("orange", 2000),
    3: ("green", 500),
}


@dataclass(eq=False)
class Gem(BoardObject):
    """Gives score when picked up; the color decides how much."""

    color_num: int = 1
    score: int = field(default=0, init=False)

    kind = ObjectKind.GEM

    def __post_init__(self) -> None:
        super().__post_init__()
        if self.color_num not in GEM_COLORS:
            raise ConfigurationError(f"Unknown gem color: {self.color_num}")
        name, self.score = GEM_COLORS[self.color_num]
        self.sprite = f"gem-{name}"

    @property
    def color_name(self) -> str:
        return GEM_COLORS[self.color_num][0]

    def handle_collision(self, player: Player) -> None:
        player.add_score(self.score)
        self.pick_up()
        logger.debug("Picked up %s gem (+%d)", self.color_name, self.score)


@dataclass(eq=False)
class Key(BoardObject):
    """Must be collected before the goal row counts."""

    kind = ObjectKind.KEY

    def __post_init__(self) -> None:
        super().__post_init__()
        self.sprite = "key"

    def handle_collision(self, player: Player) -> None:
        player.goal_reachable = True
        self.pick_up()
        logger.debug("Picked up key")


@dataclass(eq=False)
class Rock(BoardObject):
    """A static obstacle the player cannot walk through."""

    kind = ObjectKind.ROCK
    is_pickable = False

    def __post_init__(self) -> None:
        super().__post_init__()
        self.sprite = "rock"


@dataclass(eq=False)
class Heart(BoardObject):
    """Gives an extra life when picked up."""

    kind = ObjectKind.HEART

    def __post_init__(self) -> None:
        super().__post_init__()
        self.sprite = "heart"

    def handle_collision(self, player: Player) -> None:
        player.lives += 1
        self.pick_up()
        logger.debug("Picked up heart, %d lives", player.lives)
