"""Procedural level population."""

from __future__ import annotations

from dataclasses import dataclass
import logging
import random
import pygame

from .entities import Enemy, Gem, Heart, Key, Rock
from .errors import ConfigurationError
from .settings import Difficulty, parse_difficulty, profile_for
from .sprites import SpriteBank
from .utils import NUM_COLS, NUM_ROWS

logger = logging.getLogger(__name__)

ENEMY_ROWS = (2, 6)
ENEMY_SPEED = (50.0, 400.0)
OBJECT_COLUMNS = (1, 5)
OBJECT_ROWS = (2, 6)
GEM_ROWS = (2, 7)
# Only blue and orange come out of the randomizer.
RANDOM_GEM_COLORS = (1, 2)
MAX_PLACEMENT_ATTEMPTS = 500


@dataclass(frozen=True, slots=True)
class LevelCounts:
    """How many of each entity a level contains."""

    enemies: int
    hearts: int
    rocks: int
    gems: int


def level_counts(difficulty: Difficulty | str, level: int) -> LevelCounts:
    """Scale the difficulty's base counts by level."""
    profile = profile_for(difficulty)
    return LevelCounts(
        enemies=profile.enemy_count + level % 4,
        hearts=profile.heart_count,
        rocks=profile.rock_count + level % 10,
        gems=profile.gem_count + level % 3,
    )


class OccupancyGrid:
    """Tracks which board cells already hold an object."""

    def __init__(self, columns: int = NUM_COLS, rows: int = NUM_ROWS) -> None:
        self.cells = [[False] * rows for _ in range(columns)]

    def is_free(self, column: int, row: int) -> bool:
        return not self.cells[column - 1][row - 1]

    def mark(self, column: int, row: int) -> None:
        self.cells[column - 1][row - 1] = True


class GameRandomizer:
    """Fills the board with enemies and objects for the current level."""

    def __init__(
        self,
        difficulty: Difficulty | str = Difficulty.EASY,
        level: int = 1,
        rng: random.Random | None = None,
    ) -> None:
        self.difficulty = parse_difficulty(difficulty)
        self.level = level
        self.rng = rng or random.Random()

    def set_difficulty(self, difficulty: Difficulty | str) -> None:
        self.difficulty = parse_difficulty(difficulty)

    def reset_level(self) -> None:
        self.level = 1

    def next_level(self) -> int:
        self.level += 1
        return self.level

    def counts(self) -> LevelCounts:
        return level_counts(self.difficulty, self.level)

    def randomize(
        self,
        enemies: pygame.sprite.Group,
        objects: pygame.sprite.Group,
        bank: SpriteBank,
    ) -> LevelCounts:
        """Clear both groups and repopulate them for the current level."""
        enemies.empty()
        objects.empty()
        counts = self.counts()
        occupied = OccupancyGrid()

        for _ in range(counts.enemies):
            row = self.rng.randint(*ENEMY_ROWS)
            speed = self.rng.uniform(*ENEMY_SPEED)
            enemies.add(Enemy(starting_row=row, speed=speed))

        for _ in range(counts.hearts):
            column, row = self._free_cell(occupied, OBJECT_ROWS)
            objects.add(Heart(column=column, row=row))

        for _ in range(counts.rocks):
            column, row = self._free_cell(occupied, OBJECT_ROWS)
            objects.add(Rock(column=column, row=row))

        for _ in range(counts.gems):
            column, row = self._free_cell(occupied, GEM_ROWS)
            color_num = self.rng.choice(RANDOM_GEM_COLORS)
            objects.add(Gem(column=column, row=row, color_num=color_num))

        column, row = self._free_cell(occupied, OBJECT_ROWS)
        objects.add(Key(column=column, row=row))

        for entity in [*enemies.sprites(), *objects.sprites()]:
            entity.setup_sprite_params(bank)

        logger.info(
            "Level %d (%s): %d enemies, %d hearts, %d rocks, %d gems",
            self.level,
            self.difficulty.value,
            counts.enemies,
            counts.hearts,
            counts.rocks,
            counts.gems,
        )
        return counts

    def _free_cell(self, occupied: OccupancyGrid, rows: tuple[int, int]) -> tuple[int, int]:
        for _ in range(MAX_PLACEMENT_ATTEMPTS):
            column = self.rng.randint(*OBJECT_COLUMNS)
            row = self.rng.randint(*rows)
            if occupied.is_free(column, row):
                occupied.mark(column, row)
                return column, row
        raise ConfigurationError(
            f"No free cell after {MAX_PLACEMENT_ATTEMPTS} attempts "
            f"(level {self.level}, {self.difficulty.value})"
        )
