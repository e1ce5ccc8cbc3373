"""Difficulty tables, character roster, and persisted user preferences."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from enum import Enum
import logging
import pygame

from .errors import SelectionError
from .utils import FPS, SETTINGS_FILE, ensure_data_dirs, load_json, save_json

logger = logging.getLogger(__name__)


class Difficulty(str, Enum):
    """Difficulty presets selectable from the main menu."""

    EASY = "easy"
    NORMAL = "normal"
    HARD = "hard"

    @property
    def label(self) -> str:
        return self.value.title()


@dataclass(frozen=True, slots=True)
class DifficultyProfile:
    """Player stats and base level population for one difficulty."""

    lives: int
    movement_speed: int
    enemy_count: int
    heart_count: int
    rock_count: int
    gem_count: int


DIFFICULTY_PROFILES: dict[Difficulty, DifficultyProfile] = {
    Difficulty.EASY: DifficultyProfile(
        lives=6, movement_speed=5, enemy_count=4, heart_count=3, rock_count=0, gem_count=2
    ),
    Difficulty.NORMAL: DifficultyProfile(
        lives=4, movement_speed=4, enemy_count=6, heart_count=2, rock_count=1, gem_count=3
    ),
    Difficulty.HARD: DifficultyProfile(
        lives=3, movement_speed=4, enemy_count=8, heart_count=1, rock_count=2, gem_count=4
    ),
}

# Every character needs a matching sprite in the sprite bank.
CHARACTERS: tuple[str, ...] = (
    "char-boy",
    "char-cat-girl",
    "char-horn-girl",
    "char-pink-girl",
    "char-princess-girl",
)


def parse_difficulty(value: Difficulty | str) -> Difficulty:
    """Resolve a difficulty name, raising SelectionError for unknown values."""
    if isinstance(value, Difficulty):
        return value
    try:
        return Difficulty(str(value).lower())
    except ValueError:
        raise SelectionError(f"Unknown difficulty: {value!r}") from None


def profile_for(difficulty: Difficulty | str) -> DifficultyProfile:
    """Return the profile for a difficulty."""
    return DIFFICULTY_PROFILES[parse_difficulty(difficulty)]


def character_at(index: int) -> str:
    """Return the character sprite id at a roster index."""
    if not 0 <= index < len(CHARACTERS):
        raise SelectionError(f"Character index out of range: {index}")
    return CHARACTERS[index]


@dataclass(slots=True)
class ControlScheme:
    """Keyboard bindings for the four movement directions."""

    up: int
    down: int
    left: int
    right: int


@dataclass(slots=True)
class GameSettings:
    """Persistent preferences for the game window and menu."""

    fullscreen: bool = False
    fps: int = FPS
    show_fps: bool = False
    last_character: str = CHARACTERS[0]
    last_difficulty: Difficulty = Difficulty.EASY
    controls: ControlScheme = field(
        default_factory=lambda: ControlScheme(
            up=pygame.K_UP,
            down=pygame.K_DOWN,
            left=pygame.K_LEFT,
            right=pygame.K_RIGHT,
        )
    )
    alt_controls: ControlScheme = field(
        default_factory=lambda: ControlScheme(
            up=pygame.K_w,
            down=pygame.K_s,
            left=pygame.K_a,
            right=pygame.K_d,
        )
    )


class SettingsManager:
    """Load, save, and mutate game settings."""

    def __init__(self) -> None:
        ensure_data_dirs()
        self.settings = self.load()

    def load(self) -> GameSettings:
        """Load game settings from disk with safe defaults."""
        raw = load_json(SETTINGS_FILE, {})
        settings = GameSettings()

        settings.fullscreen = bool(raw.get("fullscreen", settings.fullscreen))
        settings.show_fps = bool(raw.get("show_fps", settings.show_fps))
        try:
            settings.fps = max(1, int(raw.get("fps", settings.fps)))
        except (TypeError, ValueError):
            logger.warning("Ignoring malformed fps setting: %r", raw.get("fps"))

        if raw.get("last_character") in CHARACTERS:
            settings.last_character = raw["last_character"]
        if raw.get("last_difficulty") in {e.value for e in Difficulty}:
            settings.last_difficulty = Difficulty(raw["last_difficulty"])

        settings.controls = self._load_controls(raw.get("controls", {}), settings.controls)
        settings.alt_controls = self._load_controls(raw.get("alt_controls", {}), settings.alt_controls)
        return settings

    @staticmethod
    def _load_controls(payload: dict[str, int], defaults: ControlScheme) -> ControlScheme:
        return ControlScheme(
            up=int(payload.get("up", defaults.up)),
            down=int(payload.get("down", defaults.down)),
            left=int(payload.get("left", defaults.left)),
            right=int(payload.get("right", defaults.right)),
        )

    def save(self) -> None:
        """Persist settings to disk."""
        payload = asdict(self.settings)
        payload["last_difficulty"] = self.settings.last_difficulty.value
        save_json(SETTINGS_FILE, payload)

    def remember_selection(self, character: str, difficulty: Difficulty) -> None:
        """Store the menu selection used to start the last game."""
        self.settings.last_character = character
        self.settings.last_difficulty = difficulty
        self.save()
