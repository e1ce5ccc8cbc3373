"""Shared constants and utility helpers for Bugcross."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Tuple
import json

COL_WIDTH = 101
ROW_HEIGHT = 83
ROW_OFFSET = 18
NUM_COLS = 8
NUM_ROWS = 10
BOARD_WIDTH = NUM_COLS * COL_WIDTH
BOARD_HEIGHT = 909
FPS = 60

ENEMY_START_X = -COL_WIDTH
PLAYER_START = (4 * COL_WIDTH, 8 * ROW_HEIGHT)

ALPHA_THRESHOLD = 128

BG_COLOR = (18, 24, 38)
TEXT_COLOR = (255, 255, 255)
SHADOW_COLOR = (15, 24, 45)
HIGHLIGHT = (1, 87, 155)
YELLOW = (255, 233, 68)

BUTTON_COLORS = {
    "default": (3, 155, 229),
    "hover": (41, 182, 246),
    "active": (2, 119, 189),
}

Position = Tuple[float, float]

DIRECTION_NAMES: tuple[str, ...] = ("left", "up", "right", "down")

DATA_DIR = Path(".bugcross")
SETTINGS_FILE = DATA_DIR / "settings.json"


def column_to_x(column: int) -> int:
    """Convert a 1-based board column into its pixel x coordinate."""
    return (column - 1) * COL_WIDTH


def row_to_y(row: int) -> int:
    """Convert a 1-based board row into its pixel y coordinate."""
    return (row - 1) * ROW_HEIGHT + ROW_OFFSET


GOAL_Y = row_to_y(1)


def ensure_data_dirs() -> None:
    """Create the data directory for the settings file."""
    DATA_DIR.mkdir(parents=True, exist_ok=True)


def step_for(direction: str, distance: float) -> Position:
    """Return the (dx, dy) offset of moving `distance` pixels in a direction."""
    if direction == "left":
        return (-distance, 0.0)
    if direction == "up":
        return (0.0, -distance)
    if direction == "right":
        return (distance, 0.0)
    if direction == "down":
        return (0.0, distance)
    raise ValueError(f"Unknown direction: {direction!r}")


def load_json(path: Path, default: Any) -> Any:
    """Load JSON data, returning default when missing or malformed."""
    if not path.exists():
        return default
    try:
        with path.open("r", encoding="utf-8") as handle:
            return json.load(handle)
    except (json.JSONDecodeError, OSError):
        return default


def save_json(path: Path, payload: Any) -> None:
    """Save JSON data with deterministic formatting."""
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as handle:
        json.dump(payload, handle, indent=2, sort_keys=True)
