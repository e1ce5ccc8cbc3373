"""Screen state machine, per-tick update, and rendering of every screen."""

from __future__ import annotations

from enum import Enum, auto
from typing import Callable
import logging
import random
import pygame

from .collision import CollisionChecker
from .controls import InputSnapshot
from .entities import BoardObject, Player
from .errors import InvalidTransition, SelectionError
from .randomizer import GameRandomizer
from .render import Canvas
from .settings import CHARACTERS, Difficulty, GameSettings, SettingsManager, character_at, parse_difficulty
from .sprites import SpriteBank
from .utils import (
    BG_COLOR,
    BOARD_HEIGHT,
    BOARD_WIDTH,
    COL_WIDTH,
    GOAL_Y,
    NUM_COLS,
    NUM_ROWS,
    ROW_HEIGHT,
    TEXT_COLOR,
    YELLOW,
)
from .widgets import Button, CharacterTile, DifficultyButton, SelectorGroup, Widget

logger = logging.getLogger(__name__)


class GameState(str, Enum):
    """Screens the game can be on."""

    MENU = "menu"
    GAME = "game"
    PAUSE = "pause"
    RETRY = "retry"
    NEXT_LEVEL = "nextLevel"


class Trigger(Enum):
    """Events that move the game between screens."""

    START = auto()
    PAUSE = auto()
    RESUME = auto()
    MAIN_MENU = auto()
    RETRY = auto()
    CONTINUE = auto()
    LIVES_EXHAUSTED = auto()
    GOAL_REACHED = auto()


TRANSITIONS: dict[tuple[GameState, Trigger], GameState] = {
    (GameState.MENU, Trigger.START): GameState.GAME,
    (GameState.GAME, Trigger.PAUSE): GameState.PAUSE,
    (GameState.GAME, Trigger.LIVES_EXHAUSTED): GameState.RETRY,
    (GameState.GAME, Trigger.GOAL_REACHED): GameState.NEXT_LEVEL,
    (GameState.PAUSE, Trigger.RESUME): GameState.GAME,
    (GameState.PAUSE, Trigger.MAIN_MENU): GameState.MENU,
    (GameState.RETRY, Trigger.RETRY): GameState.GAME,
    (GameState.RETRY, Trigger.MAIN_MENU): GameState.MENU,
    (GameState.NEXT_LEVEL, Trigger.CONTINUE): GameState.GAME,
    (GameState.NEXT_LEVEL, Trigger.MAIN_MENU): GameState.MENU,
}

TransitionListener = Callable[[GameState, Trigger, GameState], None]


class StateController:
    """Holds the current screen and applies the transition table."""

    def __init__(self, initial_state: GameState = GameState.MENU) -> None:
        self._state = initial_state
        self._listeners: list[TransitionListener] = []

    @property
    def state(self) -> GameState:
        return self._state

    def can_fire(self, trigger: Trigger) -> bool:
        return (self._state, trigger) in TRANSITIONS

    def fire(self, trigger: Trigger) -> GameState:
        """Move to the state the table maps (current state, trigger) to."""
        try:
            target = TRANSITIONS[(self._state, trigger)]
        except KeyError:
            raise InvalidTransition(self._state, trigger) from None
        previous = self._state
        self._state = target
        try:
            for listener in self._listeners:
                listener(previous, trigger, target)
        except Exception:
            self._state = previous
            raise
        logger.info("State transition: %s -> %s (%s)", previous.value, target.value, trigger.name)
        return target

    def add_listener(self, callback: TransitionListener) -> None:
        self._listeners.append(callback)


ROW_SPRITES = ("water-block",) + ("stone-block",) * 6 + ("grass-block",) * (NUM_ROWS - 7)

TILE_SIZE = (COL_WIDTH, 171)
TILE_TOP = 150
DIFFICULTY_TOP = 420
DIFFICULTY_SIZE = (140, 44)
START_RECT = (304, 760, 200, 56)
PAUSE_RECT = (688, 8, 110, 36)
PRIMARY_RECT = (304, 520, 200, 52)
SECONDARY_RECT = (304, 600, 200, 52)


class BugcrossGame:
    """Owns the player, the board, the screens, and the per-tick loop.

    The game never touches the window or the event queue: it is driven by
    ``tick`` with an input snapshot and draws through a ``Canvas``.
    """

    def __init__(
        self,
        sprites: SpriteBank,
        settings: GameSettings | None = None,
        settings_manager: SettingsManager | None = None,
        rng: random.Random | None = None,
        board_size: tuple[int, int] = (BOARD_WIDTH, BOARD_HEIGHT),
    ) -> None:
        self.sprites = sprites
        self.settings_manager = settings_manager
        if settings is None:
            settings = settings_manager.settings if settings_manager else GameSettings()
        self.settings = settings
        self.board_size = board_size

        self.controller = StateController()
        self.controller.add_listener(self._on_transition)
        self.player = Player(board_size=board_size)
        self.randomizer = GameRandomizer(rng=rng)
        self.enemies: pygame.sprite.Group = pygame.sprite.Group()
        self.objects: pygame.sprite.Group = pygame.sprite.Group()
        self.checker = CollisionChecker(sprites, board_size)

        self.characters = SelectorGroup()
        self.difficulties = SelectorGroup()
        self.screen_widgets: dict[GameState, list[Widget]] = self._build_widgets()
        self._apply_saved_selection()

    # -- public surface ---------------------------------------------------

    @property
    def state(self) -> GameState:
        return self.controller.state

    def get_current_state(self) -> GameState:
        return self.controller.state

    def active_widgets(self) -> list[Widget]:
        """Widgets of the current screen."""
        return self.screen_widgets[self.state]

    def fire(self, trigger: Trigger) -> GameState:
        """Apply a transition, running its entry actions."""
        return self.controller.fire(trigger)

    def select_character(self, index: int) -> str:
        sprite = character_at(index)
        self.characters.select(self.characters.members[index])
        return sprite

    def select_difficulty(self, difficulty: Difficulty | str) -> Difficulty:
        value = parse_difficulty(difficulty)
        for button in self.difficulties:
            if button.difficulty == value:
                self.difficulties.select(button)
                return value
        raise SelectionError(f"No difficulty button for {value.value}")

    def tick(self, dt: float, snapshot: InputSnapshot | None = None) -> GameState:
        """Advance the active screen by one frame."""
        snapshot = snapshot or InputSnapshot()
        entered = self.state

        for widget in self.active_widgets():
            widget.update(snapshot.pointer, snapshot.pointer_pressed)
            if self.state != entered:
                return self.state

        if self.state == GameState.GAME:
            self.player.set_key_states(snapshot.directions)
            self._update_game(dt)
            trigger = self._implicit_trigger()
            if trigger is not None:
                self.fire(trigger)
        return self.state

    # -- gameplay ---------------------------------------------------------

    def _update_game(self, dt: float) -> None:
        for enemy in self.enemies:
            enemy.update(dt, self.board_size[0])
        self.player.update(self.objects.sprites(), self.checker)
        self._check_enemy_collisions()
        self._check_object_collisions()

    def _check_enemy_collisions(self) -> bool:
        """Cost one life when any enemy touches the player; at most once per tick."""
        for enemy in self.enemies:
            if self.checker.check(self.player, enemy):
                self.player.lose_life()
                return True
        return False

    def _check_object_collisions(self) -> list[BoardObject]:
        """Let every touched pickable object react to the player."""
        touched: list[BoardObject] = []
        for obj in self.objects.sprites():
            if not obj.is_pickable:
                continue
            if self.checker.check(self.player, obj):
                obj.handle_collision(self.player)
                touched.append(obj)
        return touched

    def _implicit_trigger(self) -> Trigger | None:
        if self.player.lives <= 0:
            return Trigger.LIVES_EXHAUSTED
        if self.player.goal_reachable and self.player.y <= GOAL_Y:
            return Trigger.GOAL_REACHED
        return None

    def _on_transition(self, previous: GameState, trigger: Trigger, target: GameState) -> None:
        if trigger == Trigger.START:
            self._start_new_game()
        elif trigger == Trigger.RETRY:
            self._restart()
        elif trigger == Trigger.CONTINUE:
            self._advance_level()
        self.player.release_keys()
        for widget in self.screen_widgets[target]:
            widget.latch()

    def _start_new_game(self) -> None:
        character = self.characters.selected
        difficulty = self.difficulties.selected
        if character is None or difficulty is None:
            raise SelectionError("A character and a difficulty must be selected")
        self.player.setup_sprite(character.sprite, self.sprites)
        self.randomizer.set_difficulty(difficulty.difficulty)
        if self.settings_manager is not None:
            self.settings_manager.remember_selection(character.sprite, difficulty.difficulty)
        logger.info("New game: %s on %s", character.sprite, difficulty.difficulty.value)
        self._restart()

    def _restart(self) -> None:
        self.player.init_properties(self.randomizer.difficulty)
        self.player.reset_score()
        self.randomizer.reset_level()
        self._begin_level()

    def _advance_level(self) -> None:
        self.randomizer.next_level()
        self._begin_level()

    def _begin_level(self) -> None:
        self.player.goal_reachable = False
        self.player.reset_position()
        self.randomizer.randomize(self.enemies, self.objects, self.sprites)

    # -- widgets ----------------------------------------------------------

    def _build_widgets(self) -> dict[GameState, list[Widget]]:
        def firing(trigger: Trigger) -> Callable[[], None]:
            return lambda: self.fire(trigger)

        tile_left = (self.board_size[0] - len(CHARACTERS) * TILE_SIZE[0]) // 2
        for index, sprite in enumerate(CHARACTERS):
            self.characters.members.append(
                CharacterTile(
                    tile_left + index * TILE_SIZE[0],
                    TILE_TOP,
                    *TILE_SIZE,
                    on_click=lambda index=index: self.select_character(index),
                    sprite=sprite,
                )
            )

        gap = 20
        width, height = DIFFICULTY_SIZE
        row_left = (self.board_size[0] - len(Difficulty) * width - (len(Difficulty) - 1) * gap) // 2
        for index, difficulty in enumerate(Difficulty):
            self.difficulties.members.append(
                DifficultyButton(
                    row_left + index * (width + gap),
                    DIFFICULTY_TOP,
                    width,
                    height,
                    on_click=lambda difficulty=difficulty: self.select_difficulty(difficulty),
                    difficulty=difficulty,
                )
            )

        def main_menu() -> Button:
            return Button(*SECONDARY_RECT, firing(Trigger.MAIN_MENU), "Main Menu")

        return {
            GameState.MENU: [
                *self.characters,
                *self.difficulties,
                Button(*START_RECT, firing(Trigger.START), "Start"),
            ],
            GameState.GAME: [Button(*PAUSE_RECT, firing(Trigger.PAUSE), "Pause")],
            GameState.PAUSE: [Button(*PRIMARY_RECT, firing(Trigger.RESUME), "Resume"), main_menu()],
            GameState.RETRY: [Button(*PRIMARY_RECT, firing(Trigger.RETRY), "Retry"), main_menu()],
            GameState.NEXT_LEVEL: [
                Button(*PRIMARY_RECT, firing(Trigger.CONTINUE), "Next Level"),
                main_menu(),
            ],
        }

    def _apply_saved_selection(self) -> None:
        character = self.settings.last_character
        index = CHARACTERS.index(character) if character in CHARACTERS else 0
        self.select_character(index)
        self.select_difficulty(self.settings.last_difficulty)

    # -- rendering --------------------------------------------------------

    def render(self, canvas: Canvas) -> None:
        """Draw the current screen."""
        canvas.clear(BG_COLOR)
        state = self.state
        if state == GameState.MENU:
            self._render_menu(canvas)
        else:
            self._render_board(canvas)
            self._render_hud(canvas)
            if state == GameState.PAUSE:
                self._render_overlay(canvas, "Paused")
            elif state == GameState.RETRY:
                self._render_overlay(canvas, "Game Over", f"Final score: {self.player.score}")
            elif state == GameState.NEXT_LEVEL:
                self._render_overlay(
                    canvas,
                    f"Level {self.randomizer.level} cleared",
                    f"Score: {self.player.score}",
                )
        for widget in self.active_widgets():
            widget.render(canvas)

    def _render_menu(self, canvas: Canvas) -> None:
        center_x = self.board_size[0] // 2
        canvas.draw_text("BUGCROSS", (center_x, 70), YELLOW, size="title", shadow=True)
        canvas.draw_text("Choose your character", (center_x, 135), TEXT_COLOR)
        canvas.draw_text("Difficulty", (center_x, DIFFICULTY_TOP - 30), TEXT_COLOR)

    def _render_board(self, canvas: Canvas) -> None:
        for row, sprite_id in enumerate(ROW_SPRITES):
            for col in range(NUM_COLS):
                canvas.draw_sprite(sprite_id, col * COL_WIDTH, row * ROW_HEIGHT)
        for obj in self.objects:
            if obj.visible:
                canvas.draw_sprite(obj.sprite, obj.x, obj.y)
        for enemy in self.enemies:
            canvas.draw_sprite(enemy.sprite, enemy.x, enemy.y)
        if self.player.sprite is not None:
            canvas.draw_sprite(self.player.sprite, self.player.x, self.player.y)

    def _render_hud(self, canvas: Canvas) -> None:
        player = self.player
        line = f"Lives: {player.lives}   Score: {player.score}   Level: {self.randomizer.level}"
        canvas.draw_text(line, (250, 26), TEXT_COLOR, size="small", shadow=True)
        if player.goal_reachable:
            canvas.draw_text("KEY", (560, 26), YELLOW, size="small", shadow=True)

    def _render_overlay(self, canvas: Canvas, headline: str, detail: str | None = None) -> None:
        width, height = self.board_size
        canvas.fill_overlay((0, 0, width, height), (0, 0, 0, 150))
        canvas.draw_text(headline, (width // 2, 380), YELLOW, size="title", shadow=True)
        if detail:
            canvas.draw_text(detail, (width // 2, 450), TEXT_COLOR)