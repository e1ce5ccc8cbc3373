from __future__ import annotations

import random
from pathlib import Path

import pytest

from bugcross.controls import InputSnapshot
from bugcross.entities import Enemy, Key, Rock
from bugcross.errors import ConfigurationError, InvalidTransition, SelectionError
from bugcross.game import TRANSITIONS, BugcrossGame, GameState, StateController, Trigger
from bugcross.randomizer import level_counts
from bugcross.settings import Difficulty, GameSettings, SettingsManager
from bugcross.sprites import SpriteBank
from bugcross.utils import GOAL_Y, PLAYER_START, load_json, save_json
from bugcross.widgets import Widget

from conftest import RecordingCanvas


def _press(widget: Widget) -> InputSnapshot:
    return InputSnapshot(
        pointer_x=widget.x + widget.width / 2,
        pointer_y=widget.y + widget.height / 2,
        pointer_pressed=True,
    )


def click(game: BugcrossGame, widget: Widget) -> GameState:
    """Hover, press, then release in place."""
    hover = _press(widget)
    hover.pointer_pressed = False
    game.tick(0.0, hover)
    state = game.tick(0.0, _press(widget))
    game.tick(0.0, hover)
    return state


def _button(game: BugcrossGame, text: str) -> Widget:
    return next(w for w in game.active_widgets() if getattr(w, "text", None) == text)


@pytest.fixture
def game(bank: SpriteBank) -> BugcrossGame:
    return BugcrossGame(bank, settings=GameSettings(), rng=random.Random(11))


@pytest.fixture
def playing(game: BugcrossGame) -> BugcrossGame:
    game.fire(Trigger.START)
    game.enemies.empty()
    game.objects.empty()
    return game


def _enemy_on_player(game: BugcrossGame) -> Enemy:
    enemy = Enemy(starting_row=2, speed=100)
    enemy.setup_sprite_params(game.sprites)
    enemy.x, enemy.y = game.player.x, game.player.y
    game.enemies.add(enemy)
    return enemy


def test_transition_table_rejects_unknown_pairs() -> None:
    controller = StateController()
    with pytest.raises(InvalidTransition):
        controller.fire(Trigger.PAUSE)
    assert controller.fire(Trigger.START) == GameState.GAME
    assert controller.fire(Trigger.LIVES_EXHAUSTED) == GameState.RETRY
    assert not controller.can_fire(Trigger.RESUME)
    assert controller.fire(Trigger.MAIN_MENU) == GameState.MENU


def test_every_state_can_reach_the_menu() -> None:
    sources = {state for state, trigger in TRANSITIONS if TRANSITIONS[(state, trigger)] == GameState.MENU}
    assert sources == {GameState.PAUSE, GameState.RETRY, GameState.NEXT_LEVEL}


def test_menu_selection_and_start(game: BugcrossGame) -> None:
    assert game.state == GameState.MENU
    click(game, game.characters.members[2])
    click(game, next(b for b in game.difficulties if b.difficulty == Difficulty.HARD))
    state = click(game, _button(game, "Start"))

    counts = level_counts("hard", 1)
    assert state == GameState.GAME
    assert game.get_current_state() == GameState.GAME
    assert game.player.sprite == "char-horn-girl"
    assert game.player.lives == 3
    assert game.player.score == 0
    assert game.randomizer.level == 1
    assert len(game.enemies) == counts.enemies
    assert len(game.objects) == counts.hearts + counts.rocks + counts.gems + 1


def test_only_one_selection_per_group(game: BugcrossGame) -> None:
    for member in game.characters.members:
        click(game, member)
    assert sum(tile.is_selected for tile in game.characters) == 1
    assert game.characters.selected is game.characters.members[-1]


def test_invalid_selection_is_fatal(game: BugcrossGame) -> None:
    with pytest.raises(SelectionError):
        game.select_character(9)
    with pytest.raises(SelectionError):
        game.select_difficulty("brutal")


def test_held_press_does_not_click_the_next_screen(game: BugcrossGame) -> None:
    start = _button(game, "Start")
    game.tick(0.0, _press(start))
    pause = _button(game, "Pause")
    held = _press(pause)
    game.tick(0.0, held)
    assert game.state == GameState.GAME


def test_pause_freezes_the_board(playing: BugcrossGame) -> None:
    enemy = Enemy(starting_row=3, speed=100)
    enemy.setup_sprite_params(playing.sprites)
    playing.enemies.add(enemy)

    click(playing, _button(playing, "Pause"))
    assert playing.state == GameState.PAUSE
    x = enemy.x
    playing.tick(1.0)
    assert enemy.x == x

    click(playing, _button(playing, "Resume"))
    assert playing.state == GameState.GAME
    playing.tick(0.5)
    assert enemy.x == x + 50


def test_several_enemies_cost_one_life_per_tick(playing: BugcrossGame) -> None:
    for _ in range(3):
        _enemy_on_player(playing)
    playing.player.x += 1

    playing.tick(0.0)
    assert playing.player.lives == 5
    assert playing.player.position == PLAYER_START


def test_losing_last_life_moves_to_retry(playing: BugcrossGame) -> None:
    playing.player.lives = 1
    playing.player.add_score(700)
    _enemy_on_player(playing)
    assert playing.tick(0.0) == GameState.RETRY

    click(playing, _button(playing, "Retry"))
    assert playing.state == GameState.GAME
    assert playing.player.lives == 6
    assert playing.player.score == 0
    assert playing.randomizer.level == 1


def test_key_pickup_happens_once(playing: BugcrossGame) -> None:
    key = Key(column=5, row=9)
    key.setup_sprite_params(playing.sprites)
    key.x, key.y = playing.player.x, playing.player.y
    playing.objects.add(key)

    playing.tick(0.0)
    assert playing.player.goal_reachable
    assert key not in playing.objects

    tests_before = playing.checker.pixel_tests
    playing.tick(0.0)
    assert playing.checker.pixel_tests == tests_before
    assert playing.player.goal_reachable


def test_goal_requires_the_key(playing: BugcrossGame) -> None:
    playing.player.y = GOAL_Y
    playing.tick(0.0)
    assert playing.state == GameState.GAME

    playing.player.goal_reachable = True
    playing.player.add_score(5000)
    assert playing.tick(0.0) == GameState.NEXT_LEVEL

    playing.fire(Trigger.CONTINUE)
    assert playing.state == GameState.GAME
    assert playing.randomizer.level == 2
    assert playing.player.score == 5000
    assert not playing.player.goal_reachable
    assert playing.player.position == PLAYER_START
    assert len(playing.enemies) == level_counts("easy", 2).enemies


def test_next_level_can_return_to_menu(playing: BugcrossGame) -> None:
    playing.player.goal_reachable = True
    playing.player.y = GOAL_Y
    playing.tick(0.0)
    click(playing, _button(playing, "Main Menu"))
    assert playing.state == GameState.MENU


def test_render_draws_each_screen(game: BugcrossGame) -> None:
    canvas = RecordingCanvas()
    game.render(canvas)
    assert "BUGCROSS" in canvas.texts()
    assert "char-princess-girl" in canvas.sprites()

    game.fire(Trigger.START)
    canvas = RecordingCanvas()
    game.render(canvas)
    assert game.player.sprite in canvas.sprites()
    assert "enemy-bug" in canvas.sprites()
    assert "Pause" in canvas.texts()

    game.fire(Trigger.PAUSE)
    canvas = RecordingCanvas()
    game.render(canvas)
    assert "Paused" in canvas.texts()


def test_settings_load_save_round_trip(monkeypatch, tmp_path: Path) -> None:
    from bugcross import settings, utils

    monkeypatch.setattr(utils, "DATA_DIR", tmp_path)
    monkeypatch.setattr(settings, "SETTINGS_FILE", tmp_path / "settings.json")

    mgr = SettingsManager()
    mgr.remember_selection("char-cat-girl", Difficulty.NORMAL)

    loaded = SettingsManager()
    assert loaded.settings.last_character == "char-cat-girl"
    assert loaded.settings.last_difficulty == Difficulty.NORMAL


def test_settings_ignore_bad_values(monkeypatch, tmp_path: Path) -> None:
    from bugcross import settings, utils

    path = tmp_path / "settings.json"
    save_json(path, {"last_character": "char-dragon", "last_difficulty": "extreme", "fps": "fast"})
    monkeypatch.setattr(utils, "DATA_DIR", tmp_path)
    monkeypatch.setattr(settings, "SETTINGS_FILE", path)

    loaded = SettingsManager().settings
    assert loaded.last_character == "char-boy"
    assert loaded.last_difficulty == Difficulty.EASY
    assert loaded.fps == 60
    assert load_json(tmp_path / "missing.json", {}) == {}


def test_game_starts_with_saved_selection(bank: SpriteBank) -> None:
    prefs = GameSettings(last_character="char-pink-girl", last_difficulty=Difficulty.NORMAL)
    game = BugcrossGame(bank, settings=prefs, rng=random.Random(2))
    game.fire(Trigger.START)
    assert game.player.sprite == "char-pink-girl"
    assert game.player.lives == 4


def test_rocks_are_not_picked_up(playing: BugcrossGame) -> None:
    rock = Rock(column=5, row=9)
    rock.setup_sprite_params(playing.sprites)
    rock.x, rock.y = playing.player.x, playing.player.y
    playing.objects.add(rock)
    tests_before = playing.checker.pixel_tests

    playing.tick(0.0)
    assert rock in playing.objects
    assert rock.visible
    assert playing.player.lives == 6
    assert playing.player.score == 0
    assert playing.checker.pixel_tests == tests_before


def test_pause_can_return_to_menu(playing: BugcrossGame) -> None:
    click(playing, _button(playing, "Pause"))
    assert playing.state == GameState.PAUSE
    click(playing, _button(playing, "Main Menu"))
    assert playing.state == GameState.MENU
    assert _button(playing, "Start") in playing.active_widgets()


def test_failed_entry_action_keeps_the_previous_state(game: BugcrossGame) -> None:
    for tile in game.characters:
        tile.is_selected = False
    with pytest.raises(SelectionError):
        game.fire(Trigger.START)
    assert game.state == GameState.MENU


def test_listener_error_rolls_back_the_transition() -> None:
    controller = StateController()

    def fail(previous: GameState, trigger: Trigger, target: GameState) -> None:
        raise ConfigurationError("no free cell")

    controller.add_listener(fail)
    with pytest.raises(ConfigurationError):
        controller.fire(Trigger.START)
    assert controller.state == GameState.MENU
