"""pygame window, clock, and main loop around the game core."""

from __future__ import annotations

from pathlib import Path
import logging
import pygame

from .controls import poll_input, scheme_bindings
from .game import BugcrossGame, GameState, Trigger
from .render import PygameCanvas
from .settings import SettingsManager
from .sprites import SpriteBank
from .utils import BOARD_HEIGHT, BOARD_WIDTH, TEXT_COLOR

logger = logging.getLogger(__name__)


class Engine:
    """Creates the window, loads sprites, and drives BugcrossGame every frame."""

    def __init__(self, root: Path, settings_manager: SettingsManager | None = None) -> None:
        pygame.init()
        pygame.font.init()

        self.root = root
        self.settings_manager = settings_manager or SettingsManager()
        self.settings = self.settings_manager.settings

        flags = pygame.FULLSCREEN | pygame.SCALED if self.settings.fullscreen else 0
        self.screen = pygame.display.set_mode((BOARD_WIDTH, BOARD_HEIGHT), flags)
        pygame.display.set_caption("Bugcross")
        self.clock = pygame.time.Clock()

        # Every sprite must be loaded before the first tick.
        self.sprites = SpriteBank(root)
        self.sprites.load_all()

        self.game = BugcrossGame(self.sprites, settings_manager=self.settings_manager)
        self.canvas = PygameCanvas(self.screen, self.sprites)
        self.bindings = scheme_bindings((self.settings.controls, self.settings.alt_controls))

    def run(self) -> None:
        """Main event/update/render loop."""
        logger.info("Starting main loop at %d fps", self.settings.fps)
        running = True
        while running:
            dt_ms = self.clock.tick(self.settings.fps)
            running = self._handle_events()
            if not running:
                break

            self.game.tick(dt_ms / 1000.0, poll_input(self.bindings))
            self._render()

        pygame.quit()

    def _handle_events(self) -> bool:
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                return False
            if event.type != pygame.KEYDOWN or event.key != pygame.K_ESCAPE:
                continue

            state = self.game.state
            if state == GameState.GAME:
                self.game.fire(Trigger.PAUSE)
            elif state == GameState.PAUSE:
                self.game.fire(Trigger.RESUME)
            elif state == GameState.MENU:
                return False
        return True

    def _render(self) -> None:
        self.game.render(self.canvas)
        if self.settings.show_fps:
            self.canvas.draw_text(
                f"{self.clock.get_fps():.0f} fps",
                (BOARD_WIDTH - 40, BOARD_HEIGHT - 16),
                TEXT_COLOR,
                size="small",
            )
        pygame.display.flip()
