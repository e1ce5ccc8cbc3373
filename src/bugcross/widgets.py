"""Pointer-driven UI widgets drawn on the game canvas."""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING, Callable, Iterable, Iterator

from .settings import Difficulty
from .utils import BUTTON_COLORS, HIGHLIGHT, TEXT_COLOR

if TYPE_CHECKING:
    from .render import Canvas

ClickCallback = Callable[[], None]


class WidgetState(str, Enum):
    """Visual state recomputed from the pointer every tick."""

    DEFAULT = "default"
    HOVER = "hover"
    ACTIVE = "active"


class Widget:
    """Clickable rectangle with hover/active feedback.

    The callback fires once per press: holding the button down keeps
    ``is_clicking`` set until the pointer is released or leaves.
    """

    def __init__(
        self,
        x: int,
        y: int,
        width: int,
        height: int,
        on_click: ClickCallback | None = None,
    ) -> None:
        self.x = x
        self.y = y
        self.width = width
        self.height = height
        self.on_click = on_click
        self.state = WidgetState.DEFAULT
        self.is_clicking = False

    def contains(self, px: float, py: float) -> bool:
        return self.x <= px <= self.x + self.width and self.y <= py <= self.y + self.height

    def update(self, pointer: tuple[float, float], pressed: bool) -> None:
        """Recompute state from the pointer and fire on a new press."""
        if not self.contains(*pointer):
            self.state = WidgetState.DEFAULT
            self.is_clicking = False
            return

        if not pressed:
            self.state = WidgetState.HOVER
            self.is_clicking = False
            return

        self.state = WidgetState.ACTIVE
        if not self.is_clicking:
            self.is_clicking = True
            if self.on_click is not None:
                self.on_click()

    def latch(self) -> None:
        """Ignore any press already in progress until it is released."""
        self.state = WidgetState.DEFAULT
        self.is_clicking = True

    def render(self, canvas: "Canvas") -> None:
        raise NotImplementedError


class Button(Widget):
    """Filled rectangle with centered text."""

    def __init__(
        self,
        x: int,
        y: int,
        width: int,
        height: int,
        on_click: ClickCallback | None,
        text: str,
        colors: dict[str, tuple[int, int, int]] | None = None,
    ) -> None:
        super().__init__(x, y, width, height, on_click)
        self.text = text
        self.colors = colors or BUTTON_COLORS

    def render(self, canvas: "Canvas") -> None:
        rect = (self.x, self.y, self.width, self.height)
        canvas.fill_rect(rect, self.colors[self.state.value])
        canvas.draw_text(self.text, (self.x + self.width // 2, self.y + self.height // 2), TEXT_COLOR)


class DifficultyButton(Button):
    """Button that selects a difficulty and outlines itself when selected."""

    def __init__(
        self,
        x: int,
        y: int,
        width: int,
        height: int,
        on_click: ClickCallback | None,
        difficulty: Difficulty,
        colors: dict[str, tuple[int, int, int]] | None = None,
    ) -> None:
        super().__init__(x, y, width, height, on_click, difficulty.label, colors)
        self.difficulty = difficulty
        self.is_selected = False

    def render(self, canvas: "Canvas") -> None:
        super().render(canvas)
        if self.is_selected:
            canvas.stroke_rect((self.x, self.y, self.width, self.height), HIGHLIGHT, 2)


class CharacterTile(Widget):
    """Character portrait in the selection row."""

    def __init__(
        self,
        x: int,
        y: int,
        width: int,
        height: int,
        on_click: ClickCallback | None,
        sprite: str,
    ) -> None:
        super().__init__(x, y, width, height, on_click)
        self.sprite = sprite
        self.name = sprite
        self.is_selected = False

    def render(self, canvas: "Canvas") -> None:
        if self.is_selected:
            canvas.draw_sprite("selector", self.x, self.y)
        canvas.draw_sprite(self.sprite, self.x, self.y)
        if self.state == WidgetState.HOVER:
            canvas.stroke_rect((self.x, self.y, self.width, self.height), HIGHLIGHT, 2)
        elif self.state == WidgetState.ACTIVE:
            canvas.fill_overlay((self.x, self.y, self.width, self.height), (0, 255, 255, 26))


Selectable = DifficultyButton | CharacterTile


class SelectorGroup:
    """Widgets of which at most one is selected at a time."""

    def __init__(self, members: Iterable[Selectable] = ()) -> None:
        self.members: list[Selectable] = list(members)

    def __iter__(self) -> Iterator[Selectable]:
        return iter(self.members)

    def __len__(self) -> int:
        return len(self.members)

    def select(self, widget: Selectable) -> None:
        """Select one member and clear the rest."""
        if widget not in self.members:
            raise ValueError("Widget is not part of this group")
        for member in self.members:
            member.is_selected = member is widget

    @property
    def selected(self) -> Selectable | None:
        for member in self.members:
            if member.is_selected:
                return member
        return None
