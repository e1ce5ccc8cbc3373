"""Exception types raised by the game core."""

from __future__ import annotations


class BugcrossError(Exception):
    """Base class for all game errors."""


class CollisionDataUnavailable(BugcrossError):
    """Alpha data for a collision region could not be read."""


class SpriteNotReady(BugcrossError):
    """A sprite was used before its metadata was loaded."""


class SelectionError(BugcrossError):
    """A difficulty or character that is not in the configured lists."""


class ConfigurationError(BugcrossError):
    """Level or object configuration that cannot be satisfied."""


class InvalidTransition(BugcrossError):
    """A trigger fired from a state that does not accept it."""

    def __init__(self, state: object, trigger: object) -> None:
        super().__init__(f"No transition from {state} on {trigger}")
        self.state = state
        self.trigger = trigger
