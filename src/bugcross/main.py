"""Executable entrypoint for Bugcross."""

from __future__ import annotations

from pathlib import Path
import logging
import os

from .engine import Engine


def setup_logging(debug: bool = False) -> None:
    """Configure logging."""
    level = logging.DEBUG if debug else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )


def main() -> None:
    """Launch the game."""
    setup_logging(os.getenv("BUGCROSS_DEBUG", "false").lower() == "true")
    root = Path(__file__).resolve().parents[2]
    try:
        Engine(root=root).run()
    except KeyboardInterrupt:
        logging.getLogger(__name__).info("Interrupted by user")


if __name__ == "__main__":
    main()
