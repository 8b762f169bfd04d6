"""Pygame scoreboard for the tennis scorekeeper.

Contains the window constants, the score face that draws a `Scoreboard`, and
the application entry point (`python -m gui.app`).
"""

__all__ = [
    "constants",
    "hud",
    "app",
]
