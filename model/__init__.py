"""Model adapter package for the tennis scorekeeper.

This package provides thin adapters over `tennis.engine` so that front-ends
(the text CLI and the Pygame scoreboard) can render the current score without
re-implementing the scoring rules.
"""

__all__ = ["adapter"]
