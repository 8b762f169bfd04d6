"""Scoring core for a two player tennis/paddle match.

`engine` holds the point/game/set state machine, `persistence` the saved
record, `session` the controller that saves after every change and `cli`
the text-mode scorekeeper (`python -m tennis`).
"""

__all__ = ["engine", "persistence", "session", "config", "exceptions", "cli"]
