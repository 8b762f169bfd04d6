from __future__ import annotations

"""Pygame scoreboard for the tennis scorekeeper.

Run with: `python -m gui.app`.

Controls:
  - A / B or click "+ A" / "+ B": point to that player
  - U / Backspace or click "Undo": undo the last point
  - R or click "Reset" twice: reset the match
  - S: toggle the server
  - N: start the next match after a finished one
  - Q/Esc: quit
"""

import argparse
import logging
from pathlib import Path
from typing import Callable, Dict, Optional

import pygame

from tennis.cli import is_valid_name
from tennis.config import Settings, setup_logging
from tennis.persistence import FileStore, PersistenceAdapter
from tennis.session import ScoreSession

from . import constants as C
from .hud import ScoreFace, hit_button


logger = logging.getLogger(__name__)

ACTIONS: Dict[str, Callable[[ScoreSession], None]] = {
    "point_a": lambda s: s.point("A"),
    "point_b": lambda s: s.point("B"),
    "undo": lambda s: s.undo(),
    "reset": lambda s: s.reset(),
    "toggle_server": lambda s: s.toggle_server(),
    "next_match": lambda s: s.start_next_match(),
}

KEY_ACTIONS: Dict[int, str] = {
    pygame.K_a: "point_a",
    pygame.K_b: "point_b",
    pygame.K_u: "undo",
    pygame.K_BACKSPACE: "undo",
    pygame.K_r: "reset",
    pygame.K_s: "toggle_server",
    pygame.K_n: "next_match",
}


def dispatch(session: ScoreSession, action: Optional[str]) -> bool:
    """Run a named action on the session. Returns True if one ran."""
    if action is None or action not in ACTIONS:
        return False
    ACTIONS[action](session)
    return True


class ResetConfirm:
    """Two-press reset. The first press arms it, the second one resets.

    Any other action disarms it.
    """

    def __init__(self):
        self.armed = False

    def filter(self, action: Optional[str]) -> Optional[str]:
        if action == "reset":
            if self.armed:
                self.armed = False
                return action
            self.armed = True
            return None
        if action is not None:
            self.armed = False
        return action


def parse_args(argv=None):
    """Parse command line flags for the GUI app."""
    p = argparse.ArgumentParser(description="Tennis scoreboard (Pygame)")
    p.add_argument("--player-a", default=None)
    p.add_argument("--player-b", default=None)
    p.add_argument("--state-dir", type=Path, default=None, help="Directory for the saved match")
    p.add_argument("--hold-finished-match", action="store_true", default=None)
    p.add_argument("--width", type=int, default=C.DEFAULT_WINDOW[0])
    p.add_argument("--height", type=int, default=C.DEFAULT_WINDOW[1])
    p.add_argument("--fps", type=int, default=C.TARGET_FPS)
    p.add_argument("--log-level", default=None)
    return p.parse_args(argv)


def run(argv=None) -> int:
    """Open the scoreboard window and loop until exit."""
    args = parse_args(argv)

    settings = Settings.from_env()
    for key in ("player_a", "player_b", "state_dir", "hold_finished_match", "log_level"):
        value = getattr(args, key)
        if value is not None:
            setattr(settings, key, value)
    setup_logging(settings.log_level)

    session = ScoreSession.open(PersistenceAdapter(FileStore(settings.state_dir)), settings)
    for player, name in (("A", args.player_a), ("B", args.player_b)):
        if name is not None and is_valid_name(name):
            session.set_player_name(player, name)

    pygame.init()
    pygame.display.set_caption("Tennis Score")
    flags = pygame.RESIZABLE
    width = max(C.MIN_WINDOW[0], args.width)
    height = max(C.MIN_WINDOW[1], args.height)
    screen = pygame.display.set_mode((width, height), flags)
    clock = pygame.time.Clock()
    face = ScoreFace(screen)
    reset_confirm = ResetConfirm()

    # Redraw only when the engine reports a change
    dirty = True

    def on_change(event: str, data: dict) -> None:
        nonlocal dirty
        dirty = True

    session.subscribe(on_change)

    running = True
    while running:
        clock.tick(args.fps)

        for event in pygame.event.get():
            action = None
            if event.type == pygame.QUIT:
                running = False
            elif event.type == pygame.VIDEORESIZE:
                size = (max(C.MIN_WINDOW[0], event.w), max(C.MIN_WINDOW[1], event.h))
                screen = pygame.display.set_mode(size, flags)
                face.resize(screen)
                dirty = True
            elif event.type == pygame.KEYDOWN:
                if event.key in (pygame.K_ESCAPE, pygame.K_q):
                    running = False
                else:
                    action = KEY_ACTIONS.get(event.key)
            elif event.type == pygame.MOUSEBUTTONDOWN and event.button == 1:
                action = hit_button(face.rects, event.pos)

            if action is not None:
                armed = reset_confirm.armed
                dispatch(session, reset_confirm.filter(action))
                dirty = dirty or armed != reset_confirm.armed

        if dirty:
            face.draw(session.scoreboard(), confirm_reset=reset_confirm.armed)
            pygame.display.flip()
            dirty = False

    pygame.quit()
    return 0


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(run())
