from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Mapping, Optional
import logging
import os
import sys

from .engine import DEFAULT_PLAYER_A, DEFAULT_PLAYER_B


DEFAULT_STATE_DIR = Path.home() / ".tennis-score-watch"
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

_TRUE = {"1", "true", "yes", "on"}


@dataclass
class Settings:
    player_a: str = DEFAULT_PLAYER_A
    player_b: str = DEFAULT_PLAYER_B
    state_dir: Path = field(default_factory=lambda: DEFAULT_STATE_DIR)
    # Keep a won match on screen until the next one is started explicitly
    hold_finished_match: bool = False
    log_level: str = "WARNING"

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        """Build settings from TENNIS_SCORE_* environment variables."""
        env = os.environ if environ is None else environ
        settings = cls()
        if env.get("TENNIS_SCORE_DIR"):
            settings.state_dir = Path(env["TENNIS_SCORE_DIR"]).expanduser()
        if env.get("TENNIS_SCORE_HOLD_MATCH"):
            settings.hold_finished_match = env["TENNIS_SCORE_HOLD_MATCH"].strip().lower() in _TRUE
        if env.get("TENNIS_SCORE_LOG_LEVEL"):
            settings.log_level = env["TENNIS_SCORE_LOG_LEVEL"].strip().upper()
        return settings


def setup_logging(level: str = "WARNING") -> None:
    """Configure root logging for the command line and GUI entry points."""
    logging.basicConfig(
        level=getattr(logging, str(level).upper(), logging.WARNING),
        format=LOG_FORMAT,
        handlers=[logging.StreamHandler(sys.stderr)],
    )
