from __future__ import annotations

from functools import wraps
from typing import Callable, Optional
import logging
import threading

from model.adapter import Scoreboard

from .config import Settings
from .engine import Listener, MatchScoreEngine, Player
from .persistence import PersistenceAdapter


logger = logging.getLogger(__name__)


def _mutation(method):
    """Run an engine mutation under the session lock, then save."""

    @wraps(method)
    def wrapper(self, *args, **kwargs):
        with self._lock:
            result = method(self, *args, **kwargs)
            self.save()
            return result

    return wrapper


class ScoreSession:
    """
    Owns one MatchScoreEngine for the lifetime of the app.

    Responsibilities:
    - Load the saved match once at construction
    - Forward every mutating call to the engine
    - Save after each mutation (write-through)
    - Keep a single writer by serializing calls with a lock
    """

    def __init__(self, engine: MatchScoreEngine, persistence: Optional[PersistenceAdapter] = None):
        self.engine = engine
        self.persistence = persistence
        self._lock = threading.RLock()

    @classmethod
    def open(cls, persistence: Optional[PersistenceAdapter], settings: Optional[Settings] = None) -> "ScoreSession":
        settings = settings or Settings()
        saved = persistence.load() if persistence is not None else None
        if saved is not None:
            engine = saved.to_engine(hold_finished_match=settings.hold_finished_match)
            logger.info("Restored match %s vs %s", engine.player_a_name, engine.player_b_name)
        else:
            engine = MatchScoreEngine(
                player_a_name=settings.player_a,
                player_b_name=settings.player_b,
                hold_finished_match=settings.hold_finished_match,
            )
        return cls(engine, persistence)

    # ---------------------------------------------------------
    # Core API
    # ---------------------------------------------------------

    def save(self) -> bool:
        if self.persistence is None:
            return False
        with self._lock:
            return self.persistence.save(self.engine)

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        return self.engine.subscribe(listener)

    def scoreboard(self) -> Scoreboard:
        with self._lock:
            return Scoreboard.from_engine(self.engine)

    @_mutation
    def point(self, player: Player) -> None:
        self.engine.point(player)

    @_mutation
    def undo(self) -> None:
        self.engine.undo()

    @_mutation
    def reset(self) -> None:
        self.engine.reset()

    @_mutation
    def start_next_match(self) -> None:
        self.engine.start_next_match()

    @_mutation
    def set_server(self, player: Player) -> None:
        self.engine.set_server(player)

    @_mutation
    def toggle_server(self) -> None:
        self.engine.toggle_server()

    @_mutation
    def set_player_name(self, player: Player, name: str) -> None:
        self.engine.set_player_name(player, name)
