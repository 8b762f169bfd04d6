from __future__ import annotations

from collections import deque
from dataclasses import dataclass, asdict
from typing import Callable, Deque, Dict, Iterable, List, Literal, Optional, Tuple
import logging

from .exceptions import UnknownPlayerError


logger = logging.getLogger(__name__)

Player = Literal["A", "B"]
Listener = Callable[[str, Dict], None]

PointLabel = {0: "0", 1: "15", 2: "30", 3: "40"}

# Fixed scoring rules. There is no tie-break: a set at 6-6 runs on until
# someone leads by two games, and the match works the same way with sets.
POINTS_TO_WIN_GAME = 4
GAMES_TO_WIN_SET = 6
SETS_TO_WIN_MATCH = 6
WIN_MARGIN = 2

HISTORY_LIMIT = 25

DEFAULT_PLAYER_A = "Player A"
DEFAULT_PLAYER_B = "Player B"


@dataclass
class ScoreState:
    points_a: int = 0
    points_b: int = 0
    games_a: int = 0
    games_b: int = 0
    sets_a: int = 0
    sets_b: int = 0
    # "A" or "B"; alternates each game.
    server: str = "A"
    match_over: bool = False


@dataclass(frozen=True)
class Snapshot:
    """Immutable copy of the scoring fields, used for undo.

    Player names are not part of it.
    """

    points_a: int
    points_b: int
    games_a: int
    games_b: int
    sets_a: int
    sets_b: int
    server: str
    match_over: bool

    @classmethod
    def of(cls, state: ScoreState) -> "Snapshot":
        return cls(**asdict(state))

    def to_state(self) -> ScoreState:
        return ScoreState(**asdict(self))


def normalize_player(player: str) -> Player:
    """Return the canonical key A or B for a player.

    Lowercase keys, as used in the saved record, are accepted too.
    """
    key = str(player).strip().upper()
    if key not in ("A", "B"):
        raise UnknownPlayerError(f"Unknown player: {player!r}")
    return key  # type: ignore[return-value]


def other_player(player: Player) -> Player:
    return "B" if player == "A" else "A"


def _leader_by_margin(a: int, b: int, threshold: int) -> Optional[Player]:
    if (a >= threshold or b >= threshold) and abs(a - b) >= WIN_MARGIN:
        return "A" if a > b else "B"
    return None


def check_game_winner(points_a: int, points_b: int) -> Optional[Player]:
    """Return A or B if a game is won with a two point margin."""
    return _leader_by_margin(points_a, points_b, POINTS_TO_WIN_GAME)


def check_set_winner(games_a: int, games_b: int) -> Optional[Player]:
    """Return A or B if a set is won by two games.

    This is a no tie break model, so seven to six does not end a set.
    """
    return _leader_by_margin(games_a, games_b, GAMES_TO_WIN_SET)


def check_match_winner(sets_a: int, sets_b: int) -> Optional[Player]:
    """Return A or B once a player has six sets and a two set lead."""
    return _leader_by_margin(sets_a, sets_b, SETS_TO_WIN_MATCH)


def point_label(points: int, opponent_points: int) -> str:
    """Map a raw point count to the tennis call for one player.

    At three all and beyond both players read 40 unless one is ahead,
    in which case the leader reads AD.
    """
    if points >= 3 and opponent_points >= 3:
        if points > opponent_points:
            return "AD"
        return "40"
    return PointLabel.get(points, "40")


def game_score_string(points_a: int, points_b: int, name_a: str, name_b: str) -> str:
    """Return a friendly string for the game score within a game.

    This handles normal points and the deuce and advantage states.
    """
    if points_a >= 3 and points_b >= 3:
        if points_a == points_b:
            return "Deuce"
        return f"Ad {name_a}" if points_a > points_b else f"Ad {name_b}"
    return f"{point_label(points_a, points_b)} - {point_label(points_b, points_a)}"


class MatchScoreEngine:
    """Score state machine for a two player match.

    Every mutation goes through `point`, `undo`, `reset`, `start_next_match`,
    the server setters or `set_player_name`. Subscribed listeners receive an
    ``(event, data)`` pair after each change, in the same order the changes
    happened (a single point can emit point, game, set and match).

    With ``hold_finished_match`` false (the default) a won match immediately
    restarts from zero and clears the undo history. With it true the engine
    stays on the final score with ``match_over`` set until
    `start_next_match` is called.
    """

    def __init__(
        self,
        state: Optional[ScoreState] = None,
        history: Iterable[Snapshot] = (),
        player_a_name: str = DEFAULT_PLAYER_A,
        player_b_name: str = DEFAULT_PLAYER_B,
        hold_finished_match: bool = False,
    ):
        self.state = state if state is not None else ScoreState()
        self.state.server = normalize_player(self.state.server)
        self.history: Deque[Snapshot] = deque(history, maxlen=HISTORY_LIMIT)
        self.player_a_name = player_a_name
        self.player_b_name = player_b_name
        self.hold_finished_match = hold_finished_match
        self._listeners: List[Listener] = []

    # ------------------------------------------------------------------
    # Notifications
    # ------------------------------------------------------------------

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a change listener and return a function that removes it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _emit(self, event: str, **data) -> None:
        for listener in list(self._listeners):
            try:
                listener(event, data)
            except Exception:
                logger.exception("Score listener failed on %r event", event)

    # ------------------------------------------------------------------
    # Derived values
    # ------------------------------------------------------------------

    def name_of(self, player: Player) -> str:
        return self.player_a_name if normalize_player(player) == "A" else self.player_b_name

    @property
    def point_label_a(self) -> str:
        return point_label(self.state.points_a, self.state.points_b)

    @property
    def point_label_b(self) -> str:
        return point_label(self.state.points_b, self.state.points_a)

    @property
    def game_text(self) -> str:
        s = self.state
        return game_score_string(s.points_a, s.points_b, self.player_a_name, self.player_b_name)

    @property
    def can_undo(self) -> bool:
        return bool(self.history)

    def snapshot(self) -> Snapshot:
        return Snapshot.of(self.state)

    # ------------------------------------------------------------------
    # Scoring
    # ------------------------------------------------------------------

    def point(self, player: Player) -> None:
        """Award one point and resolve any game, set or match it completes.

        Listeners are called after the whole cascade has settled.
        """
        player = normalize_player(player)
        if self.state.match_over:
            logger.debug("Ignoring point for %s, match is over", player)
            return

        # deque(maxlen=...) drops the oldest snapshot on overflow
        self.history.append(self.snapshot())

        if player == "A":
            self.state.points_a += 1
        else:
            self.state.points_b += 1

        events: List[Tuple[str, Dict]] = [("point", {"winner": player})]
        self._resolve_game(events)

        events[0][1]["game_text"] = self.game_text
        for event, data in events:
            self._emit(event, **data)

    def _resolve_game(self, events: List[Tuple[str, Dict]]) -> None:
        s = self.state
        winner = check_game_winner(s.points_a, s.points_b)
        if winner is None:
            return

        s.points_a = 0
        s.points_b = 0
        if winner == "A":
            s.games_a += 1
        else:
            s.games_b += 1
        s.server = other_player(s.server)
        logger.info("Game %s, games %d-%d", self.name_of(winner), s.games_a, s.games_b)
        events.append(("game", {"winner": winner, "set_score": (s.games_a, s.games_b)}))

        self._resolve_set(events)

    def _resolve_set(self, events: List[Tuple[str, Dict]]) -> None:
        s = self.state
        winner = check_set_winner(s.games_a, s.games_b)
        if winner is None:
            return

        final_games = (s.games_a, s.games_b)
        s.games_a = 0
        s.games_b = 0
        if winner == "A":
            s.sets_a += 1
        else:
            s.sets_b += 1
        logger.info("Set %s %d-%d, sets %d-%d", self.name_of(winner), *final_games, s.sets_a, s.sets_b)
        events.append(("set", {"winner": winner, "final_games": final_games}))

        self._resolve_match(events)

    def _resolve_match(self, events: List[Tuple[str, Dict]]) -> None:
        s = self.state
        winner = check_match_winner(s.sets_a, s.sets_b)
        if winner is None:
            return

        final_sets = (s.sets_a, s.sets_b)
        logger.info("Match %s, sets %d-%d", self.name_of(winner), *final_sets)
        if self.hold_finished_match:
            s.match_over = True
        else:
            self._clear()
        events.append(("match", {"winner": winner, "final_sets": final_sets, "held": self.hold_finished_match}))

    # ------------------------------------------------------------------
    # Corrections
    # ------------------------------------------------------------------

    def undo(self) -> None:
        """Restore the state saved before the most recent point."""
        if not self.history:
            logger.debug("Nothing to undo")
            return
        self.state = self.history.pop().to_state()
        self._emit("undo", remaining=len(self.history))

    def _clear(self) -> None:
        self.state = ScoreState()
        self.history.clear()

    def reset(self) -> None:
        """Zero every counter and forget the undo history. Names are kept."""
        self._clear()
        self._emit("reset")

    def start_next_match(self) -> None:
        """Leave a finished match and begin a fresh one.

        Does nothing while a match is still in play.
        """
        if not self.state.match_over:
            logger.debug("Ignoring next match, current match is not over")
            return
        self._clear()
        self._emit("reset", next_match=True)

    def set_server(self, player: Player) -> None:
        self.state.server = normalize_player(player)
        self._emit("server", server=self.state.server)

    def toggle_server(self) -> None:
        self.state.server = other_player(self.state.server)
        self._emit("server", server=self.state.server)

    def set_player_name(self, player: Player, name: str) -> None:
        player = normalize_player(player)
        name = (name or "").strip()
        if not name:
            logger.debug("Ignoring blank name for player %s", player)
            return
        if player == "A":
            self.player_a_name = name
        else:
            self.player_b_name = name
        self._emit("name", player=player, name=name)


__all__ = [
    "Player",
    "ScoreState",
    "Snapshot",
    "MatchScoreEngine",
    "check_game_winner",
    "check_set_winner",
    "check_match_winner",
    "point_label",
    "game_score_string",
    "normalize_player",
    "other_player",
]
