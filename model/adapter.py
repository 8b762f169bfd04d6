from __future__ import annotations

"""Thin adapter over `tennis.engine` to feed a front-end.

Exposes `Scoreboard`, an immutable record with everything a scoreboard view
needs: names, point calls, games, sets, who serves and whether undo is
available. Front-ends read a fresh record after every change notification and
never look at the engine's counters directly.
"""

from dataclasses import dataclass
from typing import Literal, Tuple

from tennis.engine import MatchScoreEngine


PlayerKey = Literal["A", "B"]


@dataclass(frozen=True)
class Scoreboard:
    """Display values for one moment of the match."""

    name_a: str
    name_b: str

    # Point calls ("0", "15", "30", "40", "AD")
    point_a: str
    point_b: str

    games: Tuple[int, int]
    sets: Tuple[int, int]
    server: PlayerKey

    can_undo: bool = False
    match_over: bool = False

    # "15 - 30", "Deuce" or "Ad <name>"
    game_text: str = "0 - 0"

    @classmethod
    def from_engine(cls, engine: MatchScoreEngine) -> "Scoreboard":
        s = engine.state
        return cls(
            name_a=engine.player_a_name,
            name_b=engine.player_b_name,
            point_a=engine.point_label_a,
            point_b=engine.point_label_b,
            games=(s.games_a, s.games_b),
            sets=(s.sets_a, s.sets_b),
            server="A" if s.server == "A" else "B",
            can_undo=engine.can_undo,
            match_over=s.match_over,
            game_text=engine.game_text,
        )

    def name(self, player: PlayerKey) -> str:
        return self.name_a if player == "A" else self.name_b

    def rows(self) -> Tuple[Tuple[str, bool, str, int, int], ...]:
        """Return (name, is_server, point, games, sets) for A then B."""
        return (
            (self.name_a, self.server == "A", self.point_a, self.games[0], self.sets[0]),
            (self.name_b, self.server == "B", self.point_b, self.games[1], self.sets[1]),
        )


__all__ = ["Scoreboard", "PlayerKey"]
