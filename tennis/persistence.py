from __future__ import annotations

"""Save and load the match state as a single JSON record.

The record lives under one fixed key in a small key-value byte store. Field
names and the lowercase ``"a"``/``"b"`` server values are the stored format
and must not change:

    {"playerAName": ..., "playerBName": ...,
     "pointA": 0, "pointB": 0, "gamesA": 0, "gamesB": 0, "setsA": 0, "setsB": 0,
     "server": "a", "matchOver": false,
     "history": [{"pointA": ..., ..., "server": "b", "matchOver": false}, ...]}

Anything missing or malformed is treated as "no prior state".
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Protocol
import json
import logging
import os
import tempfile

from .engine import HISTORY_LIMIT, MatchScoreEngine, ScoreState, Snapshot
from .exceptions import StateDecodeError


logger = logging.getLogger(__name__)

STORAGE_KEY = "tennisScoreState"

# (record key, ScoreState attribute)
_COUNTER_FIELDS = (
    ("pointA", "points_a"),
    ("pointB", "points_b"),
    ("gamesA", "games_a"),
    ("gamesB", "games_b"),
    ("setsA", "sets_a"),
    ("setsB", "sets_b"),
)


class ByteStore(Protocol):
    def get(self, key: str) -> Optional[bytes]: ...

    def set(self, key: str, value: bytes) -> None: ...


class MemoryStore:
    """In-process store, handy for tests and throwaway sessions."""

    def __init__(self, data: Optional[Dict[str, bytes]] = None):
        self.data: Dict[str, bytes] = dict(data or {})

    def get(self, key: str) -> Optional[bytes]:
        return self.data.get(key)

    def set(self, key: str, value: bytes) -> None:
        self.data[key] = bytes(value)


class FileStore:
    """One file per key inside a directory.

    Writes go to a temporary file first and are then renamed over the
    target, so a crash mid-write leaves the previous value intact.
    """

    def __init__(self, directory: Path | str):
        self.directory = Path(directory)

    def path_for(self, key: str) -> Path:
        return self.directory / f"{key}.json"

    def get(self, key: str) -> Optional[bytes]:
        path = self.path_for(key)
        try:
            return path.read_bytes()
        except FileNotFoundError:
            return None

    def set(self, key: str, value: bytes) -> None:
        self.directory.mkdir(parents=True, exist_ok=True)
        fd, tmp = tempfile.mkstemp(prefix=f".{key}.", dir=self.directory)
        try:
            with os.fdopen(fd, "wb") as f:
                f.write(value)
            os.replace(tmp, self.path_for(key))
        except BaseException:
            if os.path.exists(tmp):
                os.unlink(tmp)
            raise


@dataclass
class PersistedMatch:
    player_a_name: str
    player_b_name: str
    state: ScoreState
    history: List[Snapshot] = field(default_factory=list)

    @classmethod
    def from_engine(cls, engine: MatchScoreEngine) -> "PersistedMatch":
        return cls(
            player_a_name=engine.player_a_name,
            player_b_name=engine.player_b_name,
            state=ScoreState(**vars(engine.state)),
            history=list(engine.history),
        )

    def to_engine(self, hold_finished_match: bool = False) -> MatchScoreEngine:
        return MatchScoreEngine(
            state=ScoreState(**vars(self.state)),
            history=self.history,
            player_a_name=self.player_a_name,
            player_b_name=self.player_b_name,
            hold_finished_match=hold_finished_match,
        )


def _scoring_to_record(s) -> Dict:
    record = {key: getattr(s, attr) for key, attr in _COUNTER_FIELDS}
    record["server"] = s.server.lower()
    record["matchOver"] = s.match_over
    return record


def _scoring_from_record(record, where: str) -> Dict:
    if not isinstance(record, dict):
        raise StateDecodeError(f"{where}: expected an object")
    values = {}
    for key, attr in _COUNTER_FIELDS:
        value = record.get(key)
        # bool is an int subclass but never a valid counter
        if not isinstance(value, int) or isinstance(value, bool):
            raise StateDecodeError(f"{where}: {key} must be an integer")
        if value < 0:
            raise StateDecodeError(f"{where}: {key} must not be negative")
        values[attr] = value
    server = record.get("server")
    if server not in ("a", "b"):
        raise StateDecodeError(f"{where}: server must be 'a' or 'b'")
    values["server"] = server.upper()
    match_over = record.get("matchOver")
    if not isinstance(match_over, bool):
        raise StateDecodeError(f"{where}: matchOver must be a boolean")
    values["match_over"] = match_over
    return values


def encode_match(match: PersistedMatch) -> bytes:
    record = {
        "playerAName": match.player_a_name,
        "playerBName": match.player_b_name,
    }
    record.update(_scoring_to_record(match.state))
    record["history"] = [_scoring_to_record(snap) for snap in match.history]
    return json.dumps(record).encode("utf-8")


def decode_match(data: bytes) -> PersistedMatch:
    """Parse a stored record, raising StateDecodeError if it is unusable."""
    try:
        record = json.loads(data.decode("utf-8"))
    except (UnicodeDecodeError, ValueError) as e:
        raise StateDecodeError(f"not valid JSON: {e}") from e
    if not isinstance(record, dict):
        raise StateDecodeError("record must be a JSON object")

    names = []
    for key in ("playerAName", "playerBName"):
        name = record.get(key)
        if not isinstance(name, str):
            raise StateDecodeError(f"{key} must be a string")
        names.append(name)

    state = ScoreState(**_scoring_from_record(record, "state"))

    raw_history = record.get("history")
    if not isinstance(raw_history, list):
        raise StateDecodeError("history must be a list")
    history = [
        Snapshot(**_scoring_from_record(item, f"history[{i}]"))
        for i, item in enumerate(raw_history)
    ]

    return PersistedMatch(
        player_a_name=names[0],
        player_b_name=names[1],
        state=state,
        history=history[-HISTORY_LIMIT:],
    )


class PersistenceAdapter:
    """Reads and writes the match record under a single fixed key."""

    def __init__(self, store: ByteStore, key: str = STORAGE_KEY):
        self.store = store
        self.key = key

    def load(self) -> Optional[PersistedMatch]:
        try:
            data = self.store.get(self.key)
        except OSError as e:
            logger.warning("Could not read saved match %r: %s", self.key, e)
            return None
        if data is None:
            logger.debug("No saved match under %r", self.key)
            return None
        try:
            return decode_match(data)
        except StateDecodeError as e:
            logger.warning("Ignoring unreadable saved match %r: %s", self.key, e)
            return None

    def save(self, engine: MatchScoreEngine) -> bool:
        data = encode_match(PersistedMatch.from_engine(engine))
        try:
            self.store.set(self.key, data)
        except OSError:
            logger.exception("Failed to save match state under %r", self.key)
            return False
        return True


__all__ = [
    "STORAGE_KEY",
    "MemoryStore",
    "FileStore",
    "PersistedMatch",
    "PersistenceAdapter",
    "encode_match",
    "decode_match",
]
