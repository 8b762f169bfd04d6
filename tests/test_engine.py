import logging
import random

import pytest

from tennis.engine import (
    DEFAULT_PLAYER_A,
    HISTORY_LIMIT,
    MatchScoreEngine,
    ScoreState,
    Snapshot,
    check_game_winner,
    check_match_winner,
    check_set_winner,
    game_score_string,
    point_label,
)
from tennis.exceptions import UnknownPlayerError


# ---------------------------------------------------------
# Helpers
# ---------------------------------------------------------

def win_points(engine, player, n):
    for _ in range(n):
        engine.point(player)


def win_games(engine, player, n):
    for _ in range(n):
        win_points(engine, player, 4)


def counters(engine):
    s = engine.state
    return (s.points_a, s.points_b, s.games_a, s.games_b, s.sets_a, s.sets_b)


# ---------------------------------------------------------
# Rule helpers
# ---------------------------------------------------------

@pytest.mark.parametrize("a, b, expected", [
    (4, 0, "A"),
    (4, 2, "A"),
    (4, 3, None),
    (3, 0, None),
    (5, 3, "A"),
    (2, 4, "B"),
    (7, 8, None),
])
def test_check_game_winner(a, b, expected):
    assert check_game_winner(a, b) == expected


def test_check_set_winner_has_no_tiebreak():
    assert check_set_winner(6, 4) == "A"
    assert check_set_winner(6, 5) is None
    assert check_set_winner(7, 6) is None
    assert check_set_winner(8, 6) == "A"
    assert check_set_winner(3, 6) == "B"


def test_check_match_winner_needs_margin():
    assert check_match_winner(6, 0) == "A"
    assert check_match_winner(6, 5) is None
    assert check_match_winner(5, 7) == "B"


@pytest.mark.parametrize("points, opponent, label", [
    (0, 0, "0"),
    (1, 0, "15"),
    (2, 3, "30"),
    (3, 1, "40"),
    (3, 3, "40"),
    (4, 3, "AD"),
    (3, 4, "40"),
    (6, 6, "40"),
    (4, 2, "40"),
])
def test_point_label(points, opponent, label):
    assert point_label(points, opponent) == label


def test_game_score_string():
    assert game_score_string(0, 0, "Ann", "Bea") == "0 - 0"
    assert game_score_string(2, 1, "Ann", "Bea") == "30 - 15"
    assert game_score_string(3, 3, "Ann", "Bea") == "Deuce"
    assert game_score_string(4, 5, "Ann", "Bea") == "Ad Bea"


# ---------------------------------------------------------
# Scoring scenarios
# ---------------------------------------------------------

def test_initial_state():
    engine = MatchScoreEngine()

    assert counters(engine) == (0, 0, 0, 0, 0, 0)
    assert engine.state.server == "A"
    assert engine.state.match_over is False
    assert engine.player_a_name == "Player A"
    assert engine.player_b_name == "Player B"
    assert not engine.can_undo


def test_game_win_from_forty_love():
    engine = MatchScoreEngine(ScoreState(points_a=3))

    engine.point("A")

    assert counters(engine) == (0, 0, 1, 0, 0, 0)
    assert engine.state.server == "B"


def test_deuce_and_advantage_labels():
    engine = MatchScoreEngine(ScoreState(points_a=3, points_b=3))

    assert engine.point_label_a == "40"
    assert engine.point_label_b == "40"

    engine.point("A")
    assert engine.point_label_a == "AD"
    assert engine.point_label_b == "40"

    engine.point("B")
    assert engine.game_text == "Deuce"

    engine.point("B")
    engine.point("B")
    assert counters(engine) == (0, 0, 0, 1, 0, 0)


def test_set_win_from_five_love():
    engine = MatchScoreEngine(ScoreState(games_a=5))

    win_games(engine, "A", 1)

    assert counters(engine) == (0, 0, 0, 0, 1, 0)


def test_set_runs_past_six_without_margin():
    engine = MatchScoreEngine()
    for _ in range(5):
        win_games(engine, "A", 1)
        win_games(engine, "B", 1)
    win_games(engine, "A", 1)
    win_games(engine, "B", 1)
    assert (engine.state.games_a, engine.state.games_b) == (6, 6)

    win_games(engine, "A", 1)
    assert (engine.state.games_a, engine.state.games_b) == (7, 6)
    assert engine.state.sets_a == 0

    win_games(engine, "A", 1)
    assert counters(engine) == (0, 0, 0, 0, 1, 0)


def test_match_win_restarts_everything():
    engine = MatchScoreEngine(ScoreState(points_a=3, games_a=5, sets_a=5, server="B"))
    engine.point("B")
    engine.undo()
    engine.point("A")

    assert counters(engine) == (0, 0, 0, 0, 0, 0)
    assert engine.state.server == "A"
    assert engine.state.match_over is False
    assert not engine.can_undo


def test_match_win_puts_server_back_to_a():
    # the last game flips A to B, the match restart must bring it back
    engine = MatchScoreEngine(ScoreState(points_a=3, games_a=5, sets_a=5, server="A"))

    engine.point("A")

    assert counters(engine) == (0, 0, 0, 0, 0, 0)
    assert engine.state.server == "A"


def test_match_needs_two_set_lead():
    engine = MatchScoreEngine(ScoreState(points_b=3, games_b=5, sets_a=5, sets_b=5))

    engine.point("B")

    assert (engine.state.sets_a, engine.state.sets_b) == (5, 6)
    assert engine.can_undo


def test_server_flips_once_per_game():
    engine = MatchScoreEngine()

    win_points(engine, "A", 3)
    assert engine.state.server == "A"
    win_points(engine, "A", 1)
    assert engine.state.server == "B"
    win_games(engine, "B", 1)
    assert engine.state.server == "A"


def test_counters_never_negative():
    rng = random.Random(7)
    engine = MatchScoreEngine()

    for _ in range(3000):
        engine.point(rng.choice("AB"))
        if rng.random() < 0.1:
            engine.undo()
        assert all(c >= 0 for c in counters(engine))
        assert len(engine.history) <= HISTORY_LIMIT
        assert engine.state.server in ("A", "B")


def test_lowercase_player_keys_are_accepted():
    engine = MatchScoreEngine()

    engine.point("a")
    engine.point("b")

    assert (engine.state.points_a, engine.state.points_b) == (1, 1)


def test_lowercase_server_in_initial_state_is_normalized():
    engine = MatchScoreEngine(ScoreState(points_a=3, server="a"))

    assert engine.state.server == "A"
    engine.point("A")
    assert engine.state.server == "B"


def test_unknown_player_raises():
    engine = MatchScoreEngine()

    with pytest.raises(UnknownPlayerError):
        engine.point("C")
    assert not engine.can_undo


# ---------------------------------------------------------
# Undo / reset
# ---------------------------------------------------------

def test_point_then_undo_restores_state():
    engine = MatchScoreEngine(ScoreState(points_a=2, points_b=1, games_a=3, games_b=4, sets_a=1, sets_b=2, server="B"))
    before = engine.snapshot()

    engine.point("A")
    engine.undo()

    assert engine.snapshot() == before


def test_undo_across_game_boundary():
    engine = MatchScoreEngine()
    win_points(engine, "A", 4)
    assert engine.state.server == "B"

    engine.undo()

    assert counters(engine) == (3, 0, 0, 0, 0, 0)
    assert engine.state.server == "A"


def test_undo_is_repeatable_and_stops_when_empty():
    engine = MatchScoreEngine()
    win_points(engine, "B", 2)

    engine.undo()
    engine.undo()
    engine.undo()

    assert counters(engine) == (0, 0, 0, 0, 0, 0)
    assert not engine.can_undo


def test_undo_on_fresh_engine_is_noop():
    engine = MatchScoreEngine()
    before = engine.snapshot()

    engine.undo()

    assert engine.snapshot() == before


def test_undo_keeps_names():
    engine = MatchScoreEngine()
    engine.point("A")
    engine.set_player_name("A", "Ann")

    engine.undo()

    assert engine.player_a_name == "Ann"


def test_history_is_bounded_fifo():
    engine = MatchScoreEngine()

    # alternating points never open a two point lead
    for i in range(30):
        engine.point("A" if i % 2 == 0 else "B")

    assert len(engine.history) == HISTORY_LIMIT
    assert engine.history[0] == Snapshot(3, 2, 0, 0, 0, 0, "A", False)
    assert engine.history[-1] == Snapshot(15, 14, 0, 0, 0, 0, "A", False)


def test_reset_is_idempotent_and_keeps_names():
    engine = MatchScoreEngine(player_a_name="Ann", player_b_name="Bea")
    win_games(engine, "A", 3)
    engine.point("B")

    engine.reset()
    once = (engine.snapshot(), list(engine.history))
    engine.reset()

    assert (engine.snapshot(), list(engine.history)) == once
    assert counters(engine) == (0, 0, 0, 0, 0, 0)
    assert engine.state.server == "A"
    assert (engine.player_a_name, engine.player_b_name) == ("Ann", "Bea")


# ---------------------------------------------------------
# Finished match
# ---------------------------------------------------------

def test_point_is_noop_when_match_over():
    engine = MatchScoreEngine(ScoreState(points_a=1, games_b=2, sets_a=6, match_over=True))
    before = engine.snapshot()

    engine.point("A")
    engine.point("B")

    assert engine.snapshot() == before
    assert not engine.can_undo


def test_hold_finished_match_keeps_final_score():
    engine = MatchScoreEngine(ScoreState(points_a=3, games_a=5, sets_a=5), hold_finished_match=True)

    engine.point("A")

    assert engine.state.match_over is True
    assert (engine.state.sets_a, engine.state.sets_b) == (6, 0)
    assert (engine.state.games_a, engine.state.games_b) == (0, 0)

    engine.point("B")
    assert engine.state.points_b == 0

    engine.start_next_match()
    assert counters(engine) == (0, 0, 0, 0, 0, 0)
    assert engine.state.match_over is False
    assert not engine.can_undo


def test_hold_finished_match_can_be_undone():
    engine = MatchScoreEngine(ScoreState(points_a=3, games_a=5, sets_a=5), hold_finished_match=True)

    engine.point("A")
    engine.undo()

    assert counters(engine) == (3, 0, 5, 0, 5, 0)
    assert engine.state.match_over is False


def test_start_next_match_is_noop_during_play():
    engine = MatchScoreEngine()
    win_games(engine, "A", 1)
    engine.point("A")
    engine.point("B")
    before = engine.snapshot()
    history = list(engine.history)

    engine.start_next_match()

    assert engine.snapshot() == before
    assert list(engine.history) == history
    assert before.server == "B"


# ---------------------------------------------------------
# Server and names
# ---------------------------------------------------------

def test_set_and_toggle_server():
    engine = MatchScoreEngine()

    engine.set_server("B")
    assert engine.state.server == "B"
    engine.toggle_server()
    assert engine.state.server == "A"
    assert not engine.can_undo


def test_set_player_name_strips_and_ignores_blank():
    engine = MatchScoreEngine()
    events = []
    engine.subscribe(lambda event, data: events.append(event))

    engine.set_player_name("b", "  Bea ")
    assert engine.player_b_name == "Bea"

    engine.set_player_name("A", "   ")
    engine.set_player_name("B", "")
    assert (engine.player_a_name, engine.player_b_name) == (DEFAULT_PLAYER_A, "Bea")
    assert events == ["name"]


# ---------------------------------------------------------
# Notifications
# ---------------------------------------------------------

def test_cascade_emits_events_in_order():
    engine = MatchScoreEngine(ScoreState(points_a=3, games_a=5, sets_a=5))
    events = []
    engine.subscribe(lambda event, data: events.append((event, data)))

    engine.point("A")

    assert [e for e, _ in events] == ["point", "game", "set", "match"]
    assert events[1][1]["set_score"] == (6, 0)
    assert events[2][1]["final_games"] == (6, 0)
    assert events[3][1]["final_sets"] == (6, 0)
    assert events[3][1]["winner"] == "A"


def test_listeners_see_settled_state():
    engine = MatchScoreEngine(ScoreState(points_a=3, games_a=5))
    seen = {}

    def record(event, data):
        s = engine.state
        seen[event] = (s.points_a, s.games_a, s.sets_a, data)

    engine.subscribe(record)
    engine.point("A")

    assert seen["point"][:3] == (0, 0, 1)
    assert seen["point"][3]["game_text"] == "0 - 0"
    assert seen["game"][:3] == (0, 0, 1)
    assert seen["set"][:3] == (0, 0, 1)


def test_unsubscribe_stops_events():
    engine = MatchScoreEngine()
    events = []
    unsubscribe = engine.subscribe(lambda event, data: events.append(event))

    engine.point("A")
    unsubscribe()
    engine.point("A")

    assert events == ["point"]


def test_failing_listener_is_logged_and_others_still_run(caplog):
    engine = MatchScoreEngine()
    seen = []

    def broken(event, data):
        raise RuntimeError("boom")

    engine.subscribe(broken)
    engine.subscribe(lambda event, data: seen.append(event))

    with caplog.at_level(logging.ERROR, logger="tennis.engine"):
        engine.point("B")

    assert seen == ["point"]
    assert engine.state.points_b == 1
    assert "listener failed" in caplog.text
