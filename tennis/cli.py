from __future__ import annotations

import argparse
import re
import sys
from pathlib import Path
from typing import Dict, Optional

from model.adapter import Scoreboard

from .config import Settings, setup_logging
from .persistence import FileStore, PersistenceAdapter
from .session import ScoreSession


HELP = """Commands:
  a / b              point to player A / B
  u                  undo the last point
  r                  reset the match after confirming (names are kept)
  s                  toggle the server
  sa / sb            set the server to A / B
  name a|b NEW NAME  rename a player
  next               start the next match after a finished one
  ?                  show this help
  q                  quit"""


def is_valid_name(s: str) -> bool:
    """Return True if a player name is short and printable."""
    s = (s or "").strip()
    return 0 < len(s) <= 24 and re.fullmatch(r"[\w .'-]+", s) is not None


def is_valid_sequence(s: str) -> bool:
    """Return True if a point sequence has only a, b, spaces and commas."""
    return re.fullmatch(r"[abAB\s,]*", s) is not None


def confirm(prompt: str) -> bool:
    """Ask a yes/no question. End of input counts as no."""
    try:
        answer = input(prompt)
    except EOFError:
        return False
    return answer.strip().lower() in ("y", "yes")


def render_scoreboard(board: Scoreboard) -> str:
    """Format the scoreboard as a small text table."""
    width = max(len(board.name_a), len(board.name_b), 8)
    lines = []
    for name, serving, point, games, sets in board.rows():
        marker = "*" if serving else " "
        lines.append(f"{marker} {name:<{width}}  {point:>3}  games {games}  sets {sets}")
    if board.match_over:
        lines.append("Match over. Type 'next' to start a new match.")
    else:
        lines.append(f"  {board.game_text}")
    return "\n".join(lines)


def describe_event(event: str, data: Dict, board: Scoreboard) -> Optional[str]:
    """Return a line announcing a game, set or match, or None for other events."""
    if event == "game":
        ga, gb = data["set_score"]
        return f"Game {board.name(data['winner'])}. Set Score: {board.name_a} vs {board.name_b} {ga} - {gb}"
    if event == "set":
        ga, gb = data["final_games"]
        return f"Set won by {board.name(data['winner'])}. Games: {board.name_a} vs {board.name_b} {ga} - {gb}"
    if event == "match":
        sa, sb = data["final_sets"]
        return f"Winner: {board.name(data['winner'])}. Final Score (sets): {board.name_a} vs {board.name_b} {sa} - {sb}"
    return None


def run_command(session: ScoreSession, line: str) -> bool:
    """Apply one interactive command. Returns False when the user quits."""
    parts = line.strip().split(maxsplit=2)
    if not parts:
        return True
    cmd = parts[0].lower()
    if cmd in ("a", "b"):
        session.point(cmd)
    elif cmd == "u":
        session.undo()
    elif cmd == "r":
        if confirm("Reset match? [y/N] "):
            session.reset()
        else:
            print("Reset cancelled.")
    elif cmd == "s":
        session.toggle_server()
    elif cmd in ("sa", "sb"):
        session.set_server(cmd[1])
    elif cmd == "next":
        session.start_next_match()
    elif cmd == "name":
        if len(parts) < 3 or parts[1].lower() not in ("a", "b") or not is_valid_name(parts[2]):
            print("Usage: name a|b NEW NAME")
        else:
            session.set_player_name(parts[1], parts[2])
    elif cmd in ("q", "quit", "exit"):
        return False
    elif cmd in ("?", "help"):
        print(HELP)
    else:
        print("Unknown command. Type ? for help.")
    return True


def run_interactive(session: ScoreSession) -> int:
    """Read commands until quit or end of input."""
    print(render_scoreboard(session.scoreboard()))
    print("Type ? for help.")
    while True:
        try:
            line = input("> ")
        except EOFError:
            print()
            return 0
        if not run_command(session, line):
            return 0
        print(render_scoreboard(session.scoreboard()))


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Tennis match scorekeeper (CLI)")
    parser.add_argument("--player-a", dest="player_a", type=str, help="Player A name", default=None)
    parser.add_argument("--player-b", dest="player_b", type=str, help="Player B name", default=None)
    parser.add_argument("--state-dir", dest="state_dir", type=Path, default=None, help="Directory for the saved match")
    parser.add_argument(
        "--hold-finished-match",
        dest="hold_finished_match",
        action="store_true",
        default=None,
        help="Keep a won match on screen until 'next' is entered",
    )
    parser.add_argument("--fresh", action="store_true", help="Reset the saved match before starting")
    parser.add_argument("--play", dest="play", type=str, default=None, help="Apply points such as 'aabab', print the score and exit")
    parser.add_argument("--log-level", dest="log_level", type=str, default=None, help="Logging level (default WARNING)")
    return parser


def settings_from_args(args: argparse.Namespace) -> Settings:
    settings = Settings.from_env()
    if args.player_a is not None:
        settings.player_a = args.player_a.strip()
    if args.player_b is not None:
        settings.player_b = args.player_b.strip()
    if args.state_dir is not None:
        settings.state_dir = args.state_dir
    if args.hold_finished_match is not None:
        settings.hold_finished_match = args.hold_finished_match
    if args.log_level is not None:
        settings.log_level = args.log_level
    return settings


def main(argv=None) -> int:
    """Run the text mode scorekeeper.

    The match is saved after every command, so quitting and starting again
    picks up where it left off.
    """
    args = build_parser().parse_args(argv)

    for name in (args.player_a, args.player_b):
        if name is not None and not is_valid_name(name):
            print("Invalid player name. Please try again.")
            return 2
    if args.play is not None and not is_valid_sequence(args.play):
        print("Invalid point sequence. Use only 'a' and 'b'.")
        return 2

    settings = settings_from_args(args)
    setup_logging(settings.log_level)

    session = ScoreSession.open(PersistenceAdapter(FileStore(settings.state_dir)), settings)
    if args.fresh:
        session.reset()
    # Explicit flags win over names restored from the saved match
    if args.player_a is not None:
        session.set_player_name("A", settings.player_a)
    if args.player_b is not None:
        session.set_player_name("B", settings.player_b)

    def announce(event: str, data: Dict) -> None:
        line = describe_event(event, data, Scoreboard.from_engine(session.engine))
        if line:
            print(line)

    session.subscribe(announce)

    if args.play is not None:
        for ch in re.sub(r"[\s,]", "", args.play):
            session.point(ch)
        print(render_scoreboard(session.scoreboard()))
        return 0

    return run_interactive(session)


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
