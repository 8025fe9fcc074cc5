"""CLI for Flood-It (classic and maze modes)."""

from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import List, Optional

from floodit_engine import (
    AUTO_GENERATE_SEED,
    COLOR_NAMES,
    DIFFICULTIES,
    MAZE,
    CLASSIC,
    CustomGameSettings,
    Difficulty,
    is_custom_sentinel,
    pretty_print,
)
from floodit_persistence import BOARD_SIZE_RANGE, MOVE_LIMIT_RANGE, FileStorage, default_state_dir
from floodit_session import FloodSession

DEFAULT_DIFFICULTY = "Normal"


def prompt_yes_no(prompt: str) -> bool:
    while True:
        try:
            raw = input(prompt).strip().lower()
        except EOFError:
            print()
            return False
        if raw in {"y", "yes"}:
            return True
        if raw in {"n", "no"}:
            return False
        print("Please enter 'y' or 'n'.")


def print_help() -> None:
    keys = ", ".join(f"{idx}/{name[0]}={name}" for idx, name in enumerate(COLOR_NAMES, start=1))
    print(f"Colors: {keys}.")
    print("Controls: reset=same board again, n=new round, q=quit, h=help.")
    print("Classic: fill the whole board with one color. Maze: connect the start to the goal (lower-case cell).")


def parse_color(raw: str) -> Optional[str]:
    value = raw.strip().lower()
    if not value:
        return None
    if value.isdigit():
        idx = int(value) - 1
        if 0 <= idx < len(COLOR_NAMES):
            return COLOR_NAMES[idx]
        return None
    for name in COLOR_NAMES:
        if value == name or value == name[0]:
            return name
    return None


def find_difficulty(name: str) -> Optional[Difficulty]:
    wanted = name.strip().lower()
    for difficulty in DIFFICULTIES:
        if difficulty.name.lower() == wanted and not is_custom_sentinel(difficulty):
            return difficulty
    return None


def read_command(prompt: str) -> str:
    while True:
        try:
            raw = input(prompt).strip().lower()
        except EOFError:
            print()
            return "q"
        if raw == "":
            print("Please enter a color, or a command.")
            continue
        return raw


def start_first_round(session: FloodSession, args: argparse.Namespace) -> Optional[str]:
    seed = args.seed if args.seed is not None else AUTO_GENERATE_SEED

    if args.size is None and (args.maze or args.moves is not None):
        return "--maze and --moves require --size"

    if args.size is not None:
        low, high = BOARD_SIZE_RANGE
        if not low <= args.size <= high:
            return f"--size must be between {low} and {high}"
        settings = CustomGameSettings(
            game_mode=MAZE if args.maze else CLASSIC,
            board_size=args.size,
            custom_move_limit=args.moves is not None,
            move_limit=args.moves if args.moves is not None else session.custom_settings.move_limit,
        )
        if settings.custom_move_limit:
            low, high = MOVE_LIMIT_RANGE
            if not low <= settings.move_limit <= high:
                return f"--moves must be between {low} and {high}"
        session.start_custom(settings, seed)
        return None

    if args.difficulty is not None:
        difficulty = find_difficulty(args.difficulty)
        if difficulty is None:
            return f"unknown difficulty: {args.difficulty}"
        session.start_difficulty(difficulty, seed)
        return None

    if session.last_game_config is not None:
        session.start_new_round(seed)
        return None

    difficulty = find_difficulty(DEFAULT_DIFFICULTY) or DIFFICULTIES[0]
    session.start_difficulty(difficulty, seed)
    return None


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Flood-It in the terminal")
    preset_names = [d.name for d in DIFFICULTIES if not is_custom_sentinel(d)]
    parser.add_argument(
        "--difficulty",
        help=f"preset to play ({', '.join(preset_names)}); default resumes the last settings",
    )
    parser.add_argument("--size", type=int, help="custom square board size (5-25)")
    parser.add_argument("--maze", action="store_true", help="custom board in maze mode (with --size)")
    parser.add_argument("--moves", type=int, help="custom move limit (5-100, with --size)")
    parser.add_argument(
        "--seed",
        type=int,
        help="board seed for the first round, also applied when resuming the last settings (default: clock)",
    )
    parser.add_argument("--state-dir", type=Path, help=f"where session state is kept (default: {default_state_dir()})")
    parser.add_argument("--no-save", action="store_true", help="do not read or write session state")
    parser.add_argument("--verbose", action="store_true", help="log engine and storage activity")
    args = parser.parse_args(argv)

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")

    storage = None if args.no_save else FileStorage(args.state_dir or default_state_dir())
    session = FloodSession(storage)

    error = start_first_round(session, args)
    if error is not None:
        print(error)
        return 2

    while True:
        board = session.board
        if board is None:
            return 0

        print()
        print(pretty_print(board))

        if session.is_game_over:
            print()
            if session.has_won:
                goal_text = "reached the goal" if board.mode == MAZE else "flooded the board"
                print(f"You won! You {goal_text} in {board.step} moves.")
            else:
                print("Out of moves. Better luck next round.")
            if prompt_yes_no("Play again with the same settings? (y/n): "):
                session.start_new_round()
                continue
            return 0

        raw = read_command(f"Move ({session.steps_left} left; color, reset, n, q, h): ")

        if raw in {"q", "quit"}:
            session.quit()
            return 0
        if raw in {"h", "help"}:
            print_help()
            continue
        if raw == "reset":
            session.reset()
            continue
        if raw in {"n", "new"}:
            session.start_new_round()
            continue

        color = parse_color(raw)
        if color is None:
            print("Unknown color. Type h for the list of colors.")
            continue

        result = session.play(color)
        if result is None:
            continue
        if result.game_state is None:
            print(f"The flooded area is already {color}.")


if __name__ == "__main__":
    raise SystemExit(main())
