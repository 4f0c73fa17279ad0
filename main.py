# main.py

from __future__ import annotations

import logging
import sys
from typing import Dict, Tuple

from board import Coord
from settings import (
    DEFAULT_DEPTH,
    DIFFICULTIES,
    MAX_DEPTH,
    MAX_SIDE,
    MIN_DEPTH,
    MIN_SIDE,
    BoardConfig,
    TutorMode,
    TutorSettings,
)
from session import ActionResult, TutorSession
from tutor.advisor import CellTag
from tutor.probability import Available


TAG_CHARS = {
    CellTag.REVEAL: "r",
    CellTag.FLAG: "f",
    CellTag.CHORD: "c",
    CellTag.GUESS: "?",
}


# ---------------------------------------------------------------------------
# Helper functions for user input
# ---------------------------------------------------------------------------

def ask_yes_no(prompt: str, default: bool = True) -> bool:
    default_str = "Y/n" if default else "y/N"
    while True:
        answer = input(f"{prompt} [{default_str}]: ").strip().lower()
        if not answer:
            return default
        if answer in {"y", "yes"}:
            return True
        if answer in {"n", "no"}:
            return False
        print("Please enter 'y' or 'n'.")


def ask_int(prompt: str, minimum: int, maximum: int, default: int) -> int:
    full_prompt = f"{prompt} (min={minimum}, max={maximum}, default={default}): "
    while True:
        raw = input(full_prompt).strip()
        if not raw:
            return default
        try:
            value = int(raw)
        except ValueError:
            print("Please enter an integer.")
            continue
        if not (minimum <= value <= maximum):
            print(f"Value must be between {minimum} and {maximum}.")
            continue
        return value


def ask_choice(prompt: str, choices: Tuple[str, ...], default: str) -> str:
    options = "/".join(choices)
    while True:
        answer = input(f"{prompt} [{options}] (default={default}): ").strip().lower()
        if not answer:
            return default
        if answer in choices:
            return answer
        print(f"Please enter one of: {options}.")


def parse_move(user_input: str) -> Tuple[str, int, int]:
    """
    Parse a move string like:
      'o 3 4' or 'open 3 4'   -> reveal cell (row=3, col=4)
      'f 3 4' or 'flag 3 4'   -> toggle flag
      'c 3 4' or 'chord 3 4'  -> chord around an open number
      'h' / 'hint'            -> let the tutor play one move
      'q'                     -> quit

    Returns: (action, row_index, col_index) where row/col are 0-based.

    Raises ValueError on bad input.
    """
    tokens = user_input.strip().split()
    if not tokens:
        raise ValueError("Empty input.")

    action_token = tokens[0].lower()
    if action_token in {"q", "quit", "exit"}:
        return ("quit", -1, -1)
    if action_token in {"h", "hint"}:
        return ("hint", -1, -1)

    if len(tokens) != 3:
        raise ValueError("Format must be: 'o row col', 'f row col' or 'c row col' (or 'h', 'q').")

    if action_token in {"o", "open", "r", "reveal"}:
        action = "reveal"
    elif action_token in {"f", "flag"}:
        action = "flag"
    elif action_token in {"c", "chord"}:
        action = "chord"
    else:
        raise ValueError("First token must be 'o'/'open', 'f'/'flag', 'c'/'chord', 'h' or 'q'.")

    try:
        # User enters 1-based coordinates; convert to 0-based
        row = int(tokens[1]) - 1
        col = int(tokens[2]) - 1
    except ValueError:
        raise ValueError("Row and column must be integers.")

    return (action, row, col)


# ---------------------------------------------------------------------------
# Game setup
# ---------------------------------------------------------------------------

def configure_session() -> TutorSession:
    """Ask for difficulty and tutor settings, with good defaults."""
    print("=== Minesweeper Efficiency Tutor ===")
    level = ask_choice("Difficulty", tuple(DIFFICULTIES) + ("custom",), default="beginner")

    if level == "custom":
        rows = ask_int("Number of rows", minimum=MIN_SIDE, maximum=MAX_SIDE, default=16)
        cols = ask_int("Number of columns", minimum=MIN_SIDE, maximum=MAX_SIDE, default=16)
        max_mines = rows * cols - 1
        default_mines = max(1, (rows * cols) // 6)
        mines = ask_int("Number of mines", minimum=1, maximum=max_mines, default=default_mines)
        config = BoardConfig.sanitize(rows, cols, mines)
    else:
        config = DIFFICULTIES[level]

    mode = TutorMode(ask_choice("Tutor mode", tuple(m.value for m in TutorMode), default="classic"))
    depth = DEFAULT_DEPTH
    if mode is not TutorMode.OFF:
        depth = ask_int("Search depth", minimum=MIN_DEPTH, maximum=MAX_DEPTH, default=DEFAULT_DEPTH)

    print(f"\nCreating a {config.rows}x{config.cols} board with {config.mines} mines...\n")
    return TutorSession(
        config,
        TutorSettings(mode=mode, depth=depth),
        probability_source=Available(),
    )


# ---------------------------------------------------------------------------
# Display
# ---------------------------------------------------------------------------

def render_with_highlights(session: TutorSession) -> str:
    """Board render with tutor tags in place of the cell brackets."""
    board = session.board
    tags: Dict[Coord, CellTag] = session.highlights()
    grid = board.to_display_grid()
    header = "    " + "".join(f"{c + 1:>3}" for c in range(board.cols))
    lines = [header]
    for r in range(board.rows):
        parts = []
        for c in range(board.cols):
            tag = TAG_CHARS.get(tags.get((r, c)))
            parts.append(f"{tag}{grid[r][c]}{tag}" if tag else f"[{grid[r][c]}]")
        lines.append(f"{r + 1:>3} " + "".join(parts))
    return "\n".join(lines)


def print_status(session: TutorSession) -> None:
    metrics = session.metrics()
    print(
        f"Mines remaining (estimate): {session.board.remaining_mines_estimate()}  "
        f"Value: {metrics.solved_value}/{metrics.total_value}  Clicks: {metrics.clicks}"
    )
    if metrics.efficiency is not None:
        print(f"Efficiency: {metrics.efficiency:.1f}%")
    print(f"Tutor: {session.banner()}")


def describe_rejection(result: ActionResult) -> None:
    cells = ", ".join(
        f"{tag.value} ({r + 1},{c + 1})" for (r, c), tag in sorted(result.highlights.items())
    )
    print(f"The tutor blocked that move. Expected: {cells}")


# ---------------------------------------------------------------------------
# Human game loop
# ---------------------------------------------------------------------------

def run_human_game(session: TutorSession) -> None:
    print("=== Minesweeper (Human Mode) ===")
    print("Commands:")
    print("  o r c   -> reveal cell at row r, column c (1-based indices)")
    print("  f r c   -> toggle flag at row r, column c")
    print("  c r c   -> chord around the number at row r, column c")
    print("  h       -> let the tutor play one move")
    print("  q       -> quit")
    print()

    while True:
        print(render_with_highlights(session))
        print_status(session)

        if session.board.game_over:
            if session.board.win:
                print("\nYou opened all safe cells. You win!")
            else:
                print("\nYou hit a mine. Game over!")
            print("\nFinal board:")
            print(session.board.render(reveal_mines=True))
            break

        user_input = input("\nEnter your move: ")

        try:
            action, row, col = parse_move(user_input)
        except ValueError as exc:
            print(f"Invalid move: {exc}")
            continue

        if action == "quit":
            print("Goodbye!")
            break

        if action == "hint":
            if session.auto_step() is None:
                print("The tutor has no move to offer here.")
            continue

        if not session.board.in_bounds(row, col):
            print(f"Cell ({row + 1}, {col + 1}) is out of bounds.")
            continue

        if action == "reveal":
            result = session.reveal(row, col)
        elif action == "flag":
            result = session.toggle_flag(row, col)
        else:
            result = session.chord(row, col)

        if not result.accepted:
            describe_rejection(result)


# ---------------------------------------------------------------------------
# Tutor demo loop
# ---------------------------------------------------------------------------

def run_tutor_game(session: TutorSession) -> None:
    print("=== Minesweeper (Tutor Demo) ===")
    print("The tutor plays every move, always taking its most efficient option.")

    step = 0
    while not session.board.game_over:
        result = session.auto_step()
        if result is None:
            print("\nThe tutor is stuck and has no move to offer.")
            break

        step += 1
        print(f"\nAfter tutor step {step} ({result.move}):")
        print(session.board.render())
        print_status(session)

    if session.board.game_over:
        print("\nTutor cleared the board!" if session.board.win else "\nTutor hit a mine.")
    print("\nFinal board (mines revealed):")
    print(session.board.render(reveal_mines=True))


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------

def main() -> None:
    verbose = "-v" in sys.argv[1:] or "--verbose" in sys.argv[1:]
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    session = configure_session()
    if ask_yes_no("Do you want to play the game yourself?", default=True):
        run_human_game(session)
    else:
        session.set_tutor(mode=TutorMode.CLASSIC if session.settings.mode is TutorMode.OFF else None)
        run_tutor_game(session)


if __name__ == "__main__":
    main()
