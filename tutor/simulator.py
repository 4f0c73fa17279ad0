# tutor/simulator.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple

from board import Board, RevealOutcome
from .utils import Move, apply_move, is_effective


NO_EFFECT = "no-effect"

LogEntry = Tuple[str, int, int]


@dataclass(frozen=True)
class SimulationResult:
    """
    Outcome of one hypothetical move.

    board    : copy of the board after the move (an unchanged copy for a no-op)
    exploded : a mine was revealed while applying the move
    log      : ordered effects, e.g. ("open", r, c), ("flag", r, c),
               ("explode", r, c), or a single ("no-effect", r, c)
    """
    move: Move
    board: Board
    exploded: bool
    log: Tuple[LogEntry, ...]

    @property
    def no_effect(self) -> bool:
        return len(self.log) == 1 and self.log[0][0] == NO_EFFECT

    @property
    def opened(self) -> Tuple[Tuple[int, int], ...]:
        return tuple((r, c) for event, r, c in self.log if event == "open")


def apply(board: Board, move: Move) -> SimulationResult:
    """
    Apply ``move`` to a copy of ``board`` and report what happened.

    The no-op rules are the board's own (``Board.can_*``), so a move that
    would leave the live board untouched is reported as such here. Callers
    that only want effective moves can skip the clone by checking
    ``is_effective`` first. ``board`` is never mutated.
    """
    if not is_effective(board, move):
        return SimulationResult(
            move=move,
            board=board.clone(),
            exploded=False,
            log=((NO_EFFECT, move.row, move.col),),
        )

    result = board.clone()
    outcome = apply_move(result, move)
    return SimulationResult(
        move=move,
        board=result,
        exploded=outcome is RevealOutcome.LOST,
        log=tuple(result.last_action_log),
    )
