# tutor/gate.py
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict

from board import Coord
from .advisor import EMPTY, CellTag, Classification
from .utils import ActionType, Move


def permits(action: ActionType, row: int, col: int, classification: Classification) -> bool:
    """
    Whether the tutor lets ``action`` at (row, col) through.

    - no classification: everything goes
    - a guess set: only reveals of one of the guessed cells
    - otherwise exactly the classified action for that cell
    """
    if classification.is_empty:
        return True
    if classification.is_guess:
        return action == "reveal" and (row, col) in classification.guess
    return (row, col) in classification.bucket(action)


@dataclass(frozen=True)
class GateDecision:
    permitted: bool
    highlights: Dict[Coord, CellTag] = field(default_factory=dict)


class TutorGate:
    """
    Holds the latest classification and judges player actions against it.
    A rejected action changes nothing; the caller gets the current
    highlights back to show the player what was expected.
    """

    def __init__(self, classification: Classification = EMPTY) -> None:
        self.classification = classification

    def update(self, classification: Classification) -> None:
        self.classification = classification

    def clear(self) -> None:
        self.classification = EMPTY

    def check(self, move: Move) -> GateDecision:
        if permits(move.action, move.row, move.col, self.classification):
            return GateDecision(True)
        return GateDecision(False, self.classification.tags())
