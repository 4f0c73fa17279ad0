# tutor/probability.py
"""
Optional mine-probability source.

The tutor never needs it; front ends may show its numbers next to the
efficiency highlights. It only looks at what the player can see (open
numbers and flags), never at the hidden layout.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from itertools import combinations
from typing import Dict, FrozenSet, List, Optional, Set, Tuple

from board import Board, Coord
from .utils import Constraint, build_constraints, constraint_components


MAX_ENUM_UNKNOWNS = 15


@dataclass(frozen=True)
class Determination:
    """Cells whose status follows from the visible numbers alone."""
    safe: FrozenSet[Coord]
    mines: FrozenSet[Coord]


# ---------------------------------------------------------------------------
# Deterministic rules
# ---------------------------------------------------------------------------

def local_rules(constraints: List[Constraint]) -> Tuple[Set[Coord], Set[Coord]]:
    """
    The two classic single-number rules. For clue N with U hidden and F
    flagged neighbours, R = N - F:

      1. R == 0        -> every hidden neighbour is safe
      2. R == len(U)   -> every hidden neighbour is a mine
    """
    safe: Set[Coord] = set()
    mines: Set[Coord] = set()
    for c in constraints:
        remaining = c.remaining
        if remaining < 0 or remaining > len(c.unknown):
            # Inconsistent constraint (likely due to bad flags); skip it.
            continue
        if remaining == 0:
            safe.update(c.unknown)
        elif remaining == len(c.unknown):
            mines.update(c.unknown)
    return safe, mines


def subset_rules(constraints: List[Constraint]) -> Tuple[Set[Coord], Set[Coord]]:
    """
    For constraints A and B with U_A a subset of U_B, the cells of
    U_B minus U_A hold exactly rem_B - rem_A mines:

      - 0 mines               -> all safe
      - len(difference) mines -> all mines
    """
    safe: Set[Coord] = set()
    mines: Set[Coord] = set()

    processed: List[Tuple[Set[Coord], int]] = []
    for c in constraints:
        unknown_set = set(c.unknown)
        if unknown_set and 0 <= c.remaining <= len(unknown_set):
            processed.append((unknown_set, c.remaining))

    for i, (set_a, rem_a) in enumerate(processed):
        for j, (set_b, rem_b) in enumerate(processed):
            if i == j or not set_a.issubset(set_b):
                continue
            diff = set_b - set_a
            if not diff:
                continue
            diff_remaining = rem_b - rem_a
            if diff_remaining == 0:
                safe.update(diff)
            elif diff_remaining == len(diff):
                mines.update(diff)
    return safe, mines


# ---------------------------------------------------------------------------
# Probabilities
# ---------------------------------------------------------------------------

def exact_component_probs(component: List[Constraint]) -> Optional[Dict[Coord, float]]:
    """Enumerate exact mine probabilities for a small constraint component."""
    unknowns = sorted({coord for c in component for coord in c.unknown})
    if not unknowns or len(unknowns) > MAX_ENUM_UNKNOWNS:
        return None

    idx = {coord: i for i, coord in enumerate(unknowns)}
    counts = {coord: 0 for coord in unknowns}
    total = 0

    for mines_count in range(len(unknowns) + 1):
        for mine_indices in combinations(range(len(unknowns)), mines_count):
            assignment = [False] * len(unknowns)
            for k in mine_indices:
                assignment[k] = True

            if any(
                sum(assignment[idx[u]] for u in c.unknown) + c.flagged != c.clue
                for c in component
            ):
                continue

            total += 1
            for coord in unknowns:
                if assignment[idx[coord]]:
                    counts[coord] += 1

    if total == 0:
        return None
    return {coord: counts[coord] / total for coord in unknowns}


def global_mine_density(board: Board) -> float:
    """remaining_mines / remaining hidden cells, 0.0 when nothing is hidden."""
    hidden = sum(1 for _ in board.hidden_cells())
    if not hidden:
        return 0.0
    return max(0, board.remaining_mines_estimate()) / hidden


class ProbabilityEngine:
    """
    Per-cell mine probabilities from visible information.

    Strategy:
      1. Local and subset rules give certain cells (0.0 / 1.0).
      2. Small constraint components are enumerated exactly.
      3. Everything else gets the global mine density.
    """

    def determine(self, board: Board) -> Determination:
        constraints = build_constraints(board)
        safe, mines = local_rules(constraints)
        more_safe, more_mines = subset_rules(constraints)
        safe |= more_safe
        mines |= more_mines
        # Contradictions come from wrong flags; trust neither side.
        both = safe & mines
        return Determination(frozenset(safe - both), frozenset(mines - both))

    def probabilities(self, board: Board) -> Dict[Coord, float]:
        if board.game_over:
            return {}

        constraints = build_constraints(board)
        comp_probs: Dict[Coord, float] = {}
        for comp in constraint_components(constraints):
            exact = exact_component_probs(comp)
            if exact:
                comp_probs.update(exact)

        determination = self.determine(board)
        base_p = global_mine_density(board)

        cell_prob: Dict[Coord, float] = {}
        for cell in board.hidden_cells():
            coord = cell.coord
            if coord in determination.safe:
                p = 0.0
            elif coord in determination.mines:
                p = 1.0
            else:
                p = comp_probs.get(coord, base_p)
            cell_prob[coord] = max(0.0, min(1.0, p))
        return cell_prob


# ---------------------------------------------------------------------------
# Capability
# ---------------------------------------------------------------------------

class SolverCapability(ABC):
    """Explicit handle on an optional probability source."""

    available: bool = False

    @abstractmethod
    def probabilities(self, board: Board) -> Optional[Dict[Coord, float]]:
        raise NotImplementedError

    @abstractmethod
    def determine(self, board: Board) -> Optional[Determination]:
        raise NotImplementedError


class Unavailable(SolverCapability):
    def probabilities(self, board: Board) -> Optional[Dict[Coord, float]]:
        return None

    def determine(self, board: Board) -> Optional[Determination]:
        return None


class Available(SolverCapability):
    available = True

    def __init__(self, engine: Optional[ProbabilityEngine] = None) -> None:
        self.engine = engine or ProbabilityEngine()

    def probabilities(self, board: Board) -> Optional[Dict[Coord, float]]:
        return self.engine.probabilities(board)

    def determine(self, board: Board) -> Optional[Determination]:
        return self.engine.determine(board)
