# tutor/utils.py
from __future__ import annotations

from dataclasses import dataclass
from typing import List, Literal, Tuple

from board import Board, Cell


# ---------------------------------------------------------------------------
# Core data structures
# ---------------------------------------------------------------------------

ActionType = Literal["reveal", "flag", "chord"]


@dataclass(frozen=True)
class Move:
    """A single player (or hypothetical) action on the board."""
    action: ActionType
    row: int
    col: int

    @property
    def coord(self) -> Tuple[int, int]:
        return (self.row, self.col)

    def __str__(self) -> str:
        return f"{self.action}({self.row}, {self.col})"


def apply_move(board: Board, move: Move):
    """
    Dispatch ``move`` to the matching board action, in place.

    Returns the board's own result: a RevealOutcome for reveal/chord, a
    bool for flag toggles.
    """
    if move.action == "reveal":
        return board.reveal(move.row, move.col)
    if move.action == "flag":
        return board.toggle_flag(move.row, move.col)
    if move.action == "chord":
        return board.chord(move.row, move.col)
    raise ValueError(f"Unknown action: {move.action}")


def is_effective(board: Board, move: Move) -> bool:
    """True when ``move`` would change ``board`` (read-only check)."""
    if move.action == "reveal":
        return board.can_reveal(move.row, move.col)
    if move.action == "flag":
        return board.can_flag(move.row, move.col)
    if move.action == "chord":
        return board.can_chord(move.row, move.col)
    raise ValueError(f"Unknown action: {move.action}")


@dataclass
class Constraint:
    """
    A constraint derived from a numbered open cell.

    clue         : number on the cell (adjacent mine count)
    unknown      : list of (row, col) coords of unopened & unflagged neighbors
    flagged      : number of flagged neighbors
    """
    row: int
    col: int
    clue: int
    unknown: List[Tuple[int, int]]
    flagged: int

    @property
    def remaining(self) -> int:
        return self.clue - self.flagged


# ---------------------------------------------------------------------------
# Board / neighborhood helpers
# ---------------------------------------------------------------------------

def get_hidden_neighbors(board: Board, row: int, col: int) -> List[Cell]:
    """Unopened and unflagged neighbors."""
    return [n for n in board.neighbors(row, col) if n.is_hidden]


def get_flagged_neighbors(board: Board, row: int, col: int) -> List[Cell]:
    return [n for n in board.neighbors(row, col) if n.is_flagged]


def count_open_neighbors(board: Board, row: int, col: int) -> int:
    return sum(1 for n in board.neighbors(row, col) if n.is_open)


def get_numbered_frontier(board: Board) -> List[Cell]:
    """
    Open, numbered, non-mine cells that touch at least one hidden neighbor.
    """
    frontier: List[Cell] = []
    for cell in board.iter_cells():
        if not cell.is_open or cell.is_mine or cell.adjacent_mines == 0:
            continue
        if get_hidden_neighbors(board, cell.row, cell.col):
            frontier.append(cell)
    return frontier


# ---------------------------------------------------------------------------
# Constraint extraction (visible information only)
# ---------------------------------------------------------------------------

def build_constraints(board: Board) -> List[Constraint]:
    """
    Build a list of constraints from the current board state.
    Only open, numbered frontier cells contribute constraints.
    """
    constraints: List[Constraint] = []
    for cell in get_numbered_frontier(board):
        hidden = get_hidden_neighbors(board, cell.row, cell.col)
        constraints.append(
            Constraint(
                row=cell.row,
                col=cell.col,
                clue=cell.adjacent_mines,
                unknown=[(n.row, n.col) for n in hidden],
                flagged=len(get_flagged_neighbors(board, cell.row, cell.col)),
            )
        )
    return constraints


def constraint_components(constraints: List[Constraint]) -> List[List[Constraint]]:
    """Group constraints that share unknown cells (transitively)."""
    graph: dict[int, set[int]] = {i: set() for i in range(len(constraints))}
    for i, ci in enumerate(constraints):
        set_i = set(ci.unknown)
        for j in range(i + 1, len(constraints)):
            if set_i.intersection(constraints[j].unknown):
                graph[i].add(j)
                graph[j].add(i)

    comps: List[List[int]] = []
    seen: set[int] = set()
    for i in range(len(constraints)):
        if i in seen:
            continue
        stack = [i]
        seen.add(i)
        comp = []
        while stack:
            node = stack.pop()
            comp.append(node)
            for nei in graph[node]:
                if nei not in seen:
                    seen.add(nei)
                    stack.append(nei)
        comps.append(comp)
    return [[constraints[i] for i in comp] for comp in comps]
