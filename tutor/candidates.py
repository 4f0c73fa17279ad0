# tutor/candidates.py
from __future__ import annotations

from typing import List, Optional, Tuple

from board import Board
from settings import CHORD_CANDIDATE_FLOOR, TutorMode
from .utils import Move, count_open_neighbors, get_hidden_neighbors


ScoredCoord = Tuple[int, Tuple[int, int]]


def frontier_scores(board: Board) -> List[ScoredCoord]:
    """
    Hidden cells touching at least one open cell, as (open-neighbour count,
    (row, col)), best first and then row-major.
    """
    scored = []
    for cell in board.hidden_cells():
        score = count_open_neighbors(board, cell.row, cell.col)
        if score > 0:
            scored.append((score, cell.coord))
    scored.sort(key=lambda item: (-item[0], item[1]))
    return scored


def guess_scores(board: Board) -> List[ScoredCoord]:
    """Every hidden cell, scored like the frontier (usually all zero)."""
    scored = [
        (count_open_neighbors(board, cell.row, cell.col), cell.coord)
        for cell in board.hidden_cells()
    ]
    scored.sort(key=lambda item: (-item[0], item[1]))
    return scored


def chord_scores(board: Board) -> List[ScoredCoord]:
    """Open numbers with hidden neighbours, by hidden-neighbour count."""
    scored = []
    for cell in board.iter_cells():
        if not cell.is_open or cell.is_mine or cell.adjacent_mines == 0:
            continue
        hidden = len(get_hidden_neighbors(board, cell.row, cell.col))
        if hidden:
            scored.append((hidden, cell.coord))
    scored.sort(key=lambda item: (-item[0], item[1]))
    return scored


def generate(board: Board, mode: TutorMode, limit: Optional[int]) -> List[Move]:
    """
    Plausible next moves, reveals first, then flags, then chords.

    Cells away from the frontier carry no information and are
    interchangeable, so they only show up when there is no frontier at all.
    ``limit=None`` disables truncation.
    """
    pool = frontier_scores(board) or guess_scores(board)
    cells = [coord for _, coord in pool][:limit]

    moves: List[Move] = [Move("reveal", r, c) for r, c in cells]
    if mode.allows_flags:
        moves.extend(Move("flag", r, c) for r, c in cells)

    chord_limit = None if limit is None else max(limit, CHORD_CANDIDATE_FLOOR)
    moves.extend(Move("chord", r, c) for _, (r, c) in chord_scores(board)[:chord_limit])
    return moves
