"""
Board value ("3BV") segmentation.

A board's value is the minimum number of reveal/chord clicks needed to clear
it: every maximal zero-count cluster (together with the numbered cells that
border it) is one unit, and every numbered cell that touches no zero cell is
a unit on its own. Mines belong to no unit.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterable, List, Tuple

from board import Board, Coord


@dataclass(frozen=True)
class ValueUnit:
    """One indivisible board-value point."""
    unit_id: int
    cells: Tuple[Coord, ...]

    @property
    def is_cluster(self) -> bool:
        return len(self.cells) > 1


@dataclass(frozen=True)
class Segmentation:
    unit_of: Dict[Coord, int]
    units: Tuple[ValueUnit, ...]

    @property
    def total(self) -> int:
        return len(self.units)


def segment(board: Board) -> Segmentation:
    """
    Partition every non-mine cell into value units.

    Zero cells are scanned in row-major order; each unvisited one seeds a
    cluster that grows through zero cells and absorbs their non-mine
    neighbours without expanding from them. Remaining non-mine cells become
    singleton units. Only mine positions and counts are read, so the result
    does not change as the game progresses.
    """
    visited = [[False] * board.cols for _ in range(board.rows)]
    units: List[ValueUnit] = []

    for cell in board.iter_cells():
        if cell.is_mine or cell.adjacent_mines != 0 or visited[cell.row][cell.col]:
            continue

        visited[cell.row][cell.col] = True
        cluster: List[Coord] = [cell.coord]
        stack: List[Coord] = [cell.coord]
        while stack:
            row, col = stack.pop()
            for neighbor in board.neighbors(row, col):
                if neighbor.is_mine or visited[neighbor.row][neighbor.col]:
                    continue
                visited[neighbor.row][neighbor.col] = True
                cluster.append(neighbor.coord)
                if neighbor.adjacent_mines == 0:
                    stack.append(neighbor.coord)
        units.append(ValueUnit(len(units), tuple(cluster)))

    for cell in board.iter_cells():
        if cell.is_mine or visited[cell.row][cell.col]:
            continue
        visited[cell.row][cell.col] = True
        units.append(ValueUnit(len(units), (cell.coord,)))

    unit_of = {coord: unit.unit_id for unit in units for coord in unit.cells}
    return Segmentation(unit_of=unit_of, units=tuple(units))


def annotate(board: Board) -> Segmentation:
    """Segment ``board`` and record each cell's unit id on the cell."""
    segmentation = segment(board)
    for cell in board.iter_cells():
        cell.value_unit = segmentation.unit_of.get(cell.coord)
    return segmentation


def progress(board: Board, segmentation: Segmentation) -> int:
    """Number of units whose every member cell is open."""
    return sum(
        1
        for unit in segmentation.units
        if all(board.grid[r][c].is_open for r, c in unit.cells)
    )


def flag_progress(board: Board, segmentation: Segmentation) -> int:
    """
    Display-only variant of :func:`progress`.

    A unit also counts once each still-hidden member touches an open
    number and every mine around those members is flagged, i.e. chords
    could finish it. This is not the advisor's scoring rule and can
    disagree with it, e.g. when the flags are wrong.
    """
    resolved = 0
    for unit in segmentation.units:
        hidden = [board.grid[r][c] for r, c in unit.cells if not board.grid[r][c].is_open]
        if not hidden:
            resolved += 1
            continue
        if any(cell.is_flagged for cell in hidden):
            continue
        if all(_chord_reachable(board, cell) for cell in hidden):
            resolved += 1
    return resolved


def _chord_reachable(board: Board, cell) -> bool:
    neighbors = list(board.neighbors(cell.row, cell.col))
    touches_number = any(n.is_open and n.adjacent_mines > 0 for n in neighbors)
    mines_flagged = all(n.is_flagged for n in neighbors if n.is_mine)
    return touches_number and mines_flagged


def completed_by(board: Board, segmentation: Segmentation, opened: Iterable[Coord]) -> int:
    """
    Units finished by the cells in ``opened``, which were hidden before the
    move that opened them; ``progress`` grows by exactly this much.
    """
    touched = {segmentation.unit_of[coord] for coord in opened if coord in segmentation.unit_of}
    return sum(
        1
        for unit_id in touched
        if all(board.grid[r][c].is_open for r, c in segmentation.units[unit_id].cells)
    )
