from __future__ import annotations

import random
from dataclasses import dataclass
from enum import Enum, auto
from typing import Iterable, List, Optional, Tuple

from settings import MAX_SIDE, MIN_SIDE


Coord = Tuple[int, int]


class ConfigError(ValueError):
    """Board dimensions or mine count outside the supported range."""


class CellState(Enum):
    """Possible visible states of a cell."""
    UNOPENED = auto()
    OPEN = auto()
    FLAGGED = auto()


class GameStatus(Enum):
    IDLE = "idle"
    PLAYING = "playing"
    WON = "won"
    LOST = "lost"


class RevealOutcome(Enum):
    """Result of a reveal or chord action."""
    NO_OP = auto()
    CONTINUING = auto()
    WON = auto()
    LOST = auto()


@dataclass
class Cell:
    """Represents a single square on the Minesweeper board."""
    row: int
    col: int
    is_mine: bool = False
    adjacent_mines: int = 0
    state: CellState = CellState.UNOPENED
    is_exploded: bool = False
    is_wrong_flag: bool = False
    value_unit: Optional[int] = None

    @property
    def is_open(self) -> bool:
        return self.state == CellState.OPEN

    @property
    def is_flagged(self) -> bool:
        return self.state == CellState.FLAGGED

    @property
    def is_hidden(self) -> bool:
        """Unopened and unflagged."""
        return self.state == CellState.UNOPENED

    @property
    def coord(self) -> Coord:
        return (self.row, self.col)

    def copy(self) -> "Cell":
        return Cell(
            self.row,
            self.col,
            self.is_mine,
            self.adjacent_mines,
            self.state,
            self.is_exploded,
            self.is_wrong_flag,
            self.value_unit,
        )

    def display_char(self, reveal_mines: bool = False) -> str:
        """
        Character for this cell.

        - 'U' : unopened
        - 'O' : open, 0 adjacent mines
        - '1'..'8' : open, that many adjacent mines
        - 'F' : flagged
        - 'W' : flag on a non-mine, shown after a loss
        - 'B' : bomb (when opened or reveal_mines=True)
        - 'X' : the bomb that was stepped on
        """
        if self.is_exploded:
            return "X"
        if self.is_wrong_flag:
            return "W"
        if self.state == CellState.FLAGGED:
            return "F"
        if reveal_mines and self.is_mine:
            return "B"
        if self.state == CellState.UNOPENED:
            return "U"
        if self.is_mine:
            return "B"
        return "O" if self.adjacent_mines == 0 else str(self.adjacent_mines)


def validate_config(rows: int, cols: int, num_mines: int) -> None:
    """Reject out-of-range dimensions or mine counts; never clamps."""
    if not (MIN_SIDE <= rows <= MAX_SIDE and MIN_SIDE <= cols <= MAX_SIDE):
        raise ConfigError(
            f"Board must be between {MIN_SIDE}x{MIN_SIDE} and "
            f"{MAX_SIDE}x{MAX_SIDE}, got {rows}x{cols}."
        )
    if num_mines < 1 or num_mines > rows * cols - 1:
        raise ConfigError("Number of mines must be between 1 and rows*cols-1.")


class Board:
    """
    Backend representation of a Minesweeper board.

    Design:
    - Mines are placed at construction time. A protected ``safe_cell`` is
      never a mine; the session regenerates the board around the first
      click when first-click protection is on.
    - Coordinates are 0-indexed: row in [0, rows-1], col in [0, cols-1].
    - Gameplay actions never raise for "illegal" moves: a flagged target,
      an open target or an unsatisfied chord is a silent no-op.
    - ``version`` is bumped on every action that changes the board.
    """

    def __init__(
        self,
        rows: int,
        cols: int,
        num_mines: int,
        safe_cell: Optional[Coord] = None,
        rng: Optional[random.Random] = None,
        mines: Optional[Iterable[Coord]] = None,
    ) -> None:
        validate_config(rows, cols, num_mines)

        self.rows = rows
        self.cols = cols
        self.num_mines = num_mines
        self.rng = rng or random.Random()

        self.status: GameStatus = GameStatus.IDLE
        self.version: int = 0
        self.last_action_log: List[Tuple[str, int, int]] = []

        # 2D grid of Cell objects
        self.grid: List[List[Cell]] = [
            [Cell(r, c) for c in range(cols)] for r in range(rows)
        ]

        if safe_cell is not None and not self.in_bounds(*safe_cell):
            raise IndexError(f"Cell {safe_cell} is out of bounds.")

        if mines is None:
            self._place_mines(safe_cell)
        else:
            self._place_given_mines(mines, safe_cell)
        self._compute_adjacent_mine_counts()

    @classmethod
    def from_mines(cls, rows: int, cols: int, mines: Iterable[Coord]) -> "Board":
        """Build a board from an explicit mine layout."""
        mines = list(mines)
        return cls(rows, cols, len(mines), mines=mines)

    # ------------------------------------------------------------------
    # Core board / cell helpers
    # ------------------------------------------------------------------
    def in_bounds(self, row: int, col: int) -> bool:
        return 0 <= row < self.rows and 0 <= col < self.cols

    def get_cell(self, row: int, col: int) -> Cell:
        if not self.in_bounds(row, col):
            raise IndexError(f"Cell ({row}, {col}) is out of bounds.")
        return self.grid[row][col]

    def neighbors(self, row: int, col: int) -> Iterable[Cell]:
        """Yield all neighboring cells (up to 8) in row-major order."""
        for dr in (-1, 0, 1):
            for dc in (-1, 0, 1):
                if dr == 0 and dc == 0:
                    continue
                nr, nc = row + dr, col + dc
                if self.in_bounds(nr, nc):
                    yield self.grid[nr][nc]

    @property
    def game_over(self) -> bool:
        return self.status in (GameStatus.WON, GameStatus.LOST)

    @property
    def win(self) -> bool:
        return self.status == GameStatus.WON

    def clone(self) -> "Board":
        """Deep copy sharing no mutable state with this board."""
        twin = Board.__new__(Board)
        twin.rows = self.rows
        twin.cols = self.cols
        twin.num_mines = self.num_mines
        twin.rng = random.Random()
        twin.rng.setstate(self.rng.getstate())
        twin.status = self.status
        twin.version = self.version
        twin.last_action_log = []
        twin.grid = [[cell.copy() for cell in row] for row in self.grid]
        return twin

    # ------------------------------------------------------------------
    # Mine placement and counts
    # ------------------------------------------------------------------
    def _place_mines(self, safe_cell: Optional[Coord]) -> None:
        """
        Shuffle every cell index except the protected one and turn the
        first ``num_mines`` of them into mines.
        """
        indices = [
            r * self.cols + c
            for r in range(self.rows)
            for c in range(self.cols)
            if (r, c) != safe_cell
        ]
        if self.num_mines > len(indices):
            raise ConfigError(
                "Not enough cells to place mines while keeping the first click safe."
            )

        self.rng.shuffle(indices)
        for index in indices[: self.num_mines]:
            r, c = divmod(index, self.cols)
            self.grid[r][c].is_mine = True

    def _place_given_mines(self, mines: Iterable[Coord], safe_cell: Optional[Coord]) -> None:
        layout = set()
        for r, c in mines:
            if not self.in_bounds(r, c):
                raise ConfigError(f"Mine ({r}, {c}) is out of bounds.")
            if (r, c) == safe_cell:
                raise ConfigError(f"Mine ({r}, {c}) sits on the protected cell.")
            layout.add((r, c))
        if len(layout) != self.num_mines:
            raise ConfigError(
                f"Layout holds {len(layout)} distinct mines, expected {self.num_mines}."
            )
        for r, c in layout:
            self.grid[r][c].is_mine = True

    def _compute_adjacent_mine_counts(self) -> None:
        """Calculate the number of mines around each cell."""
        for row in range(self.rows):
            for col in range(self.cols):
                cell = self.grid[row][col]
                if cell.is_mine:
                    cell.adjacent_mines = 0
                    continue
                cell.adjacent_mines = sum(1 for n in self.neighbors(row, col) if n.is_mine)

    # ------------------------------------------------------------------
    # No-op rules (shared with the move simulator)
    # ------------------------------------------------------------------
    def can_reveal(self, row: int, col: int) -> bool:
        cell = self.get_cell(row, col)
        return not self.game_over and cell.is_hidden

    def can_flag(self, row: int, col: int) -> bool:
        cell = self.get_cell(row, col)
        return not self.game_over and not cell.is_open

    def can_chord(self, row: int, col: int) -> bool:
        """
        A chord only does something when the target is an open number whose
        flagged neighbours match it exactly and something is left to open.
        """
        cell = self.get_cell(row, col)
        if self.game_over or not cell.is_open or cell.adjacent_mines == 0:
            return False
        flagged = 0
        hidden = 0
        for n in self.neighbors(row, col):
            if n.is_flagged:
                flagged += 1
            elif n.is_hidden:
                hidden += 1
        return flagged == cell.adjacent_mines and hidden > 0

    # ------------------------------------------------------------------
    # Game actions: reveal / flag / chord
    # ------------------------------------------------------------------
    def reveal(self, row: int, col: int) -> RevealOutcome:
        """
        Open the cell at (row, col).

        - Flagged or already open targets are ignored.
        - If the opened cell is a mine, the game is lost.
        - If the opened cell has 0 adjacent mines, a flood-fill is performed.
        """
        self.last_action_log = []
        if not self.can_reveal(row, col):
            return RevealOutcome.NO_OP

        self._mark_played()
        outcome = self._open(row, col)
        if outcome is RevealOutcome.CONTINUING and self._all_safe_cells_opened():
            self._finish_won()
            outcome = RevealOutcome.WON
        return outcome

    def toggle_flag(self, row: int, col: int) -> bool:
        """
        Toggle a flag on the given cell.
        Flags can only be placed on unopened cells.
        """
        self.last_action_log = []
        if not self.can_flag(row, col):
            return False

        self._mark_played()
        cell = self.grid[row][col]
        if cell.state == CellState.UNOPENED:
            cell.state = CellState.FLAGGED
            self.last_action_log.append(("flag", row, col))
        else:
            cell.state = CellState.UNOPENED
            self.last_action_log.append(("unflag", row, col))
        return True

    def chord(self, row: int, col: int) -> RevealOutcome:
        """Open every unflagged hidden neighbour of a satisfied number."""
        self.last_action_log = []
        if not self.can_chord(row, col):
            return RevealOutcome.NO_OP

        self._mark_played()
        for neighbor in list(self.neighbors(row, col)):
            if not neighbor.is_hidden:
                continue
            if self._open(neighbor.row, neighbor.col) is RevealOutcome.LOST:
                return RevealOutcome.LOST

        if self._all_safe_cells_opened():
            self._finish_won()
            return RevealOutcome.WON
        return RevealOutcome.CONTINUING

    def _mark_played(self) -> None:
        self.version += 1
        if self.status == GameStatus.IDLE:
            self.status = GameStatus.PLAYING

    def _open(self, row: int, col: int) -> RevealOutcome:
        cell = self.grid[row][col]
        if cell.is_mine:
            cell.state = CellState.OPEN
            cell.is_exploded = True
            self.last_action_log.append(("explode", row, col))
            self._expose_mines()
            self.status = GameStatus.LOST
            return RevealOutcome.LOST

        self._flood_fill_open(row, col)
        return RevealOutcome.CONTINUING

    def _flood_fill_open(self, start_row: int, start_col: int) -> None:
        """
        Open a region of safe cells with 0 adjacent mines, plus their
        boundary of numbered cells (standard Minesweeper behaviour).
        """
        stack: List[Coord] = [(start_row, start_col)]

        while stack:
            row, col = stack.pop()
            cell = self.grid[row][col]

            if cell.is_open or cell.is_flagged or cell.is_mine:
                continue

            cell.state = CellState.OPEN
            self.last_action_log.append(("open", row, col))

            if cell.adjacent_mines == 0:
                for neighbor in self.neighbors(row, col):
                    if neighbor.is_hidden and not neighbor.is_mine:
                        stack.append((neighbor.row, neighbor.col))

    def _expose_mines(self) -> None:
        """Open unflagged mines and mark flags that sit on safe cells."""
        for cell in self.iter_cells():
            if cell.is_mine:
                if cell.is_hidden:
                    cell.state = CellState.OPEN
            elif cell.is_flagged:
                cell.is_wrong_flag = True

    def _finish_won(self) -> None:
        """Flag every mine and drop any stray flag."""
        self.status = GameStatus.WON
        for cell in self.iter_cells():
            if cell.is_mine:
                cell.state = CellState.FLAGGED
            elif cell.is_flagged:
                cell.state = CellState.UNOPENED
            cell.is_wrong_flag = False

    # ------------------------------------------------------------------
    # Queries (useful for the tutor & tests)
    # ------------------------------------------------------------------
    def _all_safe_cells_opened(self) -> bool:
        """True iff every non-mine cell is open."""
        return all(cell.is_open for cell in self.iter_cells() if not cell.is_mine)

    def hidden_cells(self) -> Iterable[Cell]:
        """Iterate over all currently unopened (and unflagged) cells."""
        for cell in self.iter_cells():
            if cell.is_hidden:
                yield cell

    def iter_cells(self) -> Iterable[Cell]:
        """Iterate over all cells in row-major order."""
        for row in self.grid:
            for cell in row:
                yield cell

    def count_flags(self) -> int:
        return sum(1 for cell in self.iter_cells() if cell.is_flagged)

    def count_open(self) -> int:
        return sum(1 for cell in self.iter_cells() if cell.is_open)

    def remaining_mines_estimate(self) -> int:
        """
        How many mines *should* remain, assuming every flag is correct.
        Mainly for UI/debugging, not strict rule enforcement.
        """
        return self.num_mines - self.count_flags()

    # ------------------------------------------------------------------
    # Rendering helpers (terminal front-end can just print(board))
    # ------------------------------------------------------------------
    def to_display_grid(self, reveal_mines: bool = False) -> List[List[str]]:
        return [
            [
                self.grid[r][c].display_char(reveal_mines=reveal_mines or self.game_over)
                for c in range(self.cols)
            ]
            for r in range(self.rows)
        ]

    def __str__(self) -> str:
        return self.render()

    def render(self, reveal_mines: bool = False) -> str:
        """
        Render the board as a multiline string with 1-based row/column
        labels, e.g.:

             1  2  3
          1 [U][2][O]
          2 [F][2][O]
        """
        grid = self.to_display_grid(reveal_mines=reveal_mines)
        header = "    " + "".join(f"{c + 1:>3}" for c in range(self.cols))
        lines = [header]
        for r in range(self.rows):
            line = "".join(f"[{grid[r][c]}]" for c in range(self.cols))
            lines.append(f"{r + 1:>3} {line}")
        return "\n".join(lines)


def generate(
    rows: int,
    cols: int,
    num_mines: int,
    safe_cell: Optional[Coord] = None,
    rng: Optional[random.Random] = None,
) -> Board:
    """Create a fresh board; raises ConfigError for unsupported settings."""
    return Board(rows, cols, num_mines, safe_cell=safe_cell, rng=rng)
