# tests/test_board.py

import random

import pytest

from board import Board, CellState, ConfigError, GameStatus, RevealOutcome, generate
from value_units import progress, segment


def test_generated_board_initialization(rng):
    """A new board has the requested size and mines and a clean state."""
    board = generate(9, 9, 10, rng=rng)

    assert board.rows == 9
    assert board.cols == 9
    assert board.num_mines == 10

    assert board.status == GameStatus.IDLE
    assert board.game_over is False
    assert board.win is False
    assert board.version == 0

    assert sum(1 for c in board.iter_cells() if c.is_mine) == 10
    for cell in board.iter_cells():
        assert cell.state == CellState.UNOPENED


def test_same_seed_gives_same_layout():
    a = generate(16, 30, 99, rng=random.Random(5))
    b = generate(16, 30, 99, rng=random.Random(5))
    assert [c.is_mine for c in a.iter_cells()] == [c.is_mine for c in b.iter_cells()]


def test_safe_cell_is_never_a_mine():
    """With every other cell mined the protected cell must still be safe."""
    for seed in range(20):
        board = generate(6, 6, 35, safe_cell=(2, 3), rng=random.Random(seed))
        assert board.get_cell(2, 3).is_mine is False
        assert sum(1 for c in board.iter_cells() if c.is_mine) == 35


def test_adjacent_mine_counts_match_brute_force(rng):
    """Each cell's adjacent_mines should match the actual number of neighboring mines."""
    board = generate(16, 16, 40, rng=rng)

    def naive_neighbor_mine_count(r: int, c: int) -> int:
        count = 0
        for dr in (-1, 0, 1):
            for dc in (-1, 0, 1):
                if dr == 0 and dc == 0:
                    continue
                nr, nc = r + dr, c + dc
                if 0 <= nr < board.rows and 0 <= nc < board.cols:
                    if board.get_cell(nr, nc).is_mine:
                        count += 1
        return count

    for r in range(board.rows):
        for c in range(board.cols):
            cell = board.get_cell(r, c)
            if not cell.is_mine:
                assert cell.adjacent_mines == naive_neighbor_mine_count(r, c)


@pytest.mark.parametrize(
    "rows, cols, mines",
    [(5, 9, 3), (9, 31, 10), (0, 5, 1), (9, 9, 0), (9, 9, 81), (6, 6, -1)],
)
def test_invalid_board_parameters_raise_config_error(rows, cols, mines):
    """Bad dimensions or mine counts fail fast and are never clamped."""
    with pytest.raises(ConfigError):
        generate(rows, cols, mines)


def test_config_error_is_a_value_error():
    with pytest.raises(ValueError):
        Board(rows=6, cols=6, num_mines=36)


def test_explicit_layout_is_validated():
    with pytest.raises(ConfigError):
        Board.from_mines(6, 6, [(0, 0), (6, 0)])
    with pytest.raises(ConfigError):
        Board(6, 6, 2, mines=[(0, 0), (0, 0)])


def test_out_of_bounds_lookup_raises_index_error(corner_board):
    with pytest.raises(IndexError):
        corner_board.get_cell(6, 0)
    with pytest.raises(IndexError):
        corner_board.reveal(-1, 2)


def test_reveal_flood_fills_zero_region(corner_board):
    """Zero cells spread, numbered borders open but do not spread further."""
    hidden = {cell.coord for cell in corner_board.iter_cells() if not cell.is_open}

    assert hidden == {(0, 0), (0, 1), (0, 2), (0, 3), (0, 4), (0, 5), (1, 0), (1, 1)}
    assert corner_board.status == GameStatus.PLAYING
    assert corner_board.version == 1
    assert corner_board.get_cell(2, 2).adjacent_mines == 1


def test_reveal_noops_leave_board_untouched(corner_board):
    corner_board.toggle_flag(0, 1)
    version = corner_board.version

    assert corner_board.reveal(0, 1) is RevealOutcome.NO_OP  # flagged
    assert corner_board.reveal(2, 2) is RevealOutcome.NO_OP  # already open
    assert corner_board.get_cell(0, 1).is_flagged
    assert corner_board.version == version


def test_toggle_flag(corner_board):
    assert corner_board.toggle_flag(1, 1) is True
    assert corner_board.get_cell(1, 1).state == CellState.FLAGGED
    assert corner_board.remaining_mines_estimate() == 1

    assert corner_board.toggle_flag(1, 1) is True
    assert corner_board.get_cell(1, 1).state == CellState.UNOPENED

    assert corner_board.toggle_flag(2, 2) is False  # open cell


def test_first_flag_starts_the_game(fresh_corner_board):
    fresh_corner_board.toggle_flag(0, 0)
    assert fresh_corner_board.status == GameStatus.PLAYING


def test_reveal_mine_loses_and_exposes_board(corner_board):
    """Unflagged mines open, correct flags stay, wrong flags get marked."""
    corner_board.toggle_flag(0, 4)
    corner_board.toggle_flag(0, 0)

    assert corner_board.reveal(1, 1) is RevealOutcome.LOST
    assert corner_board.status == GameStatus.LOST

    exploded = corner_board.get_cell(1, 1)
    assert exploded.is_exploded and exploded.is_open

    assert corner_board.get_cell(0, 4).is_flagged
    assert corner_board.get_cell(0, 4).is_wrong_flag is False
    assert corner_board.get_cell(0, 0).is_flagged
    assert corner_board.get_cell(0, 0).is_wrong_flag is True

    # terminal
    assert corner_board.reveal(0, 1) is RevealOutcome.NO_OP
    assert corner_board.toggle_flag(0, 2) is False


def test_loss_opens_unflagged_mines_without_crediting_value(corner_board):
    segmentation = segment(corner_board)
    before = progress(corner_board, segmentation)

    assert corner_board.reveal(1, 1) is RevealOutcome.LOST

    other = corner_board.get_cell(0, 4)
    assert other.is_open
    assert not other.is_exploded
    assert corner_board.get_cell(1, 1).is_exploded
    assert corner_board.count_flags() == 0
    assert progress(corner_board, segmentation) == before


def test_win_flags_every_mine(corner_board):
    for r, c in [(0, 0), (0, 1), (0, 2), (0, 3), (1, 0)]:
        assert corner_board.reveal(r, c) is RevealOutcome.CONTINUING

    assert corner_board.reveal(0, 5) is RevealOutcome.WON
    assert corner_board.win is True
    assert corner_board.get_cell(1, 1).is_flagged
    assert corner_board.get_cell(0, 4).is_flagged
    assert corner_board.count_flags() == 2


def test_chord_opens_unflagged_neighbours(corner_board):
    corner_board.toggle_flag(1, 1)

    assert corner_board.chord(1, 2) is RevealOutcome.CONTINUING
    assert corner_board.last_action_log == [("open", 0, 1), ("open", 0, 2), ("open", 0, 3)]


def test_chord_requires_exact_flag_count(corner_board):
    """One flag short or one too many: nothing happens."""
    version = corner_board.version
    assert corner_board.chord(1, 2) is RevealOutcome.NO_OP
    assert corner_board.version == version

    corner_board.toggle_flag(1, 1)
    corner_board.toggle_flag(0, 2)
    version = corner_board.version
    assert corner_board.chord(1, 2) is RevealOutcome.NO_OP
    assert corner_board.version == version
    assert not corner_board.get_cell(0, 1).is_open


def test_chord_with_nothing_hidden_is_noop(corner_board):
    corner_board.toggle_flag(1, 1)
    assert corner_board.chord(2, 2) is RevealOutcome.NO_OP


def test_chord_on_wrong_flag_explodes_and_keeps_earlier_opens(corner_board):
    corner_board.toggle_flag(0, 2)

    assert corner_board.chord(1, 2) is RevealOutcome.LOST
    assert corner_board.get_cell(0, 1).is_open
    assert corner_board.get_cell(0, 3).is_open
    assert corner_board.get_cell(1, 1).is_exploded
    assert corner_board.get_cell(0, 2).is_wrong_flag


def test_clone_shares_no_state(corner_board):
    twin = corner_board.clone()
    twin.toggle_flag(1, 1)
    twin.reveal(0, 1)

    assert not corner_board.get_cell(1, 1).is_flagged
    assert not corner_board.get_cell(0, 1).is_open
    assert twin.version == corner_board.version + 2
    assert twin.rng is not corner_board.rng
    assert twin.rng.random() == corner_board.rng.random()


def test_render_uses_one_based_labels(corner_board):
    corner_board.toggle_flag(1, 1)
    lines = corner_board.render().splitlines()

    assert lines[0].split() == ["1", "2", "3", "4", "5", "6"]
    assert lines[1].startswith("  1 [U][U]")
    assert lines[2].startswith("  2 [U][F][1]")
