# tests/test_value_units.py

from board import generate
from value_units import annotate, completed_by, flag_progress, progress, segment


def test_segmentation_partitions_safe_cells(rng):
    """Every non-mine cell is in exactly one unit, mines in none."""
    for _ in range(10):
        board = generate(16, 16, 40, rng=rng)
        seg = segment(board)

        seen = [coord for unit in seg.units for coord in unit.cells]
        safe = [cell.coord for cell in board.iter_cells() if not cell.is_mine]
        assert sorted(seen) == sorted(safe)
        assert len(seen) == len(set(seen))
        assert [unit.unit_id for unit in seg.units] == list(range(seg.total))


def test_corner_board_units(fresh_corner_board):
    seg = segment(fresh_corner_board)

    # one cluster for the big open area, six lone numbers along the top
    assert seg.total == 7
    cluster = seg.units[0]
    assert cluster.is_cluster
    assert (2, 3) in cluster.cells and (1, 2) in cluster.cells and (2, 0) in cluster.cells
    singles = [unit.cells[0] for unit in seg.units[1:]]
    assert singles == [(0, 0), (0, 1), (0, 2), (0, 3), (0, 5), (1, 0)]
    assert (1, 1) not in seg.unit_of


def test_segmentation_is_stable_during_play(fresh_corner_board):
    before = segment(fresh_corner_board)
    fresh_corner_board.reveal(5, 5)
    fresh_corner_board.toggle_flag(1, 1)
    after = segment(fresh_corner_board)

    assert after == before
    assert segment(fresh_corner_board) == after


def test_annotate_writes_unit_ids(fresh_corner_board):
    seg = annotate(fresh_corner_board)

    assert fresh_corner_board.get_cell(0, 0).value_unit == seg.unit_of[(0, 0)]
    assert fresh_corner_board.get_cell(1, 1).value_unit is None


def test_progress_counts_fully_open_units(fresh_corner_board):
    seg = segment(fresh_corner_board)
    assert progress(fresh_corner_board, seg) == 0

    fresh_corner_board.reveal(5, 5)
    assert progress(fresh_corner_board, seg) == 1

    fresh_corner_board.reveal(0, 1)
    assert progress(fresh_corner_board, seg) == 2


def test_flag_progress_counts_chordable_units(corner_board):
    seg = segment(corner_board)
    corner_board.toggle_flag(1, 1)

    # (0,1), (0,2) and (1,0) could be chorded open; (0,3) and (0,5) still
    # touch the unflagged mine, (0,0) touches no open number
    assert flag_progress(corner_board, seg) == 4
    assert progress(corner_board, seg) == 1


def test_completed_by_counts_units_finished_by_a_move(corner_board):
    seg = segment(corner_board)
    before = progress(corner_board, seg)

    corner_board.toggle_flag(1, 1)
    corner_board.chord(1, 2)
    opened = [(r, c) for event, r, c in corner_board.last_action_log if event == "open"]

    assert completed_by(corner_board, seg, opened) == 3
    assert progress(corner_board, seg) - before == 3
    assert completed_by(corner_board, seg, []) == 0
