# tests/test_candidates.py

from settings import TutorMode
from tutor import candidates
from tutor.utils import Move


def test_frontier_scores_order(corner_board):
    """Most open neighbours first, then row-major."""
    assert candidates.frontier_scores(corner_board) == [
        (4, (1, 1)),
        (3, (0, 3)),
        (3, (0, 4)),
        (2, (0, 2)),
        (2, (0, 5)),
        (2, (1, 0)),
        (1, (0, 1)),
    ]


def test_chord_scores_order(corner_board):
    assert candidates.chord_scores(corner_board) == [
        (4, (1, 2)),
        (3, (1, 3)),
        (3, (1, 4)),
        (2, (1, 5)),
        (2, (2, 0)),
        (2, (2, 1)),
        (1, (2, 2)),
    ]


def test_classic_moves_reveals_then_flags_then_chords(corner_board):
    moves = candidates.generate(corner_board, TutorMode.CLASSIC, 16)
    actions = [move.action for move in moves]

    assert actions == ["reveal"] * 7 + ["flag"] * 7 + ["chord"] * 7
    assert moves[0] == Move("reveal", 1, 1)
    assert moves[7] == Move("flag", 1, 1)
    assert moves[14] == Move("chord", 1, 2)


def test_no_flag_mode_never_flags(corner_board):
    moves = candidates.generate(corner_board, TutorMode.NO_FLAG, 24)
    assert all(move.action != "flag" for move in moves)


def test_limit_cuts_cells_but_not_chords(corner_board):
    moves = candidates.generate(corner_board, TutorMode.CLASSIC, 3)

    assert [m.coord for m in moves if m.action == "reveal"] == [(1, 1), (0, 3), (0, 4)]
    assert len([m for m in moves if m.action == "flag"]) == 3
    assert len([m for m in moves if m.action == "chord"]) == 7


def test_empty_frontier_falls_back_to_every_hidden_cell(fresh_corner_board):
    moves = candidates.generate(fresh_corner_board, TutorMode.CLASSIC, None)
    reveals = [m for m in moves if m.action == "reveal"]

    assert len(reveals) == 36
    assert reveals[0] == Move("reveal", 0, 0)
