# tests/test_probability.py

import pytest

from tutor.probability import Available, ProbabilityEngine, Unavailable, global_mine_density
from tutor.utils import build_constraints, constraint_components


def test_unavailable_source_answers_nothing(corner_board):
    source = Unavailable()

    assert source.available is False
    assert source.probabilities(corner_board) is None
    assert source.determine(corner_board) is None


def test_determine_from_visible_numbers(corner_board):
    determination = ProbabilityEngine().determine(corner_board)

    assert (1, 1) in determination.mines
    assert {(0, 1), (0, 2), (0, 3), (1, 0)} <= determination.safe
    assert not determination.safe & determination.mines


def test_probabilities_cover_hidden_cells(corner_board):
    probabilities = Available().probabilities(corner_board)

    assert set(probabilities) == {cell.coord for cell in corner_board.hidden_cells()}
    assert all(0.0 <= p <= 1.0 for p in probabilities.values())
    assert probabilities[(1, 1)] == 1.0
    assert probabilities[(0, 1)] == 0.0
    # the numbers along row 1 pin the second mine down exactly
    assert probabilities[(0, 4)] == 1.0
    assert probabilities[(0, 5)] == 0.0
    # (0,0) touches no open number
    assert probabilities[(0, 0)] == pytest.approx(global_mine_density(corner_board))


def test_probabilities_only_use_visible_information(corner_board):
    """Flags are trusted as placed, even wrong ones."""
    corner_board.toggle_flag(0, 1)
    density = global_mine_density(corner_board)

    assert density == pytest.approx(1 / 7)
    assert (0, 1) not in Available().probabilities(corner_board)


def test_finished_game_has_no_probabilities(corner_board):
    corner_board.reveal(1, 1)
    assert Available().probabilities(corner_board) == {}


def test_constraints_group_into_components(corner_board):
    constraints = build_constraints(corner_board)
    by_cell = {(c.row, c.col): c for c in constraints}

    assert by_cell[(2, 2)].unknown == [(1, 1)]
    assert by_cell[(1, 2)].remaining == 1
    assert len(constraint_components(constraints)) == 1
