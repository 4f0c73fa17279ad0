# tests/conftest.py
import random

import pytest

from board import Board
from settings import TutorMode, TutorSettings
from session import TutorSession


CORNER_MINES = [(1, 1), (0, 4)]

# Two left-hand clusters sealed off by a mine wall in column 3; the gaps at
# (2, 3) and (6, 3) are lone numbers, one facing each cluster.
WALL_MINES = [
    (0, 3), (1, 3), (3, 3), (4, 3), (5, 3), (7, 3), (8, 3),
    (4, 0), (4, 1), (4, 2),
]


@pytest.fixture
def rng():
    return random.Random(1234)


@pytest.fixture
def fresh_corner_board():
    """6x6 board with mines at (1, 1) and (0, 4), nothing opened yet."""
    return Board.from_mines(6, 6, CORNER_MINES)


@pytest.fixture
def corner_board(fresh_corner_board):
    """
    The corner board after opening (5, 5). The flood leaves row 0, (1, 0)
    and (1, 1) hidden; (2, 2) shows a 1 whose only hidden neighbour is the
    mine at (1, 1).
    """
    fresh_corner_board.reveal(5, 5)
    return fresh_corner_board


@pytest.fixture
def wall_board():
    """9x6 wall board with the right side and both gap cells opened."""
    board = Board.from_mines(9, 6, WALL_MINES)
    board.reveal(0, 5)
    board.reveal(2, 3)
    board.reveal(6, 3)
    return board


@pytest.fixture
def pinched_board():
    """
    6x6 board with mines at (0, 1) and (0, 3); only the 2 at (0, 2) is open.
    Its safe neighbours (1, 1), (1, 2) and (1, 3) are numbers on the rim of
    the zero cluster that covers most of the board.
    """
    board = Board.from_mines(6, 6, [(0, 1), (0, 3)])
    board.reveal(0, 2)
    return board


@pytest.fixture
def make_session():
    """Session factory playing on an explicit board."""

    def _make(board, mode=TutorMode.OFF, depth=2, **kwargs):
        session = TutorSession(settings=TutorSettings(mode=mode, depth=depth), **kwargs)
        session.load(board)
        return session

    return _make
