# tutor/advisor.py
"""
Efficiency advisor.

Searches a few moves ahead on a copy of the board and reports which first
moves lead to the most board value for the fewest clicks. The search knows
where the mines are (it plays on the real layout), so it answers "what
would an efficient player click next", not "what is deducible".
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, FrozenSet, Hashable, List, NamedTuple, Optional, Tuple

from board import Board, Coord
from settings import (
    DEEP_CANDIDATE_LIMIT,
    DEFAULT_DEPTH,
    MAX_DEPTH,
    MIN_DEPTH,
    ROOT_CANDIDATE_LIMITS,
    TutorMode,
    clamp,
    node_budget,
)
from value_units import Segmentation, completed_by, segment
from . import candidates, simulator
from .utils import ActionType, Move, is_effective


log = logging.getLogger(__name__)

EXPLODED = float("-inf")


class CellTag(Enum):
    REVEAL = "reveal"
    FLAG = "flag"
    CHORD = "chord"
    GUESS = "guess"
    NONE = "none"


@dataclass(frozen=True)
class Classification:
    """Cells the tutor currently wants clicked, by kind of click."""
    reveal: FrozenSet[Coord] = frozenset()
    flag: FrozenSet[Coord] = frozenset()
    chord: FrozenSet[Coord] = frozenset()
    guess: FrozenSet[Coord] = frozenset()

    @property
    def is_empty(self) -> bool:
        return not (self.reveal or self.flag or self.chord or self.guess)

    @property
    def is_guess(self) -> bool:
        return bool(self.guess)

    def bucket(self, action: ActionType) -> FrozenSet[Coord]:
        return {"reveal": self.reveal, "flag": self.flag, "chord": self.chord}[action]

    def tag_for(self, row: int, col: int) -> CellTag:
        coord = (row, col)
        if coord in self.guess:
            return CellTag.GUESS
        if coord in self.reveal:
            return CellTag.REVEAL
        if coord in self.chord:
            return CellTag.CHORD
        if coord in self.flag:
            return CellTag.FLAG
        return CellTag.NONE

    def tags(self) -> Dict[Coord, CellTag]:
        """Highlight map for every classified cell."""
        tagged: Dict[Coord, CellTag] = {}
        for coords in (self.flag, self.chord, self.reveal, self.guess):
            for r, c in coords:
                tagged[(r, c)] = self.tag_for(r, c)
        return tagged

    def banner(self) -> str:
        if self.is_empty:
            return "No recommendation: any move is fine."
        if self.is_guess:
            return f"No clear best move: reveal any of the {_cells(len(self.guess))} highlighted."
        parts = []
        for verb, coords in (("reveal", self.reveal), ("flag", self.flag), ("chord", self.chord)):
            if coords:
                parts.append(f"{verb} {_cells(len(coords))}")
        return "Most efficient: " + " or ".join(parts) + "."


def _cells(n: int) -> str:
    return f"{n} cell" if n == 1 else f"{n} cells"


EMPTY = Classification()


@dataclass(frozen=True)
class PathScore:
    """Best line found so far for one first move."""
    gain: float
    clicks: int
    path: Tuple[Move, ...]


@dataclass(frozen=True)
class Advice:
    classification: Classification
    stamp: Optional[Hashable] = None
    best_gain: Optional[float] = None
    best_clicks: Optional[int] = None
    scores: Dict[Move, PathScore] = field(default_factory=dict)
    explored: int = 0
    truncated: bool = False

    def recommended_moves(self) -> List[Move]:
        """Winning first moves in candidate order."""
        if self.best_gain is None or self.best_gain <= 0:
            return []
        return [
            move
            for move, score in self.scores.items()
            if score.gain == self.best_gain and score.clicks == self.best_clicks
        ]


class _Frame(NamedTuple):
    board: Board
    move: Move
    first_move: Move
    clicks: int
    gain: int
    path: Tuple[Move, ...]
    remaining: int


class Advisor:
    """
    Depth-limited search over candidate moves.

    depth      : longest click sequence considered (1..5)
    mode       : tutor mode; flags are only considered in classic mode
    root_limit : candidates per move type at the root (mode default)
    deep_limit : candidates per move type below the root
    max_nodes  : simulated moves per run, by default scaled to the board
                 size. Root moves are always evaluated; what is left is
                 shared out between the root subtrees, and a subtree that
                 runs out of its share marks the advice as truncated.
    """

    def __init__(
        self,
        depth: int = DEFAULT_DEPTH,
        mode: TutorMode = TutorMode.CLASSIC,
        root_limit: Optional[int] = None,
        deep_limit: int = DEEP_CANDIDATE_LIMIT,
        max_nodes: Optional[int] = None,
    ) -> None:
        self.depth = clamp(depth, MIN_DEPTH, MAX_DEPTH)
        self.mode = mode
        self.root_limit = root_limit if root_limit is not None else ROOT_CANDIDATE_LIMITS.get(mode, 0)
        self.deep_limit = deep_limit
        self.max_nodes = max_nodes

    def advise(
        self,
        board: Board,
        stamp: Optional[Hashable] = None,
        segmentation: Optional[Segmentation] = None,
    ) -> Advice:
        """Classify the next moves for ``board``; ``board`` is not modified."""
        if self.mode is TutorMode.OFF or board.game_over:
            return Advice(EMPTY, stamp)

        if board.count_open() == 0:
            guess = frozenset(cell.coord for cell in board.hidden_cells())
            return Advice(Classification(guess=guess), stamp)

        segmentation = segmentation or segment(board)
        max_nodes = self.max_nodes if self.max_nodes is not None else node_budget(board.rows, board.cols)
        scores: Dict[Move, PathScore] = {}
        explored = 0

        # Root level: every candidate is evaluated.
        expandable: List[Tuple[simulator.SimulationResult, int]] = []
        for move in candidates.generate(board, self.mode, self.root_limit):
            if not is_effective(board, move):
                continue
            result = simulator.apply(board, move)
            explored += 1
            if result.exploded:
                scores[move] = PathScore(EXPLODED, 1, (move,))
                continue
            gain = completed_by(result.board, segmentation, result.opened)
            _register(scores, move, gain, 1, (move,))
            if self.depth > 1 and not result.board.game_over:
                expandable.append((result, gain))

        # Deeper levels: each root subtree gets an equal share of what is
        # left, and whatever a subtree does not spend carries over.
        truncated = False
        for index, (result, gain) in enumerate(expandable):
            share = max(0, (max_nodes - explored) // (len(expandable) - index))
            spent, cut = self._explore(result, gain, share, segmentation, scores)
            explored += spent
            truncated = truncated or cut

        advice = self._select(board, segmentation, scores, stamp, explored, truncated)
        log.debug(
            "advice depth=%d mode=%s explored=%d/%d truncated=%s best_gain=%s best_clicks=%s",
            self.depth,
            self.mode.value,
            explored,
            max_nodes,
            truncated,
            advice.best_gain,
            advice.best_clicks,
        )
        return advice

    def _explore(
        self,
        root: simulator.SimulationResult,
        root_gain: int,
        budget: int,
        segmentation: Segmentation,
        scores: Dict[Move, PathScore],
    ) -> Tuple[int, bool]:
        """Depth-first search below one root move; returns (spent, truncated)."""
        stack = self._children(root.board, root.move, 1, root_gain, (root.move,), self.depth - 1)
        spent = 0
        while stack:
            if spent >= budget:
                return spent, True
            frame = stack.pop()
            if not is_effective(frame.board, frame.move):
                continue
            result = simulator.apply(frame.board, frame.move)
            spent += 1
            if result.exploded:
                continue
            clicks = frame.clicks + 1
            path = frame.path + (frame.move,)
            gain = frame.gain + completed_by(result.board, segmentation, result.opened)
            _register(scores, frame.first_move, gain, clicks, path)
            if frame.remaining > 1 and not result.board.game_over:
                stack.extend(
                    self._children(result.board, frame.first_move, clicks, gain, path, frame.remaining - 1)
                )
        return spent, False

    def _children(
        self,
        board: Board,
        first_move: Move,
        clicks: int,
        gain: int,
        path: Tuple[Move, ...],
        remaining: int,
    ) -> List[_Frame]:
        """Frames for every candidate after ``path``, reversed for popping in order."""
        return [
            _Frame(board, move, first_move, clicks, gain, path, remaining)
            for move in reversed(candidates.generate(board, self.mode, self.deep_limit))
        ]

    def _select(
        self,
        board: Board,
        segmentation: Segmentation,
        scores: Dict[Move, PathScore],
        stamp: Optional[Hashable],
        explored: int,
        truncated: bool,
    ) -> Advice:
        selectable = {move: score for move, score in scores.items() if score.gain != EXPLODED}
        best_gain = max((s.gain for s in selectable.values()), default=None)

        if best_gain is None or best_gain <= 0:
            classification = _tied_guesses(board, segmentation, selectable)
            return Advice(classification, stamp, best_gain, None, scores, explored, truncated)

        winners = [move for move, score in selectable.items() if score.gain == best_gain]
        best_clicks = min(selectable[move].clicks for move in winners)
        winners = [move for move in winners if selectable[move].clicks == best_clicks]

        by_action: Dict[str, FrozenSet[Coord]] = {
            action: frozenset(m.coord for m in winners if m.action == action)
            for action in ("reveal", "flag", "chord")
        }
        classification = Classification(
            reveal=by_action["reveal"],
            flag=by_action["flag"],
            chord=by_action["chord"],
        )
        return Advice(classification, stamp, best_gain, best_clicks, scores, explored, truncated)


def _register(
    scores: Dict[Move, PathScore],
    first_move: Move,
    gain: float,
    clicks: int,
    path: Tuple[Move, ...],
) -> None:
    """Keep the first best line unless a later one is strictly better."""
    current = scores.get(first_move)
    if (
        current is None
        or gain > current.gain
        or (gain == current.gain and clicks < current.clicks)
    ):
        scores[first_move] = PathScore(gain, clicks, path)


def _tied_guesses(
    board: Board,
    segmentation: Segmentation,
    selectable: Dict[Move, PathScore],
) -> Classification:
    """
    When nothing gains value, several safe reveals that share the best
    frontier score and belong to different units are equally good guesses.
    """
    safe = [move.coord for move in selectable if move.action == "reveal"]
    if len(safe) < 2:
        return EMPTY

    score_of = {coord: score for score, coord in candidates.frontier_scores(board)}
    top = max(score_of.get(coord, 0) for coord in safe)
    tied = [coord for coord in safe if score_of.get(coord, 0) == top]
    units = {segmentation.unit_of.get(coord) for coord in tied}
    if len(tied) >= 2 and len(units) >= 2:
        return Classification(guess=frozenset(tied))
    return EMPTY
