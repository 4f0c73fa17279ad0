from __future__ import annotations

import logging
import random
import time
from concurrent.futures import Executor, Future
from dataclasses import dataclass, field
from typing import Callable, Dict, Optional, Tuple

from board import Board, Coord, GameStatus, RevealOutcome, generate
from settings import DIFFICULTIES, BoardConfig, TutorMode, TutorSettings
from tutor.advisor import Advice, Advisor, CellTag, Classification
from tutor.gate import TutorGate
from tutor.probability import SolverCapability, Unavailable
from tutor.utils import Move, apply_move
from value_units import Segmentation, annotate, progress


log = logging.getLogger(__name__)

Stamp = Tuple[int, int, int]


@dataclass(frozen=True)
class ActionResult:
    """What happened to one player action."""
    accepted: bool
    move: Move
    outcome: Optional[RevealOutcome] = None
    changed: bool = False
    highlights: Dict[Coord, CellTag] = field(default_factory=dict)


@dataclass(frozen=True)
class Metrics:
    clicks: int
    solved_value: int
    total_value: int
    elapsed: float

    @property
    def value_per_second(self) -> Optional[float]:
        return self.solved_value / self.elapsed if self.elapsed > 0 else None

    @property
    def clicks_per_second(self) -> Optional[float]:
        return self.clicks / self.elapsed if self.elapsed > 0 else None

    @property
    def efficiency(self) -> Optional[float]:
        """Board value per click, in percent."""
        return 100.0 * self.solved_value / self.clicks if self.clicks else None

    @property
    def estimated_time(self) -> Optional[float]:
        """Projected seconds to clear the board at the current pace."""
        rate = self.value_per_second
        return self.total_value / rate if rate else None


class TutorSession:
    """
    One running game plus everything the tutor needs around it.

    The session exclusively owns the live board. The advisor only ever sees
    clones; each run is stamped with ``(board serial, board version, tutor
    settings epoch)`` and a result whose stamp no longer matches is dropped.
    """

    def __init__(
        self,
        config: BoardConfig = DIFFICULTIES["beginner"],
        settings: Optional[TutorSettings] = None,
        rng: Optional[random.Random] = None,
        probability_source: Optional[SolverCapability] = None,
        clock: Callable[[], float] = time.perf_counter,
        auto_refresh: bool = True,
    ) -> None:
        self.config = config
        self.auto_refresh = auto_refresh
        self.settings = settings or TutorSettings()
        self.rng = rng or random.Random()
        self.probability_source = probability_source or Unavailable()
        self.clock = clock

        self.gate = TutorGate()
        self.serial = 0
        self.epoch = 0
        self.board: Board
        self.segmentation: Segmentation
        self.advice: Optional[Advice] = None
        self.new_game()

    # ------------------------------------------------------------------
    # Game lifecycle
    # ------------------------------------------------------------------
    def new_game(self, config: Optional[BoardConfig] = None) -> None:
        if config is not None:
            self.config = config
        self._start(generate(self.config.rows, self.config.cols, self.config.mines, rng=self.rng))

    def load(self, board: Board) -> None:
        """Play on an explicit layout (replays, fixtures); it is never regenerated."""
        self.config = BoardConfig(board.rows, board.cols, board.num_mines)
        self._start(board, regenerate_on_first_reveal=False)

    def _start(self, board: Board, regenerate_on_first_reveal: bool = True) -> None:
        self._install(board)
        self.first_reveal_pending = regenerate_on_first_reveal
        self.flag_mode = False
        self.clicks = 0
        self._started_at: Optional[float] = None
        self._finished_at: Optional[float] = None
        self._advice_outdated()

    def _install(self, board: Board) -> None:
        self.board = board
        self.serial += 1
        self.segmentation = annotate(board)
        self.advice = None
        self.gate.clear()

    def _regenerate_around(self, coord: Coord) -> None:
        """Swap the placeholder board for one where ``coord`` is safe."""
        flags = [cell.coord for cell in self.board.iter_cells() if cell.is_flagged]
        fresh = generate(
            self.config.rows, self.config.cols, self.config.mines, safe_cell=coord, rng=self.rng
        )
        for r, c in flags:
            fresh.toggle_flag(r, c)
        classification = self.gate.classification
        self._install(fresh)
        self.gate.update(classification)
        log.debug("regenerated board around first click %s", coord)

    @property
    def status(self) -> GameStatus:
        return self.board.status

    @property
    def stamp(self) -> Stamp:
        return (self.serial, self.board.version, self.epoch)

    def set_tutor(self, mode: Optional[TutorMode] = None, depth: Optional[int] = None) -> None:
        if mode is not None:
            self.settings = TutorSettings(mode, self.settings.depth, self.settings.protect_first_click)
        if depth is not None:
            self.settings = TutorSettings(self.settings.mode, depth, self.settings.protect_first_click)
        self.epoch += 1
        self._advice_outdated()

    def toggle_flag_mode(self) -> bool:
        self.flag_mode = not self.flag_mode
        return self.flag_mode

    # ------------------------------------------------------------------
    # Advice
    # ------------------------------------------------------------------
    def advisor(self) -> Advisor:
        return Advisor(depth=self.settings.depth, mode=self.settings.mode)

    def _advice_outdated(self) -> None:
        """
        The board or the tutor settings changed. Re-run the advisor right
        away, or, when runs are scheduled by the caller, drop the old
        classification until the new result is applied.
        """
        if self.auto_refresh:
            self.refresh_advice()
        else:
            self.advice = None
            self.gate.clear()

    @property
    def advice_pending(self) -> bool:
        return self.advice is None or self.advice.stamp != self.stamp

    def refresh_advice(self) -> Advice:
        advice = self.advisor().advise(self.board, self.stamp, self.segmentation)
        self.apply_advice(advice)
        return advice

    def submit_advice(self, executor: Executor) -> "Future[Advice]":
        """Run the advisor on a snapshot in ``executor``; apply with apply_advice."""
        snapshot = self.board.clone()
        return executor.submit(self.advisor().advise, snapshot, self.stamp, self.segmentation)

    def apply_advice(self, advice: Advice) -> bool:
        if advice.stamp != self.stamp:
            log.debug("dropping stale advice %s, board is at %s", advice.stamp, self.stamp)
            return False
        self.advice = advice
        self.gate.update(advice.classification)
        return True

    @property
    def classification(self) -> Classification:
        return self.gate.classification

    def highlights(self) -> Dict[Coord, CellTag]:
        return self.classification.tags()

    def banner(self) -> str:
        if self.settings.mode is TutorMode.OFF:
            return "Tutor off."
        if self.board.status == GameStatus.WON:
            return "Board cleared."
        if self.board.status == GameStatus.LOST:
            return "Mine hit."
        return self.classification.banner()

    def mine_probabilities(self) -> Optional[Dict[Coord, float]]:
        return self.probability_source.probabilities(self.board)

    # ------------------------------------------------------------------
    # Player actions
    # ------------------------------------------------------------------
    def reveal(self, row: int, col: int) -> ActionResult:
        return self.act(Move("reveal", row, col))

    def toggle_flag(self, row: int, col: int) -> ActionResult:
        return self.act(Move("flag", row, col))

    def chord(self, row: int, col: int) -> ActionResult:
        return self.act(Move("chord", row, col))

    def click(self, row: int, col: int) -> ActionResult:
        """
        Primary click: an open number chords, otherwise reveal, or flag
        while flag mode is on.
        """
        cell = self.board.get_cell(row, col)
        if cell.is_open and cell.adjacent_mines > 0:
            return self.chord(row, col)
        if self.flag_mode:
            return self.toggle_flag(row, col)
        return self.reveal(row, col)

    def act(self, move: Move) -> ActionResult:
        self.board.get_cell(move.row, move.col)  # bounds

        if self.board.game_over:
            return ActionResult(True, move, RevealOutcome.NO_OP)

        if self.settings.mode is not TutorMode.OFF:
            decision = self.gate.check(move)
            if not decision.permitted:
                log.debug("tutor rejected %s", move)
                return ActionResult(False, move, highlights=decision.highlights)

        if (
            move.action == "reveal"
            and self.first_reveal_pending
            and self.settings.protect_first_click
            and self.board.can_reveal(move.row, move.col)
        ):
            self._regenerate_around(move.coord)

        result = apply_move(self.board, move)
        if isinstance(result, RevealOutcome):
            outcome = result
            changed = result is not RevealOutcome.NO_OP
        else:
            outcome = RevealOutcome.CONTINUING if result else RevealOutcome.NO_OP
            changed = bool(result)

        if changed:
            self.clicks += 1
            if self._started_at is None:
                self._started_at = self.clock()
            if move.action != "flag":
                self.first_reveal_pending = False
            if self.board.game_over:
                self._finished_at = self.clock()
                log.debug("game over: %s after %d clicks", self.board.status.value, self.clicks)
            self._advice_outdated()

        return ActionResult(True, move, outcome, changed)

    def auto_step(self) -> Optional[ActionResult]:
        """
        Play the tutor's own choice. Returns None when it has nothing to
        offer (no winning move, no guess set, no probability source).
        """
        if self.board.game_over:
            return None
        advice = self.advice
        if advice is None or advice.stamp != self.stamp:
            advice = self.refresh_advice()

        moves = advice.recommended_moves()
        if moves:
            return self.act(moves[0])

        guess = advice.classification.guess
        if guess:
            center = (self.board.rows // 2, self.board.cols // 2)
            r, c = min(guess, key=lambda rc: (abs(rc[0] - center[0]) + abs(rc[1] - center[1]), rc))
            return self.act(Move("reveal", r, c))

        probabilities = self.mine_probabilities()
        if probabilities:
            r, c = min(probabilities, key=lambda rc: (probabilities[rc], rc))
            return self.act(Move("reveal", r, c))
        return None

    # ------------------------------------------------------------------
    # Metrics
    # ------------------------------------------------------------------
    def progress(self) -> int:
        return progress(self.board, self.segmentation)

    def metrics(self) -> Metrics:
        if self._started_at is None:
            elapsed = 0.0
        else:
            end = self._finished_at if self._finished_at is not None else self.clock()
            elapsed = end - self._started_at
        return Metrics(
            clicks=self.clicks,
            solved_value=self.progress(),
            total_value=self.segmentation.total,
            elapsed=elapsed,
        )
