# settings.py
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Dict


# ---------------------------------------------------------------------------
# Board limits
# ---------------------------------------------------------------------------

MIN_SIDE = 6
MAX_SIDE = 30

# ---------------------------------------------------------------------------
# Tutor search limits
# ---------------------------------------------------------------------------

MIN_DEPTH = 1
MAX_DEPTH = 5
DEFAULT_DEPTH = 2

DEEP_CANDIDATE_LIMIT = 18   # candidates per move type below the root
CHORD_CANDIDATE_FLOOR = 30  # chord pool is never cut below this
NODE_BUDGET = 6000          # simulated moves per advisor run, at most
CELL_VISIT_BUDGET = 300_000  # nodes x board cells per run


def clamp(value: int, low: int, high: int) -> int:
    return min(max(value, low), high)


def node_budget(rows: int, cols: int) -> int:
    """Simulated moves per advisor run on a rows x cols board."""
    return max(1, min(NODE_BUDGET, CELL_VISIT_BUDGET // (rows * cols)))


class TutorMode(Enum):
    """How the efficiency tutor treats player input."""
    OFF = "off"
    CLASSIC = "classic"   # flags allowed
    NO_FLAG = "no-flag"   # flags never recommended nor permitted

    @property
    def allows_flags(self) -> bool:
        return self is TutorMode.CLASSIC


ROOT_CANDIDATE_LIMITS: Dict[TutorMode, int] = {
    TutorMode.CLASSIC: 16,
    TutorMode.NO_FLAG: 24,
}


@dataclass(frozen=True)
class BoardConfig:
    rows: int
    cols: int
    mines: int

    @classmethod
    def sanitize(cls, rows, cols, mines) -> "BoardConfig":
        """
        Clamp raw (possibly user-typed) values into the supported range:
        rows, cols in [6, 30] and mines in [1, rows*cols - 1].
        Non-numeric input falls back to the lower bound.
        """
        safe_rows = clamp(_to_int(rows), MIN_SIDE, MAX_SIDE)
        safe_cols = clamp(_to_int(cols), MIN_SIDE, MAX_SIDE)
        safe_mines = clamp(_to_int(mines), 1, safe_rows * safe_cols - 1)
        return cls(safe_rows, safe_cols, safe_mines)


def _to_int(value) -> int:
    try:
        return int(round(float(value)))
    except (TypeError, ValueError, OverflowError):
        return 0


DIFFICULTIES: Dict[str, BoardConfig] = {
    "beginner": BoardConfig(rows=9, cols=9, mines=10),
    "intermediate": BoardConfig(rows=16, cols=16, mines=40),
    "expert": BoardConfig(rows=16, cols=30, mines=99),
}


@dataclass
class TutorSettings:
    """Per-session tutor preferences."""
    mode: TutorMode = TutorMode.CLASSIC
    depth: int = DEFAULT_DEPTH
    protect_first_click: bool = True

    def __post_init__(self) -> None:
        self.depth = sanitize_depth(self.depth)


def sanitize_depth(value) -> int:
    """Search depth from raw input, clamped to [1, 5]."""
    return clamp(_to_int(value), MIN_DEPTH, MAX_DEPTH)
