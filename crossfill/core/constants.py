"""Shared constants and enumerations for the crossword filler."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class Direction(str, Enum):
    """Word directions supported by the grid."""

    ACROSS = "across"
    DOWN = "down"


class SolveStatus(str, Enum):
    """Terminal outcomes of a solve."""

    SOLVED = "SOLVED"
    UNSATISFIABLE = "UNSATISFIABLE"
    BUDGET_EXCEEDED = "BUDGET_EXCEEDED"


class Backend(str, Enum):
    """Search engines available to :func:`crossfill.engine.solver.solve`."""

    MAC = "mac"
    CPSAT = "cpsat"


BLACK_SYMBOL = "#"
EMPTY_SYMBOLS = frozenset({".", "_", " "})


@dataclass(frozen=True)
class Bounds:
    """Simple rectangle bounds helper."""

    rows: int
    cols: int

    def contains(self, row: int, col: int) -> bool:
        return 0 <= row < self.rows and 0 <= col < self.cols
