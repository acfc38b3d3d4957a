"""Pretty-print helpers for crossword grids."""

from __future__ import annotations

import sys
from collections import Counter
from typing import TYPE_CHECKING, Mapping, Optional, Sequence

from ..core.constants import BLACK_SYMBOL
from ..io.solution import letter_grid

if TYPE_CHECKING:
    from ..core.models import Variable
    from ..engine.crossword import Crossword
    from ..engine.solver import SolveResult


EMPTY_SYMBOL = "."


def format_grid(
    crossword: Crossword,
    solution: Optional[Mapping[Variable, Sequence[Optional[str]]]] = None,
) -> str:
    width = crossword.width
    letters = letter_grid(crossword, solution or {})
    header_cells = [f"{c:>2}" for c in range(width)]
    lines = ["    " + " ".join(header_cells)]
    lines.append("    " + "-" * (3 * width - 1))
    for r in range(crossword.height):
        row_cells = []
        for c in range(width):
            if not crossword.structure[r][c]:
                row_cells.append(BLACK_SYMBOL)
            else:
                row_cells.append(letters[r][c] or EMPTY_SYMBOL)
        row_render = " ".join(f"{symbol:>2}" for symbol in row_cells)
        lines.append(f"{r:>2} | {row_render}")
    return "\n".join(lines)


def pretty_print_grid(
    crossword: Crossword,
    solution: Optional[Mapping[Variable, Sequence[Optional[str]]]] = None,
    *,
    label: str | None = None,
    stream=None,
) -> None:
    """Print the crossword grid in a human-friendly format."""

    stream = stream or sys.stdout
    if label:
        print(label, file=stream)
    print(format_grid(crossword, solution), file=stream)


def print_solve_stats(crossword: Crossword, result: SolveResult, *, stream=None) -> None:
    """Print grid + search stats for a finished solve."""

    stream = stream or sys.stdout
    print(format_grid(crossword, result.assignment), file=stream)

    lengths = Counter(variable.length for variable in crossword.variables)
    print(file=stream)
    print(f"Status:    {result.status.value} ({result.backend.value})", file=stream)
    print(f"Slots:     {len(crossword.variables)}", file=stream)
    print(
        "Lengths:   " + ", ".join(f"{length}x{count}" for length, count in sorted(lengths.items())),
        file=stream,
    )
    print(f"Nodes:     {result.nodes}", file=stream)
    print(f"Elapsed:   {result.elapsed_seconds:.3f}s", file=stream)
