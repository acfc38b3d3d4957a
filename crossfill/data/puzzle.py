"""Puzzle definitions: grid shapes, pre-filled letters and file loading."""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Iterable, List, Mapping, Optional, Sequence

from ..core.constants import BLACK_SYMBOL, EMPTY_SYMBOLS
from ..core.exceptions import MalformedGridError, PuzzleLoadError
from ..engine.crossword import Crossword, structure_from_constraints
from ..io.solution import Solution, prior_from_letter_grid, solution_from_jsonable
from ..utils.logger import get_logger


LOGGER = get_logger(__name__)


@dataclass
class PuzzleDefinition:
    """Everything needed to build a :class:`Crossword` apart from the words."""

    height: int
    width: int
    structure: List[List[bool]]
    letters: Optional[List[List[Optional[str]]]] = None
    solution: Optional[Solution] = None

    def to_crossword(self, words: Iterable[str]) -> Crossword:
        return Crossword(self.structure, words, self.height, self.width)

    def prior(self, crossword: Crossword) -> Solution:
        """Known letters per slot, merged from the letter grid and a saved solution."""

        prior: Solution = {}
        if self.letters is not None:
            prior.update(prior_from_letter_grid(crossword, self.letters))
        if self.solution:
            prior.update(self.solution)
        return prior

    @property
    def constraints(self) -> List[int]:
        """1-based black cell numbers ``i * width + j + 1``."""

        return [
            i * self.width + j + 1
            for i in range(self.height)
            for j in range(self.width)
            if not self.structure[i][j]
        ]


def from_constraints(
    constraints: Iterable[int],
    height: int,
    width: int,
    symmetric: bool = False,
) -> PuzzleDefinition:
    numbers = list(constraints)
    if symmetric:
        numbers = symmetric_constraints(numbers, height, width)
    return PuzzleDefinition(height, width, structure_from_constraints(numbers, height, width))


def parse_text_grid(rows: Sequence[str]) -> PuzzleDefinition:
    """Parse rows where ``#`` is black, ``.``/``_``/space is blank, letters are given."""

    lines = [row.rstrip("\n") for row in rows]
    while lines and not lines[-1].strip():
        lines.pop()
    if not lines:
        return PuzzleDefinition(0, 0, [])
    width = len(lines[0])
    structure: List[List[bool]] = []
    letters: List[List[Optional[str]]] = []
    has_letters = False
    for index, line in enumerate(lines):
        if len(line) != width:
            raise MalformedGridError(f"Grid row {index} has {len(line)} cells, expected {width}")
        structure_row: List[bool] = []
        letter_row: List[Optional[str]] = []
        for char in line:
            if char == BLACK_SYMBOL:
                structure_row.append(False)
                letter_row.append(None)
            elif char in EMPTY_SYMBOLS:
                structure_row.append(True)
                letter_row.append(None)
            elif char.isalpha():
                structure_row.append(True)
                letter_row.append(char.upper())
                has_letters = True
            else:
                raise MalformedGridError(f"Unexpected grid symbol {char!r} in row {index}")
        structure.append(structure_row)
        letters.append(letter_row)
    return PuzzleDefinition(len(lines), width, structure, letters if has_letters else None)


def puzzle_from_jsonable(payload: Mapping[str, Any]) -> PuzzleDefinition:
    """Build a puzzle from ``{"rows": [...]}`` or ``{"height", "width", "constraints"}``.

    An optional ``"solution"`` entry holds previously entered letters.
    """

    if "rows" in payload:
        puzzle = parse_text_grid(payload["rows"])
    else:
        try:
            height = int(payload["height"])
            width = int(payload["width"])
            constraints = payload.get("constraints", [])
            if isinstance(constraints, Mapping):
                constraints = constraints.get("constraints", [])
        except (KeyError, TypeError, ValueError) as exc:
            raise PuzzleLoadError(f"Puzzle needs rows or height/width/constraints: {exc}") from exc
        puzzle = from_constraints(constraints, height, width, symmetric=bool(payload.get("symmetric")))
    if payload.get("solution"):
        puzzle.solution = solution_from_jsonable(payload["solution"])
    return puzzle


def load_puzzle(path: Path | str) -> PuzzleDefinition:
    """Load a JSON puzzle or a plain text grid from ``path``."""

    source = Path(path)
    if not source.exists():
        raise PuzzleLoadError(f"Missing puzzle file: {source}")
    try:
        text = source.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise PuzzleLoadError(f"Cannot read puzzle {source}: {exc}") from exc

    if text.lstrip().startswith("{"):
        try:
            payload = json.loads(text)
        except json.JSONDecodeError as exc:
            raise PuzzleLoadError(f"Invalid JSON puzzle {source}: {exc}") from exc
        puzzle = puzzle_from_jsonable(payload)
    else:
        rows = [line for line in text.splitlines() if not line.startswith(";")]
        puzzle = parse_text_grid(rows)
    LOGGER.info("Loaded %sx%s puzzle from %s", puzzle.height, puzzle.width, source)
    return puzzle


# ----------------------------------------------------------------------
# Rotational symmetry of black cells
# ----------------------------------------------------------------------
def mirror_cell_number(number: int, height: int, width: int) -> int:
    """Number of the cell opposite ``number`` under a 180 degree rotation."""

    index = number - 1
    i, j = divmod(index, width)
    return (height - 1 - i) * width + (width - 1 - j) + 1


def symmetric_constraints(constraints: Iterable[int], height: int, width: int) -> List[int]:
    """Add the mirror of every black cell."""

    numbers = {int(number) for number in constraints}
    numbers |= {mirror_cell_number(number, height, width) for number in numbers}
    return sorted(numbers)


def drop_asymmetric_constraints(constraints: Iterable[int], height: int, width: int) -> List[int]:
    """Keep only black cells whose mirror is black too."""

    numbers = {int(number) for number in constraints}
    return sorted(n for n in numbers if mirror_cell_number(n, height, width) in numbers)
