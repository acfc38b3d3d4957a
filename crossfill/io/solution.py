"""Conversions between assignments, per-cell letters and JSON payloads.

A *solution* maps every slot to its list of letters, with ``None`` for cells
that are still blank. It is the shape the grid front end edits and sends back,
serialized as a list of ``[descriptor, letters]`` pairs.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence

from ..core.exceptions import MalformedGridError, UnknownVariableError
from ..core.models import Variable
from ..engine.crossword import Crossword

Solution = Dict[Variable, List[Optional[str]]]
LetterGrid = List[List[Optional[str]]]


@dataclass(frozen=True)
class LetterEdit:
    """A letter typed into (or erased from, when ``letter`` is ``None``) one slot cell."""

    variable: Variable
    index: int
    letter: Optional[str] = None


def _letter(value: Any) -> Optional[str]:
    if isinstance(value, str) and len(value.strip()) == 1 and value.strip().isalpha():
        return value.strip().upper()
    return None


def assignment_to_solution(assignment: Mapping[Variable, str]) -> Solution:
    return {variable: list(word) for variable, word in assignment.items()}


def empty_solution(crossword: Crossword) -> Solution:
    return {variable: [None] * variable.length for variable in crossword.variables}


def letter_grid(crossword: Crossword, solution: Mapping[Variable, Sequence[Optional[str]]]) -> LetterGrid:
    """Project slot letters onto cells; black and blank cells stay ``None``.

    Accepts either a solution or a plain ``Variable -> word`` assignment.
    """

    grid: LetterGrid = [[None] * crossword.width for _ in range(crossword.height)]
    for variable, letters in solution.items():
        for (row, col), value in zip(variable.cells, letters):
            letter = _letter(value)
            if letter is not None and crossword.bounds.contains(row, col):
                grid[row][col] = letter
    return grid


def prior_from_letter_grid(crossword: Crossword, grid: Sequence[Sequence[Optional[str]]]) -> Solution:
    """Read each slot's known letters off a per-cell grid.

    Slots without any known letter are left out.
    """

    prior: Solution = {}
    for variable in crossword.variables:
        letters = [_letter(grid[row][col]) for row, col in variable.cells]
        if any(letter is not None for letter in letters):
            prior[variable] = letters
    return prior


def apply_letter_edits(
    solution: Mapping[Variable, Sequence[Optional[str]]],
    edits: Iterable[LetterEdit],
) -> Solution:
    """Return a copy of ``solution`` with ``edits`` applied in order."""

    updated: Solution = {variable: [_letter(value) for value in letters] for variable, letters in solution.items()}
    for edit in edits:
        if edit.variable not in updated:
            raise UnknownVariableError(f"Edit targets unknown slot {edit.variable}")
        if not 0 <= edit.index < edit.variable.length:
            raise MalformedGridError(f"Cell index {edit.index} outside slot {edit.variable}")
        updated[edit.variable][edit.index] = _letter(edit.letter)
    return updated


def edits_for_cell(crossword: Crossword, row: int, col: int, letter: Optional[str]) -> List[LetterEdit]:
    """Translate one cell change into an edit for every slot crossing that cell."""

    if not crossword.bounds.contains(row, col) or not crossword.structure[row][col]:
        raise MalformedGridError(f"Cell {(row, col)} is not fillable")
    edits: List[LetterEdit] = []
    for variable in crossword.variables:
        cells = variable.cells
        if (row, col) in cells:
            edits.append(LetterEdit(variable, cells.index((row, col)), letter))
    return edits


def solution_to_jsonable(solution: Mapping[Variable, Sequence[Optional[str]]]) -> List[List[Any]]:
    payload: List[List[Any]] = []
    for variable, letters in solution.items():
        descriptor = variable.to_descriptor()
        descriptor["cells"] = [list(cell) for cell in variable.cells]
        payload.append([descriptor, [_letter(value) for value in letters]])
    return payload


def solution_from_jsonable(payload: Any) -> Solution:
    """Parse ``[[descriptor, letters], ...]`` or ``{"solution": [...]}``.

    Blank cells may be ``null``, ``""`` or anything that is not a single letter.
    """

    if isinstance(payload, Mapping):
        payload = payload.get("solution", [])
    if not isinstance(payload, list):
        raise MalformedGridError("Solution payload must be a list of [descriptor, letters] pairs")
    solution: Solution = {}
    for entry in payload:
        if not isinstance(entry, (list, tuple)) or len(entry) != 2:
            raise MalformedGridError(f"Invalid solution entry: {entry!r}")
        descriptor, letters = entry
        variable = Variable.from_descriptor(descriptor)
        if not isinstance(letters, (list, tuple, str)):
            raise MalformedGridError(f"Invalid letters for {variable}: {letters!r}")
        values = [_letter(value) for value in letters]
        if len(values) != variable.length:
            raise MalformedGridError(
                f"Slot {variable} has {len(values)} letters, expected {variable.length}"
            )
        solution[variable] = values
    return solution
