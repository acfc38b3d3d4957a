"""Deterministic rule validation for filled crosswords."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Mapping, Optional

from ..core.exceptions import ValidationError
from ..core.models import Variable
from ..utils.logger import get_logger
from .crossword import Crossword


LOGGER = get_logger(__name__)


@dataclass
class ValidationResult:
    ok: bool
    messages: List[str]


class AssignmentValidator:
    """Runs deterministic validation over a finished assignment."""

    def __init__(self, crossword: Crossword, require_distinct_words: bool = False) -> None:
        self.crossword = crossword
        self.require_distinct_words = require_distinct_words

    def validate(
        self,
        assignment: Mapping[Variable, str],
        allowed_extra: Optional[Mapping[Variable, str]] = None,
    ) -> ValidationResult:
        """Check ``assignment``; words in ``allowed_extra`` may lie outside the vocabulary."""

        messages: List[str] = []
        try:
            self._check_complete(assignment)
            self._check_lengths(assignment)
            self._check_letters_valid(assignment)
            self._check_crossings(assignment)
            self._check_vocabulary(assignment, allowed_extra or {})
            if self.require_distinct_words:
                self._check_no_duplicate_words(assignment)
        except ValidationError as exc:
            messages.append(str(exc))
            LOGGER.error("Validation failed: %s", exc)
            return ValidationResult(ok=False, messages=messages)
        return ValidationResult(ok=True, messages=[])

    def _check_complete(self, assignment: Mapping[Variable, str]) -> None:
        for variable in self.crossword.variables:
            if variable not in assignment:
                raise ValidationError(f"Slot {variable} is not filled")
        for variable in assignment:
            if variable not in self.crossword:
                raise ValidationError(f"Assignment names unknown slot {variable}")

    def _check_lengths(self, assignment: Mapping[Variable, str]) -> None:
        for variable, word in assignment.items():
            if len(word) != variable.length:
                raise ValidationError(
                    f"Word '{word}' has length {len(word)}, slot {variable} needs {variable.length}"
                )

    def _check_letters_valid(self, assignment: Mapping[Variable, str]) -> None:
        for variable, word in assignment.items():
            if not word.isalpha() or not word.isupper():
                raise ValidationError(f"Invalid letters '{word}' in slot {variable}")

    def _check_crossings(self, assignment: Mapping[Variable, str]) -> None:
        for (x, y), overlap in self.crossword.overlaps.items():
            if overlap is None:
                continue
            i, j = overlap
            if assignment[x][i] != assignment[y][j]:
                raise ValidationError(
                    f"Crossing mismatch between {x} '{assignment[x]}' and {y} '{assignment[y]}'"
                )

    def _check_vocabulary(
        self,
        assignment: Mapping[Variable, str],
        allowed_extra: Mapping[Variable, str],
    ) -> None:
        vocabulary = set(self.crossword.vocabulary)
        for variable, word in assignment.items():
            if word in vocabulary or allowed_extra.get(variable) == word:
                continue
            raise ValidationError(f"Word '{word}' in slot {variable} is not in the vocabulary")

    def _check_no_duplicate_words(self, assignment: Mapping[Variable, str]) -> None:
        seen: Dict[str, Variable] = {}
        for variable, word in assignment.items():
            if word in seen:
                raise ValidationError(f"Duplicate word '{word}' at {seen[word]} and {variable}")
            seen[word] = variable
