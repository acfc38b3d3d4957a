"""Per-variable candidate lists with a snapshot stack for backtracking."""

from __future__ import annotations

from typing import Dict, Iterable, Iterator, List, Mapping, Optional, Sequence, Set, Tuple

from ..core.exceptions import UnknownVariableError
from ..core.models import Variable
from ..utils.logger import get_logger
from .crossword import Crossword


LOGGER = get_logger(__name__)

DomainSnapshot = Dict[Variable, List[str]]
Prior = Mapping[Variable, Sequence[Optional[str]]]


class DomainStore:
    """Mutable ``Variable -> [word, ...]`` mapping shared by the whole search.

    ``push`` saves a copy of every domain before a speculative assignment and
    ``pop`` puts it back when that branch fails.
    """

    def __init__(self, domains: Mapping[Variable, Iterable[str]]) -> None:
        self._domains: Dict[Variable, List[str]] = {v: list(words) for v, words in domains.items()}
        self._backups: List[DomainSnapshot] = []

    @classmethod
    def for_crossword(cls, crossword: Crossword, prior: Optional[Prior] = None) -> "DomainStore":
        """Full vocabulary for every slot, or the prior's word where one is complete."""

        domains: Dict[Variable, List[str]] = {
            variable: list(crossword.vocabulary) for variable in crossword.variables
        }
        for variable, letters in (prior or {}).items():
            if variable not in crossword:
                raise UnknownVariableError(f"Prior assignment names unknown slot {variable}")
            word = complete_word(variable, letters)
            if word is not None:
                LOGGER.debug("Seeding %s with prior word %s", variable, word)
                domains[variable] = [word]
        return cls(domains)

    # ------------------------------------------------------------------
    # Mapping interface
    # ------------------------------------------------------------------
    def __getitem__(self, variable: Variable) -> List[str]:
        return self._domains[variable]

    def __setitem__(self, variable: Variable, words: Iterable[str]) -> None:
        self._domains[variable] = list(words)

    def __iter__(self) -> Iterator[Variable]:
        return iter(self._domains)

    def __len__(self) -> int:
        return len(self._domains)

    def items(self) -> Iterable[Tuple[Variable, List[str]]]:
        return self._domains.items()

    def size(self, variable: Variable) -> int:
        return len(self._domains[variable])

    def as_sets(self) -> Dict[Variable, Set[str]]:
        return {variable: set(words) for variable, words in self._domains.items()}

    # ------------------------------------------------------------------
    # Snapshots
    # ------------------------------------------------------------------
    def snapshot(self) -> DomainSnapshot:
        return {variable: list(words) for variable, words in self._domains.items()}

    def restore(self, snapshot: DomainSnapshot) -> None:
        self._domains = {variable: list(words) for variable, words in snapshot.items()}

    def push(self) -> None:
        self._backups.append(self.snapshot())

    def pop(self) -> None:
        """Restore the most recent snapshot."""

        self._domains = self._backups.pop()

    def discard(self) -> None:
        """Drop the most recent snapshot, keeping the current domains."""

        self._backups.pop()

    @property
    def depth(self) -> int:
        return len(self._backups)


def complete_word(variable: Variable, letters: Sequence[Optional[str]]) -> Optional[str]:
    """Join ``letters`` into a word if every cell of ``variable`` holds one letter."""

    if len(letters) != variable.length:
        return None
    chars: List[str] = []
    for letter in letters:
        if not isinstance(letter, str) or len(letter.strip()) != 1 or not letter.strip().isalpha():
            return None
        chars.append(letter.strip().upper())
    return "".join(chars)
