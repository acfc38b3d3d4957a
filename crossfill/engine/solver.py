"""Backtracking crossword solver with maintained arc consistency."""

from __future__ import annotations

import time
from collections import Counter
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from ..core.constants import Backend, SolveStatus
from ..core.exceptions import CrosswordError, SearchBudgetExceeded
from ..core.models import Variable
from ..utils.logger import get_logger
from .consistency import ac3, enforce_node_consistency
from .crossword import Crossword
from .domains import DomainStore, Prior

LOGGER = get_logger(__name__)

Assignment = Dict[Variable, str]


@dataclass
class SolverConfig:
    """Options for the search backends.

    ``max_nodes`` caps the number of backtracking calls and ``timeout_seconds``
    the wall-clock time; exceeding either yields ``BUDGET_EXCEEDED``. The CP-SAT
    backend honours only ``timeout_seconds`` and logs a warning for ``max_nodes``.
    """

    require_distinct_words: bool = False
    max_nodes: Optional[int] = None
    timeout_seconds: Optional[float] = None
    backend: Backend = Backend.MAC


@dataclass
class SolveResult:
    status: SolveStatus
    assignment: Optional[Assignment] = None
    nodes: int = 0
    elapsed_seconds: float = 0.0
    backend: Backend = Backend.MAC

    @property
    def solved(self) -> bool:
        return self.status == SolveStatus.SOLVED


class CrosswordSolver:
    """Fill a :class:`Crossword` by backtracking search over its domains.

    One instance owns one :class:`DomainStore`; ``solve`` is not reentrant.
    """

    def __init__(
        self,
        crossword: Crossword,
        config: Optional[SolverConfig] = None,
        prior: Optional[Prior] = None,
    ) -> None:
        self.crossword = crossword
        self.config = config or SolverConfig()
        self.domains = DomainStore.for_crossword(crossword, prior)
        self.nodes = 0
        self._deadline: Optional[float] = None
        self._solving = False

    # ------------------------------------------------------------------
    # Public entrypoint
    # ------------------------------------------------------------------
    def solve(self) -> SolveResult:
        if self._solving:
            raise CrosswordError("Solver is already running on this puzzle")
        self._solving = True
        self.nodes = 0
        started = time.monotonic()
        if self.config.timeout_seconds is not None:
            self._deadline = started + self.config.timeout_seconds
        try:
            status, assignment = self._solve()
        finally:
            self._solving = False
            self._deadline = None
        elapsed = time.monotonic() - started
        LOGGER.info(
            "Solve finished: %s after %d nodes in %.3fs",
            status.value,
            self.nodes,
            elapsed,
        )
        return SolveResult(
            status=status,
            assignment=assignment,
            nodes=self.nodes,
            elapsed_seconds=elapsed,
            backend=Backend.MAC,
        )

    def _solve(self) -> Tuple[SolveStatus, Optional[Assignment]]:
        enforce_node_consistency(self.crossword, self.domains)
        empty = [v for v in self.crossword.variables if not self.domains[v]]
        if empty:
            LOGGER.info("No word of the right length for %d slot(s), e.g. %s", len(empty), empty[0])
            return SolveStatus.UNSATISFIABLE, None
        if not ac3(self.crossword, self.domains):
            LOGGER.info("Initial arc consistency failed; puzzle has no fill")
            return SolveStatus.UNSATISFIABLE, None
        try:
            assignment = self.backtrack({})
        except SearchBudgetExceeded as exc:
            LOGGER.warning("Search aborted: %s", exc)
            while self.domains.depth:
                self.domains.pop()
            return SolveStatus.BUDGET_EXCEEDED, None
        if assignment is None:
            return SolveStatus.UNSATISFIABLE, None
        return SolveStatus.SOLVED, assignment

    # ------------------------------------------------------------------
    # Assignment predicates
    # ------------------------------------------------------------------
    def complete(self, assignment: Assignment) -> bool:
        return len(assignment) == len(self.crossword.variables) and all(
            variable in assignment for variable in self.crossword.variables
        )

    def consistent(self, assignment: Assignment) -> bool:
        if self.config.require_distinct_words and len(set(assignment.values())) != len(assignment):
            return False
        for variable, word in assignment.items():
            if len(word) != variable.length:
                return False
        for x, word_x in assignment.items():
            for y in self.crossword.neighbors(x):
                word_y = assignment.get(y)
                if word_y is None:
                    continue
                i, j = self.crossword.overlaps[(x, y)]
                if word_x[i] != word_y[j]:
                    return False
        return True

    # ------------------------------------------------------------------
    # Heuristics
    # ------------------------------------------------------------------
    def select_unassigned_variable(self, assignment: Assignment) -> Optional[Variable]:
        """MRV, then highest degree, then canonical order."""

        best: Optional[Variable] = None
        best_key = None
        for variable in self.crossword.variables:
            if variable in assignment:
                continue
            key = (self.domains.size(variable), -self.crossword.degree(variable))
            if best_key is None or key < best_key:
                best, best_key = variable, key
        return best

    def order_domain_values(self, variable: Variable, assignment: Assignment) -> List[str]:
        """Least constraining value first; ties keep domain order."""

        pressure = []
        for neighbor in self.crossword.neighbors(variable):
            if neighbor in assignment:
                continue
            i, j = self.crossword.overlaps[(variable, neighbor)]
            words = self.domains[neighbor]
            letters = Counter(word[j] for word in words)
            pressure.append((i, len(words), letters))

        def ruled_out(word: str) -> int:
            return sum(total - letters[word[i]] for i, total, letters in pressure)

        return sorted(self.domains[variable], key=ruled_out)

    # ------------------------------------------------------------------
    # Search
    # ------------------------------------------------------------------
    def inference(self, variable: Variable, assignment: Assignment) -> bool:
        """Re-establish arc consistency around ``variable`` after assigning it.

        Slots left with a single candidate are added to ``assignment``.
        """

        self.domains[variable] = [assignment[variable]]
        arcs = [
            (neighbor, variable)
            for neighbor in self.crossword.neighbors(variable)
            if neighbor not in assignment
        ]
        if not ac3(self.crossword, self.domains, arcs):
            return False
        for other in self.crossword.variables:
            if other not in assignment and self.domains.size(other) == 1:
                assignment[other] = self.domains[other][0]
        return True

    def backtrack(self, assignment: Assignment) -> Optional[Assignment]:
        self._tick()
        if self.complete(assignment):
            return assignment if self.consistent(assignment) else None

        variable = self.select_unassigned_variable(assignment)
        if variable is None:
            return None
        for value in self.order_domain_values(variable, assignment):
            candidate = dict(assignment)
            candidate[variable] = value
            if not self.consistent(candidate):
                continue
            self.domains.push()
            if self.inference(variable, candidate) and self.consistent(candidate):
                result = self.backtrack(candidate)
                if result is not None:
                    self.domains.discard()
                    return result
            self.domains.pop()
        return None

    def _tick(self) -> None:
        self.nodes += 1
        if self.config.max_nodes is not None and self.nodes > self.config.max_nodes:
            raise SearchBudgetExceeded(f"node budget of {self.config.max_nodes} exhausted")
        if self._deadline is not None and time.monotonic() > self._deadline:
            raise SearchBudgetExceeded(f"time budget of {self.config.timeout_seconds}s exhausted")


def solve(
    crossword: Crossword,
    config: Optional[SolverConfig] = None,
    prior: Optional[Prior] = None,
) -> SolveResult:
    """Fill ``crossword`` with the backend named in ``config``."""

    config = config or SolverConfig()
    if Backend(config.backend) == Backend.CPSAT:
        from .cpsat import solve_with_cpsat

        return solve_with_cpsat(crossword, config, prior)
    return CrosswordSolver(crossword, config, prior).solve()
