"""CP-SAT crossword filling backend using OR-Tools."""

from __future__ import annotations

import time
from collections import defaultdict
from itertools import combinations
from typing import Dict, List, Optional

from ortools.sat.python import cp_model

from ..core.constants import Backend, SolveStatus
from ..core.models import Cell, Variable
from ..utils.logger import get_logger
from .consistency import enforce_node_consistency
from .crossword import Crossword
from .domains import DomainStore, Prior
from .solver import Assignment, SolveResult, SolverConfig

LOGGER = get_logger(__name__)


def solve_with_cpsat(
    crossword: Crossword,
    config: Optional[SolverConfig] = None,
    prior: Optional[Prior] = None,
) -> SolveResult:
    """Fill ``crossword`` via CP-SAT.

    Every fillable cell of a slot becomes an integer letter variable and every
    slot gets a table constraint listing its candidate words. The candidate
    lists are the same seeded, length-filtered domains the MAC search starts
    from, so both backends agree on satisfiability.

    Returns a :class:`SolveResult`; ``nodes`` reports CP-SAT branches.
    """

    config = config or SolverConfig()
    started = time.monotonic()
    if config.max_nodes is not None:
        LOGGER.warning("CP-SAT ignores max_nodes=%d; only timeout_seconds bounds the search", config.max_nodes)

    def finish(status: SolveStatus, assignment: Optional[Assignment] = None, nodes: int = 0) -> SolveResult:
        return SolveResult(
            status=status,
            assignment=assignment,
            nodes=nodes,
            elapsed_seconds=time.monotonic() - started,
            backend=Backend.CPSAT,
        )

    if not crossword.variables:
        return finish(SolveStatus.SOLVED, {})

    domains = DomainStore.for_crossword(crossword, prior)
    enforce_node_consistency(crossword, domains)
    for variable in crossword.variables:
        if not domains[variable]:
            LOGGER.debug("No candidates for slot %s", variable)
            return finish(SolveStatus.UNSATISFIABLE)

    alphabet = sorted({char for variable in crossword.variables for word in domains[variable] for char in word})
    code = {char: index for index, char in enumerate(alphabet)}

    model = cp_model.CpModel()

    # ------------------------------------------------------------------
    # Step 1: Cell letter variables
    # ------------------------------------------------------------------
    cell_vars: Dict[Cell, cp_model.IntVar] = {}
    for variable in crossword.variables:
        for r, c in variable.cells:
            if (r, c) not in cell_vars:
                cell_vars[(r, c)] = model.new_int_var(0, len(alphabet) - 1, f"L_{r}_{c}")

    # ------------------------------------------------------------------
    # Step 2: Per-slot table constraints
    # ------------------------------------------------------------------
    for variable in crossword.variables:
        cell_list = [cell_vars[cell] for cell in variable.cells]
        tuples = [[code[ch] for ch in word] for word in domains[variable]]
        model.add_allowed_assignments(cell_list, tuples)

    # ------------------------------------------------------------------
    # Step 3: Optional uniqueness constraints
    # ------------------------------------------------------------------
    if config.require_distinct_words:
        by_length: Dict[int, List[Variable]] = defaultdict(list)
        for variable in crossword.variables:
            by_length[variable.length].append(variable)
        for group in by_length.values():
            for s1, s2 in combinations(group, 2):
                _add_differ_constraint(model, cell_vars, s1, s2)

    # ------------------------------------------------------------------
    # Step 4: Solve
    # ------------------------------------------------------------------
    solver = cp_model.CpSolver()
    if config.timeout_seconds is not None:
        solver.parameters.max_time_in_seconds = config.timeout_seconds
    # One worker: repeated runs return the same fill.
    solver.parameters.num_workers = 1

    LOGGER.info(
        "CP-SAT: %d slots, %d cell vars, solving...",
        len(crossword.variables),
        len(cell_vars),
    )
    status = solver.solve(model)

    if status == cp_model.INFEASIBLE:
        LOGGER.info("CP-SAT: puzzle is infeasible")
        return finish(SolveStatus.UNSATISFIABLE, nodes=solver.num_branches)
    if status not in (cp_model.OPTIMAL, cp_model.FEASIBLE):
        LOGGER.warning("CP-SAT: no solution found (status=%s)", solver.status_name(status))
        return finish(SolveStatus.BUDGET_EXCEEDED, nodes=solver.num_branches)

    LOGGER.info("CP-SAT: solution found in %.2fs", solver.wall_time)

    # ------------------------------------------------------------------
    # Step 5: Extract solution
    # ------------------------------------------------------------------
    assignment: Assignment = {}
    for variable in crossword.variables:
        assignment[variable] = "".join(alphabet[solver.value(cell_vars[cell])] for cell in variable.cells)
    return finish(SolveStatus.SOLVED, assignment, nodes=solver.num_branches)


def _add_differ_constraint(
    model: cp_model.CpModel,
    cell_vars: Dict[Cell, cp_model.IntVar],
    s1: Variable,
    s2: Variable,
) -> None:
    """Ensure two same-length slots cannot contain identical words."""
    diffs = []
    for pos, (cell1, cell2) in enumerate(zip(s1.cells, s2.cells)):
        v1 = cell_vars[cell1]
        v2 = cell_vars[cell2]
        if cell1 == cell2:
            continue  # shared cell always holds the same letter
        b = model.new_bool_var(
            f"d_{s1.row}_{s1.col}_{s1.direction.value}_{s2.row}_{s2.col}_{s2.direction.value}_{pos}"
        )
        model.add(v1 != v2).only_enforce_if(b)
        model.add(v1 == v2).only_enforce_if(~b)
        diffs.append(b)
    if diffs:
        model.add_bool_or(diffs)

