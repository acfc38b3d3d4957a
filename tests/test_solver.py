import itertools
import unittest
from unittest.mock import patch

from crossfill.core.constants import Backend, Direction, SolveStatus
from crossfill.core.exceptions import CrosswordError, UnknownVariableError
from crossfill.core.models import Variable
from crossfill.engine.crossword import Crossword
from crossfill.engine.solver import CrosswordSolver, SolverConfig, solve
from crossfill.engine.validator import AssignmentValidator


def grid(*rows: str):
    return [[char != "#" for char in row] for row in rows]


ACROSS = Variable(0, 0, Direction.ACROSS, 3)
DOWN = Variable(0, 1, Direction.DOWN, 3)


def assert_crossings_hold(test: unittest.TestCase, crossword: Crossword, assignment) -> None:
    for (x, y), overlap in crossword.overlaps.items():
        if overlap is None:
            continue
        i, j = overlap
        test.assertEqual(assignment[x][i], assignment[y][j])


class ScenarioTests(unittest.TestCase):
    def test_open_three_by_three_without_word_square_is_unsatisfiable(self) -> None:
        crossword = Crossword(grid("...", "...", "..."), ["CAT", "DOG", "COD", "ACT", "TIC"])
        result = solve(crossword)
        self.assertEqual(result.status, SolveStatus.UNSATISFIABLE)
        self.assertIsNone(result.assignment)

    def test_word_square_is_filled(self) -> None:
        crossword = Crossword(grid("...", "...", "..."), ["TEN", "ARE", "BAT", "NAB"])
        result = solve(crossword)
        self.assertTrue(result.solved)
        assignment = result.assignment
        self.assertEqual(assignment[Variable(0, 0, Direction.ACROSS, 3)], "BAT")
        self.assertEqual(assignment[Variable(1, 0, Direction.ACROSS, 3)], "ARE")
        self.assertEqual(assignment[Variable(2, 0, Direction.ACROSS, 3)], "TEN")
        self.assertEqual(assignment[Variable(0, 0, Direction.DOWN, 3)], "BAT")
        assert_crossings_hold(self, crossword, assignment)
        self.assertTrue(AssignmentValidator(crossword).validate(assignment).ok)

    def test_isolated_slot_takes_a_vocabulary_word(self) -> None:
        crossword = Crossword(grid("...."), ["WORD", "FORD"])
        result = solve(crossword)
        self.assertTrue(result.solved)
        self.assertIn(result.assignment[crossword.variables[0]], {"WORD", "FORD"})

    def test_crossing_pair_respects_shared_letter(self) -> None:
        crossword = Crossword(grid("...", "#.#", "#.#"), ["CAT", "TAR", "ACT"])
        result = solve(crossword)
        self.assertTrue(result.solved)
        self.assertEqual(result.assignment[ACROSS][1], result.assignment[DOWN][0])

    def test_crossing_pair_without_shared_letter_is_unsatisfiable(self) -> None:
        crossword = Crossword(grid("...", "#.#", "#.#"), ["CAT", "DOG"])
        self.assertEqual(solve(crossword).status, SolveStatus.UNSATISFIABLE)

    def test_empty_vocabulary_is_unsatisfiable(self) -> None:
        crossword = Crossword(grid("...", "#.#", "#.#"), [])
        self.assertEqual(solve(crossword).status, SolveStatus.UNSATISFIABLE)

    def test_grid_without_slots_is_trivially_solved(self) -> None:
        crossword = Crossword(grid(".#", "#."), [])
        result = solve(crossword)
        self.assertEqual(result.status, SolveStatus.SOLVED)
        self.assertEqual(result.assignment, {})

    def test_distinct_words_rules_out_symmetric_square(self) -> None:
        crossword = Crossword(grid("...", "...", "..."), ["BAT", "ARE", "TEN"])
        self.assertTrue(solve(crossword).solved)
        result = solve(crossword, SolverConfig(require_distinct_words=True))
        self.assertEqual(result.status, SolveStatus.UNSATISFIABLE)

    def test_solve_is_deterministic(self) -> None:
        crossword = Crossword(grid("...", "#.#", "#.#"), ["CAT", "TAR", "ACT", "ARC", "CAR"])
        first = solve(crossword).assignment
        second = solve(crossword).assignment
        self.assertEqual(first, second)


class PriorTests(unittest.TestCase):
    def test_complete_prior_word_is_kept(self) -> None:
        crossword = Crossword(grid("...."), ["WORD", "FORD"])
        slot = crossword.variables[0]
        result = solve(crossword, prior={slot: list("CORD")})
        self.assertTrue(result.solved)
        self.assertEqual(result.assignment[slot], "CORD")

    def test_prior_constrains_crossing_slot(self) -> None:
        crossword = Crossword(grid("...", "#.#", "#.#"), ["CAT", "TAR", "ACT", "OAK", "ARC"])
        result = solve(crossword, prior={ACROSS: list("TAR")})
        self.assertTrue(result.solved)
        self.assertEqual(result.assignment[ACROSS], "TAR")
        self.assertEqual(result.assignment[DOWN][0], "A")

    def test_prior_descriptor_rebuilt_from_strings(self) -> None:
        crossword = Crossword(grid("...."), ["WORD"])
        prior = {Variable(0, 0, "across", 4): ["F", "O", "R", "D"]}
        result = solve(crossword, prior=prior)
        self.assertEqual(result.assignment[crossword.variables[0]], "FORD")

    def test_unknown_prior_slot_raises(self) -> None:
        crossword = Crossword(grid("...."), ["WORD"])
        with self.assertRaises(UnknownVariableError):
            solve(crossword, prior={Variable(0, 0, "down", 4): list("WORD")})


class BudgetTests(unittest.TestCase):
    def test_node_budget_reports_budget_exceeded(self) -> None:
        crossword = Crossword(grid("...", "...", "..."), ["BAT", "ARE", "TEN"])
        result = solve(crossword, SolverConfig(max_nodes=0))
        self.assertEqual(result.status, SolveStatus.BUDGET_EXCEEDED)
        self.assertIsNone(result.assignment)
        self.assertEqual(result.nodes, 1)

    def test_time_budget_reports_budget_exceeded(self) -> None:
        crossword = Crossword(grid("...", "...", "..."), ["BAT", "ARE", "TEN"])
        solver = CrosswordSolver(crossword, SolverConfig(timeout_seconds=0.0))
        clock = itertools.count(100.0, 1.0)
        with patch("crossfill.engine.solver.time.monotonic", side_effect=lambda: next(clock)):
            result = solver.solve()
        self.assertEqual(result.status, SolveStatus.BUDGET_EXCEEDED)
        self.assertIsNone(result.assignment)
        self.assertEqual(solver.domains.depth, 0)

    def test_aborted_search_restores_snapshots(self) -> None:
        crossword = Crossword(grid("...."), ["WORD", "FORD"])
        slot = crossword.variables[0]
        solver = CrosswordSolver(crossword, SolverConfig(max_nodes=1))
        result = solver.solve()
        # The second node is reached with one snapshot pushed.
        self.assertEqual(result.status, SolveStatus.BUDGET_EXCEEDED)
        self.assertEqual(result.nodes, 2)
        self.assertEqual(solver.domains.depth, 0)
        self.assertEqual(solver.domains[slot], ["WORD", "FORD"])

    def test_node_counter_is_reported(self) -> None:
        crossword = Crossword(grid("...", "...", "..."), ["BAT", "ARE", "TEN"])
        result = solve(crossword)
        self.assertGreaterEqual(result.nodes, 1)
        self.assertGreaterEqual(result.elapsed_seconds, 0.0)
        self.assertEqual(result.backend, Backend.MAC)


class HeuristicTests(unittest.TestCase):
    def setUp(self) -> None:
        # One three-letter across slot crossed by a two-letter and a three-letter down slot.
        self.crossword = Crossword(grid("...", ".#.", "##."), [])
        self.short_down = Variable(0, 0, Direction.DOWN, 2)
        self.across = Variable(0, 0, Direction.ACROSS, 3)
        self.long_down = Variable(0, 2, Direction.DOWN, 3)
        self.solver = CrosswordSolver(self.crossword)

    def test_layout(self) -> None:
        self.assertEqual(
            list(self.crossword.variables),
            [self.short_down, self.across, self.long_down],
        )
        self.assertEqual(self.crossword.degree(self.across), 2)
        self.assertEqual(self.crossword.degree(self.short_down), 1)

    def test_degree_breaks_domain_size_ties(self) -> None:
        self.solver.domains[self.short_down] = ["AB", "CD"]
        self.solver.domains[self.across] = ["ABC", "DEF"]
        self.solver.domains[self.long_down] = ["CXY", "FZZ"]
        self.assertEqual(self.solver.select_unassigned_variable({}), self.across)

    def test_smallest_domain_wins(self) -> None:
        self.solver.domains[self.short_down] = ["AB", "CD"]
        self.solver.domains[self.across] = ["ABC", "DEF"]
        self.solver.domains[self.long_down] = ["CXY"]
        self.assertEqual(self.solver.select_unassigned_variable({}), self.long_down)

    def test_canonical_order_breaks_full_ties(self) -> None:
        self.solver.domains[self.short_down] = ["AB"]
        self.solver.domains[self.across] = ["ABC", "DEF"]
        self.solver.domains[self.long_down] = ["CXY"]
        self.assertEqual(self.solver.select_unassigned_variable({}), self.short_down)

    def test_assigned_variables_are_skipped(self) -> None:
        self.solver.domains[self.short_down] = ["AB"]
        self.solver.domains[self.across] = ["ABC", "DEF"]
        self.solver.domains[self.long_down] = ["CXY", "FZZ"]
        assignment = {self.short_down: "AB", self.across: "ABC", self.long_down: "CXY"}
        self.assertIsNone(self.solver.select_unassigned_variable(assignment))
        del assignment[self.long_down]
        self.assertEqual(self.solver.select_unassigned_variable(assignment), self.long_down)

    def test_least_constraining_value_first(self) -> None:
        crossword = Crossword(grid("...", "#.#", "#.#"), [])
        solver = CrosswordSolver(crossword)
        solver.domains[ACROSS] = ["COT", "CAT"]
        solver.domains[DOWN] = ["ART", "AXE", "OAK"]
        # CAT rules out OAK only; COT rules out ART and AXE.
        self.assertEqual(solver.order_domain_values(ACROSS, {}), ["CAT", "COT"])

    def test_assigned_neighbors_do_not_count(self) -> None:
        crossword = Crossword(grid("...", "#.#", "#.#"), [])
        solver = CrosswordSolver(crossword)
        solver.domains[ACROSS] = ["COT", "CAT"]
        solver.domains[DOWN] = ["ART", "AXE", "OAK"]
        self.assertEqual(solver.order_domain_values(ACROSS, {DOWN: "OAK"}), ["COT", "CAT"])

    def test_value_order_is_stable_without_neighbors(self) -> None:
        crossword = Crossword(grid("...."), ["WORD", "FORD", "CORD"])
        solver = CrosswordSolver(crossword)
        slot = crossword.variables[0]
        self.assertEqual(solver.order_domain_values(slot, {}), ["WORD", "FORD", "CORD"])


class PredicateTests(unittest.TestCase):
    def setUp(self) -> None:
        self.crossword = Crossword(grid("...", "#.#", "#.#"), ["CAT", "TAR", "ACT"])
        self.solver = CrosswordSolver(self.crossword)

    def test_complete(self) -> None:
        self.assertFalse(self.solver.complete({ACROSS: "CAT"}))
        self.assertTrue(self.solver.complete({ACROSS: "CAT", DOWN: "ACT"}))

    def test_consistent_checks_crossings_and_lengths(self) -> None:
        self.assertTrue(self.solver.consistent({ACROSS: "CAT", DOWN: "ACT"}))
        self.assertFalse(self.solver.consistent({ACROSS: "CAT", DOWN: "TAR"}))
        self.assertFalse(self.solver.consistent({ACROSS: "CATS"}))
        self.assertTrue(self.solver.consistent({}))

    def test_consistent_with_distinct_words(self) -> None:
        crossword = Crossword(grid("...", "###", "..."), ["CAT"])
        top, bottom = crossword.variables
        self.assertTrue(CrosswordSolver(crossword).consistent({top: "CAT", bottom: "CAT"}))
        strict = CrosswordSolver(crossword, SolverConfig(require_distinct_words=True))
        self.assertFalse(strict.consistent({top: "CAT", bottom: "CAT"}))

    def test_inference_forces_singletons(self) -> None:
        self.solver.domains[DOWN] = ["ACT", "TAR"]
        assignment = {ACROSS: "CAT"}
        self.assertTrue(self.solver.inference(ACROSS, assignment))
        self.assertEqual(self.solver.domains[DOWN], ["ACT"])
        self.assertEqual(assignment[DOWN], "ACT")

    def test_inference_reports_wipeout(self) -> None:
        self.solver.domains[DOWN] = ["TAR"]
        self.assertFalse(self.solver.inference(ACROSS, {ACROSS: "CAT"}))

    def test_snapshots_are_balanced_after_solve(self) -> None:
        result = self.solver.solve()
        self.assertTrue(result.solved)
        self.assertEqual(self.solver.domains.depth, 0)

    def test_solve_is_not_reentrant(self) -> None:
        self.solver._solving = True
        with self.assertRaises(CrosswordError):
            self.solver.solve()


if __name__ == "__main__":  # pragma: no cover
    unittest.main()
