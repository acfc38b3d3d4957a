"""CLI entrypoint for the crossword fill solver."""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

from crossfill.core.constants import Backend
from crossfill.core.exceptions import CrosswordError, PuzzleLoadError
from crossfill.core.models import Variable
from crossfill.data.puzzle import PuzzleDefinition, from_constraints, load_puzzle, parse_text_grid
from crossfill.data.vocabulary import VocabularyConfig, load_vocabulary
from crossfill.engine.domains import complete_word
from crossfill.engine.solution_store import SolutionStore
from crossfill.engine.solver import SolverConfig, solve
from crossfill.engine.validator import AssignmentValidator
from crossfill.io.solution import Solution, assignment_to_solution, solution_from_jsonable, solution_to_jsonable
from crossfill.utils.logger import configure_logging, get_logger
from crossfill.utils.pretty import print_solve_stats

LOGGER = get_logger("crossfill.cli")

EXIT_SOLVED = 0
EXIT_NOT_SOLVED = 1
EXIT_ERROR = 2


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Fill a crossword grid from a word list",
    )
    grid = parser.add_mutually_exclusive_group(required=True)
    grid.add_argument("--puzzle", type=Path, help="JSON puzzle or text grid file")
    grid.add_argument(
        "--rows",
        nargs="+",
        metavar="ROW",
        help="Inline text grid rows ('#' black, '.' empty, letters pre-filled)",
    )
    grid.add_argument("--height", type=int, help="Grid height in cells (with --width/--black)")
    parser.add_argument("--width", type=int, help="Grid width in cells")
    parser.add_argument(
        "--black",
        nargs="*",
        type=int,
        default=[],
        metavar="N",
        help="1-based black cell numbers i * width + j + 1",
    )
    parser.add_argument(
        "--symmetric",
        action="store_true",
        help="Mirror black cells under a 180 degree rotation",
    )
    parser.add_argument("--words", type=Path, required=True, help="Word list (text or JSON)")
    parser.add_argument("--min-length", type=int, default=2, help="Shortest word kept from the list")
    parser.add_argument("--max-length", type=int, default=None, help="Longest word kept from the list")
    parser.add_argument(
        "--prior",
        type=Path,
        help="JSON file with previously entered letters ([descriptor, letters] pairs)",
    )
    parser.add_argument("--distinct", action="store_true", help="Forbid repeating a word")
    parser.add_argument("--max-nodes", type=int, default=None, help="Search node budget")
    parser.add_argument("--timeout", type=float, default=None, help="Search time budget in seconds")
    parser.add_argument(
        "--backend",
        type=str,
        choices=[b.value for b in Backend],
        default=Backend.MAC.value,
        help="Search backend",
    )
    parser.add_argument("--output", type=Path, help="Optional path to JSON output")
    parser.add_argument("--store-dir", type=Path, help="Save the result in this solution store")
    parser.add_argument(
        "--log-level",
        type=str,
        default="INFO",
        help="Logging level (DEBUG, INFO, WARNING, ERROR)",
    )
    return parser


def _load_prior(path: Path) -> Solution:
    try:
        payload = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise PuzzleLoadError(f"Cannot read prior {path}: {exc}") from exc
    return solution_from_jsonable(payload)


def _puzzle_from_args(args: argparse.Namespace, parser: argparse.ArgumentParser) -> PuzzleDefinition:
    if args.puzzle is not None:
        return load_puzzle(args.puzzle)
    if args.rows is not None:
        return parse_text_grid(args.rows)
    if args.width is None:
        parser.error("--height requires --width")
    return from_constraints(args.black, args.height, args.width, symmetric=args.symmetric)


def run(args: argparse.Namespace, parser: argparse.ArgumentParser) -> int:
    puzzle = _puzzle_from_args(args, parser)
    words = load_vocabulary(
        VocabularyConfig(path=args.words, min_length=args.min_length, max_length=args.max_length)
    )
    crossword = puzzle.to_crossword(words)

    prior = puzzle.prior(crossword)
    if args.prior is not None:
        prior.update(_load_prior(args.prior))

    config = SolverConfig(
        require_distinct_words=args.distinct,
        max_nodes=args.max_nodes,
        timeout_seconds=args.timeout,
        backend=Backend(args.backend),
    )
    result = solve(crossword, config, prior)

    validation: List[str] = []
    if result.assignment is not None:
        given: Dict[Variable, str] = {}
        for variable, letters in prior.items():
            word = complete_word(variable, letters)
            if word is not None:
                given[variable] = word
        report = AssignmentValidator(crossword, args.distinct).validate(result.assignment, given)
        validation = report.messages

    print_solve_stats(crossword, result, stream=sys.stderr)

    store_id: Optional[str] = None
    if args.store_dir is not None:
        store_id = SolutionStore(args.store_dir).save(crossword, result, config)

    payload: Dict[str, Any] = {
        "status": result.status.value,
        "backend": result.backend.value,
        "nodes": result.nodes,
        "elapsed_seconds": round(result.elapsed_seconds, 4),
        "height": crossword.height,
        "width": crossword.width,
        "constraints": puzzle.constraints,
        "solution": (
            solution_to_jsonable(assignment_to_solution(result.assignment))
            if result.assignment is not None
            else None
        ),
        "validation": validation,
    }
    if store_id is not None:
        payload["store_id"] = store_id

    output_text = json.dumps(payload, ensure_ascii=False, indent=2)
    if args.output:
        args.output.write_text(output_text, encoding="utf-8")
    else:
        print(output_text)
    return EXIT_SOLVED if result.solved else EXIT_NOT_SOLVED


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(args.log_level)

    try:
        return run(args, parser)
    except CrosswordError as exc:
        LOGGER.error("%s", exc)
        return EXIT_ERROR


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
