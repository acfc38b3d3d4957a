"""Crossword fill solver built on constraint propagation.

This package exposes the public API surface via:

- ``crossfill.engine.crossword.Crossword``: grid structure, slots and crossings.
- ``crossfill.engine.solver.solve``: backtracking search with arc consistency
  (or the CP-SAT backend).
- ``crossfill.data`` helpers: word list and puzzle loading.
"""

from .core.constants import Backend, Direction, SolveStatus
from .core.exceptions import CrosswordError
from .core.models import Variable
from .data.puzzle import PuzzleDefinition, load_puzzle
from .data.vocabulary import VocabularyConfig, load_vocabulary
from .engine.crossword import Crossword
from .engine.solver import CrosswordSolver, SolveResult, SolverConfig, solve

__all__ = [
    "Backend",
    "Crossword",
    "CrosswordError",
    "CrosswordSolver",
    "Direction",
    "PuzzleDefinition",
    "SolveResult",
    "SolveStatus",
    "SolverConfig",
    "Variable",
    "VocabularyConfig",
    "load_puzzle",
    "load_vocabulary",
    "solve",
]

__version__ = "0.1.0"
