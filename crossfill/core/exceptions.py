"""Custom exception hierarchy for crossword filling."""


class CrosswordError(Exception):
    """Base exception for solver failures."""


class MalformedGridError(CrosswordError):
    """Raised when the grid structure is inconsistent with its dimensions."""


class UnknownVariableError(CrosswordError):
    """Raised when a prior assignment names a slot missing from the grid."""


class VocabularyLoadError(CrosswordError):
    """Raised when a word list cannot be read or parsed."""


class PuzzleLoadError(CrosswordError):
    """Raised when a puzzle definition cannot be read or parsed."""


class SearchBudgetExceeded(CrosswordError):
    """Raised inside the search when the node or time budget runs out."""


class ValidationError(CrosswordError):
    """Raised when an assignment fails the integrity checks."""
