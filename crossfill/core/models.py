"""Data models supporting the crossword solver."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional, Tuple

from .constants import Direction
from .exceptions import MalformedGridError


Cell = Tuple[int, int]
Overlap = Tuple[int, int]


@dataclass(frozen=True)
class Variable:
    """A word slot: start cell, direction and length.

    Equality and hashing compare the four defining fields, so a descriptor
    rebuilt from serialized data finds the same domain and assignment entries.
    """

    row: int
    col: int
    direction: Direction
    length: int

    def __post_init__(self) -> None:
        if self.length < 1:
            raise MalformedGridError(f"Variable length must be positive, got {self.length}")
        # Accept plain strings ("across"/"down") from deserialized payloads.
        try:
            direction = Direction(str(getattr(self.direction, "value", self.direction)).lower())
        except ValueError as exc:
            raise MalformedGridError(f"Unknown direction: {self.direction!r}") from exc
        object.__setattr__(self, "direction", direction)

    @property
    def cells(self) -> Tuple[Cell, ...]:
        if self.direction == Direction.ACROSS:
            return tuple((self.row, self.col + k) for k in range(self.length))
        return tuple((self.row + k, self.col) for k in range(self.length))

    def overlap_with(self, other: "Variable") -> Optional[Overlap]:
        """Return ``(i, j)`` where ``self.cells[i] == other.cells[j]``, or ``None``.

        If several cells are shared the first one in ``self.cells`` order wins.
        """

        positions = {cell: index for index, cell in enumerate(other.cells)}
        for index, cell in enumerate(self.cells):
            if cell in positions:
                return index, positions[cell]
        return None

    def to_descriptor(self) -> Dict[str, Any]:
        return {
            "i": self.row,
            "j": self.col,
            "direction": self.direction.value,
            "length": self.length,
        }

    @classmethod
    def from_descriptor(cls, data: Mapping[str, Any]) -> "Variable":
        """Build a variable from ``{"i", "j", "direction", "length"}`` or row/col keys."""

        try:
            row = data["i"] if "i" in data else data["row"]
            col = data["j"] if "j" in data else data["col"]
            return cls(int(row), int(col), data["direction"], int(data["length"]))
        except (KeyError, TypeError, ValueError) as exc:
            raise MalformedGridError(f"Invalid variable descriptor: {data!r}") from exc

    def __str__(self) -> str:
        return f"({self.row}, {self.col}, '{self.direction.value}', {self.length})"
