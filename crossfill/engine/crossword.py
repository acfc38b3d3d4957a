"""Static crossword skeleton: structure, slots and the overlap graph."""

from __future__ import annotations

from typing import Dict, Iterable, Iterator, List, Optional, Sequence, Tuple

from ..core.constants import Bounds, Direction
from ..core.exceptions import MalformedGridError
from ..core.models import Overlap, Variable
from ..utils.logger import get_logger


LOGGER = get_logger(__name__)

Arc = Tuple[Variable, Variable]


class Crossword:
    """Grid structure plus the word slots and crossings derived from it.

    ``structure[i][j]`` is ``True`` for fillable cells. The vocabulary is
    upper-cased and de-duplicated in first-occurrence order; ``variables``
    follow the canonical enumeration (row-major, DOWN before ACROSS per cell).
    """

    def __init__(
        self,
        structure: Sequence[Sequence[bool]],
        words: Iterable[str],
        height: Optional[int] = None,
        width: Optional[int] = None,
    ) -> None:
        self.structure: Tuple[Tuple[bool, ...], ...] = tuple(
            tuple(bool(cell) for cell in row) for row in structure
        )
        self.height = len(self.structure) if height is None else height
        self.width = (len(self.structure[0]) if self.structure else 0) if width is None else width
        self._check_dimensions()
        self.bounds = Bounds(rows=self.height, cols=self.width)

        self.vocabulary: Tuple[str, ...] = tuple(
            dict.fromkeys(word.strip().upper() for word in words if word and word.strip())
        )
        self.variables: Tuple[Variable, ...] = tuple(self._decompose())
        self.overlaps: Dict[Arc, Optional[Overlap]] = {}
        self._neighbors: Dict[Variable, Tuple[Variable, ...]] = {}
        self._build_overlaps()
        LOGGER.debug(
            "Crossword %sx%s: %d variables, %d crossings, %d words",
            self.height,
            self.width,
            len(self.variables),
            len(self.arcs()) // 2,
            len(self.vocabulary),
        )

    # ------------------------------------------------------------------
    # Alternate constructors
    # ------------------------------------------------------------------
    @classmethod
    def from_constraints(
        cls,
        constraints: Iterable[int],
        words: Iterable[str],
        height: int,
        width: int,
    ) -> "Crossword":
        """Build from 1-based black cell numbers ``i * width + j + 1``."""

        return cls(structure_from_constraints(constraints, height, width), words, height, width)

    # ------------------------------------------------------------------
    # Construction helpers
    # ------------------------------------------------------------------
    def _check_dimensions(self) -> None:
        if self.height < 0 or self.width < 0:
            raise MalformedGridError(f"Negative grid dimensions {self.height}x{self.width}")
        if len(self.structure) != self.height:
            raise MalformedGridError(
                f"Structure has {len(self.structure)} rows, expected height {self.height}"
            )
        for index, row in enumerate(self.structure):
            if len(row) != self.width:
                raise MalformedGridError(
                    f"Structure row {index} has {len(row)} cells, expected width {self.width}"
                )

    def _decompose(self) -> Iterator[Variable]:
        for i in range(self.height):
            for j in range(self.width):
                if not self.structure[i][j]:
                    continue
                if i == 0 or not self.structure[i - 1][j]:
                    length = self._run_length(i, j, Direction.DOWN)
                    if length > 1:
                        yield Variable(i, j, Direction.DOWN, length)
                if j == 0 or not self.structure[i][j - 1]:
                    length = self._run_length(i, j, Direction.ACROSS)
                    if length > 1:
                        yield Variable(i, j, Direction.ACROSS, length)

    def _run_length(self, row: int, col: int, direction: Direction) -> int:
        length = 0
        r, c = row, col
        while self.bounds.contains(r, c) and self.structure[r][c]:
            length += 1
            if direction == Direction.DOWN:
                r += 1
            else:
                c += 1
        return length

    def _build_overlaps(self) -> None:
        neighbors: Dict[Variable, List[Variable]] = {v: [] for v in self.variables}
        for v1 in self.variables:
            for v2 in self.variables:
                if v1 == v2:
                    continue
                overlap = v1.overlap_with(v2)
                self.overlaps[(v1, v2)] = overlap
                if overlap is not None:
                    neighbors[v1].append(v2)
        self._neighbors = {v: tuple(vs) for v, vs in neighbors.items()}

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------
    def overlap(self, x: Variable, y: Variable) -> Optional[Overlap]:
        return self.overlaps.get((x, y))

    def neighbors(self, variable: Variable) -> Tuple[Variable, ...]:
        """Variables sharing a cell with ``variable``, in canonical order."""

        return self._neighbors.get(variable, ())

    def degree(self, variable: Variable) -> int:
        return len(self.neighbors(variable))

    def arcs(self) -> List[Arc]:
        """All ordered pairs with a defined overlap, in canonical order."""

        return [(x, y) for x in self.variables for y in self.neighbors(x)]

    def __contains__(self, variable: object) -> bool:
        return variable in self._neighbors

    def __repr__(self) -> str:
        return (
            f"Crossword(height={self.height}, width={self.width}, "
            f"variables={len(self.variables)}, words={len(self.vocabulary)})"
        )


def structure_from_constraints(
    constraints: Iterable[int],
    height: int,
    width: int,
) -> List[List[bool]]:
    """Expand 1-based black cell numbers into a fillable matrix."""

    structure = [[True] * width for _ in range(height)]
    for number in constraints:
        index = int(number) - 1
        if not 0 <= index < height * width:
            raise MalformedGridError(
                f"Black cell number {number} outside a {height}x{width} grid"
            )
        structure[index // width][index % width] = False
    return structure
