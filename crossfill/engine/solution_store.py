"""Persistent solve result store.

Every solve (success or failure) can be saved as a JSON document under
``local_db/solutions/``. Documents carry the puzzle shape, the solution in the
``[descriptor, letters]`` pair format and a few stats.
"""

from __future__ import annotations

import json
import uuid
from collections import Counter
from datetime import datetime, timezone
from pathlib import Path
from typing import TYPE_CHECKING, Any, Dict, Optional

from ..core.exceptions import PuzzleLoadError
from ..data.vocabulary import length_histogram
from ..io.solution import Solution, assignment_to_solution, solution_from_jsonable, solution_to_jsonable
from ..utils.logger import get_logger

if TYPE_CHECKING:
    from .crossword import Crossword
    from .solver import SolveResult, SolverConfig


LOGGER = get_logger(__name__)

DEFAULT_STORE_DIR = Path("local_db/solutions")


class SolutionStore:
    """Save solve results as structured JSON documents."""

    def __init__(self, store_dir: Path | str = DEFAULT_STORE_DIR) -> None:
        self.store_dir = Path(store_dir)
        self.store_dir.mkdir(parents=True, exist_ok=True)

    # ------------------------------------------------------------------
    # Public interface
    # ------------------------------------------------------------------

    def save(
        self,
        crossword: "Crossword",
        result: "SolveResult",
        config: Optional["SolverConfig"] = None,
    ) -> str:
        """Persist a solve result and return its document ID."""
        doc_id = self._new_id()
        now = datetime.now(timezone.utc).isoformat()
        solution = assignment_to_solution(result.assignment) if result.assignment is not None else None

        doc = {
            "id": doc_id,
            "created_at": now,
            "status": result.status.value,
            "backend": result.backend.value,
            "config": self._serialize_config(config),
            "height": crossword.height,
            "width": crossword.width,
            "constraints": [
                i * crossword.width + j + 1
                for i in range(crossword.height)
                for j in range(crossword.width)
                if not crossword.structure[i][j]
            ],
            "solution": solution_to_jsonable(solution) if solution is not None else None,
            "stats": self._compute_stats(crossword, result),
        }

        path = self.store_dir / f"{doc_id}.json"
        path.write_text(json.dumps(doc, ensure_ascii=False, indent=2), encoding="utf-8")
        LOGGER.info("Solve result saved: %s (%s)", doc_id, result.status.value)
        return doc_id

    def load(self, doc_id: str) -> Dict[str, Any]:
        path = self.store_dir / f"{doc_id}.json"
        if not path.exists():
            raise PuzzleLoadError(f"No stored solution {doc_id} in {self.store_dir}")
        try:
            return json.loads(path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as exc:
            raise PuzzleLoadError(f"Corrupt stored solution {doc_id}: {exc}") from exc

    def load_solution(self, doc_id: str) -> Optional[Solution]:
        doc = self.load(doc_id)
        if not doc.get("solution"):
            return None
        return solution_from_jsonable(doc["solution"])

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _compute_stats(crossword: "Crossword", result: "SolveResult") -> dict:
        lengths = Counter(variable.length for variable in crossword.variables)
        fillable = sum(1 for row in crossword.structure for cell in row if cell)
        return {
            "grid": {
                "rows": crossword.height,
                "cols": crossword.width,
                "total_cells": crossword.height * crossword.width,
                "fillable_cells": fillable,
                "black_cells": crossword.height * crossword.width - fillable,
            },
            "words": {
                "total_slots": len(crossword.variables),
                "vocabulary_size": len(crossword.vocabulary),
                "vocabulary_lengths": {str(k): v for k, v in length_histogram(crossword.vocabulary).items()},
                "length_distribution": {str(k): v for k, v in sorted(lengths.items())},
            },
            "search": {
                "nodes": result.nodes,
                "elapsed_seconds": round(result.elapsed_seconds, 4),
            },
        }

    @staticmethod
    def _serialize_config(config: Optional["SolverConfig"]) -> Optional[dict]:
        if config is None:
            return None
        return {
            "require_distinct_words": config.require_distinct_words,
            "max_nodes": config.max_nodes,
            "timeout_seconds": config.timeout_seconds,
            "backend": getattr(config.backend, "value", config.backend),
        }

    @staticmethod
    def _new_id() -> str:
        ts = datetime.now(timezone.utc).strftime("%Y%m%dT%H%M%S")
        short_uuid = uuid.uuid4().hex[:8]
        return f"{ts}_{short_uuid}"
