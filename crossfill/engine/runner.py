"""Run solves off the caller's thread.

A front end keeps editing while the solver works; the solved assignment comes
back through a future (or a callback) once search finishes.
"""

from __future__ import annotations

import threading
from concurrent.futures import Future, ThreadPoolExecutor, as_completed
from typing import Callable, Dict, Hashable, Mapping, Optional, Tuple

from ..core.exceptions import CrosswordError
from ..utils.logger import get_logger
from .crossword import Crossword
from .domains import Prior
from .solver import SolveResult, SolverConfig, solve

LOGGER = get_logger(__name__)

SolveJob = Tuple[Crossword, Optional[SolverConfig], Optional[Prior]]


class BackgroundSolver:
    """Thread pool wrapper allowing at most one running solve per puzzle key."""

    def __init__(self, max_workers: int = 1) -> None:
        self._executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="crossfill")
        self._lock = threading.Lock()
        self._running: Dict[Hashable, Future] = {}

    def submit(
        self,
        key: Hashable,
        crossword: Crossword,
        config: Optional[SolverConfig] = None,
        prior: Optional[Prior] = None,
        callback: Optional[Callable[[SolveResult], None]] = None,
        on_error: Optional[Callable[[BaseException], None]] = None,
    ) -> "Future[SolveResult]":
        """Start solving ``crossword``; raises if ``key`` already has a solve in flight.

        ``callback`` receives the result of a finished solve. A solve that raises
        is passed to ``on_error`` instead; the returned future carries either.
        """

        with self._lock:
            if key in self._running:
                raise CrosswordError(f"A solve is already running for puzzle {key!r}")
            future = self._executor.submit(solve, crossword, config, prior)
            self._running[key] = future
        LOGGER.debug("Submitted solve for puzzle %r", key)

        def _finished(done: "Future[SolveResult]") -> None:
            with self._lock:
                self._running.pop(key, None)
            if done.cancelled():
                return
            exc = done.exception()
            if exc is not None:
                LOGGER.error("Solve for puzzle %r failed: %s", key, exc)
                if on_error is not None:
                    on_error(exc)
                return
            if callback is not None:
                callback(done.result())

        future.add_done_callback(_finished)
        return future

    def is_running(self, key: Hashable) -> bool:
        with self._lock:
            return key in self._running

    def solve_all(self, jobs: Mapping[Hashable, SolveJob]) -> Dict[Hashable, SolveResult]:
        """Solve several puzzles and wait for all of them."""

        futures = {
            self.submit(key, crossword, config, prior): key
            for key, (crossword, config, prior) in jobs.items()
        }
        results: Dict[Hashable, SolveResult] = {}
        for future in as_completed(futures):
            key = futures[future]
            results[key] = future.result()
            LOGGER.info("Puzzle %r finished: %s", key, results[key].status.value)
        return results

    def shutdown(self, wait: bool = True) -> None:
        self._executor.shutdown(wait=wait)

    def __enter__(self) -> "BackgroundSolver":
        return self

    def __exit__(self, *exc_info) -> None:
        self.shutdown()
