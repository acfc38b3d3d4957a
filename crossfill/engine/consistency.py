"""Node consistency and AC-3 over the crossword overlap graph."""

from __future__ import annotations

from collections import deque
from typing import Iterable, Optional

from ..core.models import Variable
from ..utils.logger import get_logger
from .crossword import Arc, Crossword
from .domains import DomainStore


LOGGER = get_logger(__name__)


def enforce_node_consistency(crossword: Crossword, domains: DomainStore) -> None:
    """Drop every word whose length differs from its slot's length."""

    for variable in crossword.variables:
        domains[variable] = [word for word in domains[variable] if len(word) == variable.length]


def revise(crossword: Crossword, domains: DomainStore, x: Variable, y: Variable) -> bool:
    """Make ``x`` arc consistent with ``y``; return ``True`` if ``domain(x)`` shrank."""

    overlap = crossword.overlap(x, y)
    if overlap is None:
        return False
    i, j = overlap
    supported = {word[j] for word in domains[y] if len(word) > j}
    current = domains[x]
    kept = [word for word in current if len(word) > i and word[i] in supported]
    if len(kept) == len(current):
        return False
    domains[x] = kept
    return True


def ac3(
    crossword: Crossword,
    domains: DomainStore,
    arcs: Optional[Iterable[Arc]] = None,
) -> bool:
    """Propagate overlap constraints until a fixpoint.

    With ``arcs=None`` the queue starts with every arc of the overlap graph.
    Returns ``False`` as soon as a domain becomes empty.
    """

    queue = deque(crossword.arcs() if arcs is None else arcs)
    while queue:
        x, y = queue.popleft()
        if x == y or crossword.overlap(x, y) is None:
            continue
        if not revise(crossword, domains, x, y):
            continue
        if not domains[x]:
            LOGGER.debug("AC-3 emptied the domain of %s", x)
            return False
        for z in crossword.neighbors(x):
            if z != y:
                queue.append((z, x))
    return True
