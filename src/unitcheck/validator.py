"""Order units by prerequisite and detect dependency cycles."""

from __future__ import annotations

import heapq
import logging
from collections.abc import Iterator
from dataclasses import dataclass

from .errors import CycleDetected
from .graph import DependencyGraph

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ValidationOutcome:
    """Lesson order for an acyclic graph, or the cycles that prevent one."""

    order: tuple[str, ...]
    errors: tuple[CycleDetected, ...]

    @property
    def ok(self) -> bool:
        return not self.errors


def _partial_order(graph: DependencyGraph) -> list[str]:
    """Kahn's algorithm; ready units leave in input order."""
    position = {unit_id: index for index, unit_id in enumerate(graph.order)}
    remaining = {unit_id: len(graph.edges[unit_id]) for unit_id in graph.order}
    dependents: dict[str, list[str]] = {unit_id: [] for unit_id in graph.order}
    for unit_id in graph.order:
        for prerequisite in graph.edges[unit_id]:
            dependents[prerequisite].append(unit_id)

    ready = [position[unit_id] for unit_id, count in remaining.items() if count == 0]
    heapq.heapify(ready)
    ordered: list[str] = []
    while ready:
        unit_id = graph.order[heapq.heappop(ready)]
        ordered.append(unit_id)
        for dependent in dependents[unit_id]:
            remaining[dependent] -= 1
            if remaining[dependent] == 0:
                heapq.heappush(ready, position[dependent])
    return ordered


def find_cycles(graph: DependencyGraph) -> list[tuple[str, ...]]:
    """Return distinct cycles met by a depth-first walk in input order.

    Each cycle starts at its member that comes first in input order.
    """
    position = {unit_id: index for index, unit_id in enumerate(graph.order)}
    visiting: set[str] = set()
    visited: set[str] = set()
    cycles: list[tuple[str, ...]] = []

    def record(path: list[str], unit_id: str) -> None:
        members = path[path.index(unit_id) :]
        start = min(range(len(members)), key=lambda index: position[members[index]])
        cycle = tuple(members[start:] + members[:start])
        if cycle not in cycles:
            cycles.append(cycle)

    for root in graph.order:
        if root in visited:
            continue
        # Iterative walk: chains may run deeper than the recursion limit.
        path: list[str] = [root]
        frames: list[tuple[str, Iterator[str]]] = [(root, iter(graph.edges[root]))]
        visiting.add(root)
        while frames:
            unit_id, prerequisites = frames[-1]
            prerequisite = next(prerequisites, None)
            if prerequisite is None:
                frames.pop()
                path.pop()
                visiting.remove(unit_id)
                visited.add(unit_id)
            elif prerequisite in visiting:
                record(path, prerequisite)
            elif prerequisite not in visited:
                visiting.add(prerequisite)
                path.append(prerequisite)
                frames.append((prerequisite, iter(graph.edges[prerequisite])))
    return cycles


def validate(graph: DependencyGraph) -> ValidationOutcome:
    """Compute the lesson order, reporting every cycle instead of raising."""
    ordered = _partial_order(graph)
    if len(ordered) == len(graph.order):
        return ValidationOutcome(order=tuple(ordered), errors=())

    placed = set(ordered)
    stuck = [unit_id for unit_id in graph.order if unit_id not in placed]
    logger.debug("Units left unordered: %s", ", ".join(stuck))
    errors = tuple(CycleDetected(cycle) for cycle in find_cycles(graph))
    return ValidationOutcome(order=(), errors=errors)


def topological_order(graph: DependencyGraph) -> tuple[str, ...]:
    """Return units ordered after their prerequisites, or raise ``CycleDetected``."""
    outcome = validate(graph)
    if outcome.errors:
        raise outcome.errors[0]
    return outcome.order
