"""Prerequisite graph built from each unit's ``needs`` field."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass

from .errors import DuplicateUnit, UnitError, UnknownDependency
from .models import Unit


@dataclass(frozen=True)
class DependencyGraph:
    """Read-only adjacency of unit id to the ids it needs."""

    order: tuple[str, ...]
    edges: Mapping[str, tuple[str, ...]]

    def __contains__(self, unit_id: object) -> bool:
        return unit_id in self.edges

    def __len__(self) -> int:
        return len(self.order)

    def prerequisites(self, unit_id: str) -> tuple[str, ...]:
        """Return direct prerequisites of one unit."""
        return self.edges[unit_id]

    def dependents(self, unit_id: str) -> tuple[str, ...]:
        """Return units that directly need ``unit_id``, in input order."""
        if unit_id not in self.edges:
            raise KeyError(unit_id)
        return tuple(candidate for candidate in self.order if unit_id in self.edges[candidate])

    def transitive_prerequisites(self, unit_id: str) -> frozenset[str]:
        """Return every unit reachable through ``needs`` from ``unit_id``."""
        if unit_id not in self.edges:
            raise KeyError(unit_id)
        found: set[str] = set()
        stack = list(self.edges[unit_id])
        while stack:
            current = stack.pop()
            if current in found:
                continue
            found.add(current)
            stack.extend(self.edges[current])
        found.discard(unit_id)
        return frozenset(found)


@dataclass(frozen=True)
class GraphBuild:
    """Graph plus the reference problems found while building it."""

    graph: DependencyGraph
    errors: tuple[UnitError, ...]


def _label(unit: Unit) -> str:
    return unit.source.name if unit.source is not None else unit.id


def build_graph(units: Iterable[Unit], unavailable: Iterable[str] = ()) -> GraphBuild:
    """Build the prerequisite graph, reporting repeated ids and references to missing units.

    The first unit with a given id is kept and later ones are reported as
    ``DuplicateUnit``. Ids listed in ``unavailable`` belong to documents that
    failed to parse. Edges to them are dropped without a second report.
    """
    kept: dict[str, Unit] = {}
    errors: list[UnitError] = []
    for unit in units:
        first = kept.get(unit.id)
        if first is not None:
            errors.append(DuplicateUnit(unit.id, _label(first), _label(unit)))
            continue
        kept[unit.id] = unit

    skipped = set(unavailable)
    edges: dict[str, tuple[str, ...]] = {}
    for unit in kept.values():
        resolved: list[str] = []
        for prerequisite in unit.needs:
            if prerequisite in kept:
                resolved.append(prerequisite)
            elif prerequisite not in skipped:
                errors.append(UnknownDependency(unit.id, prerequisite))
        edges[unit.id] = tuple(resolved)

    graph = DependencyGraph(order=tuple(kept), edges=edges)
    return GraphBuild(graph=graph, errors=tuple(errors))
