"""Run the load, graph, and validation passes over one unit directory."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from .config import DEFAULT_SUFFIXES
from .content_loader import load_units_from_dir
from .errors import UnitError
from .graph import DependencyGraph, build_graph
from .models import Unit
from .validator import validate

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ValidationReport:
    """Outcome of validating one unit collection."""

    units: tuple[Unit, ...]
    graph: DependencyGraph
    errors: tuple[UnitError, ...]
    order: tuple[str, ...]

    @property
    def ok(self) -> bool:
        return not self.errors

    def unit(self, unit_id: str) -> Unit:
        """Return one loaded unit by id."""
        for unit in self.units:
            if unit.id == unit_id:
                return unit
        raise KeyError(unit_id)

    def to_dict(self) -> dict[str, Any]:
        """Return a JSON-friendly summary."""
        return {
            "ok": self.ok,
            "unit_count": len(self.units),
            "order": list(self.order),
            "errors": [error.to_dict() for error in self.errors],
        }


def validate_units(
    units: Iterable[Unit],
    prior_errors: Iterable[UnitError] = (),
    unavailable: Iterable[str] = (),
) -> ValidationReport:
    """Build and validate the graph for already parsed units."""
    units = tuple(units)
    errors: list[UnitError] = list(prior_errors)
    built = build_graph(units, unavailable=unavailable)
    errors.extend(built.errors)
    outcome = validate(built.graph)
    errors.extend(outcome.errors)

    order = outcome.order if not errors else ()
    if errors:
        logger.info("Validation failed with %d error(s)", len(errors))
    else:
        logger.info("Validated %d unit(s)", len(units))
    return ValidationReport(units=units, graph=built.graph, errors=tuple(errors), order=order)


def validate_directory(path: Path | str, suffixes: Iterable[str] = DEFAULT_SUFFIXES) -> ValidationReport:
    """Load every unit in ``path`` and validate the collection in one pass."""
    loaded = load_units_from_dir(Path(path), suffixes)
    return validate_units(loaded.units, prior_errors=loaded.errors, unavailable=loaded.failed_ids)


def unit_plan(report: ValidationReport, unit_id: str) -> tuple[str, ...]:
    """Return the units to take, in order, ending with ``unit_id``."""
    if not report.ok:
        raise ValueError("Cannot plan units for a collection that failed validation.")
    needed = report.graph.transitive_prerequisites(unit_id) | {unit_id}
    return tuple(item for item in report.order if item in needed)
