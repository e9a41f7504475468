"""Error kinds reported while loading and validating lesson units.

Every kind derives from ``UnitError``, itself a ``ValueError`` so that callers
treating bad content as a value problem keep working. Errors carry a stable
``code`` (the kind name) and structured ``context`` for JSON reports.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any


class UnitError(ValueError):
    """Base class for unit content errors."""

    code = "UnitError"

    def __init__(
        self,
        message: str,
        *,
        unit_id: str | None = None,
        context: Mapping[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.unit_id = unit_id
        self.context = dict(context or {})

    def __str__(self) -> str:
        return f"{self.code}: {self.message}"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, UnitError):
            return NotImplemented
        return (self.code, self.message, self.unit_id) == (other.code, other.message, other.unit_id)

    def __hash__(self) -> int:
        return hash((self.code, self.message, self.unit_id))

    def to_dict(self) -> dict[str, Any]:
        """Return a JSON-friendly representation."""
        return {
            "kind": self.code,
            "unit": self.unit_id,
            "message": self.message,
            "context": self.context,
        }


class MalformedMetadata(UnitError):
    """A metadata field is missing or has the wrong shape."""

    code = "MalformedMetadata"

    def __init__(self, unit_id: str, field: str, problem: str) -> None:
        super().__init__(
            f"Unit '{unit_id}' has malformed '{field}': {problem}",
            unit_id=unit_id,
            context={"field": field},
        )
        self.field = field


class UnknownDependency(UnitError):
    """A unit needs a unit id that is not part of the collection."""

    code = "UnknownDependency"

    def __init__(self, unit_id: str, missing: str) -> None:
        super().__init__(
            f"Unit '{unit_id}' needs unknown unit '{missing}'.",
            unit_id=unit_id,
            context={"missing": missing},
        )
        self.missing = missing


class CycleDetected(UnitError):
    """Units require each other, directly or transitively."""

    code = "CycleDetected"

    def __init__(self, cycle: Sequence[str]) -> None:
        members = tuple(cycle)
        path = " -> ".join(members + members[:1])
        super().__init__(
            f"Circular unit dependency detected: {path}",
            unit_id=members[0] if members else None,
            context={"cycle": list(members)},
        )
        self.cycle = members


class DuplicateUnit(UnitError):
    """Two documents resolve to the same unit id."""

    code = "DuplicateUnit"

    def __init__(self, unit_id: str, first: str, second: str) -> None:
        super().__init__(
            f"Duplicate unit id: {unit_id} (in {first} and {second})",
            unit_id=unit_id,
            context={"first": first, "second": second},
        )
