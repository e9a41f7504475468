"""Core domain models for lesson units."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class Unit:
    """One lesson document with metadata and body text."""

    id: str
    title: str
    theme: str
    needs: tuple[str, ...]
    body: str
    readings: tuple[str, ...] = ()
    updated: str | None = None
    source: Path | None = None
