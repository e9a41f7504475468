"""Load lesson unit documents from a directory."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path

from .config import DEFAULT_SUFFIXES
from .errors import DuplicateUnit, MalformedMetadata, UnitError
from .models import Unit
from .parser import parse_unit

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LoadResult:
    """Units parsed from one directory plus the errors collected on the way."""

    units: tuple[Unit, ...]
    errors: tuple[UnitError, ...]
    failed_ids: frozenset[str]


def discover_unit_files(path: Path, suffixes: Iterable[str] = DEFAULT_SUFFIXES) -> list[Path]:
    """Return unit documents in ``path`` sorted by file name."""
    if not path.exists():
        raise FileNotFoundError(path)
    if not path.is_dir():
        raise NotADirectoryError(path)
    wanted = {suffix.lower() for suffix in suffixes}
    files = [
        entry
        for entry in path.iterdir()
        if entry.is_file() and entry.suffix.lower() in wanted and not entry.name.startswith((".", "_"))
    ]
    return sorted(files, key=lambda item: item.name)


def load_units_from_dir(path: Path, suffixes: Iterable[str] = DEFAULT_SUFFIXES) -> LoadResult:
    """Parse every unit document in ``path``, collecting errors instead of stopping."""
    units: list[Unit] = []
    errors: list[UnitError] = []
    failed: set[str] = set()
    seen: dict[str, Path] = {}

    for file_path in discover_unit_files(path, suffixes):
        unit_id = file_path.stem
        previous = seen.get(unit_id)
        if previous is not None:
            errors.append(DuplicateUnit(unit_id, previous.name, file_path.name))
            continue
        seen[unit_id] = file_path

        try:
            unit = load_unit_file(file_path)
        except UnitError as exc:
            logger.debug("Rejected %s: %s", file_path, exc)
            errors.append(exc)
            failed.add(unit_id)
            continue
        units.append(unit)

    logger.info("Loaded %d unit(s) from %s with %d error(s)", len(units), path, len(errors))
    return LoadResult(units=tuple(units), errors=tuple(errors), failed_ids=frozenset(failed))


def load_unit_file(file_path: Path) -> Unit:
    """Read and parse one unit document."""
    unit_id = file_path.stem
    try:
        text = file_path.read_text(encoding="utf-8-sig")
    except UnicodeDecodeError as exc:
        raise MalformedMetadata(unit_id, "encoding", "document is not valid UTF-8") from exc
    except OSError as exc:
        raise MalformedMetadata(unit_id, "file", f"cannot read document ({exc.strerror or exc})") from exc
    return parse_unit(text, unit_id, source=file_path)
