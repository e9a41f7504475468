"""Parse one unit document into a ``Unit``.

Two shapes are accepted. A YAML unit file is one mapping whose ``desc`` field
holds the lesson body. A Markdown document opens with a ``---`` fence, carries
a YAML mapping up to the closing ``---`` (or ``...``) line, and the rest of
the file is the body.
"""

from __future__ import annotations

import datetime as dt
from pathlib import Path
from typing import Any

import yaml

from .config import BODY_KEYS, FRONT_MATTER_CLOSERS, FRONT_MATTER_FENCE, REQUIRED_FIELDS, YAML_SUFFIXES
from .errors import MalformedMetadata
from .models import Unit

FRONT_MATTER_FIELD = "front-matter"


def parse_unit(text: str, unit_id: str, source: Path | None = None) -> Unit:
    """Parse document text into a unit or raise ``MalformedMetadata``."""
    text = text.lstrip("\ufeff")
    if source is not None and source.suffix.lower() in YAML_SUFFIXES:
        metadata = _load_mapping(unit_id, text)
        body = _body_from_metadata(unit_id, metadata)
    else:
        front, body = split_front_matter(unit_id, text)
        metadata = _load_mapping(unit_id, front)

    title, theme = (_required_text(unit_id, metadata, field) for field in REQUIRED_FIELDS)
    return Unit(
        id=unit_id,
        title=title,
        theme=theme,
        needs=_string_list(unit_id, metadata, "needs"),
        body=body,
        readings=_string_list(unit_id, metadata, "readings", split_commas=False),
        updated=_updated(unit_id, metadata),
        source=source,
    )


def split_front_matter(unit_id: str, text: str) -> tuple[str, str]:
    """Split a fenced document into its front-matter text and body."""
    lines = text.splitlines(keepends=True)
    if not lines or lines[0].strip() != FRONT_MATTER_FENCE:
        raise MalformedMetadata(unit_id, FRONT_MATTER_FIELD, f"document must start with '{FRONT_MATTER_FENCE}'")
    for index, line in enumerate(lines[1:], start=1):
        if line.strip() in FRONT_MATTER_CLOSERS:
            return "".join(lines[1:index]), "".join(lines[index + 1 :])
    raise MalformedMetadata(unit_id, FRONT_MATTER_FIELD, "closing fence not found")


def _load_mapping(unit_id: str, text: str) -> dict[str, Any]:
    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        problem = " ".join(str(exc).split())
        raise MalformedMetadata(unit_id, FRONT_MATTER_FIELD, f"invalid YAML ({problem})") from exc
    if loaded is None:
        loaded = {}
    if not isinstance(loaded, dict):
        raise MalformedMetadata(unit_id, FRONT_MATTER_FIELD, f"expected a mapping, got {type(loaded).__name__}")
    return {str(key): value for key, value in loaded.items()}


def _body_from_metadata(unit_id: str, metadata: dict[str, Any]) -> str:
    for key in BODY_KEYS:
        value = metadata.get(key)
        if value is None:
            continue
        if not isinstance(value, str):
            raise MalformedMetadata(unit_id, key, f"expected text, got {type(value).__name__}")
        return value
    return ""


def _required_text(unit_id: str, metadata: dict[str, Any], field: str) -> str:
    if field not in metadata or metadata[field] is None:
        raise MalformedMetadata(unit_id, field, "missing")
    value = metadata[field]
    if not isinstance(value, str):
        raise MalformedMetadata(unit_id, field, f"expected text, got {type(value).__name__}")
    value = value.strip()
    if not value:
        raise MalformedMetadata(unit_id, field, "empty")
    return value


def _string_list(unit_id: str, metadata: dict[str, Any], field: str, split_commas: bool = True) -> tuple[str, ...]:
    """Normalize a null, string, or list field to an ordered tuple without duplicates."""
    raw = metadata.get(field)
    if raw is None:
        return ()
    if isinstance(raw, str):
        items = raw.split(",") if split_commas else [raw]
    elif isinstance(raw, list):
        items = []
        for item in raw:
            if not isinstance(item, str):
                raise MalformedMetadata(unit_id, field, f"entries must be text, got {type(item).__name__}")
            items.append(item)
    else:
        raise MalformedMetadata(unit_id, field, f"expected text or a list, got {type(raw).__name__}")

    values: list[str] = []
    for item in items:
        value = item.strip()
        if value and value not in values:
            values.append(value)
    return tuple(values)


def _updated(unit_id: str, metadata: dict[str, Any]) -> str | None:
    raw = metadata.get("updated")
    if raw is None:
        return None
    if isinstance(raw, (dt.date, dt.datetime)):
        return raw.isoformat()
    if isinstance(raw, str):
        return raw.strip() or None
    raise MalformedMetadata(unit_id, "updated", f"expected a date, got {type(raw).__name__}")
