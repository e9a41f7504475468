"""Configuration constants for unit discovery, parsing, and logging."""

from __future__ import annotations

import os

# Document discovery
DEFAULT_SUFFIXES: tuple[str, ...] = (".yml", ".yaml", ".md", ".Rmd", ".markdown")
YAML_SUFFIXES: frozenset[str] = frozenset({".yml", ".yaml"})

# Front matter
FRONT_MATTER_FENCE: str = "---"
FRONT_MATTER_CLOSERS: frozenset[str] = frozenset({"---", "..."})
BODY_KEYS: tuple[str, ...] = ("desc", "body")
REQUIRED_FIELDS: tuple[str, ...] = ("title", "theme")

# Logging
LOG_FORMAT: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
LOG_LEVEL_ENV: str = "UNITCHECK_LOG_LEVEL"
LOG_LEVELS: tuple[str, ...] = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")
DEFAULT_LOG_LEVEL: str = os.environ.get(LOG_LEVEL_ENV, "WARNING").upper()
