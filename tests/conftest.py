from __future__ import annotations

import shutil
import sys
from collections.abc import Callable, Iterator
from pathlib import Path
from uuid import uuid4

import pytest

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

WriteUnit = Callable[..., Path]


def _tmp_path_fixture() -> Iterator[Path]:
    """Provide a per-test directory under ``.tmp_pytest/`` in the project root.

    Overrides pytest's builtin ``tmp_path`` so unit directories stay inside the
    workspace.
    """
    base = ROOT / ".tmp_pytest"
    base.mkdir(parents=True, exist_ok=True)
    path = base / str(uuid4())
    path.mkdir(parents=True, exist_ok=False)
    try:
        yield path
    finally:
        shutil.rmtree(path, ignore_errors=True)
        try:
            next(base.iterdir())
        except StopIteration:
            base.rmdir()
        except FileNotFoundError:
            pass


tmp_path = pytest.fixture(name="tmp_path")(_tmp_path_fixture)


@pytest.fixture
def units_dir(tmp_path: Path) -> Path:
    root = tmp_path / "units"
    root.mkdir()
    return root


@pytest.fixture
def write_unit(units_dir: Path) -> WriteUnit:
    """Write a YAML unit file; ``needs`` may be a string, list, or None."""

    def write(unit_id: str, needs: object = None, theme: str = "wrangle", title: str | None = None) -> Path:
        lines = [f"title: {title or unit_id.replace('-', ' ').title()}", f"theme: {theme}"]
        if needs is None:
            lines.append("needs: ~")
        elif isinstance(needs, str):
            lines.append(f"needs: {needs}")
        else:
            lines.append("needs:")
            lines.extend(f"  - {item}" for item in needs)
        lines.append(f'desc: "Body of {unit_id}."')
        path = units_dir / f"{unit_id}.yml"
        path.write_text("\n".join(lines) + "\n", encoding="utf-8")
        return path

    return write
