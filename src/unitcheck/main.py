"""CLI entrypoint for validating lesson unit collections."""

from __future__ import annotations

import argparse
import json
import logging
from collections.abc import Callable
from pathlib import Path

from . import __version__
from .config import DEFAULT_LOG_LEVEL, DEFAULT_SUFFIXES, LOG_FORMAT, LOG_LEVEL_ENV, LOG_LEVELS
from .service import ValidationReport, unit_plan, validate_directory

PrintFn = Callable[[str], None]

EXIT_OK = 0
EXIT_INVALID = 1
EXIT_USAGE = 2

logger = logging.getLogger(__name__)


def configure_logging(level: str = DEFAULT_LOG_LEVEL) -> None:
    """Send log records to stderr at ``level``, replacing earlier handlers."""
    for handler in logging.root.handlers[:]:
        logging.root.removeHandler(handler)
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.WARNING),
        format=LOG_FORMAT,
        handlers=[logging.StreamHandler()],
    )


def _parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="unitcheck", description="Validate lesson units and their prerequisites")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument(
        "--log-level",
        type=str.upper,
        choices=LOG_LEVELS,
        default=DEFAULT_LOG_LEVEL,
        help=f"Logging level (default: %(default)s, or ${LOG_LEVEL_ENV})",
    )
    commands = parser.add_subparsers(dest="command", required=True)

    def add_command(name: str, help_text: str) -> argparse.ArgumentParser:
        command = commands.add_parser(name, help=help_text)
        command.add_argument("directory", type=Path, help="Directory holding unit documents")
        command.add_argument(
            "--suffix",
            dest="suffixes",
            action="append",
            metavar="SUFFIX",
            help=f"Document suffix to load; repeatable (default: {' '.join(DEFAULT_SUFFIXES)})",
        )
        return command

    check = add_command("check", "Report errors or the computed lesson order")
    check.add_argument("--format", choices=["text", "json"], default="text")
    add_command("order", "Print unit ids in lesson order")
    plan = add_command("plan", "Print the units needed before one unit")
    plan.add_argument("unit", help="Unit id to plan for")
    return parser


def run(argv: list[str] | None = None, print_fn: PrintFn = print) -> int:
    """Run the CLI application."""
    parser = _parser()
    args = parser.parse_args(argv)
    if args.log_level not in LOG_LEVELS:
        parser.error(f"invalid {LOG_LEVEL_ENV} value: {args.log_level!r}")
    configure_logging(args.log_level)
    suffixes = tuple(args.suffixes) if args.suffixes else DEFAULT_SUFFIXES
    logger.debug("Running %s on %s with suffixes %s", args.command, args.directory, suffixes)

    try:
        report = validate_directory(args.directory, suffixes)
    except OSError as exc:
        print_fn(f"Cannot read unit directory: {exc}")
        return EXIT_USAGE

    if args.command == "check":
        return _check(report, args.format, print_fn)
    if args.command == "order":
        return _order(report, print_fn)
    return _plan(report, args.unit, print_fn)


def _print_errors(report: ValidationReport, print_fn: PrintFn) -> None:
    print_fn(f"FAILED: {len(report.errors)} error(s) in {len(report.units)} unit(s).")
    for error in report.errors:
        print_fn(f"- [{error.code}] {error.message}")


def _check(report: ValidationReport, output_format: str, print_fn: PrintFn) -> int:
    """Print a validation report."""
    if output_format == "json":
        print_fn(json.dumps(report.to_dict(), indent=2))
        return EXIT_OK if report.ok else EXIT_INVALID

    if not report.ok:
        _print_errors(report, print_fn)
        return EXIT_INVALID

    print_fn(f"OK: {len(report.units)} unit(s) validated.")
    if report.order:
        print_fn("Lesson order:")
        titles = {unit.id: unit.title for unit in report.units}
        for index, unit_id in enumerate(report.order, start=1):
            print_fn(f"{index}. {unit_id} - {titles[unit_id]}")
    return EXIT_OK


def _order(report: ValidationReport, print_fn: PrintFn) -> int:
    """Print bare unit ids in lesson order."""
    if not report.ok:
        _print_errors(report, print_fn)
        return EXIT_INVALID
    for unit_id in report.order:
        print_fn(unit_id)
    return EXIT_OK


def _plan(report: ValidationReport, unit_id: str, print_fn: PrintFn) -> int:
    """Print the prerequisite chain for one unit."""
    if not report.ok:
        _print_errors(report, print_fn)
        return EXIT_INVALID
    if unit_id not in report.graph:
        print_fn(f"Unknown unit: {unit_id}")
        return EXIT_USAGE

    steps = unit_plan(report, unit_id)
    print_fn(f"Plan for {unit_id} ({len(steps)} unit(s)):")
    for index, step in enumerate(steps, start=1):
        unit = report.unit(step)
        print_fn(f"{index}. {step} [{unit.theme}] {unit.title}")
    return EXIT_OK


def main_entry() -> None:
    """Console script entrypoint."""
    raise SystemExit(run())


if __name__ == "__main__":  # pragma: no cover
    main_entry()
