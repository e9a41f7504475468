import json
import logging
from pathlib import Path

import unitcheck.main as main


def _run(*argv: str) -> tuple[int, list[str]]:
    outputs: list[str] = []
    code = main.run(list(argv), print_fn=outputs.append)
    return code, outputs


def _course(write_unit) -> None:
    write_unit("manip-basics", title="Data manipulation basics")
    write_unit("vector-functions", needs="manip-basics", theme="program", title="Vector functions")
    write_unit("spatial-basics", needs="manip-basics", theme="explore", title="Spatial basics")
    write_unit("spatial-vis", needs="spatial-basics", theme="explore", title="Spatial visualisation")


def test_check_success_prints_order(units_dir: Path, write_unit) -> None:
    _course(write_unit)
    code, outputs = _run("check", str(units_dir))
    assert code == main.EXIT_OK
    assert outputs[0] == "OK: 4 unit(s) validated."
    assert outputs[1] == "Lesson order:"
    assert outputs[2:] == [
        "1. manip-basics - Data manipulation basics",
        "2. spatial-basics - Spatial basics",
        "3. spatial-vis - Spatial visualisation",
        "4. vector-functions - Vector functions",
    ]


def test_check_failure_lists_every_error(units_dir: Path, write_unit) -> None:
    write_unit("a", needs="b")
    write_unit("b", needs="c")
    write_unit("c", needs="a")
    write_unit("d", needs="nowhere")
    code, outputs = _run("check", str(units_dir))
    assert code == main.EXIT_INVALID
    assert outputs[0] == "FAILED: 2 error(s) in 4 unit(s)."
    assert outputs[1] == "- [UnknownDependency] Unit 'd' needs unknown unit 'nowhere'."
    assert outputs[2] == "- [CycleDetected] Circular unit dependency detected: a -> b -> c -> a"
    assert not any("Lesson order" in line for line in outputs)


def test_check_json_format(units_dir: Path, write_unit) -> None:
    write_unit("a")
    write_unit("b", needs="a")
    code, outputs = _run("check", str(units_dir), "--format", "json")
    assert code == main.EXIT_OK
    payload = json.loads(outputs[0])
    assert payload == {"ok": True, "unit_count": 2, "order": ["a", "b"], "errors": []}


def test_check_json_format_failure_exit_code(units_dir: Path, write_unit) -> None:
    (units_dir / "bad.yml").write_text("theme: x\n", encoding="utf-8")
    code, outputs = _run("check", str(units_dir), "--format", "json")
    assert code == main.EXIT_INVALID
    payload = json.loads(outputs[0])
    assert payload["errors"][0]["kind"] == "MalformedMetadata"
    assert payload["errors"][0]["context"] == {"field": "title"}


def test_check_empty_directory_is_ok(units_dir: Path) -> None:
    code, outputs = _run("check", str(units_dir))
    assert code == main.EXIT_OK
    assert outputs == ["OK: 0 unit(s) validated."]


def test_missing_directory_is_usage_error(tmp_path: Path) -> None:
    code, outputs = _run("check", str(tmp_path / "absent"))
    assert code == main.EXIT_USAGE
    assert outputs[0].startswith("Cannot read unit directory:")


def test_order_prints_bare_ids(units_dir: Path, write_unit) -> None:
    _course(write_unit)
    code, outputs = _run("order", str(units_dir))
    assert code == main.EXIT_OK
    assert outputs == ["manip-basics", "spatial-basics", "spatial-vis", "vector-functions"]


def test_order_fails_on_invalid_collection(units_dir: Path, write_unit) -> None:
    write_unit("a", needs="a")
    code, outputs = _run("order", str(units_dir))
    assert code == main.EXIT_INVALID
    assert outputs[0].startswith("FAILED: 1 error(s)")


def test_plan_prints_prerequisite_chain(units_dir: Path, write_unit) -> None:
    _course(write_unit)
    code, outputs = _run("plan", str(units_dir), "spatial-vis")
    assert code == main.EXIT_OK
    assert outputs == [
        "Plan for spatial-vis (3 unit(s)):",
        "1. manip-basics [wrangle] Data manipulation basics",
        "2. spatial-basics [explore] Spatial basics",
        "3. spatial-vis [explore] Spatial visualisation",
    ]


def test_plan_unknown_unit(units_dir: Path, write_unit) -> None:
    _course(write_unit)
    code, outputs = _run("plan", str(units_dir), "ghost")
    assert code == main.EXIT_USAGE
    assert outputs == ["Unknown unit: ghost"]


def test_plan_on_invalid_collection(units_dir: Path, write_unit) -> None:
    write_unit("a", needs="ghost")
    code, outputs = _run("plan", str(units_dir), "a")
    assert code == main.EXIT_INVALID
    assert outputs[1] == "- [UnknownDependency] Unit 'a' needs unknown unit 'ghost'."


def test_suffix_option_limits_documents(units_dir: Path, write_unit) -> None:
    write_unit("a")
    (units_dir / "b.md").write_text("---\ntitle: B\ntheme: x\nneeds: a\n---\n", encoding="utf-8")
    code, outputs = _run("order", str(units_dir), "--suffix", ".md")
    assert code == main.EXIT_INVALID
    assert "needs unknown unit 'a'" in outputs[1]

    code, outputs = _run("order", str(units_dir), "--suffix", ".md", "--suffix", ".yml")
    assert code == main.EXIT_OK
    assert outputs == ["a", "b"]


def test_missing_command_is_usage_error() -> None:
    try:
        main.run([])
        raise AssertionError("Expected SystemExit for missing command.")
    except SystemExit as exc:
        assert exc.code == 2


def test_log_level_option_configures_root_logger(units_dir: Path, monkeypatch) -> None:
    levels: list[str] = []
    monkeypatch.setattr(main, "configure_logging", levels.append)
    code, _ = _run("--log-level", "debug", "check", str(units_dir))
    assert code == main.EXIT_OK
    assert levels == ["DEBUG"]


def test_configure_logging_sets_level() -> None:
    root = logging.getLogger()
    previous_level = root.level
    previous_handlers = root.handlers[:]
    try:
        main.configure_logging("info")
        assert root.level == logging.INFO
        main.configure_logging("not-a-level")
        assert root.level == logging.WARNING
    finally:
        for handler in root.handlers[:]:
            root.removeHandler(handler)
        for handler in previous_handlers:
            root.addHandler(handler)
        root.setLevel(previous_level)


def test_unreadable_directory_is_usage_error(units_dir: Path, monkeypatch) -> None:
    def iterdir(self: Path):
        raise PermissionError(13, "Permission denied", str(self))

    monkeypatch.setattr(Path, "iterdir", iterdir)
    code, outputs = _run("check", str(units_dir))
    assert code == main.EXIT_USAGE
    assert outputs[0].startswith("Cannot read unit directory:")
    assert "Permission denied" in outputs[0]


def test_unknown_log_level_is_usage_error(units_dir: Path) -> None:
    try:
        main.run(["--log-level", "loud", "check", str(units_dir)])
        raise AssertionError("Expected SystemExit for an unknown log level.")
    except SystemExit as exc:
        assert exc.code == 2


def test_unknown_log_level_from_environment_is_usage_error(units_dir: Path, monkeypatch) -> None:
    monkeypatch.setattr(main, "DEFAULT_LOG_LEVEL", "LOUD")
    try:
        main.run(["check", str(units_dir)])
        raise AssertionError("Expected SystemExit for an unknown environment log level.")
    except SystemExit as exc:
        assert exc.code == 2
