import unitcheck.__main__ as module_main
import unitcheck.main as main


def test_module_entrypoint_calls_main_entry(monkeypatch) -> None:
    called = {"value": 0}
    monkeypatch.setattr(module_main, "main_entry", lambda: called.__setitem__("value", 1))
    module_main.main()
    assert called["value"] == 1


def test_main_entry_exits_with_run_code(monkeypatch) -> None:
    monkeypatch.setattr(main, "run", lambda: 1)
    try:
        main.main_entry()
        raise AssertionError("Expected SystemExit from main_entry.")
    except SystemExit as exc:
        assert exc.code == 1
