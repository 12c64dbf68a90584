"""Tests for the debug-log read and clear abilities."""

from __future__ import annotations

from pathlib import Path

import pytest

from wp_abilities.abilities import build_default_registry
from wp_abilities.abilities.debug_log import ReadLogInput
from wp_abilities.abilities.dispatch import AbilityDispatcher
from wp_abilities.abilities.types import Principal
from wp_abilities.config import Settings
from wp_abilities.logfile import LogReadError


@pytest.fixture()
def dispatcher(settings: Settings) -> AbilityDispatcher:
    return AbilityDispatcher(build_default_registry(), settings)


def _log_path(settings: Settings) -> Path:
    return settings.wp_root / "wp-content" / "debug.log"


def test_read_log_returns_tail(
    dispatcher: AbilityDispatcher, settings: Settings, admin: Principal
) -> None:
    _log_path(settings).write_text("one\ntwo\nthree\n")

    payload = dispatcher.dispatch("debug-log/read-log", {"lines": 2}, admin)

    data = payload["data"]
    assert data == {
        "success": True,
        "content": "two\nthree\n",
        "file_size": 14,
        "file_path": str(_log_path(settings)),
        "lines_returned": 2,
    }


def test_read_log_defaults_to_100_lines(
    dispatcher: AbilityDispatcher, settings: Settings, admin: Principal
) -> None:
    _log_path(settings).write_text("".join(f"{i}\n" for i in range(150)))

    data = dispatcher.dispatch("debug-log/read-log", {}, admin)["data"]

    assert data["lines_returned"] == 100
    assert data["content"].startswith("50\n")


def test_read_log_empty_file(
    dispatcher: AbilityDispatcher, settings: Settings, admin: Principal
) -> None:
    _log_path(settings).write_text("")

    data = dispatcher.dispatch("debug-log/read-log", {}, admin)["data"]

    assert data["success"] is True
    assert data["content"] == ""
    assert data["file_size"] == 0
    assert data["lines_returned"] == 0


def test_read_log_missing_file_is_structured_failure(
    dispatcher: AbilityDispatcher, settings: Settings, admin: Principal
) -> None:
    payload = dispatcher.dispatch("debug-log/read-log", {}, admin)

    assert payload["type"] == "debug-log/read-log"
    assert payload["data"]["success"] is False
    assert payload["data"]["error"] == (
        f"Debug log file does not exist at: {_log_path(settings)}"
    )


def test_read_log_read_failure_is_reported(
    dispatcher: AbilityDispatcher,
    settings: Settings,
    admin: Principal,
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    _log_path(settings).write_text("x\n")

    def _fail(path: Path, max_lines: int, **_kwargs: object) -> None:
        raise LogReadError(path, "disk went away")

    monkeypatch.setattr("wp_abilities.abilities.debug_log.tail_file", _fail)

    data = dispatcher.dispatch("debug-log/read-log", {}, admin)["data"]

    assert data["success"] is False
    assert data["error"] == "Failed to read debug log: disk went away"


def test_read_log_honours_debug_log_override(admin: Principal, tmp_path: Path) -> None:
    custom = tmp_path / "logs" / "php-errors.log"
    custom.parent.mkdir()
    custom.write_text("custom\n")
    settings = Settings(wp_root=tmp_path, debug_log=custom)
    dispatcher = AbilityDispatcher(build_default_registry(), settings)

    data = dispatcher.dispatch("debug-log/read-log", {"lines": 5}, admin)["data"]

    assert data["file_path"] == str(custom)
    assert data["content"] == "custom\n"


def test_read_log_requires_manage_options(
    dispatcher: AbilityDispatcher, subscriber: Principal
) -> None:
    payload = dispatcher.dispatch("debug-log/read-log", {}, subscriber)

    assert payload["type"] == "error.permission_denied"


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        (0, 1),
        (-5, 1),
        (1, 1),
        (250, 250),
        (1000, 1000),
        (5000, 1000),
        (10**400, 1000),
        (-(10**400), 1),
        (12.9, 12),
        (float("inf"), 1000),
        (float("-inf"), 1),
        ("20", 20),
        ("1e3", 1000),
        ("1" * 400, 1000),
        ("12abc", 12),
        ("lots", 1),
        ("", 1),
        (None, 100),
    ],
)
def test_line_count_is_clamped(raw: object, expected: int) -> None:
    assert ReadLogInput.model_validate({"lines": raw}).lines == expected


def test_huge_line_count_reads_at_most_max_lines(
    dispatcher: AbilityDispatcher, admin: Principal, settings: Settings
) -> None:
    _log_path(settings).write_text("".join(f"line {i}\n" for i in range(1500)))

    payload = dispatcher.dispatch("debug-log/read-log", {"lines": 10**400}, admin)

    assert payload["data"]["success"] is True
    assert payload["data"]["lines_returned"] == 1000
    assert payload["data"]["content"].startswith("line 500\n")


def test_non_scalar_line_count_is_invalid(
    dispatcher: AbilityDispatcher, admin: Principal
) -> None:
    payload = dispatcher.dispatch("debug-log/read-log", {"lines": [5]}, admin)

    assert payload["type"] == "error.invalid_input"


def test_clear_log_truncates_and_reports_previous_size(
    dispatcher: AbilityDispatcher, settings: Settings, admin: Principal
) -> None:
    log_path = _log_path(settings)
    log_path.write_text("PHP Warning: something\n")

    data = dispatcher.dispatch("debug-log/clear-log", {}, admin)["data"]

    assert data == {"success": True, "file_path": str(log_path), "previous_size": 23}
    assert log_path.read_text() == ""
    after = dispatcher.dispatch("debug-log/read-log", {}, admin)["data"]
    assert after["file_size"] == 0


def test_clear_log_missing_file(
    dispatcher: AbilityDispatcher, settings: Settings, admin: Principal
) -> None:
    data = dispatcher.dispatch("debug-log/clear-log", {}, admin)["data"]

    assert data["success"] is False
    assert "does not exist" in data["error"]
