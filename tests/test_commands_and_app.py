"""Prompt commands, the wired Commander, settings and health checks."""

from __future__ import annotations

import json

import pytest

from conftest import TERMINAL, no_sleep
from CursorCommander.app import Commander
from CursorCommander.commands import CommandHandler
from CursorCommander.config import Settings, get_config_dir, get_settings
from CursorCommander.health import overall_status, run_health_checks
from CursorCommander.history import HISTORY_FILENAME, CommandHistory


@pytest.fixture
def app(tmp_path, permissions, processes, scripts, injector, scheduler) -> Commander:
    return Commander(
        Settings(),
        permissions=permissions,
        processes=processes,
        scripts=scripts,
        injector=injector,
        history=CommandHistory(tmp_path / HISTORY_FILENAME),
        scheduler=scheduler,
        sleep=no_sleep,
    )


def test_commander_delivers_and_records_history(app: Commander) -> None:
    app.refresh_permissions()

    outcome = app.deliver("write a test")

    assert outcome.succeeded is True
    assert outcome.strategy_results[0].name == "synthetic_events"
    assert app.history.as_list() == ["write a test"]


def test_poll_ticks_keep_the_delivery_outcome(app: Commander, processes, permissions) -> None:
    app.refresh_permissions()
    app.deliver("hello")
    writes = []
    app.state.subscribe(lambda key, value: writes.append(key))

    processes.apps = [TERMINAL]
    app.refresh_running_state()
    permissions.trusted = False
    app.refresh_permissions()

    assert app.state.status_message == "Command sent: hello"
    assert "status_message" not in writes
    assert app.state.target_message == "Cursor is not running"
    assert app.state.readiness_message == "Accessibility permissions required"


def test_commander_strategy_rank_order(app: Commander) -> None:
    assert [s.name for s in app.strategies] == ["synthetic_events", "direct_script", "system_events"]


def test_start_polling_registers_both_pollers_once(app: Commander, scheduler) -> None:
    app.start_polling()
    app.start_polling()

    assert [name for _i, _fn, name in scheduler.periodic] == ["permission-poll", "running-poll"]
    app.stop()
    assert scheduler.shut_down is True


def test_is_command_accepts_slash_and_bang(app: Commander) -> None:
    handler = CommandHandler(app)

    assert handler.is_command("/status")
    assert handler.is_command("!HISTORY")
    assert not handler.is_command("/unknown")
    assert not handler.is_command("fix the /status endpoint")


@pytest.mark.asyncio
async def test_non_command_returns_none(app: Commander) -> None:
    assert await CommandHandler(app).handle("refactor utils.py") is None


@pytest.mark.asyncio
async def test_status_command_reports_state(app: Commander, processes) -> None:
    processes.apps = [TERMINAL]

    reply = await CommandHandler(app).handle("/status")

    assert "Accessibility: yes" in reply
    assert "Cursor running: no" in reply
    assert "Readiness: Cursor is not running" in reply
    assert "Last result: -" in reply


@pytest.mark.asyncio
async def test_history_and_resend(app: Commander) -> None:
    app.refresh_permissions()
    app.deliver("first")
    app.deliver("second")
    handler = CommandHandler(app)

    listing = await handler.handle("/history")
    assert "1. second" in listing and "2. first" in listing

    reply = await handler.handle("!resend 2")
    assert reply == "Command sent: first"
    assert app.history.as_list() == ["first", "second"]

    assert await handler.handle("/resend 9") == "No command #9 in history."
    assert (await handler.handle("/resend")).startswith("Usage")


@pytest.mark.asyncio
async def test_clear_command_empties_history(app: Commander) -> None:
    app.history.record("x")

    assert await CommandHandler(app).handle("/clear") == "History cleared."
    assert await CommandHandler(app).handle("/history") == "No recent commands."


@pytest.mark.asyncio
async def test_launch_command_failure_message(app: Commander, processes) -> None:
    processes.url_result = False

    reply = await CommandHandler(app).handle("/launch")

    assert reply == "Error: Could not find or launch Cursor application"


@pytest.mark.asyncio
async def test_help_lists_commands(app: Commander) -> None:
    reply = await CommandHandler(app).handle("/help")
    for cmd in ("/status", "/launch", "/permissions", "/history", "/resend", "/clear"):
        assert cmd in reply


def test_settings_env_override(monkeypatch) -> None:
    monkeypatch.setenv("CURSORCOMMANDER_TARGET_NAME", "Cursor Nightly")
    monkeypatch.setenv("CURSORCOMMANDER_ACTIVATION_DELAY", "1.5")

    settings = get_settings(force_reload=True)

    assert settings.target().name == "Cursor Nightly"
    assert settings.timings().activation_delay == 1.5


def test_settings_read_config_file(_isolated_config_dir) -> None:
    _isolated_config_dir.mkdir(parents=True)
    (_isolated_config_dir / "config.json").write_text(
        json.dumps({"composer_bottom_offset": 45, "history_size": 5}), encoding="utf-8"
    )

    settings = get_settings(force_reload=True)

    assert get_config_dir() == _isolated_config_dir
    assert settings.composer_bottom_offset == 45
    assert settings.history_size == 5


def test_health_checks_report_permissions_and_target(app: Commander, permissions, processes) -> None:
    permissions.trusted = False
    processes.apps = [TERMINAL]

    results = {r.name: r for r in run_health_checks(app)}

    assert results["Accessibility"].status == "critical"
    assert results["System Events"].status == "ok"
    assert results["Cursor"].status == "warning"
    assert overall_status(list(results.values())) == "unhealthy"
