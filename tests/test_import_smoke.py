"""Smoke tests for package import, basic metadata and the CLI entry point."""

from __future__ import annotations

import sys

import pytest

import CursorCommander
import CursorCommander.__main__ as cli
import CursorCommander.platform.macos
from CursorCommander.history import HISTORY_FILENAME, CommandHistory


def test_package_imports() -> None:
    """Package import should work without the macOS frameworks installed."""
    assert CursorCommander is not None
    assert CursorCommander.platform.macos.OsaScriptRunner(timeout=1).timeout == 1


def test_package_version_present() -> None:
    """Package should expose a non-empty version string."""
    assert isinstance(CursorCommander.__version__, str)
    assert CursorCommander.__version__.strip() != ""


def test_cli_history_lists_saved_commands(_isolated_config_dir, monkeypatch, capsys) -> None:
    CommandHistory(_isolated_config_dir / HISTORY_FILENAME).record("explain this file")
    monkeypatch.setattr(sys, "argv", ["cursorcommander", "history"])

    with pytest.raises(SystemExit) as exc:
        cli.main()

    assert exc.value.code == 0
    assert "1. explain this file" in capsys.readouterr().out


def test_cli_history_clear(_isolated_config_dir, monkeypatch, capsys) -> None:
    path = _isolated_config_dir / HISTORY_FILENAME
    CommandHistory(path).record("x")
    monkeypatch.setattr(sys, "argv", ["cursorcommander", "history", "--clear"])

    with pytest.raises(SystemExit) as exc:
        cli.main()

    assert exc.value.code == 0
    assert not path.exists()


def test_cli_send_exit_code_follows_outcome(monkeypatch, capsys) -> None:
    from CursorCommander.models import DeliveryOutcome

    class _FakeApp:
        def __enter__(self):
            return self

        def __exit__(self, *exc):
            return None

        def refresh_permissions(self) -> None:
            return None

        def deliver(self, text: str) -> DeliveryOutcome:
            return DeliveryOutcome(False, f"refused: {text}", "permission_denied")

    monkeypatch.setattr(cli, "_build_app", lambda settings: _FakeApp())
    monkeypatch.setattr(sys, "argv", ["cursorcommander", "send", "run", "tests"])

    with pytest.raises(SystemExit) as exc:
        cli.main()

    assert exc.value.code == 1
    assert "refused: run tests" in capsys.readouterr().out
