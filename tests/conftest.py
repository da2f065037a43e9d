from __future__ import annotations

from collections.abc import Callable
from pathlib import Path
from typing import Any

import pytest

from CursorCommander.config import get_settings
from CursorCommander.models import Point, ScreenRegion, TargetProcessHandle, WindowInfo
from CursorCommander.platform.protocol import ScriptResult

CURSOR = TargetProcessHandle(pid=4242, name="Cursor", bundle_id="io.cursor.Cursor")
TERMINAL = TargetProcessHandle(pid=100, name="Terminal", bundle_id="com.apple.Terminal")


class FakePermissions:
    def __init__(self, log: list, trusted: bool = True):
        self.log = log
        self.trusted = trusted
        self.opened: list[str] = []

    def is_process_trusted(self, prompt: bool = False) -> bool:
        self.log.append(("trust_check", prompt))
        return self.trusted

    def open_url(self, url: str) -> bool:
        self.opened.append(url)
        return True


class FakeProcesses:
    def __init__(self, log: list):
        self.log = log
        self.apps: list[TargetProcessHandle] = [TERMINAL, CURSOR]
        self.frontmost: TargetProcessHandle | None = TERMINAL
        self.activate_result = True
        self.alive = True
        self.windows: list[WindowInfo] = [
            WindowInfo(owner_pid=CURSOR.pid, region=ScreenRegion(100, 50, 1200, 800))
        ]
        self.screen = ScreenRegion(0, 0, 1440, 900)
        self.spotlight_hits: list[str] = []
        self.existing_paths: set[str] = set()
        self.launch_result = True
        self.url_result = True

    def running_applications(self) -> list[TargetProcessHandle]:
        self.log.append(("enumerate",))
        return list(self.apps)

    def frontmost_application(self) -> TargetProcessHandle | None:
        self.log.append(("frontmost",))
        return self.frontmost

    def activate(self, handle: TargetProcessHandle) -> bool:
        self.log.append(("activate", handle.name))
        return self.activate_result

    def is_alive(self, handle: TargetProcessHandle) -> bool:
        return self.alive

    def on_screen_windows(self) -> list[WindowInfo]:
        return list(self.windows)

    def main_screen_region(self) -> ScreenRegion:
        return self.screen

    def spotlight_search(self, query: str) -> list[str]:
        self.log.append(("spotlight", query))
        return list(self.spotlight_hits)

    def path_exists(self, path: str) -> bool:
        return path in self.existing_paths

    def launch_path(self, path: str) -> bool:
        self.log.append(("launch_path", path))
        return self.launch_result

    def open_url(self, url: str) -> bool:
        self.log.append(("open_url", url))
        return self.url_result


class FakeScripts:
    """Answers every script with ``default`` unless a queued result is waiting."""

    def __init__(self, log: list, default: bool = True):
        self.log = log
        self.default = default
        self.queued: list[ScriptResult] = []
        self.sources: list[str] = []

    def run(self, source: str) -> ScriptResult:
        self.sources.append(source)
        self.log.append(("script",))
        if self.queued:
            return self.queued.pop(0)
        if self.default:
            return ScriptResult(ok=True, output="1")
        return ScriptResult(ok=False, error="execution error: not allowed (-1743)")


class FakeInjector:
    def __init__(self, log: list):
        self.log = log
        self.error: Exception | None = None

    def post_key(self, key_code: int, key_down: bool, flags: int = 0) -> None:
        if self.error is not None:
            raise self.error
        self.log.append(("key", key_code, key_down, flags))

    def post_mouse(self, point: Point, button_down: bool) -> None:
        if self.error is not None:
            raise self.error
        self.log.append(("mouse", point, button_down))


class ManualScheduler:
    """Collects delayed calls instead of starting threads."""

    def __init__(self):
        self.delayed: list[tuple[float, Callable[[], Any], str]] = []
        self.periodic: list[tuple[float, Callable[[], Any], str]] = []
        self.shut_down = False

    def call_later(self, delay: float, fn: Callable[[], Any], *, name: str = "delayed"):
        self.delayed.append((delay, fn, name))

    def every(self, interval: float, fn: Callable[[], Any], *, name: str = "periodic"):
        self.periodic.append((interval, fn, name))

    def run_delayed(self) -> None:
        pending, self.delayed = self.delayed, []
        for _delay, fn, _name in pending:
            fn()

    def shutdown(self) -> None:
        self.shut_down = True


def no_sleep(_seconds: float) -> None:
    return None


@pytest.fixture(autouse=True)
def _isolated_config_dir(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    config_dir = tmp_path / "config"
    monkeypatch.setenv("CURSORCOMMANDER_CONFIG_DIR", str(config_dir))
    get_settings(force_reload=True)
    yield config_dir
    get_settings(force_reload=True)


@pytest.fixture
def log() -> list:
    return []


@pytest.fixture
def permissions(log) -> FakePermissions:
    return FakePermissions(log)


@pytest.fixture
def processes(log) -> FakeProcesses:
    return FakeProcesses(log)


@pytest.fixture
def scripts(log) -> FakeScripts:
    return FakeScripts(log)


@pytest.fixture
def injector(log) -> FakeInjector:
    return FakeInjector(log)


@pytest.fixture
def scheduler() -> ManualScheduler:
    return ManualScheduler()
