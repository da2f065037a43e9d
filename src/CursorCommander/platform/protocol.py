"""Capability interfaces the pipeline uses to talk to the OS.

Each interface is deliberately narrow so tests can hand in small fakes
instead of driving a live desktop session.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol, runtime_checkable

from CursorCommander.models import (
    Point,
    ScreenRegion,
    TargetProcessHandle,
    WindowInfo,
)

# Quartz virtual key codes (US layout) used outside the character table.
KEY_RETURN = 0x24
KEY_DELETE = 0x33
KEY_SHIFT = 0x38
KEY_COMMAND = 0x37
KEY_K = 0x28
KEY_J = 0x26

# CGEventFlags bits.
FLAG_SHIFT = 1 << 17
FLAG_COMMAND = 1 << 20


@dataclass(frozen=True)
class ScriptResult:
    ok: bool
    output: str = ""
    error: str = ""


@runtime_checkable
class PermissionProvider(Protocol):
    def is_process_trusted(self, prompt: bool = False) -> bool:
        """Return whether this process may synthesize input and read UI state."""
        ...

    def open_url(self, url: str) -> bool: ...


@runtime_checkable
class ProcessDirectory(Protocol):
    def running_applications(self) -> list[TargetProcessHandle]: ...

    def frontmost_application(self) -> TargetProcessHandle | None: ...

    def activate(self, handle: TargetProcessHandle) -> bool: ...

    def is_alive(self, handle: TargetProcessHandle) -> bool: ...

    def on_screen_windows(self) -> list[WindowInfo]: ...

    def main_screen_region(self) -> ScreenRegion: ...

    def spotlight_search(self, query: str) -> list[str]: ...

    def path_exists(self, path: str) -> bool: ...

    def launch_path(self, path: str) -> bool: ...

    def open_url(self, url: str) -> bool: ...


@runtime_checkable
class ScriptRunner(Protocol):
    def run(self, source: str) -> ScriptResult:
        """Execute an AppleScript body; never raises for script errors."""
        ...


@runtime_checkable
class InputInjector(Protocol):
    def post_key(self, key_code: int, key_down: bool, flags: int = 0) -> None: ...

    def post_mouse(self, point: Point, button_down: bool) -> None: ...
