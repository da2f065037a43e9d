# pyright: reportMissingImports=false, reportMissingModuleSource=false
"""macOS implementations of the capability interfaces.

pyobjc frameworks are imported lazily inside each call so the package
imports (and its tests run) on machines without them.
"""

from __future__ import annotations

import logging
import os
import subprocess
from typing import Any

from CursorCommander.errors import InputInjectionError, PlatformUnavailableError
from CursorCommander.models import (
    Point,
    ScreenRegion,
    TargetProcessHandle,
    WindowInfo,
)
from CursorCommander.platform.protocol import ScriptResult

logger = logging.getLogger(__name__)

_FALLBACK_SCREEN = ScreenRegion(0, 0, 1440, 900)


def _run_command(args: list[str], timeout: float = 15) -> tuple[bool, str]:
    try:
        proc = subprocess.run(args, capture_output=True, text=True, timeout=timeout)
    except subprocess.TimeoutExpired:
        return False, f"{args[0]} timed out after {timeout:g}s"
    except OSError as e:
        return False, str(e)

    out = (proc.stdout or "").strip()
    err = (proc.stderr or "").strip()
    if proc.returncode == 0:
        return True, out
    if err:
        return False, err
    if out:
        return False, out
    return False, f"{args[0]} exited with code {proc.returncode}"


def _handle_from_app(app: Any) -> TargetProcessHandle:
    bundle_id = app.bundleIdentifier()
    return TargetProcessHandle(
        pid=int(app.processIdentifier()),
        name=str(app.localizedName() or ""),
        bundle_id=str(bundle_id) if bundle_id else None,
    )


class MacPermissionProvider:
    def is_process_trusted(self, prompt: bool = False) -> bool:
        try:
            from ApplicationServices import (
                AXIsProcessTrustedWithOptions,
                kAXTrustedCheckOptionPrompt,
            )
        except ImportError as e:
            raise PlatformUnavailableError(f"ApplicationServices unavailable: {e}") from e
        return bool(AXIsProcessTrustedWithOptions({kAXTrustedCheckOptionPrompt: bool(prompt)}))

    def open_url(self, url: str) -> bool:
        ok, output = _run_command(["open", url], timeout=10)
        if not ok:
            logger.warning("Could not open %s: %s", url, output)
        return ok


class MacProcessDirectory:
    def _workspace(self) -> Any:
        try:
            from AppKit import NSWorkspace
        except ImportError as e:
            raise PlatformUnavailableError(f"AppKit unavailable: {e}") from e
        return NSWorkspace.sharedWorkspace()

    def running_applications(self) -> list[TargetProcessHandle]:
        handles = []
        for app in self._workspace().runningApplications():
            if app.isTerminated():
                continue
            handles.append(_handle_from_app(app))
        return handles

    def frontmost_application(self) -> TargetProcessHandle | None:
        app = self._workspace().frontmostApplication()
        if app is None:
            return None
        return _handle_from_app(app)

    def activate(self, handle: TargetProcessHandle) -> bool:
        try:
            from AppKit import NSApplicationActivateIgnoringOtherApps, NSRunningApplication
        except ImportError as e:
            raise PlatformUnavailableError(f"AppKit unavailable: {e}") from e
        app = NSRunningApplication.runningApplicationWithProcessIdentifier_(handle.pid)
        if app is None:
            return False
        return bool(app.activateWithOptions_(NSApplicationActivateIgnoringOtherApps))

    def is_alive(self, handle: TargetProcessHandle) -> bool:
        import psutil

        try:
            return psutil.Process(handle.pid).is_running()
        except (psutil.NoSuchProcess, psutil.AccessDenied):
            return psutil.pid_exists(handle.pid)

    def on_screen_windows(self) -> list[WindowInfo]:
        try:
            from Quartz import (
                CGWindowListCopyWindowInfo,
                kCGNullWindowID,
                kCGWindowListOptionOnScreenOnly,
            )
        except ImportError as e:
            raise PlatformUnavailableError(f"Quartz unavailable: {e}") from e

        windows: list[WindowInfo] = []
        for win in CGWindowListCopyWindowInfo(kCGWindowListOptionOnScreenOnly, kCGNullWindowID) or []:
            bounds = win.get("kCGWindowBounds")
            pid = win.get("kCGWindowOwnerPID")
            if not bounds or pid is None:
                continue
            try:
                region = ScreenRegion(
                    x=float(bounds["X"]),
                    y=float(bounds["Y"]),
                    width=float(bounds["Width"]),
                    height=float(bounds["Height"]),
                )
            except (KeyError, TypeError, ValueError):
                continue
            windows.append(
                WindowInfo(owner_pid=int(pid), region=region, title=str(win.get("kCGWindowName") or ""))
            )
        return windows

    def main_screen_region(self) -> ScreenRegion:
        try:
            from AppKit import NSScreen
        except ImportError:
            return _FALLBACK_SCREEN
        screen = NSScreen.mainScreen()
        if screen is None:
            return _FALLBACK_SCREEN
        frame = screen.frame()
        return ScreenRegion(
            x=float(frame.origin.x),
            y=float(frame.origin.y),
            width=float(frame.size.width),
            height=float(frame.size.height),
        )

    def spotlight_search(self, query: str) -> list[str]:
        ok, output = _run_command(["/usr/bin/mdfind", query], timeout=10)
        if not ok:
            logger.debug("mdfind failed: %s", output)
            return []
        return [line for line in output.splitlines() if line.strip()]

    def path_exists(self, path: str) -> bool:
        return os.path.exists(os.path.expanduser(path))

    def launch_path(self, path: str) -> bool:
        ok, output = _run_command(["open", "-a", os.path.expanduser(path)], timeout=10)
        if not ok:
            logger.warning("Failed to launch %s: %s", path, output)
        return ok

    def open_url(self, url: str) -> bool:
        ok, output = _run_command(["open", url], timeout=10)
        if not ok:
            logger.warning("Failed to open %s: %s", url, output)
        return ok


class OsaScriptRunner:
    """Runs AppleScript through ``osascript`` with a hard timeout."""

    def __init__(self, timeout: float = 15.0):
        self.timeout = timeout

    def run(self, source: str) -> ScriptResult:
        ok, output = _run_command(["osascript", "-e", source], timeout=self.timeout)
        if ok:
            return ScriptResult(ok=True, output=output)
        return ScriptResult(ok=False, error=output)


class QuartzInputInjector:
    """Posts synthetic events into the HID event tap."""

    def post_key(self, key_code: int, key_down: bool, flags: int = 0) -> None:
        try:
            from Quartz import (
                CGEventCreateKeyboardEvent,
                CGEventPost,
                CGEventSetFlags,
                kCGHIDEventTap,
            )
        except ImportError as e:
            raise PlatformUnavailableError(f"Quartz unavailable: {e}") from e

        event = CGEventCreateKeyboardEvent(None, key_code, key_down)
        if event is None:
            raise InputInjectionError(f"could not create key event for code {key_code:#x}")
        if flags:
            CGEventSetFlags(event, flags)
        CGEventPost(kCGHIDEventTap, event)

    def post_mouse(self, point: Point, button_down: bool) -> None:
        try:
            from Quartz import (
                CGEventCreateMouseEvent,
                CGEventPost,
                CGPointMake,
                kCGEventLeftMouseDown,
                kCGEventLeftMouseUp,
                kCGHIDEventTap,
                kCGMouseButtonLeft,
            )
        except ImportError as e:
            raise PlatformUnavailableError(f"Quartz unavailable: {e}") from e

        kind = kCGEventLeftMouseDown if button_down else kCGEventLeftMouseUp
        event = CGEventCreateMouseEvent(None, kind, CGPointMake(point.x, point.y), kCGMouseButtonLeft)
        if event is None:
            raise InputInjectionError(f"could not create mouse event at ({point.x}, {point.y})")
        CGEventPost(kCGHIDEventTap, event)
