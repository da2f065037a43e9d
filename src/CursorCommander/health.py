"""Environment diagnostics for ``cursorcommander doctor``.

Each check returns a HealthCheckResult and never raises; a check that blows
up is reported as critical with the exception text.
"""

from __future__ import annotations

import importlib.util
import logging
import platform
import shutil
from collections.abc import Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING

from CursorCommander.pipeline.permissions import ACCESSIBILITY_SETTINGS_URL

if TYPE_CHECKING:
    from CursorCommander.app import Commander

logger = logging.getLogger(__name__)

_PYOBJC_MODULES = {
    "Quartz": "pyobjc-framework-Quartz",
    "AppKit": "pyobjc-framework-Cocoa",
    "ApplicationServices": "pyobjc-framework-ApplicationServices",
}


@dataclass
class HealthCheckResult:
    name: str
    category: str
    status: str  # "ok" | "warning" | "critical"
    message: str
    fix_hint: str = ""


def check_platform() -> HealthCheckResult:
    system = platform.system()
    if system == "Darwin":
        return HealthCheckResult("macOS", "platform", "ok", f"macOS {platform.mac_ver()[0]}")
    return HealthCheckResult(
        "macOS",
        "platform",
        "critical",
        f"Running on {system}; commands can only be delivered on macOS",
        "Run CursorCommander on the Mac where Cursor is installed",
    )


def check_pyobjc() -> HealthCheckResult:
    missing = [pkg for mod, pkg in _PYOBJC_MODULES.items() if importlib.util.find_spec(mod) is None]
    if not missing:
        return HealthCheckResult("pyobjc", "platform", "ok", "Quartz, AppKit and ApplicationServices available")
    return HealthCheckResult(
        "pyobjc",
        "platform",
        "critical",
        f"Missing: {', '.join(missing)}",
        f"pip install {' '.join(missing)}",
    )


def check_osascript() -> HealthCheckResult:
    path = shutil.which("osascript")
    if path:
        return HealthCheckResult("osascript", "platform", "ok", path)
    return HealthCheckResult(
        "osascript",
        "platform",
        "warning",
        "osascript not found; the AppleScript strategies will fail",
        "osascript ships with macOS in /usr/bin",
    )


def check_accessibility(app: Commander) -> HealthCheckResult:
    if app.gate.check_input_synthesis_permission():
        return HealthCheckResult("Accessibility", "permissions", "ok", "Process is trusted")
    return HealthCheckResult(
        "Accessibility",
        "permissions",
        "critical",
        "Accessibility permission not granted",
        f"Run `cursorcommander permissions` or open {ACCESSIBILITY_SETTINGS_URL}",
    )


def check_system_events(app: Commander) -> HealthCheckResult:
    if app.gate.check_ui_scripting_permission():
        return HealthCheckResult("System Events", "permissions", "ok", "Scripting allowed")
    return HealthCheckResult(
        "System Events",
        "permissions",
        "warning",
        "System Events scripting denied; only synthetic events will work",
        "Allow your terminal to control System Events under Privacy & Security > Automation",
    )


def check_target_running(app: Commander) -> HealthCheckResult:
    name = app.target.name
    if app.refresh_running_state():
        return HealthCheckResult(name, "target", "ok", f"{name} is running")
    hint = "Run `cursorcommander launch`"
    if app.locator.find_install_path() is None:
        hint = f"Install {name} or check the target_install_paths setting"
    return HealthCheckResult(name, "target", "warning", f"{name} is not running", hint)


def _guarded(name: str, category: str, fn: Callable[[], HealthCheckResult]) -> HealthCheckResult:
    try:
        return fn()
    except Exception as e:
        logger.debug("Health check %s raised", name, exc_info=True)
        return HealthCheckResult(name, category, "critical", f"Check failed: {e}")


def run_health_checks(app: Commander) -> list[HealthCheckResult]:
    results = [
        _guarded("macOS", "platform", check_platform),
        _guarded("pyobjc", "platform", check_pyobjc),
        _guarded("osascript", "platform", check_osascript),
        _guarded("Accessibility", "permissions", lambda: check_accessibility(app)),
        _guarded("System Events", "permissions", lambda: check_system_events(app)),
        _guarded(app.target.name, "target", lambda: check_target_running(app)),
    ]
    return results


def overall_status(results: list[HealthCheckResult]) -> str:
    if any(r.status == "critical" for r in results):
        return "unhealthy"
    if any(r.status == "warning" for r in results):
        return "degraded"
    return "healthy"
