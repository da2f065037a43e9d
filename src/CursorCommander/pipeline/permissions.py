"""Accessibility and System Events authorization checks."""

from __future__ import annotations

import logging
from collections.abc import Callable

from CursorCommander.errors import PlatformUnavailableError
from CursorCommander.platform.protocol import PermissionProvider, ScriptRunner
from CursorCommander.scheduler import Scheduler
from CursorCommander.state import READY, SessionState

logger = logging.getLogger(__name__)

ACCESSIBILITY_SETTINGS_URL = (
    "x-apple.systempreferences:com.apple.preference.security?Privacy_Accessibility"
)
SYSTEM_EVENTS_PROBE = 'tell application "System Events"\n    return 1\nend tell'

ACCESSIBILITY_REQUIRED = "Accessibility permissions required"
SYSTEM_EVENTS_REQUIRED = "System Events access required. Check permissions."

ACCESSIBILITY_GUIDANCE = (
    "Accessibility Permissions Required",
    "CursorCommander needs accessibility permissions to send commands to Cursor.\n\n"
    "1. In the Privacy & Security settings that just opened, unlock the pane to make changes.\n"
    "2. Check the box next to your terminal (or CursorCommander) in the list.\n"
    "3. Restart CursorCommander after granting permissions.",
)
SYSTEM_EVENTS_GUIDANCE = (
    "System Events Permissions Required",
    "CursorCommander needs permission to control System Events to send commands to Cursor.\n\n"
    "1. In the Privacy & Security settings that just opened, unlock the pane to make changes.\n"
    "2. Make sure your terminal (or CursorCommander) is checked in the list.\n"
    "3. If it is not listed, run CursorCommander again so macOS registers it.\n"
    "4. Restart CursorCommander after granting permissions.",
)

Notifier = Callable[[str, str], None]


def _log_notifier(title: str, body: str) -> None:
    logger.warning("%s\n%s", title, body)


class PermissionGate:
    """Queries the OS for both authorizations and publishes them to SessionState.

    It is the only writer of the authorization flags and the readiness
    message; the delivery status belongs to the orchestrator.
    """

    def __init__(
        self,
        state: SessionState,
        provider: PermissionProvider,
        scripts: ScriptRunner,
        scheduler: Scheduler,
        *,
        notifier: Notifier | None = None,
        recheck_delay: float = 1.0,
    ):
        self.state = state
        self.provider = provider
        self.scripts = scripts
        self.scheduler = scheduler
        self.notifier = notifier or _log_notifier
        self.recheck_delay = recheck_delay

    def check_input_synthesis_permission(self, prompt: bool = False) -> bool:
        try:
            allowed = bool(self.provider.is_process_trusted(prompt=prompt))
        except PlatformUnavailableError as e:
            logger.warning("Accessibility trust check unavailable: %s", e)
            allowed = False
        self.state.set_input_synthesis_allowed(allowed)
        if allowed:
            self.state.replace_readiness(("", ACCESSIBILITY_REQUIRED), READY)
        else:
            self.state.set_readiness(ACCESSIBILITY_REQUIRED)
        return allowed

    def check_ui_scripting_permission(self) -> bool:
        result = self.scripts.run(SYSTEM_EVENTS_PROBE)
        allowed = result.ok
        if not allowed:
            logger.info("System Events access test failed: %s", result.error)

        if self.state.set_ui_scripting_allowed(allowed):
            if allowed:
                self.state.replace_readiness((SYSTEM_EVENTS_REQUIRED,), READY)
            else:
                self.state.replace_readiness((READY, ""), SYSTEM_EVENTS_REQUIRED)
        return allowed

    def refresh(self) -> None:
        self.check_input_synthesis_permission()
        self.check_ui_scripting_permission()

    def request_input_synthesis_permission(self) -> None:
        self.provider.open_url(ACCESSIBILITY_SETTINGS_URL)
        self.notifier(*ACCESSIBILITY_GUIDANCE)
        self.scheduler.call_later(
            self.recheck_delay,
            self.check_input_synthesis_permission,
            name="accessibility-recheck",
        )

    def request_ui_scripting_permission(self) -> None:
        self.provider.open_url(ACCESSIBILITY_SETTINGS_URL)
        self.notifier(*SYSTEM_EVENTS_GUIDANCE)
        self.scheduler.call_later(
            self.recheck_delay,
            self.check_ui_scripting_permission,
            name="system-events-recheck",
        )
