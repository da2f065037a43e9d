"""Session state shared between the pipeline and whatever front end owns it.

Each field has a single writer. The permission gate owns the authorization
flags and ``readiness_message``; the target locator owns ``target_running``
and ``target_message``; the orchestrator owns ``status_message`` and the
pending command. Pollers therefore never overwrite a delivery outcome.
Writes that do not change a value are dropped so two pollers that briefly
disagree cannot ping-pong listeners.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

logger = logging.getLogger(__name__)

StateListener = Callable[[str, Any], None]

READY = "Ready"


@dataclass(frozen=True)
class AuthorizationState:
    input_synthesis_allowed: bool = False
    ui_scripting_allowed: bool = False


class SessionState:
    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._values: dict[str, Any] = {
            "input_synthesis_allowed": False,
            "ui_scripting_allowed": False,
            "readiness_message": "",
            "target_running": False,
            "target_message": "",
            "status_message": "",
            "pending_command": "",
        }
        self._listeners: list[StateListener] = []

    def subscribe(self, listener: StateListener) -> Callable[[], None]:
        """Register a change listener; returns an unsubscribe callable."""
        with self._lock:
            self._listeners.append(listener)

        def _unsubscribe() -> None:
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return _unsubscribe

    def _notify(self, key: str, value: Any, listeners: list[StateListener]) -> None:
        for listener in listeners:
            try:
                listener(key, value)
            except Exception:
                logger.exception("State listener failed for %s", key)

    def _set(self, key: str, value: Any) -> bool:
        with self._lock:
            if self._values[key] == value:
                return False
            self._values[key] = value
            listeners = list(self._listeners)
        self._notify(key, value, listeners)
        return True

    def _replace(self, key: str, expected: tuple[Any, ...], value: Any) -> bool:
        # Compare and write under one lock so a concurrent _set is never clobbered.
        with self._lock:
            current = self._values[key]
            if current not in expected or current == value:
                return False
            self._values[key] = value
            listeners = list(self._listeners)
        self._notify(key, value, listeners)
        return True

    def _get(self, key: str) -> Any:
        with self._lock:
            return self._values[key]

    @property
    def authorization(self) -> AuthorizationState:
        with self._lock:
            return AuthorizationState(
                input_synthesis_allowed=self._values["input_synthesis_allowed"],
                ui_scripting_allowed=self._values["ui_scripting_allowed"],
            )

    @property
    def input_synthesis_allowed(self) -> bool:
        return self._get("input_synthesis_allowed")

    def set_input_synthesis_allowed(self, value: bool) -> bool:
        return self._set("input_synthesis_allowed", bool(value))

    @property
    def ui_scripting_allowed(self) -> bool:
        return self._get("ui_scripting_allowed")

    def set_ui_scripting_allowed(self, value: bool) -> bool:
        return self._set("ui_scripting_allowed", bool(value))

    @property
    def readiness_message(self) -> str:
        return self._get("readiness_message")

    def set_readiness(self, message: str) -> bool:
        return self._set("readiness_message", message)

    def replace_readiness(self, expected: tuple[str, ...], message: str) -> bool:
        """Set the readiness message only if it currently equals one of ``expected``."""
        return self._replace("readiness_message", expected, message)

    @property
    def target_running(self) -> bool:
        return self._get("target_running")

    def set_target_running(self, value: bool) -> bool:
        return self._set("target_running", bool(value))

    @property
    def target_message(self) -> str:
        return self._get("target_message")

    def set_target_message(self, message: str) -> bool:
        return self._set("target_message", message)

    @property
    def status_message(self) -> str:
        return self._get("status_message")

    def set_status(self, message: str) -> bool:
        return self._set("status_message", message)

    @property
    def pending_command(self) -> str:
        return self._get("pending_command")

    def set_pending_command(self, text: str) -> bool:
        return self._set("pending_command", text)

    def snapshot(self) -> dict[str, Any]:
        with self._lock:
            return dict(self._values)
