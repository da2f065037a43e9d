"""The command-delivery pipeline.

One call to ``deliver`` walks: precondition check, locate target, capture the
focused app, activate the target, open the chat panel, try each strategy in
rank order, restore focus. Each call produces exactly one DeliveryOutcome and
nothing is retried automatically.
"""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Callable, Sequence

from CursorCommander.errors import CommanderError
from CursorCommander.models import (
    DeliveryOutcome,
    DeliveryRequest,
    DeliveryState,
    ErrorCode,
    StrategyResult,
    TargetProcessHandle,
    Timings,
)
from CursorCommander.pipeline.locator import TargetLocator
from CursorCommander.pipeline.panel import PanelOpener
from CursorCommander.pipeline.permissions import PermissionGate
from CursorCommander.pipeline.strategies import DeliveryStrategy
from CursorCommander.platform.protocol import ProcessDirectory
from CursorCommander.state import SessionState

logger = logging.getLogger(__name__)

HistorySink = Callable[[str], None]

PERMISSION_REQUIRED = "Please enable accessibility permissions in System Preferences"
SEND_FAILED = "Failed to send command. Check permissions and try again."
EMPTY_INPUT = "Nothing to send: the command is empty."
BUSY = "Another command is still being sent."

_STRATEGY_STATES = (DeliveryState.STRATEGY_1, DeliveryState.STRATEGY_2, DeliveryState.STRATEGY_3)


class DeliveryOrchestrator:
    """Owns the status message and pending command in SessionState."""

    def __init__(
        self,
        state: SessionState,
        gate: PermissionGate,
        locator: TargetLocator,
        processes: ProcessDirectory,
        panel: PanelOpener,
        strategies: Sequence[DeliveryStrategy],
        timings: Timings,
        *,
        history_sink: HistorySink | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        if not strategies:
            raise ValueError("at least one delivery strategy is required")
        self.state = state
        self.gate = gate
        self.locator = locator
        self.processes = processes
        self.panel = panel
        self.strategies = tuple(strategies)
        self.timings = timings
        self.history_sink = history_sink
        self.sleep = sleep
        self.current_state = DeliveryState.IDLE
        # Focus capture and restore must not interleave between deliveries.
        self._busy = threading.Lock()

    @property
    def target_name(self) -> str:
        return self.locator.target.name

    def _transition(self, new_state: DeliveryState) -> None:
        logger.debug("delivery: %s -> %s", self.current_state.value, new_state.value)
        self.current_state = new_state

    def _finish(self, outcome: DeliveryOutcome) -> DeliveryOutcome:
        self._transition(DeliveryState.DONE)
        self.state.set_status(outcome.status_message)
        self.current_state = DeliveryState.IDLE
        return outcome

    def deliver(self, text: str) -> DeliveryOutcome:
        if not text:
            return DeliveryOutcome(False, EMPTY_INPUT, ErrorCode.EMPTY_INPUT)

        if not self._busy.acquire(blocking=False):
            logger.warning("Delivery rejected, another one is in flight")
            return DeliveryOutcome(False, BUSY, ErrorCode.BUSY)
        try:
            return self._run(DeliveryRequest(text=text))
        finally:
            self._busy.release()

    def _run(self, request: DeliveryRequest) -> DeliveryOutcome:
        self.state.set_pending_command(request.text)

        self._transition(DeliveryState.PRECONDITION_CHECK)
        if not self.state.authorization.input_synthesis_allowed:
            self.gate.check_input_synthesis_permission()
            return self._finish(
                DeliveryOutcome(False, PERMISSION_REQUIRED, ErrorCode.PERMISSION_DENIED)
            )

        self._transition(DeliveryState.LOCATING)
        if not self.locator.is_target_running():
            return self._finish(
                DeliveryOutcome(
                    False,
                    f"Error: {self.target_name} application is not running. "
                    f"Please start {self.target_name} first.",
                    ErrorCode.TARGET_NOT_RUNNING,
                )
            )
        handle = self.locator.resolve()
        if handle is None:
            return self._finish(
                DeliveryOutcome(
                    False,
                    f"{self.target_name} application not found. Try restarting {self.target_name}.",
                    ErrorCode.TARGET_NOT_FOUND,
                )
            )
        logger.info("Sending command to %s (pid %s): %r", handle.name, handle.pid, request.text)

        if self.history_sink is not None:
            try:
                self.history_sink(request.text)
            except Exception:
                logger.exception("History sink failed")

        previous = self._capture_focus()
        try:
            outcome = self._deliver_to(handle, request)
        finally:
            self._transition(DeliveryState.RESTORING)
            self.sleep(self.timings.restore_delay)
            self._restore_focus(previous)

        if outcome.succeeded:
            self.state.set_pending_command("")
        return self._finish(outcome)

    def _deliver_to(self, handle: TargetProcessHandle, request: DeliveryRequest) -> DeliveryOutcome:
        try:
            activated = self.processes.activate(handle)
        except CommanderError as e:
            logger.warning("Activation failed: %s", e)
            activated = False
        if not activated:
            return DeliveryOutcome(
                False,
                f"Failed to activate {self.target_name} application",
                ErrorCode.ACTIVATION_FAILED,
            )
        self.sleep(self.timings.activation_delay)

        self._transition(DeliveryState.OPENING_PANEL)
        try:
            self.panel.open_input_panel(handle)
        except Exception:
            logger.exception("[%s] opening the chat panel raised", ErrorCode.PANEL_OPEN_UNCERTAIN)

        results: list[StrategyResult] = []
        succeeded = False
        for index, strategy in enumerate(self.strategies):
            self._transition(_STRATEGY_STATES[min(index, len(_STRATEGY_STATES) - 1)])
            try:
                succeeded = bool(strategy.deliver(request.text, handle))
            except Exception:
                logger.exception("Strategy %s raised", strategy.name)
                succeeded = False
            results.append(StrategyResult(strategy.name, attempted=True, succeeded=succeeded))
            if succeeded:
                logger.info("Command delivered via %s", strategy.name)
                break
            logger.info("Strategy %s failed", strategy.name)

        for strategy in self.strategies[len(results):]:
            results.append(StrategyResult(strategy.name))

        if succeeded:
            return DeliveryOutcome(
                True, f"Command sent: {request.text}", strategy_results=tuple(results)
            )
        return DeliveryOutcome(
            False, SEND_FAILED, ErrorCode.ALL_STRATEGIES_FAILED, tuple(results)
        )

    def _capture_focus(self) -> TargetProcessHandle | None:
        try:
            return self.processes.frontmost_application()
        except CommanderError as e:
            logger.warning("Could not read the frontmost application: %s", e)
            return None

    def _restore_focus(self, previous: TargetProcessHandle | None) -> None:
        if previous is None:
            return
        try:
            if not self.processes.is_alive(previous):
                logger.info("Previously focused app %s has exited, not restoring", previous.name)
                return
            if not self.processes.activate(previous):
                logger.warning("Could not re-focus %s", previous.name)
        except CommanderError as e:
            logger.warning("Focus restore failed: %s", e)
