"""Wires settings, OS capabilities and the delivery pipeline together.

Changes:
  - 2025-03-06: Background pollers for permissions and the target's running state.
  - 2025-03-05: Initial composition of the pipeline.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence

from CursorCommander.config import Settings, get_config_dir, get_settings
from CursorCommander.history import HISTORY_FILENAME, CommandHistory
from CursorCommander.models import DeliveryOutcome
from CursorCommander.pipeline.locator import TargetLocator
from CursorCommander.pipeline.orchestrator import DeliveryOrchestrator
from CursorCommander.pipeline.panel import PanelOpener
from CursorCommander.pipeline.permissions import Notifier, PermissionGate
from CursorCommander.pipeline.strategies import (
    DeliveryStrategy,
    DirectScriptStrategy,
    SyntheticEventStrategy,
    SystemEventsStrategy,
)
from CursorCommander.platform.protocol import (
    InputInjector,
    PermissionProvider,
    ProcessDirectory,
    ScriptRunner,
)
from CursorCommander.scheduler import Scheduler
from CursorCommander.state import SessionState

logger = logging.getLogger(__name__)


class Commander:
    """One delivery session: state, pollers and the pipeline behind them.

    Capabilities default to the macOS implementations; pass fakes to run
    without a desktop session.
    """

    def __init__(
        self,
        settings: Settings | None = None,
        *,
        permissions: PermissionProvider | None = None,
        processes: ProcessDirectory | None = None,
        scripts: ScriptRunner | None = None,
        injector: InputInjector | None = None,
        history: CommandHistory | None = None,
        scheduler: Scheduler | None = None,
        notifier: Notifier | None = None,
        sleep: Callable[[float], None] | None = None,
    ):
        self.settings = settings or get_settings()
        s = self.settings

        if permissions is None or processes is None or scripts is None or injector is None:
            from CursorCommander.platform import macos

            permissions = permissions or macos.MacPermissionProvider()
            processes = processes or macos.MacProcessDirectory()
            scripts = scripts or macos.OsaScriptRunner(timeout=s.script_timeout)
            injector = injector or macos.QuartzInputInjector()

        self.permissions = permissions
        self.processes = processes
        self.scripts = scripts
        self.injector = injector
        self.timings = s.timings()
        self.target = s.target()
        self.state = SessionState()
        self.scheduler = scheduler or Scheduler()
        self.history = history or CommandHistory(
            get_config_dir() / HISTORY_FILENAME, limit=s.history_size
        )

        sleep_kw = {} if sleep is None else {"sleep": sleep}
        self.gate = PermissionGate(
            self.state,
            permissions,
            scripts,
            self.scheduler,
            notifier=notifier,
            recheck_delay=s.permission_recheck_delay,
        )
        self.locator = TargetLocator(
            self.state,
            processes,
            self.scheduler,
            self.target,
            launch_recheck_delay=s.launch_recheck_delay,
        )
        self.panel = PanelOpener(
            processes,
            scripts,
            injector,
            self.timings,
            filter_text=s.palette_filter_text,
            bottom_offset=s.composer_bottom_offset,
            **sleep_kw,
        )
        self.strategies: Sequence[DeliveryStrategy] = (
            SyntheticEventStrategy(
                processes,
                injector,
                self.timings,
                bottom_offset=s.composer_bottom_offset,
                **sleep_kw,
            ),
            DirectScriptStrategy(
                scripts,
                self.timings,
                filter_text=s.palette_filter_text,
                bottom_offset=s.composer_bottom_offset,
            ),
            SystemEventsStrategy(
                scripts,
                self.timings,
                filter_text=s.palette_filter_text,
                bottom_offset=s.composer_bottom_offset,
            ),
        )
        self.orchestrator = DeliveryOrchestrator(
            self.state,
            self.gate,
            self.locator,
            processes,
            self.panel,
            self.strategies,
            self.timings,
            history_sink=self.history.record,
            **sleep_kw,
        )
        self._polling = False

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    def deliver(self, text: str) -> DeliveryOutcome:
        return self.orchestrator.deliver(text)

    def refresh_permissions(self) -> None:
        self.gate.refresh()

    def refresh_running_state(self) -> bool:
        return self.locator.is_target_running()

    def launch_target(self) -> bool:
        return self.locator.launch_target()

    def request_permissions(self) -> None:
        self.gate.request_input_synthesis_permission()
        self.gate.request_ui_scripting_permission()

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def start_polling(self) -> None:
        """Re-check permissions and the running state in the background."""
        if self._polling:
            return
        self.scheduler.every(
            self.settings.permission_poll_interval,
            self.refresh_permissions,
            name="permission-poll",
        )
        self.scheduler.every(
            self.settings.running_poll_interval,
            self.refresh_running_state,
            name="running-poll",
        )
        self._polling = True
        logger.debug("Background polling started")

    def stop(self) -> None:
        self.scheduler.shutdown()
        self._polling = False

    def __enter__(self) -> Commander:
        return self

    def __exit__(self, *exc) -> None:
        self.stop()
