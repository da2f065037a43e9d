"""Reveal and focus the target's chat composer."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable

from CursorCommander.errors import CommanderError
from CursorCommander.models import ErrorCode, TargetProcessHandle, Timings
from CursorCommander.pipeline.applescript import build_panel_script
from CursorCommander.pipeline.events import EventPoster
from CursorCommander.pipeline.surface import foreground_window_region, input_surface_point
from CursorCommander.platform.protocol import (
    KEY_J,
    KEY_K,
    KEY_RETURN,
    InputInjector,
    ProcessDirectory,
    ScriptRunner,
)

logger = logging.getLogger(__name__)


class PanelOpener:
    """Runs a fixed superset of actions; it never decides success itself.

    The palette route and the direct toggle are both sent every time since
    the target's current UI state is unknown. Whether the composer really got
    focus is left to the delivery strategies.
    """

    def __init__(
        self,
        processes: ProcessDirectory,
        scripts: ScriptRunner,
        injector: InputInjector,
        timings: Timings,
        *,
        filter_text: str = "chat",
        bottom_offset: float = 30.0,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.processes = processes
        self.scripts = scripts
        self.timings = timings
        self.filter_text = filter_text
        self.bottom_offset = bottom_offset
        self.sleep = sleep
        self.events = EventPoster(injector, timings, sleep)

    def open_input_panel(self, handle: TargetProcessHandle) -> None:
        source = build_panel_script(
            handle.name,
            filter_text=self.filter_text,
            bottom_offset=self.bottom_offset,
            timings=self.timings,
        )
        result = self.scripts.run(source)
        if not result.ok:
            logger.info(
                "Opening chat panel via System Events failed (%s), replaying with synthetic events",
                result.error,
            )
            try:
                self._replay_with_events(handle)
            except CommanderError as e:
                logger.warning(
                    "[%s] synthetic panel fallback failed: %s", ErrorCode.PANEL_OPEN_UNCERTAIN, e
                )
        self.sleep(self.timings.panel_settle_delay)

    def _replay_with_events(self, handle: TargetProcessHandle) -> None:
        self.events.command_chord(KEY_K)
        self.sleep(self.timings.palette_delay)
        self.events.type_text(self.filter_text)
        self.sleep(self.timings.filter_delay)
        self.events.tap(KEY_RETURN)
        self.sleep(self.timings.confirm_delay)
        self.events.command_chord(KEY_J)
        self.sleep(self.timings.toggle_delay)
        region = foreground_window_region(self.processes, handle)
        self.events.click(input_surface_point(region, self.bottom_offset))
        self.sleep(self.timings.click_delay)
