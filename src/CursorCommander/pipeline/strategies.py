"""Ranked ways of getting text into the focused composer and submitting it.

Every strategy clears the composer before typing, may leave stray input
behind when it fails, and reports a plain boolean.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from typing import Protocol

from CursorCommander.errors import CommanderError
from CursorCommander.models import Point, TargetProcessHandle, Timings
from CursorCommander.pipeline.applescript import build_delivery_script
from CursorCommander.pipeline.events import EventPoster
from CursorCommander.pipeline.surface import foreground_window_region, input_surface_point
from CursorCommander.platform.protocol import (
    KEY_DELETE,
    KEY_RETURN,
    InputInjector,
    ProcessDirectory,
    ScriptRunner,
)

logger = logging.getLogger(__name__)


class DeliveryStrategy(Protocol):
    name: str

    def deliver(self, text: str, handle: TargetProcessHandle) -> bool: ...


class SyntheticEventStrategy:
    """Clicks the composer and types through low-level Quartz events.

    Success means the Return key was posted; nothing checks that the text
    actually landed.
    """

    name = "synthetic_events"

    def __init__(
        self,
        processes: ProcessDirectory,
        injector: InputInjector,
        timings: Timings,
        *,
        bottom_offset: float = 30.0,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.processes = processes
        self.timings = timings
        self.bottom_offset = bottom_offset
        self.sleep = sleep
        self.events = EventPoster(injector, timings, sleep)

    def _composer_point(self, handle: TargetProcessHandle) -> Point:
        region = foreground_window_region(self.processes, handle)
        return input_surface_point(region, self.bottom_offset)

    def deliver(self, text: str, handle: TargetProcessHandle) -> bool:
        try:
            self.events.click(self._composer_point(handle))
            self.sleep(self.timings.click_delay)

            # Triple-click selects existing content more reliably than Cmd+A.
            self.events.triple_click(self._composer_point(handle))
            self.events.tap(KEY_DELETE)
            self.sleep(self.timings.clear_delay)

            self.events.type_text(text)
            self.sleep(self.timings.submit_delay)
            self.events.tap(KEY_RETURN)
        except CommanderError as e:
            logger.warning("Synthetic event delivery failed: %s", e)
            return False
        return True


class _ScriptStrategy:
    name = "script"
    activate_directly = True

    def __init__(
        self,
        scripts: ScriptRunner,
        timings: Timings,
        *,
        filter_text: str = "chat",
        bottom_offset: float = 30.0,
    ):
        self.scripts = scripts
        self.timings = timings
        self.filter_text = filter_text
        self.bottom_offset = bottom_offset

    def build_script(self, text: str, handle: TargetProcessHandle) -> str:
        return build_delivery_script(
            handle.name,
            text,
            activate_directly=self.activate_directly,
            filter_text=self.filter_text,
            bottom_offset=self.bottom_offset,
            timings=self.timings,
        )

    def deliver(self, text: str, handle: TargetProcessHandle) -> bool:
        logger.debug("Running %s AppleScript for %s", self.name, handle.name)
        result = self.scripts.run(self.build_script(text, handle))
        if not result.ok:
            logger.warning("%s delivery failed: %s", self.name, result.error)
        return result.ok


class DirectScriptStrategy(_ScriptStrategy):
    """AppleScript that activates the target application by name first."""

    name = "direct_script"
    activate_directly = True


class SystemEventsStrategy(_ScriptStrategy):
    """Same script body, addressed only through the System Events process."""

    name = "system_events"
    activate_directly = False
