"""Paced synthetic key and mouse sequences on top of an InputInjector."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable

from CursorCommander.models import Point, Timings
from CursorCommander.pipeline.keymap import key_code_for, needs_shift
from CursorCommander.platform.protocol import (
    FLAG_COMMAND,
    FLAG_SHIFT,
    KEY_COMMAND,
    KEY_SHIFT,
    InputInjector,
)

logger = logging.getLogger(__name__)


class EventPoster:
    """Posts event pairs with a pause after each event.

    Synthetic events posted back-to-back get coalesced or dropped by the
    window server, hence the fixed pauses.
    """

    def __init__(
        self,
        injector: InputInjector,
        timings: Timings,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.injector = injector
        self.timings = timings
        self.sleep = sleep

    def tap(self, key_code: int, flags: int = 0) -> None:
        self.injector.post_key(key_code, True, flags)
        self.sleep(self.timings.key_event_delay)
        self.injector.post_key(key_code, False, flags)
        self.sleep(self.timings.key_event_delay)

    def command_chord(self, key_code: int) -> None:
        self.injector.post_key(KEY_COMMAND, True, FLAG_COMMAND)
        self.sleep(self.timings.key_event_delay)
        self.tap(key_code, FLAG_COMMAND)
        self.injector.post_key(KEY_COMMAND, False)
        self.sleep(self.timings.key_event_delay)

    def click(self, point: Point, *, pause: float | None = None) -> None:
        pause = self.timings.mouse_event_delay if pause is None else pause
        self.injector.post_mouse(point, True)
        self.sleep(pause)
        self.injector.post_mouse(point, False)
        self.sleep(pause)

    def triple_click(self, point: Point) -> None:
        for _ in range(3):
            self.click(point, pause=self.timings.triple_click_delay)

    def type_text(self, text: str) -> int:
        """Type ``text`` key by key; returns how many characters were skipped."""
        skipped = 0
        for char in text:
            key_code = key_code_for(char)
            if key_code is None:
                skipped += 1
                continue
            shift = needs_shift(char)
            if shift:
                self.injector.post_key(KEY_SHIFT, True, FLAG_SHIFT)
                self.sleep(self.timings.key_event_delay)
            self.tap(key_code, FLAG_SHIFT if shift else 0)
            if shift:
                self.injector.post_key(KEY_SHIFT, False)
                self.sleep(self.timings.key_event_delay)
            self.sleep(self.timings.char_delay)
        if skipped:
            logger.debug("Skipped %d character(s) with no key mapping", skipped)
        return skipped
