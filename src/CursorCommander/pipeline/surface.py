"""Window bounds lookup and the composer click-point heuristic."""

from __future__ import annotations

import logging

from CursorCommander.errors import PlatformUnavailableError
from CursorCommander.models import Point, ScreenRegion, TargetProcessHandle
from CursorCommander.platform.protocol import ProcessDirectory

logger = logging.getLogger(__name__)

DEFAULT_COMPOSER_OFFSET = 30.0


def foreground_window_region(processes: ProcessDirectory, handle: TargetProcessHandle) -> ScreenRegion:
    """Bounds of the first on-screen window owned by ``handle``.

    Falls back to the main screen so callers always get a usable region.
    Call it right before use; windows move.
    """
    try:
        for window in processes.on_screen_windows():
            if window.owner_pid == handle.pid:
                return window.region
    except PlatformUnavailableError as e:
        logger.debug("Window enumeration unavailable: %s", e)
    logger.debug("No on-screen window for pid %s, using main screen bounds", handle.pid)
    return processes.main_screen_region()


def input_surface_point(region: ScreenRegion, bottom_offset: float = DEFAULT_COMPOSER_OFFSET) -> Point:
    """Horizontal centre, ``bottom_offset`` px above the bottom edge.

    This assumes the chat composer is docked at the bottom of the window.
    It is a heuristic: when the layout differs the click lands elsewhere
    and the strategies that follow have to cope.
    """
    return Point(
        x=region.x + region.width / 2,
        y=region.y + region.height - bottom_offset,
    )
