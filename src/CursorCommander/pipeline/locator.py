"""Find, and when asked, launch the target application."""

from __future__ import annotations

import logging

from CursorCommander.errors import PlatformUnavailableError
from CursorCommander.models import TargetIdentity, TargetProcessHandle
from CursorCommander.platform.protocol import ProcessDirectory
from CursorCommander.scheduler import Scheduler
from CursorCommander.state import SessionState

logger = logging.getLogger(__name__)


class TargetLocator:
    """Resolves the target on every call; handles are never cached."""

    def __init__(
        self,
        state: SessionState,
        processes: ProcessDirectory,
        scheduler: Scheduler,
        target: TargetIdentity | None = None,
        *,
        launch_recheck_delay: float = 2.0,
    ):
        self.state = state
        self.processes = processes
        self.scheduler = scheduler
        self.target = target or TargetIdentity()
        self.launch_recheck_delay = launch_recheck_delay

    @property
    def not_running_message(self) -> str:
        return f"{self.target.name} is not running"

    @property
    def launch_failed_message(self) -> str:
        return f"Error: Could not find or launch {self.target.name} application"

    def resolve(self) -> TargetProcessHandle | None:
        try:
            apps = self.processes.running_applications()
        except PlatformUnavailableError as e:
            logger.warning("Cannot enumerate running applications: %s", e)
            return None
        for app in apps:
            if self.target.matches(app.name, app.bundle_id):
                return app
        return None

    def is_target_running(self) -> bool:
        running = self.resolve() is not None
        self.state.set_target_running(running)
        self.state.set_target_message("" if running else self.not_running_message)
        return running

    def _schedule_recheck(self) -> None:
        self.scheduler.call_later(
            self.launch_recheck_delay, self.is_target_running, name="launch-recheck"
        )

    def find_install_path(self) -> str | None:
        hits = self.processes.spotlight_search(self.target.spotlight_query)
        return hits[0] if hits else None

    def launch_target(self) -> bool:
        """Issue a launch and return without waiting for the app to come up.

        Tries a Spotlight lookup, then the conventional install locations,
        then the URL scheme. Returns False when none of them worked.
        """
        path = self.find_install_path()
        if path:
            logger.info("Found %s at %s", self.target.name, path)
            if self.processes.launch_path(path):
                self._schedule_recheck()
                return True

        for candidate in self.target.install_paths:
            if not self.processes.path_exists(candidate):
                continue
            if self.processes.launch_path(candidate):
                logger.info("Launched %s from %s", self.target.name, candidate)
                self._schedule_recheck()
                return True
            # Only the first existing location is tried.
            break

        if self.target.url_scheme and self.processes.open_url(self.target.url_scheme):
            logger.info("Launched %s via %s", self.target.name, self.target.url_scheme)
            self._schedule_recheck()
            return True

        logger.error("Could not find or launch %s", self.target.name)
        self.state.set_target_message(self.launch_failed_message)
        return False
