"""Delayed and periodic background work with explicit cancellation."""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable

logger = logging.getLogger(__name__)


def _safe_call(fn: Callable[[], object], name: str) -> None:
    try:
        fn()
    except Exception:
        logger.exception("Scheduled task %s failed", name)


class PeriodicTask:
    """Runs ``fn`` every ``interval`` seconds on a daemon thread until stopped."""

    def __init__(
        self,
        interval: float,
        fn: Callable[[], object],
        *,
        name: str = "periodic",
        run_immediately: bool = True,
    ):
        if interval <= 0:
            raise ValueError("interval must be positive")
        self.interval = interval
        self.name = name
        self._fn = fn
        self._run_immediately = run_immediately
        self._stop = threading.Event()
        self._thread: threading.Thread | None = None

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> PeriodicTask:
        if self.running:
            return self
        self._stop.clear()
        self._thread = threading.Thread(target=self._loop, name=f"cc-{self.name}", daemon=True)
        self._thread.start()
        return self

    def _loop(self) -> None:
        if self._run_immediately:
            _safe_call(self._fn, self.name)
        while not self._stop.wait(self.interval):
            _safe_call(self._fn, self.name)

    def stop(self, timeout: float | None = 2.0) -> None:
        self._stop.set()
        thread = self._thread
        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout)
        self._thread = None


class Scheduler:
    """Owns every timer and ticker it hands out so they can be torn down together."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._timers: set[threading.Timer] = set()
        self._tasks: list[PeriodicTask] = []

    def call_later(self, delay: float, fn: Callable[[], object], *, name: str = "delayed") -> threading.Timer:
        def _run() -> None:
            with self._lock:
                self._timers.discard(timer)
            _safe_call(fn, name)

        timer = threading.Timer(max(0.0, delay), _run)
        timer.daemon = True
        with self._lock:
            self._timers.add(timer)
        timer.start()
        return timer

    def every(self, interval: float, fn: Callable[[], object], *, name: str = "periodic") -> PeriodicTask:
        task = PeriodicTask(interval, fn, name=name)
        with self._lock:
            self._tasks.append(task)
        return task.start()

    def shutdown(self) -> None:
        with self._lock:
            timers = list(self._timers)
            tasks = list(self._tasks)
            self._timers.clear()
            self._tasks.clear()
        for timer in timers:
            timer.cancel()
        for task in tasks:
            task.stop()
