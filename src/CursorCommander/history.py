"""Recent-command history.

Most recent first, no duplicates, capped. Persisted as a JSON list so the
list survives between CLI launches; a corrupted file just starts over.
"""

from __future__ import annotations

import json
import logging
import threading
from pathlib import Path

logger = logging.getLogger(__name__)

HISTORY_FILENAME = "recent_commands.json"
DEFAULT_LIMIT = 20


class CommandHistory:
    def __init__(self, path: Path | None = None, limit: int = DEFAULT_LIMIT):
        self.path = path
        self.limit = max(1, int(limit))
        self._lock = threading.Lock()
        self._commands: list[str] = self._load()

    def _load(self) -> list[str]:
        if self.path is None or not self.path.exists():
            return []
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError, ValueError):
            logger.debug("Ignoring unreadable history file %s", self.path, exc_info=True)
            return []
        if not isinstance(data, list):
            return []
        return [str(item) for item in data if isinstance(item, str) and item][: self.limit]

    def _save(self) -> None:
        if self.path is None:
            return
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(json.dumps(self._commands, ensure_ascii=False), encoding="utf-8")
        except OSError:
            logger.warning("Could not write history file %s", self.path, exc_info=True)

    def record(self, command: str) -> None:
        """Move ``command`` to the front; empty commands are ignored."""
        if not command:
            return
        with self._lock:
            if command in self._commands:
                self._commands.remove(command)
            self._commands.insert(0, command)
            del self._commands[self.limit :]
            self._save()

    def get(self, index: int) -> str | None:
        with self._lock:
            if 0 <= index < len(self._commands):
                return self._commands[index]
            return None

    def clear(self) -> None:
        with self._lock:
            self._commands.clear()
            if self.path is not None:
                self.path.unlink(missing_ok=True)

    def __len__(self) -> int:
        with self._lock:
            return len(self._commands)

    def as_list(self) -> list[str]:
        with self._lock:
            return list(self._commands)
