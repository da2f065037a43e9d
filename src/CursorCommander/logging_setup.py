"""Console logging setup.

Changes:
  - 2025-03-05: Rich handler for readable terminal output.
"""

from __future__ import annotations

import logging

from rich.console import Console
from rich.logging import RichHandler

_CONFIGURED_LEVEL: str | None = None

# Chatty third-party loggers that should never reach the console at INFO.
_QUIET_LOGGERS = ("asyncio", "pydantic", "objc")


def setup_logging(level: str = "INFO") -> None:
    """Install a single Rich handler on the root logger.

    Calling again with a different level only adjusts the level.
    """
    global _CONFIGURED_LEVEL
    level = (level or "INFO").upper()
    root = logging.getLogger()
    if _CONFIGURED_LEVEL is not None:
        root.setLevel(level)
        _CONFIGURED_LEVEL = level
        return

    handler = RichHandler(
        console=Console(stderr=True),
        show_path=False,
        rich_tracebacks=True,
        markup=False,
    )
    handler.setFormatter(logging.Formatter("%(message)s", datefmt="[%X]"))
    root.handlers[:] = [handler]
    root.setLevel(level)
    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
    _CONFIGURED_LEVEL = level
