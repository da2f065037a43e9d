# OS capability layer.
# Created: 2025-03-04

from CursorCommander.platform.protocol import (
    InputInjector,
    PermissionProvider,
    ProcessDirectory,
    ScriptResult,
    ScriptRunner,
)

__all__ = [
    "InputInjector",
    "PermissionProvider",
    "ProcessDirectory",
    "ScriptResult",
    "ScriptRunner",
]
