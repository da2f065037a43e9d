"""Exception types raised by platform capabilities."""


class CommanderError(Exception):
    """Base class for CursorCommander errors."""


class PlatformUnavailableError(CommanderError):
    """The macOS frameworks or tools needed for an operation are missing."""


class InputInjectionError(CommanderError):
    """A synthetic input event could not be created or posted."""
