"""CursorCommander - send chat commands to the Cursor editor from anywhere."""

try:
    from importlib.metadata import version as _meta_version

    __version__ = _meta_version("CursorCommander")
except Exception:
    __version__ = "0.1.0"
