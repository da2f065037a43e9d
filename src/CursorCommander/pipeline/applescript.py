"""AppleScript sources for the panel choreography and the scripted strategies."""

from __future__ import annotations

from CursorCommander.models import Timings
from CursorCommander.platform.protocol import KEY_DELETE, KEY_J, KEY_K, KEY_RETURN


def escape_applescript(text: str) -> str:
    """Escape ``text`` for use inside an AppleScript string literal."""
    return text.replace("\\", "\\\\").replace('"', '\\"')


def _delay(seconds: float) -> str:
    return f"delay {seconds:g}"


def _indent(lines: list[str], depth: int) -> list[str]:
    pad = "    " * depth
    return [f"{pad}{line}" if line else line for line in lines]


def _choreography_lines(filter_text: str, timings: Timings) -> list[str]:
    return [
        "-- Command palette, filtered to the chat panel",
        f"key code {KEY_K} using {{command down}}",
        _delay(timings.palette_delay),
        f'keystroke "{escape_applescript(filter_text)}"',
        _delay(timings.filter_delay),
        f"key code {KEY_RETURN}",
        _delay(timings.confirm_delay),
        "-- Direct chat toggle, sent regardless of the palette result",
        f"key code {KEY_J} using {{command down}}",
        _delay(timings.toggle_delay),
    ]


def _composer_point_lines(bottom_offset: float) -> list[str]:
    return [
        "set {winX, winY} to position of window 1",
        "set {winW, winH} to size of window 1",
        "set clickX to winX + (winW / 2)",
        f"set clickY to winY + winH - {bottom_offset:g}",
    ]


def _tell_process(app_name: str, body: list[str]) -> list[str]:
    name = escape_applescript(app_name)
    return [
        'tell application "System Events"',
        f'    tell process "{name}"',
        *_indent(body, 2),
        "    end tell",
        "end tell",
    ]


def build_panel_script(
    app_name: str,
    *,
    filter_text: str = "chat",
    bottom_offset: float = 30.0,
    timings: Timings | None = None,
) -> str:
    """Open the chat panel and click into its composer."""
    timings = timings or Timings()
    body = [
        *_choreography_lines(filter_text, timings),
        "try",
        *_indent(_composer_point_lines(bottom_offset), 1),
        "    click at {clickX, clickY}",
        f"    {_delay(timings.click_delay)}",
        "end try",
    ]
    return "\n".join(_tell_process(app_name, body))


def build_delivery_script(
    app_name: str,
    text: str,
    *,
    activate_directly: bool,
    filter_text: str = "chat",
    bottom_offset: float = 30.0,
    timings: Timings | None = None,
) -> str:
    """Full delivery: open panel, select and clear the composer, type, submit.

    With ``activate_directly`` the script first addresses the application
    itself; otherwise everything goes through System Events only.
    """
    timings = timings or Timings()
    focus_fallback = []
    if activate_directly:
        focus_fallback = [
            "on error",
            f"    key code {KEY_K} using {{command down}}",
            f"    {_delay(timings.click_delay)}",
        ]
    body = [
        *(["set frontmost to true", _delay(timings.click_delay)] if activate_directly else []),
        *_choreography_lines(filter_text, timings),
        "try",
        *_indent(_composer_point_lines(bottom_offset), 1),
        "    click at {clickX, clickY}",
        f"    {_delay(timings.click_delay)}",
        "    -- Triple-click selects whatever is already in the composer",
        "    click at {clickX, clickY}",
        f"    {_delay(timings.triple_click_delay)}",
        "    click at {clickX, clickY}",
        f"    {_delay(timings.triple_click_delay)}",
        "    click at {clickX, clickY}",
        f"    {_delay(timings.clear_delay)}",
        *focus_fallback,
        "end try",
        f"key code {KEY_DELETE}",
        _delay(timings.clear_delay),
        f'keystroke "{escape_applescript(text)}"',
        _delay(timings.submit_delay),
        "keystroke return",
    ]

    lines: list[str] = []
    if activate_directly:
        lines += [
            f'tell application "{escape_applescript(app_name)}"',
            "    activate",
            f"    {_delay(timings.activation_delay)}",
            "end tell",
        ]
    lines += _tell_process(app_name, body)
    return "\n".join(lines)
