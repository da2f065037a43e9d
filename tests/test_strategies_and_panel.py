"""Delivery strategies, the panel opener and the AppleScript they run."""

from __future__ import annotations

from conftest import CURSOR, no_sleep
from CursorCommander.errors import InputInjectionError
from CursorCommander.models import Point, Timings
from CursorCommander.pipeline.applescript import (
    build_delivery_script,
    build_panel_script,
    escape_applescript,
)
from CursorCommander.pipeline.keymap import key_code_for, needs_shift
from CursorCommander.pipeline.panel import PanelOpener
from CursorCommander.pipeline.strategies import (
    DirectScriptStrategy,
    SyntheticEventStrategy,
    SystemEventsStrategy,
)
from CursorCommander.platform.protocol import (
    FLAG_COMMAND,
    FLAG_SHIFT,
    KEY_DELETE,
    KEY_J,
    KEY_K,
    KEY_RETURN,
    KEY_SHIFT,
    ScriptResult,
)


def _key_downs(log: list) -> list[int]:
    return [entry[1] for entry in log if entry[0] == "key" and entry[2]]


def _unescape(text: str) -> str:
    out = []
    chars = iter(text)
    for char in chars:
        if char == "\\":
            out.append(next(chars))
        else:
            out.append(char)
    return "".join(out)


def test_keymap_covers_letters_digits_and_shifted_symbols() -> None:
    assert key_code_for("a") == 0x00
    assert key_code_for("A") == 0x00
    assert key_code_for("5") == 0x17
    assert key_code_for("%") == 0x17
    assert key_code_for(" ") == 0x31
    assert key_code_for("é") is None
    assert key_code_for("ab") is None
    assert needs_shift("A") is True
    assert needs_shift("?") is True
    assert needs_shift("a") is False
    assert needs_shift("/") is False


def test_synthetic_strategy_clears_then_types_then_submits(log, processes, injector) -> None:
    strategy = SyntheticEventStrategy(processes, injector, Timings.zero(), sleep=no_sleep)

    assert strategy.deliver("Hi", CURSOR) is True

    mouse_downs = [entry[1] for entry in log if entry[0] == "mouse" and entry[2]]
    # One focusing click plus a triple-click, all at the composer heuristic point.
    assert mouse_downs == [Point(700.0, 820.0)] * 4

    downs = _key_downs(log)
    assert downs[0] == KEY_DELETE
    assert downs[1:] == [KEY_SHIFT, key_code_for("h"), key_code_for("i"), KEY_RETURN]

    last_mouse = max(i for i, e in enumerate(log) if e[0] == "mouse")
    first_delete = next(i for i, e in enumerate(log) if e[0] == "key" and e[1] == KEY_DELETE)
    assert last_mouse < first_delete


def test_repeated_delivery_clears_the_composer_each_time(log, processes, injector, scripts) -> None:
    strategy = SyntheticEventStrategy(processes, injector, Timings.zero(), sleep=no_sleep)

    assert strategy.deliver("ok", CURSOR) is True
    assert strategy.deliver("ok", CURSOR) is True

    one_attempt = [KEY_DELETE, key_code_for("o"), key_code_for("k"), KEY_RETURN]
    assert _key_downs(log) == one_attempt * 2

    events_only = SystemEventsStrategy(scripts, Timings.zero())
    events_only.deliver("ok", CURSOR)
    events_only.deliver("ok", CURSOR)
    assert scripts.sources[0] == scripts.sources[1]
    assert scripts.sources[1].index(f"key code {KEY_DELETE}") < scripts.sources[1].index(
        'keystroke "ok"'
    )


def test_synthetic_strategy_shift_flag_only_on_shifted_keys(log, processes, injector) -> None:
    strategy = SyntheticEventStrategy(processes, injector, Timings.zero(), sleep=no_sleep)
    strategy.deliver("a!", CURSOR)

    typed = [e for e in log if e[0] == "key" and e[1] in (key_code_for("a"), key_code_for("!"))]
    assert [flags for _k, code, _down, flags in typed if code == key_code_for("a")] == [0, 0]
    assert [flags for _k, code, _down, flags in typed if code == key_code_for("!")] == [
        FLAG_SHIFT,
        FLAG_SHIFT,
    ]


def test_synthetic_strategy_skips_unmapped_characters(log, processes, injector) -> None:
    strategy = SyntheticEventStrategy(processes, injector, Timings.zero(), sleep=no_sleep)

    assert strategy.deliver("a→b", CURSOR) is True
    downs = _key_downs(log)
    assert downs[1:] == [key_code_for("a"), key_code_for("b"), KEY_RETURN]


def test_synthetic_strategy_reports_injection_failure(processes, injector) -> None:
    injector.error = InputInjectionError("could not create key event")
    strategy = SyntheticEventStrategy(processes, injector, Timings.zero(), sleep=no_sleep)

    assert strategy.deliver("hello", CURSOR) is False


def test_synthetic_strategy_uses_main_screen_without_window(log, processes, injector) -> None:
    processes.windows = []
    strategy = SyntheticEventStrategy(processes, injector, Timings.zero(), sleep=no_sleep)
    strategy.deliver("x", CURSOR)

    first_click = next(e[1] for e in log if e[0] == "mouse")
    assert first_click == Point(720.0, 870.0)


def test_script_strategies_differ_only_in_activation(scripts) -> None:
    direct = DirectScriptStrategy(scripts, Timings.zero())
    events_only = SystemEventsStrategy(scripts, Timings.zero())

    assert direct.deliver("run tests", CURSOR) is True
    assert events_only.deliver("run tests", CURSOR) is True

    direct_src, events_src = scripts.sources
    assert direct_src.startswith('tell application "Cursor"\n    activate')
    assert "set frontmost to true" in direct_src
    assert events_src.startswith('tell application "System Events"')
    assert "set frontmost to true" not in events_src
    for source in scripts.sources:
        assert 'keystroke "run tests"' in source
        assert source.index(f"key code {KEY_DELETE}") < source.index('keystroke "run tests"')
        assert source.rstrip().endswith("end tell")


def test_script_strategy_failure_is_false(scripts) -> None:
    scripts.default = False
    assert SystemEventsStrategy(scripts, Timings.zero()).deliver("x", CURSOR) is False


def test_delivery_script_escapes_quotes_and_backslashes() -> None:
    text = 'say "hi" \\ bye'
    source = build_delivery_script("Cursor", text, activate_directly=False, timings=Timings.zero())

    assert 'keystroke "say \\"hi\\" \\\\ bye"' in source


def test_escape_applescript_is_reversible() -> None:
    for text in ['plain', 'a "quoted" word', "C:\\path\\", '\\"', "line1\nline2"]:
        assert _unescape(escape_applescript(text)) == text


def test_panel_script_sends_palette_route_and_direct_toggle() -> None:
    source = build_panel_script("Cursor", filter_text="chat", bottom_offset=30, timings=Timings())

    assert source.index(f"key code {KEY_K} using {{command down}}") < source.index('keystroke "chat"')
    assert source.index('keystroke "chat"') < source.index(f"key code {KEY_RETURN}")
    assert source.index(f"key code {KEY_RETURN}") < source.index(f"key code {KEY_J} using")
    assert "set clickY to winY + winH - 30" in source
    assert "delay 0.3" in source


def test_panel_opener_runs_script_once_when_it_succeeds(log, processes, scripts, injector) -> None:
    opener = PanelOpener(processes, scripts, injector, Timings.zero(), sleep=no_sleep)
    opener.open_input_panel(CURSOR)

    assert len(scripts.sources) == 1
    assert not [e for e in log if e[0] in ("key", "mouse")]


def test_panel_opener_replays_with_events_when_script_fails(log, processes, scripts, injector) -> None:
    scripts.queued.append(ScriptResult(ok=False, error="not authorized"))
    opener = PanelOpener(processes, scripts, injector, Timings.zero(), sleep=no_sleep)

    opener.open_input_panel(CURSOR)

    command_chords = [e[1] for e in log if e[0] == "key" and e[2] and e[3] == FLAG_COMMAND]
    assert KEY_K in command_chords and KEY_J in command_chords
    assert command_chords.index(KEY_K) < command_chords.index(KEY_J)
    assert [e for e in log if e[0] == "mouse"]


def test_panel_opener_swallows_injection_errors(processes, scripts, injector) -> None:
    scripts.default = False
    injector.error = InputInjectionError("event tap disabled")
    opener = PanelOpener(processes, scripts, injector, Timings.zero(), sleep=no_sleep)

    opener.open_input_panel(CURSOR)
