"""CursorCommander entry point.

Changes:
  - 2025-03-07: Added `doctor` with categorized health checks.
  - 2025-03-06: Added `interactive` prompt with slash commands and background polling.
  - 2025-03-05: Fixed --version to read dynamically from package metadata.
  - 2025-03-05: Added Rich logging for readable console output.
"""

import argparse
import asyncio
import logging
from collections import defaultdict
from importlib.metadata import PackageNotFoundError
from importlib.metadata import version as get_version

from CursorCommander.config import Settings, get_settings
from CursorCommander.logging_setup import setup_logging

logger = logging.getLogger(__name__)


def _runtime_version() -> str:
    """Return installed package version with compatibility fallback."""
    for dist_name in ("CursorCommander", "cursorcommander"):
        try:
            return get_version(dist_name)
        except PackageNotFoundError:
            continue
    return "0.0.0"


def _build_app(settings: Settings):
    from CursorCommander.app import Commander

    return Commander(settings)


def run_send(settings: Settings, text: str) -> int:
    with _build_app(settings) as app:
        app.refresh_permissions()
        outcome = app.deliver(text)
    print(outcome.status_message)
    for result in outcome.strategy_results:
        if result.attempted:
            logger.debug("%s: %s", result.name, "ok" if result.succeeded else "failed")
    return 0 if outcome.succeeded else 1


def run_status(settings: Settings) -> int:
    from CursorCommander.commands import CommandHandler

    with _build_app(settings) as app:
        print(asyncio.run(CommandHandler(app).handle("/status")))
    return 0


def run_launch(settings: Settings) -> int:
    with _build_app(settings) as app:
        if app.launch_target():
            print(f"Launching {app.target.name}...")
            return 0
        print(app.state.target_message)
        return 1


def run_permissions(settings: Settings) -> int:
    def _print_guidance(title: str, body: str) -> None:
        print(f"\n{title}\n{'-' * len(title)}\n{body}")

    with _build_app(settings) as app:
        app.gate.notifier = _print_guidance
        app.refresh_permissions()
        if not app.state.input_synthesis_allowed:
            app.gate.request_input_synthesis_permission()
        if not app.state.ui_scripting_allowed:
            app.gate.request_ui_scripting_permission()
        if app.state.input_synthesis_allowed and app.state.ui_scripting_allowed:
            print("All permissions granted.")
            return 0
    return 1


def run_history(settings: Settings, clear: bool) -> int:
    from CursorCommander.config import get_config_dir
    from CursorCommander.history import HISTORY_FILENAME, CommandHistory

    history = CommandHistory(get_config_dir() / HISTORY_FILENAME, limit=settings.history_size)
    if clear:
        history.clear()
        print("History cleared.")
        return 0
    commands = history.as_list()
    if not commands:
        print("No recent commands.")
    for i, command in enumerate(commands, 1):
        print(f"{i:>2}. {command}")
    return 0


def run_doctor(settings: Settings) -> int:
    """Run diagnostic checks and print categorized output."""
    from CursorCommander.health import overall_status, run_health_checks

    with _build_app(settings) as app:
        results = run_health_checks(app)

    grouped: dict[str, list] = defaultdict(list)
    for result in results:
        grouped[result.category].append(result)

    def _icon(status: str) -> str:
        return {"ok": "[OK]", "warning": "[WARN]", "critical": "[FAIL]"}.get(status, "[?]")

    print("\n" + "=" * 64)
    print("CursorCommander Doctor")
    print("=" * 64)

    sections = (
        ("Platform", grouped.get("platform", [])),
        ("Permissions", grouped.get("permissions", [])),
        ("Target", grouped.get("target", [])),
    )
    for title, rows in sections:
        print(f"\n{title}:")
        if not rows:
            print("  [OK] No checks in this category")
            continue
        for row in rows:
            print(f"  {_icon(row.status)} {row.name}: {row.message}")
            if row.fix_hint and row.status != "ok":
                print(f"       Fix: {row.fix_hint}")

    print(f"\nOverall: {overall_status(results).upper()}")
    print("=" * 64 + "\n")

    has_critical = any(r.status == "critical" for r in results)
    return 1 if has_critical else 0


async def run_interactive(settings: Settings) -> int:
    """Prompt loop: slash commands are handled locally, other lines are delivered."""
    from CursorCommander.commands import CommandHandler

    with _build_app(settings) as app:
        handler = CommandHandler(app)
        app.refresh_permissions()
        app.refresh_running_state()
        app.start_polling()
        print(f"CursorCommander {_runtime_version()}. Type /help for commands, Ctrl+D to quit.")
        while True:
            try:
                line = await asyncio.to_thread(input, "> ")
            except EOFError:
                print()
                break
            line = line.strip()
            if not line:
                continue
            if handler.is_command(line):
                reply = await handler.handle(line)
                if reply:
                    print(reply)
                continue
            outcome = await asyncio.to_thread(app.deliver, line)
            print(outcome.status_message)
    return 0


def main() -> None:
    """Main entry point."""
    parser = argparse.ArgumentParser(
        prog="cursorcommander",
        description="CursorCommander - send commands to Cursor's chat from the terminal",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  cursorcommander send "explain this file"   Deliver one command
  cursorcommander interactive                 Prompt with /status, /history, /resend ...
  cursorcommander doctor                      Run categorized diagnostics and exit
""",
    )
    parser.add_argument(
        "--version", "-v", action="version", version=f"%(prog)s {_runtime_version()}"
    )
    parser.add_argument(
        "--log-level",
        default=None,
        help="Console log level (default: from settings, INFO)",
    )

    sub = parser.add_subparsers(dest="command", metavar="COMMAND")
    send = sub.add_parser("send", help="Send one command to Cursor's chat")
    send.add_argument("text", nargs="+", help="Command text")
    sub.add_parser("status", help="Show permission and running state")
    sub.add_parser("launch", help="Launch Cursor")
    sub.add_parser("permissions", help="Open the settings pane for the required permissions")
    history = sub.add_parser("history", help="List recent commands")
    history.add_argument("--clear", action="store_true", help="Forget recent commands")
    sub.add_parser("doctor", help="Run categorized health diagnostics")
    sub.add_parser("interactive", help="Interactive prompt (default)")

    args = parser.parse_args()

    settings = get_settings()
    setup_logging(level=args.log_level or settings.log_level)

    try:
        if args.command == "send":
            exit_code = run_send(settings, " ".join(args.text))
        elif args.command == "status":
            exit_code = run_status(settings)
        elif args.command == "launch":
            exit_code = run_launch(settings)
        elif args.command == "permissions":
            exit_code = run_permissions(settings)
        elif args.command == "history":
            exit_code = run_history(settings, args.clear)
        elif args.command == "doctor":
            exit_code = run_doctor(settings)
        else:
            exit_code = asyncio.run(run_interactive(settings))
    except KeyboardInterrupt:
        logger.info("CursorCommander stopped.")
        exit_code = 130
    raise SystemExit(exit_code)


if __name__ == "__main__":
    main()
