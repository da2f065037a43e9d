"""
Slash-command handler for the interactive prompt.
Created: 2025-03-06

Lines starting with ``/`` or ``!`` are handled here; anything else is a
command to deliver and never reaches this module.
"""

from __future__ import annotations

import asyncio
import logging
import re
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from CursorCommander.app import Commander

logger = logging.getLogger(__name__)

_COMMANDS = frozenset(
    {
        "/status",
        "/launch",
        "/permissions",
        "/history",
        "/resend",
        "/clear",
        "/help",
    }
)

# Matches "/cmd" or "!cmd" and trailing args.
# "!" is accepted for terminals or wrappers that swallow a leading "/".
_CMD_RE = re.compile(r"^([/!]\w+)\s*(.*)", re.DOTALL)


def _normalize_cmd(raw: str) -> str:
    """Normalize ``!cmd`` to ``/cmd``."""
    if raw.startswith("!"):
        return "/" + raw[1:]
    return raw


def _yes_no(flag: bool) -> str:
    return "yes" if flag else "no"


class CommandHandler:
    """Handles prompt commands against one Commander."""

    def __init__(self, app: Commander):
        self.app = app

    def is_command(self, content: str) -> bool:
        """Check if the line is a recognised command."""
        m = _CMD_RE.match(content.strip())
        return bool(m and _normalize_cmd(m.group(1).lower()) in _COMMANDS)

    async def handle(self, content: str) -> str | None:
        """Process a command and return the reply text.

        Returns None if the content isn't a valid command.
        """
        m = _CMD_RE.match(content.strip())
        if m:
            cmd = _normalize_cmd(m.group(1).lower())
            if cmd in _COMMANDS:
                args = m.group(2).strip()
                return await self._dispatch(cmd, args)
        return None

    async def _dispatch(self, cmd: str, args: str) -> str | None:
        if cmd == "/status":
            return await self._cmd_status()
        elif cmd == "/launch":
            return await self._cmd_launch()
        elif cmd == "/permissions":
            return self._cmd_permissions()
        elif cmd == "/history":
            return self._cmd_history()
        elif cmd == "/resend":
            return await self._cmd_resend(args)
        elif cmd == "/clear":
            return self._cmd_clear()
        elif cmd == "/help":
            return self._cmd_help()
        return None

    # ------------------------------------------------------------------
    # /status
    # ------------------------------------------------------------------

    async def _cmd_status(self) -> str:
        await asyncio.to_thread(self.app.refresh_permissions)
        await asyncio.to_thread(self.app.refresh_running_state)
        state = self.app.state
        auth = state.authorization
        lines = [
            f"Accessibility: {_yes_no(auth.input_synthesis_allowed)}",
            f"System Events: {_yes_no(auth.ui_scripting_allowed)}",
            f"{self.app.target.name} running: {_yes_no(state.target_running)}",
            f"Readiness: {state.target_message or state.readiness_message or '-'}",
            f"Last result: {state.status_message or '-'}",
        ]
        if state.pending_command:
            lines.append(f"Unsent command: {state.pending_command}")
        return "\n".join(lines)

    # ------------------------------------------------------------------
    # /launch
    # ------------------------------------------------------------------

    async def _cmd_launch(self) -> str:
        name = self.app.target.name
        if await asyncio.to_thread(self.app.launch_target):
            return f"Launching {name}..."
        return self.app.locator.launch_failed_message

    # ------------------------------------------------------------------
    # /permissions
    # ------------------------------------------------------------------

    def _cmd_permissions(self) -> str:
        self.app.request_permissions()
        return "Opened Privacy & Security settings. Status is re-checked shortly."

    # ------------------------------------------------------------------
    # /history, /resend, /clear
    # ------------------------------------------------------------------

    def _cmd_history(self) -> str:
        commands = self.app.history.as_list()
        if not commands:
            return "No recent commands."
        lines = ["Recent commands:"]
        for i, command in enumerate(commands, 1):
            lines.append(f"{i}. {command}")
        lines.append("\nUse /resend <number> to send one again.")
        return "\n".join(lines)

    async def _cmd_resend(self, args: str) -> str:
        if not args.isdigit():
            return "Usage: /resend <number> (see /history)"
        command = self.app.history.get(int(args) - 1)
        if command is None:
            return f"No command #{args} in history."
        outcome = await asyncio.to_thread(self.app.deliver, command)
        return outcome.status_message

    def _cmd_clear(self) -> str:
        self.app.history.clear()
        return "History cleared."

    # ------------------------------------------------------------------
    # /help
    # ------------------------------------------------------------------

    def _cmd_help(self) -> str:
        name = self.app.target.name
        return (
            "Commands:\n\n"
            "/status - Show permissions and whether "
            f"{name} is running\n"
            f"/launch - Start {name}\n"
            "/permissions - Open the settings pane for the required permissions\n"
            "/history - List recent commands\n"
            "/resend <n> - Send recent command #n again\n"
            "/clear - Forget recent commands\n"
            "/help - Show this help message\n\n"
            f"Any other line is sent to {name}'s chat. "
            "Use !command instead of /command if your terminal eats the slash."
        )
