"""Interactive REPL for emu-dbg."""

from __future__ import annotations

import logging
from typing import Optional

from prompt_toolkit import PromptSession
from prompt_toolkit.history import FileHistory, InMemoryHistory
from prompt_toolkit.patch_stdout import patch_stdout

from .commands import CommandRegistry
from .completion import DebuggerCompleter
from .context import DebuggerContext
from .errors import FatalError
from .parser import PARSE_ERROR_MARKER, split_command

LOGGER = logging.getLogger("emu_dbg.repl")

PROMPT = "(emu) "


def dispatch_line(ctx: DebuggerContext, registry: CommandRegistry, line: str) -> int:
    """Run one command line; FatalError propagates to the caller."""
    argv = split_command(line.strip())
    if not argv:
        return 0
    cmd_name, *cmd_args = argv
    if cmd_name.startswith(PARSE_ERROR_MARKER):
        print(f"Parse error: {cmd_name[len(PARSE_ERROR_MARKER) + 1 :]}")
        return 1
    cmd_name = ctx.resolve_alias(cmd_name)
    command = registry.get(cmd_name)
    if not command:
        print(f"Unknown command '{cmd_name}'")
        return 1
    try:
        return command.run(ctx, cmd_args)
    except (SystemExit, FatalError):
        raise
    except Exception as exc:  # pragma: no cover - defensive logging
        LOGGER.exception("command failed")
        print(f"Command '{cmd_name}' failed: {exc}")
        return 1


class DebuggerREPL:
    """prompt_toolkit REPL with persistent history."""

    def __init__(
        self,
        ctx: DebuggerContext,
        registry: CommandRegistry,
        *,
        history_path: Optional[str] = None,
    ) -> None:
        self.ctx = ctx
        self.registry = registry
        self.history_path = history_path

    def _build_session(self) -> PromptSession:
        history = FileHistory(self.history_path) if self.history_path else InMemoryHistory()
        completer = DebuggerCompleter(self.ctx, self.registry)
        return PromptSession(PROMPT, history=history, completer=completer, complete_while_typing=False)

    def run(self) -> int:
        session = self._build_session()
        buffer: list[str] = []
        while True:
            try:
                with patch_stdout():
                    line = session.prompt()
            except (EOFError, KeyboardInterrupt):
                print()
                return 0
            if self._handle_multiline(buffer, line):
                continue
            payload = " ".join(buffer) if buffer else line
            buffer.clear()
            if not payload.strip():
                continue
            dispatch_line(self.ctx, self.registry, payload)

    @staticmethod
    def _handle_multiline(buffer: list[str], line: str) -> bool:
        stripped = line.rstrip()
        if stripped.endswith("\\"):
            buffer.append(stripped[:-1])
            return True
        if buffer:
            buffer.append(stripped)
        return False
