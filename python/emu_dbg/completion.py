"""prompt_toolkit completer for emu-dbg."""

from __future__ import annotations

import re
import shlex
from typing import Iterable, List

from prompt_toolkit.completion import Completer, Completion
from prompt_toolkit.document import Document

from .commands import CommandRegistry
from .context import DebuggerContext
from .lexer import REGISTER_SIGIL

INFO_SUBCOMMANDS = ("r", "w")
EXPRESSION_COMMANDS = {"print", "examine", "watch"}
_REGISTER_PREFIX = re.compile(r"\$[A-Za-z0-9_]*$")


def _normalise_tokens(text: str) -> List[str]:
    if not text:
        return []
    try:
        tokens = shlex.split(text, posix=True)
        trailing = text[-1].isspace()
    except ValueError:
        tokens = text.strip().split()
        trailing = text.endswith((" ", "\t"))
    if trailing:
        tokens.append("")
    return tokens


class DebuggerCompleter(Completer):
    """Completes command names, ``info`` subcommands and ``$register`` names."""

    def __init__(self, ctx: DebuggerContext, registry: CommandRegistry) -> None:
        self.ctx = ctx
        self.registry = registry

    def get_completions(self, document: Document, complete_event) -> Iterable[Completion]:
        text = document.text_before_cursor
        tokens = _normalise_tokens(text)
        if len(tokens) <= 1:
            prefix = tokens[0] if tokens else ""
            for name in self.registry.names():
                if name.startswith(prefix):
                    yield Completion(name, start_position=-len(prefix))
            return
        command = self.registry.get(self.ctx.resolve_alias(tokens[0]))
        if command is None:
            return
        if command.name == "info" and len(tokens) == 2:
            for sub in INFO_SUBCOMMANDS:
                if sub.startswith(tokens[1]):
                    yield Completion(sub, start_position=-len(tokens[1]))
            return
        if command.name in EXPRESSION_COMMANDS:
            yield from self._register_completions(text)

    def _register_completions(self, text: str) -> Iterable[Completion]:
        match = _REGISTER_PREFIX.search(text)
        if match is None:
            return
        prefix = match.group(0)
        needle = prefix[len(REGISTER_SIGIL) :]
        for name in sorted(self.ctx.monitor.machine.registers.names()):
            if name.startswith(needle):
                yield Completion(REGISTER_SIGIL + name, start_position=-len(prefix))
