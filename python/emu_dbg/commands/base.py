"""Command base classes for emu-dbg."""

from __future__ import annotations

import argparse
from dataclasses import dataclass, field
from typing import List, Optional, Sequence

from ..context import DebuggerContext
from ..parser import split_command


@dataclass
class Command:
    """Abstract command description."""

    name: str
    description: str
    aliases: Sequence[str] = field(default_factory=tuple)
    usage: str = ""

    def run(self, ctx: DebuggerContext, argv: List[str]) -> int:
        raise NotImplementedError("Command must implement run()")

    def format_help(self) -> str:
        names = ", ".join([self.name, *self.aliases])
        usage = f" {self.usage}" if self.usage else ""
        return f"{names + usage:<28} {self.description}"

    def parse(self, line: str) -> List[str]:
        return split_command(line)


def make_parser(prog: str) -> argparse.ArgumentParser:
    return argparse.ArgumentParser(prog=prog, add_help=False)


def parse_args(parser: argparse.ArgumentParser, argv: List[str]) -> Optional[argparse.Namespace]:
    """Parse *argv*, returning None where argparse would exit."""
    try:
        return parser.parse_args(argv)
    except SystemExit:
        return None
