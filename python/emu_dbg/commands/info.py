"""Info command."""

from __future__ import annotations

from typing import List

from .base import Command, make_parser, parse_args
from .watch import list_watches
from ..context import DebuggerContext
from ..output import emit_result, render_registers


class InfoCommand(Command):
    def __init__(self) -> None:
        super().__init__("info", "r: list registers; w: list watchpoints", usage="r|w")
        parser = make_parser("info")
        parser.add_argument("subcmd", choices=["r", "registers", "w", "watchpoints"])
        self._parser = parser

    def run(self, ctx: DebuggerContext, argv: List[str]) -> int:
        args = parse_args(self._parser, argv)
        if args is None:
            return 1
        if args.subcmd in ("w", "watchpoints"):
            return list_watches(ctx)
        registers = ctx.monitor.machine.registers.snapshot()
        if ctx.json_output:
            emit_result(ctx, message="registers", data={"registers": registers})
        else:
            render_registers(registers)
        return 0
