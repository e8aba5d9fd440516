"""Execution control commands (stepi/continue)."""

from __future__ import annotations

from typing import List

from .base import Command, make_parser, parse_args
from ..context import DebuggerContext
from ..monitor import STOP_BUDGET, STOP_HALTED, NoCpuError, RunResult
from ..output import emit_error, emit_result


def _report(ctx: DebuggerContext, result: RunResult) -> int:
    if result.reason == STOP_HALTED:
        message = f"Program halted after {result.executed} instruction(s)"
    elif result.reason == STOP_BUDGET:
        message = f"Executed {result.executed} instruction(s)"
    else:
        message = f"Stopped by watchpoint after {result.executed} instruction(s)"
    emit_result(ctx, message=message, data=result.export())
    return 0


class StepCommand(Command):
    def __init__(self) -> None:
        super().__init__("stepi", "Step N instructions (default 1)", aliases=("si",), usage="[N]")
        parser = make_parser("stepi")
        parser.add_argument("count", nargs="?", type=lambda text: int(text, 0), default=1)
        self._parser = parser

    def run(self, ctx: DebuggerContext, argv: List[str]) -> int:
        args = parse_args(self._parser, argv)
        if args is None:
            return 1
        try:
            result = ctx.monitor.step(args.count)
        except NoCpuError as exc:
            emit_error(ctx, message=str(exc))
            return 2
        return _report(ctx, result)


class ContinueCommand(Command):
    def __init__(self) -> None:
        super().__init__("continue", "Continue the execution of the program", aliases=("c", "cont"))

    def run(self, ctx: DebuggerContext, argv: List[str]) -> int:
        try:
            result = ctx.monitor.continue_()
        except NoCpuError as exc:
            emit_error(ctx, message=str(exc))
            return 2
        return _report(ctx, result)
