"""Watchpoint commands."""

from __future__ import annotations

from typing import List

from .base import Command, make_parser, parse_args
from .expression import report_expression_error
from ..context import DebuggerContext
from ..errors import ExpressionError
from ..output import emit_error, emit_result, render_watch_table
from ..parser import join_expression


class WatchCommand(Command):
    def __init__(self) -> None:
        super().__init__("watch", "Stop when the value of an expression changes", aliases=("w",), usage="EXPR")

    def run(self, ctx: DebuggerContext, argv: List[str]) -> int:
        text = join_expression(argv)
        if not text:
            emit_error(ctx, message="watch requires an expression")
            return 1
        try:
            watch_id = ctx.monitor.create_watch(text)
        except ExpressionError as exc:
            report_expression_error(ctx, text, exc)
            return 1
        watch = ctx.monitor.lookup_watch(watch_id)
        assert watch is not None
        emit_result(ctx, message=f"Watchpoint {watch_id}: {watch.expr}", data={"watch": watch.export()})
        return 0


class DeleteCommand(Command):
    def __init__(self) -> None:
        super().__init__("delete", "Delete a watchpoint", aliases=("d",), usage="ID")
        parser = make_parser("delete")
        parser.add_argument("watch_id", type=lambda text: int(text, 0))
        self._parser = parser

    def run(self, ctx: DebuggerContext, argv: List[str]) -> int:
        args = parse_args(self._parser, argv)
        if args is None:
            emit_error(ctx, message=f"invalid watchpoint number: {' '.join(argv)!r}")
            return 1
        if not ctx.monitor.delete_watch(args.watch_id):
            emit_error(ctx, message=f"watchpoint {args.watch_id} doesn't exist", data={"watch_id": args.watch_id})
            return 1
        emit_result(ctx, message=f"Watchpoint {args.watch_id} is deleted", data={"watch_id": args.watch_id})
        return 0


def list_watches(ctx: DebuggerContext) -> int:
    watches = ctx.monitor.list_watches()
    if ctx.json_output:
        emit_result(ctx, message="watchpoints", data={"watches": [watch.export() for watch in watches]})
    else:
        render_watch_table(watches)
    return 0
