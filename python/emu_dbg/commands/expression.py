"""Expression commands: print and examine memory."""

from __future__ import annotations

from typing import List

from .base import Command
from ..context import DebuggerContext
from ..errors import ExpressionError, LexError
from ..output import emit_error, emit_result, format_value, render_words
from ..parser import join_expression


def report_expression_error(ctx: DebuggerContext, text: str, exc: ExpressionError) -> None:
    data = {"expr": text, "kind": type(exc).__name__}
    emit_error(ctx, message=f"invalid expression: {exc}", data=data)
    if isinstance(exc, LexError) and not ctx.json_output:
        print(exc.caret())


class PrintCommand(Command):
    def __init__(self) -> None:
        super().__init__("print", "Print the value of an expression", aliases=("p",), usage="EXPR")

    def run(self, ctx: DebuggerContext, argv: List[str]) -> int:
        text = join_expression(argv)
        if not text:
            emit_error(ctx, message="print requires an expression")
            return 1
        result = ctx.monitor.evaluate(text)
        if not result.success:
            assert result.error is not None
            report_expression_error(ctx, text, result.error)
            return 1
        assert result.value is not None
        emit_result(ctx, message=format_value(result.value), data={"expr": text, "value": result.value})
        return 0


class ExamineCommand(Command):
    def __init__(self) -> None:
        super().__init__("examine", "Examine N 32-bit words of memory", aliases=("x",), usage="N EXPR")

    def run(self, ctx: DebuggerContext, argv: List[str]) -> int:
        if len(argv) < 2:
            emit_error(ctx, message="usage: examine N EXPR")
            return 1
        try:
            count = int(argv[0], 0)
        except ValueError:
            emit_error(ctx, message=f"invalid count: {argv[0]!r}")
            return 1
        if count <= 0:
            emit_error(ctx, message="count must be positive")
            return 1
        text = join_expression(argv[1:])
        try:
            words = ctx.monitor.examine(count, text)
        except ExpressionError as exc:
            report_expression_error(ctx, text, exc)
            return 1
        if ctx.json_output:
            emit_result(
                ctx,
                message="memory",
                data={"words": [{"address": address, "value": value} for address, value in words]},
            )
        else:
            render_words(words)
        return 0
