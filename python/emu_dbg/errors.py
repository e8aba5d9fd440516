"""Exception hierarchy for emu-dbg.

Two tiers: ``ExpressionError`` covers per-invocation failures that the
command layer reports and survives; ``FatalError`` covers invariant
violations that abort the debugger.
"""

from __future__ import annotations

from typing import Optional


class ExpressionError(Exception):
    """Raised when an expression cannot be evaluated."""


class LexError(ExpressionError):
    """No lexer rule matches at ``offset``."""

    def __init__(self, text: str, offset: int) -> None:
        self.text = text
        self.offset = offset
        self.remainder = text[offset:]
        super().__init__(f"no match at position {offset}: {self.remainder!r}")

    def caret(self) -> str:
        """Render the input with a caret under the failing offset."""
        return f"{self.text}\n{' ' * self.offset}^"


class LexemeTooLongError(ExpressionError):
    def __init__(self, lexeme: str, limit: int) -> None:
        self.lexeme = lexeme
        self.limit = limit
        super().__init__(f"token {lexeme[:limit]!r}... exceeds {limit} characters")


class UnknownRegisterError(ExpressionError):
    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"unknown register '${name}'")


class UnbalancedParenthesisError(ExpressionError):
    """Raised for an unclosed '(' or a stray ')'."""


class MalformedExpressionError(ExpressionError):
    """Raised for missing operands, adjacent operands and similar."""


class DivisionByZeroError(ExpressionError):
    def __init__(self) -> None:
        super().__init__("division by zero")


class MemoryAccessError(ExpressionError):
    def __init__(self, address: int, length: int, *, size: Optional[int] = None) -> None:
        self.address = address
        self.length = length
        detail = f" (memory size 0x{size:X})" if size is not None else ""
        super().__init__(f"memory access out of range: 0x{address:08X}+{length}{detail}")


class FatalError(RuntimeError):
    """An invariant violation; the debugger must not continue."""


class PoolExhaustedError(FatalError):
    def __init__(self, capacity: int) -> None:
        self.capacity = capacity
        super().__init__(f"there is no more watchpoint (capacity {capacity})")


class StackOverflowFault(FatalError):
    def __init__(self, name: str, depth: int) -> None:
        self.depth = depth
        super().__init__(f"{name} stack overflow (depth {depth})")


class WatchEvaluationFault(FatalError):
    def __init__(self, watch_id: int, expr: str, cause: ExpressionError) -> None:
        self.watch_id = watch_id
        self.expr = expr
        self.cause = cause
        super().__init__(f"watchpoint {watch_id} expression {expr!r} became invalid: {cause}")


__all__ = [
    "ExpressionError",
    "LexError",
    "LexemeTooLongError",
    "UnknownRegisterError",
    "UnbalancedParenthesisError",
    "MalformedExpressionError",
    "DivisionByZeroError",
    "MemoryAccessError",
    "FatalError",
    "PoolExhaustedError",
    "StackOverflowFault",
    "WatchEvaluationFault",
]
