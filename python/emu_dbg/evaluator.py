"""Operator-precedence expression evaluator.

Tokens are consumed online with an operator stack and an operand stack; no
tree is built.  The action for each (stack top, incoming) operator pair
comes from ``PRECEDENCE`` below:

    <  shift   push the incoming operator and advance
    >  reduce  pop the top operator, apply it, retry the incoming token
    =  match   pop the top operator and advance ("(" with ")", END with END)
    .  error

Unary operators bind tighter than every binary operator and associate to
the right; all binary operators associate to the left.  Relational
operators share one level, below additive and above ``&&``.
"""

from __future__ import annotations

import logging
import operator
from dataclasses import dataclass
from typing import Callable, Dict, Generic, List, Optional, Sequence, TypeVar

from .config import DEFAULT_MAX_LEXEME, DEFAULT_STACK_DEPTH
from .errors import (
    DivisionByZeroError,
    MalformedExpressionError,
    StackOverflowFault,
    UnbalancedParenthesisError,
    UnknownRegisterError,
)
from .lexer import OPERATOR_KINDS, REGISTER_SIGIL, UNARY_KINDS, Token, TokenKind, tokenize
from .machine import MASK32, WORD_BYTES, MemoryReader, RegisterLookup

LOGGER = logging.getLogger("emu_dbg.evaluator")

SHIFT = "<"
REDUCE = ">"
MATCH = "="
ERROR = "."

#                   D N !  * /  + -  == != < <= > >=  && ||  ( ) $
_ROWS: Dict[TokenKind, str] = {
    TokenKind.DEREF:  "<<< >> >> >>>>>> >> <>>",
    TokenKind.NEG:    "<<< >> >> >>>>>> >> <>>",
    TokenKind.NOT:    "<<< >> >> >>>>>> >> <>>",
    TokenKind.MUL:    "<<< >> >> >>>>>> >> <>>",
    TokenKind.DIV:    "<<< >> >> >>>>>> >> <>>",
    TokenKind.ADD:    "<<< << >> >>>>>> >> <>>",
    TokenKind.SUB:    "<<< << >> >>>>>> >> <>>",
    TokenKind.EQ:     "<<< << << >>>>>> >> <>>",
    TokenKind.NE:     "<<< << << >>>>>> >> <>>",
    TokenKind.LT:     "<<< << << >>>>>> >> <>>",
    TokenKind.LE:     "<<< << << >>>>>> >> <>>",
    TokenKind.GT:     "<<< << << >>>>>> >> <>>",
    TokenKind.GE:     "<<< << << >>>>>> >> <>>",
    TokenKind.AND:    "<<< << << <<<<<< >> <>>",
    TokenKind.OR:     "<<< << << <<<<<< <> <>>",
    TokenKind.LPAREN: "<<< << << <<<<<< << <=.",
    TokenKind.RPAREN: "... .. .. ...... .. ...",
    TokenKind.END:    "<<< << << <<<<<< << <.=",
}

PRECEDENCE: Dict[TokenKind, Dict[TokenKind, str]] = {
    top: dict(zip(OPERATOR_KINDS, row.replace(" ", ""))) for top, row in _ROWS.items()
}


def precedence(top: TokenKind, incoming: TokenKind) -> str:
    """Return the table action for the stack top against the incoming operator."""
    return PRECEDENCE[top][incoming]


def _divide(left: int, right: int) -> int:
    if right == 0:
        raise DivisionByZeroError()
    return left // right


BINARY_OPERATIONS: Dict[TokenKind, Callable[[int, int], int]] = {
    TokenKind.MUL: operator.mul,
    TokenKind.DIV: _divide,
    TokenKind.ADD: operator.add,
    TokenKind.SUB: operator.sub,
    TokenKind.EQ: lambda a, b: int(a == b),
    TokenKind.NE: lambda a, b: int(a != b),
    TokenKind.LT: lambda a, b: int(a < b),
    TokenKind.LE: lambda a, b: int(a <= b),
    TokenKind.GT: lambda a, b: int(a > b),
    TokenKind.GE: lambda a, b: int(a >= b),
    TokenKind.AND: lambda a, b: int(bool(a) and bool(b)),
    TokenKind.OR: lambda a, b: int(bool(a) or bool(b)),
}

_PREFIX_ONLY_KINDS = UNARY_KINDS | {TokenKind.LPAREN}

T = TypeVar("T")


class BoundedStack(Generic[T]):
    """List-backed stack that faults instead of growing past ``depth``."""

    def __init__(self, name: str, depth: int) -> None:
        self.name = name
        self.depth = depth
        self._items: List[T] = []

    def push(self, item: T) -> None:
        if len(self._items) >= self.depth:
            raise StackOverflowFault(self.name, self.depth)
        self._items.append(item)

    def pop(self) -> T:
        return self._items.pop()

    def top(self) -> T:
        return self._items[-1]

    def __len__(self) -> int:
        return len(self._items)

    def __bool__(self) -> bool:
        return bool(self._items)


def promote_unary(tokens: Sequence[Token]) -> List[Token]:
    """Rewrite prefix ``-`` and ``*`` into negate and dereference.

    A token is in prefix position when it starts the expression or follows
    an operator or ``(``; after an operand or ``)`` it stays binary.
    """
    promoted: List[Token] = []
    previous: Optional[Token] = None
    for token in tokens:
        prefix = previous is None or (previous.is_operator and previous.kind is not TokenKind.RPAREN)
        if prefix and token.kind is TokenKind.SUB:
            token = Token(TokenKind.NEG, token.lexeme, token.offset)
        elif prefix and token.kind is TokenKind.MUL:
            token = Token(TokenKind.DEREF, token.lexeme, token.offset)
        promoted.append(token)
        previous = token
    return promoted


def parse_literal(token: Token) -> int:
    """Return the 32-bit value of a numeric literal; wider values wrap."""
    if token.kind is TokenKind.HEX:
        value = int(token.lexeme, 16)
    elif token.kind is TokenKind.OCT:
        value = int(token.lexeme, 8)
    elif token.kind is TokenKind.DEC:
        value = int(token.lexeme, 10)
    else:
        raise ValueError(f"not a literal: {token.kind.name}")
    return value & MASK32


@dataclass
class _EvalState:
    """Per-call evaluation state; never shared between calls."""

    operators: BoundedStack[Token]
    operands: BoundedStack[int]


class Evaluator:
    """Evaluate expressions over a register file and a memory reader."""

    def __init__(
        self,
        registers: RegisterLookup,
        memory: MemoryReader,
        *,
        stack_depth: int = DEFAULT_STACK_DEPTH,
        max_lexeme: int = DEFAULT_MAX_LEXEME,
    ) -> None:
        self.registers = registers
        self.memory = memory
        self.stack_depth = stack_depth
        self.max_lexeme = max_lexeme

    def evaluate(self, text: str) -> int:
        """Return the value of *text*, raising ``ExpressionError`` on failure."""
        tokens = promote_unary(tokenize(text, max_lexeme=self.max_lexeme))
        return self.evaluate_tokens(tokens)

    def evaluate_tokens(self, tokens: Sequence[Token]) -> int:
        if not tokens or tokens[-1].kind is not TokenKind.END:
            tokens = list(tokens) + [Token(TokenKind.END)]
        state = _EvalState(
            operators=BoundedStack("operator", self.stack_depth),
            operands=BoundedStack("operand", self.stack_depth),
        )
        state.operators.push(Token(TokenKind.END))
        index = 0
        # True once an operand or ")" has been consumed and a binary
        # operator, ")" or the end must follow.
        after_operand = False
        while state.operators:
            token = tokens[index]
            if after_operand and (token.is_operand or token.kind in _PREFIX_ONLY_KINDS):
                self._raise_misplaced(token)
            if token.is_operand:
                state.operands.push(self._resolve_operand(token))
                after_operand = True
                index += 1
                continue
            top = state.operators.top()
            action = precedence(top.kind, token.kind)
            if action == SHIFT:
                state.operators.push(token)
                after_operand = False
                index += 1
            elif action == REDUCE:
                self._reduce(state, state.operators.pop())
            elif action == MATCH:
                state.operators.pop()
                after_operand = True
                index += 1
            else:
                self._raise_for(top, token)
        if len(state.operands) != 1:
            raise MalformedExpressionError(
                "empty expression" if not state.operands else "missing operator between operands"
            )
        return state.operands.pop()

    def _resolve_operand(self, token: Token) -> int:
        if token.kind is TokenKind.REG:
            name = token.lexeme[len(REGISTER_SIGIL) :]
            value = self.registers.lookup(name)
            if value is None:
                raise UnknownRegisterError(name)
            return int(value) & MASK32
        return parse_literal(token)

    def _reduce(self, state: _EvalState, op: Token) -> None:
        if op.kind in UNARY_KINDS:
            if not state.operands:
                raise MalformedExpressionError(f"missing operand for '{op.lexeme}' at position {op.offset}")
            state.operands.push(self._apply_unary(op.kind, state.operands.pop()))
            return
        if len(state.operands) < 2:
            raise MalformedExpressionError(f"missing operand for '{op.lexeme}' at position {op.offset}")
        right = state.operands.pop()
        left = state.operands.pop()
        state.operands.push(BINARY_OPERATIONS[op.kind](left, right) & MASK32)

    def _apply_unary(self, kind: TokenKind, value: int) -> int:
        if kind is TokenKind.NEG:
            return -value & MASK32
        if kind is TokenKind.NOT:
            return int(not value)
        data = self.memory.read(value, WORD_BYTES)
        return int.from_bytes(data, "little")

    @staticmethod
    def _raise_misplaced(token: Token) -> None:
        if token.kind in UNARY_KINDS:
            raise MalformedExpressionError(f"missing operand for '{token.lexeme}' at position {token.offset}")
        raise MalformedExpressionError(f"missing operator before '{token.lexeme}' at position {token.offset}")

    @staticmethod
    def _raise_for(top: Token, token: Token) -> None:
        if top.kind is TokenKind.LPAREN and token.kind is TokenKind.END:
            raise UnbalancedParenthesisError(f"unclosed '(' at position {top.offset}")
        if top.kind is TokenKind.END and token.kind is TokenKind.RPAREN:
            raise UnbalancedParenthesisError(f"unmatched ')' at position {token.offset}")
        raise MalformedExpressionError(f"unexpected '{token.lexeme or token.kind.value}' at position {token.offset}")


__all__ = [
    "BINARY_OPERATIONS",
    "BoundedStack",
    "Evaluator",
    "PRECEDENCE",
    "parse_literal",
    "precedence",
    "promote_unary",
]
