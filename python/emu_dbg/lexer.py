"""Expression lexer.

Rules are tried in table order at the current position and the first match
wins, so two-character operators must precede their one-character prefixes
and hex literals must precede octal and decimal ones.
"""

from __future__ import annotations

import enum
import logging
import re
from dataclasses import dataclass
from typing import List, Optional, Pattern, Sequence, Tuple

from .config import DEFAULT_MAX_LEXEME
from .errors import LexemeTooLongError, LexError

LOGGER = logging.getLogger("emu_dbg.lexer")


class TokenKind(enum.Enum):
    SPACE = "space"
    # operators; the evaluator's precedence table is indexed in this order
    DEREF = "deref"
    NEG = "neg"
    NOT = "!"
    MUL = "*"
    DIV = "/"
    ADD = "+"
    SUB = "-"
    EQ = "=="
    NE = "!="
    LT = "<"
    LE = "<="
    GT = ">"
    GE = ">="
    AND = "&&"
    OR = "||"
    LPAREN = "("
    RPAREN = ")"
    END = "end"
    # operands
    REG = "reg"
    HEX = "hex"
    OCT = "oct"
    DEC = "dec"


OPERATOR_KINDS: Tuple[TokenKind, ...] = (
    TokenKind.DEREF,
    TokenKind.NEG,
    TokenKind.NOT,
    TokenKind.MUL,
    TokenKind.DIV,
    TokenKind.ADD,
    TokenKind.SUB,
    TokenKind.EQ,
    TokenKind.NE,
    TokenKind.LT,
    TokenKind.LE,
    TokenKind.GT,
    TokenKind.GE,
    TokenKind.AND,
    TokenKind.OR,
    TokenKind.LPAREN,
    TokenKind.RPAREN,
    TokenKind.END,
)

UNARY_KINDS = frozenset({TokenKind.DEREF, TokenKind.NEG, TokenKind.NOT})
OPERAND_KINDS = frozenset({TokenKind.REG, TokenKind.HEX, TokenKind.OCT, TokenKind.DEC})
REGISTER_SIGIL = "$"


@dataclass(frozen=True)
class Token:
    kind: TokenKind
    lexeme: str = ""
    offset: int = 0

    @property
    def is_operator(self) -> bool:
        return self.kind not in OPERAND_KINDS

    @property
    def is_operand(self) -> bool:
        return self.kind in OPERAND_KINDS


RULES: Sequence[Tuple[Pattern[str], TokenKind]] = tuple(
    (re.compile(pattern), kind)
    for pattern, kind in (
        (r"[ \t]+", TokenKind.SPACE),
        (r"\(", TokenKind.LPAREN),
        (r"\)", TokenKind.RPAREN),
        (r"\+", TokenKind.ADD),
        (r"-", TokenKind.SUB),
        (r"\*", TokenKind.MUL),
        (r"/", TokenKind.DIV),
        (r"==", TokenKind.EQ),
        (r"!=", TokenKind.NE),
        (r"<=", TokenKind.LE),
        (r">=", TokenKind.GE),
        (r">", TokenKind.GT),
        (r"<", TokenKind.LT),
        (r"&&", TokenKind.AND),
        (r"\|\|", TokenKind.OR),
        (r"!", TokenKind.NOT),
        (r"\$[A-Za-z0-9_]+", TokenKind.REG),
        (r"0[xX][0-9a-fA-F]+", TokenKind.HEX),
        (r"0[0-7]+", TokenKind.OCT),
        (r"[0-9]+", TokenKind.DEC),
    )
)


def _match_rule(text: str, position: int) -> Optional[Tuple[TokenKind, str]]:
    for pattern, kind in RULES:
        match = pattern.match(text, position)
        if match is not None and match.end() > position:
            return kind, match.group(0)
    return None


def tokenize(text: str, *, max_lexeme: int = DEFAULT_MAX_LEXEME) -> Tuple[Token, ...]:
    """Split *text* into tokens, terminated by an END token.

    Raises ``LexError`` when no rule matches and ``LexemeTooLongError`` when a
    matched lexeme is longer than *max_lexeme*.
    """
    tokens: List[Token] = []
    position = 0
    while position < len(text):
        matched = _match_rule(text, position)
        if matched is None:
            raise LexError(text, position)
        kind, lexeme = matched
        LOGGER.debug("match %s at position %d with len %d: %s", kind.name, position, len(lexeme), lexeme)
        if kind is not TokenKind.SPACE:
            if len(lexeme) > max_lexeme:
                raise LexemeTooLongError(lexeme, max_lexeme)
            tokens.append(Token(kind, lexeme, position))
        position += len(lexeme)
    tokens.append(Token(TokenKind.END, "", position))
    return tuple(tokens)


__all__ = [
    "Token",
    "TokenKind",
    "OPERATOR_KINDS",
    "UNARY_KINDS",
    "OPERAND_KINDS",
    "REGISTER_SIGIL",
    "RULES",
    "tokenize",
]
