"""Tests for the expression lexer."""

from __future__ import annotations

import pytest

from emu_dbg.errors import LexemeTooLongError, LexError
from emu_dbg.lexer import TokenKind, tokenize


def _kinds(text: str):
    return [token.kind for token in tokenize(text)]


def test_tokenize_terminates_with_end_sentinel():
    tokens = tokenize("1")
    assert [t.kind for t in tokens] == [TokenKind.DEC, TokenKind.END]
    assert tokens[-1].offset == 1


def test_whitespace_emits_no_tokens():
    assert _kinds("  1 +\t2 ") == [TokenKind.DEC, TokenKind.ADD, TokenKind.DEC, TokenKind.END]


def test_two_character_operators_win_over_prefixes():
    assert _kinds("1<=2") == [TokenKind.DEC, TokenKind.LE, TokenKind.DEC, TokenKind.END]
    assert _kinds("1>=2") == [TokenKind.DEC, TokenKind.GE, TokenKind.DEC, TokenKind.END]
    assert _kinds("1!=2") == [TokenKind.DEC, TokenKind.NE, TokenKind.DEC, TokenKind.END]
    assert _kinds("!1") == [TokenKind.NOT, TokenKind.DEC, TokenKind.END]


def test_literal_forms_are_distinguished():
    assert _kinds("0x10 020 16 0") == [TokenKind.HEX, TokenKind.OCT, TokenKind.DEC, TokenKind.DEC, TokenKind.END]


def test_octal_rule_does_not_swallow_decimal_digits():
    tokens = tokenize("09")
    assert tokens[0].kind is TokenKind.DEC
    assert tokens[0].lexeme == "09"


def test_register_reference_stops_at_operator():
    tokens = tokenize("$eax+1")
    assert tokens[0].kind is TokenKind.REG
    assert tokens[0].lexeme == "$eax"
    assert tokens[1].kind is TokenKind.ADD


def test_minus_and_star_are_lexed_as_binary_forms():
    assert _kinds("-*1") == [TokenKind.SUB, TokenKind.MUL, TokenKind.DEC, TokenKind.END]


def test_lex_error_reports_offset_and_remainder():
    with pytest.raises(LexError) as info:
        tokenize("1 + @foo")
    assert info.value.offset == 4
    assert info.value.remainder == "@foo"
    assert info.value.caret().splitlines()[1] == "    ^"


def test_bare_sigil_is_a_lex_error():
    with pytest.raises(LexError):
        tokenize("$")


def test_lexeme_over_limit_is_rejected():
    tokenize("1" * 31)
    with pytest.raises(LexemeTooLongError):
        tokenize("1" * 32)
