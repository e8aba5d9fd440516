"""Tests for the precedence-table evaluator."""

from __future__ import annotations

import pytest

from emu_dbg.errors import (
    DivisionByZeroError,
    LexError,
    MalformedExpressionError,
    MemoryAccessError,
    StackOverflowFault,
    UnbalancedParenthesisError,
    UnknownRegisterError,
)
from emu_dbg.evaluator import PRECEDENCE, Evaluator, precedence, promote_unary
from emu_dbg.lexer import OPERATOR_KINDS, TokenKind, tokenize


@pytest.fixture
def evaluator(machine):
    return Evaluator(machine.registers, machine.memory)


@pytest.mark.parametrize(
    "text, expected",
    [
        ("1+2*3", 7),
        ("(1+2)*3", 9),
        ("-3+4", 1),
        ("!0", 1),
        ("!5", 0),
        ("0x10", 16),
        ("020", 16),
        ("16", 16),
        ("10-4-3", 3),
        ("100/10/5", 2),
        ("7/2", 3),
        ("2*-3", 0xFFFFFFFA),
        ("--1", 1),
        ("!!7", 1),
        ("(1)-2", 0xFFFFFFFF),
        ("1<2 == 1", 1),
        ("3 > 2 && 2 > 3", 0),
        ("0 || 0 || 5", 1),
        ("1 || 0 && 0", 1),
        ("1+1 == 2", 1),
        ("4 <= 4", 1),
        ("5 >= 6", 0),
        ("5 != 6", 1),
    ],
)
def test_evaluate_values(evaluator, text, expected):
    assert evaluator.evaluate(text) == expected


def test_arithmetic_wraps_to_32_bits(evaluator):
    assert evaluator.evaluate("0xFFFFFFFF + 2") == 1
    assert evaluator.evaluate("0 - 1") == 0xFFFFFFFF
    assert evaluator.evaluate("0x10000 * 0x10000") == 0
    assert evaluator.evaluate("0x1FFFFFFFF") == 0xFFFFFFFF


def test_comparisons_are_unsigned(evaluator):
    assert evaluator.evaluate("-1 > 1") == 1


def test_registers_resolve_through_lookup(evaluator):
    assert evaluator.evaluate("$eax") == 5
    assert evaluator.evaluate("$eax * 2 + 1") == 11
    assert evaluator.evaluate("$bx") == 0x100


def test_unknown_register_fails(evaluator):
    with pytest.raises(UnknownRegisterError) as info:
        evaluator.evaluate("$foo + 1")
    assert info.value.name == "foo"


def test_dereference_reads_little_endian_word(evaluator):
    assert evaluator.evaluate("*0x100") == 0xDEADBEEF
    assert evaluator.evaluate("*$esp") == 42
    assert evaluator.evaluate("**0x104") == 0x104
    assert evaluator.evaluate("*($ebx + 4) + 1") == 0x105


def test_dereference_binds_tighter_than_multiplication(evaluator):
    assert evaluator.evaluate("2 * *$esp") == 84


def test_dereference_out_of_range_fails(evaluator):
    with pytest.raises(MemoryAccessError):
        evaluator.evaluate("*0xFFFFFFF0")


def test_division_by_zero_is_an_error(evaluator):
    with pytest.raises(DivisionByZeroError):
        evaluator.evaluate("1/0")
    with pytest.raises(DivisionByZeroError):
        evaluator.evaluate("1/($eax-5)")


@pytest.mark.parametrize("text", ["(1+2", "((1)", "(", "1)", "(1))"])
def test_unbalanced_parentheses(evaluator, text):
    with pytest.raises(UnbalancedParenthesisError):
        evaluator.evaluate(text)


def test_adjacent_operands_are_malformed_before_stack_limit(evaluator):
    with pytest.raises(MalformedExpressionError, match="missing operator"):
        evaluator.evaluate(" ".join(["1"] * 40))


def test_trailing_not_reports_missing_operand(evaluator):
    with pytest.raises(MalformedExpressionError, match="missing operand for '!'"):
        evaluator.evaluate("5 !")


@pytest.mark.parametrize(
    "text",
    ["", "1 2", "+", "1 +", "1 * / 2", "()", "!", "$eax $ebx", "5 !", "1 + 2 !", "($eax !)", "1 (2)", "(1) 2"],
)
def test_malformed_expressions(evaluator, text):
    with pytest.raises(MalformedExpressionError):
        evaluator.evaluate(text)


def test_lex_errors_propagate(evaluator):
    with pytest.raises(LexError):
        evaluator.evaluate("1 ? 2")


def test_deep_nesting_faults(machine):
    evaluator = Evaluator(machine.registers, machine.memory, stack_depth=8)
    assert evaluator.evaluate("(((((1)))))") == 1
    with pytest.raises(StackOverflowFault):
        evaluator.evaluate("(" * 10 + "1" + ")" * 10)


def test_evaluation_is_repeatable(evaluator):
    assert evaluator.evaluate("$eax * 3 + (2 - 1)") == evaluator.evaluate("$eax * 3 + (2 - 1)")


def test_unary_promotion_positions():
    promoted = promote_unary(tokenize("-1 - -(2) * *3"))
    kinds = [token.kind for token in promoted]
    assert kinds == [
        TokenKind.NEG,
        TokenKind.DEC,
        TokenKind.SUB,
        TokenKind.NEG,
        TokenKind.LPAREN,
        TokenKind.DEC,
        TokenKind.RPAREN,
        TokenKind.MUL,
        TokenKind.DEREF,
        TokenKind.DEC,
        TokenKind.END,
    ]


def test_precedence_table_is_complete():
    assert set(PRECEDENCE) == set(OPERATOR_KINDS)
    for row in PRECEDENCE.values():
        assert set(row) == set(OPERATOR_KINDS)
        assert set(row.values()) <= {"<", ">", "=", "."}
    assert precedence(TokenKind.LPAREN, TokenKind.RPAREN) == "="
    assert precedence(TokenKind.END, TokenKind.END) == "="
    assert precedence(TokenKind.END, TokenKind.RPAREN) == "."
    assert precedence(TokenKind.ADD, TokenKind.MUL) == "<"
    assert precedence(TokenKind.MUL, TokenKind.ADD) == ">"
    assert precedence(TokenKind.NEG, TokenKind.NEG) == "<"
