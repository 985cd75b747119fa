"""Tests for tokenizing and parsing expression text."""

import pytest

from datatex._errors import ExpressionSyntaxError, NumericOverflowError
from datatex._expr import (
    BinaryOp,
    BinaryOperator,
    Call,
    Negate,
    NumberLiteral,
    Reference,
    TokenKind,
    parse_expression,
    tokenize,
)
from datatex._value import KeyPath


def ref(path: str) -> Reference:
    return Reference(KeyPath.parse(path))


class TestTokenize:
    def test_kinds(self) -> None:
        tokens = tokenize("round(a.b, 2) * 1.5e3")
        assert [t.kind for t in tokens] == [
            TokenKind.IDENT,
            TokenKind.LPAREN,
            TokenKind.IDENT,
            TokenKind.COMMA,
            TokenKind.NUMBER,
            TokenKind.RPAREN,
            TokenKind.OPERATOR,
            TokenKind.NUMBER,
            TokenKind.END,
        ]
        assert tokens[2].text == "a.b"
        assert tokens[7].text == "1.5e3"

    def test_array_index_segment(self) -> None:
        assert tokenize("items.0.value")[0].text == "items.0.value"

    def test_unexpected_character_reports_column(self) -> None:
        with pytest.raises(ExpressionSyntaxError) as exc_info:
            tokenize("1 + $x", source="section.value")
        assert exc_info.value.location.column == 5
        assert exc_info.value.location.source == "section.value"


class TestParsePrecedence:
    def test_multiplication_binds_tighter(self) -> None:
        ast = parse_expression("1 + 2 * 3").ast
        assert ast == BinaryOp(
            BinaryOperator.ADD,
            NumberLiteral(1),
            BinaryOp(BinaryOperator.MULTIPLY, NumberLiteral(2), NumberLiteral(3)),
        )

    def test_left_associative(self) -> None:
        ast = parse_expression("8 - 4 - 2").ast
        assert ast == BinaryOp(
            BinaryOperator.SUBTRACT,
            BinaryOp(BinaryOperator.SUBTRACT, NumberLiteral(8), NumberLiteral(4)),
            NumberLiteral(2),
        )

    def test_parentheses(self) -> None:
        ast = parse_expression("(1 + 2) * 3").ast
        assert isinstance(ast, BinaryOp)
        assert ast.op is BinaryOperator.MULTIPLY

    def test_unary_minus(self) -> None:
        assert parse_expression("-1").ast == Negate(NumberLiteral(1))
        assert parse_expression("2 * -x").ast == BinaryOp(BinaryOperator.MULTIPLY, NumberLiteral(2), Negate(ref("x")))

    def test_number_literals(self) -> None:
        assert parse_expression("12").ast == NumberLiteral(12)
        assert parse_expression(".5").ast == NumberLiteral(0.5)
        assert parse_expression("1e-3").ast == NumberLiteral(0.001)

    @pytest.mark.parametrize("text", ["1e400", "1" + "0" * 400])
    def test_literal_outside_double_range(self, text: str) -> None:
        with pytest.raises(NumericOverflowError, match="Number literal"):
            parse_expression(f"{text} + 1")


class TestParseReferences:
    def test_references_in_first_appearance_order(self) -> None:
        expression = parse_expression("100 * small / large + small")
        assert expression.references == (KeyPath.parse("small"), KeyPath.parse("large"))

    def test_dotted_reference(self) -> None:
        expression = parse_expression("nested_expressions.value_sum * 2")
        assert expression.references == (KeyPath.parse("nested_expressions.value_sum"),)

    def test_references_inside_calls(self) -> None:
        expression = parse_expression("round(a / b, digits)")
        assert [str(p) for p in expression.references] == ["a", "b", "digits"]

    def test_text_is_stripped(self) -> None:
        assert parse_expression("  1 + 2 ").text == "1 + 2"


class TestParseCalls:
    def test_call(self) -> None:
        ast = parse_expression("round(1.23, 1)").ast
        assert ast == Call("round", (NumberLiteral(1.23), NumberLiteral(1)))

    def test_nested_call(self) -> None:
        ast = parse_expression("3 * E(2)").ast
        assert ast == BinaryOp(BinaryOperator.MULTIPLY, NumberLiteral(3), Call("E", (NumberLiteral(2),)))

    def test_unknown_function(self) -> None:
        with pytest.raises(ExpressionSyntaxError, match="Unknown function 'sqrt'"):
            parse_expression("sqrt(4)")

    @pytest.mark.parametrize("text", ["pow(2)", "E(1, 2)", "round(1, 2, 3)"])
    def test_wrong_arity(self, text: str) -> None:
        with pytest.raises(ExpressionSyntaxError, match=r"takes .* argument\(s\)"):
            parse_expression(text)


class TestParseErrors:
    @pytest.mark.parametrize(
        ("text", "message"),
        [
            ("", "Empty expression"),
            ("1 +", "Expected a number"),
            ("(1 + 2", "Expected '\\)'"),
            ("1 2", "Unexpected '2'"),
            ("a..b", "Unexpected"),
            ("round(1,)", "Expected a number"),
        ],
    )
    def test_malformed(self, text: str, message: str) -> None:
        with pytest.raises(ExpressionSyntaxError, match=message):
            parse_expression(text)

    def test_error_column(self) -> None:
        with pytest.raises(ExpressionSyntaxError) as exc_info:
            parse_expression("1 + * 2")
        assert exc_info.value.location.column == 5
