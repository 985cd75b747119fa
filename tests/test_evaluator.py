"""Tests for expression evaluation and the shared numeric functions."""

import math

import pytest

from datatex._errors import DivisionByZeroError, InvalidArgumentError, NumericOverflowError
from datatex._expr import evaluate, normalize_number, parse_expression, power, round_value
from datatex._value import KeyPath


def run(text: str, **values: float) -> float:
    env_values = {KeyPath.parse(k.replace("__", ".")): v for k, v in values.items()}
    return evaluate(parse_expression(text).ast, env_values.__getitem__)


class TestArithmetic:
    def test_precedence(self) -> None:
        assert run("100 * 3") == 300
        assert run("1 + 2 * 3") == 7
        assert run("(1 + 2) * 3") == 9

    def test_left_associativity(self) -> None:
        assert run("8 - 4 - 2") == 2
        assert run("8 / 4 / 2") == 1

    def test_int_arithmetic_stays_int(self) -> None:
        result = run("1 + 2 * 3")
        assert result == 7
        assert isinstance(result, int)

    def test_division_is_true_division(self) -> None:
        assert run("7 / 2") == 3.5
        assert isinstance(run("4 / 2"), float)

    def test_unary_minus_equals_subtraction_from_zero(self) -> None:
        assert run("-1") == run("0-1") == -1
        assert run("-(2 + 3) * 2") == -10
        assert run("--4") == 4

    def test_references(self) -> None:
        assert run("100 * small / large", small=200, large=10000) == 2
        assert run("section.a + 1", section__a=1.5) == 2.5

    def test_division_by_zero(self) -> None:
        with pytest.raises(DivisionByZeroError, match="Division by zero"):
            run("1 / (2 - 2)")

    def test_non_finite_result(self) -> None:
        with pytest.raises(NumericOverflowError):
            run("big * big", big=1e308)

    def test_int_result_outside_double_range(self) -> None:
        with pytest.raises(NumericOverflowError, match="outside the range of a double"):
            run("big * big", big=10**200)

    def test_float_overflow_after_pow(self) -> None:
        with pytest.raises(NumericOverflowError):
            run("pow(2, 1023) * 2")


class TestBuiltins:
    def test_round(self) -> None:
        assert run("round(1.23, 1)") == 1.2
        assert run("round(1.23)") == 1
        assert isinstance(run("round(1.23)"), int)

    def test_pow_and_e(self) -> None:
        assert run("pow(10, 8)") == 100000000
        assert run("3 * E(2)") == 300
        assert run("E(-3)") == 0.001

    def test_round_with_fractional_decimals(self) -> None:
        with pytest.raises(InvalidArgumentError, match="must be an integer"):
            run("round(1.23, 0.5)")

    def test_pow_overflow(self) -> None:
        with pytest.raises(NumericOverflowError):
            run("pow(10, 400)")

    def test_pow_undefined(self) -> None:
        with pytest.raises(NumericOverflowError, match="undefined"):
            run("pow(0 - 8, 0.5)")


class TestRoundValue:
    def test_documented_examples(self) -> None:
        assert round_value(1883.8090928305920395, 2) == 1883.81
        assert round_value(1883.8090928305920395) == 1884
        assert round_value(58.242, -1) == 60
        assert round_value(8699, -3) == 9000

    @pytest.mark.parametrize(
        ("value", "decimals", "expected"),
        [
            (0.5, 0, 1),
            (1.5, 0, 2),
            (2.5, 0, 3),
            (-2.5, 0, -3),
            (1.005, 2, 1.01),
            (0.125, 2, 0.13),
            (-0.125, 2, -0.13),
            (25, -1, 30),
            (-25, -1, -30),
        ],
    )
    def test_half_away_from_zero(self, value: float, decimals: int, expected: float) -> None:
        assert round_value(value, decimals) == expected

    def test_integral_results_are_int(self) -> None:
        assert isinstance(round_value(2.0), int)
        assert isinstance(round_value(58.242, -1), int)
        assert isinstance(round_value(1.23, 1), float)

    def test_non_finite_rejected(self) -> None:
        with pytest.raises(NumericOverflowError):
            round_value(math.inf)


class TestPower:
    def test_integral_results_normalized(self) -> None:
        assert power(10, 8) == 100000000
        assert isinstance(power(10, 8), int)
        assert power(2, -1) == 0.5

    def test_normalize_number(self) -> None:
        assert normalize_number(3.0) == 3
        assert isinstance(normalize_number(3.0), int)
        assert normalize_number(3.5) == 3.5

    def test_large_integral_floats_stay_float(self) -> None:
        assert isinstance(normalize_number(float(2**53 - 1)), int)
        assert isinstance(normalize_number(float(2**53)), float)
        assert isinstance(power(10, 23), float)
        assert power(10, 23) == 1e23
