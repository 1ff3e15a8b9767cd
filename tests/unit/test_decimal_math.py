"""Tests for exact decimal helpers."""

from decimal import Decimal

import pytest

from calstat.core import decimal_math
from calstat.core.decimal_math import CalculationMethod
from calstat.core.errors import DecimalConversionError


class TestToDecimal:
    def test_float_goes_through_str(self):
        assert decimal_math.to_decimal(0.1) == Decimal("0.1")

    def test_int_and_string(self):
        assert decimal_math.to_decimal(7) == Decimal(7)
        assert decimal_math.to_decimal(" 12.50 ") == Decimal("12.50")

    @pytest.mark.parametrize("value", [None, True, "abc", "NaN", float("inf"), object()])
    def test_rejects(self, value):
        with pytest.raises(DecimalConversionError):
            decimal_math.to_decimal(value)

    def test_error_is_arithmetic_error(self):
        with pytest.raises(ArithmeticError):
            decimal_math.to_decimal("twelve")


class TestRendering:
    def test_scale_half_up(self):
        assert decimal_math.scale_half_up("2.345") == Decimal("2.35")
        assert decimal_math.scale_half_up("2.344") == Decimal("2.34")
        assert decimal_math.scale_half_up("-2.345") == Decimal("-2.35")

    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            (Decimal("20.00"), "20"),
            (Decimal("3.30"), "3.3"),
            (Decimal("1E+3"), "1000"),
            (Decimal("0.00"), "0"),
            (Decimal("-0.00"), "0"),
            (Decimal("0.05"), "0.05"),
        ],
    )
    def test_to_plain_string(self, value, expected):
        assert decimal_math.to_plain_string(value) == expected


class TestArithmetic:
    def test_add_is_exact(self):
        assert decimal_math.add(0.1, 0.2) == Decimal("0.3")

    def test_divide_rounds(self):
        assert decimal_math.divide(10, 3) == Decimal("3.33")
        assert decimal_math.divide(2, 3, scale=4) == Decimal("0.6667")

    def test_divide_by_zero(self):
        with pytest.raises(ZeroDivisionError):
            decimal_math.divide(1, 0)

    def test_divide_ignore_zero(self):
        assert decimal_math.divide_ignore_zero(5, 0) == Decimal("0")
        assert decimal_math.divide_ignore_zero(0, 5) == Decimal("0")

    def test_large_values_stay_exact(self):
        big = 10**58

        assert decimal_math.to_plain_string(decimal_math.scale_half_up("1e58")) == "1" + "0" * 58
        assert decimal_math.add(big, "0.01") == Decimal("1" + "0" * 58 + ".01")
        assert decimal_math.divide(2 * big, 2) == Decimal(big)
        assert decimal_math.divide(10**80 + 1, 3) == Decimal("3" * 80 + ".67")

    @pytest.mark.parametrize(
        ("method", "expected"),
        [
            (CalculationMethod.ADDITION, Decimal("12.50")),
            (CalculationMethod.SUBTRACTION, Decimal("7.50")),
            (CalculationMethod.MULTIPLICATION, Decimal("25.00")),
            ("division", Decimal("4.00")),
        ],
    )
    def test_calculate(self, method, expected):
        assert decimal_math.calculate(method, "10", "2.5") == expected


class TestPercentages:
    def test_value_to_percentage(self):
        assert decimal_math.value_to_percentage("0.1234") == "12.34%"
        assert decimal_math.value_to_percentage(1) == "100%"

    def test_percentage_to_value(self):
        assert decimal_math.percentage_to_value("12.5%") == Decimal("0.1250")
        assert decimal_math.percentage_to_value(50) == Decimal("0.5000")
