"""Exact decimal arithmetic for aggregate values.

Values are accepted as ``Decimal``, ``int``, ``float`` (converted through
``str`` so ``0.1`` stays ``0.1``) or numeric strings. Results are rounded
half-up and rendered in plain notation without trailing zeros.
"""

from __future__ import annotations

from decimal import MAX_PREC, ROUND_HALF_UP, Decimal, InvalidOperation, localcontext
from enum import Enum
from typing import Any

from .errors import DecimalConversionError

__all__ = [
    "SCALE",
    "CalculationMethod",
    "add",
    "calculate",
    "divide",
    "divide_ignore_zero",
    "multiply",
    "percentage_to_value",
    "scale_half_up",
    "subtract",
    "to_decimal",
    "to_plain_string",
    "value_to_percentage",
]

SCALE = 2
# Minimum working precision, also the guard digits kept when dividing
_PRECISION = 60
_HUNDRED = Decimal(100)


def to_decimal(value: Any) -> Decimal:
    """Interpret ``value`` as a finite decimal.

    Raises
    ------
    DecimalConversionError
        For ``None``, booleans, non-finite numbers and non-numeric values
    """
    if value is None or isinstance(value, bool):
        raise DecimalConversionError(value)
    if isinstance(value, Decimal):
        result = value
    elif isinstance(value, int):
        result = Decimal(value)
    elif isinstance(value, (float, str)):
        try:
            result = Decimal(str(value).strip())
        except InvalidOperation:
            raise DecimalConversionError(value, "not a number") from None
    else:
        raise DecimalConversionError(value)

    if not result.is_finite():
        raise DecimalConversionError(value, "not finite")
    return result


def _quantizer(scale: int) -> Decimal:
    return Decimal(1).scaleb(-scale)


def _quantize_precision(value: Decimal, scale: int) -> int:
    # quantize needs room for every integer digit plus ``scale`` fractional ones
    return max(_PRECISION, value.adjusted() + scale + 2)


def scale_half_up(value: Any, scale: int = SCALE, rounding: str = ROUND_HALF_UP) -> Decimal:
    """Round ``value`` to ``scale`` fractional digits."""
    value = to_decimal(value)
    with localcontext() as ctx:
        ctx.prec = _quantize_precision(value, scale)
        return value.quantize(_quantizer(scale), rounding=rounding)


def to_plain_string(value: Any) -> str:
    """Render ``value`` in plain notation with trailing zeros removed.

    >>> to_plain_string(Decimal("20.00"))
    '20'
    >>> to_plain_string(Decimal("1E+3"))
    '1000'
    """
    text = format(to_decimal(value), "f")
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    if text in ("", "-0"):
        return "0"
    return text


def add(*values: Any) -> Decimal:
    with localcontext() as ctx:
        ctx.prec = MAX_PREC
        total = Decimal(0)
        for value in values:
            total += to_decimal(value)
        return total


def subtract(a: Any, b: Any) -> Decimal:
    with localcontext() as ctx:
        ctx.prec = MAX_PREC
        return to_decimal(a) - to_decimal(b)


def multiply(a: Any, b: Any) -> Decimal:
    with localcontext() as ctx:
        ctx.prec = MAX_PREC
        return to_decimal(a) * to_decimal(b)


def divide(a: Any, b: Any, scale: int = SCALE, rounding: str = ROUND_HALF_UP) -> Decimal:
    """Divide ``a`` by ``b`` and round to ``scale`` digits.

    Raises
    ------
    ZeroDivisionError
        If ``b`` is zero
    """
    dividend = to_decimal(a)
    divisor = to_decimal(b)
    if divisor == 0:
        raise ZeroDivisionError(f"Cannot divide {a!r} by zero")
    with localcontext() as ctx:
        integer_digits = max(0, dividend.adjusted() - divisor.adjusted() + 1)
        ctx.prec = integer_digits + scale + _PRECISION
        return (dividend / divisor).quantize(_quantizer(scale), rounding=rounding)


def divide_ignore_zero(a: Any, b: Any, scale: int = SCALE, rounding: str = ROUND_HALF_UP) -> Decimal:
    """Like :func:`divide`, but a zero dividend or divisor yields zero."""
    if to_decimal(a) == 0 or to_decimal(b) == 0:
        return Decimal(0).quantize(_quantizer(scale))
    return divide(a, b, scale, rounding)


class CalculationMethod(Enum):
    """Binary operation selector for :func:`calculate`."""

    ADDITION = "addition"
    SUBTRACTION = "subtraction"
    MULTIPLICATION = "multiplication"
    DIVISION = "division"


def calculate(
    method: CalculationMethod | str,
    a: Any,
    b: Any,
    scale: int = SCALE,
    rounding: str = ROUND_HALF_UP,
) -> Decimal:
    """Apply ``method`` to ``a`` and ``b`` and round the result.

    Parameters
    ----------
    method
        Operation, as a member or its value (``"division"``)
    a, b
        Operands accepted by :func:`to_decimal`
    scale
        Fractional digits of the result
    rounding
        ``decimal`` rounding mode

    Returns
    -------
    Decimal
        Rounded result; division by zero yields zero
    """
    method = CalculationMethod(method)
    if method is CalculationMethod.ADDITION:
        result = add(a, b)
    elif method is CalculationMethod.SUBTRACTION:
        result = subtract(a, b)
    elif method is CalculationMethod.MULTIPLICATION:
        result = multiply(a, b)
    else:
        return divide_ignore_zero(a, b, scale, rounding)
    return scale_half_up(result, scale, rounding)


def value_to_percentage(value: Any, scale: int = SCALE) -> str:
    """Render a ratio as a percentage string (``0.1234`` -> ``"12.34%"``)."""
    percent = scale_half_up(multiply(value, _HUNDRED), scale)
    return f"{to_plain_string(percent)}%"


def percentage_to_value(percentage: Any, scale: int = SCALE + 2) -> Decimal:
    """Parse a percentage (``"12.5%"`` or ``12.5``) back into a ratio."""
    if isinstance(percentage, str):
        percentage = percentage.strip().rstrip("%")
    return divide(percentage, _HUNDRED, scale)
