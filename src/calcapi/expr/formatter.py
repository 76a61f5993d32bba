"""
Result formatting.

Renders a session's final Value as the caller-visible string:

- string values render their characters as-is
- high-precision mode renders the real component in fixed-point notation
  with 50 fractional digits, rounding half-to-even
- standard mode renders the real component as a 64-bit float with the
  shortest digits that round-trip, switching to exponent notation for
  decimal exponents below -4 or at 6 and above (`1e+06`, `1.5e-05`)

Trailing-zero trimming is left to callers.
"""

import math
from decimal import MAX_EMAX, MIN_EMIN, ROUND_HALF_EVEN, Context, Decimal
from typing import List, Tuple, cast

from .values import Value, to_float

HIGH_PRECISION_FRACTION_DIGITS = 50

# Decimal exponent at which standard mode switches to exponent notation
_EXPONENT_THRESHOLD = 6


def _format_non_finite(negative: bool, is_nan: bool) -> str:
    if is_nan:
        return "NaN"
    return "-Inf" if negative else "+Inf"


def format_fixed(
    value: Decimal, fraction_digits: int = HIGH_PRECISION_FRACTION_DIGITS
) -> str:
    """Fixed-point text with exactly `fraction_digits` digits, half-to-even."""
    if not value.is_finite():
        return _format_non_finite(value.is_signed(), value.is_nan())

    integer_digits = max(value.adjusted() + 1, 1)
    context = Context(
        prec=integer_digits + fraction_digits + 1,
        rounding=ROUND_HALF_EVEN,
        Emax=MAX_EMAX,
        Emin=MIN_EMIN,
    )
    quantum = Decimal(1).scaleb(-fraction_digits)
    return format(value.quantize(quantum, context=context), "f")


def _shortest_digits(value: float) -> Tuple[List[str], int]:
    """
    Returns the shortest round-trip significant digits of a positive
    finite float and the decimal exponent of the first digit.
    """
    _, digit_tuple, exponent = Decimal(repr(value)).as_tuple()
    digits = [str(d) for d in digit_tuple]
    while len(digits) > 1 and digits[-1] == "0":
        digits.pop()
        exponent += 1  # type: ignore[operator]
    return digits, len(digits) + int(exponent) - 1


def format_float(value: float) -> str:
    """Shortest round-trip rendering of a 64-bit float."""
    if math.isnan(value) or math.isinf(value):
        return _format_non_finite(value < 0, math.isnan(value))

    sign = "-" if math.copysign(1.0, value) < 0 else ""
    if value == 0:
        return sign + "0"

    digits, exponent = _shortest_digits(abs(value))

    if exponent < -4 or exponent >= _EXPONENT_THRESHOLD:
        mantissa = digits[0]
        if len(digits) > 1:
            mantissa += "." + "".join(digits[1:])
        exponent_sign = "-" if exponent < 0 else "+"
        return f"{sign}{mantissa}e{exponent_sign}{abs(exponent):02d}"

    point = exponent + 1
    if point <= 0:
        return sign + "0." + "0" * -point + "".join(digits)
    if point >= len(digits):
        return sign + "".join(digits) + "0" * (point - len(digits))
    return sign + "".join(digits[:point]) + "." + "".join(digits[point:])


def format_value(value: Value, high_precision: bool) -> str:
    """Renders a Value for the active precision mode."""
    if value.is_str:
        return cast(str, value.text)

    real = cast(Decimal, value.real)
    if high_precision:
        return format_fixed(real)
    return format_float(to_float(real))
