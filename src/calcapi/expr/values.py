"""
Runtime value model for the calculator language.

A Value is either numeric (a Decimal real component, an optional
imaginary component set only by `complex()`) or a string. Numeric
payloads use `decimal.Decimal` so high-precision mode can carry more
digits than a double; standard mode stores the exact value of a double.
"""

from dataclasses import dataclass
from decimal import (
    MAX_EMAX,
    MIN_EMIN,
    ROUND_HALF_EVEN,
    Context,
    Decimal,
    DivisionByZero,
    Overflow,
)
from typing import Literal, Optional

# Working precision for arithmetic, in significant decimal digits
# (80 digits is a little over 256 bits).
WORKING_PRECISION = 80

ValueKind = Literal["number", "string"]


@dataclass(frozen=True)
class Value:
    """Tagged result of evaluating any expression node."""

    real: Optional[Decimal] = None
    imag: Optional[Decimal] = None
    text: Optional[str] = None
    is_str: bool = False
    is_int: bool = False

    def __post_init__(self) -> None:
        if self.is_str:
            if self.text is None or self.real is not None or self.imag is not None:
                raise ValueError("string values carry text and no numeric payload")
        elif self.real is None or self.text is not None:
            raise ValueError("numeric values carry a real component and no text")

    @classmethod
    def number(
        cls,
        real: Decimal,
        imag: Optional[Decimal] = None,
        is_int: bool = False,
    ) -> "Value":
        return cls(real=real, imag=imag, is_int=is_int)

    @classmethod
    def string(cls, text: str) -> "Value":
        return cls(text=text, is_str=True)

    @property
    def kind(self) -> ValueKind:
        return "string" if self.is_str else "number"

    def __str__(self) -> str:
        if self.is_str:
            return repr(self.text)
        if self.imag is not None:
            return f"complex({self.real}, {self.imag})"
        return str(self.real)


def get_type_name(value: Value) -> str:
    """Gets the type name of a value for error messages."""
    if value.is_str:
        return "string"
    if value.imag is not None:
        return "complex"
    return "number"


def make_working_context() -> Context:
    """
    Creates the decimal context used for one evaluation session.

    Contexts carry mutable flags, so each session gets its own. Invalid
    operations such as `Infinity - Infinity` or the square root of a
    negative number quietly yield NaN, as IEEE 754 floats do.
    """
    return Context(
        prec=WORKING_PRECISION,
        rounding=ROUND_HALF_EVEN,
        Emax=MAX_EMAX,
        Emin=MIN_EMIN,
        traps=[DivisionByZero, Overflow],
    )


def parse_number(text: str, high_precision: bool) -> Decimal:
    """
    Parses numeric literal text.

    High-precision mode keeps every digit of the literal; standard mode
    parses it as a 64-bit float first.
    """
    if high_precision:
        return Decimal(text)
    return Decimal(float(text))


def to_float(value: Decimal) -> float:
    """Converts a real component to a 64-bit float (round-half-even)."""
    return float(value)


def from_float(value: float) -> Decimal:
    """Wraps a 64-bit float as a real component, exactly."""
    return Decimal(value)


def round_to_double(value: Decimal) -> Decimal:
    """
    Rounds a working-precision result to double precision
    (53 significant bits, round-to-nearest-even).
    """
    return from_float(to_float(value))
