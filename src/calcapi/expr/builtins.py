"""
Built-in functions for the calculator language.

The function table is built once at import time and never mutated, so
any number of concurrent evaluations can share it. Each implementation
receives the evaluated arguments and a BuiltinContext carrying the active
precision mode.

Transcendental functions and `pow` always compute in 64-bit floats, even
in high-precision mode; only `sqrt` has a high-precision variant.
"""

import math
import random
from dataclasses import dataclass, field
from decimal import Context, Decimal
from types import MappingProxyType
from typing import Callable, Mapping, Optional, Sequence, cast

from .errors import (
    ArityMismatchError,
    TypeMismatchError,
    UnknownFunctionError,
)
from .limits import DEFAULT_EXPRESSION_LIMITS, ExpressionLimits
from .values import (
    Value,
    from_float,
    get_type_name,
    make_working_context,
    to_float,
)

_INT64_MASK = (1 << 64) - 1
_INT64_SIGN = 1 << 63


@dataclass
class BuiltinContext:
    """Context passed to built-in functions."""

    high_precision: bool = False
    decimal_context: Context = field(default_factory=make_working_context)
    limits: ExpressionLimits = DEFAULT_EXPRESSION_LIMITS
    position: Optional[int] = None
    source: Optional[str] = None

    # Uniform [0, 1) source for `rand`
    random_source: Callable[[], float] = random.random


# Signature of a built-in function implementation.
BuiltinFunction = Callable[[Sequence[Value], BuiltinContext], Value]


@dataclass(frozen=True)
class Builtin:
    """A named, fixed-arity built-in function."""

    name: str
    arity: int
    implementation: BuiltinFunction


# Read-only mapping from function name to Builtin.
FunctionRegistry = Mapping[str, Builtin]


def _number_arg(args: Sequence[Value], index: int, function_name: str) -> Value:
    """Asserts that an argument is numeric."""
    value = args[index]
    if value.is_str:
        raise TypeMismatchError(function_name, "number", get_type_name(value))
    return value


def _real_arg(args: Sequence[Value], index: int, function_name: str) -> Decimal:
    """Returns the real component of a numeric argument."""
    return cast(Decimal, _number_arg(args, index, function_name).real)


# ============================================================
# IEEE 754 Helpers
# ============================================================
#
# The `math` module raises where IEEE 754 arithmetic produces a special
# value. These wrappers return the special value instead, so `log(0)` is
# -Inf, `sqrt(-1)` is NaN and an overflowing power is an infinity.


def _is_odd_integer(x: float) -> bool:
    return math.isfinite(x) and x == math.floor(x) and math.fmod(x, 2) != 0


def float_pow(base: float, exponent: float) -> float:
    """64-bit float power with IEEE 754 special values instead of errors."""
    try:
        return math.pow(base, exponent)
    except OverflowError:
        negative = base < 0 and _is_odd_integer(exponent)
        return -math.inf if negative else math.inf
    except ValueError:
        if base == 0:
            # Zero to a negative power; odd integer powers keep the zero's sign
            if _is_odd_integer(exponent):
                return math.copysign(math.inf, base)
            return math.inf
        return math.nan


def float_mod(x: float, y: float) -> float:
    """
    Truncated 64-bit float remainder for a non-zero divisor.

    An infinite dividend yields NaN.
    """
    try:
        return math.fmod(x, y)
    except ValueError:
        return math.nan


def _float_sqrt(x: float) -> float:
    return math.nan if x < 0 else math.sqrt(x)


def _float_log(x: float) -> float:
    if x == 0:
        return -math.inf
    if x < 0:
        return math.nan
    return math.log(x)


def _float_exp(x: float) -> float:
    try:
        return math.exp(x)
    except OverflowError:
        return math.inf


def _periodic(fn: Callable[[float], float]) -> Callable[[float], float]:
    """Wraps a trigonometric function so infinite inputs yield NaN."""

    def implementation(x: float) -> float:
        return math.nan if math.isinf(x) else fn(x)

    return implementation


def _unary_float(function_name: str, fn: Callable[[float], float]) -> BuiltinFunction:
    def implementation(args: Sequence[Value], ctx: BuiltinContext) -> Value:
        x = _real_arg(args, 0, function_name)
        return Value.number(from_float(fn(to_float(x))))

    implementation.__name__ = f"_{function_name}"
    implementation.__doc__ = f"{function_name}(x: number) -> number"
    return implementation


# ============================================================
# Numeric Helpers
# ============================================================


def _sqrt(args: Sequence[Value], ctx: BuiltinContext) -> Value:
    """
    sqrt(x: number) -> number

    High-precision mode takes the square root at working precision;
    standard mode converts to a 64-bit float first. Negative operands
    yield NaN in both modes.
    """
    x = _real_arg(args, 0, "sqrt")

    if ctx.high_precision:
        return Value.number(ctx.decimal_context.sqrt(x))

    return Value.number(from_float(_float_sqrt(to_float(x))))


def _pow(args: Sequence[Value], ctx: BuiltinContext) -> Value:
    """pow(base: number, exponent: number) -> number, in 64-bit floats."""
    base = _real_arg(args, 0, "pow")
    exponent = _real_arg(args, 1, "pow")
    return Value.number(from_float(float_pow(to_float(base), to_float(exponent))))


def _rand(args: Sequence[Value], ctx: BuiltinContext) -> Value:
    """rand() -> number - Uniform value in [0, 1)."""
    return Value.number(from_float(ctx.random_source()))


# ============================================================
# Complex Helpers
# ============================================================


def _complex(args: Sequence[Value], ctx: BuiltinContext) -> Value:
    """complex(re: number, im: number) -> number with an imaginary component."""
    real = _real_arg(args, 0, "complex")
    imag = _real_arg(args, 1, "complex")
    return Value.number(real, imag=imag)


def _re(args: Sequence[Value], ctx: BuiltinContext) -> Value:
    """re(z: number) -> number"""
    return Value.number(_real_arg(args, 0, "re"))


def _im(args: Sequence[Value], ctx: BuiltinContext) -> Value:
    """
    im(z: complex) -> number

    Only values built by `complex()` carry an imaginary component.
    """
    z = _number_arg(args, 0, "im")
    if z.imag is None:
        raise TypeMismatchError("im", "complex", get_type_name(z))
    return Value.number(z.imag)


# ============================================================
# String Helpers
# ============================================================


def string_hash(text: str) -> int:
    """
    Rolling hash `h = h*31 + codepoint` over `text`, wrapped to a signed
    64-bit integer at every step.
    """
    result = 0
    for ch in text:
        result = (result * 31 + ord(ch)) & _INT64_MASK
    return result - (1 << 64) if result & _INT64_SIGN else result


def _string(args: Sequence[Value], ctx: BuiltinContext) -> Value:
    """
    string(s: string) -> number

    Hashes a string to a number. This is not a string-to-number
    conversion: `string("12")` is not 12.
    """
    s = args[0]
    if not s.is_str:
        raise TypeMismatchError("string", "string", get_type_name(s))
    text = cast(str, s.text)
    return Value.number(Decimal(string_hash(text)), is_int=True)


# ============================================================
# Registry
# ============================================================


def _table(*builtins: Builtin) -> FunctionRegistry:
    return MappingProxyType({b.name: b for b in builtins})


# Registry of all built-in functions.
BUILTIN_FUNCTIONS: FunctionRegistry = _table(
    Builtin("sqrt", 1, _sqrt),
    Builtin("pow", 2, _pow),
    Builtin("rand", 0, _rand),
    Builtin("sin", 1, _unary_float("sin", _periodic(math.sin))),
    Builtin("cos", 1, _unary_float("cos", _periodic(math.cos))),
    Builtin("tan", 1, _unary_float("tan", _periodic(math.tan))),
    Builtin("log", 1, _unary_float("log", _float_log)),
    Builtin("exp", 1, _unary_float("exp", _float_exp)),
    Builtin("complex", 2, _complex),
    Builtin("re", 1, _re),
    Builtin("im", 1, _im),
    Builtin("string", 1, _string),
)


def lookup_builtin(
    name: str, functions: Optional[FunctionRegistry] = None
) -> Builtin:
    """
    Resolves a function name.

    Raises:
        UnknownFunctionError: If the name is not registered
    """
    functions = functions if functions is not None else BUILTIN_FUNCTIONS
    builtin = functions.get(name)
    if builtin is None:
        raise UnknownFunctionError(name)
    return builtin


def call_builtin(
    name: str,
    args: Sequence[Value],
    context: BuiltinContext,
    functions: Optional[FunctionRegistry] = None,
) -> Value:
    """
    Calls a built-in function by name.

    Args:
        name: The function name
        args: The evaluated arguments, in call order
        context: The builtin context (precision mode, decimal context)
        functions: Optional function registry (defaults to BUILTIN_FUNCTIONS)

    Returns:
        The function result

    Raises:
        UnknownFunctionError: If the function doesn't exist
        ArityMismatchError: If the argument count is wrong
        BuiltinError: If the function rejects its arguments
    """
    builtin = lookup_builtin(name, functions)
    if len(args) != builtin.arity:
        raise ArityMismatchError(name, builtin.arity, len(args))
    return builtin.implementation(args, context)
