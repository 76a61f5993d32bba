"""
Tests for built-in functions.
"""

import math
from decimal import Decimal

import pytest

from calcapi.expr import (
    BUILTIN_FUNCTIONS,
    ArityMismatchError,
    BuiltinContext,
    TypeMismatchError,
    UnknownFunctionError,
    Value,
    call_builtin,
    lookup_builtin,
    string_hash,
)
from calcapi.expr.builtins import float_mod, float_pow


def num(x) -> Value:
    """Helper to build a numeric Value."""
    return Value.number(Decimal(x))


def call(name: str, *args: Value, high_precision: bool = False, **kwargs) -> Value:
    """Helper to call a builtin with a fresh context."""
    context = BuiltinContext(high_precision=high_precision, **kwargs)
    return call_builtin(name, list(args), context)


class TestRegistry:
    """Tests for the function table."""

    def test_contains_every_builtin(self):
        assert set(BUILTIN_FUNCTIONS) == {
            "sqrt",
            "pow",
            "rand",
            "sin",
            "cos",
            "tan",
            "log",
            "exp",
            "complex",
            "re",
            "im",
            "string",
        }

    def test_registry_is_read_only(self):
        with pytest.raises(TypeError):
            BUILTIN_FUNCTIONS["evil"] = BUILTIN_FUNCTIONS["sqrt"]  # type: ignore[index]

    def test_names_are_case_sensitive(self):
        assert lookup_builtin("sqrt").name == "sqrt"
        with pytest.raises(UnknownFunctionError):
            lookup_builtin("SQRT")

    def test_unknown_function(self):
        with pytest.raises(UnknownFunctionError, match="Unknown function: nope"):
            call("nope")

    @pytest.mark.parametrize("name", sorted(BUILTIN_FUNCTIONS))
    def test_rejects_wrong_argument_count(self, name):
        arity = BUILTIN_FUNCTIONS[name].arity
        args = [num(1)] * (arity + 1)
        with pytest.raises(ArityMismatchError) as info:
            call(name, *args)
        assert info.value.function_name == name
        assert info.value.expected == arity
        assert info.value.got == arity + 1
        assert str(info.value) == (
            f"{name}: expected {arity} argument(s), got {arity + 1}"
        )


class TestNumeric:
    """Tests for numeric builtins."""

    def test_sqrt(self):
        assert call("sqrt", num(16)).real == 4

    def test_sqrt_high_precision_keeps_digits(self):
        result = call("sqrt", num(2), high_precision=True).real
        assert result is not None
        assert str(result).startswith(
            "1.41421356237309504880168872420969807856967187537694"
        )

    def test_sqrt_of_negative_is_nan(self):
        assert call("sqrt", num(-1)).real.is_nan()
        assert call("sqrt", num(-1), high_precision=True).real.is_nan()

    def test_pow(self):
        assert call("pow", num(2), num(10)).real == 1024

    def test_pow_overflow_is_infinite(self):
        assert call("pow", num(10), num(400)).real == Decimal("Infinity")
        assert call("pow", num(-10), num(401)).real == Decimal("-Infinity")

    def test_trigonometry(self):
        assert call("sin", num(0)).real == 0
        assert call("cos", num(0)).real == 1
        assert call("tan", num(0)).real == 0

    def test_log_and_exp(self):
        assert call("exp", num(0)).real == 1
        assert call("log", num(1)).real == 0

    def test_log_of_zero_is_negative_infinity(self):
        assert call("log", num(0)).real == Decimal("-Infinity")

    def test_log_of_negative_is_nan(self):
        assert call("log", num(-1)).real.is_nan()

    def test_exp_overflow_is_infinite(self):
        assert call("exp", num(1000)).real == Decimal("Infinity")

    def test_trigonometry_of_infinity_is_nan(self):
        assert call("sin", num("Infinity")).real.is_nan()
        assert call("tan", num("-Infinity")).real.is_nan()

    def test_rejects_string_argument(self):
        with pytest.raises(TypeMismatchError, match="expected number, got string"):
            call("sin", Value.string("a"))

    def test_rand_uses_context_source(self):
        assert call("rand", random_source=lambda: 0.25).real == Decimal("0.25")

    def test_rand_is_in_unit_interval(self):
        value = call("rand").real
        assert value is not None
        assert 0 <= value < 1


class TestFloatHelpers:
    """Tests for the IEEE 754 float wrappers."""

    def test_pow_matches_math_pow(self):
        assert float_pow(2.0, 0.5) == math.pow(2.0, 0.5)

    def test_pow_overflow_keeps_sign(self):
        assert float_pow(10.0, 400.0) == math.inf
        assert float_pow(-10.0, 401.0) == -math.inf
        assert float_pow(-10.0, 400.0) == math.inf

    def test_pow_zero_to_negative_power(self):
        assert float_pow(0.0, -1.0) == math.inf
        assert float_pow(-0.0, -1.0) == -math.inf
        assert float_pow(-0.0, -2.0) == math.inf
        assert float_pow(0.0, -0.5) == math.inf

    def test_pow_negative_base_fractional_exponent(self):
        assert math.isnan(float_pow(-8.0, 1 / 3))

    def test_mod(self):
        assert float_mod(-7.0, 3.0) == -1.0
        assert float_mod(7.5, 2.0) == 1.5

    def test_mod_of_infinity_is_nan(self):
        assert math.isnan(float_mod(math.inf, 3.0))


class TestComplex:
    """Tests for complex builtins."""

    def test_complex_sets_both_components(self):
        z = call("complex", num(1), num(2))
        assert z.real == 1
        assert z.imag == 2

    def test_re_and_im(self):
        z = call("complex", num(3), num(-4))
        assert call("re", z).real == 3
        assert call("im", z).real == -4

    def test_re_of_plain_number(self):
        assert call("re", num(5)).real == 5

    def test_im_requires_complex(self):
        with pytest.raises(TypeMismatchError, match="im: type error: expected complex"):
            call("im", num(5))


class TestStringHash:
    """Tests for the `string` hash builtin."""

    def test_hash_values(self):
        assert string_hash("") == 0
        assert string_hash("a") == 97
        assert string_hash("ab") == 97 * 31 + 98
        assert string_hash("hello") == 99162322

    def test_hash_wraps_to_signed_64_bit(self):
        value = string_hash("z" * 40)
        assert -(2**63) <= value < 2**63

    def test_hash_matches_unbounded_value_modulo_2_64(self):
        text = "overflowing hash input"
        unbounded = 0
        for ch in text:
            unbounded = unbounded * 31 + ord(ch)
        assert (string_hash(text) - unbounded) % 2**64 == 0

    def test_string_returns_integer_number(self):
        result = call("string", Value.string("hello"))
        assert not result.is_str
        assert result.is_int
        assert result.real == 99162322

    def test_string_rejects_numbers(self):
        with pytest.raises(
            TypeMismatchError, match="string: type error: expected string, got number"
        ):
            call("string", num(12))
