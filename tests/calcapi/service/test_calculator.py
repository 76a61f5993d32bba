"""
Tests for the calculator service boundary.
"""

import logging

import pytest

from calcapi.service import (
    EMPTY_EXPRESSION_MESSAGE,
    CalculationRecord,
    Calculator,
    CalculatorConfig,
    InMemoryLeaderboard,
    RandomDrawRecord,
    trim_result,
)
from calcapi.service.__main__ import main


def make_calculator(
    high_precision: bool = False, draw: float = 0.5
) -> tuple[Calculator, InMemoryLeaderboard]:
    """Helper to build a calculator wired to an in-memory leaderboard."""
    leaderboard = InMemoryLeaderboard()
    calculator = Calculator(
        CalculatorConfig(high_precision=high_precision),
        leaderboard,
        random_source=lambda: draw,
    )
    return calculator, leaderboard


class TestTrimResult:
    """Tests for trailing-zero trimming."""

    @pytest.mark.parametrize(
        "text, expected",
        [
            ("3.50000", "3.5"),
            ("2.000", "2"),
            ("-0.2500", "-0.25"),
            ("10.", "10"),
            ("100", "100"),
            ("0.0", "0"),
        ],
    )
    def test_trims_fixed_point_text(self, text, expected):
        assert trim_result(text) == expected

    @pytest.mark.parametrize("text", ["1e+06", "+Inf", "NaN", "hello.00", "1.50 "])
    def test_leaves_other_text_alone(self, text):
        assert trim_result(text) == text


class TestCalculate:
    """Tests for Calculator.calculate."""

    def test_success(self):
        calculator, leaderboard = make_calculator()
        response = calculator.calculate("2+3*4", "client-1")
        assert response.success
        assert response.value == "14"
        assert response.error is None
        assert not response.show_leaderboard
        assert leaderboard.history == [CalculationRecord("client-1", "2+3*4", "14")]

    def test_high_precision_results_are_trimmed(self):
        calculator, _ = make_calculator(high_precision=True)
        assert calculator.calculate("1+2", "c").value == "3"
        assert calculator.calculate("0.5*3", "c").value == "1.5"
        assert calculator.calculate("sqrt(2)", "c").value == (
            "1.41421356237309504880168872420969807856967187537695"
        )

    def test_string_results_are_not_trimmed(self):
        calculator, leaderboard = make_calculator()
        assert calculator.calculate('"1.50"', "c").value == "1.50"
        assert calculator.calculate('"2." + "000"', "c").value == "2.000"
        assert leaderboard.history[0].result == "1.50"

    def test_special_values(self):
        calculator, _ = make_calculator()
        assert calculator.calculate("log(0)", "c").value == "-Inf"
        assert calculator.calculate("sqrt(-1)", "c").value == "NaN"

    def test_blank_expression(self):
        calculator, leaderboard = make_calculator()
        response = calculator.calculate("   ", "c")
        assert response.error == EMPTY_EXPRESSION_MESSAGE
        assert not response.success
        assert leaderboard.history == []

    def test_failure_records_marker(self):
        calculator, leaderboard = make_calculator()
        response = calculator.calculate("5/0", "c")
        assert response.value is None
        assert response.error == "calculation failed: Division by zero"
        assert response.error_context == (
            "calculation failed: Division by zero\n  5/0\n   ^"
        )
        assert leaderboard.history == [
            CalculationRecord("c", "5/0", "calculation failed")
        ]

    def test_custom_failure_marker(self):
        leaderboard = InMemoryLeaderboard()
        config = CalculatorConfig(failure_marker="error")
        response = Calculator(config, leaderboard).calculate("nope(", "c")
        assert response.error is not None
        assert response.error.startswith("error: parse error in statement 'nope('")
        assert leaderboard.history[0].result == "error"

    def test_random_draw_is_recorded(self):
        calculator, leaderboard = make_calculator(draw=0.75)
        response = calculator.calculate("rand()", "c")
        assert response.value == "0.75"
        assert response.show_leaderboard
        entry = leaderboard.entry("c")
        assert entry is not None
        assert entry.total_value == 0.75
        assert entry.max_expression == "rand()"

    def test_rand_anywhere_in_expression_counts(self):
        calculator, leaderboard = make_calculator(draw=0.5)
        response = calculator.calculate("x := 10; x * rand()", "c")
        assert response.value == "5"
        assert response.show_leaderboard
        entry = leaderboard.entry("c")
        assert entry is not None
        assert entry.total_value == 5.0

    def test_expression_without_rand_skips_leaderboard(self):
        calculator, leaderboard = make_calculator()
        calculator.calculate("sqrt(4)", "c")
        assert leaderboard.entry("c") is None

    def test_failed_rand_expression_skips_leaderboard(self):
        calculator, leaderboard = make_calculator()
        response = calculator.calculate("rand() / 0", "c")
        assert not response.show_leaderboard
        assert leaderboard.entry("c") is None

    def test_expression_length_comes_from_config(self):
        calculator = Calculator(CalculatorConfig(max_expression_length=3))
        response = calculator.calculate("1+1+1", "c")
        assert response.error is not None
        assert "max_expression_length" in response.error

    def test_default_sink_discards_records(self):
        assert Calculator().calculate("1+1", "c").value == "2"

    def test_logs_failures(self, caplog):
        caplog.set_level(logging.WARNING, logger="calcapi.service.calculator")
        calculator, _ = make_calculator()
        calculator.calculate("5/0", "c")
        records = [r for r in caplog.records if r.getMessage() == "calculation_failed"]
        assert len(records) == 1
        assert records[0].error == "Division by zero"


class RecordingSink:
    def __init__(self):
        self.calculations: list[CalculationRecord] = []
        self.draws: list[RandomDrawRecord] = []

    def record_calculation(self, record: CalculationRecord) -> None:
        self.calculations.append(record)

    def record_random_draw(self, record: RandomDrawRecord) -> None:
        self.draws.append(record)


class TestSink:
    """Tests for the records handed to persistence."""

    def test_records_draw_after_calculation(self):
        sink = RecordingSink()
        calculator = Calculator(sink=sink, random_source=lambda: 0.125)
        calculator.calculate("rand()", "c")
        assert sink.calculations == [CalculationRecord("c", "rand()", "0.125")]
        assert sink.draws == [RandomDrawRecord("c", 0.125, "rand()")]


class TestMain:
    """Tests for the command-line entry point."""

    def test_prints_value(self, capsys, monkeypatch):
        monkeypatch.delenv("CALC_HIGH_PRECISION", raising=False)
        assert main(["x := 3;", "x * x"]) == 0
        assert capsys.readouterr().out == "9\n"

    def test_prints_error(self, capsys, monkeypatch):
        monkeypatch.delenv("CALC_HIGH_PRECISION", raising=False)
        assert main(["5/0"]) == 1
        assert capsys.readouterr().err == (
            "calculation failed: Division by zero\n  5/0\n   ^\n"
        )

    def test_prints_blank_input_error(self, capsys, monkeypatch):
        monkeypatch.delenv("CALC_HIGH_PRECISION", raising=False)
        assert main([]) == 1
        assert capsys.readouterr().err == "expression cannot be empty\n"

    def test_reads_precision_from_env(self, capsys, monkeypatch):
        monkeypatch.setenv("CALC_HIGH_PRECISION", "true")
        assert main(["1/4"]) == 0
        assert capsys.readouterr().out == "0.25\n"
