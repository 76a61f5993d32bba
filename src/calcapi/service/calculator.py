"""
Calculator service boundary.

Wraps the expression engine the way a request handler uses it: rejects
blank input, trims numeric result text, records every calculation, and
records random draws for the leaderboard.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from decimal import Decimal
from typing import Callable, Optional, cast

from calcapi.expr import FunctionRegistry, Value, evaluate_expression
from calcapi.expr.values import to_float

from .config import CalculatorConfig
from .records import (
    CalculationRecord,
    CalculationSink,
    NullSink,
    RandomDrawRecord,
)

logger = logging.getLogger(__name__)

EMPTY_EXPRESSION_MESSAGE = "expression cannot be empty"

_FIXED_POINT = re.compile(r"-?\d+\.\d*")


def trim_result(text: str) -> str:
    """
    Strips trailing fractional zeros, then a trailing `.`, from plain
    fixed-point text. Any other text is returned unchanged.
    """
    if not _FIXED_POINT.fullmatch(text):
        return text
    return text.rstrip("0").rstrip(".")


@dataclass(frozen=True)
class CalculationResponse:
    """Caller-facing outcome of one calculation."""

    value: Optional[str] = None
    error: Optional[str] = None
    error_context: Optional[str] = None
    show_leaderboard: bool = False

    @property
    def success(self) -> bool:
        return self.error is None


class Calculator:
    """Evaluates expressions on behalf of clients and records the outcome."""

    def __init__(
        self,
        config: Optional[CalculatorConfig] = None,
        sink: Optional[CalculationSink] = None,
        functions: Optional[FunctionRegistry] = None,
        random_source: Optional[Callable[[], float]] = None,
    ):
        self._config = config or CalculatorConfig()
        self._sink: CalculationSink = sink if sink is not None else NullSink()
        self._functions = functions
        self._random_source = random_source
        self._limits = self._config.expression_limits()

    @property
    def config(self) -> CalculatorConfig:
        return self._config

    def calculate(self, expression: str, client_id: str) -> CalculationResponse:
        """
        Evaluates an expression for a client.

        Args:
            expression: The raw expression text
            client_id: Opaque identifier of the requesting client

        Returns:
            The trimmed value, or an error message
        """
        if not expression.strip():
            return CalculationResponse(error=EMPTY_EXPRESSION_MESSAGE)

        result = evaluate_expression(
            expression,
            high_precision=self._config.high_precision,
            limits=self._limits,
            functions=self._functions,
            random_source=self._random_source,
        )

        if not result.success:
            logger.warning(
                "calculation_failed",
                extra={"client_id": client_id, "error": result.error},
            )
            marker = self._config.failure_marker
            self._sink.record_calculation(
                CalculationRecord(client_id, expression, marker)
            )
            return CalculationResponse(
                error=f"{marker}: {result.error}",
                error_context=f"{marker}: {result.error_context}",
            )

        result_value = cast(Value, result.value)
        value = cast(str, result.text)
        if not result_value.is_str:
            value = trim_result(value)
        self._sink.record_calculation(CalculationRecord(client_id, expression, value))

        show_leaderboard = False
        if "rand" in result.functions_called and not result_value.is_str:
            real = to_float(cast(Decimal, result_value.real))
            draw = RandomDrawRecord(client_id, real, expression)
            self._sink.record_random_draw(draw)
            show_leaderboard = True
            logger.debug(
                "random_draw_recorded",
                extra={"client_id": client_id, "value": draw.value},
            )

        logger.debug(
            "calculation_succeeded",
            extra={"client_id": client_id, "value": value},
        )
        return CalculationResponse(value=value, show_leaderboard=show_leaderboard)
