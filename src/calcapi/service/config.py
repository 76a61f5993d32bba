"""
Configuration for the calculator service boundary.
"""

from __future__ import annotations

import os
from typing import Any, Literal, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from calcapi.expr.limits import DEFAULT_EXPRESSION_LIMITS, ExpressionLimits

ENV_VAR_HIGH_PRECISION = "CALC_HIGH_PRECISION"
ENV_VAR_LOG_LEVEL = "CALC_LOG_LEVEL"
ENV_VAR_MAX_EXPRESSION_LENGTH = "CALC_MAX_EXPRESSION_LENGTH"

LogLevel = Literal["debug", "info", "warning", "error", "critical"]


class CalculatorConfig(BaseModel):
    """
    Configuration for Calculator.

    Supports both camelCase and snake_case property names for flexibility.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    # Parse literals exactly and render 50 fractional digits
    high_precision: bool = Field(default=False, alias="highPrecision")

    # Root log level used by the command-line entry point
    log_level: LogLevel = Field(default="warning", alias="logLevel")

    # Longest accepted expression, in characters
    max_expression_length: int = Field(
        default=DEFAULT_EXPRESSION_LIMITS.max_expression_length,
        gt=0,
        alias="maxExpressionLength",
    )

    # Result text recorded for failed calculations
    failure_marker: str = Field(default="calculation failed", alias="failureMarker")

    @field_validator("log_level", mode="before")
    @classmethod
    def _normalize_log_level(cls, value: Any) -> Any:
        if isinstance(value, str):
            return value.strip().lower()
        return value

    def expression_limits(self) -> ExpressionLimits:
        """Engine limits derived from this configuration."""
        return ExpressionLimits(max_expression_length=self.max_expression_length)

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> CalculatorConfig:
        """
        Builds a configuration from `CALC_*` environment variables.

        Unset variables keep their defaults. Invalid values raise
        pydantic.ValidationError.
        """
        env = os.environ if environ is None else environ
        values: dict[str, Any] = {}

        high_precision = env.get(ENV_VAR_HIGH_PRECISION)
        if high_precision:
            values["high_precision"] = high_precision

        log_level = env.get(ENV_VAR_LOG_LEVEL)
        if log_level:
            values["log_level"] = log_level

        max_length = env.get(ENV_VAR_MAX_EXPRESSION_LENGTH)
        if max_length:
            values["max_expression_length"] = max_length

        return cls.model_validate(values)
