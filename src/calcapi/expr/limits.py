"""
Resource limits for expression parsing and evaluation.

These limits protect against resource exhaustion and overly complex
expressions. The engine has no internal timeout, so they are the only
bound it places on a single call.
"""

from dataclasses import dataclass
from typing import Optional

from .errors import LimitExceededError


@dataclass(frozen=True)
class ExpressionLimits:
    """Expression limits configuration."""

    # Maximum expression string length in characters
    max_expression_length: int = 4096

    # Maximum number of `;`-separated statements
    max_statements: int = 64

    # Maximum nesting depth of parentheses and calls
    max_ast_depth: int = 32

    # Maximum number of AST nodes per statement
    max_ast_nodes: int = 256

    # Maximum string literal length
    max_string_length: int = 1024

    # Maximum function call arguments
    max_function_args: int = 16


# Default expression limits.
#
# These values are chosen to allow reasonable expressions while
# preventing resource exhaustion.
DEFAULT_EXPRESSION_LIMITS = ExpressionLimits()


def check_expression_length(
    expression: str, limits: Optional[ExpressionLimits] = None
) -> None:
    """Validates that expression length is within limits."""
    limits = limits or DEFAULT_EXPRESSION_LIMITS
    if len(expression) > limits.max_expression_length:
        raise LimitExceededError(
            "max_expression_length", limits.max_expression_length, len(expression)
        )


def check_statement_count(
    count: int, limits: Optional[ExpressionLimits] = None
) -> None:
    """Validates the number of statements in one evaluation."""
    limits = limits or DEFAULT_EXPRESSION_LIMITS
    if count > limits.max_statements:
        raise LimitExceededError("max_statements", limits.max_statements, count)


def check_ast_depth(depth: int, limits: Optional[ExpressionLimits] = None) -> None:
    """Validates nesting depth during parsing."""
    limits = limits or DEFAULT_EXPRESSION_LIMITS
    if depth > limits.max_ast_depth:
        raise LimitExceededError("max_ast_depth", limits.max_ast_depth, depth)


def check_ast_node_count(
    count: int, limits: Optional[ExpressionLimits] = None
) -> None:
    """Validates AST node count during parsing."""
    limits = limits or DEFAULT_EXPRESSION_LIMITS
    if count > limits.max_ast_nodes:
        raise LimitExceededError("max_ast_nodes", limits.max_ast_nodes, count)


def check_string_length(
    length: int, limits: Optional[ExpressionLimits] = None
) -> None:
    """Validates string literal and concatenation result lengths."""
    limits = limits or DEFAULT_EXPRESSION_LIMITS
    if length > limits.max_string_length:
        raise LimitExceededError("max_string_length", limits.max_string_length, length)


def check_function_arg_count(
    count: int, limits: Optional[ExpressionLimits] = None
) -> None:
    """Validates function argument count."""
    limits = limits or DEFAULT_EXPRESSION_LIMITS
    if count > limits.max_function_args:
        raise LimitExceededError("max_function_args", limits.max_function_args, count)
