"""
Expression evaluator.

Walks statement ASTs against a per-session environment and returns the
session's final value.

Session semantics:
- Statements run in order and share one environment.
- An assignment binds its target and yields the bound value.
- A bare expression is bound to a statement-local synthetic name, read
  back, then unbound.
- `return` yields its value and skips the remaining statements, which
  are neither parsed nor evaluated.
- Any error aborts the whole session; no partial result is produced.

Arithmetic runs at working precision and every binary operator result is
rounded to double precision, in both modes. High-precision mode only
changes how literals are parsed, how `%` and `sqrt` compute, and how the
final value is rendered.
"""

import logging
import random
from dataclasses import dataclass
from decimal import ROUND_FLOOR, Decimal
from typing import Callable, Dict, List, Mapping, Optional, Sequence, Tuple, cast

from .ast import (
    AstNode,
    BinaryOperator,
    BinaryOpNode,
    FunctionCallNode,
    IdentifierNode,
    NumberLiteralNode,
    ParenthesizedNode,
    Statement,
    StringLiteralNode,
    ast_to_string,
)
from .builtins import (
    BUILTIN_FUNCTIONS,
    BuiltinContext,
    FunctionRegistry,
    call_builtin,
    float_mod,
    float_pow,
    lookup_builtin,
)
from .errors import (
    DivisionByZeroError,
    EmptyExpressionError,
    ExpressionError,
    TypeMismatchError,
    UndefinedVariableError,
    UnsupportedStringOpError,
)
from .formatter import format_value
from .limits import (
    DEFAULT_EXPRESSION_LIMITS,
    ExpressionLimits,
    check_expression_length,
    check_statement_count,
    check_string_length,
)
from .parser import parse_statement, split_statements
from .preprocessor import preprocess
from .values import (
    Value,
    from_float,
    get_type_name,
    make_working_context,
    parse_number,
    round_to_double,
    to_float,
)

logger = logging.getLogger(__name__)


@dataclass
class EvaluationResult:
    """Result of a non-raising evaluation."""

    value: Optional[Value]
    """The session's final value."""

    text: Optional[str]
    """The formatted result text."""

    success: bool
    """Whether evaluation succeeded."""

    error: Optional[str] = None
    """Error message if evaluation failed."""

    error_context: Optional[str] = None
    """Error message with the failing statement and a caret under the position."""

    functions_called: Tuple[str, ...] = ()
    """Builtins invoked during the session, in first-call order."""


def _synthetic_name(index: int) -> str:
    # Not a valid identifier, so user statements can never read or clobber it
    return f"<statement {index}>"


class Evaluator:
    """Evaluates the statements of one session."""

    def __init__(
        self,
        high_precision: bool = False,
        functions: Optional[FunctionRegistry] = None,
        limits: Optional[ExpressionLimits] = None,
        random_source: Optional[Callable[[], float]] = None,
    ):
        self._high_precision = high_precision
        self._functions = functions if functions is not None else BUILTIN_FUNCTIONS
        self._limits = limits or DEFAULT_EXPRESSION_LIMITS
        self._random_source = random_source or random.random
        self._decimal_context = make_working_context()
        self._environment: Dict[str, Value] = {}
        self._functions_called: List[str] = []
        self._source = ""

    @property
    def high_precision(self) -> bool:
        return self._high_precision

    @property
    def environment(self) -> Mapping[str, Value]:
        return self._environment

    @property
    def functions_called(self) -> Tuple[str, ...]:
        return tuple(self._functions_called)

    # ============================================================
    # Session Loop
    # ============================================================

    def run(self, sources: Sequence[str]) -> Value:
        """
        Parses and evaluates statement sources in order.

        Raises:
            EmptyExpressionError: If there are no statements
            ExpressionError: On the first failing statement
        """
        result: Optional[Value] = None

        for index, source in enumerate(sources):
            statement = parse_statement(source, self._limits)
            if logger.isEnabledFor(logging.DEBUG):
                logger.debug(
                    "statement_parsed",
                    extra={
                        "statement_index": index,
                        "ast": ast_to_string(statement.expression),
                    },
                )
            value = self.execute(statement, index)

            if statement.kind == "Return":
                logger.debug(
                    "session_returned_early",
                    extra={
                        "statement_index": index,
                        "skipped": len(sources) - index - 1,
                    },
                )
                return value

            result = value

        if result is None:
            raise EmptyExpressionError()
        return result

    def execute(self, statement: Statement, index: int = 0) -> Value:
        """Evaluates one statement, updating the environment."""
        value = self.evaluate(statement.expression, statement.source)

        if statement.kind == "Assignment":
            self._environment[cast(str, statement.target)] = value
        elif statement.kind == "Expression":
            name = _synthetic_name(index)
            self._environment[name] = value
            value = self._environment.pop(name)

        logger.debug(
            "statement_evaluated",
            extra={
                "statement_index": index,
                "statement_kind": statement.kind,
                "value_kind": value.kind,
            },
        )
        return value

    # ============================================================
    # Node Evaluation
    # ============================================================

    def evaluate(self, node: AstNode, source: Optional[str] = None) -> Value:
        """Evaluates an AST node and returns the value."""
        if source is not None:
            self._source = source

        node_type = node.type

        if node_type == "NumberLiteral":
            n = cast(NumberLiteralNode, node)
            return Value.number(
                parse_number(n.text, self._high_precision), is_int=n.is_int
            )

        if node_type == "StringLiteral":
            return Value.string(cast(StringLiteralNode, node).value)

        if node_type == "Identifier":
            n = cast(IdentifierNode, node)
            value = self._environment.get(n.name)
            if value is None:
                raise UndefinedVariableError(n.name, n.position, self._source)
            return value

        if node_type == "Parenthesized":
            return self.evaluate(cast(ParenthesizedNode, node).inner)

        if node_type == "BinaryOp":
            n = cast(BinaryOpNode, node)
            return self._evaluate_binary_op(n.operator, n.left, n.right, n.position)

        if node_type == "FunctionCall":
            return self._evaluate_function_call(cast(FunctionCallNode, node))

        raise ExpressionError(f"Unknown node type: {node_type}", node.position)

    def _locate(self, error: ExpressionError, position: int) -> ExpressionError:
        """Attaches the statement and position to an error raised without them."""
        if error.position is None:
            error.position = position
        if error.expression is None:
            error.expression = self._source
        return error

    def _evaluate_function_call(self, node: FunctionCallNode) -> Value:
        """Evaluates a function call."""
        try:
            lookup_builtin(node.name, self._functions)
        except ExpressionError as e:
            raise self._locate(e, node.position)

        args = [self.evaluate(arg) for arg in node.args]

        builtin_context = BuiltinContext(
            high_precision=self._high_precision,
            decimal_context=self._decimal_context,
            limits=self._limits,
            position=node.position,
            source=self._source,
            random_source=self._random_source,
        )

        try:
            result = call_builtin(node.name, args, builtin_context, self._functions)
        except ExpressionError as e:
            raise self._locate(e, node.position)

        if node.name not in self._functions_called:
            self._functions_called.append(node.name)
        return result

    def _evaluate_binary_op(
        self,
        operator: BinaryOperator,
        left: AstNode,
        right: AstNode,
        position: int,
    ) -> Value:
        """Evaluates a binary operation."""
        left_value = self.evaluate(left)
        right_value = self.evaluate(right)

        if left_value.is_str or right_value.is_str:
            return self._evaluate_string_op(operator, left_value, right_value, position)

        a = cast(Decimal, left_value.real)
        b = cast(Decimal, right_value.real)

        if operator == "^":
            result = from_float(float_pow(to_float(a), to_float(b)))
        else:
            result = round_to_double(self._arithmetic(operator, a, b, position))
        return Value.number(result)

    def _arithmetic(
        self, operator: BinaryOperator, a: Decimal, b: Decimal, position: int
    ) -> Decimal:
        ctx = self._decimal_context

        if operator == "+":
            return ctx.add(a, b)
        if operator == "-":
            return ctx.subtract(a, b)
        if operator == "*":
            return ctx.multiply(a, b)

        if b == 0:
            raise DivisionByZeroError(position, self._source)

        if operator == "/":
            return ctx.divide(a, b)

        # operator == "%"
        if self._high_precision:
            quotient = ctx.divide(a, b).to_integral_value(
                rounding=ROUND_FLOOR, context=ctx
            )
            return ctx.subtract(a, ctx.multiply(quotient, b))
        return from_float(float_mod(to_float(a), to_float(b)))

    def _evaluate_string_op(
        self,
        operator: BinaryOperator,
        left: Value,
        right: Value,
        position: int,
    ) -> Value:
        """Strings support only `+`, and only with another string."""
        if operator != "+":
            raise UnsupportedStringOpError(operator, position, self._source)

        if not (left.is_str and right.is_str):
            raise TypeMismatchError(
                operator,
                get_type_name(left),
                get_type_name(right),
                position,
                self._source,
            )

        text = cast(str, left.text) + cast(str, right.text)
        check_string_length(len(text), self._limits)
        return Value.string(text)


def _split(expression: str, limits: ExpressionLimits) -> List[str]:
    check_expression_length(expression, limits)
    sources = split_statements(preprocess(expression))
    check_statement_count(len(sources), limits)
    if not sources:
        raise EmptyExpressionError(expression)
    return sources


def evaluate(
    expression: str,
    high_precision: bool = False,
    limits: Optional[ExpressionLimits] = None,
    functions: Optional[FunctionRegistry] = None,
    random_source: Optional[Callable[[], float]] = None,
) -> str:
    """
    Evaluates an expression and returns the formatted result.

    Args:
        expression: One statement, or several separated by `;`
        high_precision: Parse literals exactly and render 50 fractional digits
        limits: Optional expression limits
        functions: Optional function registry (defaults to BUILTIN_FUNCTIONS)
        random_source: Optional uniform [0, 1) source for `rand`

    Returns:
        The result text

    Raises:
        ExpressionError: If any statement fails
    """
    limits = limits or DEFAULT_EXPRESSION_LIMITS
    evaluator = Evaluator(high_precision, functions, limits, random_source)
    value = evaluator.run(_split(expression, limits))
    return format_value(value, high_precision)


def evaluate_expression(
    expression: str,
    high_precision: bool = False,
    limits: Optional[ExpressionLimits] = None,
    functions: Optional[FunctionRegistry] = None,
    random_source: Optional[Callable[[], float]] = None,
) -> EvaluationResult:
    """
    Evaluates an expression and returns the result.

    Expression errors are reported on the result instead of raised.
    """
    limits = limits or DEFAULT_EXPRESSION_LIMITS
    evaluator = Evaluator(high_precision, functions, limits, random_source)
    try:
        value = evaluator.run(_split(expression, limits))
        text = format_value(value, high_precision)
    except ExpressionError as error:
        return EvaluationResult(
            value=None,
            text=None,
            success=False,
            error=str(error),
            error_context=error.format_with_context(),
            functions_called=evaluator.functions_called,
        )

    return EvaluationResult(
        value=value,
        text=text,
        success=True,
        functions_called=evaluator.functions_called,
    )
