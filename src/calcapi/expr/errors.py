"""
Error types for the calculator expression engine.

All expression errors extend ExpressionError for consistent handling.
Evaluation is all-or-nothing: any of these aborts the whole call.
"""

from typing import Optional


class ExpressionError(Exception):
    """
    Base error class for all expression-related errors.
    """

    def __init__(
        self,
        message: str,
        position: Optional[int] = None,
        expression: Optional[str] = None,
    ):
        super().__init__(message)
        self.message = message
        self.position = position
        self.expression = expression

    def format_with_context(self) -> str:
        """
        Returns a formatted error message with position context.
        """
        if self.expression is None or self.position is None:
            return self.message

        pointer = " " * self.position + "^"
        return f"{self.message}\n  {self.expression}\n  {pointer}"


class ParseError(ExpressionError):
    """
    Error thrown when a statement is syntactically malformed.

    The message names the offending statement followed by the cause.
    """

    def __init__(
        self,
        cause: str,
        position: Optional[int] = None,
        expression: Optional[str] = None,
    ):
        if expression is None:
            message = cause
        else:
            message = f"parse error in statement '{expression}': {cause}"
        super().__init__(message, position, expression)
        self.cause = cause


class TokenizerError(ParseError):
    """
    Error thrown during tokenization (lexical analysis).
    """

    pass


class EmptyExpressionError(ExpressionError):
    """
    Error thrown when the input holds no statements to evaluate.
    """

    def __init__(self, expression: Optional[str] = None):
        super().__init__("Expression is empty", None, expression)


class LimitExceededError(ExpressionError):
    """
    Error thrown when expression limits are exceeded.
    """

    def __init__(self, limit_name: str, limit: int, actual: int):
        message = f"Limit exceeded: {limit_name} (limit: {limit}, actual: {actual})"
        super().__init__(message)
        self.limit_name = limit_name
        self.limit = limit
        self.actual = actual


class EvaluationError(ExpressionError):
    """
    Error thrown during evaluation (runtime error).
    """

    pass


class UndefinedVariableError(EvaluationError):
    """
    Error thrown when an identifier is read before it was assigned.
    """

    def __init__(
        self,
        name: str,
        position: Optional[int] = None,
        expression: Optional[str] = None,
    ):
        super().__init__(f"Undefined variable: {name}", position, expression)
        self.name = name


class UnknownFunctionError(EvaluationError):
    """
    Error thrown when a call names a function missing from the registry.
    """

    def __init__(
        self,
        name: str,
        position: Optional[int] = None,
        expression: Optional[str] = None,
    ):
        super().__init__(f"Unknown function: {name}", position, expression)
        self.name = name


class UnsupportedStringOpError(EvaluationError):
    """
    Error thrown when a non-concatenation operator is applied to a string.
    """

    def __init__(
        self,
        operator: str,
        position: Optional[int] = None,
        expression: Optional[str] = None,
    ):
        super().__init__(
            f"Unsupported string operation: {operator}", position, expression
        )
        self.operator = operator


class DivisionByZeroError(EvaluationError):
    """
    Error thrown for `/` or `%` with a zero right operand.
    """

    def __init__(
        self,
        position: Optional[int] = None,
        expression: Optional[str] = None,
    ):
        super().__init__("Division by zero", position, expression)


class BuiltinError(EvaluationError):
    """
    Error thrown when a built-in function encounters an error.
    """

    def __init__(
        self,
        function_name: str,
        message: str,
        position: Optional[int] = None,
        expression: Optional[str] = None,
    ):
        full_message = f"{function_name}: {message}"
        super().__init__(full_message, position, expression)
        self.function_name = function_name


class ArityMismatchError(BuiltinError):
    """
    Error thrown when a builtin is called with the wrong number of arguments.
    """

    def __init__(
        self,
        function_name: str,
        expected: int,
        got: int,
        position: Optional[int] = None,
        expression: Optional[str] = None,
    ):
        super().__init__(
            function_name,
            f"expected {expected} argument(s), got {got}",
            position,
            expression,
        )
        self.expected = expected
        self.got = got


class TypeMismatchError(BuiltinError):
    """
    Error thrown when an operand or builtin argument has the wrong kind.
    """

    def __init__(
        self,
        function_name: str,
        expected: str,
        actual: str,
        position: Optional[int] = None,
        expression: Optional[str] = None,
    ):
        super().__init__(
            function_name,
            f"type error: expected {expected}, got {actual}",
            position,
            expression,
        )
        self.expected = expected
        self.actual = actual
