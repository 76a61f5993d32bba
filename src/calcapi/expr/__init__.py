"""
Calculator expression engine.

This module provides a deterministic tree-walking evaluator for a small
arithmetic language with `;`-separated statements, assignments, an early
`return`, string concatenation and a fixed set of built-in functions,
under either 64-bit float or high-precision decimal semantics.
"""

# Core types and utilities
from .ast import (
    AstNode,
    AstNodeBase,
    BinaryOperator,
    BinaryOpNode,
    FunctionCallNode,
    IdentifierNode,
    NumberLiteralNode,
    ParenthesizedNode,
    Statement,
    StatementKind,
    StringLiteralNode,
    ast_to_string,
    count_ast_nodes,
)

# Builtins
from .builtins import (
    BUILTIN_FUNCTIONS,
    Builtin,
    BuiltinContext,
    BuiltinFunction,
    FunctionRegistry,
    call_builtin,
    lookup_builtin,
    string_hash,
)
from .errors import (
    ArityMismatchError,
    BuiltinError,
    DivisionByZeroError,
    EmptyExpressionError,
    EvaluationError,
    ExpressionError,
    LimitExceededError,
    ParseError,
    TokenizerError,
    TypeMismatchError,
    UndefinedVariableError,
    UnknownFunctionError,
    UnsupportedStringOpError,
)

# Evaluator
from .evaluator import (
    EvaluationResult,
    Evaluator,
    evaluate,
    evaluate_expression,
)

# Formatter
from .formatter import (
    format_fixed,
    format_float,
    format_value,
)
from .limits import (
    DEFAULT_EXPRESSION_LIMITS,
    ExpressionLimits,
    check_ast_depth,
    check_ast_node_count,
    check_expression_length,
    check_function_arg_count,
    check_statement_count,
    check_string_length,
)

# Parser
from .parser import (
    Parser,
    parse_statement,
    split_statements,
)
from .preprocessor import (
    normalize_argument,
    preprocess,
    quote_string,
)

# Tokenizer
from .tokenizer import (
    Token,
    Tokenizer,
    TokenType,
    tokenize,
)
from .values import (
    Value,
    get_type_name,
)

__all__ = [
    # AST types
    "AstNode",
    "AstNodeBase",
    "NumberLiteralNode",
    "StringLiteralNode",
    "IdentifierNode",
    "ParenthesizedNode",
    "BinaryOpNode",
    "FunctionCallNode",
    "BinaryOperator",
    "Statement",
    "StatementKind",
    "count_ast_nodes",
    "ast_to_string",
    # Errors
    "ExpressionError",
    "TokenizerError",
    "ParseError",
    "EmptyExpressionError",
    "LimitExceededError",
    "EvaluationError",
    "UndefinedVariableError",
    "UnknownFunctionError",
    "UnsupportedStringOpError",
    "DivisionByZeroError",
    "BuiltinError",
    "ArityMismatchError",
    "TypeMismatchError",
    # Limits
    "ExpressionLimits",
    "DEFAULT_EXPRESSION_LIMITS",
    "check_expression_length",
    "check_statement_count",
    "check_ast_depth",
    "check_ast_node_count",
    "check_string_length",
    "check_function_arg_count",
    # Values
    "Value",
    "get_type_name",
    # Preprocessor
    "preprocess",
    "normalize_argument",
    "quote_string",
    # Tokenizer
    "Token",
    "TokenType",
    "Tokenizer",
    "tokenize",
    # Parser
    "Parser",
    "parse_statement",
    "split_statements",
    # Formatter
    "format_value",
    "format_float",
    "format_fixed",
    # Evaluator
    "EvaluationResult",
    "Evaluator",
    "evaluate",
    "evaluate_expression",
    # Builtins
    "Builtin",
    "BuiltinFunction",
    "BuiltinContext",
    "FunctionRegistry",
    "BUILTIN_FUNCTIONS",
    "call_builtin",
    "lookup_builtin",
    "string_hash",
]
