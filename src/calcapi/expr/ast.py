"""
Abstract Syntax Tree (AST) node types for the calculator language.

The AST is produced by the parser and consumed by the evaluator.
Nodes are immutable once built.
"""

from abc import ABC
from dataclasses import dataclass
from typing import Literal, Optional, Sequence, Union, cast

# ============================================================
# Operator Types
# ============================================================

# `^` is exponentiation, never bitwise XOR.
BinaryOperator = Literal["+", "-", "*", "/", "%", "^"]


# ============================================================
# Expression Nodes
# ============================================================


@dataclass(frozen=True)
class AstNodeBase(ABC):
    """Base class for all AST nodes."""

    position: int
    """Position in the statement source (for error reporting)."""


@dataclass(frozen=True)
class NumberLiteralNode(AstNodeBase):
    """
    Number literal node.

    The literal text is kept unparsed so the evaluator can pick the
    parse precision for the active mode.
    """

    text: str
    is_int: bool

    @property
    def type(self) -> Literal["NumberLiteral"]:
        return "NumberLiteral"


@dataclass(frozen=True)
class StringLiteralNode(AstNodeBase):
    """String literal node (already unescaped)."""

    value: str

    @property
    def type(self) -> Literal["StringLiteral"]:
        return "StringLiteral"


@dataclass(frozen=True)
class IdentifierNode(AstNodeBase):
    """Identifier node."""

    name: str

    @property
    def type(self) -> Literal["Identifier"]:
        return "Identifier"


@dataclass(frozen=True)
class ParenthesizedNode(AstNodeBase):
    """Parenthesized expression node."""

    inner: "AstNode"

    @property
    def type(self) -> Literal["Parenthesized"]:
        return "Parenthesized"


@dataclass(frozen=True)
class BinaryOpNode(AstNodeBase):
    """Binary operator node."""

    operator: BinaryOperator
    left: "AstNode"
    right: "AstNode"

    @property
    def type(self) -> Literal["BinaryOp"]:
        return "BinaryOp"


@dataclass(frozen=True)
class FunctionCallNode(AstNodeBase):
    """Function call node."""

    name: str
    args: Sequence["AstNode"]

    @property
    def type(self) -> Literal["FunctionCall"]:
        return "FunctionCall"


# Union type for all expression nodes
AstNode = Union[
    NumberLiteralNode,
    StringLiteralNode,
    IdentifierNode,
    ParenthesizedNode,
    BinaryOpNode,
    FunctionCallNode,
]


# ============================================================
# Statements
# ============================================================

StatementKind = Literal["Expression", "Assignment", "Return"]


@dataclass(frozen=True)
class Statement:
    """
    One parsed statement.

    - Expression: a bare expression whose value becomes the current result
    - Assignment: `target := expression` or `target = expression`
    - Return: `return expression`, ends the session
    """

    kind: StatementKind
    expression: AstNode
    source: str
    target: Optional[str] = None


# ============================================================
# AST Utilities
# ============================================================


def _children(node: AstNode) -> Sequence[AstNode]:
    if node.type == "Parenthesized":
        return (cast(ParenthesizedNode, node).inner,)
    if node.type == "BinaryOp":
        n = cast(BinaryOpNode, node)
        return (n.left, n.right)
    if node.type == "FunctionCall":
        return tuple(cast(FunctionCallNode, node).args)
    return ()


def count_ast_nodes(node: AstNode) -> int:
    """Counts the total number of nodes in an AST."""
    count = 1
    for child in _children(node):
        count += count_ast_nodes(child)
    return count


def ast_to_string(node: AstNode, indent: int = 0) -> str:
    """Returns a human-readable representation of an AST node for debugging."""
    prefix = "  " * indent

    if node.type == "NumberLiteral":
        n = cast(NumberLiteralNode, node)
        kind = "Integer" if n.is_int else "Number"
        return f"{prefix}{kind}: {n.text}"

    if node.type == "StringLiteral":
        return f'{prefix}String: "{cast(StringLiteralNode, node).value}"'

    if node.type == "Identifier":
        return f"{prefix}Identifier: {cast(IdentifierNode, node).name}"

    if node.type == "Parenthesized":
        inner = cast(ParenthesizedNode, node).inner
        return f"{prefix}Parenthesized:\n{ast_to_string(inner, indent + 1)}"

    if node.type == "BinaryOp":
        n = cast(BinaryOpNode, node)
        return (
            f"{prefix}BinaryOp: {n.operator}\n"
            f"{ast_to_string(n.left, indent + 1)}\n"
            f"{ast_to_string(n.right, indent + 1)}"
        )

    if node.type == "FunctionCall":
        n = cast(FunctionCallNode, node)
        if not n.args:
            return f"{prefix}FunctionCall: {n.name}"
        args_str = "\n".join(ast_to_string(a, indent + 1) for a in n.args)
        return f"{prefix}FunctionCall: {n.name}\n{args_str}"

    return f"{prefix}Unknown: {node}"
