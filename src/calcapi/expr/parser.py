"""
Parser for the calculator language.

Parses a stream of tokens into an Abstract Syntax Tree (AST).
Uses recursive descent parsing with operator precedence.

Statement forms:
- `return <expr>`
- `<identifier> := <expr>` or `<identifier> = <expr>`
- `<expr>`

Precedence (lowest to highest):
1. Exponent: ^
2. Additive: +, -
3. Multiplicative: *, /, %
4. Primary: literals, identifiers, calls, parentheses

`^` is exponentiation and binds more loosely than `+`, so `2^3+1` is
`2^(3+1)`. All binary operators are left-associative. There are no unary
operators; a sign directly before a number literal is folded into the
literal (`-3`, `2*-3`).
"""

from typing import Dict, List, Optional

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
    count_ast_nodes,
)
from .errors import ParseError
from .limits import (
    DEFAULT_EXPRESSION_LIMITS,
    ExpressionLimits,
    check_ast_depth,
    check_ast_node_count,
    check_function_arg_count,
)
from .tokenizer import Token, TokenType, is_integer_literal, tokenize

_OPERATORS: Dict[TokenType, BinaryOperator] = {
    TokenType.PLUS: "+",
    TokenType.MINUS: "-",
    TokenType.STAR: "*",
    TokenType.SLASH: "/",
    TokenType.PERCENT: "%",
    TokenType.CARET: "^",
}


class Parser:
    """Parser for statement strings."""

    def __init__(
        self,
        tokens: List[Token],
        source: str,
        limits: ExpressionLimits = DEFAULT_EXPRESSION_LIMITS,
    ):
        self._tokens = tokens
        self._source = source
        self._limits = limits
        self._current = 0
        self._depth = 0

    def parse(self) -> AstNode:
        """Parses the token stream as a single bare expression."""
        ast = self._parse_expression()
        self._expect_end()
        return ast

    def parse_statement(self) -> Statement:
        """Parses the token stream as a return, assignment, or bare expression."""
        if self._match(TokenType.RETURN):
            expression = self._parse_expression()
            self._expect_end()
            return Statement("Return", expression, self._source)

        if self._check(TokenType.IDENTIFIER) and self._check_next(
            TokenType.DEFINE, TokenType.ASSIGN
        ):
            target = self._advance().value
            self._advance()
            expression = self._parse_expression()
            self._expect_end()
            return Statement("Assignment", expression, self._source, target)

        return Statement("Expression", self.parse(), self._source)

    def _expect_end(self) -> None:
        if not self._is_at_end():
            raise self._unexpected(self._peek())

    def _validate(self, ast: AstNode) -> AstNode:
        check_ast_node_count(count_ast_nodes(ast), self._limits)
        return ast

    # ============================================================
    # Token Helpers
    # ============================================================

    def _is_at_end(self) -> bool:
        return self._peek().type == TokenType.EOF

    def _peek(self) -> Token:
        return self._tokens[self._current]

    def _previous(self) -> Token:
        return self._tokens[self._current - 1]

    def _advance(self) -> Token:
        if not self._is_at_end():
            self._current += 1
        return self._previous()

    def _check(self, token_type: TokenType) -> bool:
        if self._is_at_end():
            return False
        return self._peek().type == token_type

    def _check_next(self, *types: TokenType) -> bool:
        if self._current + 1 >= len(self._tokens):
            return False
        return self._tokens[self._current + 1].type in types

    def _match(self, *types: TokenType) -> bool:
        for token_type in types:
            if self._check(token_type):
                self._advance()
                return True
        return False

    def _consume(self, token_type: TokenType, message: str) -> Token:
        if self._check(token_type):
            return self._advance()
        token = self._peek()
        raise ParseError(message, token.position, self._source)

    def _unexpected(self, token: Token) -> ParseError:
        if token.type == TokenType.EOF:
            return ParseError(
                "Unexpected end of statement", token.position, self._source
            )
        return ParseError(
            f"Unexpected token: {token.value or token.type.value}",
            token.position,
            self._source,
        )

    def _enter_nested(self) -> None:
        self._depth += 1
        check_ast_depth(self._depth, self._limits)

    # ============================================================
    # Expression Parsing (by precedence, lowest to highest)
    # ============================================================

    def _parse_expression(self) -> AstNode:
        return self._validate(self._parse_exponent())

    def _binary(self, operator_token: Token, left: AstNode, right: AstNode) -> AstNode:
        return BinaryOpNode(
            position=operator_token.position,
            operator=_OPERATORS[operator_token.type],
            left=left,
            right=right,
        )

    def _parse_exponent(self) -> AstNode:
        """Parses exponentiation: ^"""
        node = self._parse_additive()

        while self._match(TokenType.CARET):
            token = self._previous()
            node = self._binary(token, node, self._parse_additive())

        return node

    def _parse_additive(self) -> AstNode:
        """Parses additive: +, -"""
        node = self._parse_multiplicative()

        while self._match(TokenType.PLUS, TokenType.MINUS):
            token = self._previous()
            node = self._binary(token, node, self._parse_multiplicative())

        return node

    def _parse_multiplicative(self) -> AstNode:
        """Parses multiplicative: *, /, %"""
        node = self._parse_primary()

        while self._match(TokenType.STAR, TokenType.SLASH, TokenType.PERCENT):
            token = self._previous()
            node = self._binary(token, node, self._parse_primary())

        return node

    def _parse_argument_list(self) -> List[AstNode]:
        """Parses function argument list (already consumed opening paren)."""
        args: List[AstNode] = []

        if not self._check(TokenType.RPAREN):
            args.append(self._parse_exponent())
            while self._match(TokenType.COMMA):
                args.append(self._parse_exponent())

        self._consume(TokenType.RPAREN, "Expected ')' after function arguments")
        return args

    def _parse_signed_number(self) -> AstNode:
        sign = self._previous()
        if not self._check(TokenType.NUMBER):
            raise ParseError(
                f"Unary '{sign.value}' is only allowed before a number literal",
                sign.position,
                self._source,
            )
        number = self._advance()
        return NumberLiteralNode(
            position=sign.position,
            text=sign.value + number.value,
            is_int=is_integer_literal(number.value),
        )

    def _parse_primary(self) -> AstNode:
        """Parses primary expressions: literals, identifiers, calls, parentheses."""
        token = self._peek()
        position = token.position

        if self._match(TokenType.PLUS, TokenType.MINUS):
            return self._parse_signed_number()

        if self._match(TokenType.NUMBER):
            text = self._previous().value
            return NumberLiteralNode(
                position=position, text=text, is_int=is_integer_literal(text)
            )

        if self._match(TokenType.STRING):
            return StringLiteralNode(position=position, value=self._previous().value)

        if self._match(TokenType.IDENTIFIER):
            name = self._previous().value
            if not self._match(TokenType.LPAREN):
                return IdentifierNode(position=position, name=name)

            self._enter_nested()
            try:
                args = self._parse_argument_list()
            finally:
                self._depth -= 1
            check_function_arg_count(len(args), self._limits)
            return FunctionCallNode(position=position, name=name, args=tuple(args))

        if self._match(TokenType.LPAREN):
            self._enter_nested()
            try:
                inner = self._parse_exponent()
                self._consume(TokenType.RPAREN, "Expected ')' after expression")
            finally:
                self._depth -= 1
            return ParenthesizedNode(position=position, inner=inner)

        raise self._unexpected(token)


def split_statements(source: str) -> List[str]:
    """
    Splits input on `;` outside parentheses and string literals.

    Returns trimmed, non-empty statement sources in evaluation order.
    """
    statements: List[str] = []
    start = 0
    depth = 0
    i = 0

    while i < len(source):
        ch = source[i]
        if ch == '"':
            i += 1
            while i < len(source) and source[i] != '"':
                i += 2 if source[i] == "\\" else 1
        elif ch == "(":
            depth += 1
        elif ch == ")":
            depth = max(depth - 1, 0)
        elif ch == ";" and depth == 0:
            statements.append(source[start:i])
            start = i + 1
        i += 1

    statements.append(source[start:])
    return [s.strip() for s in statements if s.strip()]


def parse_statement(
    source: str, limits: Optional[ExpressionLimits] = None
) -> Statement:
    """
    Parses one statement (return, assignment, or bare expression).

    Args:
        source: The statement source, without a trailing `;`
        limits: Optional expression limits

    Returns:
        The parsed statement

    Raises:
        ParseError: If tokenization or parsing fails
    """
    limits = limits or DEFAULT_EXPRESSION_LIMITS
    tokens = tokenize(source, limits)
    parser = Parser(tokens, source, limits)
    return parser.parse_statement()
