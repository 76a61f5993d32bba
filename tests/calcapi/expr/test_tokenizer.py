"""
Tests for the calculator tokenizer.
"""

import pytest

from calcapi.expr import (
    ExpressionLimits,
    LimitExceededError,
    ParseError,
    TokenizerError,
    tokenize,
)
from calcapi.expr.tokenizer import TokenType, is_integer_literal


def token_types(source: str) -> list[TokenType]:
    """Helper to tokenize and return just the token types."""
    return [t.type for t in tokenize(source)]


class TestLiterals:
    """Tests for literal tokenization."""

    def test_tokenizes_string_literals(self):
        tokens = tokenize('"hello"')
        assert len(tokens) == 2
        assert tokens[0].type == TokenType.STRING
        assert tokens[0].value == "hello"
        assert tokens[0].position == 0
        assert tokens[1].type == TokenType.EOF

    def test_tokenizes_escape_sequences_in_strings(self):
        tokens = tokenize('"line1\\nline2\\ttab"')
        assert tokens[0].value == "line1\nline2\ttab"

    def test_tokenizes_escaped_quotes_in_strings(self):
        tokens = tokenize('"say \\"hello\\""')
        assert tokens[0].value == 'say "hello"'

    def test_tokenizes_unicode_escapes(self):
        tokens = tokenize('"caf\\u00e9"')
        assert tokens[0].value == "café"

    def test_joins_surrogate_pair_escapes(self):
        tokens = tokenize('"\\ud83d\\ude00"')
        assert tokens[0].value == "\U0001F600"

    def test_throws_on_invalid_escape(self):
        with pytest.raises(TokenizerError, match="Invalid escape sequence"):
            tokenize('"\\q"')

    def test_throws_on_unterminated_string(self):
        with pytest.raises(TokenizerError, match="Unterminated string"):
            tokenize('"unterminated')

    def test_throws_on_newline_in_string(self):
        with pytest.raises(TokenizerError, match="newline"):
            tokenize('"line1\nline2"')

    def test_rejects_single_quoted_strings(self):
        with pytest.raises(TokenizerError, match="Unexpected character"):
            tokenize("'world'")

    def test_tokenizes_integer_literals(self):
        tokens = tokenize("42")
        assert tokens[0].type == TokenType.NUMBER
        assert tokens[0].value == "42"

    @pytest.mark.parametrize("text", ["3.14159", ".5", "1.", "1e10", "2.5E-3", "1e+6"])
    def test_tokenizes_number_forms(self, text):
        tokens = tokenize(text)
        assert tokens[0].type == TokenType.NUMBER
        assert tokens[0].value == text
        assert tokens[1].type == TokenType.EOF

    def test_throws_on_missing_exponent_digits(self):
        with pytest.raises(TokenizerError, match="exponent digits"):
            tokenize("1e")

    def test_throws_on_letter_after_number(self):
        with pytest.raises(TokenizerError, match="Invalid number"):
            tokenize("12abc")

    def test_throws_on_second_decimal_point(self):
        with pytest.raises(TokenizerError, match="Invalid number"):
            tokenize("1.2.3")


class TestIdentifiers:
    """Tests for identifiers and keywords."""

    def test_tokenizes_identifiers(self):
        tokens = tokenize("_foo bar2")
        assert tokens[0].type == TokenType.IDENTIFIER
        assert tokens[0].value == "_foo"
        assert tokens[1].type == TokenType.IDENTIFIER
        assert tokens[1].value == "bar2"
        assert tokens[1].position == 5

    def test_accepts_unicode_letters(self):
        tokens = tokenize("größe")
        assert tokens[0].type == TokenType.IDENTIFIER
        assert tokens[0].value == "größe"

    def test_tokenizes_return_keyword(self):
        assert token_types("return x") == [
            TokenType.RETURN,
            TokenType.IDENTIFIER,
            TokenType.EOF,
        ]

    def test_keywords_are_case_sensitive(self):
        assert token_types("Return")[0] == TokenType.IDENTIFIER


class TestOperators:
    """Tests for operators and delimiters."""

    def test_tokenizes_arithmetic_operators(self):
        assert token_types("+ - * / % ^") == [
            TokenType.PLUS,
            TokenType.MINUS,
            TokenType.STAR,
            TokenType.SLASH,
            TokenType.PERCENT,
            TokenType.CARET,
            TokenType.EOF,
        ]

    def test_tokenizes_assignment_forms(self):
        tokens = tokenize("x := 1")
        assert [t.type for t in tokens] == [
            TokenType.IDENTIFIER,
            TokenType.DEFINE,
            TokenType.NUMBER,
            TokenType.EOF,
        ]
        assert tokens[1].value == ":="
        assert tokens[1].position == 2
        assert token_types("x = 1")[1] == TokenType.ASSIGN

    def test_tokenizes_call_delimiters(self):
        assert token_types("pow(2, 3)") == [
            TokenType.IDENTIFIER,
            TokenType.LPAREN,
            TokenType.NUMBER,
            TokenType.COMMA,
            TokenType.NUMBER,
            TokenType.RPAREN,
            TokenType.EOF,
        ]

    def test_throws_on_lone_colon(self):
        with pytest.raises(TokenizerError, match="Did you mean ':='"):
            tokenize("x : 1")

    def test_throws_on_unknown_character(self):
        with pytest.raises(TokenizerError, match="Unexpected character: '&'") as info:
            tokenize("1 & 2")
        assert info.value.position == 2


class TestErrors:
    """Tests for tokenizer error reporting."""

    def test_tokenizer_errors_are_parse_errors(self):
        with pytest.raises(ParseError):
            tokenize("#")

    def test_error_names_the_statement(self):
        with pytest.raises(TokenizerError) as info:
            tokenize("1 $ 2")
        assert str(info.value) == (
            "parse error in statement '1 $ 2': Unexpected character: '$'"
        )
        assert info.value.cause == "Unexpected character: '$'"

    def test_enforces_expression_length(self):
        with pytest.raises(LimitExceededError, match="max_expression_length"):
            tokenize("1+1", ExpressionLimits(max_expression_length=2))

    def test_enforces_string_length(self):
        with pytest.raises(LimitExceededError, match="max_string_length"):
            tokenize('"abcdef"', ExpressionLimits(max_string_length=5))


class TestIntegerLiterals:
    """Tests for integer-literal detection."""

    @pytest.mark.parametrize(
        "text, expected",
        [("12", True), ("-3", True), ("1.5", False), ("1e3", False), (".5", False)],
    )
    def test_is_integer_literal(self, text, expected):
        assert is_integer_literal(text) is expected
