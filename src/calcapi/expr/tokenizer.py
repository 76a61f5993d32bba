"""
Tokenizer (lexer) for the calculator language.

Converts one statement's source into a stream of tokens for the parser.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional

from .errors import TokenizerError
from .limits import ExpressionLimits, check_expression_length, check_string_length


class TokenType(Enum):
    """Token types produced by the tokenizer."""

    # Literals
    STRING = "STRING"
    NUMBER = "NUMBER"

    # Identifiers and keywords
    IDENTIFIER = "IDENTIFIER"
    RETURN = "RETURN"

    # Operators
    PLUS = "PLUS"
    MINUS = "MINUS"
    STAR = "STAR"
    SLASH = "SLASH"
    PERCENT = "PERCENT"
    CARET = "CARET"
    ASSIGN = "ASSIGN"
    DEFINE = "DEFINE"

    # Delimiters
    LPAREN = "LPAREN"
    RPAREN = "RPAREN"
    COMMA = "COMMA"

    # Special
    EOF = "EOF"


@dataclass
class Token:
    """A token produced by the tokenizer."""

    type: TokenType
    value: str
    position: int


# Keywords recognized by the tokenizer
KEYWORDS: Dict[str, TokenType] = {
    "return": TokenType.RETURN,
}

SINGLE_CHAR_TOKENS: Dict[str, TokenType] = {
    "(": TokenType.LPAREN,
    ")": TokenType.RPAREN,
    ",": TokenType.COMMA,
    "+": TokenType.PLUS,
    "-": TokenType.MINUS,
    "*": TokenType.STAR,
    "/": TokenType.SLASH,
    "%": TokenType.PERCENT,
    "^": TokenType.CARET,
    "=": TokenType.ASSIGN,
}

ESCAPE_MAP: Dict[str, str] = {
    '"': '"',
    "'": "'",
    "\\": "\\",
    "/": "/",
    "a": "\a",
    "b": "\b",
    "f": "\f",
    "n": "\n",
    "r": "\r",
    "t": "\t",
    "v": "\v",
}


def _is_digit(ch: str) -> bool:
    """Checks if a character is a digit."""
    return "0" <= ch <= "9"


def _is_hex_digit(ch: str) -> bool:
    return _is_digit(ch) or ("a" <= ch.lower() <= "f")


def _is_identifier_start(ch: str) -> bool:
    """Checks if a character can start an identifier."""
    return ch == "_" or ch.isalpha()


def _is_identifier_part(ch: str) -> bool:
    """Checks if a character can continue an identifier."""
    return _is_identifier_start(ch) or _is_digit(ch)


def _is_whitespace(ch: str) -> bool:
    """Checks if a character is whitespace."""
    return ch in (" ", "\t", "\n", "\r")


class Tokenizer:
    """Tokenizer for statement strings."""

    def __init__(self, source: str, limits: Optional[ExpressionLimits] = None):
        self._source = source
        self._limits = limits
        self._position = 0
        self._tokens: List[Token] = []

    def tokenize(self) -> List[Token]:
        """Tokenizes the source statement and returns all tokens."""
        check_expression_length(self._source, self._limits)

        while not self._is_at_end():
            self._scan_token()

        self._tokens.append(Token(TokenType.EOF, "", self._position))
        return self._tokens

    def _is_at_end(self) -> bool:
        return self._position >= len(self._source)

    def _peek(self) -> str:
        if self._is_at_end():
            return "\0"
        return self._source[self._position]

    def _advance(self) -> str:
        ch = self._source[self._position]
        self._position += 1
        return ch

    def _add_token(self, token_type: TokenType, value: str, position: int) -> None:
        self._tokens.append(Token(token_type, value, position))

    def _error(self, cause: str, position: int) -> TokenizerError:
        return TokenizerError(cause, position, self._source)

    def _scan_token(self) -> None:
        ch = self._advance()
        start_position = self._position - 1

        if _is_whitespace(ch):
            return

        if ch == ":":
            if self._peek() == "=":
                self._advance()
                self._add_token(TokenType.DEFINE, ":=", start_position)
                return
            raise self._error("Unexpected ':'. Did you mean ':='?", start_position)

        if ch in SINGLE_CHAR_TOKENS:
            self._add_token(SINGLE_CHAR_TOKENS[ch], ch, start_position)
            return

        if ch == '"':
            self._scan_string(start_position)
            return

        # Number literals, including a leading-dot form such as `.5`
        if _is_digit(ch) or (ch == "." and _is_digit(self._peek())):
            self._scan_number(start_position)
            return

        if _is_identifier_start(ch):
            self._scan_identifier(start_position)
            return

        raise self._error(f"Unexpected character: '{ch}'", start_position)

    def _scan_string(self, start_position: int) -> None:
        chars: List[str] = []

        while not self._is_at_end() and self._peek() != '"':
            ch = self._advance()

            if ch == "\\":
                if self._is_at_end():
                    raise self._error("Unterminated string", start_position)
                escaped = self._advance()
                if escaped in ESCAPE_MAP:
                    chars.append(ESCAPE_MAP[escaped])
                elif escaped == "u":
                    chars.append(self._scan_unicode_escape())
                else:
                    raise self._error(
                        f"Invalid escape sequence: \\{escaped}", self._position - 2
                    )
            elif ch in ("\n", "\r"):
                raise self._error(
                    "Unterminated string (newline in string literal)", start_position
                )
            else:
                chars.append(ch)

        if self._is_at_end():
            raise self._error("Unterminated string", start_position)

        # Consume closing quote
        self._advance()

        value = "".join(chars)
        check_string_length(len(value), self._limits)
        self._add_token(TokenType.STRING, value, start_position)

    def _read_hex4(self, escape_position: int) -> int:
        digits = self._source[self._position : self._position + 4]
        if len(digits) != 4 or not all(_is_hex_digit(d) for d in digits):
            raise self._error(
                "Invalid unicode escape: expected 4 hex digits", escape_position
            )
        self._position += 4
        return int(digits, 16)

    def _scan_unicode_escape(self) -> str:
        escape_position = self._position - 2
        code = self._read_hex4(escape_position)

        # Surrogate pair written as two escapes
        if 0xD800 <= code <= 0xDBFF and self._source.startswith("\\u", self._position):
            saved_position = self._position
            self._position += 2
            low = self._read_hex4(escape_position)
            if 0xDC00 <= low <= 0xDFFF:
                return chr(0x10000 + ((code - 0xD800) << 10) + (low - 0xDC00))
            self._position = saved_position

        return chr(code)

    def _scan_number(self, start_position: int) -> None:
        # Back up to include the first character
        self._position -= 1

        chars: List[str] = []

        # Integer part
        while _is_digit(self._peek()):
            chars.append(self._advance())

        # Fractional part (`1.`, `1.5` and `.5` are all accepted)
        if self._peek() == ".":
            chars.append(self._advance())
            while _is_digit(self._peek()):
                chars.append(self._advance())

        # Exponent part
        if self._peek() in ("e", "E"):
            chars.append(self._advance())
            if self._peek() in ("+", "-"):
                chars.append(self._advance())
            if not _is_digit(self._peek()):
                raise self._error(
                    "Invalid number: expected exponent digits", start_position
                )
            while _is_digit(self._peek()):
                chars.append(self._advance())

        if _is_identifier_start(self._peek()) or self._peek() == ".":
            raise self._error(
                f"Invalid number: unexpected '{self._peek()}'", self._position
            )

        self._add_token(TokenType.NUMBER, "".join(chars), start_position)

    def _scan_identifier(self, start_position: int) -> None:
        # Back up to include the first character
        self._position -= 1

        chars: List[str] = []

        while _is_identifier_part(self._peek()):
            chars.append(self._advance())

        value = "".join(chars)
        keyword_type = KEYWORDS.get(value)
        if keyword_type:
            self._add_token(keyword_type, value, start_position)
        else:
            self._add_token(TokenType.IDENTIFIER, value, start_position)


def is_integer_literal(text: str) -> bool:
    """Checks whether number literal text has no fractional or exponent part."""
    return not any(ch in text for ch in ".eE")


def tokenize(source: str, limits: Optional[ExpressionLimits] = None) -> List[Token]:
    """
    Tokenizes a statement string into tokens.

    Args:
        source: The statement string to tokenize
        limits: Optional expression limits

    Returns:
        List of tokens

    Raises:
        TokenizerError: If the statement contains invalid tokens
    """
    tokenizer = Tokenizer(source, limits)
    return tokenizer.tokenize()
