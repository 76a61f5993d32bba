"""
Preprocessor for the `string(...)` pseudo-function.

`string(hello)` lets users pass bare text. Before tokenizing, every
`string(<argument>)` call has its argument rewritten into a quoted string
literal:

- `string("hello")` - already quoted, left untouched
- `string(`raw text`)` - backtick delimiters stripped, inner text quoted
  verbatim
- `string(a\\(b\\))` - the escapes `\\n`, `\\t`, `\\\\`, `\\(` and `\\)` are
  decoded, any other backslash sequence is kept as written, and the result
  is quoted

Parentheses inside the argument may nest to any depth. An argument with no
matching `)` is left alone and fails later at parse time.
"""

import json
from typing import List, Optional

_CALL_PREFIX = "string("

_ARGUMENT_ESCAPES = {
    "n": "\n",
    "t": "\t",
    "\\": "\\",
    "(": "(",
    ")": ")",
}


def quote_string(text: str) -> str:
    """Returns `text` as a double-quoted, escaped string literal."""
    return json.dumps(text, ensure_ascii=False)


def _skip_quoted(source: str, start: int) -> int:
    """Returns the index just past the quoted run opening at `start`."""
    quote = source[start]
    i = start + 1
    while i < len(source):
        ch = source[i]
        if ch == "\\":
            i += 2
            continue
        if ch == quote:
            return i + 1
        i += 1
    return len(source)


def _find_closing_paren(source: str, start: int) -> Optional[int]:
    """Finds the `)` that closes a call whose arguments begin at `start`."""
    depth = 0
    i = start
    while i < len(source):
        ch = source[i]
        if ch == "\\":
            i += 2
            continue
        if ch in ('"', "`"):
            i = _skip_quoted(source, i)
            continue
        if ch == "(":
            depth += 1
        elif ch == ")":
            if depth == 0:
                return i
            depth -= 1
        i += 1
    return None


def _unescape_argument(argument: str) -> str:
    parts: List[str] = []
    i = 0
    while i < len(argument):
        ch = argument[i]
        if ch == "\\" and i + 1 < len(argument):
            escaped = argument[i + 1]
            parts.append(_ARGUMENT_ESCAPES.get(escaped, "\\" + escaped))
            i += 2
            continue
        parts.append(ch)
        i += 1
    return "".join(parts)


def normalize_argument(argument: str) -> str:
    """Turns the raw text between `string(` and `)` into a string literal."""
    if len(argument) >= 2 and argument[0] == '"' and argument[-1] == '"':
        return argument

    if len(argument) >= 2 and argument[0] == "`" and argument[-1] == "`":
        return quote_string(argument[1:-1])

    return quote_string(_unescape_argument(argument))


def _starts_call(source: str, index: int) -> bool:
    if not source.startswith(_CALL_PREFIX, index):
        return False
    if index == 0:
        return True
    before = source[index - 1]
    return not (before.isalnum() or before == "_")


def preprocess(expression: str) -> str:
    """
    Rewrites the arguments of every `string(...)` call into string literals.

    Text inside existing double-quoted literals is copied through unchanged.
    """
    parts: List[str] = []
    i = 0

    while i < len(expression):
        ch = expression[i]

        if ch == '"':
            end = _skip_quoted(expression, i)
            parts.append(expression[i:end])
            i = end
            continue

        if _starts_call(expression, i):
            argument_start = i + len(_CALL_PREFIX)
            close = _find_closing_paren(expression, argument_start)
            if close is not None:
                argument = expression[argument_start:close]
                parts.append(f"{_CALL_PREFIX}{normalize_argument(argument)})")
                i = close + 1
                continue

        parts.append(ch)
        i += 1

    return "".join(parts)
