from typing import Any, List

from .Parsec import Error, Parser, T

# Characters of input quoted after "got" in an error message
DEFAULT_CONTEXT = 10


def format_expected(expected: List[str]) -> str:
    if len(expected) == 1:
        return expected[0]
    return "one of " + ", ".join(expected)


def format_got(stream: str, error: Error, context: int = DEFAULT_CONTEXT) -> str:
    i = error.furthest
    location = f" at character {i}"
    if i >= len(stream):
        return f"{location}, got end of input"
    actual = stream[i:i + context]
    if len(stream) - i > context:
        actual += "..."
    return f"{location}, got '{actual}'"


def format_error(stream: str, error: Error, context: int = DEFAULT_CONTEXT) -> str:
    """
    Render a failed parse as a one-line message, e.g.

        expected one of 'foo', 'bar' at character 0, got 'baz'
    """
    return "expected " + format_expected(error.expected) + format_got(stream, error, context)


class ParseError(Exception):
    """Raised by `parse_or_raise` when the input does not match."""

    def __init__(self, message: str, error: Error):
        super().__init__(message)
        self.error = error

    @property
    def furthest(self) -> int:
        return self.error.furthest

    @property
    def expected(self) -> List[str]:
        return self.error.expected


def parse_or_raise(parser: Parser[T], stream: str, env: Any = None) -> T:
    """Parse all of `stream`, returning the value or raising `ParseError`."""
    outcome = parser.parse(stream, env)
    if outcome.ok:
        return outcome.value
    raise ParseError(format_error(stream, outcome), outcome)
