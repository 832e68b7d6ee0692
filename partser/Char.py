import re
from typing import Any, Callable, Iterable, Union

from .Parsec import (
    Parser, Result, ensure_callable, ensure_string, ensure_regex,
)
from .Prim import desc, times


# Core function: Succeeds if the character satisfies a predicate
def satisfy(f: Callable[[str], bool]) -> Parser[str]:
    """Succeeds for any character where f returns True. Returns the parsed character."""
    ensure_callable('satisfy', f)
    return satisfy_env(lambda c, env: f(c), _predicate_name(f))


def satisfy_env(f: Callable[[str, Any], bool], name: Union[str, None] = None) -> Parser[str]:
    """Like `satisfy`, but the predicate also receives the environment."""
    ensure_callable('satisfy_env', f)
    expected = "a character matching " + (name or _predicate_name(f))

    def parse(stream: str, i: int, env: Any) -> Result[str]:
        if i < len(stream) and f(stream[i], env):
            return Result.success(i + 1, stream[i])
        return Result.failure(i, expected)
    return Parser(parse)


def _predicate_name(f: Callable[..., Any]) -> str:
    return getattr(f, '__name__', None) or repr(f)


def string(s: str) -> Parser[str]:
    """
    Parses the exact string s and returns it.

    A mismatch is reported at the first character that differs, so input
    that shares a prefix with `s` shows up as progress in error messages.
    """
    ensure_string('string', s)
    expected = f"'{s}'"
    length = len(s)

    def parse(stream: str, i: int, env: Any) -> Result[str]:
        if stream.startswith(s, i):
            return Result.success(i + length, s)
        j = 0
        while j < length and i + j < len(stream) and stream[i + j] == s[j]:
            j += 1
        return Result(False, i, None, i + j, [expected])
    return Parser(parse, expected)


def regex(pattern: Any, group: Union[int, str] = 0) -> Parser[str]:
    """
    Match a compiled regular expression at the current offset.

    Consumes the whole match and returns `group` of it (the whole match by
    default). A leading `^` anchors at the current offset, not at the start
    of the input.
    """
    ensure_regex('regex', pattern)
    if isinstance(group, bool) or not isinstance(group, (int, str)):
        raise TypeError(f"partser.regex: Not a group: {type(group).__name__} {group!r}")
    expected = f"/{pattern.pattern}/"
    if isinstance(pattern.pattern, str) and pattern.pattern.startswith('^'):
        # match() is already anchored at the offset it is given
        pattern = re.compile(pattern.pattern[1:], pattern.flags)

    def parse(stream: str, i: int, env: Any) -> Result[str]:
        match = pattern.match(stream, i)
        if match:
            return Result.success(match.end(), match.group(group))
        return Result.failure(i, expected)
    return Parser(parse, expected)


def _any_char(stream: str, i: int, env: Any) -> Result[str]:
    if i >= len(stream):
        return Result.failure(i, "any character")
    return Result.success(i + 1, stream[i])


def _rest(stream: str, i: int, env: Any) -> Result[str]:
    return Result.success(len(stream), stream[i:])


any_char = Parser(_any_char, "any character")
# Everything up to the end of input, possibly empty
rest = Parser(_rest, "rest")


def char(c: str) -> Parser[str]:
    """Parses a single character c and returns it."""
    return string(c)


# 1. oneOf: Parses any character in the provided list
def one_of(cs: Iterable[str]) -> Parser[str]:
    """Succeeds if the current character is in cs. Returns the parsed character."""
    allowed = frozenset(cs)
    return desc(satisfy(lambda c: c in allowed), f"one of {''.join(sorted(allowed))}")


# 2. noneOf: Parses any character not in the provided list
def none_of(cs: Iterable[str]) -> Parser[str]:
    """Succeeds if the current character is not in cs. Returns the parsed character."""
    forbidden = frozenset(cs)
    return desc(satisfy(lambda c: c not in forbidden), f"none of {''.join(sorted(forbidden))}")


def take_while(f: Callable[[str], bool]) -> Parser[str]:
    """The longest, possibly empty, run of characters satisfying f."""
    ensure_callable('take_while', f)

    def parse(stream: str, i: int, env: Any) -> Result[str]:
        j = i
        while j < len(stream) and f(stream[j]):
            j += 1
        return Result.success(j, stream[i:j])
    return Parser(parse)


def space() -> Parser[str]:
    return desc(satisfy(str.isspace), "space")


def spaces() -> Parser[str]:
    """Skips zero or more whitespace characters, returning them."""
    return take_while(str.isspace)


def newline() -> Parser[str]:
    return desc(char('\n'), "lf new-line")


def upper() -> Parser[str]:
    return desc(satisfy(str.isupper), "uppercase letter")


def lower() -> Parser[str]:
    return desc(satisfy(str.islower), "lowercase letter")


def alpha_num() -> Parser[str]:
    return desc(satisfy(str.isalnum), "letter or digit")


def letter() -> Parser[str]:
    return desc(satisfy(str.isalpha), "letter")


def digit() -> Parser[str]:
    """Parses an ASCII digit and returns it."""
    return desc(satisfy(lambda c: '0' <= c <= '9'), "digit")


def digits(min: int = 1) -> Parser[str]:
    """At least `min` ASCII digits, returned as one string."""
    return times(digit(), min, float('inf')).map(''.join)
