import logging
from dataclasses import replace
from functools import reduce
from typing import Any, Callable, List, Optional

from .Parsec import Parser, Result, T, ensure_callable, ensure_parser
from .Prim import alt, except_, map, seq, succeed, times

log = logging.getLogger("partser")

INF = float('inf')


def skip(p: Parser[T], after: Parser[Any]) -> Parser[T]:
    """Parses `p` then `after`, returning the value of `p`."""
    return map(seq(p, after), lambda values: values[0])


def seq_map(*args: Any) -> Parser[Any]:
    """`seq_map(p1, ..., pn, f)`: runs the parsers and calls `f` with their values spread out."""
    *parsers, mapper = args
    ensure_callable('seq_map', mapper)
    return map(seq(*parsers), lambda values: mapper(*values))


# 1. choice: Tries parsers in order until one succeeds
def choice(parsers: List[Parser[T]]) -> Parser[T]:
    """
    Applies a list of parsers in order until one succeeds.
    Returns the value of the succeeding parser, or fails if none succeed.
    """
    return alt(*parsers)


# 2. count: Parses n occurrences of a parser
def count(n: int, p: Parser[T]) -> Parser[List[T]]:
    return times(p, n, n)


def many(p: Parser[T]) -> Parser[List[T]]:
    """Parse zero or more occurrences of `p`."""
    return times(p, 0, INF)


def many1(p: Parser[T]) -> Parser[List[T]]:
    """
    Applies parser p one or more times, returning a list of results.
    """
    return times(p, 1, INF)


def skip_many(p: Parser[Any]) -> Parser[None]:
    """Skips zero or more occurrences of `p`."""
    return map(many(p), lambda _: None)


def skip_many1(p: Parser[Any]) -> Parser[None]:
    return map(many1(p), lambda _: None)


# 3. between: Parses an opening parser, a main parser, and a closing parser
def between(open: Parser[Any], close: Parser[Any], p: Parser[T]) -> Parser[T]:
    """
    Parses 'open', then 'p', then 'close', returning the result of 'p'.
    """
    return map(seq(open, p, close), lambda values: values[1])


# 4. option: Tries a parser, returning a default value on failure
def option(x: T, p: Parser[T]) -> Parser[T]:
    """
    Tries parser p; returns its result if successful, else x.
    """
    return alt(p, succeed(x))


def option_maybe(p: Parser[T]) -> Parser[Optional[T]]:
    return option(None, p)


def optional(p: Parser[Any]) -> Parser[None]:
    """
    Tries parser p; returns None whether it succeeds or fails.
    """
    return option(None, map(p, lambda _: None))


def sep_by1(p: Parser[T], sep: Parser[Any]) -> Parser[List[T]]:
    """
    Parses one or more occurrences of p separated by sep, returning a list of p's results.
    """
    rest = many(map(seq(sep, p), lambda values: values[1]))
    return map(seq(p, rest), lambda values: [values[0]] + values[1])


def sep_by(p: Parser[T], sep: Parser[Any]) -> Parser[List[T]]:
    # New empty list on every parse
    return alt(sep_by1(p, sep), map(succeed(None), lambda _: []))


def end_by(p: Parser[T], sep: Parser[Any]) -> Parser[List[T]]:
    """
    Parses zero or more occurrences of p, each followed by sep.
    """
    return many(skip(p, sep))


def sep_end_by(p: Parser[T], sep: Parser[Any]) -> Parser[List[T]]:
    """
    Parses zero or more occurrences of p separated and optionally ended by sep.
    """
    return skip(sep_by(p, sep), optional(sep))


def chainl1(p: Parser[T], op: Parser[Callable[[T, T], T]]) -> Parser[T]:
    """
    Parses one or more p separated by op, applying op left-associatively.
    """
    def fold(values: List[Any]) -> T:
        first, pairs = values
        return reduce(lambda acc, pair: pair[0](acc, pair[1]), pairs, first)
    return map(seq(p, many(seq(op, p))), fold)


def chainr1(p: Parser[T], op: Parser[Callable[[T, T], T]]) -> Parser[T]:
    """
    Parses one or more p separated by op, applying op right-associatively.
    """
    def fold(values: List[Any]) -> T:
        first, pairs = values
        if not pairs:
            return first
        # [t0, (f1, t1), (f2, t2)] -> f1(t0, f2(t1, t2))
        terms = [first] + [term for _, term in pairs]
        acc = terms[-1]
        for k in range(len(pairs) - 1, -1, -1):
            acc = pairs[k][0](terms[k], acc)
        return acc
    return map(seq(p, many(seq(op, p))), fold)


def not_followed_by(p: Parser[Any]) -> Parser[None]:
    """Succeeds, consuming nothing, when `p` does not match here."""
    return except_(succeed(None), p)


def look_ahead(p: Parser[T]) -> Parser[T]:
    """Parse `p` without consuming input."""
    ensure_parser('look_ahead', p)

    def parse(stream: str, i: int, env: Any) -> Result[T]:
        result = p(stream, i, env)
        if not result.status:
            return result
        return replace(result, index=i)
    return Parser(parse)


def many_till(p: Parser[T], end: Parser[Any]) -> Parser[List[T]]:
    """
    Applies p zero or more times until end succeeds, returning a list of p's results.
    """
    return skip(many(except_(p, end)), end)


def trace(p: Parser[T], label: str) -> Parser[T]:
    """Log each attempt of `p` and its outcome at debug level."""
    ensure_parser('trace', p)

    def parse(stream: str, i: int, env: Any) -> Result[T]:
        log.debug("%s: trying at %d: %r", label, i, stream[i:i + 30])
        result = p(stream, i, env)
        if result.status:
            log.debug("%s: matched %d..%d: %r", label, i, result.index, result.value)
        else:
            log.debug("%s: failed at %d, expected %s", label, result.furthest, result.expected)
        return result
    return Parser(parse, label)
