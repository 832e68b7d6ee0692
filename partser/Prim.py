import logging
import math
from typing import Any, Callable, List, Optional, Tuple

from .Parsec import (
    Parser, Result, Mark, SourcePos, Ok, Error, Outcome, Behaviour, T, U, merge,
    ensure_parser, ensure_callable, ensure_number, ensure_string,
)
from .ErrorFormat import format_expected

log = logging.getLogger("partser")


def custom(parse_fn: Behaviour[T]) -> Parser[T]:
    """Lift a raw `(stream, index, env) -> Result` function into a parser."""
    ensure_callable('custom', parse_fn)
    return Parser(parse_fn)


def succeed(value: T) -> Parser[T]:
    """Return a parser that succeeds with a value without consuming input."""
    return Parser(lambda stream, i, env: Result.success(i, value))


pure = succeed


def fail(expected: str) -> Parser[Any]:
    """A parser that always fails, expecting `expected`."""
    ensure_string('fail', expected)
    return Parser(lambda stream, i, env: Result.failure(i, expected))


def _index(stream: str, i: int, env: Any) -> Result[int]:
    return Result.success(i, i)


def _lc_index(stream: str, i: int, env: Any) -> Result[SourcePos]:
    return Result.success(i, SourcePos.from_offset(stream, i))


def _eof(stream: str, i: int, env: Any) -> Result[None]:
    if i < len(stream):
        return Result.failure(i, "end of input")
    return Result.success(i, None)


# Current offset, consuming nothing
index = Parser(_index, "index")
# Current offset with 1-based line and column
lc_index = Parser(_lc_index, "lc_index")
eof = Parser(_eof, "eof")


def seq(*parsers: Parser[Any]) -> Parser[List[Any]]:
    """
    Run `parsers` one after another, collecting their values in a list.

    Stops at the first failure. Failure information is merged after every
    step, so a success can still report how far an abandoned branch inside
    one of the steps got.
    """
    for p in parsers:
        ensure_parser('seq', p)

    def parse(stream: str, i: int, env: Any) -> Result[List[Any]]:
        result: Optional[Result[Any]] = None
        values = []
        for p in parsers:
            result = merge(p(stream, i, env), result)
            if not result.status:
                return result
            values.append(result.value)
            i = result.index
        return merge(Result.success(i, values), result)
    return Parser(parse)


def alt(*parsers: Parser[Any]) -> Parser[Any]:
    """
    Try `parsers` in order at the same offset; the first success wins.

    The failures of the alternatives tried before the winner are merged into
    its result, and into the final failure if none match.
    """
    if not parsers:
        raise ValueError("partser.alt: Zero alternates")
    for p in parsers:
        ensure_parser('alt', p)

    def parse(stream: str, i: int, env: Any) -> Result[Any]:
        result: Optional[Result[Any]] = None
        for p in parsers:
            result = merge(p(stream, i, env), result)
            if result.status:
                return result
        return result
    return Parser(parse)


def times(parser: Parser[T], min: int, max: Optional[float] = None) -> Parser[List[T]]:
    """
    Match `parser` at least `min` and at most `max` times.

    `max` defaults to `min`; pass `math.inf` for no upper bound. The loop is
    iterative, so long repetitions do not grow the call stack. The failing
    attempt that ends the optional phase consumes nothing, but its failure is
    merged into the returned success.
    """
    if max is None:
        max = min
    ensure_parser('times', parser)
    ensure_number('times', min)
    ensure_number('times', max)
    if min < 0 or max < min:
        raise ValueError(f"partser.times: Bad bounds: min={min}, max={max}")

    def parse(stream: str, i: int, env: Any) -> Result[List[T]]:
        values = []
        best: Optional[Result[Any]] = None
        count = 0

        # Mandatory matches
        while count < min:
            result = merge(parser(stream, i, env), best)
            if not result.status:
                return result
            best = result
            values.append(result.value)
            i = result.index
            count += 1

        # Optional matches
        while count < max:
            result = merge(parser(stream, i, env), best)
            best = result
            if not result.status:
                break
            values.append(result.value)
            if result.index == i and math.isinf(max):
                # A match that consumed nothing would repeat forever
                break
            i = result.index
            count += 1

        return merge(Result.success(i, values), best)
    return Parser(parse)


def map(parser: Parser[T], fn: Callable[[T], U]) -> Parser[U]:
    """Apply `fn` to the value of a successful parse."""
    ensure_parser('map', parser)
    ensure_callable('map', fn)
    return map_env(parser, lambda value, env: fn(value))


def map_env(parser: Parser[T], fn: Callable[[T, Any], U]) -> Parser[U]:
    """Like `map`, but `fn` also receives the current environment."""
    ensure_parser('map_env', parser)
    ensure_callable('map_env', fn)

    def parse(stream: str, i: int, env: Any) -> Result[U]:
        result = parser(stream, i, env)
        if not result.status:
            return result
        return merge(Result.success(result.index, fn(result.value, env)), result)
    return Parser(parse)


def chain(parser: Parser[T], f: Callable[[T], Parser[U]]) -> Parser[U]:
    """
    Monadic bind: feed the value of `parser` to `f` and run the parser it
    returns from where `parser` stopped.
    """
    ensure_parser('chain', parser)
    ensure_callable('chain', f)
    return chain_env(parser, lambda value, env: f(value))


def chain_env(parser: Parser[T], f: Callable[[T, Any], Parser[U]]) -> Parser[U]:
    ensure_parser('chain_env', parser)
    ensure_callable('chain_env', f)

    def parse(stream: str, i: int, env: Any) -> Result[U]:
        result = parser(stream, i, env)
        if not result.status:
            return result
        next_parser = f(result.value, env)
        ensure_parser('chain', next_parser)
        return merge(next_parser(stream, result.index, env), result)
    return Parser(parse)


def desc(parser: Parser[T], expected: str) -> Parser[T]:
    """Replace whatever a failing `parser` expected with `expected`."""
    ensure_parser('desc', parser)
    ensure_string('desc', expected)

    def parse(stream: str, i: int, env: Any) -> Result[T]:
        result = parser(stream, i, env)
        if result.status:
            return result
        return Result(False, result.index, None, result.furthest, [expected])
    return Parser(parse, expected)


def mark(parser: Parser[T]) -> Parser[Mark[T]]:
    """Wrap the value of `parser` with its start and end offsets."""
    ensure_parser('mark', parser)
    return map(seq(index, parser, index), lambda v: Mark(v[0], v[1], v[2]))


def lc_mark(parser: Parser[T]) -> Parser[Mark[T]]:
    """Like `mark`, but the start and end are `SourcePos` values."""
    ensure_parser('lc_mark', parser)
    return map(seq(lc_index, parser, lc_index), lambda v: Mark(v[0], v[1], v[2]))


def lazy(thunk: Callable[[], Parser[T]]) -> Parser[T]:
    """
    Defer building a parser until it is first used.

    On the first invocation `thunk` is called and the returned parser's
    behaviour is copied into this one, so later invocations go straight to
    it. This is what lets a rule refer to itself:

        expr = alt(seq(term, string('+'), lazy(lambda: expr)), term)
    """
    ensure_callable('lazy', thunk)
    target: Optional[Parser[T]] = None

    def parse(stream: str, i: int, env: Any) -> Result[T]:
        nonlocal target
        # Reached through a clone taken before the first parse
        if target is not None:
            return target(stream, i, env)
        target = thunk()
        ensure_parser('lazy', target)
        replace(parser, target)
        result = target(stream, i, env)
        # target may itself have been an unresolved lazy parser
        replace(parser, target)
        return result
    parser: Parser[T] = Parser(parse)
    return parser


def clone(parser: Parser[T]) -> Parser[T]:
    """A new parser object that currently shares `parser`'s behaviour."""
    ensure_parser('clone', parser)
    return Parser(parser.parse_fn, parser.name)


def replace(original: Parser[Any], replacement: Parser[T]) -> None:
    """
    Make `original` behave like `replacement`, in place.

    Every reference to `original`, including ones captured before this call,
    sees the new behaviour. Meant for wiring up recursive grammars once; it
    must not be called on a grammar that is in the middle of a parse.
    """
    ensure_parser('replace', original)
    ensure_parser('replace', replacement)
    original.parse_fn = replacement.parse_fn


def sub_env(parser: Parser[T], derive_env: Callable[[Any], Any]) -> Parser[T]:
    """Run `parser` with an environment derived from the current one."""
    ensure_parser('sub_env', parser)
    ensure_callable('sub_env', derive_env)

    def parse(stream: str, i: int, env: Any) -> Result[T]:
        return parser(stream, i, derive_env(env))
    return Parser(parse)


def from_env(lookup: Callable[[Any], Parser[T]]) -> Parser[T]:
    """Run whichever parser `lookup` picks out of the current environment."""
    ensure_callable('from_env', lookup)

    def parse(stream: str, i: int, env: Any) -> Result[T]:
        found = lookup(env)
        if not isinstance(found, Parser):
            raise TypeError(
                f"partser.from_env: Non-parser value {type(found).__name__} "
                f"{found!r} from {lookup!r}")
        return found(stream, i, env)
    return Parser(parse)


def except_(allowed: Parser[T], forbidden: Parser[Any]) -> Parser[T]:
    """
    Match `allowed`, unless `forbidden` matches at the same offset.

    The failure when `forbidden` matches can only say what was not wanted;
    wrap the result in `desc` to give it a clearer name.
    """
    ensure_parser('except_', allowed)
    ensure_parser('except_', forbidden)

    def parse(stream: str, i: int, env: Any) -> Result[T]:
        forbidden_result = forbidden(stream, i, env)
        if forbidden_result.status:
            return Result.failure(i, f"something that is not '{forbidden_result.value}'")
        allowed_result = allowed(stream, i, env)
        if allowed_result.status:
            return allowed_result
        return Result.failure(
            i,
            f"{format_expected(allowed_result.expected)} "
            f"(except {format_expected(forbidden_result.expected)})")
    return Parser(parse)


def parse(parser: Parser[T], stream: str, env: Any = None) -> Outcome:
    """
    Parse all of `stream` with `parser`.

    Returns `Ok(value)` when the whole input matched and
    `Error(furthest, expected)` otherwise. Unconsumed trailing input counts
    as a failure.
    """
    ensure_parser('parse', parser)
    ensure_string('parse', stream)
    log.debug("parsing %d characters with %r", len(stream), parser)
    result = map(seq(parser, eof), lambda values: values[0])(stream, 0, env)
    if result.status:
        return Ok(result.value)
    log.debug("parse failed at %d, expected %s", result.furthest, result.expected)
    return Error(result.furthest, list(result.expected))


def run_parser(parser: Parser[T], stream: str,
               env: Any = None) -> Tuple[Optional[T], Optional[Error]]:
    """`parse`, returned as a `(value, error)` pair where one side is None."""
    outcome = parse(parser, stream, env)
    if outcome.ok:
        return outcome.value, None
    return None, outcome
