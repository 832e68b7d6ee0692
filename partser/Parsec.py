import re
from dataclasses import dataclass, field, replace as _dc_replace
from typing import Any, Callable, Generic, List, Optional, TypeVar, Union

T = TypeVar('T')  # Generic type for parser results
U = TypeVar('U')


@dataclass(frozen=True)
class Result(Generic[T]):
    """
    Outcome of a single parse attempt at one offset.

    A success carries the offset to resume from in `index` and the produced
    `value`. A failure carries the furthest offset any sub-attempt reached in
    `furthest` and what would have been accepted there in `expected`.
    Successes may also carry failure information picked up from abandoned
    branches; that is how the deepest failure survives backtracking.
    """
    status: bool
    index: int
    value: Optional[T]
    furthest: int
    expected: List[str] = field(default_factory=list)

    @staticmethod
    def success(index: int, value: T) -> 'Result[T]':
        return Result(True, index, value, -1, [])

    @staticmethod
    def failure(index: int, expected: str) -> 'Result[Any]':
        return Result(False, index, None, index, [expected])


def merge(current: Result[T], previous: Optional[Result[Any]]) -> Result[T]:
    """
    Combine a fresh result with the best failure information seen so far.

    Deeper progress always wins. On a tie the expected lists are concatenated
    (current first, no deduplication). If `previous` got further, its
    expectation replaces the current one while the current status, index and
    value are kept.
    """
    if previous is None or current.furthest > previous.furthest:
        return current
    if current.furthest == previous.furthest:
        expected = current.expected + previous.expected
    else:
        expected = previous.expected
    return _dc_replace(current, furthest=previous.furthest, expected=expected)


@dataclass(frozen=True)
class SourcePos:
    """A character offset together with its 1-based line and column."""
    offset: int
    line: int = 1
    column: int = 1

    @staticmethod
    def from_offset(stream: str, offset: int) -> 'SourcePos':
        line = stream.count('\n', 0, offset) + 1
        column = offset - (stream.rfind('\n', 0, offset) + 1) + 1
        return SourcePos(offset, line, column)

    def __str__(self) -> str:
        return f"line {self.line}, column {self.column}"


@dataclass(frozen=True)
class Mark(Generic[T]):
    """A parsed value together with where it started and ended."""
    start: Any
    value: T
    end: Any


@dataclass(frozen=True)
class Ok(Generic[T]):
    """Public outcome of a successful parse."""
    value: T
    ok: bool = field(default=True, init=False)


@dataclass(frozen=True)
class Error:
    """Public outcome of a failed parse."""
    furthest: int
    expected: List[str]
    ok: bool = field(default=False, init=False)


Outcome = Union[Ok[T], Error]

Behaviour = Callable[[str, int, Any], Result[T]]


def _describe(thing: Any) -> str:
    return f"{type(thing).__name__} {thing!r}"


def is_parser(thing: Any) -> bool:
    """True if `thing` is a parser object."""
    return isinstance(thing, Parser)


def ensure_parser(name: str, thing: Any) -> None:
    if not is_parser(thing):
        raise TypeError(f"partser.{name}: Not a parser: {_describe(thing)}")


def ensure_callable(name: str, thing: Any) -> None:
    # Parsers are callable too, but never stand in for a plain function
    if isinstance(thing, Parser) or not callable(thing):
        raise TypeError(f"partser.{name}: Not a function: {_describe(thing)}")


def ensure_number(name: str, thing: Any) -> None:
    if isinstance(thing, bool) or not isinstance(thing, (int, float)):
        raise TypeError(f"partser.{name}: Not a number: {_describe(thing)}")


def ensure_string(name: str, thing: Any) -> None:
    if not isinstance(thing, str):
        raise TypeError(f"partser.{name}: Not a string: {_describe(thing)}")


def ensure_regex(name: str, thing: Any) -> None:
    if not isinstance(thing, re.Pattern):
        raise TypeError(f"partser.{name}: Not a regex: {_describe(thing)}")


class Parser(Generic[T]):
    """
    A parser: an object wrapping a behaviour function.

    The behaviour lives in `parse_fn` and is called as
    `parse_fn(stream, index, env)`, returning a `Result`. The attribute is
    the one piece of shared mutable state in the library: `Prim.replace` and
    `Prim.lazy` overwrite it in place so that every existing reference to
    this object sees the new behaviour. Do that only while wiring a grammar
    together, never while a parse using the same grammar is running.
    """

    def __init__(self, parse_fn: Behaviour[T], name: Optional[str] = None):
        self.parse_fn = parse_fn
        self.name = name

    def __call__(self, stream: str, index: int = 0, env: Any = None) -> Result[T]:
        # Raw invocation: no end-of-input check
        return self.parse_fn(stream, index, env)

    def __repr__(self) -> str:
        if self.name:
            return f"<Parser {self.name}>"
        return f"<Parser at {id(self):#x}>"

    def named(self, name: str) -> 'Parser[T]':
        """Give the parser a name for `repr` and trace logging."""
        self.name = name
        return self

    def parse(self, stream: str, env: Any = None) -> Outcome:
        """Parse the whole of `stream`; trailing input is a failure."""
        return Prim.parse(self, stream, env)

    # Monadic bind (>>=)
    def bind(self, f: Callable[[T], 'Parser[U]']) -> 'Parser[U]':
        return Prim.chain(self, f)

    def __rshift__(self, f: Callable[[T], 'Parser[U]']) -> 'Parser[U]':
        return self.bind(f)

    # Functor map (<$>)
    def map(self, f: Callable[[T], U]) -> 'Parser[U]':
        return Prim.map(self, f)

    # Alternative (<|>)
    def __or__(self, other: 'Parser[U]') -> 'Parser[Union[T, U]]':
        return Prim.alt(self, other)

    # Sequence, keeping both values as a list
    def __and__(self, other: 'Parser[U]') -> 'Parser[List[Any]]':
        return Prim.seq(self, other)

    # Sequence (*>)
    def __gt__(self, other: 'Parser[U]') -> 'Parser[U]':
        return Prim.map(Prim.seq(self, other), lambda values: values[1])

    # Sequence (<*)
    def __lt__(self, other: 'Parser[U]') -> 'Parser[T]':
        return Prim.map(Prim.seq(self, other), lambda values: values[0])

    # Label (<?>)
    def label(self, msg: str) -> 'Parser[T]':
        return Prim.desc(self, msg)

    def times(self, min: int, max: Optional[float] = None) -> 'Parser[List[T]]':
        return Prim.times(self, min, max)

    def many(self) -> 'Parser[List[T]]':
        return Prim.times(self, 0, float('inf'))

    def mark(self) -> 'Parser[Mark[T]]':
        return Prim.mark(self)


from . import Prim  # noqa: E402
