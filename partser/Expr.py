from dataclasses import dataclass
from enum import Enum, auto
from typing import Any, Callable, List, TypeVar

from .Parsec import Parser
from .Combinators import choice, chainl1, chainr1, option
from .Prim import map, seq, succeed

T = TypeVar('T')


class Assoc(Enum):
    NONE = auto()
    LEFT = auto()
    RIGHT = auto()


@dataclass
class Operator:
    pass


@dataclass
class Infix(Operator):
    parser: Parser[Callable[[Any, Any], Any]]
    assoc: Assoc


@dataclass
class Prefix(Operator):
    parser: Parser[Callable[[Any], Any]]


@dataclass
class Postfix(Operator):
    parser: Parser[Callable[[Any], Any]]


def build_expression_parser(table: List[List[Operator]], simple_term: Parser[T]) -> Parser[T]:
    """
    Build an expression parser from an operator table.

    Each row of `table` is one precedence level, tightest binding first.
    Operator parsers return the function that combines the operands.
    """
    term = simple_term
    for ops in table:
        term = _make_level_parser(ops, term)
    return term


def _identity(x: Any) -> Any:
    return x


def _make_level_parser(ops: List[Operator], term: Parser[T]) -> Parser[T]:
    infix_r = []
    infix_l = []
    infix_n = []
    prefix = []
    postfix = []

    for op in ops:
        if isinstance(op, Infix):
            if op.assoc == Assoc.RIGHT:
                infix_r.append(op.parser)
            elif op.assoc == Assoc.LEFT:
                infix_l.append(op.parser)
            else:
                infix_n.append(op.parser)
        elif isinstance(op, Prefix):
            prefix.append(op.parser)
        elif isinstance(op, Postfix):
            postfix.append(op.parser)
        else:
            raise TypeError(f"partser.build_expression_parser: Not an operator: {op!r}")

    # P = (pre <|> id) . term . (post <|> id)
    pre_parser = option(_identity, choice(prefix)) if prefix else succeed(_identity)
    post_parser = option(_identity, choice(postfix)) if postfix else succeed(_identity)
    result_parser = map(seq(pre_parser, term, post_parser), lambda v: v[2](v[0](v[1])))

    if infix_l:
        result_parser = chainl1(result_parser, choice(infix_l))

    if infix_r:
        result_parser = chainr1(result_parser, choice(infix_r))

    if infix_n:
        # At most one non-associative operator at this level
        operand = result_parser
        tail = option(None, seq(choice(infix_n), operand))
        result_parser = map(
            seq(operand, tail),
            lambda v: v[1][0](v[0], v[1][1]) if v[1] is not None else v[0])

    return result_parser
