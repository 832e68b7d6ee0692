# Core
from .Parsec import Parser, Result, SourcePos, Mark, Ok, Error, merge, is_parser
from .Prim import (
    parse, run_parser, custom, succeed, pure, fail, index, lc_index, eof,
    seq, alt, times, map, map_env, chain, chain_env, desc, mark, lc_mark,
    lazy, clone, replace, sub_env, from_env, except_,
)

# Characters
from .Char import (
    string, regex, any_char, rest, satisfy, satisfy_env, char, one_of, none_of,
    take_while, space, spaces, newline, upper, lower, alpha_num, letter,
    digit, digits,
)

# Combinators
from .Combinators import (
    skip, seq_map, choice, count, many, many1, skip_many, skip_many1,
    between, option, option_maybe, optional, sep_by, sep_by1, end_by,
    sep_end_by, chainl1, chainr1, not_followed_by, look_ahead, many_till,
    trace,
)

# Error messages
from .ErrorFormat import format_error, format_expected, ParseError, parse_or_raise

# Expression Parsing
from .Expr import build_expression_parser, Operator, Infix, Prefix, Postfix, Assoc
