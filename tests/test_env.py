import pytest

from partser.Parsec import Error, Ok
from partser.Prim import (
    alt, chain_env, except_, fail, from_env, map, map_env, parse, seq,
    sub_env, succeed,
)
from partser.Char import char, digit, letter, satisfy_env, spaces, string
from partser.Combinators import many, many1, skip

current_env = map_env(succeed(None), lambda _, env: env)


def test_default_environment_is_none():
    assert parse(current_env, "") == Ok(None)


def test_environment_is_passed_in():
    assert parse(current_env, "", env={"depth": 3}) == Ok({"depth": 3})


def test_sub_env_is_scoped_to_its_subtree():
    p = seq(sub_env(current_env, lambda n: n + 1), current_env)
    assert parse(p, "", env=0) == Ok([1, 0])


def test_nested_sub_env_stacks():
    inner = sub_env(current_env, lambda stack: stack + ["inner"])
    p = sub_env(seq(inner, current_env), lambda stack: stack + ["outer"])
    assert parse(p, "", env=[]) == Ok([["outer", "inner"], ["outer"]])


def test_from_env_looks_up_rules():
    rules = {"value": alt(digit(), letter())}
    p = from_env(lambda env: env["value"])
    assert parse(p, "7", env=rules) == Ok("7")
    assert parse(p, "q", env=rules) == Ok("q")


def test_from_env_supports_mutual_recursion():
    rules = {}
    rules["list"] = map(
        seq(char('['), many(from_env(lambda env: env["item"])), char(']')),
        lambda v: v[1])
    rules["item"] = alt(digit(), from_env(lambda env: env["list"]))
    assert parse(rules["list"], "[1[2[]]3]", env=rules) == Ok(["1", ["2", []], "3"])


def test_from_env_rejects_non_parser():
    p = from_env(lambda env: env.get("missing"))
    with pytest.raises(TypeError):
        parse(p, "x", env={})


def test_from_env_requires_function():
    with pytest.raises(TypeError):
        from_env({"a": digit()})


def test_map_env_and_satisfy_env():
    # Only accept the character stored in the environment
    expected_char = satisfy_env(lambda c, env: c == env)
    assert parse(expected_char, "q", env="q") == Ok("q")
    assert not parse(expected_char, "q", env="r").ok

    scaled = map_env(map(digit(), int), lambda n, factor: n * factor)
    assert parse(scaled, "4", env=10) == Ok(40)


def test_indentation_via_chain_env():
    # A line indented deeper than the level in the environment
    def deeper(ws, level):
        if len(ws) > level:
            return succeed(len(ws))
        return fail(f"indentation deeper than {level}")

    indent = chain_env(spaces(), deeper)
    line = skip(indent, many1(letter()))
    block = sub_env(line, lambda level: level + 2)

    assert parse(block, "   ab", env=0) == Ok(3)
    assert parse(block, " ab", env=0) == Error(1, ["indentation deeper than 2"])


def test_except_allows_other_matches():
    p = except_(letter(), string("x"))
    assert parse(p, "a") == Ok("a")


def test_except_reports_forbidden_match():
    p = except_(letter(), string("x"))
    assert parse(p, "x") == Error(0, ["something that is not 'x'"])


def test_except_reports_what_was_allowed():
    p = except_(letter(), string("x"))
    assert parse(p, "1") == Error(0, ["letter (except 'x')"])


def test_except_requires_parsers():
    with pytest.raises(TypeError):
        except_(letter(), "x")
