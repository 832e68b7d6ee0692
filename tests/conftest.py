# tests/conftest.py
import pytest

from partser.Parsec import Result
from partser.Char import digit


def assert_result_eq(res1: Result, res2: Result):
    """
    Deep comparison of two Results, including the failure bookkeeping a
    success may carry.
    """
    assert res1.status == res2.status, f"Status mismatch: {res1.status} != {res2.status}"
    assert res1.furthest == res2.furthest
    assert res1.expected == res2.expected
    if res1.status:
        assert res1.index == res2.index
        assert res1.value == res2.value


@pytest.fixture
def number():
    """One or more digits, as an int."""
    return digit().times(1, float('inf')).map(lambda ds: int("".join(ds)))
