import typing
from dataclasses import dataclass, field
from typing import Any, NamedTuple

import pytest
from sexpr.shapes import (
    BOOL, DYNAMIC, FLOAT, INT, STRING,
    AssocMap, FixedArray, Record, Sequence, describe, hashable, shape_of, validate, zero,
)


@dataclass
class Point:
    x: int = 0
    y: int = 0


class Pair(NamedTuple):
    left: str
    right: str


@dataclass
class Tree:
    label: str = ""
    children: list["Tree"] = field(default_factory=list)


def test_scalars():
    assert shape_of(bool) == BOOL
    assert shape_of(int) == INT
    assert shape_of(float) == FLOAT
    assert shape_of(str) == STRING


def test_dynamic():
    assert shape_of(Any) == DYNAMIC
    assert shape_of(object) == DYNAMIC


def test_sequences():
    assert shape_of(list[int]) == Sequence(INT)
    assert shape_of(typing.List[str]) == Sequence(STRING)
    assert shape_of(typing.Sequence[float]) == Sequence(FLOAT)
    assert shape_of(list) == Sequence(DYNAMIC)


def test_fixed_array():
    assert shape_of(tuple[int, int, int]) == FixedArray(INT, 3)


def test_maps():
    assert shape_of(dict[str, int]) == AssocMap(STRING, INT)
    assert shape_of(typing.Mapping[str, list[int]]) == AssocMap(STRING, Sequence(INT))
    assert shape_of(dict) == AssocMap(DYNAMIC, DYNAMIC)


def test_shape_passes_through():
    shape = FixedArray(STRING, 2)
    assert shape_of(shape) is shape


def test_records():
    shape = shape_of(Point)
    assert isinstance(shape, Record)
    assert shape is shape_of(Point)
    assert shape.fields == {"x": INT, "y": INT}
    assert shape_of(Pair).fields == {"left": STRING, "right": STRING}


def test_recursive_record():
    shape = shape_of(Tree)
    assert shape.fields["children"] == Sequence(shape)


def test_heterogeneous_tuple_rejected():
    with pytest.raises(TypeError, match="homogeneous"):
        shape_of(tuple[int, str])
    with pytest.raises(TypeError, match="homogeneous"):
        shape_of(tuple[int, ...])


def test_unhashable_key_rejected():
    with pytest.raises(TypeError, match="invalid map key type"):
        shape_of(dict[list[int], int])
    with pytest.raises(TypeError, match="invalid map key type"):
        shape_of(dict[Point, int])


def test_unknown_hint_rejected():
    with pytest.raises(TypeError, match="cannot decode into"):
        shape_of(set[int])
    with pytest.raises(TypeError, match="cannot decode into"):
        shape_of(complex)


def test_hashable():
    assert hashable(INT)
    assert hashable(FixedArray(STRING, 2))
    assert hashable(shape_of(Pair))
    assert not hashable(Sequence(INT))
    assert not hashable(shape_of(Point))


def test_zero_values():
    assert zero(BOOL) is False
    assert zero(INT) == 0
    assert zero(FLOAT) == 0.0
    assert zero(STRING) == ""
    assert zero(FixedArray(STRING, 2)) == ("", "")
    assert zero(Sequence(INT)) == []
    assert zero(AssocMap(STRING, INT)) == {}
    assert zero(DYNAMIC) is None
    assert zero(shape_of(Point)) == Point(0, 0)
    assert zero(shape_of(Pair)) == Pair("", "")


def test_describe():
    assert describe(shape_of(dict[str, list[int]])) == "map[string][]int"
    assert describe(shape_of(tuple[float, float])) == "[2]float"
    assert describe(shape_of(Point)) == "Point"
    assert describe(DYNAMIC) == "any"


@dataclass
class WithSet:
    tags: set[str] = field(default_factory=set)


@dataclass
class Holder:
    items: dict[str, list[WithSet]] = field(default_factory=dict)


def test_validate_reaches_nested_fields():
    with pytest.raises(TypeError, match="cannot decode into"):
        validate(shape_of(Holder))


def test_validate_recursive_record():
    shape = shape_of(Tree)
    assert validate(shape) is shape
