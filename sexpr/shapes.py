"""Destination shapes.

Every destination is classified, from its declared type alone, into one
of six shapes. The reader dispatches on these, and the type descriptor
parser produces them, so static and dynamic destinations share one set
of decode rules.
"""

import collections.abc as abc
import dataclasses
import enum
from functools import cached_property, lru_cache
from typing import Any, Union, get_args, get_origin, get_type_hints


class ScalarKind(enum.Enum):
    BOOL = "bool"
    INT = "int"
    UINT = "uint"
    FLOAT = "float"
    STRING = "string"


@dataclasses.dataclass(frozen=True)
class Scalar:
    kind: ScalarKind


@dataclasses.dataclass(frozen=True)
class FixedArray:
    elem: "Shape"
    length: int


@dataclasses.dataclass(frozen=True)
class Sequence:
    elem: "Shape"


@dataclasses.dataclass(frozen=True)
class AssocMap:
    key: "Shape"
    value: "Shape"


@dataclasses.dataclass(frozen=True)
class Dynamic:
    pass


class Record:
    """A dataclass or NamedTuple destination, decoded field by field.

    Field shapes are classified on first use so records may refer to
    themselves (``children: list["Tree"]``).
    """

    def __init__(self, cls: type):
        self.cls = cls

    @cached_property
    def fields(self) -> dict:
        try:
            hints = get_type_hints(self.cls)
        except NameError as exc:
            raise TypeError(f"cannot decode into {self.cls.__name__}: {exc}") from exc
        if _is_namedtuple(self.cls):
            names = list(self.cls._fields)
        else:
            names = [f.name for f in dataclasses.fields(self.cls) if f.init]
        return {name: shape_of(hints.get(name, Any)) for name in names}

    def build(self, values: dict):
        return self.cls(**values)

    def values_of(self, obj) -> dict:
        return {name: getattr(obj, name) for name in self.fields}

    def __eq__(self, other):
        return isinstance(other, Record) and other.cls is self.cls

    def __hash__(self):
        return hash((Record, self.cls))

    def __repr__(self):
        return f"Record({self.cls.__name__})"


Shape = Union[Scalar, FixedArray, Sequence, Record, AssocMap, Dynamic]
SHAPES = (Scalar, FixedArray, Sequence, Record, AssocMap, Dynamic)

BOOL = Scalar(ScalarKind.BOOL)
INT = Scalar(ScalarKind.INT)
UINT = Scalar(ScalarKind.UINT)
FLOAT = Scalar(ScalarKind.FLOAT)
STRING = Scalar(ScalarKind.STRING)
DYNAMIC = Dynamic()

_SCALAR_TYPES = {bool: BOOL, int: INT, float: FLOAT, str: STRING}
_ZEROS = {
    ScalarKind.BOOL: False,
    ScalarKind.INT: 0,
    ScalarKind.UINT: 0,
    ScalarKind.FLOAT: 0.0,
    ScalarKind.STRING: "",
}
_SEQUENCE_ORIGINS = (list, abc.Sequence, abc.MutableSequence)
_MAPPING_ORIGINS = (dict, abc.Mapping, abc.MutableMapping)


def _is_namedtuple(cls) -> bool:
    return isinstance(cls, type) and issubclass(cls, tuple) and hasattr(cls, "_fields")


@lru_cache(maxsize=None)
def _record(cls: type) -> Record:
    return Record(cls)


def hashable(shape: Shape) -> bool:
    """Whether values of this shape can key an AssocMap."""
    if isinstance(shape, (Scalar, Dynamic)):
        return True
    if isinstance(shape, FixedArray):
        return hashable(shape.elem)
    if isinstance(shape, Record):
        return shape.cls.__hash__ is not None
    return False


def shape_of(target: Any) -> Shape:
    """Classify a type hint (or pass a Shape through).

    Raises TypeError for hints with no shape.
    """
    if isinstance(target, SHAPES):
        return target
    if target is Any or target is object:
        return DYNAMIC
    if isinstance(target, type) and target in _SCALAR_TYPES:
        return _SCALAR_TYPES[target]
    if target is list:
        return Sequence(DYNAMIC)
    if target is dict:
        return AssocMap(DYNAMIC, DYNAMIC)

    origin = get_origin(target)
    args = get_args(target)
    if origin in _SEQUENCE_ORIGINS:
        return Sequence(shape_of(args[0]) if args else DYNAMIC)
    if origin is tuple:
        if not args or args[-1] is Ellipsis or len(set(args)) != 1:
            raise TypeError(f"cannot decode into {target!r}: only fixed-length homogeneous tuples are supported")
        return FixedArray(shape_of(args[0]), len(args))
    if origin in _MAPPING_ORIGINS:
        key, value = args if args else (Any, Any)
        key_shape = shape_of(key)
        if not hashable(key_shape):
            raise TypeError(f"cannot decode into {target!r}: invalid map key type {describe(key_shape)}")
        return AssocMap(key_shape, shape_of(value))
    if origin is None and isinstance(target, type) and (
        dataclasses.is_dataclass(target) or _is_namedtuple(target)
    ):
        return _record(target)
    raise TypeError(f"cannot decode into {target!r}")


def validate(shape: Shape, seen: set | None = None) -> Shape:
    """Classify every record field reachable from shape up front.

    Raises TypeError for a field hint with no shape, before any input
    is read.
    """
    seen = set() if seen is None else seen
    if isinstance(shape, Record):
        if shape not in seen:
            seen.add(shape)
            for field_shape in shape.fields.values():
                validate(field_shape, seen)
    elif isinstance(shape, (FixedArray, Sequence)):
        validate(shape.elem, seen)
    elif isinstance(shape, AssocMap):
        validate(shape.key, seen)
        validate(shape.value, seen)
    return shape


def zero(shape: Shape) -> Any:
    if isinstance(shape, Scalar):
        return _ZEROS[shape.kind]
    if isinstance(shape, FixedArray):
        return tuple(zero(shape.elem) for _ in range(shape.length))
    if isinstance(shape, Sequence):
        return []
    if isinstance(shape, AssocMap):
        return {}
    if isinstance(shape, Record):
        return shape.build({name: zero(f) for name, f in shape.fields.items()})
    return None


def describe(shape: Shape) -> str:
    """Render a shape in type descriptor syntax."""
    if isinstance(shape, Scalar):
        return shape.kind.value
    if isinstance(shape, FixedArray):
        return f"[{shape.length}]{describe(shape.elem)}"
    if isinstance(shape, Sequence):
        return f"[]{describe(shape.elem)}"
    if isinstance(shape, AssocMap):
        return f"map[{describe(shape.key)}]{describe(shape.value)}"
    if isinstance(shape, Record):
        return shape.cls.__name__
    return "any"
