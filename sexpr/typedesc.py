"""Type descriptors for dynamic values.

A descriptor names a concrete shape in a small recursive grammar:

    int | uint | float | bool | string   atoms
    []T                                  sequence of T
    [N]T                                 fixed array of N Ts
    map[K]V                              map from K to V

Resolution is stateless; nothing is cached between calls.
"""

import re

from .errors import UnknownTypeError
from .shapes import BOOL, FLOAT, INT, STRING, UINT, AssocMap, FixedArray, Sequence, Shape, hashable

ATOMS = {
    "int": INT,
    "uint": UINT,
    "float": FLOAT,
    "bool": BOOL,
    "string": STRING,
}

_LENGTH = re.compile(r"[0-9]+")

MAX_DEPTH = 200
MAX_ARRAY_LENGTH = 1 << 16


def _closing_bracket(descriptor: str, start: int) -> int:
    depth = 0
    for i in range(start, len(descriptor)):
        if descriptor[i] == "[":
            depth += 1
        elif descriptor[i] == "]":
            depth -= 1
            if depth == 0:
                return i
    raise UnknownTypeError(descriptor, "unbalanced brackets in type")


def _elements(shape: Shape) -> int:
    """Zero values a fixed array of this shape allocates up front."""
    if isinstance(shape, FixedArray):
        return shape.length * _elements(shape.elem)
    return 1


def resolve(descriptor: str, max_depth: int = MAX_DEPTH) -> Shape:
    """Resolve a descriptor; composites may nest at most max_depth deep."""
    return _resolve(descriptor, max_depth)


def _resolve(descriptor: str, depth: int) -> Shape:
    if depth < 0:
        raise UnknownTypeError(descriptor, "type nested too deeply:")
    if descriptor in ATOMS:
        return ATOMS[descriptor]
    if descriptor.startswith("[]"):
        return Sequence(_resolve(descriptor[2:], depth - 1))
    if descriptor.startswith("["):
        end = descriptor.find("]")
        if end < 0:
            raise UnknownTypeError(descriptor, "unbalanced brackets in type")
        length = descriptor[1:end]
        if not _LENGTH.fullmatch(length):
            raise UnknownTypeError(descriptor, "invalid array length in type")
        elem = _resolve(descriptor[end + 1:], depth - 1)
        if len(length) > 9 or int(length) * _elements(elem) > MAX_ARRAY_LENGTH:
            raise UnknownTypeError(descriptor, "array length too large in type")
        return FixedArray(elem, int(length))
    if descriptor.startswith("map["):
        end = _closing_bracket(descriptor, 3)
        key = _resolve(descriptor[4:end], depth - 1)
        if not hashable(key):
            raise UnknownTypeError(descriptor, "invalid map key type in")
        return AssocMap(key, _resolve(descriptor[end + 1:], depth - 1))
    raise UnknownTypeError(descriptor)
