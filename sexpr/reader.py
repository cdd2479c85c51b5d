"""Shape-directed recursive-descent reader.

Atoms are recognised from the current token alone; the contents of a
list are read by the grammar of the destination's shape:

    fixed array   (e1 e2 ...)            positional, at most N elements
    sequence      (e1 e2 ...)            any number, input order kept
    record        ((name value) ...)     any order, last duplicate wins
    map           ((key value) ...)      last duplicate key wins
    dynamic       ("descriptor" value)   value read as the named type
"""

import logging
from typing import Any

from . import shapes
from .errors import DepthExceeded, ReadError
from .lexer import Lexer
from .scanner import FLOAT, IDENT, INT, STRING, unquote
from .shapes import AssocMap, Dynamic, FixedArray, Record, Sequence, Shape, describe, zero
from .typedesc import resolve

logger = logging.getLogger(__name__)

DEFAULT_MAX_DEPTH = 200


class ReadState:
    __slots__ = ("depth", "max_depth")

    def __init__(self, max_depth: int = DEFAULT_MAX_DEPTH):
        self.depth = 0
        self.max_depth = max_depth


def read(lex: Lexer, shape: Shape, current: Any = None, state: ReadState | None = None) -> Any:
    """Read one value starting at the current token and return it.

    ``current`` seeds fixed arrays and records: elements and fields the
    input leaves out keep their values from it.
    """
    st = state or ReadState()
    st.depth += 1
    if st.depth > st.max_depth:
        st.depth -= 1
        raise DepthExceeded("max nesting depth exceeded")
    try:
        return _read(lex, shape, current, st)
    finally:
        st.depth -= 1


def _zero(shape: Shape) -> Any:
    try:
        return zero(shape)
    except (TypeError, ValueError) as exc:
        raise ReadError(f"cannot build {describe(shape)}: {exc}") from exc


def _mismatch(lex: Lexer, what: str, shape: Shape) -> ReadError:
    return ReadError(f"cannot decode {what} {lex.text} into {describe(shape)}")


def _read(lex: Lexer, shape: Shape, current: Any, st: ReadState) -> Any:
    tok = lex.token

    if tok == IDENT:
        if lex.text == "nil":
            lex.advance()
            return _zero(shape)
        if lex.text == "t":
            if shape != shapes.BOOL:
                raise _mismatch(lex, "symbol", shape)
            lex.advance()
            return True

    elif tok == STRING:
        if shape != shapes.STRING:
            raise _mismatch(lex, "string", shape)
        value = unquote(lex.text)
        lex.advance()
        return value

    elif tok == INT:
        if shape not in (shapes.INT, shapes.UINT):
            raise _mismatch(lex, "integer", shape)
        value = int(lex.text)
        if value < 0 and shape == shapes.UINT:
            raise _mismatch(lex, "negative integer", shape)
        lex.advance()
        return value

    elif tok == FLOAT:
        if shape != shapes.FLOAT:
            raise _mismatch(lex, "float", shape)
        value = float(lex.text)
        lex.advance()
        return value

    elif tok == "(":
        lex.advance()
        value = _read_list(lex, shape, current, st)
        lex.consume(")")
        return value

    raise ReadError(f"unexpected token {lex.describe()}")


def _read_list(lex: Lexer, shape: Shape, current: Any, st: ReadState) -> Any:
    if isinstance(shape, FixedArray):
        items = [_zero(shape.elem) for _ in range(shape.length)]
        if isinstance(current, (tuple, list)):
            seed = list(current[:shape.length])
            items[:len(seed)] = seed
        i = 0
        while not _end_list(lex):
            if i >= shape.length:
                raise ReadError(f"too many elements for {describe(shape)}")
            items[i] = read(lex, shape.elem, items[i], st)
            i += 1
        return tuple(items)

    if isinstance(shape, Sequence):
        items = []
        while not _end_list(lex):
            items.append(read(lex, shape.elem, None, st))
        return items

    if isinstance(shape, Record):
        fields = shape.fields
        if isinstance(current, shape.cls):
            values = shape.values_of(current)
        else:
            values = {name: _zero(f) for name, f in fields.items()}
        # optional leading tag naming the record: (point (x 1) (y 2))
        if lex.token == IDENT:
            if lex.text.lower() != shape.cls.__name__.lower():
                raise ReadError(f"got record tag {lex.text!r}, want {describe(shape)}")
            lex.advance()
        while not _end_list(lex):
            lex.consume("(")
            if lex.token != IDENT:
                raise ReadError(f"got token {lex.describe()}, want field name")
            name = lex.text
            if name not in fields:
                raise ReadError(f"unknown field {name!r} in {describe(shape)}")
            lex.advance()
            values[name] = read(lex, fields[name], values[name], st)
            lex.consume(")")
        try:
            return shape.build(values)
        except (TypeError, ValueError) as exc:
            raise ReadError(f"cannot build {describe(shape)}: {exc}") from exc

    if isinstance(shape, AssocMap):
        result = {}
        while not _end_list(lex):
            lex.consume("(")
            key = read(lex, shape.key, None, st)
            value = read(lex, shape.value, None, st)
            try:
                result[key] = value
            except TypeError as exc:
                raise ReadError(f"invalid map key {key!r}") from exc
            lex.consume(")")
        return result

    if isinstance(shape, Dynamic):
        if lex.token != STRING:
            raise ReadError(f"got token {lex.describe()}, want type descriptor")
        descriptor = unquote(lex.text)
        concrete = resolve(descriptor, st.max_depth - st.depth)
        logger.debug("dynamic value at %s has type %s", lex.position, descriptor)
        lex.advance()
        return read(lex, concrete, None, st)

    raise ReadError(f"cannot decode list into {describe(shape)}")


def _end_list(lex: Lexer) -> bool:
    if lex.at_eof:
        raise ReadError("unexpected end of input inside list")
    return lex.token == ")"
