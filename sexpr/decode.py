"""Public decode API: unmarshal, Decoder and raw token access."""

import dataclasses
import logging
from typing import Any, Iterator, Optional

from .errors import DecodeError, ReadError, ScanError
from .lexer import Lexer
from .reader import DEFAULT_MAX_DEPTH, ReadState, read
from .scanner import IDENT, INT, STRING, Scanner, unquote
from .shapes import SHAPES, Shape, shape_of, validate
from .types import EndList, Int, StartList, String, Symbol, Token

logger = logging.getLogger(__name__)


def _target(target: Any) -> tuple[Any, Shape]:
    """Split a decode target into (instance to update, shape)."""
    if isinstance(target, SHAPES):
        return None, validate(target)
    if dataclasses.is_dataclass(target) and not isinstance(target, type):
        cls = type(target)
        if cls.__dataclass_params__.frozen:
            raise TypeError(f"cannot decode into frozen {cls.__name__} instance")
        return target, validate(shape_of(cls))
    return None, validate(shape_of(target))


def _store(instance: Any, shape: Shape, value: Any) -> Any:
    if instance is None:
        return value
    for name in shape.fields:
        setattr(instance, name, getattr(value, name))
    return instance


def _failure(lex: Lexer, exc: ReadError) -> DecodeError:
    pos = lex.scanner.position() if isinstance(exc, ScanError) else lex.position
    logger.debug("decode failed at %s: %s", pos, exc)
    return DecodeError(str(exc), pos)


def unmarshal(
    data: Any,
    target: Any,
    *,
    max_depth: int = DEFAULT_MAX_DEPTH,
    filename: Optional[str] = None,
) -> Any:
    """Decode the first s-expression in ``data`` as ``target``.

    Args:
        data: str, bytes (UTF-8) or a readable stream
        target: a type hint (``list[int]``, a dataclass, ``Any`` ...), a
            Shape, or a mutable dataclass instance to update in place
        max_depth: nesting limit for lists
        filename: reported in error positions

    Returns:
        The decoded value, or the updated instance.

    Raises:
        DecodeError: the input is malformed or does not fit ``target``.
        TypeError: ``target`` has no decodable shape.
    """
    instance, shape = _target(target)
    lex = Lexer(Scanner(data, filename))
    try:
        lex.advance()
        value = read(lex, shape, instance, ReadState(max_depth))
    except ReadError as exc:
        raise _failure(lex, exc) from exc
    return _store(instance, shape, value)


class Decoder:
    """Reads successive values, or raw tokens, from one input stream.

    Not safe for concurrent use.
    """

    def __init__(
        self,
        stream: Any,
        *,
        max_depth: int = DEFAULT_MAX_DEPTH,
        filename: Optional[str] = None,
    ):
        self._lex = Lexer(Scanner(stream, filename))
        self._max_depth = max_depth
        # True while the lexer sits on a token nobody has consumed yet.
        self._pending = False

    def _fetch(self) -> None:
        if not self._pending:
            self._lex.advance()
            self._pending = True

    def decode(self, target: Any) -> Any:
        """Decode the next value as ``target``; EOFError once input is exhausted."""
        instance, shape = _target(target)
        lex = self._lex
        try:
            self._fetch()
            if lex.at_eof:
                raise EOFError("EOF")
            value = read(lex, shape, instance, ReadState(self._max_depth))
        except ReadError as exc:
            raise _failure(lex, exc) from exc
        return _store(instance, shape, value)

    def more(self) -> bool:
        """Report whether any token is left in the stream."""
        try:
            self._fetch()
        except ReadError as exc:
            raise _failure(self._lex, exc) from exc
        return not self._lex.at_eof

    def token(self) -> Token:
        """Return the next raw token; EOFError at end of stream."""
        lex = self._lex
        try:
            self._fetch()
            if lex.at_eof:
                raise EOFError("EOF")
            self._pending = False
            return self._token()
        except ReadError as exc:
            raise _failure(lex, exc) from exc

    def _token(self) -> Token:
        lex = self._lex
        tok = lex.token
        if tok == IDENT:
            return Symbol(lex.text)
        if tok == STRING:
            return String(unquote(lex.text))
        if tok == INT:
            return Int(int(lex.text))
        if tok == "(":
            return StartList()
        if tok == ")":
            return EndList()
        raise ReadError(f"unexpected token {lex.describe()}")

    def __iter__(self) -> Iterator[Token]:
        while True:
            try:
                yield self.token()
            except EOFError:
                return
