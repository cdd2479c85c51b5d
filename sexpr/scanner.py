"""Token scanner for s-expression text.

Splits a character stream into identifiers, string literals, decimal
numbers and single-character punctuation. Input may be a str, bytes, or
a text or binary file-like object; file-like input is read in chunks so a
Decoder can pull values off a stream without loading it whole.
"""

import codecs
import io
import re
from typing import NamedTuple, Optional

from .errors import ScanError
from .types import Position

CHUNK_SIZE = 4096

# Token kinds. Punctuation lexemes use the character itself as their kind.
IDENT = "Ident"
STRING = "String"
INT = "Int"
FLOAT = "Float"
EOF = "EOF"

DIGITS = frozenset("0123456789")
OCTAL = frozenset("01234567")
HEX = frozenset("0123456789abcdefABCDEF")
SIMPLE_ESCAPES = {
    "a": "\a", "b": "\b", "f": "\f", "n": "\n", "r": "\r",
    "t": "\t", "v": "\v", "\\": "\\", "'": "'", '"': '"',
}
_ESCAPE_WIDTHS = {"x": 2, "u": 4, "U": 8}

_ESCAPE = re.compile(
    r"""\\(?:([abfnrtv\\'"])|([0-7]{3})|x([0-9a-fA-F]{2})"""
    r"""|u([0-9a-fA-F]{4})|U([0-9a-fA-F]{8}))"""
)


class Lexeme(NamedTuple):
    kind: str
    text: str
    pos: Position


def _is_digit(ch: str) -> bool:
    return ch in DIGITS


def _is_ident(ch: str) -> bool:
    return ch == "_" or ch.isalpha() or _is_digit(ch)


def _as_stream(source):
    if isinstance(source, str):
        return io.StringIO(source)
    if isinstance(source, (bytes, bytearray, memoryview)):
        return io.BytesIO(bytes(source))
    if hasattr(source, "read"):
        return source
    raise TypeError(f"cannot scan {type(source).__name__}: want str, bytes or a readable stream")


class Scanner:
    def __init__(self, source, filename: Optional[str] = None, chunk_size: int = CHUNK_SIZE):
        self.filename = filename
        self._stream = _as_stream(source)
        self._chunk_size = chunk_size
        self._decoder = None
        self._exhausted = False
        self._buf = ""
        self._i = 0
        self._offset = 0
        self._line = 1
        self._column = 1

    def position(self) -> Position:
        return Position(self.filename, self._offset, self._line, self._column)

    def scan(self) -> Lexeme:
        """Scan and return the next lexeme; EOF repeats once input runs out."""
        self._skip()
        pos = self.position()
        ch = self._peek()
        if not ch:
            return Lexeme(EOF, "", pos)
        if ch == "_" or ch.isalpha():
            return Lexeme(IDENT, self._take(_is_ident), pos)
        if self._at_number():
            return self._number(pos)
        if ch == '"':
            return Lexeme(STRING, self._string(), pos)
        if ch == "`":
            return Lexeme(STRING, self._raw_string(), pos)
        self._next()
        return Lexeme(ch, ch, pos)

    # --- input ---

    def _fill(self) -> bool:
        while not self._exhausted:
            chunk = self._stream.read(self._chunk_size)
            if isinstance(chunk, (bytes, bytearray)):
                if self._decoder is None:
                    self._decoder = codecs.getincrementaldecoder("utf-8")()
                try:
                    text = self._decoder.decode(chunk, final=not chunk)
                except UnicodeDecodeError as exc:
                    raise ScanError(f"invalid UTF-8 encoding: {exc.reason}") from exc
            else:
                text = chunk
            if not chunk:
                self._exhausted = True
            if text:
                self._buf = self._buf[self._i:] + text
                self._i = 0
                return True
        return False

    def _peek(self, ahead: int = 0) -> str:
        while self._i + ahead >= len(self._buf):
            if not self._fill():
                return ""
        return self._buf[self._i + ahead]

    def _next(self) -> str:
        ch = self._peek()
        if ch:
            self._i += 1
            self._offset += 1
            if ch == "\n":
                self._line += 1
                self._column = 1
            else:
                self._column += 1
        return ch

    def _take(self, pred) -> str:
        out = []
        while True:
            ch = self._peek()
            if not ch or not pred(ch):
                return "".join(out)
            out.append(self._next())

    def _skip(self) -> None:
        while True:
            ch = self._peek()
            if ch == ";":
                self._take(lambda c: c != "\n")
            elif ch and ch.isspace():
                self._next()
            else:
                return

    # --- numbers ---

    def _at_number(self) -> bool:
        ch = self._peek()
        if _is_digit(ch):
            return True
        i = 1 if ch in ("+", "-") else 0
        if i and _is_digit(self._peek(1)):
            return True
        return self._peek(i) == "." and _is_digit(self._peek(i + 1))

    def _number(self, pos: Position) -> Lexeme:
        text = []
        kind = INT
        if self._peek() in ("+", "-"):
            text.append(self._next())
        text.append(self._take(_is_digit))
        if self._peek() == ".":
            kind = FLOAT
            text.append(self._next())
            text.append(self._take(_is_digit))
        if self._peek() in ("e", "E"):
            kind = FLOAT
            text.append(self._next())
            if self._peek() in ("+", "-"):
                text.append(self._next())
            exponent = self._take(_is_digit)
            if not exponent:
                raise ScanError("exponent has no digits")
            text.append(exponent)
        return Lexeme(kind, "".join(text), pos)

    # --- strings ---

    def _string(self) -> str:
        text = [self._next()]
        while True:
            ch = self._next()
            if not ch or ch == "\n":
                raise ScanError("literal not terminated")
            text.append(ch)
            if ch == '"':
                return "".join(text)
            if ch == "\\":
                text.append(self._escape())

    def _escape(self) -> str:
        ch = self._next()
        if ch in SIMPLE_ESCAPES:
            return ch
        if ch in OCTAL:
            digits, allowed = ch, OCTAL
            width = 2
        elif ch in _ESCAPE_WIDTHS:
            digits, allowed = ch, HEX
            width = _ESCAPE_WIDTHS[ch]
        else:
            raise ScanError("invalid char escape")
        for _ in range(width):
            c = self._peek()
            if c not in allowed:
                raise ScanError("invalid char escape")
            digits += self._next()
        return digits

    def _raw_string(self) -> str:
        text = [self._next()]
        while True:
            ch = self._next()
            if not ch:
                raise ScanError("literal not terminated")
            text.append(ch)
            if ch == "`":
                return "".join(text)


def _unescape(m) -> str:
    simple, octal, hex2, u4, u8 = m.groups()
    if simple:
        return SIMPLE_ESCAPES[simple]
    if octal:
        code = int(octal, 8)
        if code > 0xFF:
            raise ScanError(f"octal escape value > 255: \\{octal}")
        return chr(code)
    code = int(hex2 or u4 or u8, 16)
    if code > 0x10FFFF or 0xD800 <= code < 0xE000:
        raise ScanError(f"escape sequence is invalid Unicode code point: {m.group(0)}")
    return chr(code)


def unquote(text: str) -> str:
    """Interpret a scanned string literal, quoted or back-quoted."""
    if len(text) >= 2 and text[0] == text[-1] == "`":
        return text[1:-1].replace("\r", "")
    if len(text) < 2 or text[0] != '"' or text[-1] != '"':
        raise ScanError(f"invalid string literal {text!r}")
    return _ESCAPE.sub(_unescape, text[1:-1])
