from .errors import ReadError
from .scanner import EOF, Lexeme, Scanner
from .types import Position


class Lexer:
    """A one-token cursor over a Scanner.

    Nothing is scanned until the first advance(); before that the current
    token is None.
    """

    __slots__ = ("scanner", "current")

    def __init__(self, scanner: Scanner):
        self.scanner = scanner
        self.current: Lexeme | None = None

    @property
    def token(self) -> str | None:
        return self.current.kind if self.current else None

    @property
    def text(self) -> str:
        return self.current.text if self.current else ""

    @property
    def position(self) -> Position:
        return self.current.pos if self.current else self.scanner.position()

    @property
    def at_eof(self) -> bool:
        return self.token == EOF

    def advance(self) -> None:
        self.current = self.scanner.scan()

    def consume(self, want: str) -> None:
        if self.token != want:
            raise ReadError(f"got {self.describe()}, want {want!r}")
        self.advance()

    def describe(self) -> str:
        """Quote the current token's text for error messages."""
        if self.at_eof:
            return "EOF"
        return repr(self.text)
