from dataclasses import dataclass
from typing import NamedTuple, Optional, Union


class Position(NamedTuple):
    filename: Optional[str] = None
    offset: int = 0
    line: int = 1
    column: int = 1

    def __str__(self) -> str:
        loc = f"{self.line}:{self.column}"
        return f"{self.filename}:{loc}" if self.filename else loc


# Tokens handed out by Decoder.token(). Strings arrive unquoted and
# integers parsed.

@dataclass(frozen=True)
class Symbol:
    value: str


@dataclass(frozen=True)
class String:
    value: str


@dataclass(frozen=True)
class Int:
    value: int


@dataclass(frozen=True)
class StartList:
    pass


@dataclass(frozen=True)
class EndList:
    pass


Token = Union[Symbol, String, Int, StartList, EndList]
