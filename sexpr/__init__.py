from .decode import unmarshal, Decoder
from .errors import DecodeError
from .shapes import shape_of
from .typedesc import resolve
from .types import Position, Symbol, String, Int, StartList, EndList, Token

__all__ = [
    "unmarshal", "Decoder", "DecodeError", "shape_of", "resolve",
    "Position", "Symbol", "String", "Int", "StartList", "EndList", "Token",
]
