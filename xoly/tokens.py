"""
Lexical types for the xoly scanner.

Every token keeps the exact source slice it was produced from (raw) together
with its position, so that unknown tags and inactive interpolations can be
re-emitted verbatim.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Dict, Union


class TokenType(enum.Enum):
    """Kinds of tokens produced by the scanner."""

    TEXT = "TEXT"
    TAG_OPEN = "TAG_OPEN"
    TAG_CLOSE = "TAG_CLOSE"
    INTERPOLATION = "INTERPOLATION"


@dataclass(frozen=True)
class BaseToken:
    """
    Common positional information of all tokens.
    """
    raw: str        # Exact source text of the token
    offset: int     # Position in the source text
    line: int       # Line number (starting at 1)
    column: int     # Column number (starting at 1)

    def position(self) -> Dict[str, int]:
        """Keyword arguments for error constructors."""
        return {"line": self.line, "column": self.column, "offset": self.offset}


@dataclass(frozen=True)
class TextToken(BaseToken):
    text: str

    @property
    def type(self) -> TokenType:
        return TokenType.TEXT

    def __repr__(self) -> str:
        return f"TextToken({self.text!r}, {self.line}:{self.column})"


@dataclass(frozen=True)
class TagOpenToken(BaseToken):
    name: str               # Lower-cased tag name
    attributes_raw: str     # Everything between the name and '>' (without a trailing '/')
    self_closing: bool

    @property
    def type(self) -> TokenType:
        return TokenType.TAG_OPEN

    def __repr__(self) -> str:
        closing = ", self_closing" if self.self_closing else ""
        return f"TagOpenToken({self.name!r}, {self.attributes_raw!r}{closing}, {self.line}:{self.column})"


@dataclass(frozen=True)
class TagCloseToken(BaseToken):
    name: str

    @property
    def type(self) -> TokenType:
        return TokenType.TAG_CLOSE

    def __repr__(self) -> str:
        return f"TagCloseToken({self.name!r}, {self.line}:{self.column})"


@dataclass(frozen=True)
class InterpolationToken(BaseToken):
    expression: str

    @property
    def type(self) -> TokenType:
        return TokenType.INTERPOLATION

    def __repr__(self) -> str:
        return f"InterpolationToken({self.expression!r}, {self.line}:{self.column})"


Token = Union[TextToken, TagOpenToken, TagCloseToken, InterpolationToken]


__all__ = [
    "TokenType",
    "BaseToken",
    "TextToken",
    "TagOpenToken",
    "TagCloseToken",
    "InterpolationToken",
    "Token",
]
