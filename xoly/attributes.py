"""
Parser for tag attributes.

Recognises `name = "value"` and `name = 'value'` pairs. A doubled quote of the
same kind inside a value stands for one literal quote character:

    <cfset name="msg" value="say ""hi"" twice">   ->   {"name": "msg", "value": 'say "hi" twice'}
"""

from __future__ import annotations

import logging
import re
from typing import Dict, Optional

from .errors import MalformedAttributeError

logger = logging.getLogger(__name__)

AttributeMap = Dict[str, str]

_NAME = re.compile(r"[A-Za-z][A-Za-z0-9_]*")
_WHITESPACE = re.compile(r"\s*")
_QUOTES = "\"'"


def parse_attributes(
    text: str,
    *,
    line: Optional[int] = None,
    column: Optional[int] = None,
    offset: Optional[int] = None,
) -> AttributeMap:
    """
    Parses the attribute part of an opening tag into an ordered mapping.

    Args:
        text: Text between the tag name and the closing '>'
        line, column, offset: Position of the tag, used for error reporting

    Returns:
        Mapping of lower-cased attribute names to their values, in source order

    Raises:
        MalformedAttributeError: On an unterminated quote or text that is not an attribute pair
    """
    position = {"line": line, "column": column, "offset": offset}
    attributes: AttributeMap = {}
    pos = 0
    length = len(text)

    while True:
        pos = _WHITESPACE.match(text, pos).end()
        if pos >= length:
            break

        # Self-closing marker left over from "<cfset ... />"
        if text[pos] == "/" and not text[pos + 1:].strip():
            break

        match = _NAME.match(text, pos)
        if not match:
            raise MalformedAttributeError(
                f"Unexpected character {text[pos]!r} in tag attributes", **position
            )
        name = match.group(0).lower()
        pos = _WHITESPACE.match(text, match.end()).end()

        if pos >= length or text[pos] != "=":
            raise MalformedAttributeError(f"Attribute '{name}' has no value", **position)
        pos = _WHITESPACE.match(text, pos + 1).end()

        if pos >= length or text[pos] not in _QUOTES:
            raise MalformedAttributeError(f"Value of attribute '{name}' must be quoted", **position)

        value, pos = _read_quoted(text, pos, name, position)

        if name in attributes:
            logger.debug(f"Duplicate attribute '{name}' overrides earlier value")
        attributes[name] = value

    return attributes


def _read_quoted(text: str, pos: int, name: str, position: dict) -> tuple[str, int]:
    """Reads a quoted value starting at the opening quote; returns (value, position after it)."""
    quote = text[pos]
    pos += 1
    parts = []

    while True:
        end = text.find(quote, pos)
        if end == -1:
            raise MalformedAttributeError(
                f"Unterminated {quote} quote in value of attribute '{name}'", **position
            )
        parts.append(text[pos:end])
        # Two quotes of the same kind are an escaped quote
        if text.startswith(quote, end + 1):
            parts.append(quote)
            pos = end + 2
            continue
        return "".join(parts), end + 1


__all__ = ["AttributeMap", "parse_attributes"]
