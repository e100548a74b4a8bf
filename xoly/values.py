"""
Variable lookup and attribute value expansion.

A variable reference is a dotted path with optional integer indices:
`user.name`, `items[0]`, `order.lines[2].sku`. Lookups never raise: a missing
name, key, attribute or index means the reference is unbound.
"""

from __future__ import annotations

import re
from collections.abc import Mapping, MutableMapping, Sequence
from typing import Any, Tuple

_REFERENCE = re.compile(r"\s*([A-Za-z_]\w*(?:\.[A-Za-z_]\w*|\[\d+\])*)\s*")
_SEGMENT = re.compile(r"\.?([A-Za-z_]\w*)|\[(\d+)\]")
_EMBEDDED = re.compile(r"##|#([^#<>\n]*)#")
_TARGET = re.compile(r"\s*[A-Za-z_]\w*(?:\.[A-Za-z_]\w*)*\s*")


class _Unbound:
    """Marker for references that resolve to nothing."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "UNBOUND"


UNBOUND = _Unbound()


def is_reference(expression: str) -> bool:
    """Checks whether the text is a valid variable reference."""
    return _REFERENCE.fullmatch(expression) is not None


def lookup(scope: Mapping, expression: str) -> Any:
    """
    Resolves a variable reference against the scope.

    Args:
        scope: Current variables
        expression: Reference such as "user.name" or "items[0]"

    Returns:
        The value, or UNBOUND if any step of the path is missing
    """
    match = _REFERENCE.fullmatch(expression)
    if match is None:
        return UNBOUND

    current: Any = scope
    for name, index in _SEGMENT.findall(match.group(1)):
        current = _step(current, name, index)
        if current is UNBOUND:
            return UNBOUND
    return current


def _step(current: Any, name: str, index: str) -> Any:
    if index:
        if isinstance(current, Sequence) and not isinstance(current, str):
            position = int(index)
            if position < len(current):
                return current[position]
        return UNBOUND

    if isinstance(current, Mapping):
        return current[name] if name in current else UNBOUND
    return getattr(current, name, UNBOUND)


def stringify(value: Any) -> str:
    """
    Converts a value to output text.

    None and unbound values render as an empty string, booleans as
    "true"/"false".
    """
    if value is None or value is UNBOUND:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def interpolate(text: str, scope: Mapping) -> str:
    """
    Substitutes every #reference# in text; "##" stands for a literal '#'.

    Text between '#' pairs that is not a valid reference is kept verbatim.
    """
    def replace(match: "re.Match[str]") -> str:
        if match.group(0) == "##":
            return "#"
        expression = match.group(1)
        if not is_reference(expression):
            return match.group(0)
        return stringify(lookup(scope, expression))

    return _EMBEDDED.sub(replace, text)


def expand(value: str, scope: Mapping) -> Any:
    """
    Evaluates an attribute value.

    A value consisting of a single #reference# yields the referenced object
    itself (lists stay lists); any other value is interpolated into a string.

    Args:
        value: Raw attribute value
        scope: Current variables

    Returns:
        Referenced object (None when unbound) or the interpolated string
    """
    stripped = value.strip()
    if len(stripped) > 2 and stripped.startswith("#") and stripped.endswith("#"):
        inner = stripped[1:-1]
        if "#" not in inner and is_reference(inner):
            resolved = lookup(scope, inner)
            return None if resolved is UNBOUND else resolved
    return interpolate(value, scope)


def assign(scope: MutableMapping, target: str, value: Any) -> None:
    """
    Binds a value to a variable name or dotted path.

    Intermediate mappings along a dotted path are created when missing.

    Raises:
        ValueError: If the target is not a dotted name or a path step is not a mapping
    """
    if _TARGET.fullmatch(target) is None:
        raise ValueError(f"Invalid variable name: {target!r}")

    *parents, last = target.strip().split(".")
    current = scope
    for name in parents:
        child = current.get(name)
        if child is None:
            child = current[name] = {}
        elif not isinstance(child, MutableMapping):
            raise ValueError(f"Cannot assign into '{name}': not a mapping")
        current = child
    current[last] = value


def split_list(value: Any, delimiters: str = ",") -> Tuple[Any, ...]:
    """
    Turns a list attribute into its elements.

    Strings are split on any of the delimiter characters with empty elements
    dropped; other iterables are used as they are.
    """
    if value is None:
        return ()
    if isinstance(value, str):
        if not delimiters:
            return (value,) if value else ()
        pattern = "[" + re.escape(delimiters) + "]"
        return tuple(item for item in re.split(pattern, value) if item != "")
    if isinstance(value, Mapping):
        return tuple(value.keys())
    try:
        return tuple(value)
    except TypeError:
        return (value,)


__all__ = [
    "UNBOUND",
    "is_reference",
    "lookup",
    "stringify",
    "interpolate",
    "expand",
    "assign",
    "split_list",
]
