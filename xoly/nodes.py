"""
Nodes of the parsed template tree.

The tree is immutable after construction: the renderer only reads it, so one
ParsedTemplate can be rendered many times (and from several threads) with
different scopes.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterator, Optional, Tuple, Union


@dataclass(frozen=True)
class TextNode:
    """
    Literal text, emitted verbatim.
    """
    content: str


@dataclass(frozen=True)
class InterpolationNode:
    """
    Variable reference between '#' delimiters.

    `source` is the original text including delimiters; it is emitted
    unchanged when interpolation is not active.
    """
    expression: str
    source: str
    line: int = 0
    column: int = 0
    offset: int = 0

    def position(self) -> Dict[str, int]:
        return {"line": self.line, "column": self.column, "offset": self.offset}


@dataclass(frozen=True)
class TagNode:
    """
    A registered tag.

    `body` is a tuple of child nodes when the tag's handler declares a body
    and None otherwise.
    """
    name: str
    attributes: Dict[str, str] = field(default_factory=dict, hash=False, compare=True)
    body: Optional[Tuple["Node", ...]] = None
    source: str = ""
    line: int = 0
    column: int = 0
    offset: int = 0

    def position(self) -> Dict[str, int]:
        """Keyword arguments for error constructors."""
        return {"line": self.line, "column": self.column, "offset": self.offset}

    def get(self, attribute: str, default: Optional[str] = None) -> Optional[str]:
        return self.attributes.get(attribute, default)


Node = Union[TextNode, InterpolationNode, TagNode]


@dataclass(frozen=True)
class ParsedTemplate:
    """
    Handle to a parsed template: the root node sequence plus an optional name.
    """
    nodes: Tuple[Node, ...]
    name: Optional[str] = None

    def __iter__(self) -> Iterator[Node]:
        return iter(self.nodes)

    def __len__(self) -> int:
        return len(self.nodes)


def walk(nodes) -> Iterator[Node]:
    """
    Depth-first iteration over a node sequence (for tooling and tests).
    """
    stack = list(reversed(tuple(nodes)))
    while stack:
        node = stack.pop()
        yield node
        if isinstance(node, TagNode) and node.body:
            stack.extend(reversed(node.body))


__all__ = ["TextNode", "InterpolationNode", "TagNode", "Node", "ParsedTemplate", "walk"]
