"""
Tree builder for xoly templates.

Consumes the scanner's token sequence and assembles the node tree with an
explicit stack of open tags, so deeply nested input never grows the Python
call stack.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Tuple

from .attributes import AttributeMap, parse_attributes
from .base import TagHandler
from .errors import NestingDepthError, UnbalancedTagError, UnclosedTagError
from .nodes import InterpolationNode, Node, ParsedTemplate, TagNode, TextNode
from .registry import TagRegistry, get_registry
from .tokens import InterpolationToken, TagCloseToken, TagOpenToken, TextToken, Token

logger = logging.getLogger(__name__)

DEFAULT_MAX_DEPTH = 128


class _Children:
    """
    Children of one open tag (or of the root) under construction.

    Adjacent literal text is collected piecewise and joined once into a single
    TextNode when the next node arrives or the sequence is closed.
    """

    def __init__(self):
        self.nodes: List[Node] = []
        self._text: List[str] = []

    def add_text(self, text: str) -> None:
        if text:
            self._text.append(text)

    def add(self, node: Node) -> None:
        self._flush()
        self.nodes.append(node)

    def close(self) -> Tuple[Node, ...]:
        self._flush()
        return tuple(self.nodes)

    def _flush(self) -> None:
        if self._text:
            self.nodes.append(TextNode("".join(self._text)))
            self._text = []


@dataclass
class _OpenTag:
    """A body tag waiting for its closing tag."""
    token: TagOpenToken
    handler: TagHandler
    attributes: AttributeMap
    children: _Children = field(default_factory=_Children)


class TreeBuilder:
    """
    Builds the node tree from tokens.

    Unknown tags are kept as literal text; registered tags become TagNodes,
    with a body only when their handler declares one.
    """

    def __init__(self, registry: Optional[TagRegistry] = None, max_depth: int = DEFAULT_MAX_DEPTH):
        """
        Args:
            registry: Tag registry (default: the global one)
            max_depth: Maximum nesting depth of body tags
        """
        self.registry = registry or get_registry()
        self.max_depth = max_depth

    def build(self, tokens: Iterable[Token], name: Optional[str] = None) -> ParsedTemplate:
        """
        Builds the tree.

        Args:
            tokens: Token sequence (consumed once)
            name: Template name for the resulting handle

        Returns:
            Immutable parsed template

        Raises:
            UnbalancedTagError: On a closing tag that does not match the open one
            UnclosedTagError: When a body tag is still open at the end of input
            NestingDepthError: When nesting exceeds max_depth
            MalformedAttributeError: On invalid attributes of a registered tag
        """
        root = _Children()
        stack: List[_OpenTag] = []
        tag_count = 0

        for token in tokens:
            children = stack[-1].children if stack else root

            if isinstance(token, TextToken):
                children.add_text(token.text)

            elif isinstance(token, InterpolationToken):
                children.add(InterpolationNode(
                    expression=token.expression,
                    source=token.raw,
                    line=token.line,
                    column=token.column,
                    offset=token.offset,
                ))

            elif isinstance(token, TagOpenToken):
                handler = self.registry.get_handler(token.name)
                if handler is None:
                    children.add_text(token.raw)
                    continue

                tag_count += 1
                attributes = parse_attributes(token.attributes_raw, **token.position())

                if not handler.has_body:
                    children.add(self._make_node(token, attributes, None))
                elif token.self_closing:
                    children.add(self._make_node(token, attributes, ()))
                else:
                    if len(stack) >= self.max_depth:
                        raise NestingDepthError(
                            f"Tags nested deeper than {self.max_depth} levels",
                            **token.position(),
                        )
                    stack.append(_OpenTag(token, handler, attributes))

            elif isinstance(token, TagCloseToken):
                handler = self.registry.get_handler(token.name)
                if handler is None:
                    children.add_text(token.raw)
                    continue

                if not handler.has_body:
                    logger.debug(f"Dropping closing tag </{token.name}> of bodyless tag")
                    continue

                if not stack:
                    raise UnbalancedTagError(None, token.name, **token.position())

                top = stack[-1]
                if top.handler is not handler:
                    raise UnbalancedTagError(top.token.name, token.name, **token.position())

                stack.pop()
                parent = stack[-1].children if stack else root
                parent.add(self._make_node(top.token, top.attributes, top.children.close()))

        if stack:
            unclosed = stack[-1].token
            raise UnclosedTagError(unclosed.name, **unclosed.position())

        nodes = root.close()
        logger.debug(f"Built tree with {len(nodes)} top-level nodes and {tag_count} tags")
        return ParsedTemplate(nodes=nodes, name=name)

    @staticmethod
    def _make_node(token: TagOpenToken, attributes: AttributeMap, body) -> TagNode:
        return TagNode(
            name=token.name,
            attributes=attributes,
            body=body,
            source=token.raw,
            line=token.line,
            column=token.column,
            offset=token.offset,
        )


def build(tokens: Iterable[Token], registry: Optional[TagRegistry] = None,
          name: Optional[str] = None, max_depth: int = DEFAULT_MAX_DEPTH) -> ParsedTemplate:
    """Convenience wrapper around TreeBuilder.build()."""
    return TreeBuilder(registry, max_depth=max_depth).build(tokens, name=name)


__all__ = ["TreeBuilder", "build", "DEFAULT_MAX_DEPTH"]
