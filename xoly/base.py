"""
Base interfaces of the tag handler protocol.

Every tag known to the engine is served by a TagHandler registered in the
TagRegistry. The tree builder asks the handler whether the tag owns a body;
the renderer drives the handler through three hooks:

    on_enter -> on_render_body -> on_exit

Early termination (cfbreak, cfabort) travels back up the render call chain as
a Signal inside RenderResult, so every caller decides explicitly how to
propagate it.
"""

from __future__ import annotations

import enum
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Callable, MutableMapping, Optional

from .errors import MissingAttributeError
from .nodes import TagNode

if TYPE_CHECKING:
    from .renderer import Renderer


class Signal(enum.Enum):
    """Control-flow outcome of rendering a node sequence."""

    CONTINUE = "continue"
    BREAK = "break"      # Stop the nearest enclosing loop
    ABORT = "abort"      # Stop the whole render, keep output so far


@dataclass(frozen=True)
class RenderResult:
    """
    Output of a node sequence together with the signal that ended it.
    """
    output: str = ""
    signal: Signal = Signal.CONTINUE

    @property
    def stopped(self) -> bool:
        return self.signal is not Signal.CONTINUE


RenderFn = Callable[..., RenderResult]


class BranchRole(enum.Enum):
    """Position of a tag in an if/elseif/else chain."""

    OPEN = "open"          # cfif
    CONTINUE = "continue"  # cfelseif
    CLOSE = "close"        # cfelse


class RenderFrame:
    """
    State of one render invocation shared by all handlers.

    The scope is the caller's own mapping, passed by reference: bindings made
    by cfset, cfparam, cfloop and cfsavecontent are visible to every later
    tag and to the caller after the render.
    """

    def __init__(
        self,
        renderer: "Renderer",
        scope: MutableMapping[str, Any],
        *,
        interpolate: bool = False,
        template: Optional[str] = None,
        include_depth: int = 0,
        loop_depth: int = 0,
    ):
        self.renderer = renderer
        self.scope = scope
        self.interpolate = interpolate
        self.template = template
        self.include_depth = include_depth
        self.loop_depth = loop_depth

    def child(self, **changes) -> "RenderFrame":
        """Returns a frame sharing the scope with selected fields replaced."""
        params = {
            "interpolate": self.interpolate,
            "template": self.template,
            "include_depth": self.include_depth,
            "loop_depth": self.loop_depth,
        }
        params.update(changes)
        return RenderFrame(self.renderer, self.scope, **params)

    @property
    def config(self):
        return self.renderer.config


class TagHandler(ABC):
    """
    Base class for tag handlers.

    Subclasses set `name` to the bare tag name ("if") and `has_body` to tell
    the tree builder whether the tag owns children up to a closing tag. The
    handler answers to both the bare and the "cf"-prefixed spelling.
    """

    has_body: bool = False
    prefix: str = "cf"
    branch_role: Optional[BranchRole] = None

    @property
    @abstractmethod
    def name(self) -> str:
        """Returns the bare tag name."""
        pass

    def matches_bare_tag(self, tag_name: str) -> bool:
        """
        Checks whether this handler serves the given tag name.

        Args:
            tag_name: Tag name as written in the template (any case)

        Returns:
            True for the bare name and the prefixed name
        """
        lowered = tag_name.lower()
        return lowered == self.name or lowered == f"{self.prefix}{self.name}"

    def on_enter(self, node: TagNode, frame: RenderFrame) -> None:
        """Called before the body is rendered."""
        pass

    def on_render_body(self, node: TagNode, frame: RenderFrame, render: RenderFn) -> RenderResult:
        """
        Renders the tag body.

        The default walks the body depth-first in the current frame; bodyless
        tags produce no output.

        Args:
            node: Tag being rendered
            frame: Current render frame
            render: Callable rendering a node sequence: render(nodes, interpolate=None, frame=None)

        Returns:
            Rendered body and the signal that ended it
        """
        if node.body is None:
            return RenderResult()
        return render(node.body)

    def on_exit(self, node: TagNode, frame: RenderFrame, body: str) -> str:
        """
        Called after the body is rendered.

        Returns:
            Text appended to the ambient output
        """
        return body

    def test(self, node: TagNode, frame: RenderFrame) -> bool:
        """Branch test for tags with a branch_role (cfif, cfelseif, cfelse)."""
        return True

    # Helpers for subclasses

    def require(self, node: TagNode, attribute: str) -> str:
        """
        Returns a required attribute value.

        Raises:
            MissingAttributeError: If the attribute is absent
        """
        value = node.attributes.get(attribute)
        if value is None:
            raise MissingAttributeError(node.name, attribute, **node.position())
        return value

    def first_of(self, node: TagNode, *attributes: str) -> Optional[str]:
        """Returns the value of the first present attribute among the given names."""
        for attribute in attributes:
            if attribute in node.attributes:
                return node.attributes[attribute]
        return None

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r}, has_body={self.has_body})"


__all__ = [
    "Signal",
    "RenderResult",
    "RenderFn",
    "BranchRole",
    "RenderFrame",
    "TagHandler",
]
