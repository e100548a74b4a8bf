"""
Evaluation engine for parsed templates.

Walks the node tree depth-first, threads the shared scope through every tag
handler and assembles the output. Interpolation is lexical: `#name#` is
substituted only inside the body of a tag that enables it (cfoutput, cfdump)
and is emitted verbatim everywhere else.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, List, MutableMapping, Optional, Sequence

from .base import BranchRole, RenderFrame, RenderResult, Signal, TagHandler
from .config import EngineConfig
from .errors import MisplacedTagError, XolyUserError
from .nodes import InterpolationNode, Node, ParsedTemplate, TagNode, TextNode
from .registry import TagRegistry, get_registry
from .values import is_reference, lookup, stringify

logger = logging.getLogger(__name__)

IncludeResolver = Callable[[str], ParsedTemplate]


class Renderer:
    """
    Renders parsed templates.

    A renderer holds no per-render state, so one instance may render many
    templates, also concurrently, as long as every call gets its own scope.
    """

    def __init__(
        self,
        registry: Optional[TagRegistry] = None,
        config: Optional[EngineConfig] = None,
        include_resolver: Optional[IncludeResolver] = None,
    ):
        """
        Args:
            registry: Tag registry (default: the global one)
            config: Engine limits (default: EngineConfig())
            include_resolver: Callable returning the parsed template for a
                cfinclude path; without it cfinclude fails
        """
        self.registry = registry or get_registry()
        self.config = config or EngineConfig()
        self.include_resolver = include_resolver

    def render(self, parsed: ParsedTemplate, scope: MutableMapping[str, Any]) -> str:
        """
        Renders a template against a scope.

        The scope is mutated in place by cfset, cfparam, cfloop and
        cfsavecontent. A cfabort ends the render early and returns the output
        produced so far.

        Args:
            parsed: Template to render
            scope: Variables; receives the bindings made by the template

        Returns:
            Rendered text

        Raises:
            TemplateRenderError: On any tag-level error (no partial output is returned)
        """
        frame = RenderFrame(self, scope, template=parsed.name)
        result = self.render_nodes(parsed.nodes, frame)

        if result.signal is Signal.ABORT:
            logger.debug(f"Render of {parsed.name or '<string>'} aborted by cfabort")
        return result.output

    def render_nodes(self, nodes: Sequence[Node], frame: RenderFrame) -> RenderResult:
        """
        Renders a node sequence.

        Recognises cfif / cfelseif / cfelse chains among the nodes: whitespace
        between chain members keeps the chain open, anything else ends it.

        Returns:
            Output and the signal that stopped the sequence (CONTINUE if none did)
        """
        buffer: List[str] = []
        # None: no chain; False: chain open, no branch taken yet; True: a branch was taken
        chain: Optional[bool] = None

        for node in nodes:
            if isinstance(node, TextNode):
                buffer.append(node.content)
                if node.content.strip():
                    chain = None
                continue

            if isinstance(node, InterpolationNode):
                buffer.append(self._interpolate(node, frame))
                chain = None
                continue

            handler = self._handler_for(node)
            role = handler.branch_role

            if role is BranchRole.OPEN:
                chain = self._test(handler, node, frame)
                if not chain:
                    continue
            elif role is not None:
                if chain is None:
                    raise MisplacedTagError(
                        f"<{node.name}> must follow <cfif> or <cfelseif>",
                        template=frame.template,
                        **node.position(),
                    )
                if chain:
                    if role is BranchRole.CLOSE:
                        chain = None
                    continue
                taken = self._test(handler, node, frame)
                chain = None if role is BranchRole.CLOSE else taken
                if not taken:
                    continue
            else:
                chain = None

            result = self.render_tag(node, handler, frame)
            buffer.append(result.output)
            if result.stopped:
                return RenderResult("".join(buffer), result.signal)

        return RenderResult("".join(buffer))

    def render_tag(self, node: TagNode, handler: TagHandler, frame: RenderFrame) -> RenderResult:
        """
        Runs a handler's lifecycle: on_enter, on_render_body, on_exit.

        Errors raised by the handler get the tag's position if they have none.
        """
        try:
            handler.on_enter(node, frame)
            body = handler.on_render_body(node, frame, self._render_fn(frame))
            output = handler.on_exit(node, frame, body.output)
        except XolyUserError as e:
            e.locate(**node.position())
            e.with_template(frame.template)
            raise
        return RenderResult(output, body.signal)

    def _render_fn(self, current: RenderFrame):
        """Builds the render callable handed to on_render_body."""
        def render(nodes: Sequence[Node], interpolate: Optional[bool] = None,
                   frame: Optional[RenderFrame] = None) -> RenderResult:
            target = frame or current
            if interpolate is not None and interpolate != target.interpolate:
                target = target.child(interpolate=interpolate)
            return self.render_nodes(nodes, target)

        return render

    def _handler_for(self, node: TagNode) -> TagHandler:
        handler = self.registry.get_handler(node.name)
        if handler is None:
            # The tree was built with a different registry
            raise LookupError(f"No handler registered for tag <{node.name}>")
        return handler

    def _test(self, handler: TagHandler, node: TagNode, frame: RenderFrame) -> bool:
        try:
            return handler.test(node, frame)
        except XolyUserError as e:
            e.locate(**node.position())
            e.with_template(frame.template)
            raise

    @staticmethod
    def _interpolate(node: InterpolationNode, frame: RenderFrame) -> str:
        if not frame.interpolate:
            return node.source
        if node.expression == "":
            # "##" is an escaped '#'
            return "#"
        if not is_reference(node.expression):
            return node.source
        return stringify(lookup(frame.scope, node.expression))


__all__ = ["Renderer", "IncludeResolver"]
