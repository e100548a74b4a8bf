"""
Switch tags: cfswitch, cfcase, cfdefaultcase (also cfdefault).
"""

from __future__ import annotations

import logging
from typing import Optional, Tuple

from ..base import RenderFn, RenderFrame, RenderResult, TagHandler
from ..errors import MisplacedTagError
from ..nodes import TagNode, TextNode
from ..values import expand, split_list, stringify

logger = logging.getLogger(__name__)


class SwitchHandler(TagHandler):
    """
    <cfswitch expression="...">

    Expands the expression once and renders the body of the first immediate
    cfcase child whose value equals it (exact string comparison), or else the
    first cfdefaultcase child. Everything else in the body is ignored.
    """

    has_body = True

    @property
    def name(self) -> str:
        return "switch"

    def on_render_body(self, node: TagNode, frame: RenderFrame, render: RenderFn) -> RenderResult:
        subject = stringify(expand(self.require(node, "expression"), frame.scope))
        registry = frame.renderer.registry
        fallback: Optional[TagNode] = None

        for child in node.body or ():
            if isinstance(child, TextNode) and not child.content.strip():
                continue

            handler = registry.get_handler(child.name) if isinstance(child, TagNode) else None
            if isinstance(handler, CaseHandler):
                if subject in handler.values(child, frame):
                    logger.debug(f"<{node.name}> matched case {subject!r}")
                    return render(child.body)
            elif isinstance(handler, DefaultCaseHandler):
                if fallback is None:
                    fallback = child
            else:
                logger.warning(f"Ignoring content of <{node.name}> that is not a case at line {node.line}")

        if fallback is not None:
            return render(fallback.body)
        return RenderResult()


class CaseHandler(TagHandler):
    """<cfcase value="..." [delimiters=","]>; only valid directly inside cfswitch."""

    has_body = True

    @property
    def name(self) -> str:
        return "case"

    def values(self, node: TagNode, frame: RenderFrame) -> Tuple[str, ...]:
        """Returns the values this case matches."""
        value = stringify(expand(self.require(node, "value"), frame.scope))
        delimiters = node.get("delimiters")
        if delimiters:
            return split_list(value, delimiters)
        return (value,)

    def on_enter(self, node: TagNode, frame: RenderFrame) -> None:
        raise MisplacedTagError(f"<{node.name}> must be placed directly inside <cfswitch>", **node.position())


class DefaultCaseHandler(TagHandler):
    """<cfdefaultcase> (or <cfdefault>); only valid directly inside cfswitch."""

    has_body = True

    @property
    def name(self) -> str:
        return "defaultcase"

    def matches_bare_tag(self, tag_name: str) -> bool:
        if super().matches_bare_tag(tag_name):
            return True
        lowered = tag_name.lower()
        return lowered == "default" or lowered == f"{self.prefix}default"

    def on_enter(self, node: TagNode, frame: RenderFrame) -> None:
        raise MisplacedTagError(f"<{node.name}> must be placed directly inside <cfswitch>", **node.position())


__all__ = ["SwitchHandler", "CaseHandler", "DefaultCaseHandler"]
