"""
Tags that switch interpolation on: cfoutput and cfdump.
"""

from __future__ import annotations

import pprint

from ..base import RenderFn, RenderFrame, RenderResult, TagHandler
from ..nodes import TagNode
from ..values import expand


class OutputHandler(TagHandler):
    """<cfoutput>: #name# is substituted inside the body."""

    has_body = True

    @property
    def name(self) -> str:
        return "output"

    def on_render_body(self, node: TagNode, frame: RenderFrame, render: RenderFn) -> RenderResult:
        return render(node.body, interpolate=True)


class DumpHandler(TagHandler):
    """
    <cfdump [var="#value#"] [label="..."]>

    Debug helper. Pretty-prints `var` (prefixed by `label`) and renders the body
    with interpolation on, whatever the surrounding context.
    """

    has_body = True

    @property
    def name(self) -> str:
        return "dump"

    def on_render_body(self, node: TagNode, frame: RenderFrame, render: RenderFn) -> RenderResult:
        dumped = ""
        raw = node.get("var")
        if raw is not None:
            dumped = pprint.pformat(expand(raw, frame.scope))
            label = node.get("label")
            if label:
                dumped = f"{label}: {dumped}"

        body = render(node.body, interpolate=True)
        return RenderResult(dumped + body.output, body.signal)


__all__ = ["OutputHandler", "DumpHandler"]
