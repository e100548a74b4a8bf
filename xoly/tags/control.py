"""
<cfabort>: ends the whole render.
"""

from __future__ import annotations

from ..base import RenderFn, RenderFrame, RenderResult, Signal, TagHandler
from ..errors import TemplateAbortedError
from ..nodes import TagNode
from ..values import expand, stringify


class AbortHandler(TagHandler):
    """
    Without attributes the render stops and returns the output produced so far.
    With showerror="message" the render fails with TemplateAbortedError.
    """

    @property
    def name(self) -> str:
        return "abort"

    def on_render_body(self, node: TagNode, frame: RenderFrame, render: RenderFn) -> RenderResult:
        message = node.get("showerror")
        if message is not None:
            raise TemplateAbortedError(stringify(expand(message, frame.scope)), **node.position())
        return RenderResult(signal=Signal.ABORT)


__all__ = ["AbortHandler"]
