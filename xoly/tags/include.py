"""
<cfinclude template="path">: renders another template inline.
"""

from __future__ import annotations

import logging

from ..base import RenderFn, RenderFrame, RenderResult, TagHandler
from ..errors import IncludeResolutionError, MissingAttributeError
from ..nodes import TagNode
from ..values import expand, stringify

logger = logging.getLogger(__name__)


class IncludeHandler(TagHandler):
    """
    Loads the template named by `template` (or `path`) through the renderer's
    include resolver and renders it against the current scope.

    The included template starts with interpolation off: only its own
    cfoutput blocks substitute variables.
    """

    @property
    def name(self) -> str:
        return "include"

    def on_render_body(self, node: TagNode, frame: RenderFrame, render: RenderFn) -> RenderResult:
        raw = self.first_of(node, "template", "path")
        if raw is None:
            raise MissingAttributeError(node.name, "template", **node.position())
        path = stringify(expand(raw, frame.scope)).strip()

        limit = frame.config.max_include_depth
        if frame.include_depth >= limit:
            raise IncludeResolutionError(path, f"includes nested deeper than {limit} levels", **node.position())

        resolver = frame.renderer.include_resolver
        if resolver is None:
            raise IncludeResolutionError(path, "no template loader configured", **node.position())

        parsed = resolver(path)
        logger.debug(f"Including {path} at depth {frame.include_depth + 1}")

        included = frame.child(
            interpolate=False,
            template=parsed.name or path,
            include_depth=frame.include_depth + 1,
        )
        return render(parsed.nodes, frame=included)


__all__ = ["IncludeHandler"]
