"""
Tags that bind variables: cfparam, cfset, cfsavecontent.
"""

from __future__ import annotations

from typing import Any

from ..base import RenderFn, RenderFrame, RenderResult, TagHandler
from ..conditions import truthy
from ..errors import MissingRequiredParamError, TagAttributeError
from ..nodes import TagNode
from ..values import UNBOUND, assign, expand, lookup, stringify


def bind(node: TagNode, frame: RenderFrame, target: str, value: Any) -> None:
    """Assigns in the shared scope, reporting bad targets as TagAttributeError."""
    try:
        assign(frame.scope, target, value)
    except ValueError as e:
        raise TagAttributeError(str(e), **node.position())


class ParamHandler(TagHandler):
    """
    <cfparam name="x" default="...">

    Binds the default when the variable is unbound; a variable that is unbound
    and has no default is an error.
    """

    @property
    def name(self) -> str:
        return "param"

    def on_enter(self, node: TagNode, frame: RenderFrame) -> None:
        target = stringify(expand(self.require(node, "name"), frame.scope)).strip()
        if lookup(frame.scope, target) is not UNBOUND:
            return

        default = node.get("default")
        if default is None:
            raise MissingRequiredParamError(target, **node.position())
        bind(node, frame, target, expand(default, frame.scope))


class SetHandler(TagHandler):
    """
    <cfset name="x" value="..."> or <cfset x="..." y="...">

    With both `name` and `value` the first form applies; otherwise every
    attribute is an assignment. Values are expanded, so value="#items#" binds
    the list itself.
    """

    @property
    def name(self) -> str:
        return "set"

    def on_enter(self, node: TagNode, frame: RenderFrame) -> None:
        attributes = node.attributes
        if "name" in attributes and "value" in attributes:
            target = stringify(expand(attributes["name"], frame.scope)).strip()
            bind(node, frame, target, expand(attributes["value"], frame.scope))
            return

        if not attributes:
            raise TagAttributeError(f"<{node.name}> needs at least one assignment", **node.position())
        for target, raw in attributes.items():
            bind(node, frame, target, expand(raw, frame.scope))


class SaveContentHandler(TagHandler):
    """
    <cfsavecontent variable="x" [append="true"]>

    Renders the body into the variable instead of the output. If the body is
    cut short by cfbreak or cfabort, the partial content is still bound.
    """

    has_body = True

    @property
    def name(self) -> str:
        return "savecontent"

    def on_render_body(self, node: TagNode, frame: RenderFrame, render: RenderFn) -> RenderResult:
        target = self.require(node, "variable")
        result = render(node.body)

        content = result.output
        if truthy(node.get("append", "false")):
            existing = lookup(frame.scope, target)
            if existing is not UNBOUND:
                content = stringify(existing) + content

        bind(node, frame, target, content)
        return RenderResult("", result.signal)


__all__ = ["ParamHandler", "SetHandler", "SaveContentHandler", "bind"]
