"""
Conditional tags: cfif, cfelseif, cfelse.

The three tags are siblings in the tree. The renderer keeps track of the
chain they form and asks each member's test() whether its body renders.
"""

from __future__ import annotations

from ..base import BranchRole, RenderFrame, TagHandler
from ..conditions import ConditionEvaluator, parse_condition
from ..errors import MissingAttributeError
from ..nodes import TagNode


def check_condition(node: TagNode, frame: RenderFrame) -> bool:
    """
    Evaluates the tag's condition against the scope.

    The condition comes from the `condition` attribute, or from `expression`
    when `condition` is absent.

    Raises:
        MissingAttributeError: If the tag has neither attribute
        ConditionSyntaxError: If the condition cannot be parsed
    """
    text = node.attributes.get("condition")
    if text is None:
        text = node.attributes.get("expression")
    if text is None:
        raise MissingAttributeError(node.name, "condition", **node.position())
    return ConditionEvaluator(frame.scope).evaluate(parse_condition(text))


class IfHandler(TagHandler):
    """<cfif condition="..."> opens a chain."""

    has_body = True
    branch_role = BranchRole.OPEN

    @property
    def name(self) -> str:
        return "if"

    def test(self, node: TagNode, frame: RenderFrame) -> bool:
        return check_condition(node, frame)


class ElseIfHandler(TagHandler):
    """<cfelseif condition="..."> continues a chain."""

    has_body = True
    branch_role = BranchRole.CONTINUE

    @property
    def name(self) -> str:
        return "elseif"

    def test(self, node: TagNode, frame: RenderFrame) -> bool:
        return check_condition(node, frame)


class ElseHandler(TagHandler):
    """<cfelse> closes a chain; renders when no earlier branch was taken."""

    has_body = True
    branch_role = BranchRole.CLOSE

    @property
    def name(self) -> str:
        return "else"


__all__ = ["IfHandler", "ElseIfHandler", "ElseHandler", "check_condition"]
