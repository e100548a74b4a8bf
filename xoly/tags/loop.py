"""
Iteration tags: cfloop and cfbreak.

cfloop comes in three forms, chosen by its attributes:

    <cfloop condition="i LT 10">...</cfloop>
    <cfloop index="i" from="1" to="10" step="2">...</cfloop>
    <cfloop list="a,b,c" index="letter" delimiters=",">...</cfloop>
    <cfloop array="#items#" item="entry" index="position">...</cfloop>

Every pass binds its variables in the shared scope, so they remain visible
after the loop ends.
"""

from __future__ import annotations

import logging
from typing import Iterator, List, Optional, Union

from ..base import RenderFn, RenderFrame, RenderResult, Signal, TagHandler
from ..errors import LoopLimitExceededError, MisplacedTagError, MissingAttributeError, TagAttributeError
from ..nodes import TagNode
from ..values import expand, split_list
from .conditional import check_condition
from .variables import bind

logger = logging.getLogger(__name__)

Number = Union[int, float]


class LoopHandler(TagHandler):
    """Repeats its body; see the module docstring for the forms."""

    has_body = True

    @property
    def name(self) -> str:
        return "loop"

    def on_render_body(self, node: TagNode, frame: RenderFrame, render: RenderFn) -> RenderResult:
        limit = frame.config.loop_limit
        body_frame = frame.child(loop_depth=frame.loop_depth + 1)
        parts: List[str] = []
        passes = 0

        for _ in self._passes(node, frame):
            passes += 1
            if passes > limit:
                raise LoopLimitExceededError(limit, **node.position())

            result = render(node.body, frame=body_frame)
            parts.append(result.output)
            if result.signal is Signal.BREAK:
                logger.debug(f"<{node.name}> stopped by cfbreak after {passes} passes")
                break
            if result.signal is Signal.ABORT:
                return RenderResult("".join(parts), Signal.ABORT)

        return RenderResult("".join(parts))

    def _passes(self, node: TagNode, frame: RenderFrame) -> Iterator[None]:
        """Yields once per iteration after binding the iteration variables."""
        attributes = node.attributes
        if "condition" in attributes:
            return self._condition_passes(node, frame)
        if "from" in attributes or "to" in attributes:
            return self._range_passes(node, frame)
        if "list" in attributes or "array" in attributes:
            return self._list_passes(node, frame)
        raise MissingAttributeError(node.name, "condition", **node.position())

    @staticmethod
    def _condition_passes(node: TagNode, frame: RenderFrame) -> Iterator[None]:
        while check_condition(node, frame):
            yield

    def _range_passes(self, node: TagNode, frame: RenderFrame) -> Iterator[None]:
        start = self._number(node, frame, "from")
        end = self._number(node, frame, "to")
        step = self._number(node, frame, "step", default=1)
        if step == 0:
            raise TagAttributeError(f"Attribute 'step' of <{node.name}> must not be zero", **node.position())
        index = node.get("index")

        value = start
        while (step > 0 and value <= end) or (step < 0 and value >= end):
            if index:
                bind(node, frame, index, value)
            yield
            value += step

    def _list_passes(self, node: TagNode, frame: RenderFrame) -> Iterator[None]:
        raw = self.first_of(node, "list", "array")
        delimiters = node.get("delimiters", ",")
        items = split_list(expand(raw, frame.scope), delimiters)
        index = node.get("index")
        item = node.get("item")

        for position, element in enumerate(items, start=1):
            if item:
                bind(node, frame, item, element)
                if index:
                    bind(node, frame, index, position)
            elif index:
                bind(node, frame, index, element)
            yield

    @staticmethod
    def _number(node: TagNode, frame: RenderFrame, attribute: str,
                default: Optional[Number] = None) -> Number:
        raw = node.get(attribute)
        if raw is None:
            if default is None:
                raise MissingAttributeError(node.name, attribute, **node.position())
            return default

        value = expand(raw, frame.scope)
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return value
        text = str(value).strip() if value is not None else ""
        try:
            return int(text)
        except ValueError:
            pass
        try:
            return float(text)
        except ValueError:
            raise TagAttributeError(
                f"Attribute '{attribute}' of <{node.name}> must be a number, got {text!r}",
                **node.position(),
            )


class BreakHandler(TagHandler):
    """<cfbreak> ends the innermost enclosing loop."""

    @property
    def name(self) -> str:
        return "break"

    def on_enter(self, node: TagNode, frame: RenderFrame) -> None:
        if frame.loop_depth == 0:
            raise MisplacedTagError(f"<{node.name}> used outside of a loop", **node.position())

    def on_render_body(self, node: TagNode, frame: RenderFrame, render: RenderFn) -> RenderResult:
        return RenderResult(signal=Signal.BREAK)


__all__ = ["LoopHandler", "BreakHandler"]
