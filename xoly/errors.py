"""
Error taxonomy for the xoly template engine.

All errors a template author can fix inherit from XolyUserError and are
shown by the CLI as clean messages (without stack traces).

Programming errors and bugs should NOT inherit from XolyUserError:
they will propagate with full tracebacks.
"""

from __future__ import annotations

from typing import Optional


class XolyUserError(Exception):
    """
    Base class for all user-facing errors in xoly.

    Carries the source position where it is determinable.
    """

    def __init__(
        self,
        message: str,
        *,
        line: Optional[int] = None,
        column: Optional[int] = None,
        offset: Optional[int] = None,
        template: Optional[str] = None,
    ):
        self.message = message
        self.line = line
        self.column = column
        self.offset = offset
        self.template = template
        super().__init__(message)

    @property
    def kind(self) -> str:
        return type(self).__name__

    def locate(self, line: Optional[int] = None, column: Optional[int] = None,
               offset: Optional[int] = None) -> "XolyUserError":
        """Fills in the source position unless one is already known."""
        if self.line is None:
            self.line = line
            self.column = column
            self.offset = offset
        return self

    def with_template(self, template: Optional[str]) -> "XolyUserError":
        """Attaches the template name unless one is already known."""
        if self.template is None and template:
            self.template = template
        return self

    def __str__(self) -> str:
        where = ""
        if self.line is not None:
            where = f" at {self.line}:{self.column}"
        if self.template:
            where = f" in '{self.template}'{where}"
        return f"{self.message}{where}"


class ConfigError(XolyUserError):
    """Invalid engine configuration."""
    pass


# ---------------------------- parse time ----------------------------

class TemplateSyntaxError(XolyUserError):
    """Base class for errors raised while parsing a template."""
    pass


class ScanError(TemplateSyntaxError):
    """Malformed sentinel sequence (unterminated tag or comment)."""
    pass


class MalformedAttributeError(TemplateSyntaxError):
    """Attribute text that cannot be parsed, e.g. an unterminated quote."""
    pass


class UnbalancedTagError(TemplateSyntaxError):
    """A closing tag does not match the innermost open tag."""

    def __init__(self, expected: Optional[str], found: str, **position):
        self.expected = expected
        self.found = found
        if expected is None:
            message = f"Unexpected closing tag </{found}> with no open tag"
        else:
            message = f"Expected closing tag </{expected}>, found </{found}>"
        super().__init__(message, **position)


class UnclosedTagError(TemplateSyntaxError):
    """A body tag is still open at the end of the input."""

    def __init__(self, tag: str, **position):
        self.tag = tag
        super().__init__(f"Tag <{tag}> is never closed", **position)


class NestingDepthError(TemplateSyntaxError):
    """Tags are nested deeper than the configured maximum."""
    pass


class ConditionSyntaxError(TemplateSyntaxError):
    """A boolean condition could not be parsed."""

    def __init__(self, message: str, position: int, **kwargs):
        self.position = position
        super().__init__(f"{message} (condition position {position})", **kwargs)


# ---------------------------- render time ----------------------------

class TemplateRenderError(XolyUserError):
    """Base class for errors raised while rendering a template."""
    pass


class TagAttributeError(TemplateRenderError):
    """An attribute value is invalid for the tag."""
    pass


class MissingAttributeError(TagAttributeError):
    """A tag is missing a required attribute."""

    def __init__(self, tag: str, attribute: str, **position):
        self.tag = tag
        self.attribute = attribute
        super().__init__(f"Tag <{tag}> requires attribute '{attribute}'", **position)


class MissingRequiredParamError(TemplateRenderError):
    """A cfparam variable is unbound and has no default."""

    def __init__(self, name: str, **position):
        self.name = name
        super().__init__(f"Required parameter '{name}' is not defined and has no default", **position)


class LoopLimitExceededError(TemplateRenderError):
    """A loop ran more iterations than the configured limit."""

    def __init__(self, limit: int, **position):
        self.limit = limit
        super().__init__(f"Loop exceeded the iteration limit of {limit}", **position)


class IncludeResolutionError(TemplateRenderError):
    """An included template could not be loaded."""

    def __init__(self, path: str, reason: str, **position):
        self.path = path
        self.reason = reason
        super().__init__(f"Cannot include '{path}': {reason}", **position)


class MisplacedTagError(TemplateRenderError):
    """A tag appears where its semantics do not allow it."""
    pass


class TemplateAbortedError(TemplateRenderError):
    """Raised by <cfabort showerror="...">."""
    pass


__all__ = [
    "XolyUserError",
    "ConfigError",
    "TemplateSyntaxError",
    "ScanError",
    "MalformedAttributeError",
    "UnbalancedTagError",
    "UnclosedTagError",
    "NestingDepthError",
    "ConditionSyntaxError",
    "TemplateRenderError",
    "TagAttributeError",
    "MissingAttributeError",
    "MissingRequiredParamError",
    "LoopLimitExceededError",
    "IncludeResolutionError",
    "MisplacedTagError",
    "TemplateAbortedError",
]
