"""
xoly: interpreter for a tag-based template language.

    from xoly import render_string

    render_string('<cfoutput>Hello #name#</cfoutput>', {"name": "world"})
"""

from __future__ import annotations

from .base import RenderFrame, RenderResult, Signal, TagHandler
from .config import EngineConfig, load_config
from .engine import TemplateEngine, parse, render, render_string
from .errors import (
    ConfigError,
    IncludeResolutionError,
    LoopLimitExceededError,
    MalformedAttributeError,
    MisplacedTagError,
    MissingAttributeError,
    MissingRequiredParamError,
    ScanError,
    TemplateAbortedError,
    TemplateRenderError,
    TemplateSyntaxError,
    UnbalancedTagError,
    UnclosedTagError,
    XolyUserError,
)
from .loader import DictLoader, FileSystemLoader, TemplateLoader, TemplateNotFound
from .nodes import ParsedTemplate
from .registry import TagRegistry, create_registry, get_registry

__all__ = [
    "parse",
    "render",
    "render_string",
    "TemplateEngine",
    "EngineConfig",
    "load_config",
    "ParsedTemplate",
    "TagHandler",
    "TagRegistry",
    "create_registry",
    "get_registry",
    "RenderFrame",
    "RenderResult",
    "Signal",
    "TemplateLoader",
    "TemplateNotFound",
    "FileSystemLoader",
    "DictLoader",
    "XolyUserError",
    "ConfigError",
    "TemplateSyntaxError",
    "ScanError",
    "MalformedAttributeError",
    "UnbalancedTagError",
    "UnclosedTagError",
    "TemplateRenderError",
    "MissingAttributeError",
    "MissingRequiredParamError",
    "LoopLimitExceededError",
    "IncludeResolutionError",
    "MisplacedTagError",
    "TemplateAbortedError",
]
