"""
Template engine: the embedding surface of xoly.

Ties configuration, tag registry, loader and the parse/render pipeline
together. Parsed templates are cached by path; the cache is guarded by a lock
so a single engine may serve several threads.
"""

from __future__ import annotations

import logging
import threading
from typing import Any, Dict, MutableMapping, Optional

from .builder import TreeBuilder
from .config import EngineConfig
from .errors import IncludeResolutionError, XolyUserError
from .loader import FileSystemLoader, TemplateLoader
from .nodes import ParsedTemplate
from .registry import TagRegistry, get_registry
from .renderer import Renderer
from .scanner import scan

logger = logging.getLogger(__name__)


class TemplateEngine:
    """
    Parses and renders templates.

    Example:
        engine = TemplateEngine(loader=DictLoader({"header.cfm": "..."}))
        scope = {"name": "world"}
        engine.render_string('<cfinclude template="header.cfm">', scope)
    """

    def __init__(
        self,
        config: Optional[EngineConfig] = None,
        loader: Optional[TemplateLoader] = None,
        registry: Optional[TagRegistry] = None,
    ):
        """
        Args:
            config: Engine settings (default: EngineConfig())
            loader: Template loader (default: FileSystemLoader over config.template_paths)
            registry: Tag registry (default: the global one)
        """
        self.config = config or EngineConfig()
        self.loader = loader or FileSystemLoader(self.config.template_paths, encoding=self.config.encoding)
        self.registry = registry or get_registry()
        self.renderer = Renderer(self.registry, self.config, include_resolver=self._resolve_include)

        self._cache: Dict[str, ParsedTemplate] = {}
        self._lock = threading.Lock()

    def parse(self, source: str, name: Optional[str] = None) -> ParsedTemplate:
        """
        Parses template source.

        Raises:
            TemplateSyntaxError: On malformed input (no partial tree is returned)
        """
        builder = TreeBuilder(self.registry, max_depth=self.config.max_nesting_depth)
        try:
            return builder.build(scan(source, is_tag=self.registry.has_handler), name=name)
        except XolyUserError as e:
            e.with_template(name)
            raise

    def get_template(self, path: str) -> ParsedTemplate:
        """
        Returns the parsed template at a loader path, from the cache if possible.

        Raises:
            LookupError: If the loader has no such template (or any loader error)
            TemplateSyntaxError: If the template does not parse
        """
        if self.config.cache_templates:
            with self._lock:
                cached = self._cache.get(path)
            if cached is not None:
                logger.debug(f"Template cache hit: {path}")
                return cached

        source = self.loader.load_template(path)
        parsed = self.parse(source, name=path)

        if self.config.cache_templates:
            with self._lock:
                parsed = self._cache.setdefault(path, parsed)
        return parsed

    def clear_cache(self) -> None:
        with self._lock:
            self._cache.clear()

    def render(self, parsed: ParsedTemplate, scope: Optional[MutableMapping[str, Any]] = None) -> str:
        """
        Renders a parsed template. The scope is mutated in place.
        """
        return self.renderer.render(parsed, {} if scope is None else scope)

    def render_string(self, source: str, scope: Optional[MutableMapping[str, Any]] = None,
                      name: Optional[str] = None) -> str:
        """Parses and renders source text in one step."""
        return self.render(self.parse(source, name=name), scope)

    def render_template(self, path: str, scope: Optional[MutableMapping[str, Any]] = None) -> str:
        """Loads, parses and renders the template at a loader path."""
        return self.render(self.get_template(path), scope)

    def _resolve_include(self, path: str) -> ParsedTemplate:
        """Include resolver handed to the renderer; loader failures become IncludeResolutionError."""
        try:
            return self.get_template(path)
        except XolyUserError:
            raise
        except Exception as e:
            logger.debug(f"Loader failed for {path}: {e!r}")
            raise IncludeResolutionError(path, str(e) or type(e).__name__) from e


def parse(source: str, name: Optional[str] = None, registry: Optional[TagRegistry] = None) -> ParsedTemplate:
    """
    Parses template source with the given (or global) tag registry.

    Raises:
        TemplateSyntaxError: On malformed input
    """
    return TemplateEngine(registry=registry, loader=_NoLoader()).parse(source, name=name)


def render(
    parsed: ParsedTemplate,
    scope: MutableMapping[str, Any],
    *,
    loader: Optional[TemplateLoader] = None,
    registry: Optional[TagRegistry] = None,
    config: Optional[EngineConfig] = None,
) -> str:
    """
    Renders a parsed template against a scope, mutating the scope in place.

    Without a loader, cfinclude fails with IncludeResolutionError.
    """
    engine = TemplateEngine(config=config, loader=loader or _NoLoader(), registry=registry)
    return engine.render(parsed, scope)


def render_string(source: str, scope: Optional[MutableMapping[str, Any]] = None, **kwargs) -> str:
    """Parses and renders source text; keyword arguments as for render()."""
    if scope is None:
        scope = {}
    return render(parse(source, registry=kwargs.get("registry")), scope, **kwargs)


class _NoLoader:
    """Loader of the module-level helpers when the caller gives none."""

    def load_template(self, path: str) -> str:
        raise LookupError("no template loader configured")


__all__ = ["TemplateEngine", "parse", "render", "render_string"]
