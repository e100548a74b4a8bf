"""
Central registry of tag handlers.

Maps tag names to handler objects. The tree builder consults it to decide
whether a tag owns a body, the renderer to dispatch lifecycle hooks. Tag names
that no handler claims are not errors: the tree builder keeps them as
literal text.
"""

from __future__ import annotations

import logging
import threading
from typing import Dict, List, Optional

from .base import TagHandler

logger = logging.getLogger(__name__)


class TagRegistry:
    """
    Registry of tag handlers.

    Lookups are resolved through each handler's matches_bare_tag() and
    memoised per spelling, misses included.
    """

    def __init__(self):
        self.handlers: Dict[str, TagHandler] = {}
        self._lookup_cache: Dict[str, Optional[TagHandler]] = {}
        self._lock = threading.Lock()

        logger.debug("TagRegistry initialized")

    def register_handler(self, handler: TagHandler) -> None:
        """
        Registers a handler under its bare name.

        Args:
            handler: Handler to register

        Raises:
            ValueError: If a handler with the same name is already registered
        """
        name = handler.name.lower()
        with self._lock:
            if name in self.handlers:
                raise ValueError(f"Tag handler '{name}' already registered")
            self.handlers[name] = handler
            self._lookup_cache.clear()

        logger.debug(f"Registered tag handler '{name}' (has_body={handler.has_body})")

    def register_handlers(self, handlers: List[TagHandler]) -> None:
        for handler in handlers:
            self.register_handler(handler)

    def get_handler(self, tag_name: str) -> Optional[TagHandler]:
        """
        Returns the handler serving a tag name.

        Args:
            tag_name: Tag name as written in the template

        Returns:
            Handler or None for unknown tags
        """
        key = tag_name.lower()
        try:
            return self._lookup_cache[key]
        except KeyError:
            pass

        handler = self.handlers.get(key)
        if handler is None:
            handler = next(
                (h for h in self.handlers.values() if h.matches_bare_tag(key)),
                None,
            )

        with self._lock:
            self._lookup_cache[key] = handler
        return handler

    def has_handler(self, tag_name: str) -> bool:
        return self.get_handler(tag_name) is not None

    def has_body(self, tag_name: str) -> bool:
        """
        Checks whether the tag owns a body.

        Returns:
            False for unknown tags
        """
        handler = self.get_handler(tag_name)
        return bool(handler and handler.has_body)

    def get_handler_names(self) -> List[str]:
        """Returns the bare names of all registered handlers."""
        return sorted(self.handlers)

    def copy(self) -> "TagRegistry":
        """Returns an independent registry with the same handlers (for extension)."""
        clone = TagRegistry()
        clone.handlers = dict(self.handlers)
        return clone


_default_registry: Optional[TagRegistry] = None
_default_lock = threading.Lock()


def create_registry() -> TagRegistry:
    """Creates a new registry with all built-in tags."""
    from .tags import builtin_handlers

    registry = TagRegistry()
    registry.register_handlers(builtin_handlers())
    return registry


def get_registry() -> TagRegistry:
    """
    Returns the process-wide registry with the built-in tags.
    """
    global _default_registry
    if _default_registry is None:
        with _default_lock:
            if _default_registry is None:
                _default_registry = create_registry()
    return _default_registry


__all__ = ["TagRegistry", "create_registry", "get_registry"]
