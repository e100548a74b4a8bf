"""
Template loaders used by cfinclude and TemplateEngine.get_template().

A loader turns a template path into source text. Any exception it raises is
reported to the template author as an IncludeResolutionError.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Dict, Iterable, List, Protocol, Union, runtime_checkable

logger = logging.getLogger(__name__)


class TemplateNotFound(LookupError):
    """The loader has no template under the requested path."""

    def __init__(self, path: str, searched: Iterable[str] = ()):
        self.path = path
        self.searched = list(searched)
        detail = f" (searched: {', '.join(self.searched)})" if self.searched else ""
        super().__init__(f"template not found{detail}")


@runtime_checkable
class TemplateLoader(Protocol):
    """
    Protocol of template loaders.
    """

    def load_template(self, path: str) -> str:
        """
        Returns the source text of a template.

        Args:
            path: Template path as written in cfinclude

        Raises:
            TemplateNotFound: If there is no such template
        """
        ...


class FileSystemLoader:
    """
    Loads templates from one or more directories.

    Paths are relative to the search directories, which are tried in order.
    Paths escaping a search directory are refused.
    """

    def __init__(self, search_paths: Union[str, Path, Iterable[Union[str, Path]]] = ".",
                 encoding: str = "utf-8"):
        if isinstance(search_paths, (str, Path)):
            search_paths = [search_paths]
        self.search_paths: List[Path] = [Path(p).resolve() for p in search_paths]
        self.encoding = encoding

    def load_template(self, path: str) -> str:
        relative = path.replace("\\", "/").lstrip("/")
        for base in self.search_paths:
            candidate = (base / relative).resolve()
            try:
                candidate.relative_to(base)
            except ValueError:
                logger.warning(f"Refusing template path outside {base}: {path}")
                continue
            if candidate.is_file():
                logger.debug(f"Loading template {candidate}")
                return candidate.read_text(encoding=self.encoding)
        raise TemplateNotFound(path, (str(p) for p in self.search_paths))


class DictLoader:
    """
    Loads templates from an in-memory mapping of path to source.
    """

    def __init__(self, templates: Dict[str, str]):
        self.templates = dict(templates)

    def load_template(self, path: str) -> str:
        try:
            return self.templates[path]
        except KeyError:
            raise TemplateNotFound(path)


__all__ = ["TemplateLoader", "TemplateNotFound", "FileSystemLoader", "DictLoader"]
