from __future__ import annotations

from importlib import metadata


def tool_version() -> str:
    """
    Returns the version of the installed distribution.
    Imports nothing else from the package (avoids cycles).
    """
    try:
        return metadata.version("xoly")
    except metadata.PackageNotFoundError:
        return "0.0.0"

__all__ = ["tool_version"]
