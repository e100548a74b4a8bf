from __future__ import annotations

import argparse
import logging
import os
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

from ruamel.yaml import YAML

from .config import EngineConfig, find_config, load_config, load_variables
from .engine import TemplateEngine
from .errors import XolyUserError
from .loader import FileSystemLoader
from .nodes import TagNode, walk
from .registry import get_registry
from .version import tool_version

logger = logging.getLogger(__name__)


def _build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="xoly",
        description="Renders tag-based (cf*) templates",
        add_help=True,
    )
    p.add_argument("-v", "--version", action="version", version=f"%(prog)s {tool_version()}")
    p.add_argument("--verbose", action="store_true", help="debug logging to stderr (also: XOLY_DEBUG=1)")
    p.add_argument("--config", metavar="FILE", help="engine config (default: ./xoly.yaml when present)")
    sub = p.add_subparsers(dest="cmd", required=True)

    sp_render = sub.add_parser("render", help="Render a template to stdout")
    sp_render.add_argument("file", help="template file")
    sp_render.add_argument(
        "--var",
        action="append",
        metavar="NAME=VALUE",
        help="template variable (can be given several times)",
    )
    sp_render.add_argument("--vars", metavar="FILE.yaml", help="YAML mapping of template variables")
    sp_render.add_argument(
        "--dump-scope",
        action="store_true",
        help="write the variables after rendering to stderr as YAML",
    )

    sp_check = sub.add_parser("check", help="Parse templates and report syntax errors")
    sp_check.add_argument("files", nargs="+", help="template files")

    sub.add_parser("tags", help="List the registered tags")

    return p


def _setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose or os.environ.get("XOLY_DEBUG") else logging.WARNING
    root = logging.getLogger("xoly")
    if not root.handlers:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter("[%(levelname)s] %(message)s"))
        root.addHandler(handler)
    root.setLevel(level)


def _load_config(config_arg: Optional[str]) -> EngineConfig:
    if config_arg:
        return load_config(Path(config_arg))
    found = find_config(Path.cwd())
    return load_config(found) if found else EngineConfig()


def _parse_vars(pairs: Optional[List[str]]) -> Dict[str, str]:
    """Parses NAME=VALUE pairs into a mapping."""
    result: Dict[str, str] = {}
    for pair in pairs or ():
        if "=" not in pair:
            raise ValueError(f"Invalid variable '{pair}'. Expected 'NAME=VALUE'")
        name, value = pair.split("=", 1)
        result[name.strip()] = value
    return result


def _read(path: Path, encoding: str) -> str:
    try:
        return path.read_text(encoding=encoding)
    except OSError as e:
        raise ValueError(f"Cannot read {path}: {e.strerror or e}")


def _cmd_render(ns: argparse.Namespace, config: EngineConfig) -> int:
    path = Path(ns.file)
    source = _read(path, config.encoding)

    scope: Dict[str, Any] = {}
    if ns.vars:
        scope.update(load_variables(Path(ns.vars)))
    scope.update(_parse_vars(ns.var))

    logger.debug(f"Rendering {path} with {len(scope)} variables")
    # Includes resolve next to the template first, then along template_paths
    loader = FileSystemLoader([path.parent, *config.template_paths], encoding=config.encoding)
    engine = TemplateEngine(config=config, loader=loader)
    sys.stdout.write(engine.render_string(source, scope, name=str(path)))

    if ns.dump_scope:
        yaml = YAML(typ="safe", pure=True)
        yaml.default_flow_style = False
        yaml.dump(dict(scope), sys.stderr)
    return 0


def _cmd_check(ns: argparse.Namespace, config: EngineConfig) -> int:
    engine = TemplateEngine(config=config)
    failures = 0
    for file in ns.files:
        path = Path(file)
        try:
            parsed = engine.parse(_read(path, config.encoding), name=str(path))
        except (XolyUserError, ValueError) as e:
            failures += 1
            sys.stderr.write(f"{path}: error: {e}\n")
            continue
        tags = sum(1 for node in walk(parsed.nodes) if isinstance(node, TagNode))
        sys.stdout.write(f"{path}: ok ({tags} tags)\n")
    return 2 if failures else 0


def _cmd_tags() -> int:
    registry = get_registry()
    for name in registry.get_handler_names():
        handler = registry.handlers[name]
        body = "body" if handler.has_body else "no body"
        sys.stdout.write(f"{handler.prefix}{name}\t{body}\n")
    return 0


def main(argv: list[str] | None = None) -> int:
    ns = _build_parser().parse_args(argv)
    _setup_logging(ns.verbose)

    try:
        config = _load_config(ns.config)

        if ns.cmd == "render":
            return _cmd_render(ns, config)
        if ns.cmd == "check":
            return _cmd_check(ns, config)
        if ns.cmd == "tags":
            return _cmd_tags()

    except (XolyUserError, LookupError, ValueError) as e:
        sys.stderr.write(f"error: {str(e).rstrip()}\n")
        return 2

    return 2


if __name__ == "__main__":
    raise SystemExit(main())
