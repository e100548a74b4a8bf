from pathlib import Path
from typing import Any, Dict, Optional

import pytest

from xoly import DictLoader, EngineConfig, TemplateEngine


@pytest.fixture
def render_text():
    """
    Renders template source with a fresh engine.

    Usage: render_text(source, scope=None, templates=None, **config_fields)
    """
    def _render(source: str, scope: Optional[Dict[str, Any]] = None,
                templates: Optional[Dict[str, str]] = None, **config) -> str:
        engine = TemplateEngine(config=EngineConfig(**config), loader=DictLoader(templates or {}))
        return engine.render_string(source, {} if scope is None else scope)

    return _render


@pytest.fixture
def template_dir(tmp_path: Path) -> Path:
    """Directory with a page that includes a partial from a subdirectory."""
    (tmp_path / "partials").mkdir()
    (tmp_path / "page.cfm").write_text(
        '<cfparam name="title" default="Home">'
        '<cfoutput>[#title#]</cfoutput>'
        '<cfinclude template="partials/footer.cfm">',
        encoding="utf-8",
    )
    (tmp_path / "partials" / "footer.cfm").write_text(
        "<cfoutput>-- #title# --</cfoutput>",
        encoding="utf-8",
    )
    return tmp_path

