"""
Tests for the command-line interface.
"""

import logging
from pathlib import Path

import pytest

from xoly.cli import main


@pytest.fixture(autouse=True)
def _isolated_cwd(tmp_path: Path, monkeypatch):
    # No stray xoly.yaml from the working directory
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("XOLY_DEBUG", raising=False)
    yield
    logger = logging.getLogger("xoly")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    logger.setLevel(logging.NOTSET)


class TestRender:

    def test_render_with_vars(self, tmp_path: Path, capsys):
        page = tmp_path / "page.cfm"
        page.write_text("<cfoutput>Hello #name#, #count#</cfoutput>", encoding="utf-8")

        rc = main(["render", str(page), "--var", "name=Ann", "--var", "count=a=b"])
        assert rc == 0
        assert capsys.readouterr().out == "Hello Ann, a=b"

    def test_render_with_vars_file(self, tmp_path: Path, capsys):
        page = tmp_path / "page.cfm"
        page.write_text('<cfloop array="#items#" index="i"><cfoutput>#i#;</cfoutput></cfloop>', encoding="utf-8")
        (tmp_path / "vars.yaml").write_text("items: [x, y]\n", encoding="utf-8")

        assert main(["render", str(page), "--vars", str(tmp_path / "vars.yaml")]) == 0
        assert capsys.readouterr().out == "x;y;"

    def test_var_overrides_vars_file(self, tmp_path: Path, capsys):
        page = tmp_path / "page.cfm"
        page.write_text("<cfoutput>#a#</cfoutput>", encoding="utf-8")
        (tmp_path / "vars.yaml").write_text("a: file\n", encoding="utf-8")

        main(["render", str(page), "--vars", str(tmp_path / "vars.yaml"), "--var", "a=flag"])
        assert capsys.readouterr().out == "flag"

    def test_include_next_to_template(self, template_dir: Path, capsys):
        assert main(["render", str(template_dir / "page.cfm")]) == 0
        assert capsys.readouterr().out == "[Home]-- Home --"

    def test_dump_scope(self, tmp_path: Path, capsys):
        page = tmp_path / "page.cfm"
        page.write_text('<cfset greeting="hi">', encoding="utf-8")

        assert main(["render", str(page), "--dump-scope"]) == 0
        captured = capsys.readouterr()
        assert captured.out == ""
        assert "greeting: hi" in captured.err

    def test_render_error(self, tmp_path: Path, capsys):
        page = tmp_path / "page.cfm"
        page.write_text('<cfparam name="required">', encoding="utf-8")

        assert main(["render", str(page)]) == 2
        err = capsys.readouterr().err
        assert err.startswith("error: Required parameter 'required'")
        assert "at 1:1" in err

    def test_missing_file(self, tmp_path: Path, capsys):
        assert main(["render", str(tmp_path / "nope.cfm")]) == 2
        assert "Cannot read" in capsys.readouterr().err

    def test_bad_var_format(self, tmp_path: Path, capsys):
        page = tmp_path / "page.cfm"
        page.write_text("x", encoding="utf-8")
        assert main(["render", str(page), "--var", "novalue"]) == 2
        assert "NAME=VALUE" in capsys.readouterr().err

    def test_config_from_working_directory(self, tmp_path: Path, capsys):
        (tmp_path / "xoly.yaml").write_text("loop_limit: 2\n", encoding="utf-8")
        page = tmp_path / "page.cfm"
        page.write_text('<cfloop list="a,b,c" index="x">#x#</cfloop>', encoding="utf-8")

        assert main(["render", str(page)]) == 2
        assert "iteration limit of 2" in capsys.readouterr().err

    def test_explicit_config(self, tmp_path: Path, capsys):
        (tmp_path / "custom.yaml").write_text("colour: red\n", encoding="utf-8")
        page = tmp_path / "page.cfm"
        page.write_text("x", encoding="utf-8")

        assert main(["--config", str(tmp_path / "custom.yaml"), "render", str(page)]) == 2
        assert "Unknown configuration keys" in capsys.readouterr().err

    def test_verbose_logging(self, tmp_path: Path, capsys):
        page = tmp_path / "page.cfm"
        page.write_text("<cfoutput>x</cfoutput>", encoding="utf-8")

        assert main(["--verbose", "render", str(page)]) == 0
        assert logging.getLogger("xoly").level == logging.DEBUG


class TestCheck:

    def test_reports_each_file(self, tmp_path: Path, capsys):
        good = tmp_path / "good.cfm"
        good.write_text('<cfif condition="x"><cfset y="1"></cfif>', encoding="utf-8")
        bad = tmp_path / "bad.cfm"
        bad.write_text("<cfif>\n<cfloop>", encoding="utf-8")

        assert main(["check", str(good), str(bad)]) == 2
        captured = capsys.readouterr()
        assert f"{good}: ok (2 tags)" in captured.out
        assert f"{bad}: error: Tag <cfloop> is never closed in '{bad}' at 2:1" in captured.err

    def test_all_good(self, tmp_path: Path, capsys):
        page = tmp_path / "page.cfm"
        page.write_text("plain", encoding="utf-8")
        assert main(["check", str(page)]) == 0
        assert "ok (0 tags)" in capsys.readouterr().out


class TestTags:

    def test_lists_builtin_tags(self, capsys):
        assert main(["tags"]) == 0
        lines = capsys.readouterr().out.splitlines()
        assert "cfif\tbody" in lines
        assert "cfset\tno body" in lines
        assert len(lines) == 15


class TestVersion:

    def test_version_flag(self, capsys):
        with pytest.raises(SystemExit) as excinfo:
            main(["--version"])
        assert excinfo.value.code == 0
        assert capsys.readouterr().out.startswith("xoly ")
