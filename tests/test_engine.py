"""
Tests for TemplateEngine and the module-level API.
"""

import threading

import pytest

from xoly import DictLoader, EngineConfig, ParsedTemplate, TemplateEngine, parse, render, render_string
from xoly.errors import LoopLimitExceededError, NestingDepthError, ScanError, UnbalancedTagError, UnclosedTagError
from xoly.loader import TemplateNotFound


class CountingLoader(DictLoader):
    def __init__(self, templates):
        super().__init__(templates)
        self.loads = 0

    def load_template(self, path):
        self.loads += 1
        return super().load_template(path)


class TestTemplateEngine:

    def setup_method(self):
        self.loader = CountingLoader({
            "hello.cfm": "<cfoutput>Hello #name#</cfoutput>",
            "bad.cfm": "<cfif></cfloop>",
        })
        self.engine = TemplateEngine(loader=self.loader)

    def test_render_template(self):
        scope = {"name": "Ann"}
        assert self.engine.render_template("hello.cfm", scope) == "Hello Ann"

    def test_get_template_caches(self):
        first = self.engine.get_template("hello.cfm")
        second = self.engine.get_template("hello.cfm")
        assert first is second
        assert self.loader.loads == 1
        assert first.name == "hello.cfm"

    def test_clear_cache(self):
        self.engine.get_template("hello.cfm")
        self.engine.clear_cache()
        self.engine.get_template("hello.cfm")
        assert self.loader.loads == 2

    def test_cache_disabled(self):
        engine = TemplateEngine(config=EngineConfig(cache_templates=False), loader=self.loader)
        engine.get_template("hello.cfm")
        engine.get_template("hello.cfm")
        assert self.loader.loads == 2

    def test_missing_template(self):
        with pytest.raises(TemplateNotFound):
            self.engine.get_template("nope.cfm")

    def test_syntax_error_names_template(self):
        with pytest.raises(UnbalancedTagError) as excinfo:
            self.engine.get_template("bad.cfm")
        assert excinfo.value.template == "bad.cfm"

    def test_render_without_scope(self):
        assert self.engine.render_string("<cfoutput>[#x#]</cfoutput>") == "[]"

    def test_nesting_limit_from_config(self):
        engine = TemplateEngine(config=EngineConfig(max_nesting_depth=2), loader=self.loader)
        with pytest.raises(NestingDepthError):
            engine.parse("<cfoutput><cfoutput><cfoutput></cfoutput></cfoutput></cfoutput>")

    def test_concurrent_renders_of_one_tree(self):
        parsed = self.engine.parse('<cfloop index="i" from="1" to="50"><cfoutput>#i##tag#</cfoutput></cfloop>')
        results = {}

        def work(tag):
            results[tag] = self.engine.render(parsed, {"tag": tag})

        threads = [threading.Thread(target=work, args=(t,)) for t in "abcdefgh"]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        for tag, output in results.items():
            assert output == "".join(f"{i}{tag}" for i in range(1, 51))
        assert len(results) == 8


class TestModuleApi:

    def test_parse_returns_handle(self):
        parsed = parse("<cfoutput>x</cfoutput>", name="inline")
        assert isinstance(parsed, ParsedTemplate)
        assert parsed.name == "inline"
        assert len(parsed) == 1

    def test_parse_errors(self):
        with pytest.raises(UnclosedTagError):
            parse("<if>...")
        with pytest.raises(UnbalancedTagError):
            parse("<if></loop>")

    def test_render_mutates_scope(self):
        scope = {}
        assert render(parse('<cfset x="1"><cfoutput>#x#</cfoutput>'), scope) == "1"
        assert scope == {"x": "1"}

    def test_render_with_loader_and_config(self):
        parsed = parse('<cfinclude template="a"><cfloop condition="true"></cfloop>')
        with pytest.raises(LoopLimitExceededError, match="3"):
            render(parsed, {}, loader=DictLoader({"a": "A"}), config=EngineConfig(loop_limit=3))

    def test_render_string_defaults(self):
        assert render_string("plain") == "plain"

    def test_interpolation_inside_html_attributes(self):
        source = '<cfoutput><a href="#url#">#url#</a></cfoutput>'
        assert render_string(source, {"url": "/home"}) == '<a href="/home">/home</a>'

    def test_html_attributes_outside_output_stay_literal(self):
        source = '<a href="#url#">go</a>'
        assert render_string(source, {"url": "/home"}) == source

    def test_stray_angle_bracket_is_text(self):
        assert render_string("if a<b then c", {}) == "if a<b then c"
        assert render_string("<cfoutput>for (i=0; i<n; i++) #n#</cfoutput>", {"n": 3}) == (
            "for (i=0; i<n; i++) 3"
        )

    def test_unterminated_template_tag_still_fails(self):
        with pytest.raises(ScanError):
            parse('<cfif condition="x"')
