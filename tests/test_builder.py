"""
Tests for the tree builder.
"""

import pytest

from xoly.builder import TreeBuilder, build
from xoly.errors import MalformedAttributeError, NestingDepthError, UnbalancedTagError, UnclosedTagError
from xoly.nodes import InterpolationNode, ParsedTemplate, TagNode, TextNode, walk
from xoly.registry import create_registry
from xoly.scanner import scan


class TestTreeBuilder:

    def setup_method(self):
        self.builder = TreeBuilder(create_registry())

    def parse(self, text, name=None):
        return self.builder.build(scan(text), name=name)

    def test_text_only(self):
        parsed = self.parse("just text")
        assert isinstance(parsed, ParsedTemplate)
        assert parsed.nodes == (TextNode("just text"),)

    def test_body_tag_owns_children(self):
        parsed = self.parse('<cfif condition="x">a#b#c</cfif>')
        (node,) = parsed.nodes
        assert isinstance(node, TagNode)
        assert node.name == "cfif"
        assert node.attributes == {"condition": "x"}
        assert node.body[0] == TextNode("a")
        assert isinstance(node.body[1], InterpolationNode)
        assert node.body[1].expression == "b"
        assert node.body[2] == TextNode("c")

    def test_bodyless_tag_has_no_body(self):
        parsed = self.parse('<cfset a="1">after')
        node, text = parsed.nodes
        assert node.body is None
        assert text == TextNode("after")

    def test_redundant_close_of_bodyless_tag_is_dropped(self):
        parsed = self.parse('<cfset a="1"></cfset>x')
        assert len(parsed.nodes) == 2
        assert parsed.nodes[1] == TextNode("x")

    def test_self_closing_body_tag_has_empty_body(self):
        (node,) = self.parse("<cfoutput/>").nodes
        assert node.body == ()

    def test_unknown_tags_become_text(self):
        parsed = self.parse('<foo bar="1">x</foo>')
        assert parsed.nodes == (TextNode('<foo bar="1">x</foo>'),)

    def test_unknown_tag_with_odd_attributes_is_not_parsed(self):
        parsed = self.parse("<div class=main>")
        assert parsed.nodes == (TextNode("<div class=main>"),)

    def test_bare_and_prefixed_names_close_each_other(self):
        (node,) = self.parse('<if condition="x">y</cfif>').nodes
        assert node.name == "if"
        assert node.body == (TextNode("y"),)

    def test_nested_tags(self):
        parsed = self.parse('<cfoutput><cfloop from="1" to="2" index="i">#i#</cfloop></cfoutput>')
        (output,) = parsed.nodes
        (loop,) = output.body
        assert loop.name == "cfloop"
        assert loop.body[0].expression == "i"

    def test_unclosed_tag(self):
        with pytest.raises(UnclosedTagError) as excinfo:
            self.parse("<if>...")
        assert excinfo.value.tag == "if"
        assert excinfo.value.line == 1
        assert excinfo.value.column == 1

    def test_unclosed_reports_innermost_tag(self):
        with pytest.raises(UnclosedTagError) as excinfo:
            self.parse("<cfoutput>\n  <cfloop list=\"a\">")
        assert excinfo.value.tag == "cfloop"
        assert excinfo.value.line == 2

    def test_mismatched_close(self):
        with pytest.raises(UnbalancedTagError) as excinfo:
            self.parse("<if></loop>")
        assert excinfo.value.expected == "if"
        assert excinfo.value.found == "loop"

    def test_close_without_open(self):
        with pytest.raises(UnbalancedTagError, match="no open tag"):
            self.parse("text</cfoutput>")

    def test_malformed_attributes_of_known_tag(self):
        with pytest.raises(MalformedAttributeError):
            self.parse("<cfset name=x>")

    def test_nesting_depth_limit(self):
        builder = TreeBuilder(create_registry(), max_depth=3)
        with pytest.raises(NestingDepthError):
            builder.build(scan("<cfoutput>" * 4 + "</cfoutput>" * 4))
        parsed = builder.build(scan("<cfoutput>" * 3 + "</cfoutput>" * 3))
        assert len(list(walk(parsed.nodes))) == 3

    def test_deep_nesting_within_default_limit(self):
        depth = 100
        parsed = self.parse("<cfoutput>" * depth + "x" + "</cfoutput>" * depth)
        assert len(list(walk(parsed.nodes))) == depth + 1

    def test_adjacent_text_is_merged(self):
        parsed = self.parse('a<foo>b<!--- c --->d')
        assert parsed.nodes == (TextNode("a<foo>bd"),)

    def test_long_run_of_unknown_tags_is_one_node(self):
        source = "<p>x</p>" * 5000
        parsed = self.parse(source)
        assert parsed.nodes == (TextNode(source),)

    def test_text_run_ends_at_tag(self):
        parsed = self.parse("<b>a</b><cfset x=\"1\"><i>b</i>")
        text_before, node, text_after = parsed.nodes
        assert text_before == TextNode("<b>a</b>")
        assert node.name == "cfset"
        assert text_after == TextNode("<i>b</i>")

    def test_name_and_positions(self):
        parsed = self.parse('x\n<cfset a="1">', name="page.cfm")
        assert parsed.name == "page.cfm"
        node = parsed.nodes[1]
        assert (node.line, node.column, node.offset) == (2, 1, 2)
        assert node.source == '<cfset a="1">'

    def test_build_wrapper_uses_global_registry(self):
        parsed = build(scan("<cfoutput>x</cfoutput>"))
        assert parsed.nodes[0].body == (TextNode("x"),)

    def test_tree_is_immutable(self):
        parsed = self.parse("<cfoutput>x</cfoutput>")
        with pytest.raises(AttributeError):
            parsed.nodes[0].name = "other"
