"""
Tests for cfloop and cfbreak.
"""

import pytest

from xoly import render_string
from xoly.errors import LoopLimitExceededError, MisplacedTagError, MissingAttributeError, TagAttributeError


class TestRangeLoop:

    def test_inclusive_range(self, render_text):
        source = '<cfloop index="i" from="1" to="3"><cfoutput>#i#</cfoutput></cfloop>'
        assert render_text(source) == "123"

    def test_step(self, render_text):
        source = '<cfloop index="i" from="10" to="1" step="-3"><cfoutput>#i#,</cfoutput></cfloop>'
        assert render_text(source) == "10,7,4,1,"

    def test_empty_range(self, render_text):
        assert render_text('<cfloop index="i" from="5" to="1">x</cfloop>') == ""

    def test_bounds_from_scope(self, render_text):
        source = '<cfloop index="i" from="1" to="#n#">*</cfloop>'
        assert render_text(source, {"n": 4}) == "****"
        assert render_text(source, {"n": "2"}) == "**"

    def test_fractional_step(self, render_text):
        source = '<cfloop index="i" from="0" to="1" step="0.5"><cfoutput>#i# </cfoutput></cfloop>'
        assert render_text(source) == "0 0.5 1.0 "

    def test_index_stays_bound(self):
        scope = {}
        render_string('<cfloop index="i" from="1" to="3"></cfloop>', scope)
        assert scope["i"] == 3

    def test_zero_step(self, render_text):
        with pytest.raises(TagAttributeError, match="must not be zero"):
            render_text('<cfloop index="i" from="1" to="3" step="0">x</cfloop>')

    def test_non_numeric_bound(self, render_text):
        with pytest.raises(TagAttributeError, match="must be a number"):
            render_text('<cfloop index="i" from="one" to="3">x</cfloop>')

    def test_missing_bound(self, render_text):
        with pytest.raises(MissingAttributeError, match="'to'"):
            render_text('<cfloop index="i" from="1">x</cfloop>')


class TestListLoop:

    def test_list_string(self, render_text):
        source = '<cfloop list="a,b,,c" index="x"><cfoutput>[#x#]</cfoutput></cfloop>'
        assert render_text(source) == "[a][b][c]"

    def test_delimiters(self, render_text):
        source = '<cfloop list="a;b|c" delimiters=";|" index="x"><cfoutput>#x#</cfoutput></cfloop>'
        assert render_text(source) == "abc"

    def test_array_from_scope(self, render_text):
        source = '<cfloop array="#items#" item="it" index="n"><cfoutput>#n#=#it.name# </cfoutput></cfloop>'
        scope = {"items": [{"name": "pen"}, {"name": "ink"}]}
        assert render_text(source, scope) == "1=pen 2=ink "

    def test_list_from_scope_string(self, render_text):
        source = '<cfloop list="#csv#" index="x"><cfoutput>#x#.</cfoutput></cfloop>'
        assert render_text(source, {"csv": "1,2,3"}) == "1.2.3."

    def test_mapping_yields_keys(self, render_text):
        source = '<cfloop array="#prices#" item="key"><cfoutput>#key#;</cfoutput></cfloop>'
        assert render_text(source, {"prices": {"pen": 1, "ink": 2}}) == "pen;ink;"

    def test_empty_list(self, render_text):
        assert render_text('<cfloop list="" index="x">never</cfloop>') == ""

    def test_bad_iteration_variable(self, render_text):
        with pytest.raises(TagAttributeError, match="Invalid variable name"):
            render_text('<cfloop list="a" index="1x">x</cfloop>')


class TestConditionLoop:

    def test_condition_loop(self, render_text):
        source = (
            '<cfset i="0">'
            '<cfloop condition="i LT 3">'
            '<cfoutput>#i#</cfoutput>'
            '<cfif condition="i EQ 0"><cfset i="1"></cfif>'
            '<cfelseif condition="i EQ 1"><cfset i="2"></cfelseif>'
            '<cfelse><cfset i="3"></cfelse>'
            '</cfloop>'
        )
        assert render_text(source) == "012"

    def test_never_true(self, render_text):
        assert render_text('<cfloop condition="false">x</cfloop>') == ""

    def test_infinite_loop_hits_limit(self, render_text):
        with pytest.raises(LoopLimitExceededError) as excinfo:
            render_text('<cfloop condition="true">x</cfloop>', loop_limit=50)
        assert excinfo.value.limit == 50

    def test_default_limit(self, render_text):
        with pytest.raises(LoopLimitExceededError, match="100000"):
            render_text('<cfloop condition="true"></cfloop>')

    def test_range_over_limit(self, render_text):
        with pytest.raises(LoopLimitExceededError):
            render_text('<cfloop index="i" from="1" to="11">x</cfloop>', loop_limit=10)
        assert render_text('<cfloop index="i" from="1" to="10">x</cfloop>', loop_limit=10) == "x" * 10

    def test_no_form(self, render_text):
        with pytest.raises(MissingAttributeError):
            render_text('<cfloop index="i">x</cfloop>')


class TestBreak:

    def test_break_ends_loop_after_partial_output(self, render_text):
        source = (
            '<cfloop index="i" from="1" to="10">'
            '<cfoutput>#i#</cfoutput>'
            '<cfif condition="i EQ 3"><cfbreak></cfif>'
            ','
            '</cfloop>done'
        )
        assert render_text(source) == "1,2,3done"

    def test_break_only_ends_innermost_loop(self, render_text):
        source = (
            '<cfloop list="a,b" index="outer">'
            '<cfloop list="1,2,3" index="inner">'
            '<cfif condition="inner EQ 2"><cfbreak></cfif>'
            '<cfoutput>#outer##inner# </cfoutput>'
            '</cfloop>'
            '</cfloop>'
        )
        assert render_text(source) == "a1 b1 "

    def test_break_outside_loop(self, render_text):
        with pytest.raises(MisplacedTagError, match="outside of a loop"):
            render_text("a<cfbreak>b")

    def test_break_inside_savecontent_in_loop(self):
        scope = {}
        source = (
            '<cfloop list="x,y" index="v">'
            '<cfsavecontent variable="saved">kept<cfbreak>lost</cfsavecontent>'
            '</cfloop>'
        )
        assert render_string(source, scope) == ""
        assert scope["saved"] == "kept"
        assert scope["v"] == "x"

    def test_abort_inside_loop(self, render_text):
        source = '<cfloop index="i" from="1" to="5"><cfoutput>#i#</cfoutput><cfabort></cfloop>after'
        assert render_text(source) == "1"
