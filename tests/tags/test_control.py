"""
Tests for cfabort.
"""

import pytest

from xoly import render_string
from xoly.errors import TemplateAbortedError


class TestAbort:

    def test_returns_output_so_far(self):
        assert render_string("one<cfabort>two", {}) == "one"

    def test_stops_inside_output(self):
        assert render_string("<cfoutput>#a#<cfabort>#a#</cfoutput>", {"a": "x"}) == "x"

    def test_showerror(self):
        with pytest.raises(TemplateAbortedError) as excinfo:
            render_string('text<cfabort showerror="Access denied for #user#">', {"user": "bob"})
        assert excinfo.value.message == "Access denied for bob"
        assert excinfo.value.line == 1
        assert excinfo.value.column == 5

    def test_abort_in_branch_not_taken(self):
        assert render_string('<cfif condition="false"><cfabort></cfif>rest', {}) == "rest"
