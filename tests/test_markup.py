"""Tests for markup converters."""

import pytest

from folio.markup import CONVERTERS, get_converter, paragraphs, passthrough


class TestParagraphs:
    def test_blank_lines_split_paragraphs(self):
        assert paragraphs("One\n\nTwo") == "<p>One</p>\n<p>Two</p>"

    def test_single_newline_is_break(self):
        assert paragraphs("Line one\nLine two") == "<p>Line one<br>\nLine two</p>"

    def test_escapes_html(self):
        assert paragraphs("<b>&</b>") == "<p>&lt;b&gt;&amp;&lt;/b&gt;</p>"

    def test_windows_newlines(self):
        assert paragraphs("A\r\n\r\nB") == "<p>A</p>\n<p>B</p>"

    def test_empty(self):
        assert paragraphs("") == ""
        assert paragraphs("\n\n  \n") == ""


class TestRegistry:
    def test_passthrough(self):
        assert passthrough("<em>x</em>") == "<em>x</em>"

    def test_lookup(self):
        assert get_converter("text") is paragraphs
        assert get_converter("html") is passthrough
        assert set(CONVERTERS) == {"text", "html"}

    def test_unknown(self):
        with pytest.raises(ValueError, match="markdown"):
            get_converter("markdown")
