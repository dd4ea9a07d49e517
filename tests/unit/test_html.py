"""
Tests for HTML text and metadata helpers.
"""

from __future__ import annotations

import pytest

from discernscan.extractor.html import collapse_whitespace, parse_page_metadata, strip_html, truncate


@pytest.mark.unit
class TestStripHtml:
    def test_removes_scripts_styles_and_tags(self):
        html = """
        <html><head><title>T</title><style>body { color: red; }</style>
        <script>var tracking = "secret";</script></head>
        <body><h1>Diabetes</h1><p>Insulin   helps
        control <b>blood sugar</b>.</p><noscript>enable js</noscript></body></html>
        """
        text = strip_html(html)
        assert "Diabetes" in text
        assert "Insulin helps control blood sugar ." in text or "Insulin helps control blood sugar." in text
        assert "tracking" not in text
        assert "color: red" not in text
        assert "enable js" not in text
        assert "<" not in text

    def test_empty_input(self):
        assert strip_html("   ") == ""

    def test_script_only_page_is_empty(self):
        assert strip_html("<html><script>x=1</script><style>p{}</style></html>") == ""


@pytest.mark.unit
def test_collapse_whitespace():
    assert collapse_whitespace("  a\n\n b\t c  ") == "a b c"


@pytest.mark.unit
def test_truncate():
    assert truncate("abcdef", 10) == "abcdef"
    assert truncate("abcdef", 3) == "abc"
    assert len(truncate("x" * 9000, 8000)) == 8000


@pytest.mark.unit
class TestPageMetadata:
    def test_open_graph_preferred(self):
        html = """<html><head><title>Fallback title</title>
        <meta property="og:title" content="OG title">
        <meta property="og:description" content="OG description">
        <meta name="description" content="Plain description"></head></html>"""
        metadata = parse_page_metadata(html)
        assert metadata.title == "OG title"
        assert metadata.description == "OG description"

    def test_falls_back_to_title_and_meta_description(self):
        html = """<html><head><title>  Video
        title </title><meta name="description" content="Plain description"></head></html>"""
        metadata = parse_page_metadata(html)
        assert metadata.title == "Video title"
        assert metadata.description == "Plain description"

    def test_missing_metadata(self):
        metadata = parse_page_metadata("<html><body>nothing</body></html>")
        assert metadata.title is None
        assert metadata.description is None
