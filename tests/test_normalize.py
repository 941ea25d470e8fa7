"""Unit tests for HTML-to-text normalization."""
import os

from searchy.normalize import HTMLToText, collapse_blank_lines, normalize


# ---------------------------------------------------------------------------
# Tag stripping and entity decoding
# ---------------------------------------------------------------------------

def test_html_parser_keeps_text_in_order():
    p = HTMLToText()
    p.feed("<html><body><h1>Hello</h1><p>World</p></body></html>")
    p.close()
    text = p.get_text()
    assert text.index("Hello") < text.index("World")
    assert "<" not in text


def test_strips_script_and_style():
    text = normalize("<div>Visible<script>alert('x')</script> text<style>.x{}</style> here</div>", newline="\n")
    assert "alert" not in text
    assert ".x{}" not in text
    assert text == "Visible text here"


def test_decodes_entities():
    text = normalize("<p>Caf&eacute; &amp; bar &#8212; &quot;quoted&quot;</p>", newline="\n")
    assert text == 'Café & bar — "quoted"'


def test_block_elements_break_lines():
    assert normalize("<div>one</div><div>two</div>", newline="\n") == "one\n\ntwo"
    assert normalize("a<br>b<br/>c", newline="\n") == "a\nb\nc"


def test_title_and_body_are_separate_lines():
    text = normalize("<html><head><title>T</title></head><body><p>B</p></body></html>", newline="\n")
    assert text.split("\n") == ["T", "", "B"]


def test_default_line_terminator_is_platform():
    assert normalize("<p>a</p><p>b</p>") == "a" + os.linesep + os.linesep + "b"


# ---------------------------------------------------------------------------
# Blank line handling
# ---------------------------------------------------------------------------

def test_collapses_blank_runs_and_trims_edges():
    text = "\n\n a \n\n\n\t\nb\n\u00a0\n\u200b\nc\n\n"
    assert collapse_blank_lines(text, newline="\n") == "a\n\nb\n\nc"


def test_adjacent_lines_stay_adjacent():
    assert collapse_blank_lines("a\nb\r\nc", newline="\n") == "a\nb\nc"


def test_whitespace_only_input_is_empty():
    assert collapse_blank_lines(" \n\t\n\u00a0") == ""
    assert normalize("<div>  </div><p>\n</p>") == ""


def test_keep_indent_mode_only_strips_right():
    text = "    code()   \n\n\n  - item"
    assert collapse_blank_lines(text, newline="\n", strip_indent=False) == "    code()\n\n  - item"


def test_normalize_is_idempotent():
    samples = [
        "<html><body><h1>Title</h1>\n\n\n<p>First   paragraph</p><ul><li>one</li><li>two</li></ul></body></html>",
        "<p>Caf&eacute; &amp; bar</p>\n\n<div>\u00a0</div>tail",
        "plain text\n\n\n\nwith gaps\n",
        "<table><tr><td>a</td><td>b</td></tr></table><script>var x = 1;</script>",
    ]
    for html in samples:
        once = normalize(html)
        assert normalize(once) == once


# ---------------------------------------------------------------------------
# Markdown rendering
# ---------------------------------------------------------------------------

def test_markdown_mode_uses_html2text():
    text = normalize(
        "<h1>Title</h1><p>Hello <a href='https://x.org'>x</a></p>\n\n\n<p>Bye</p>",
        markdown=True,
        newline="\n",
    )
    assert "# Title" in text
    assert "[x](https://x.org)" in text
    assert "\n\n\n" not in text
    assert not text.startswith("\n") and not text.endswith("\n")
