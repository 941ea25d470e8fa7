"""Turn fetched page markup into readable plain text (or Markdown)."""
import os
import re
from html.parser import HTMLParser

import html2text

# ASCII whitespace plus no-break space and zero-width space
BLANK_CHARS = " \t\n\r\f\v\u00a0\u200b"

_LINE_BREAK = re.compile(r"\r\n|\r|\n")


class HTMLToText(HTMLParser):
    """Collect the text nodes of a document in order, one line per block."""

    BLOCK_TAGS = {
        "p", "div", "h1", "h2", "h3", "h4", "h5", "h6",
        "li", "tr", "blockquote", "pre", "section", "article",
        "header", "footer", "dd", "dt", "figcaption", "table",
        "ul", "ol", "dl", "nav", "aside", "main", "form", "hr",
        "title", "td", "th",
    }
    SKIP_TAGS = {"script", "style", "noscript", "template"}

    def __init__(self):
        super().__init__(convert_charrefs=True)
        self.result = []
        self.skip_depth = 0

    def handle_starttag(self, tag, attrs):
        if tag in self.SKIP_TAGS:
            self.skip_depth += 1
            return
        if self.skip_depth:
            return

        if tag == "br" or tag in self.BLOCK_TAGS:
            self.result.append("\n")

    def handle_endtag(self, tag):
        if tag in self.SKIP_TAGS:
            self.skip_depth = max(0, self.skip_depth - 1)
            return
        if self.skip_depth:
            return

        if tag in self.BLOCK_TAGS:
            self.result.append("\n")

    def handle_startendtag(self, tag, attrs):
        # <br/> and friends are a single break, not an open/close pair
        self.handle_starttag(tag, attrs)

    def handle_data(self, data):
        if self.skip_depth:
            return
        self.result.append(data)

    def get_text(self):
        return "".join(self.result)


def collapse_blank_lines(text: str, newline: str = os.linesep, strip_indent: bool = True) -> str:
    """
    Trim every line and squeeze each run of blank lines down to one.

    Leading and trailing blank lines are dropped. With strip_indent=False only
    trailing blanks are removed from each line, which keeps Markdown code
    blocks and nested lists intact.
    """
    output = []
    pending_blank = False
    for line in _LINE_BREAK.split(text):
        line = line.strip(BLANK_CHARS) if strip_indent else line.rstrip(BLANK_CHARS)
        if not line.strip(BLANK_CHARS):
            pending_blank = bool(output)
            continue
        if pending_blank:
            output.append("")
            pending_blank = False
        output.append(line)
    return newline.join(output)


def html_to_text(html: str) -> str:
    """Strip tags and decode entities, keeping only the text nodes."""
    parser = HTMLToText()
    parser.feed(html)
    parser.close()
    return parser.get_text()


def html_to_markdown(html: str) -> str:
    h = html2text.HTML2Text()
    h.ignore_links = False
    h.ignore_images = True
    h.body_width = 0  # no hard wrapping
    return h.handle(html)


def normalize(html: str, markdown: bool = False, newline: str = os.linesep) -> str:
    """
    Convert raw page markup into whitespace-normalized text.

    Args:
        html: Page markup as returned by the browser
        markdown: Render through html2text instead of plain text extraction
        newline: Line terminator for the result

    Returns:
        Entity-decoded text with blank-line runs collapsed
    """
    if markdown:
        return collapse_blank_lines(html_to_markdown(html), newline=newline, strip_indent=False)
    return collapse_blank_lines(html_to_text(html), newline=newline)
