"""HTML to text — comment bodies and readable article blocks."""

from __future__ import annotations

import html
import re
from html.parser import HTMLParser

from hnterm.models import Article, ArticleElement

_IMG_RE = re.compile(r"""<img\s+[^>]*alt=["']([^"']*)["'][^>]*>""", re.IGNORECASE)
_BLOCK_RE = re.compile(r"<\s*(?:p|br|/p|div|/div|li|pre|/pre)\b[^>]*>", re.IGNORECASE)


def extract_text_from_html(text: str | None) -> str:
    """Strip tags from an HTML fragment, keeping paragraph breaks and image alt text."""
    if not text:
        return ""
    text = _IMG_RE.sub(r"[Image: \1]", text)
    text = _BLOCK_RE.sub("\n", text)
    text = re.sub(r"<[^>]+>", "", text)
    text = html.unescape(text)
    lines = [re.sub(r"[ \t]+", " ", line).strip() for line in text.split("\n")]
    paragraphs = [line for line in lines if line]
    return "\n\n".join(paragraphs)


_SKIP_TAGS = {"script", "style", "nav", "header", "footer", "aside", "noscript", "form"}
_BLOCK_KINDS = {
    "h1": "heading",
    "h2": "heading",
    "h3": "heading",
    "h4": "heading",
    "h5": "heading",
    "h6": "heading",
    "p": "paragraph",
    "pre": "code",
    "blockquote": "quote",
    "li": "list_item",
}


class _ArticleParser(HTMLParser):
    def __init__(self) -> None:
        super().__init__(convert_charrefs=True)
        self.elements: list[ArticleElement] = []
        self.title = ""
        self._skip_depth = 0
        self._in_title = False
        self._kind: str | None = None
        self._tag: str | None = None
        self._buf: list[str] = []

    def handle_starttag(self, tag, attrs):
        if tag in _SKIP_TAGS:
            self._skip_depth += 1
            return
        if self._skip_depth:
            return
        if tag == "title":
            self._in_title = True
        elif tag == "img":
            alt = dict(attrs).get("alt")
            if alt and self._kind is not None:
                self._buf.append(f"[Image: {alt}]")
            elif alt:
                self.elements.append(ArticleElement("image", f"[Image: {alt}]"))
        elif tag == "br" and self._kind is not None:
            self._buf.append("\n")
        elif tag in _BLOCK_KINDS and self._kind is None:
            self._kind = _BLOCK_KINDS[tag]
            self._tag = tag
            self._buf = []

    def handle_endtag(self, tag):
        if tag in _SKIP_TAGS:
            self._skip_depth = max(0, self._skip_depth - 1)
            return
        if tag == "title":
            self._in_title = False
        elif tag == self._tag:
            self._flush()

    def handle_data(self, data):
        if self._skip_depth:
            return
        if self._in_title:
            self.title += data
        elif self._kind is not None:
            self._buf.append(data)

    def _flush(self) -> None:
        if self._kind is None:
            return
        raw = "".join(self._buf)
        if self._kind == "code":
            text = raw.strip("\n")
        else:
            text = re.sub(r"\s+", " ", raw).strip()
        if text:
            self.elements.append(ArticleElement(self._kind, text))
        self._kind = None
        self._tag = None
        self._buf = []


def _parse(source: str) -> _ArticleParser:
    parser = _ArticleParser()
    parser.feed(source)
    parser.close()
    parser._flush()
    return parser


def parse_article(source: str) -> Article:
    """Split a page into readable blocks, dropping page chrome.

    The article is titled by <title>, else its first heading, else "Article".
    """
    parser = _parse(source)
    title = re.sub(r"\s+", " ", parser.title).strip()
    if not title:
        title = next(
            (el.text for el in parser.elements if el.kind == "heading"), "Article"
        )
    return Article(title=title, elements=parser.elements)
