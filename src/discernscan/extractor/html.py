"""
HTML to plain text and page metadata.

Both helpers are synchronous and CPU-bound; the content extractor runs them in
the default executor.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Optional

from bs4 import BeautifulSoup
from selectolax.parser import HTMLParser

_WHITESPACE = re.compile(r"\s+")

REMOVE_TAGS = ("script", "style", "noscript", "template")


@dataclass(slots=True, frozen=True)
class PageMetadata:
    title: Optional[str]
    description: Optional[str]


def collapse_whitespace(text: str) -> str:
    return _WHITESPACE.sub(" ", text).strip()


def truncate(text: str, max_chars: int) -> str:
    """Cut ``text`` to at most ``max_chars`` characters."""
    if len(text) <= max_chars:
        return text
    return text[:max_chars].rstrip()


def strip_html(html: str) -> str:
    """Drop script and style blocks and all tags, returning collapsed text."""
    if not html.strip():
        return ""
    soup = BeautifulSoup(html, "html.parser")
    for tag in soup(REMOVE_TAGS):
        tag.decompose()
    return collapse_whitespace(soup.get_text(" "))


def _meta_content(tree: HTMLParser, selector: str) -> Optional[str]:
    node = tree.css_first(selector)
    if node is None:
        return None
    content = node.attributes.get("content")
    if content:
        content = collapse_whitespace(content)
    return content or None


def parse_page_metadata(html: str) -> PageMetadata:
    """Read title and description, preferring Open Graph tags."""
    if not html.strip():
        return PageMetadata(title=None, description=None)
    tree = HTMLParser(html)

    title = _meta_content(tree, 'meta[property="og:title"]')
    if title is None:
        node = tree.css_first("title")
        if node is not None:
            title = collapse_whitespace(node.text()) or None

    description = _meta_content(tree, 'meta[property="og:description"]') or _meta_content(
        tree, 'meta[name="description"]'
    )
    return PageMetadata(title=title, description=description)
