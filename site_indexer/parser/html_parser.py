# File: site_indexer/parser/html_parser.py
"""HTML parsing for the site crawler.

:func:`parse_html` turns a fetched ``text/*`` body into a :class:`ParsedPage`:

* html:  the document re-rendered by BeautifulSoup, stored as page content.
* title: document <title> text or ``""`` if absent.
* links: absolute targets of every <a href="…">, deduplicated, in document
  order. ``tel:`` and other non-HTTP schemes are kept as-is; classifying them
  is the crawler's job.
"""
from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from urllib.parse import urljoin

from bs4 import BeautifulSoup
from bs4.element import Tag

__all__: Sequence[str] = ("ParsedPage", "parse_html")


@dataclass(slots=True)
class ParsedPage:
    """Parsed representation of one HTML document."""

    url: str
    html: str
    title: str = ""
    links: list[str] = field(default_factory=list)


def parse_html(markup: str, base_url: str) -> ParsedPage:
    """Parse *markup* fetched from *base_url* (the post-redirect URL)."""
    soup = BeautifulSoup(markup, "html.parser")

    title_tag = soup.find("title")
    title = title_tag.get_text(strip=True) if title_tag else ""

    seen: set[str] = set()
    links: list[str] = []
    for tag in soup.find_all("a", href=True):
        if not isinstance(tag, Tag):
            continue
        href = tag.get("href")
        if not isinstance(href, str):
            continue
        try:
            target = urljoin(base_url, href.strip())
        except ValueError:
            # malformed href, e.g. an unterminated IPv6 host
            continue
        if target not in seen:
            seen.add(target)
            links.append(target)

    return ParsedPage(url=base_url, html=str(soup), title=title, links=links)
