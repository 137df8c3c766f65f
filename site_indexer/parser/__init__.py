"""Parsing helpers for fetched documents."""
from site_indexer.parser.html_parser import ParsedPage, parse_html

__all__ = ["ParsedPage", "parse_html"]
