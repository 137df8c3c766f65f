# site_indexer/crawler/urls.py
"""
URL normalization, classification and scoping for the site crawler.

The canonical form is deliberately coarse: the whole URL is lower-cased and
trailing slashes are stripped, so ``http://x/a/`` and ``HTTP://X/A`` share one
frontier key. Scheme/host canonicalization and query ordering are not done.
"""
from __future__ import annotations

from enum import Enum
from typing import FrozenSet
from urllib.parse import urlsplit

TEL_SCHEME = "tel:"

#: static assets never worth fetching as pages
DENIED_EXTENSIONS: FrozenSet[str] = frozenset(
    {
        "css", "js", "ico", "svg",
        "woff", "woff2", "ttf", "eot", "otf",
        "mp3", "mp4", "avi", "mkv", "mov", "webm",
    }
)


class LinkKind(str, Enum):
    HTTP_LINK = "http_link"
    TEL_LINK = "tel_link"
    OTHER = "other"


def normalize(url: str) -> str:
    """Return the frontier key of *url*: lower-case, no trailing slashes."""
    return url.strip().lower().rstrip("/")


def classify(url: str) -> LinkKind:
    """
    Classify a raw link target.

    ``tel:`` links become synthetic phone pages; ``http(s)`` and relative
    links are fetchable; ``mailto:``, ``javascript:`` and other schemes are
    ignored.
    """
    lowered = url.strip().lower()
    if lowered.startswith(TEL_SCHEME):
        return LinkKind.TEL_LINK
    scheme = urlsplit(lowered).scheme
    if scheme in ("http", "https", ""):
        return LinkKind.HTTP_LINK
    return LinkKind.OTHER


def _extension(url: str) -> str:
    last = url.rsplit("/", 1)[-1]
    last = last.split("?", 1)[0]
    _, dot, ext = last.rpartition(".")
    return ext if dot else ""


def is_in_scope(url: str, site_root: str) -> bool:
    """
    True iff *url* lies under *site_root* by string prefix, carries no
    fragment marker and does not point at a denylisted static asset.
    """
    canonical = normalize(url)
    if not canonical.startswith(normalize(site_root)):
        return False
    if "#" in canonical:
        return False
    return _extension(canonical) not in DENIED_EXTENSIONS


def relative_path(url: str, site_root: str) -> str:
    """
    Site-relative path of *url*, computed on canonical forms.

    The root itself maps to ``"/"``. A URL outside the root (e.g. after an
    off-site redirect) falls back to its own path and query.
    """
    canonical = normalize(url)
    root = normalize(site_root)
    if canonical.startswith(root):
        rest = canonical[len(root):]
    else:
        parts = urlsplit(canonical)
        rest = parts.path + (f"?{parts.query}" if parts.query else "")
    rest = "/" + rest.lstrip("/")
    return rest


def phone_number(url: str) -> str:
    """Number part of a ``tel:`` link with whitespace removed."""
    return "".join(url.strip()[len(TEL_SCHEME):].split())


__all__ = [
    "LinkKind",
    "DENIED_EXTENSIONS",
    "normalize",
    "classify",
    "is_in_scope",
    "relative_path",
    "phone_number",
]
