"""Utility helpers for the Bhojpuri Raas add-on."""

from __future__ import annotations

import re
from urllib.parse import urlparse


CHARACTER_REPLACEMENTS: dict[str, str] = {
    "@": "a",
    "0": "o",
}

_REPLACEABLE_RE = re.compile("[" + re.escape("".join(CHARACTER_REPLACEMENTS)) + "]")
POSTER_SIZE_RE = re.compile(r"_(\d+)\.jpg$")
CANONICAL_POSTER_SUFFIX = "_3.jpg"
FIRST_PAGE_SUFFIX = "/1.html"


def normalize_text(text: str, for_search: bool = False) -> str:
    """Undo the site's character substitutions, lowercasing for search."""

    normalized = _REPLACEABLE_RE.sub(
        lambda match: CHARACTER_REPLACEMENTS[match.group(0)], text
    )
    return normalized.lower() if for_search else normalized


def matches_search(title: str, query: str) -> bool:
    """Return ``True`` when the normalized query occurs in the normalized title."""

    return normalize_text(query, for_search=True) in normalize_text(
        title, for_search=True
    )


def normalize_poster_url(url: str) -> str:
    """Request the canonical poster resolution variant."""

    return POSTER_SIZE_RE.sub(CANONICAL_POSTER_SUFFIX, url)


def listing_page_url(listing_url: str, page: int) -> str:
    """Return the URL of ``page`` for a catalog listing."""

    base = listing_url.removesuffix(FIRST_PAGE_SUFFIX)
    return f"{base}/{page}.html"


def item_id_from_href(href: str) -> str | None:
    """Extract the item identifier from a detail page link.

    The identifier is the second-to-last path segment, e.g.
    ``/movies/4821/some-title.html`` yields ``4821``.
    """

    segments = urlparse(href).path.split("/")
    if len(segments) < 2:
        return None
    return segments[-2].strip() or None


def section_from_href(href: str) -> str | None:
    """Return the first path segment of a site link."""

    segments = [segment for segment in urlparse(href).path.split("/") if segment]
    if not segments:
        return None
    return segments[0]


def last_path_segment(url: str) -> str:
    return urlparse(url).path.rstrip("/").split("/")[-1] if url else ""
