"""Plain-text helpers shared by search results and suggestions."""

from __future__ import annotations

import re

from newsroom.constants import EXCERPT_MAX_LENGTH, HIGHLIGHT_CLOSE, HIGHLIGHT_OPEN

_TAG_RE = re.compile(r"<[^>]*>")
_WHITESPACE_RE = re.compile(r"\s+")


def strip_html(text: str) -> str:
    """Drop anything that looks like a markup tag and collapse whitespace."""
    return _WHITESPACE_RE.sub(" ", _TAG_RE.sub("", text)).strip()


def derive_excerpt(excerpt: str | None, body: str | None, limit: int = EXCERPT_MAX_LENGTH) -> str:
    """Return the stored excerpt, or the first ``limit`` plain-text characters of the body.

    The cut is a hard character cut; no word-boundary handling.
    """
    if excerpt and excerpt.strip():
        return excerpt.strip()
    if not body:
        return ""
    return strip_html(body)[:limit]


def build_highlight(text: str | None, query: str | None) -> str | None:
    """Wrap the first case-insensitive occurrence of ``query`` in highlight markers.

    >>> build_highlight("React State", "rea")
    '<c>Rea</c>ct State'

    Returns ``text`` unchanged when there is no occurrence.
    """
    if not text or not query:
        return text
    match = re.search(re.escape(query), text, flags=re.IGNORECASE)
    if match is None:
        return text
    start, end = match.span()
    return f"{text[:start]}{HIGHLIGHT_OPEN}{text[start:end]}{HIGHLIGHT_CLOSE}{text[end:]}"
