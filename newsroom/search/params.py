"""Query-string parsing for the search and suggestion endpoints.

Both endpoints receive raw strings so that out-of-range numbers are
clamped instead of rejected, and so the error category (400 vs 422) is
decided here rather than by FastAPI's own validation.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from newsroom.constants import (
    ALL_ENTITY_TYPES,
    SEARCH_DEFAULT_LIMIT,
    SEARCH_MAX_LIMIT,
    SEARCH_QUERY_MAX_LENGTH,
    SUGGEST_DEFAULT_LIMIT,
    SUGGEST_DEFAULT_PER_TYPE_LIMIT,
    SUGGEST_MAX_LIMIT,
    SUGGEST_MAX_PER_TYPE_LIMIT,
    SUGGEST_QUERY_MAX_LENGTH,
    Language,
)
from newsroom.errors import SearchValidationError

TRUTHY_VALUES: frozenset[str] = frozenset({"1", "true", "yes", "on"})

_LEADING_INT_RE = re.compile(r"^\s*([+-]?)0*(\d+)")
_CONTROL_CHAR_RE = re.compile(r"[\x00-\x1f\x7f]")

# Larger numbers saturate here; every parsed value is clamped afterwards.
INT_SATURATION = 999_999_999


def parse_bool(value: str | bool | None, default: bool = False) -> bool:
    """Interpret a query-string flag.

    ``1``, ``true``, ``yes`` and ``on`` (any case) are true; any other
    string is false; a missing value gives ``default``.
    """
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        return value.strip().lower() in TRUTHY_VALUES
    return default


def parse_csv(value: str | None) -> list[str]:
    """Split a comma-separated value, dropping blank entries."""
    if not value:
        return []
    return [part.strip() for part in value.split(",") if part.strip()]


def parse_int(value: str | int | None, default: int) -> int:
    """Read the leading integer of ``value``.

    Missing, non-numeric and zero values fall back to ``default``.
    Magnitudes above :data:`INT_SATURATION` saturate to it, so an
    arbitrarily long digit run never reaches ``int()``.
    """
    if isinstance(value, int) and not isinstance(value, bool):
        parsed = value
    elif isinstance(value, str):
        match = _LEADING_INT_RE.match(value)
        if match is None:
            return default
        sign, digits = match.groups()
        if len(digits) > len(str(INT_SATURATION)):
            parsed = INT_SATURATION
        else:
            parsed = int(digits)
        if sign == "-":
            parsed = -parsed
    else:
        return default
    parsed = clamp(parsed, -INT_SATURATION, INT_SATURATION)
    return parsed or default


def check_query_text(query: str, message: str) -> None:
    """Reject control characters (NUL included), which the store cannot bind."""
    if _CONTROL_CHAR_RE.search(query):
        raise SearchValidationError(message)


def clamp(value: int, low: int, high: int) -> int:
    return max(low, min(high, value))


def parse_types(value: str | None, *, unique: bool = False) -> list[str]:
    """Validate the ``types`` filter against the closed set of entity types.

    Raises:
        SearchValidationError: 422 on the first unknown entry.
    """
    types = parse_csv(value)
    if unique:
        types = list(dict.fromkeys(types))
    if not types:
        return list(ALL_ENTITY_TYPES)
    for entity_type in types:
        if entity_type not in ALL_ENTITY_TYPES:
            raise SearchValidationError(f"Invalid type: {entity_type}", status_code=422)
    return types


@dataclass(frozen=True)
class SearchParams:
    """Normalized parameters of a global search request."""

    q: str
    types: list[str]
    lang: Language = Language.EN
    limit: int = SEARCH_DEFAULT_LIMIT
    page: int = 1
    include_counts: bool = False

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


@dataclass(frozen=True)
class SuggestionParams:
    """Normalized parameters of an autocomplete request."""

    q: str
    types: list[str]
    lang: Language = Language.EN
    limit: int = SUGGEST_DEFAULT_LIMIT
    per_type_limit: int = SUGGEST_DEFAULT_PER_TYPE_LIMIT
    include_meta: bool = False


def parse_search_params(
    q: str | None = None,
    types: str | None = None,
    lang: str | None = None,
    limit: str | int | None = None,
    page: str | int | None = None,
    include_counts: str | bool | None = None,
) -> SearchParams:
    """Validate raw ``GET /search`` parameters.

    Raises:
        SearchValidationError: 400 for a missing, oversized or control-character ``q``,
            422 for an unknown entry in ``types``.
    """
    query = q.strip() if isinstance(q, str) else ""
    if not query:
        raise SearchValidationError("q is required")
    if len(query) > SEARCH_QUERY_MAX_LENGTH:
        raise SearchValidationError(f"q is too long (max {SEARCH_QUERY_MAX_LENGTH} chars)")
    check_query_text(query, "q contains invalid characters")

    return SearchParams(
        q=query,
        types=parse_types(types),
        lang=Language.parse(lang),
        limit=clamp(parse_int(limit, SEARCH_DEFAULT_LIMIT), 1, SEARCH_MAX_LIMIT),
        page=max(1, parse_int(page, 1)),
        include_counts=parse_bool(include_counts, False),
    )


def parse_suggestion_params(
    q: str | None = None,
    types: str | None = None,
    lang: str | None = None,
    limit: str | int | None = None,
    per_type_limit: str | int | None = None,
    include_meta: str | bool | None = None,
) -> SuggestionParams:
    """Validate raw ``GET /search/suggestions`` parameters.

    Raises:
        SearchValidationError: 400 for a missing, oversized or control-character ``q``,
            422 for an unknown entry in ``types``.
    """
    query = q.strip() if isinstance(q, str) else ""
    if not query:
        raise SearchValidationError("Query parameter 'q' is required")
    if len(query) > SUGGEST_QUERY_MAX_LENGTH:
        raise SearchValidationError(
            f"Query parameter 'q' must be <= {SUGGEST_QUERY_MAX_LENGTH} characters"
        )
    check_query_text(query, "Query parameter 'q' contains invalid characters")

    return SuggestionParams(
        q=query,
        types=parse_types(types, unique=True),
        lang=Language.parse(lang),
        limit=clamp(parse_int(limit, SUGGEST_DEFAULT_LIMIT), 1, SUGGEST_MAX_LIMIT),
        per_type_limit=clamp(
            parse_int(per_type_limit, SUGGEST_DEFAULT_PER_TYPE_LIMIT), 1, SUGGEST_MAX_PER_TYPE_LIMIT
        ),
        include_meta=parse_bool(include_meta, False),
    )
