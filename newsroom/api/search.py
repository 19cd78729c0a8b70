"""Search API endpoints.

Provides:
- ``GET /search`` -- Search articles, categories and tags.
- ``GET /search/suggestions`` -- Autocomplete suggestions.

Both endpoints are public and read-only. Query parameters arrive as raw
strings and are validated by :mod:`newsroom.search.params` so that
malformed input maps to 400 and unknown ``types`` entries to 422.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Query

from newsroom.database import async_session_factory
from newsroom.errors import ApiError
from newsroom.search.engine import GlobalSearchEngine
from newsroom.search.params import parse_search_params, parse_suggestion_params
from newsroom.search.schemas import SearchResponse, SuggestionResponse
from newsroom.search.suggestions import SuggestionEngine

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/search", tags=["search"])


# ---------------------------------------------------------------------------
# Engine factory helpers (extracted for easy mocking in tests)
# ---------------------------------------------------------------------------


def _build_search_engine() -> GlobalSearchEngine:
    return GlobalSearchEngine(session_factory=async_session_factory)


def _build_suggestion_engine() -> SuggestionEngine:
    return SuggestionEngine(session_factory=async_session_factory)


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------


@router.get("", response_model=SearchResponse, response_model_exclude_unset=True)
async def search(
    q: str | None = Query(None, description="Search text (required, max 100 chars)"),  # noqa: B008
    types: str | None = Query(None, description="CSV subset of articles,categories,tags"),  # noqa: B008
    lang: str | None = Query(None, description="en or bn (default en)"),  # noqa: B008
    limit: str | None = Query(None, description="Page size, 1-100 (default 10)"),  # noqa: B008
    page: str | None = Query(None, description="1-based page number (default 1)"),  # noqa: B008
    include_counts: str | None = Query(  # noqa: B008
        None, alias="includeCounts", description="Return exact totals per type"
    ),
) -> SearchResponse:
    """Search published articles, categories and tags by substring.

    Returns one page per requested type. ``total`` is present only when
    ``includeCounts`` is set; otherwise ``hasMore`` comes from fetching
    one extra row.
    """
    params = parse_search_params(
        q=q,
        types=types,
        lang=lang,
        limit=limit,
        page=page,
        include_counts=include_counts,
    )
    logger.info(
        "Search request: q=%r, types=%s, lang=%s, limit=%d, page=%d, counts=%s",
        params.q,
        ",".join(params.types),
        params.lang.value,
        params.limit,
        params.page,
        params.include_counts,
    )

    engine = _build_search_engine()
    try:
        return await engine.search(params)
    except Exception:
        logger.exception("Global search failed: q=%r", params.q)
        raise ApiError() from None


@router.get("/suggestions", response_model=SuggestionResponse, response_model_exclude_unset=True)
async def search_suggestions(
    q: str | None = Query(None, description="Search prefix (required, 1-64 chars)"),  # noqa: B008
    types: str | None = Query(None, description="CSV subset of articles,categories,tags"),  # noqa: B008
    lang: str | None = Query(None, description="en or bn (default en)"),  # noqa: B008
    limit: str | None = Query(None, description="Overall cap, 1-20 (default 10)"),  # noqa: B008
    per_type_limit: str | None = Query(  # noqa: B008
        None, alias="perTypeLimit", description="Per-type cap, 1-10 (default 5)"
    ),
    include_meta: str | None = Query(  # noqa: B008
        None, alias="includeMeta", description="Attach timing and candidate counts"
    ),
) -> SuggestionResponse:
    """Get autocomplete suggestions with ``<c>``-highlighted matches."""
    params = parse_suggestion_params(
        q=q,
        types=types,
        lang=lang,
        limit=limit,
        per_type_limit=per_type_limit,
        include_meta=include_meta,
    )

    engine = _build_suggestion_engine()
    try:
        return await engine.suggest(params)
    except Exception:
        logger.exception("Suggestions failed: q=%r", params.q)
        raise ApiError() from None
