"""Global search across articles, categories and tags.

The per-type searches are independent, so they run concurrently and the
response is composed once all of them have finished. There is no partial
result: if one type fails, the whole search fails.
"""

from __future__ import annotations

import asyncio
import logging

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from newsroom.constants import EntityType
from newsroom.models import Category, Tag
from newsroom.search.params import SearchParams
from newsroom.search.queries import ArticleSearcher, CatalogSearcher, empty_page
from newsroom.search.schemas import ArticlePage, CatalogPage, SearchResponse, SearchResults

logger = logging.getLogger(__name__)


class GlobalSearchEngine:
    """Fan-out search over the three entity types.

    Args:
        session_factory: Source of short-lived sessions. Each per-type
            query borrows its own session, since a single session cannot
            run statements concurrently.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._searchers = {
            EntityType.ARTICLES.value: ArticleSearcher(session_factory),
            EntityType.CATEGORIES.value: CatalogSearcher(session_factory, Category, EntityType.CATEGORIES),
            EntityType.TAGS.value: CatalogSearcher(session_factory, Tag, EntityType.TAGS),
        }

    async def search(self, params: SearchParams) -> SearchResponse:
        requested = [t for t in self._searchers if t in params.types]

        pages = await asyncio.gather(*(self._searchers[t].search(params) for t in requested))
        by_type = dict(zip(requested, pages, strict=True))

        results = SearchResults(
            articles=_page_or_empty(by_type, EntityType.ARTICLES, ArticlePage, params),
            categories=_page_or_empty(by_type, EntityType.CATEGORIES, CatalogPage, params),
            tags=_page_or_empty(by_type, EntityType.TAGS, CatalogPage, params),
        )
        return SearchResponse(
            query=params.q,
            types=params.types,
            page=params.page,
            limit=params.limit,
            sort="default",
            results=results,
        )


def _page_or_empty(by_type: dict, entity_type: EntityType, page_cls, params: SearchParams):
    page = by_type.get(entity_type.value)
    if page is None:
        return empty_page(page_cls, params)
    return page
