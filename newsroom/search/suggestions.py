"""Autocomplete suggestions across articles, categories and tags.

Within a type, candidates are ranked by a fixed tier:

0. primary field (title / name) starts with the term
1. secondary field (slug / code) starts with the term
2. primary field contains the term
3. secondary field contains the term

then newest first. Types are not ranked against each other: per-type
lists are concatenated in request order and cut to the overall limit.
"""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Any

from sqlalchemy import ColumnElement, Select, and_, case, or_, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from newsroom.constants import ALL_ENTITY_TYPES, ArticleStatus, EntityType
from newsroom.models import Article, ArticleTranslation, Category, Tag, localized_name
from newsroom.search.params import SuggestionParams
from newsroom.search.queries import ilike, infix_pattern, prefix_pattern
from newsroom.search.schemas import (
    ArticleSuggestion,
    CatalogSuggestion,
    SuggestionMeta,
    SuggestionResponse,
)
from newsroom.utils.text_utils import build_highlight

logger = logging.getLogger(__name__)

Suggestion = ArticleSuggestion | CatalogSuggestion


def relevance_tier(primary: Any, secondary: Any, term: str) -> ColumnElement[int]:
    """CASE expression ranking prefix matches above infix matches."""
    prefix = prefix_pattern(term)
    infix = infix_pattern(term)
    return case(
        (ilike(primary, prefix), 0),
        (ilike(secondary, prefix), 1),
        (ilike(primary, infix), 2),
        (ilike(secondary, infix), 3),
        else_=4,
    )


def build_article_statement(params: SuggestionParams) -> Select:
    infix = infix_pattern(params.q)
    title, slug = ArticleTranslation.title, ArticleTranslation.slug
    return (
        select(Article.id, title, slug, Article.created_at)
        .select_from(Article)
        .join(
            ArticleTranslation,
            and_(
                ArticleTranslation.article_id == Article.id,
                ArticleTranslation.language_code == params.lang.value,
            ),
        )
        .where(Article.status == ArticleStatus.PUBLISHED.value)
        .where(or_(ilike(title, infix), ilike(slug, infix)))
        .order_by(
            relevance_tier(title, slug, params.q),
            Article.created_at.desc(),
            Article.id.desc(),
        )
        .limit(params.per_type_limit)
    )


def build_catalog_statement(model: type[Category] | type[Tag], params: SuggestionParams) -> Select:
    infix = infix_pattern(params.q)
    name = localized_name(model, params.lang)
    return (
        select(model.id, model.code, name.label("name"), model.created_at)
        .where(or_(ilike(name, infix), ilike(model.code, infix)))
        .order_by(
            relevance_tier(name, model.code, params.q),
            model.created_at.desc(),
            model.id.desc(),
        )
        .limit(params.per_type_limit)
    )


class SuggestionEngine:
    """Low-latency autocomplete over the three entity types."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def _fetch_rows(self, stmt: Select):
        async with self._session_factory() as session:
            result = await session.execute(stmt)
            return result.fetchall()

    async def _articles(self, params: SuggestionParams) -> list[Suggestion]:
        rows = await self._fetch_rows(build_article_statement(params))
        return [
            ArticleSuggestion(
                type=EntityType.ARTICLES.value,
                id=str(row.id),
                title=row.title,
                slug=row.slug,
                highlight={
                    "title": build_highlight(row.title or "", params.q),
                    "slug": build_highlight(row.slug or "", params.q),
                },
            )
            for row in rows
        ]

    async def _catalog(
        self, model: type[Category] | type[Tag], entity_type: EntityType, params: SuggestionParams
    ) -> list[Suggestion]:
        rows = await self._fetch_rows(build_catalog_statement(model, params))
        return [
            CatalogSuggestion(
                type=entity_type.value,
                id=str(row.id),
                code=row.code,
                name=row.name,
                highlight={
                    "name": build_highlight(row.name or "", params.q),
                    "code": build_highlight(row.code or "", params.q),
                },
            )
            for row in rows
        ]

    def _fetch_for(self, entity_type: str, params: SuggestionParams):
        if entity_type == EntityType.ARTICLES.value:
            return self._articles(params)
        if entity_type == EntityType.CATEGORIES.value:
            return self._catalog(Category, EntityType.CATEGORIES, params)
        return self._catalog(Tag, EntityType.TAGS, params)

    async def suggest(self, params: SuggestionParams) -> SuggestionResponse:
        started = time.perf_counter()

        per_type = await asyncio.gather(*(self._fetch_for(t, params) for t in params.types))

        merged: list[Suggestion] = []
        for candidates in per_type:
            merged.extend(candidates)

        fields: dict[str, Any] = {
            "query": params.q,
            "types": params.types,
            "suggestions": merged[: params.limit],
        }
        if params.include_meta:
            counts = dict.fromkeys(ALL_ENTITY_TYPES, 0)
            for entity_type, candidates in zip(params.types, per_type, strict=True):
                counts[entity_type] = len(candidates)
            fields["meta"] = SuggestionMeta(
                tookMs=int((time.perf_counter() - started) * 1000),
                totalCandidates=counts,
            )

        logger.debug("Suggestions q=%r types=%s -> %d", params.q, params.types, len(fields["suggestions"]))
        return SuggestionResponse(**fields)
