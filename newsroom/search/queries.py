"""Per-type search queries over articles, categories and tags.

Each searcher builds its statements with SQLAlchemy Core, borrows one
session per statement from the session factory, and decodes rows into
:mod:`newsroom.search.schemas` records right away.

Matching is a case-insensitive substring test (``lower(col) LIKE
'%term%'``). ``%``, ``_`` and ``\\`` in the user's term are escaped so they
match literally.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Sequence
from typing import Any

from sqlalchemy import ColumnElement, Select, and_, distinct, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from newsroom.constants import ArticleStatus, EntityType, Language
from newsroom.models import Article, ArticleTranslation, Category, Tag, article_tags, localized_name
from newsroom.search.params import SearchParams
from newsroom.search.schemas import ArticleHit, ArticlePage, CatalogHit, CatalogPage
from newsroom.utils.datetime_utils import to_iso
from newsroom.utils.text_utils import derive_excerpt

logger = logging.getLogger(__name__)

LIKE_ESCAPE = "\\"


def escape_like(term: str) -> str:
    """Escape LIKE wildcards so ``term`` matches literally."""
    return (
        term.replace(LIKE_ESCAPE, LIKE_ESCAPE * 2)
        .replace("%", LIKE_ESCAPE + "%")
        .replace("_", LIKE_ESCAPE + "_")
    )


def infix_pattern(term: str) -> str:
    return f"%{escape_like(term.lower())}%"


def prefix_pattern(term: str) -> str:
    return f"{escape_like(term.lower())}%"


def ilike(column: Any, pattern: str) -> ColumnElement[bool]:
    """``lower(column) LIKE pattern`` with the shared escape character."""
    return func.lower(column).like(pattern, escape=LIKE_ESCAPE)


class _TypeSearcher:
    """Shared plumbing: borrowed sessions and the two pagination modes."""

    entity_type: EntityType

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def _fetch_rows(self, stmt: Select) -> Sequence[Any]:
        async with self._session_factory() as session:
            result = await session.execute(stmt)
            return result.fetchall()

    async def _fetch_count(self, stmt: Select) -> int:
        async with self._session_factory() as session:
            result = await session.execute(stmt)
            return int(result.scalar() or 0)

    async def _paginate(
        self,
        page_stmt: Select,
        count_stmt: Select,
        params: SearchParams,
    ) -> tuple[Sequence[Any], bool, int | None]:
        """Fetch one page of rows.

        Without counts, one extra row is fetched and its presence sets
        ``has_more``; ``total`` stays None. With counts, the page and the
        count query run concurrently and ``has_more`` is derived from the
        total.

        Returns:
            ``(rows, has_more, total)`` with at most ``params.limit`` rows.
        """
        if not params.include_counts:
            rows = await self._fetch_rows(page_stmt.limit(params.limit + 1).offset(params.offset))
            has_more = len(rows) > params.limit
            return rows[: params.limit], has_more, None

        rows, total = await asyncio.gather(
            self._fetch_rows(page_stmt.limit(params.limit).offset(params.offset)),
            self._fetch_count(count_stmt),
        )
        return rows, params.offset + len(rows) < total, total


class ArticleSearcher(_TypeSearcher):
    """Published articles whose text, category or any tag contains the term."""

    entity_type = EntityType.ARTICLES

    def _filtered(self, stmt: Select, params: SearchParams) -> Select:
        pattern = infix_pattern(params.q)
        category_name = localized_name(Category, params.lang)
        tag_name = localized_name(Tag, params.lang)

        tag_match = (
            select(article_tags.c.article_id)
            .join(Tag, Tag.id == article_tags.c.tag_id)
            .where(article_tags.c.article_id == Article.id)
            .where(or_(ilike(tag_name, pattern), ilike(Tag.code, pattern)))
            .exists()
        )

        return (
            stmt.select_from(Article)
            .join(
                ArticleTranslation,
                and_(
                    ArticleTranslation.article_id == Article.id,
                    ArticleTranslation.language_code == params.lang.value,
                ),
            )
            .outerjoin(Category, Category.id == Article.category_id)
            .where(Article.status == ArticleStatus.PUBLISHED.value)
            .where(
                or_(
                    ilike(ArticleTranslation.title, pattern),
                    ilike(ArticleTranslation.excerpt, pattern),
                    ilike(ArticleTranslation.body, pattern),
                    ilike(category_name, pattern),
                    tag_match,
                )
            )
        )

    def build_page_statement(self, params: SearchParams) -> Select:
        stmt = select(
            Article.id,
            ArticleTranslation.title,
            ArticleTranslation.slug,
            ArticleTranslation.excerpt,
            ArticleTranslation.body,
            Article.created_at,
            Article.updated_at,
            localized_name(Category, params.lang).label("category_name"),
        )
        return self._filtered(stmt, params).order_by(Article.created_at.desc(), Article.id.desc())

    def build_count_statement(self, params: SearchParams) -> Select:
        return self._filtered(select(func.count(distinct(Article.id))), params)

    @staticmethod
    def build_tags_statement(article_ids: Sequence[int], lang: Language) -> Select:
        return (
            select(article_tags.c.article_id, Tag.code, localized_name(Tag, lang).label("name"))
            .select_from(article_tags)
            .join(Tag, Tag.id == article_tags.c.tag_id)
            .where(article_tags.c.article_id.in_(article_ids))
            .order_by(article_tags.c.article_id, Tag.code)
        )

    async def _load_tags(
        self, article_ids: Sequence[int], lang: Language
    ) -> dict[int, tuple[list[str], list[str]]]:
        """Collect tag codes and localized names per article, ordered by code."""
        tags: dict[int, tuple[list[str], list[str]]] = {}
        if not article_ids:
            return tags
        for row in await self._fetch_rows(self.build_tags_statement(article_ids, lang)):
            codes, names = tags.setdefault(row.article_id, ([], []))
            if row.code in codes:
                continue
            codes.append(row.code)
            names.append(row.name or "")
        return tags

    async def search(self, params: SearchParams) -> ArticlePage:
        rows, has_more, total = await self._paginate(
            self.build_page_statement(params),
            self.build_count_statement(params),
            params,
        )
        tags = await self._load_tags([row.id for row in rows], params.lang)

        items = []
        for row in rows:
            tag_codes, tag_names = tags.get(row.id, ([], []))
            items.append(
                ArticleHit(
                    id=str(row.id),
                    title=row.title,
                    slug=row.slug,
                    excerpt=derive_excerpt(row.excerpt, row.body),
                    created_at=to_iso(row.created_at),
                    updated_at=to_iso(row.updated_at),
                    category_name=row.category_name or None,
                    tag_codes=tag_codes,
                    tag_names=tag_names,
                )
            )

        logger.debug("Article search q=%r page=%d -> %d items", params.q, params.page, len(items))
        return _page(ArticlePage, items, params, has_more, total)


class CatalogSearcher(_TypeSearcher):
    """Categories or tags whose localized name or code contains the term."""

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        model: type[Category] | type[Tag],
        entity_type: EntityType,
    ) -> None:
        super().__init__(session_factory)
        self._model = model
        self.entity_type = entity_type

    def _match(self, params: SearchParams) -> ColumnElement[bool]:
        pattern = infix_pattern(params.q)
        name = localized_name(self._model, params.lang)
        return or_(ilike(name, pattern), ilike(self._model.code, pattern))

    def build_page_statement(self, params: SearchParams) -> Select:
        name = localized_name(self._model, params.lang)
        return (
            select(self._model.id, self._model.code, name.label("name"), self._model.created_at)
            .where(self._match(params))
            .order_by(name.asc(), self._model.id.asc())
        )

    def build_count_statement(self, params: SearchParams) -> Select:
        return select(func.count(distinct(self._model.id))).where(self._match(params))

    async def search(self, params: SearchParams) -> CatalogPage:
        rows, has_more, total = await self._paginate(
            self.build_page_statement(params),
            self.build_count_statement(params),
            params,
        )
        items = [
            CatalogHit(id=int(row.id), code=row.code, name=row.name, created_at=to_iso(row.created_at))
            for row in rows
        ]
        logger.debug(
            "%s search q=%r page=%d -> %d items", self.entity_type.value, params.q, params.page, len(items)
        )
        return _page(CatalogPage, items, params, has_more, total)


def _page(page_cls, items, params: SearchParams, has_more: bool, total: int | None):
    """Build a type page; ``total`` is only set when it was counted."""
    fields: dict[str, Any] = {
        "items": items,
        "page": params.page,
        "limit": params.limit,
        "hasMore": has_more,
    }
    if total is not None:
        fields["total"] = total
    return page_cls(**fields)


def empty_page(page_cls, params: SearchParams):
    """Placeholder page for a type that was not requested."""
    return page_cls(items=[], page=params.page, limit=params.limit, hasMore=False)
