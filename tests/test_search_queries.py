"""Tests for the per-type search queries and the global search fan-out.

Statements are compiled for PostgreSQL and inspected; rows come from a
fake session factory, so no database is required.
"""

from __future__ import annotations

from datetime import UTC, datetime

import pytest

from newsroom.constants import EntityType, Language
from newsroom.models import Category, Tag
from newsroom.search.engine import GlobalSearchEngine
from newsroom.search.params import SearchParams
from newsroom.search.queries import (
    ArticleSearcher,
    CatalogSearcher,
    escape_like,
    infix_pattern,
    prefix_pattern,
)
from tests.conftest import FakeResult, compile_sql, make_session_factory, row

ALL_TYPES = ["articles", "categories", "tags"]
CREATED = datetime(2025, 1, 1, 9, 30, tzinfo=UTC)

ARTICLE_PAGE_SQL = "SELECT articles.id, article_translations.title"
ARTICLE_COUNT_SQL = "SELECT count(DISTINCT articles.id)"
ARTICLE_TAGS_SQL = "SELECT article_tags.article_id, tags.code"


def _params(**overrides) -> SearchParams:
    fields = {"q": "SearchDemo", "types": ALL_TYPES}
    fields.update(overrides)
    return SearchParams(**fields)


def _article_row(article_id: int, title: str = "Article", **overrides):
    fields = {
        "id": article_id,
        "title": title,
        "slug": title.lower().replace(" ", "-"),
        "excerpt": None,
        "body": f"<p>Body of {title}</p>",
        "created_at": CREATED,
        "updated_at": CREATED,
        "category_name": "News",
    }
    fields.update(overrides)
    return row(**fields)


def _router(routes: dict[str, object]):
    """Dispatch compiled SQL by its leading text."""

    def handler(sql: str, params: dict) -> FakeResult:
        for prefix, outcome in routes.items():
            if sql.startswith(prefix):
                if isinstance(outcome, Exception):
                    raise outcome
                return outcome
        return FakeResult([])

    return handler


# ---------------------------------------------------------------------------
# LIKE patterns
# ---------------------------------------------------------------------------


class TestPatterns:
    def test_infix_is_lowercased(self):
        assert infix_pattern("Health") == "%health%"

    def test_prefix_is_lowercased(self):
        assert prefix_pattern("Health") == "health%"

    def test_wildcards_escaped(self):
        assert escape_like("50%_off") == "50\\%\\_off"
        assert infix_pattern("a\\b") == "%a\\\\b%"


# ---------------------------------------------------------------------------
# Statement shape
# ---------------------------------------------------------------------------


class TestArticleStatements:
    def test_page_statement_filters_published(self):
        sql, params = compile_sql(ArticleSearcher(None).build_page_statement(_params()))
        assert "articles.status = " in sql
        assert "published" in params.values()

    def test_page_statement_matches_all_text_columns(self):
        sql, params = compile_sql(ArticleSearcher(None).build_page_statement(_params()))
        for column in (
            "lower(article_translations.title)",
            "lower(article_translations.excerpt)",
            "lower(article_translations.body)",
            "lower(categories.name_en)",
            "lower(tags.name_en)",
            "lower(tags.code)",
        ):
            assert column in sql
        assert "EXISTS" in sql
        assert "%searchdemo%" in params.values()

    def test_page_statement_order(self):
        sql, _ = compile_sql(ArticleSearcher(None).build_page_statement(_params()))
        assert sql.endswith("ORDER BY articles.created_at DESC, articles.id DESC")

    def test_bengali_selects_bengali_columns(self):
        sql, params = compile_sql(ArticleSearcher(None).build_page_statement(_params(lang=Language.BN)))
        assert "categories.name_bn" in sql
        assert "tags.name_bn" in sql
        assert "name_en" not in sql
        assert "bn" in params.values()

    def test_count_statement_shares_predicates(self):
        searcher = ArticleSearcher(None)
        page_sql, _ = compile_sql(searcher.build_page_statement(_params()))
        count_sql, _ = compile_sql(searcher.build_count_statement(_params()))
        assert count_sql.startswith(ARTICLE_COUNT_SQL)
        where = page_sql[page_sql.index("WHERE") : page_sql.index("ORDER BY")].strip()
        assert count_sql.endswith(where)

    def test_tags_statement_ordered_by_code(self):
        sql, params = compile_sql(ArticleSearcher.build_tags_statement([1, 2], Language.EN))
        assert sql.startswith(ARTICLE_TAGS_SQL)
        assert sql.endswith("ORDER BY article_tags.article_id, tags.code")


class TestCatalogStatements:
    def test_category_order_by_localized_name(self):
        searcher = CatalogSearcher(None, Category, EntityType.CATEGORIES)
        sql, _ = compile_sql(searcher.build_page_statement(_params()))
        assert sql.endswith("ORDER BY categories.name_en ASC, categories.id ASC")

    def test_tag_bengali_name(self):
        searcher = CatalogSearcher(None, Tag, EntityType.TAGS)
        sql, _ = compile_sql(searcher.build_page_statement(_params(lang=Language.BN)))
        assert "lower(tags.name_bn)" in sql
        assert "lower(tags.code)" in sql
        assert sql.endswith("ORDER BY tags.name_bn ASC, tags.id ASC")

    def test_count_statement(self):
        searcher = CatalogSearcher(None, Tag, EntityType.TAGS)
        sql, _ = compile_sql(searcher.build_count_statement(_params()))
        assert sql.startswith("SELECT count(DISTINCT tags.id)")


# ---------------------------------------------------------------------------
# Pagination
# ---------------------------------------------------------------------------


class TestArticlePagination:
    @pytest.mark.asyncio
    async def test_overfetch_sets_has_more_and_trims(self):
        factory = make_session_factory(
            _router({ARTICLE_PAGE_SQL: FakeResult([_article_row(i) for i in (3, 2, 1)])})
        )
        page = await ArticleSearcher(factory).search(_params(limit=2))

        assert [item.id for item in page.items] == ["3", "2"]
        assert page.hasMore is True
        assert page.total is None
        assert "total" not in page.model_fields_set
        assert not any(sql.startswith(ARTICLE_COUNT_SQL) for sql, _ in factory.calls)
        page_params = factory.calls[0][1]
        assert 3 in page_params.values()

    @pytest.mark.asyncio
    async def test_overfetch_without_extra_row(self):
        factory = make_session_factory(_router({ARTICLE_PAGE_SQL: FakeResult([_article_row(1)])}))
        page = await ArticleSearcher(factory).search(_params(limit=2))
        assert len(page.items) == 1
        assert page.hasMore is False

    @pytest.mark.asyncio
    async def test_counts_give_total_and_has_more(self):
        factory = make_session_factory(
            _router(
                {
                    ARTICLE_PAGE_SQL: FakeResult([_article_row(4), _article_row(3)]),
                    ARTICLE_COUNT_SQL: FakeResult(scalar=5),
                }
            )
        )
        page = await ArticleSearcher(factory).search(_params(limit=2, page=2, include_counts=True))

        assert page.total == 5
        assert page.hasMore is True  # 2 + 2 < 5
        assert page.page == 2
        assert page.limit == 2

    @pytest.mark.asyncio
    async def test_counts_last_page(self):
        factory = make_session_factory(
            _router(
                {
                    ARTICLE_PAGE_SQL: FakeResult([_article_row(1)]),
                    ARTICLE_COUNT_SQL: FakeResult(scalar=5),
                }
            )
        )
        page = await ArticleSearcher(factory).search(_params(limit=2, page=3, include_counts=True))
        assert page.total == 5
        assert page.hasMore is False  # 4 + 1 == 5

    @pytest.mark.asyncio
    async def test_each_query_borrows_its_own_session(self):
        factory = make_session_factory(
            _router(
                {
                    ARTICLE_PAGE_SQL: FakeResult([_article_row(1)]),
                    ARTICLE_COUNT_SQL: FakeResult(scalar=1),
                }
            )
        )
        await ArticleSearcher(factory).search(_params(include_counts=True))
        assert factory.opened == 3  # page, count, tags


class TestArticleDecoding:
    @pytest.mark.asyncio
    async def test_tags_aggregated_per_article(self):
        factory = make_session_factory(
            _router(
                {
                    ARTICLE_PAGE_SQL: FakeResult([_article_row(2, "Second"), _article_row(1, "First")]),
                    ARTICLE_TAGS_SQL: FakeResult(
                        [
                            row(article_id=1, code="alpha", name="Alpha"),
                            row(article_id=1, code="searchdemo", name="Search Demo"),
                            row(article_id=1, code="searchdemo", name="Search Demo"),
                        ]
                    ),
                }
            )
        )
        page = await ArticleSearcher(factory).search(_params())

        second, first = page.items
        assert second.tag_codes == []
        assert second.tag_names == []
        assert first.tag_codes == ["alpha", "searchdemo"]
        assert first.tag_names == ["Alpha", "Search Demo"]

    @pytest.mark.asyncio
    async def test_item_fields(self):
        factory = make_session_factory(
            _router(
                {
                    ARTICLE_PAGE_SQL: FakeResult(
                        [_article_row(7, "Budget Talk", excerpt="  Stored excerpt ", category_name=None)]
                    )
                }
            )
        )
        page = await ArticleSearcher(factory).search(_params())

        item = page.items[0]
        assert item.id == "7"
        assert item.title == "Budget Talk"
        assert item.slug == "budget-talk"
        assert item.excerpt == "Stored excerpt"
        assert item.created_at == "2025-01-01T09:30:00+00:00"
        assert item.category_name is None

    @pytest.mark.asyncio
    async def test_excerpt_derived_from_body(self):
        factory = make_session_factory(_router({ARTICLE_PAGE_SQL: FakeResult([_article_row(1, "Plain")])}))
        page = await ArticleSearcher(factory).search(_params())
        assert page.items[0].excerpt == "Body of Plain"

    @pytest.mark.asyncio
    async def test_no_rows_skips_tag_query(self):
        factory = make_session_factory(_router({}))
        page = await ArticleSearcher(factory).search(_params())
        assert page.items == []
        assert len(factory.calls) == 1


class TestCatalogSearch:
    @pytest.mark.asyncio
    async def test_items_and_overfetch(self):
        rows = [
            row(id=1, code="health", name="Health", created_at=CREATED),
            row(id=2, code="healthcare", name="Healthcare", created_at=None),
        ]
        factory = make_session_factory(_router({"SELECT categories.id": FakeResult(rows)}))
        searcher = CatalogSearcher(factory, Category, EntityType.CATEGORIES)

        page = await searcher.search(_params(q="health", limit=1))

        assert page.hasMore is True
        assert len(page.items) == 1
        assert page.items[0].id == 1
        assert page.items[0].code == "health"
        assert page.items[0].created_at == "2025-01-01T09:30:00+00:00"


# ---------------------------------------------------------------------------
# Fan-out
# ---------------------------------------------------------------------------


class TestGlobalSearchEngine:
    @pytest.mark.asyncio
    async def test_only_requested_types_are_queried(self):
        factory = make_session_factory(
            _router({"SELECT tags.id": FakeResult([row(id=3, code="alpha", name="Alpha", created_at=CREATED)])})
        )
        response = await GlobalSearchEngine(factory).search(_params(types=["tags"]))

        assert all(sql.startswith("SELECT tags.id") for sql, _ in factory.calls)
        assert response.results.tags.items[0].code == "alpha"
        assert response.results.articles.items == []
        assert response.results.articles.hasMore is False
        assert response.results.categories.items == []
        assert response.types == ["tags"]
        assert response.sort == "default"

    @pytest.mark.asyncio
    async def test_any_failure_fails_the_search(self):
        factory = make_session_factory(
            _router(
                {
                    "SELECT tags.id": RuntimeError("connection reset"),
                    ARTICLE_PAGE_SQL: FakeResult([_article_row(1)]),
                }
            )
        )
        with pytest.raises(RuntimeError, match="connection reset"):
            await GlobalSearchEngine(factory).search(_params())

    @pytest.mark.asyncio
    async def test_identical_calls_give_identical_results(self):
        factory = make_session_factory(
            _router(
                {
                    ARTICLE_PAGE_SQL: FakeResult([_article_row(1)]),
                    "SELECT categories.id": FakeResult([row(id=1, code="news", name="News", created_at=CREATED)]),
                }
            )
        )
        engine = GlobalSearchEngine(factory)
        first = await engine.search(_params())
        second = await engine.search(_params())
        assert first.model_dump_json() == second.model_dump_json()
