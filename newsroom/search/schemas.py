"""Result records for global search and suggestions.

Store rows are decoded into these models as soon as they are fetched;
the same models are the API response schemas. Some field names are
camelCase because they are wire names.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel


class ArticleHit(BaseModel):
    """A published article matching a search query."""

    id: str
    title: str | None
    slug: str | None
    excerpt: str
    created_at: str | None
    updated_at: str | None
    category_name: str | None
    tag_codes: list[str] = []
    tag_names: list[str] = []


class CatalogHit(BaseModel):
    """A category or tag matching a search query."""

    id: int
    code: str
    name: str | None
    created_at: str | None


class ArticlePage(BaseModel):
    items: list[ArticleHit] = []
    page: int
    limit: int
    hasMore: bool = False  # noqa: N815
    total: int | None = None


class CatalogPage(BaseModel):
    items: list[CatalogHit] = []
    page: int
    limit: int
    hasMore: bool = False  # noqa: N815
    total: int | None = None


class SearchResults(BaseModel):
    articles: ArticlePage
    categories: CatalogPage
    tags: CatalogPage


class SearchResponse(BaseModel):
    """Envelope of ``GET /search``.

    ``total`` is only present on a type page when counts were requested.
    """

    query: str
    types: list[str]
    page: int
    limit: int
    sort: str = "default"
    results: SearchResults


class ArticleSuggestion(BaseModel):
    type: Literal["articles"] = "articles"
    id: str
    title: str | None
    slug: str | None
    highlight: dict[str, str | None]


class CatalogSuggestion(BaseModel):
    type: Literal["categories", "tags"]
    id: str
    code: str
    name: str | None
    highlight: dict[str, str | None]


class SuggestionMeta(BaseModel):
    tookMs: int  # noqa: N815
    totalCandidates: dict[str, int]  # noqa: N815


class SuggestionResponse(BaseModel):
    """Envelope of ``GET /search/suggestions``; ``meta`` only when requested."""

    query: str
    types: list[str]
    suggestions: list[ArticleSuggestion | CatalogSuggestion]
    meta: SuggestionMeta | None = None
