"""Public category and tag listings.

- ``GET /categories`` -- All categories, ordered by localized name.
- ``GET /tags`` -- All tags, ordered by localized name.
- ``GET /tags/{code}`` -- A single tag by its code.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from newsroom.constants import Language
from newsroom.database import get_db
from newsroom.errors import ApiError, NotFoundError
from newsroom.models import Category, Tag, localized_name

router = APIRouter(tags=["catalog"])


class CategoryResponse(BaseModel):
    id: int
    code: str
    name_en: str
    name_bn: str


class TagResponse(BaseModel):
    code: str
    name_en: str
    name_bn: str


@router.get("/categories", response_model=list[CategoryResponse])
async def list_categories(
    lang: str | None = Query(None, description="en or bn (default en)"),  # noqa: B008
    db: AsyncSession = Depends(get_db),  # noqa: B008
) -> list[CategoryResponse]:
    """List all categories sorted by their name in ``lang``."""
    language = Language.parse(lang)
    stmt = select(Category).order_by(localized_name(Category, language).asc(), Category.id.asc())
    result = await db.execute(stmt)
    return [
        CategoryResponse(id=c.id, code=c.code, name_en=c.name_en or "", name_bn=c.name_bn or "")
        for c in result.scalars().all()
    ]


@router.get("/tags", response_model=list[TagResponse])
async def list_tags(
    lang: str | None = Query(None, description="en or bn (default en)"),  # noqa: B008
    db: AsyncSession = Depends(get_db),  # noqa: B008
) -> list[TagResponse]:
    """List all tags sorted by their name in ``lang``."""
    language = Language.parse(lang)
    stmt = select(Tag).order_by(localized_name(Tag, language).asc(), Tag.code.asc())
    result = await db.execute(stmt)
    return [
        TagResponse(code=t.code, name_en=t.name_en or "", name_bn=t.name_bn or "")
        for t in result.scalars().all()
    ]


@router.get("/tags/{code}", response_model=TagResponse)
async def get_tag(
    code: str,
    db: AsyncSession = Depends(get_db),  # noqa: B008
) -> TagResponse:
    """Fetch one tag. Codes are matched trimmed and lowercased."""
    normalized = code.strip().lower()
    if not normalized:
        raise ApiError("Invalid tag code", status_code=400)

    result = await db.execute(select(Tag).where(Tag.code == normalized))
    tag = result.scalar_one_or_none()
    if tag is None:
        raise NotFoundError("Tag not found")
    return TagResponse(code=tag.code, name_en=tag.name_en or "", name_bn=tag.name_bn or "")
