from datetime import datetime

from sqlalchemy import (
    Column,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Table,
    Text,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from newsroom.constants import ArticleStatus, Language
from newsroom.database import Base

# Many-to-many link between articles and tags
article_tags = Table(
    "article_tags",
    Base.metadata,
    Column("article_id", Integer, ForeignKey("articles.id", ondelete="CASCADE"), primary_key=True),
    Column("tag_id", Integer, ForeignKey("tags.id", ondelete="CASCADE"), primary_key=True),
    Index("idx_article_tags_tag_id", "tag_id"),
)


class Category(Base):
    """Article category with English and Bengali display names."""

    __tablename__ = "categories"

    id: Mapped[int] = mapped_column(primary_key=True)
    code: Mapped[str] = mapped_column(String(100), unique=True)
    name_en: Mapped[str] = mapped_column(String(255), default="")
    name_bn: Mapped[str] = mapped_column(String(255), default="")
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())


class Tag(Base):
    """Free-form tag; ``code`` is the stable lowercase identifier."""

    __tablename__ = "tags"

    id: Mapped[int] = mapped_column(primary_key=True)
    code: Mapped[str] = mapped_column(String(100), unique=True)
    name_en: Mapped[str] = mapped_column(String(255), default="")
    name_bn: Mapped[str] = mapped_column(String(255), default="")
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())


class Article(Base):
    """Language-neutral article record. Text lives in ArticleTranslation."""

    __tablename__ = "articles"

    id: Mapped[int] = mapped_column(primary_key=True)
    category_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("categories.id", ondelete="SET NULL"), nullable=True, index=True
    )
    status: Mapped[str] = mapped_column(String(20), default=ArticleStatus.DRAFT.value)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    translations: Mapped[list["ArticleTranslation"]] = relationship(back_populates="article")
    tags: Mapped[list[Tag]] = relationship(secondary=article_tags)

    __table_args__ = (Index("idx_articles_status_created", "status", "created_at"),)


class ArticleTranslation(Base):
    """Per-language title, slug, excerpt and body of an article."""

    __tablename__ = "article_translations"

    id: Mapped[int] = mapped_column(primary_key=True)
    article_id: Mapped[int] = mapped_column(Integer, ForeignKey("articles.id", ondelete="CASCADE"), index=True)
    language_code: Mapped[str] = mapped_column(String(2), default=Language.EN.value)
    title: Mapped[str] = mapped_column(String(500), default="")
    slug: Mapped[str] = mapped_column(String(255))
    excerpt: Mapped[str | None] = mapped_column(Text, nullable=True)
    body: Mapped[str] = mapped_column(Text, default="")

    article: Mapped[Article] = relationship(back_populates="translations")

    __table_args__ = (
        UniqueConstraint("language_code", "slug", name="uq_article_translations_lang_slug"),
        UniqueConstraint("article_id", "language_code", name="uq_article_translations_article_lang"),
    )


def localized_name(model: type[Category] | type[Tag], lang: Language):
    """Return the name column of ``model`` for ``lang``.

    Only the two declared columns can come back, so the language value
    itself never reaches SQL text.
    """
    if lang is Language.BN:
        return model.name_bn
    return model.name_en
