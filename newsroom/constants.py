from enum import StrEnum


class Language(StrEnum):
    EN = "en"
    BN = "bn"

    @classmethod
    def parse(cls, value: object) -> "Language":
        """Map a raw query value to a language; anything unknown is English."""
        if isinstance(value, str) and value == cls.BN.value:
            return cls.BN
        return cls.EN


class ArticleStatus(StrEnum):
    DRAFT = "draft"
    PUBLISHED = "published"
    ARCHIVED = "archived"


class EntityType(StrEnum):
    ARTICLES = "articles"
    CATEGORIES = "categories"
    TAGS = "tags"


ALL_ENTITY_TYPES: tuple[str, ...] = tuple(t.value for t in EntityType)

# Global search
SEARCH_QUERY_MAX_LENGTH = 100
SEARCH_DEFAULT_LIMIT = 10
SEARCH_MAX_LIMIT = 100

# Suggestions (autocomplete)
SUGGEST_QUERY_MAX_LENGTH = 64
SUGGEST_DEFAULT_LIMIT = 10
SUGGEST_MAX_LIMIT = 20
SUGGEST_DEFAULT_PER_TYPE_LIMIT = 5
SUGGEST_MAX_PER_TYPE_LIMIT = 10

HIGHLIGHT_OPEN = "<c>"
HIGHLIGHT_CLOSE = "</c>"

EXCERPT_MAX_LENGTH = 220
