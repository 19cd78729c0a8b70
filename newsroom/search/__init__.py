"""Search and autocomplete over articles, categories and tags."""

from newsroom.search.engine import GlobalSearchEngine
from newsroom.search.params import (
    SearchParams,
    SuggestionParams,
    parse_bool,
    parse_search_params,
    parse_suggestion_params,
)
from newsroom.search.suggestions import SuggestionEngine

__all__ = [
    "GlobalSearchEngine",
    "SearchParams",
    "SuggestionEngine",
    "SuggestionParams",
    "parse_bool",
    "parse_search_params",
    "parse_suggestion_params",
]
