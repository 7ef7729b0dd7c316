"""Equipment search: text matching, filtering, sorting, pagination, enrichment."""

from .query import SearchHit, SearchOptions, SearchQuery, SearchResult, SortSpec
from .search_engine import search

__all__ = ["SearchHit", "SearchOptions", "SearchQuery", "SearchResult", "SortSpec", "search"]
