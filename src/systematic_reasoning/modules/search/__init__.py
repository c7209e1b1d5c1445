"""Fuzzy ranked search."""

from .fuzzy import FuzzySearchEngine, SearchHit, or_query, parse_query

__all__ = ["FuzzySearchEngine", "SearchHit", "or_query", "parse_query"]
