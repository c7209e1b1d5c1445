"""Approximate ranked search over small record collections.

Scores follow the "lower is better" convention: 0.0 is an exact match and
1.0 is no match at all. Queries use a tiny extended syntax:

    database connection     every term must match (scores averaged)
    database|connection     either alternative may match (best wins)

Term matching is fuzzy. A term scores against the closest token of any
searchable field using edit-distance similarity, with a cheaper path for
exact and partial-token hits, so misspellings and word fragments still rank.
Terms are weighted by their BM25 inverse document frequency over the
searched collection, so a rare word outweighs one every record contains.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from difflib import SequenceMatcher
from functools import lru_cache
from typing import Any, Sequence

from rank_bm25 import BM25Okapi

logger = logging.getLogger(__name__)

DEFAULT_KEYS = ("task", "learning", "outcome")
OR_SEPARATOR = "|"


def _tokenize(text: str) -> list[str]:
    """Split into lowercase alphanumeric tokens, breaking camelCase."""
    text = re.sub(r"([a-z])([A-Z])", r"\1 \2", text)
    return re.findall(r"[a-zA-Z0-9]+", text.lower())


def parse_query(query: str) -> list[list[str]]:
    """Parse a query into OR alternatives of AND terms."""
    alternatives = []
    for part in query.split(OR_SEPARATOR):
        terms = _tokenize(part)
        if terms:
            alternatives.append(terms)
    return alternatives


def or_query(query: str) -> str:
    """Rewrite a free-text query so that any single word may match."""
    return OR_SEPARATOR.join(query.split())


@lru_cache(maxsize=4096)
def token_distance(term: str, token: str) -> float:
    """Distance in [0, 1] between a query term and one record token."""
    if term == token:
        return 0.0
    best = 1.0 - SequenceMatcher(None, term, token).ratio()
    if term in token:
        # partial-token hit, better the more of the token it covers
        best = min(best, 0.5 * (1.0 - len(term) / len(token)))
    return best


@dataclass
class SearchHit:
    """A single ranked match."""

    item: Any
    score: float
    ref_index: int


class FuzzySearchEngine:
    """Rank records against a query, dropping matches above ``threshold``.

    Records expose their text either through a ``searchable()`` method
    returning a field dict, or by being a dict themselves.
    """

    def __init__(self, keys: Sequence[str] = DEFAULT_KEYS, threshold: float = 0.6) -> None:
        self.keys = tuple(keys)
        self.threshold = threshold

    def _fields(self, record: Any) -> dict[str, str]:
        if hasattr(record, "searchable"):
            return record.searchable()
        if isinstance(record, dict):
            return record
        return {key: getattr(record, key, "") for key in self.keys}

    def search(self, records: Sequence[Any], query: str, limit: int | None = None) -> list[SearchHit]:
        """Return matches sorted by ascending score, at most ``limit`` of them.

        Ties keep the input order.
        """
        alternatives = parse_query(query)
        if not alternatives or not records:
            return []

        docs: list[list[str]] = []
        for record in records:
            fields = self._fields(record)
            tokens: list[str] = []
            for key in self.keys:
                tokens.extend(_tokenize(str(fields.get(key) or "")))
            docs.append(tokens)

        weights = _term_weights(docs, {term for alt in alternatives for term in alt})

        hits = []
        for index, tokens in enumerate(docs):
            score = min(
                _alternative_score(terms, tokens, weights, self.threshold) for terms in alternatives
            )
            if score <= self.threshold:
                hits.append(SearchHit(item=records[index], score=round(score, 4), ref_index=index))

        hits.sort(key=lambda hit: hit.score)
        logger.debug("Query %r matched %d of %d records", query, len(hits), len(records))
        if limit is not None:
            return hits[: max(limit, 0)]
        return hits


def _term_weights(docs: list[list[str]], terms: set[str]) -> dict[str, float]:
    """IDF weight of each query term, via its closest token in the collection."""
    vocab = sorted({token for tokens in docs for token in tokens})
    if not vocab:
        return {term: 1.0 for term in terms}

    idf = BM25Okapi(docs).idf
    weights = {}
    for term in terms:
        nearest = min(vocab, key=lambda token: token_distance(term, token))
        weights[term] = 1.0 + max(idf.get(nearest, 0.0), 0.0)
    return weights


def _alternative_score(
    terms: list[str],
    tokens: list[str],
    weights: dict[str, float],
    threshold: float,
) -> float:
    """Weighted mean term distance; 1.0 unless every term is within threshold."""
    if not tokens:
        return 1.0
    total = 0.0
    weight_sum = 0.0
    for term in terms:
        distance = min(token_distance(term, token) for token in tokens)
        if distance > threshold:
            return 1.0
        weight = weights.get(term, 1.0)
        total += weight * distance
        weight_sum += weight
    return total / weight_sum
