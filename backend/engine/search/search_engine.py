"""
Faceted full-text search over the equipment catalog.

Pipeline: candidates (category / manufacturer / filters) -> text match ->
sort -> paginate -> enrich the returned page.  Enrichment runs only for the
flags that are set, and only for hits on the requested page.
"""

from __future__ import annotations

import logging
import math
from collections import Counter
from collections.abc import Callable

from engine.catalog.catalog import EquipmentCatalog, matching_criteria, matches
from engine.catalog.models import EquipmentItem
from engine.search.enrichment import (
    alternatives_for,
    availability_for,
    compatible_for,
    pricing_for,
)
from engine.search.query import SearchHit, SearchQuery, SearchResult

logger = logging.getLogger(__name__)

# Text relevance weights
TERM_MATCH_SCORE = 10.0
MANUFACTURER_BONUS = 15.0
MODEL_BONUS = 20.0
MAX_RELEVANCE = 100.0


# ---------------------------------------------------------------------------
# Ratings
# ---------------------------------------------------------------------------

def performance_rating(item: EquipmentItem) -> float:
    """0-100 rating from efficiency and manufacturer tier."""
    rating = 50.0
    if item.efficiency_pct is not None and item.category == "panel":
        rating += min(30.0, (item.efficiency_pct - 15) * 2)
    elif item.efficiency_pct is not None:
        rating += min(30.0, (item.efficiency_pct - 85) * 2)
    if item.tier_rank == 1:
        rating += 20
    elif item.tier_rank == 2:
        rating += 10
    return float(min(100.0, max(0.0, rating)))


def reliability_rating(item: EquipmentItem) -> float:
    """0-100 rating from warranty length, certifications and tier."""
    rating = 50.0
    rating += min(25.0, item.warranty.years * 1.5)
    if len(item.certifications) > 3:
        rating += 15
    if item.tier_rank == 1:
        rating += 10
    return float(min(100.0, max(0.0, rating)))


# ---------------------------------------------------------------------------
# Text matching
# ---------------------------------------------------------------------------

def _tokenize(text: str | None) -> list[str]:
    return [t for t in (text or "").lower().split() if t]


def _term_variants(term: str) -> tuple[str, ...]:
    """The term plus its singular form ("panels" -> "panel")."""
    if len(term) > 3 and term.endswith("s") and not term.endswith("ss"):
        return term, term[:-1]
    return (term,)


def _find(variants: tuple[str, ...], text: str) -> bool:
    return any(v in text for v in variants)


def text_relevance(item: EquipmentItem, terms: list[str]) -> float | None:
    """Relevance of an item for the query terms, None when a term is missing.

    Every term must occur somewhere in the item's searchable text.
    """
    if not terms:
        return 0.0
    haystack = item.searchable_text()
    manufacturer = item.manufacturer.lower()
    model = item.model.lower()
    score = 0.0
    for term in terms:
        variants = _term_variants(term)
        if not _find(variants, haystack):
            return None
        score += TERM_MATCH_SCORE
        if _find(variants, manufacturer):
            score += MANUFACTURER_BONUS
        if _find(variants, model):
            score += MODEL_BONUS
    return min(MAX_RELEVANCE, score)


# ---------------------------------------------------------------------------
# Sorting
# ---------------------------------------------------------------------------

_SORT_VALUES: dict[str, Callable[[SearchHit], object]] = {
    "price": lambda h: h.item.price_metric,
    "efficiency": lambda h: h.item.efficiency_pct,
    "power": lambda h: h.item.power_w,
    "capacity": lambda h: h.item.capacity,
    "warranty": lambda h: h.item.warranty.years,
    "rating": lambda h: h.performance_rating,
    "tier": lambda h: h.item.tier_rank,
    "manufacturer": lambda h: h.item.manufacturer.lower(),
    "model": lambda h: h.item.model.lower(),
}


def _sort_hits(hits: list[SearchHit], field: str, order: str, catalog: EquipmentCatalog) -> list[SearchHit]:
    descending = order == "desc"
    if field == "relevance":
        # Relevance ties keep catalog order regardless of direction
        sign = -1 if descending else 1
        return sorted(hits, key=lambda h: (sign * h.relevance_score, catalog.position(h.item)))

    value_of = _SORT_VALUES[field]
    present = [h for h in hits if value_of(h) is not None]
    missing = [h for h in hits if value_of(h) is None]
    present.sort(key=lambda h: h.item.id)
    present.sort(key=value_of, reverse=descending)   # stable, so id breaks ties
    missing.sort(key=lambda h: h.item.id)
    return present + missing


# ---------------------------------------------------------------------------
# Facets
# ---------------------------------------------------------------------------

def _facets(hits: list[SearchHit]) -> dict[str, dict[str, int]]:
    category = Counter(h.item.category for h in hits)
    manufacturer = Counter(h.item.manufacturer for h in hits)
    availability = Counter(h.item.availability for h in hits)
    tier = Counter(str(h.item.tier_rank) for h in hits if h.item.tier_rank is not None)
    return {
        name: dict(sorted(counter.items()))
        for name, counter in (
            ("category", category),
            ("manufacturer", manufacturer),
            ("availability", availability),
            ("tier", tier),
        )
    }


# ---------------------------------------------------------------------------
# Main entry point
# ---------------------------------------------------------------------------

def _candidates(catalog: EquipmentCatalog, query: SearchQuery) -> list[EquipmentItem]:
    manufacturers = {m.lower() for m in query.manufacturers}
    result = []
    for item in catalog.items(query.categories or None):
        if manufacturers and item.manufacturer.lower() not in manufacturers:
            continue
        if not matches(item, query.filters):
            continue
        if query.certifications and not all(c in item.certifications for c in query.certifications):
            continue
        result.append(item)
    return result


def search(catalog: EquipmentCatalog, query: SearchQuery) -> SearchResult:
    """Run a search and return one page of hits.

    Parameters
    ----------
    catalog : EquipmentCatalog
        Immutable catalog snapshot.
    query : SearchQuery
        Text, category, manufacturer and filter constraints plus sort,
        pagination and enrichment options.

    Returns
    -------
    SearchResult
        Hits for the requested page.  A page past the end is empty with
        ``has_more=False``; facets always describe the full match set.
    """
    terms = _tokenize(query.query)
    hits: list[SearchHit] = []
    for item in _candidates(catalog, query):
        relevance = text_relevance(item, terms)
        if relevance is None:
            continue
        matched = matching_criteria(item, query.filters)
        if query.certifications:
            matched.append("certifications")
        if query.manufacturers:
            matched.append("manufacturer")
        hits.append(SearchHit(
            item=item,
            relevance_score=relevance,
            matched_filters=matched,
            performance_rating=performance_rating(item),
            reliability_rating=reliability_rating(item),
        ))

    options = query.options
    ordered = _sort_hits(hits, options.sort.field, options.sort.order, catalog)

    total = len(ordered)
    start = (options.page - 1) * options.page_size
    page = ordered[start:start + options.page_size]
    total_pages = math.ceil(total / options.page_size) if total else 0

    for hit in page:
        if options.include_alternatives:
            hit.alternatives = alternatives_for(hit.item, catalog)
        if options.include_compatible:
            hit.compatible = compatible_for(hit.item, catalog)
        if options.include_pricing:
            hit.pricing = pricing_for(hit.item)
        if options.include_availability:
            hit.availability = availability_for(hit.item)

    logger.debug(
        "search query=%r categories=%s matched=%d page=%d",
        query.query, list(query.categories), total, options.page,
    )
    return SearchResult(
        docs=page,
        total=total,
        page=options.page,
        page_size=options.page_size,
        total_pages=total_pages,
        has_more=start + len(page) < total,
        facets=_facets(ordered),
    )
