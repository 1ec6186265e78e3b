# shopassist/domain/services/text_search_svc.py
from __future__ import annotations
from typing import Callable, List, Optional, Sequence, Tuple
import logging
import re
import time

from shopassist.domain.models.catalog import UnifiedProductRecord
from shopassist.domain.models.intents import ProductCandidate, ProductFilter
from shopassist.domain.services.constants import (
    CONFIDENCE_DECIMALS,
    RATING_MAX_BOOST,
    RATING_PIVOT,
    RATING_WEIGHT,
    SCORE_CATEGORY_MATCH,
    SCORE_IN_STOCK,
    SCORE_PHRASE_MATCH,
    SCORE_TOKEN_MATCH,
    SEARCH_MAX_RESULTS,
    STOPWORDS,
)
from shopassist.domain.services.filters import passes_filters

logger = logging.getLogger(__name__)

CatalogAccessor = Callable[[], Sequence[UnifiedProductRecord]]

_NON_ALNUM_RE = re.compile(r"[^a-z0-9\s]")


def normalize_query(query: Optional[str]) -> Tuple[str, List[str]]:
    """
    Lowercase, replace anything outside [a-z0-9 whitespace] with a space, split.
    Returns (phrase, tokens): the phrase keeps every word, tokens drop stopwords.
    """
    words = _NON_ALNUM_RE.sub(" ", (query or "").lower()).split()
    return " ".join(words), [w for w in words if w not in STOPWORDS]


def score_product(phrase: str, tokens: Sequence[str], p: UnifiedProductRecord) -> float:
    text = p.searchable_text
    score = 0.0

    # Phrase match boost
    if phrase in text:
        score += SCORE_PHRASE_MATCH

    # Token overlap (repeated tokens count again)
    for t in tokens:
        if t in text:
            score += SCORE_TOKEN_MATCH

    # Category hint
    if p.category.lower() in tokens:
        score += SCORE_CATEGORY_MATCH

    # Stock, rating minor boosts
    if p.in_stock:
        score += SCORE_IN_STOCK
    if p.rating is not None:
        score += min(RATING_MAX_BOOST, (p.rating - RATING_PIVOT) * RATING_WEIGHT)

    return score


def _to_candidate(p: UnifiedProductRecord, confidence: float) -> ProductCandidate:
    return ProductCandidate(
        id=p.id,
        store_id=p.store_id,
        name=p.name,
        category=p.category,
        price=p.price,
        rating=p.rating,
        distance_km=p.distance_km,
        image_url=p.image_url,
        in_stock=p.in_stock,
        confidence=confidence,
    )


def rank_catalog(
    catalog: Sequence[UnifiedProductRecord],
    query: Optional[str],
    filters: Optional[ProductFilter] = None,
    limit: int = SEARCH_MAX_RESULTS,
) -> List[ProductCandidate]:
    """
    Filter → score → normalize → rank, over one catalog snapshot.

    - An empty (or punctuation-only) query returns [] instead of ranking the
      whole catalog by stock/rating.
    - Records failing the filter gate are never scored.
    - Records scoring <= 0 are dropped and do not count toward normalization.
    - confidence = score / max_score, rounded to 3 decimals; the top hit is 1.0.
    - Sort is stable, so equal scores keep catalog order.
    """
    phrase, tokens = normalize_query(query)
    if not phrase:
        return []

    scored: List[Tuple[UnifiedProductRecord, float]] = []
    for p in catalog:
        if not passes_filters(p, filters):
            continue
        s = score_product(phrase, tokens, p)
        if s > 0:
            scored.append((p, s))

    if not scored:
        return []

    max_score = max(s for _, s in scored)
    scored.sort(key=lambda ps: -ps[1])

    limit = max(0, min(limit, SEARCH_MAX_RESULTS))
    return [
        _to_candidate(p, round(s / max_score, CONFIDENCE_DECIMALS))
        for p, s in scored[:limit]
    ]


class TextSearchService:
    """
    Scored text search over the unified catalog.
    The catalog is read through `get_catalog()` once per call and never cached,
    so each search sees the snapshot current at call time.
    """

    def __init__(self, get_catalog: CatalogAccessor, max_results: int = SEARCH_MAX_RESULTS):
        self.get_catalog = get_catalog
        self.max_results = max_results

    async def search_by_text(self, query: str, filters: Optional[ProductFilter] = None) -> List[ProductCandidate]:
        t0 = time.perf_counter()
        catalog = self.get_catalog() or []
        results = rank_catalog(catalog, query, filters, limit=self.max_results)
        logger.debug(
            "search_by_text query=%r filters=%s catalog=%s results=%s time=%.4fs",
            query, filters.model_dump(exclude_defaults=True) if filters else {},
            len(catalog), len(results), time.perf_counter() - t0,
        )
        return results
