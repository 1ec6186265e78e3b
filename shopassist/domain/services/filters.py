from typing import Optional

from shopassist.domain.models.catalog import UnifiedProductRecord
from shopassist.domain.models.intents import ProductFilter


def passes_filters(p: UnifiedProductRecord, filters: Optional[ProductFilter]) -> bool:
    """
    Hard gate applied before scoring: a record failing any present predicate
    is never ranked. All predicates are ANDed; unset ones are ignored.
    """
    if filters is None:
        return True
    if filters.in_stock_only and not p.in_stock:
        return False
    if filters.category and p.category != filters.category:
        return False
    if filters.price_min is not None and p.price < filters.price_min:
        return False
    if filters.price_max is not None and p.price > filters.price_max:
        return False
    if filters.store_ids and p.store_id not in filters.store_ids:
        return False
    # Unknown distance passes; only a known distance beyond the radius is rejected
    if filters.distance_km is not None and p.distance_km is not None and p.distance_km > filters.distance_km:
        return False
    if filters.brand:
        if not p.brand or p.brand.strip().lower() != filters.brand.strip().lower():
            return False
    if filters.dietary:
        wanted = {t.strip().lower() for t in filters.dietary}
        if not wanted <= p.dietary:
            return False
    return True


def merge_filters(base: Optional[ProductFilter], **overrides) -> ProductFilter:
    """Return `base` (or an empty filter) with the given fields replaced."""
    return (base or ProductFilter()).model_copy(update=overrides)
