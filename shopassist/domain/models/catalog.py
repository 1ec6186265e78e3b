# shopassist/domain/models/catalog.py
from __future__ import annotations
from typing import Any, Dict, FrozenSet, Iterable, List, Optional
import re
from pydantic import BaseModel, Field, model_validator


class UnifiedStoreRecord(BaseModel):
    id: str
    name: str
    rating: Optional[float] = Field(default=None, ge=0, le=5)
    distance_km: Optional[float] = Field(default=None, ge=0)
    delivery_time: Optional[str] = None  # ETA label, e.g. "20-30 min"

    model_config = {"frozen": True}


class UnifiedProductRecord(BaseModel):
    """
    Canonical searchable product, merged from the per-store feeds.
    `searchable_text` is the lowercased concatenation matched by text search;
    it must contain the lowercased name so phrase matches on the name always hit.
    """
    id: str
    store_id: str
    store: UnifiedStoreRecord
    name: str
    category: str
    price: float = Field(ge=0)
    rating: Optional[float] = Field(default=None, ge=0, le=5)
    in_stock: bool = False
    image_url: Optional[str] = None
    description: Optional[str] = None
    brand: Optional[str] = None
    dietary: FrozenSet[str] = frozenset()
    searchable_text: str

    model_config = {"frozen": True}

    @property
    def distance_km(self) -> Optional[float]:
        return self.store.distance_km

    @model_validator(mode="after")
    def _check_searchable_text(self) -> "UnifiedProductRecord":
        if self.searchable_text != self.searchable_text.lower():
            raise ValueError("searchable_text must be lowercase")
        if self.name.lower() not in self.searchable_text:
            raise ValueError(f"searchable_text must contain the product name {self.name!r}")
        return self


_DISTANCE_RE = re.compile(r"\d+(?:\.\d+)?")


def _parse_distance(raw: Any) -> Optional[float]:
    """Store feeds send distance as a number or a label like '1.2 km'."""
    if raw is None or raw == "":
        return None
    if isinstance(raw, (int, float)):
        return float(raw)
    m = _DISTANCE_RE.search(str(raw))
    return float(m.group(0)) if m else None


def build_searchable_text(*parts: Optional[str]) -> str:
    return " ".join(str(p) for p in parts if p).lower()


def build_unified_catalog(
    stores: Iterable[Dict[str, Any]],
    products: Iterable[Dict[str, Any]],
) -> List[UnifiedProductRecord]:
    """
    Map raw store/product rows (as served by the store-owner inventory feeds)
    into UnifiedProductRecord snapshots.

    - A product is in stock only when its status is "Active" and stock > 0.
    - Products pointing at an unknown store get a placeholder store named "Unknown".
    - searchable_text = name, category, store name and description, lowercased.
    """
    store_map: Dict[str, UnifiedStoreRecord] = {}
    for s in stores or []:
        store_map[str(s["id"])] = UnifiedStoreRecord(
            id=str(s["id"]),
            name=s.get("name") or "Unknown",
            rating=s.get("rating"),
            distance_km=_parse_distance(s.get("distance_km", s.get("distance"))),
            delivery_time=s.get("delivery_time") or s.get("deliveryTime"),
        )

    unified: List[UnifiedProductRecord] = []
    for p in products or []:
        store_id = str(p.get("store_id") or p.get("storeId"))
        store = store_map.get(store_id) or UnifiedStoreRecord(id=store_id, name="Unknown")
        stock = p.get("stock") or 0
        unified.append(
            UnifiedProductRecord(
                id=str(p["id"]),
                store_id=store_id,
                store=store,
                name=p["name"],
                category=p.get("category") or "",
                price=float(p.get("price") or 0),
                rating=p.get("rating"),
                in_stock=p.get("status") == "Active" and stock > 0,
                image_url=p.get("image_url") or p.get("imageUrl") or p.get("image"),
                description=p.get("description"),
                brand=p.get("brand"),
                dietary=frozenset(str(t).strip().lower() for t in p.get("dietary") or [] if str(t).strip()),
                searchable_text=build_searchable_text(
                    p["name"], p.get("category"), store.name, p.get("description")
                ),
            )
        )
    return unified
