# shopassist/domain/repositories/catalog_repo.py
from __future__ import annotations
from pathlib import Path
from typing import Dict, Iterable, Optional, Tuple
import json
import logging

from shopassist.domain.models.catalog import UnifiedProductRecord, UnifiedStoreRecord, build_unified_catalog

logger = logging.getLogger(__name__)


class InMemoryCatalogRepo:
    """
    Holds the current catalog snapshot as an immutable tuple.
    `replace()` swaps the whole snapshot, so a search that already grabbed the
    previous one keeps reading a consistent view.
    Also serves as the store directory for basket splitting.
    """

    def __init__(self, records: Iterable[UnifiedProductRecord] = ()):
        self._records: Tuple[UnifiedProductRecord, ...] = ()
        self._stores: Dict[str, UnifiedStoreRecord] = {}
        self.replace(records)

    def replace(self, records: Iterable[UnifiedProductRecord]) -> None:
        records = tuple(records)
        self._stores = {r.store_id: r.store for r in records}
        self._records = records
        logger.info("catalog snapshot replaced products=%s stores=%s", len(records), len(self._stores))

    def get_catalog(self) -> Tuple[UnifiedProductRecord, ...]:
        return self._records

    def get_product(self, product_id: str) -> Optional[UnifiedProductRecord]:
        return next((p for p in self._records if p.id == product_id), None)

    def get_store(self, store_id: str) -> Optional[UnifiedStoreRecord]:
        return self._stores.get(store_id)

    def __len__(self) -> int:
        return len(self._records)

    @classmethod
    def load_json(cls, path: str | Path) -> "InMemoryCatalogRepo":
        """
        Load raw `{"stores": [...], "products": [...]}` feed rows from a JSON file.
        """
        raw = json.loads(Path(path).read_text(encoding="utf-8"))
        records = build_unified_catalog(raw.get("stores", []), raw.get("products", []))
        logger.info("catalog loaded path=%s products=%s", path, len(records))
        return cls(records)
