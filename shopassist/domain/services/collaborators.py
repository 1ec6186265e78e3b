# shopassist/domain/services/collaborators.py
from __future__ import annotations
from typing import Dict, List, Optional, Protocol, Sequence
import logging

from shopassist.domain.models.cart import CartLine
from shopassist.domain.models.catalog import UnifiedProductRecord, UnifiedStoreRecord
from shopassist.domain.models.intents import ProductCandidate, ProductFilter
from shopassist.domain.services.text_search_svc import CatalogAccessor

"""
Note:
    - Interfaces the assistant core is wired against. Implementations are
      injected (constructor arguments), never imported as module globals.
    - Visual search and voice are placeholders: they keep the interface stable
      so real pipelines can be dropped in without touching the orchestrator.
"""

logger = logging.getLogger(__name__)


class CartService(Protocol):
    async def add_to_cart(self, product_id: str, quantity: int, variant: Optional[Dict[str, str]] = None) -> None: ...
    async def update_quantity(self, product_id: str, quantity: int) -> None: ...
    async def lines(self) -> List[CartLine]: ...


class StockService(Protocol):
    async def is_in_stock(self, product_id: str) -> bool: ...


class StoreDirectory(Protocol):
    def get_store(self, store_id: str) -> Optional[UnifiedStoreRecord]: ...


class VisualSearchService(Protocol):
    async def search_by_image(self, image_uri: str, filters: Optional[ProductFilter] = None) -> List[ProductCandidate]: ...


class VoiceService(Protocol):
    async def start_listening(self, locale: Optional[str] = None) -> None: ...
    async def stop_listening(self) -> str: ...  # returns the transcript
    async def speak(self, text: str, locale: Optional[str] = None) -> None: ...


class CatalogStockService:
    """
    Stock check against the catalog snapshot.
    When the catalog accessor fails, the answer follows `assume_in_stock_on_error`
    instead of raising; unknown products are reported out of stock.
    """

    def __init__(self, get_catalog: CatalogAccessor, assume_in_stock_on_error: bool = True):
        self.get_catalog = get_catalog
        self.assume_in_stock_on_error = assume_in_stock_on_error

    async def is_in_stock(self, product_id: str) -> bool:
        try:
            catalog: Sequence[UnifiedProductRecord] = self.get_catalog() or []
        except Exception as e:
            logger.warning(
                "stock check failed product_id=%s err=%s -> assume_in_stock=%s",
                product_id, e, self.assume_in_stock_on_error,
            )
            return self.assume_in_stock_on_error
        item = next((p for p in catalog if p.id == product_id), None)
        return bool(item and item.in_stock)


class StubVisualSearchService:
    async def search_by_image(self, image_uri: str, filters: Optional[ProductFilter] = None) -> List[ProductCandidate]:
        # TODO: replace with an embedding-based visual similarity index
        return []


class StubVoiceService:
    async def start_listening(self, locale: Optional[str] = None) -> None:
        return None

    async def stop_listening(self) -> str:
        return ""

    async def speak(self, text: str, locale: Optional[str] = None) -> None:
        return None
