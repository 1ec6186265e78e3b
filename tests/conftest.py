from pathlib import Path
from typing import Dict, List, Optional

import pytest

from shopassist.core.config import Settings
from shopassist.domain.models.cart import CartLine
from shopassist.domain.models.catalog import UnifiedProductRecord, UnifiedStoreRecord
from shopassist.domain.repositories.cart_repo import InMemoryCartRepo
from shopassist.domain.repositories.catalog_repo import InMemoryCatalogRepo
from shopassist.domain.services.basket_split_svc import BasketSplitService
from shopassist.domain.services.collaborators import CatalogStockService
from shopassist.domain.services.orchestrator_svc import AssistantOrchestrator
from shopassist.domain.services.text_search_svc import TextSearchService

SAMPLE_CATALOG = Path(__file__).resolve().parent.parent / "data" / "catalog.sample.json"

STORES = {
    "ns1": UnifiedStoreRecord(id="ns1", name="Sunrise Supermarket", distance_km=1.2, delivery_time="20-30 min"),
    "ns2": UnifiedStoreRecord(id="ns2", name="MedCare Pharmacy", distance_km=2.5, delivery_time="25-35 min"),
}


def make_record(
    id: str,
    name: str,
    category: str = "Misc",
    price: float = 1.0,
    in_stock: bool = True,
    rating: Optional[float] = None,
    store_id: str = "ns1",
    extra_text: str = "",
    brand: Optional[str] = None,
    dietary=(),
    distance_km: Optional[float] = None,
) -> UnifiedProductRecord:
    store = STORES.get(store_id) or UnifiedStoreRecord(id=store_id, name=store_id)
    if distance_km is not None:
        store = store.model_copy(update={"distance_km": distance_km})
    text = " ".join(x for x in [name, extra_text, category] if x).lower()
    return UnifiedProductRecord(
        id=id,
        store_id=store_id,
        store=store,
        name=name,
        category=category,
        price=price,
        rating=rating,
        in_stock=in_stock,
        brand=brand,
        dietary=frozenset(dietary),
        searchable_text=text,
    )


BANANAS = UnifiedProductRecord(
    id="p1",
    store_id="ns1",
    store=STORES["ns1"],
    name="Organic Bananas",
    category="Fruits",
    price=2.99,
    in_stock=True,
    rating=4.5,
    searchable_text="organic bananas fresh organic bananas perfect for smoothies fruits",
)


@pytest.fixture
def grocery_catalog() -> List[UnifiedProductRecord]:
    return [
        BANANAS,
        make_record("p2", "Whole Milk", category="Dairy", price=1.49, rating=4.2, extra_text="pasteurized"),
        make_record("p3", "Almond Milk", category="Dairy", price=2.89, rating=4.7, store_id="ns2", dietary={"vegan"}),
        make_record("p4", "Chocolate Milk", category="Dairy", price=1.99, in_stock=False),
        make_record("p5", "Paracetamol", category="Pharmacy", price=4.5, store_id="ns2"),
    ]


@pytest.fixture
def catalog_repo(grocery_catalog) -> InMemoryCatalogRepo:
    return InMemoryCatalogRepo(grocery_catalog)


class RecordingCart:
    """CartService double that records every call."""

    def __init__(self, lines: Optional[List[CartLine]] = None, fail: bool = False):
        self.calls: List[tuple] = []
        self._lines = lines or []
        self.fail = fail

    async def add_to_cart(self, product_id: str, quantity: int, variant: Optional[Dict[str, str]] = None) -> None:
        self.calls.append(("add", product_id, quantity, variant))
        if self.fail:
            raise RuntimeError("cart backend down")

    async def update_quantity(self, product_id: str, quantity: int) -> None:
        self.calls.append(("update", product_id, quantity))
        if self.fail:
            raise RuntimeError("cart backend down")

    async def lines(self) -> List[CartLine]:
        if self.fail:
            raise RuntimeError("cart backend down")
        return list(self._lines)


class FixedStock:
    def __init__(self, answer: bool = True, fail: bool = False):
        self.answer = answer
        self.fail = fail

    async def is_in_stock(self, product_id: str) -> bool:
        if self.fail:
            raise RuntimeError("stock backend down")
        return self.answer


def make_orchestrator(
    catalog_repo,
    cart=None,
    stock=None,
    get_catalog=None,
    ambiguity_threshold=None,
    assume_in_stock_on_error=True,
):
    get_catalog = get_catalog or catalog_repo.get_catalog
    cart = cart if cart is not None else RecordingCart()
    stock = stock or CatalogStockService(get_catalog)
    return AssistantOrchestrator(
        search=TextSearchService(get_catalog),
        cart=cart,
        stock=stock,
        basket=BasketSplitService(cart, catalog_repo),
        ambiguity_threshold=ambiguity_threshold,
        assume_in_stock_on_error=assume_in_stock_on_error,
    )


@pytest.fixture
def cart() -> RecordingCart:
    return RecordingCart()


@pytest.fixture
def real_cart(catalog_repo) -> InMemoryCartRepo:
    return InMemoryCartRepo(catalog_repo.get_catalog)


@pytest.fixture
def settings() -> Settings:
    return Settings(_env_file=None)
