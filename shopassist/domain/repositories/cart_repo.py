from __future__ import annotations
from typing import Dict, List, Optional
import logging

from shopassist.domain.models.cart import CartLine
from shopassist.domain.services.text_search_svc import CatalogAccessor

logger = logging.getLogger(__name__)


class InMemoryCartRepo:
    """
    Single-user cart kept in process memory (CartService implementation).
    - Adding an existing product merges quantities.
    - update_quantity clamps to a minimum of 1.
    - Product details (store, name, price) are resolved from the catalog at add time.
    """

    def __init__(self, get_catalog: CatalogAccessor):
        self.get_catalog = get_catalog
        self._lines: Dict[str, CartLine] = {}

    async def add_to_cart(self, product_id: str, quantity: int, variant: Optional[Dict[str, str]] = None) -> None:
        if existing := self._lines.get(product_id):
            self._lines[product_id] = existing.model_copy(update={"quantity": existing.quantity + quantity})
        else:
            p = next((r for r in self.get_catalog() if r.id == product_id), None)
            if p is None:
                raise KeyError(f"Unknown product: {product_id}")
            self._lines[product_id] = CartLine(
                product_id=p.id,
                store_id=p.store_id,
                name=p.name,
                price=p.price,
                quantity=quantity,
                variant=variant,
            )
        logger.debug("cart add product_id=%s qty=%s lines=%s", product_id, quantity, len(self._lines))

    async def update_quantity(self, product_id: str, quantity: int) -> None:
        line = self._lines.get(product_id)
        if line is None:
            raise KeyError(f"Product not in cart: {product_id}")
        self._lines[product_id] = line.model_copy(update={"quantity": max(1, quantity)})

    async def remove(self, product_id: str) -> None:
        self._lines.pop(product_id, None)

    async def lines(self) -> List[CartLine]:
        return list(self._lines.values())
