# shopassist/domain/services/orchestrator_svc.py
from __future__ import annotations
from typing import Awaitable, Callable, Dict, List, Optional, Tuple
import logging
import re
import time

from shopassist.domain.models.actions import (
    AssistantAction,
    AssistantResponse,
    MessageAction,
    ShowProductsAction,
    SplitProposalAction,
    UpdateCartQtyAction,
)
from shopassist.domain.models.intents import AssistantIntent, ParsedIntent, ProductCandidate
from shopassist.domain.services.basket_split_svc import BasketSplitService
from shopassist.domain.services.collaborators import CartService, StockService
from shopassist.domain.services.constants import (
    MSG_CART_FAILED,
    MSG_EMPTY_CART,
    MSG_FALLBACK,
    MSG_NOT_FOUND,
    MSG_SEARCH_FAILED,
    MSG_SPLIT_FAILED,
)
from shopassist.domain.services.filters import merge_filters
from shopassist.domain.services.text_search_svc import TextSearchService

logger = logging.getLogger(__name__)

Handler = Callable[[ParsedIntent], Awaitable[AssistantAction]]

# "add 2 bananas", "Add 3 x eggs" -> (2, "bananas"), (3, "eggs")
_ADD_REQUEST_RE = re.compile(r"^\s*add\s+(?:(\d+)\s*(?:x\s+)?)?(.*)$", re.IGNORECASE | re.DOTALL)


def resolve_cart_request(query: str) -> Tuple[str, Optional[int]]:
    """
    Strip the leading 'add' verb and an optional count from a cart request.
    A count of 0 is dropped ("add 0 bananas" -> ("bananas", None)), so the
    caller's default quantity of 1 applies.
    """
    m = _ADD_REQUEST_RE.match(query or "")
    if not m:
        return (query or "").strip(), None
    count = int(m.group(1)) if m.group(1) else None
    rest = m.group(2).strip()
    if not rest:
        # "add 2" alone: keep the number as the thing being searched
        return (query or "").strip(), None
    return rest, (count if count and count > 0 else None)


class AssistantOrchestrator:
    """
    Routes a ParsedIntent to exactly one AssistantAction.

    Dispatch:
      FIND_PRODUCT    -> in-stock text search -> SHOW_PRODUCTS (possibly empty)
      ADD_TO_CART     -> in-stock text search -> top match added to cart -> MESSAGE
      UPDATE_QUANTITY -> cart quantity update -> UPDATE_CART_QTY
      SPLIT_BASKET    -> per-store grouping of the cart -> SPLIT_PROPOSAL
      anything else   -> MESSAGE("Working on that capability...")

    The table covers every AssistantIntent member (checked at construction),
    so wiring a real handler for a placeholder intent is a one-line change.

    Collaborator failures (search/catalog, cart, stock, basket split) are logged
    and turned into a MESSAGE; `handle` does not raise for a valid ParsedIntent.
    A failing stock check is resolved by `assume_in_stock_on_error`.
    """

    def __init__(
        self,
        search: TextSearchService,
        cart: CartService,
        stock: StockService,
        basket: BasketSplitService,
        ambiguity_threshold: Optional[float] = None,
        assume_in_stock_on_error: bool = True,
    ):
        self.search = search
        self.cart = cart
        self.stock = stock
        self.basket = basket
        self.ambiguity_threshold = ambiguity_threshold
        self.assume_in_stock_on_error = assume_in_stock_on_error

        self._handlers: Dict[AssistantIntent, Handler] = {
            AssistantIntent.FIND_PRODUCT: self._find_product,
            AssistantIntent.ADD_TO_CART: self._add_to_cart,
            AssistantIntent.UPDATE_QUANTITY: self._update_quantity,
            AssistantIntent.SPLIT_BASKET: self._split_basket,
            AssistantIntent.FIND_SIMILAR: self._not_wired,
            AssistantIntent.FIND_BY_IMAGE: self._not_wired,
            AssistantIntent.REPLACE_ITEM: self._not_wired,
            AssistantIntent.TRACK_ORDER: self._not_wired,
            AssistantIntent.HELP: self._not_wired,
            AssistantIntent.VOICE_QUERY: self._not_wired,
        }
        missing = set(AssistantIntent) - set(self._handlers)
        if missing:
            raise ValueError(f"No handler for intents: {sorted(i.value for i in missing)}")

    async def handle(self, intent: ParsedIntent) -> AssistantResponse:
        t0 = time.perf_counter()
        logger.info("handle start intent=%s query=%r", intent.intent.value, intent.query)

        handler = self._handlers.get(intent.intent, self._not_wired)
        action = await handler(intent)

        logger.info(
            "handle done intent=%s action=%s time=%.4fs",
            intent.intent.value, action.type, time.perf_counter() - t0,
        )
        return AssistantResponse(action=action)

    # ---- collaborator calls -------------------------------------------------

    async def _search_in_stock(self, query: str, intent: ParsedIntent) -> List[ProductCandidate]:
        filters = merge_filters(intent.filters, in_stock_only=True)
        return await self.search.search_by_text(query, filters)

    # ---- handlers -----------------------------------------------------------

    async def _find_product(self, intent: ParsedIntent) -> AssistantAction:
        try:
            products = await self._search_in_stock(intent.query or "", intent)
        except Exception as e:
            logger.error(f"Search failed for query={intent.query!r}: {e}")
            return MessageAction(text=MSG_SEARCH_FAILED)
        return ShowProductsAction(products=products)

    async def _add_to_cart(self, intent: ParsedIntent) -> AssistantAction:
        query, parsed_qty = resolve_cart_request(intent.query or "")
        quantity = intent.quantity or parsed_qty or 1

        try:
            products = await self._search_in_stock(query, intent)
        except Exception as e:
            logger.error(f"Search failed for cart request query={query!r}: {e}")
            return MessageAction(text=MSG_SEARCH_FAILED)

        if not products:
            logger.info("add_to_cart no match query=%r", query)
            return MessageAction(text=MSG_NOT_FOUND)

        top = products[0]
        if (
            self.ambiguity_threshold is not None
            and len(products) > 1
            and products[1].confidence >= self.ambiguity_threshold
        ):
            runner_up = products[1]
            logger.info(
                "add_to_cart ambiguous query=%r top=%s runner_up=%s confidence=%.3f",
                query, top.id, runner_up.id, runner_up.confidence,
            )
            return MessageAction(text=f"Did you mean {top.name} or {runner_up.name}?")

        try:
            in_stock = await self.stock.is_in_stock(top.id)
        except Exception as e:
            logger.error(
                f"Stock check failed for product_id={top.id}: {e} "
                f"(assume_in_stock_on_error={self.assume_in_stock_on_error})"
            )
            in_stock = self.assume_in_stock_on_error
        if not in_stock:
            return MessageAction(text=f"{top.name} is currently out of stock.")

        try:
            await self.cart.add_to_cart(top.id, quantity, intent.variant)
        except Exception as e:
            logger.error(f"Cart add failed for product_id={top.id} qty={quantity}: {e}")
            return MessageAction(text=MSG_CART_FAILED)

        logger.info("add_to_cart product_id=%s qty=%s confidence=%.3f", top.id, quantity, top.confidence)
        return MessageAction(text=f"Added {top.name} to your cart.")

    async def _update_quantity(self, intent: ParsedIntent) -> AssistantAction:
        if not intent.product_id or intent.quantity is None:
            return await self._not_wired(intent)
        try:
            await self.cart.update_quantity(intent.product_id, intent.quantity)
        except Exception as e:
            logger.error(f"Cart update failed for product_id={intent.product_id}: {e}")
            return MessageAction(text=MSG_CART_FAILED)
        return UpdateCartQtyAction(product_id=intent.product_id, quantity=intent.quantity)

    async def _split_basket(self, intent: ParsedIntent) -> AssistantAction:
        try:
            proposal = await self.basket.propose()
        except Exception as e:
            logger.error(f"Basket split failed: {e}")
            return MessageAction(text=MSG_SPLIT_FAILED)
        if proposal is None:
            return MessageAction(text=MSG_EMPTY_CART)
        return SplitProposalAction(proposal=proposal)

    async def _not_wired(self, intent: ParsedIntent) -> AssistantAction:
        return MessageAction(text=MSG_FALLBACK)
