from __future__ import annotations
from typing import Optional, Tuple
import logging

from shopassist.core.config import Settings, get_settings
from shopassist.domain.models.actions import AssistantResponse
from shopassist.domain.models.intents import AssistantInput, ParsedIntent
from shopassist.domain.repositories.cart_repo import InMemoryCartRepo
from shopassist.domain.repositories.catalog_repo import InMemoryCatalogRepo
from shopassist.domain.services.basket_split_svc import BasketSplitService
from shopassist.domain.services.collaborators import (
    CartService,
    CatalogStockService,
    StockService,
)
from shopassist.domain.services.intent_parser_svc import IntentParser
from shopassist.domain.services.orchestrator_svc import AssistantOrchestrator
from shopassist.domain.services.text_search_svc import TextSearchService

logger = logging.getLogger(__name__)


class Assistant:
    """Parser, search and orchestrator wired over one catalog and one cart."""

    def __init__(
        self,
        catalog: InMemoryCatalogRepo,
        cart: CartService,
        parser: IntentParser,
        search: TextSearchService,
        orchestrator: AssistantOrchestrator,
    ):
        self.catalog = catalog
        self.cart = cart
        self.parser = parser
        self.search = search
        self.orchestrator = orchestrator

    async def ask(self, data: AssistantInput) -> Tuple[ParsedIntent, AssistantResponse]:
        intent = await self.parser.parse(data)
        return intent, await self.orchestrator.handle(intent)


def build_assistant(
    settings: Optional[Settings] = None,
    *,
    catalog: Optional[InMemoryCatalogRepo] = None,
    cart: Optional[CartService] = None,
    stock: Optional[StockService] = None,
) -> Assistant:
    """
    Wire the assistant from settings. Any collaborator can be injected;
    missing ones get the in-memory defaults.
    - catalog: CATALOG_PATH seed when set, otherwise empty.
    - stock: catalog-backed. The configured failure policy also covers an
      injected stock service that raises.
    """
    settings = settings or get_settings()

    if catalog is None:
        catalog = (
            InMemoryCatalogRepo.load_json(settings.CATALOG_PATH)
            if settings.CATALOG_PATH else InMemoryCatalogRepo()
        )
    cart = cart or InMemoryCartRepo(catalog.get_catalog)
    stock = stock or CatalogStockService(
        catalog.get_catalog,
        assume_in_stock_on_error=settings.stock_assume_in_stock_on_error,
    )

    search = TextSearchService(catalog.get_catalog, max_results=settings.search_max_results)
    basket = BasketSplitService(
        cart,
        catalog,
        delivery_fee_per_store=settings.delivery_fee_per_store,
        default_eta=settings.default_eta,
    )
    orchestrator = AssistantOrchestrator(
        search=search,
        cart=cart,
        stock=stock,
        basket=basket,
        ambiguity_threshold=settings.add_to_cart_ambiguity_threshold,
        assume_in_stock_on_error=settings.stock_assume_in_stock_on_error,
    )
    logger.info(
        "assistant ready catalog=%s max_results=%s ambiguity_threshold=%s",
        len(catalog), settings.search_max_results, settings.add_to_cart_ambiguity_threshold,
    )
    return Assistant(
        catalog=catalog,
        cart=cart,
        parser=IntentParser(),
        search=search,
        orchestrator=orchestrator,
    )
