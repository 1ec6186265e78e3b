import asyncio

import pytest

from conftest import FixedStock, RecordingCart, make_orchestrator, make_record
from shopassist.domain.models.cart import CartLine
from shopassist.domain.models.intents import AssistantIntent, ParsedIntent, ProductFilter
from shopassist.domain.repositories.catalog_repo import InMemoryCatalogRepo
from shopassist.domain.services.constants import (
    MSG_CART_FAILED,
    MSG_EMPTY_CART,
    MSG_FALLBACK,
    MSG_NOT_FOUND,
    MSG_SEARCH_FAILED,
    MSG_SPLIT_FAILED,
)
from shopassist.domain.services.orchestrator_svc import resolve_cart_request


def _broken_catalog():
    raise ConnectionError("catalog feed unreachable")


@pytest.mark.parametrize(
    "query, expected",
    [
        ("add 2 bananas", ("bananas", 2)),
        ("Add 3 x eggs", ("eggs", 3)),
        ("add 4x milk", ("milk", 4)),
        ("add bananas", ("bananas", None)),
        ("add xylophone", ("xylophone", None)),
        ("add 0 bananas", ("bananas", None)),
        ("add 2", ("add 2", None)),
        ("bananas", ("bananas", None)),
    ],
)
def test_resolve_cart_request(query, expected):
    assert resolve_cart_request(query) == expected


def test_dispatch_table_covers_every_intent(catalog_repo):
    orch = make_orchestrator(catalog_repo)
    assert set(orch._handlers) == set(AssistantIntent)


async def test_find_product_shows_in_stock_matches(catalog_repo):
    orch = make_orchestrator(catalog_repo)
    res = await orch.handle(ParsedIntent(intent=AssistantIntent.FIND_PRODUCT, query="milk"))
    assert res.action.type == "SHOW_PRODUCTS"
    ids = [p.id for p in res.action.products]
    assert ids[:2] == ["p3", "p2"]
    assert "p4" not in ids  # chocolate milk is out of stock


async def test_find_product_keeps_caller_filters(catalog_repo):
    orch = make_orchestrator(catalog_repo)
    intent = ParsedIntent(
        intent=AssistantIntent.FIND_PRODUCT,
        query="milk",
        filters=ProductFilter(store_ids=frozenset({"ns1"}), in_stock_only=False),
    )
    res = await orch.handle(intent)
    ids = {p.id for p in res.action.products}
    assert "p3" not in ids  # other store
    assert "p4" not in ids  # in-stock gate is always on for FIND_PRODUCT
    assert "p2" in ids


async def test_find_product_empty_result_is_not_an_error(catalog_repo):
    orch = make_orchestrator(InMemoryCatalogRepo())
    res = await orch.handle(ParsedIntent(intent=AssistantIntent.FIND_PRODUCT, query="unobtainium"))
    assert res.model_dump() == {"action": {"type": "SHOW_PRODUCTS", "products": []}}


async def test_add_to_cart_not_found_makes_no_cart_calls():
    repo = InMemoryCatalogRepo([make_record("x", "Bread", in_stock=False)])
    cart = RecordingCart()
    orch = make_orchestrator(repo, cart=cart)
    res = await orch.handle(ParsedIntent(intent=AssistantIntent.ADD_TO_CART, query="unobtainium"))
    assert res.model_dump() == {"action": {"type": "MESSAGE", "text": "I could not find that item."}}
    assert cart.calls == []


async def test_add_to_cart_takes_top_match_with_parsed_quantity(catalog_repo, cart):
    orch = make_orchestrator(catalog_repo, cart=cart)
    res = await orch.handle(ParsedIntent(intent=AssistantIntent.ADD_TO_CART, query="add 2 bananas"))
    assert res.action.type == "MESSAGE"
    assert res.action.text == "Added Organic Bananas to your cart."
    assert cart.calls == [("add", "p1", 2, None)]


async def test_add_to_cart_zero_count_adds_one(catalog_repo, cart):
    orch = make_orchestrator(catalog_repo, cart=cart)
    res = await orch.handle(ParsedIntent(intent=AssistantIntent.ADD_TO_CART, query="add 0 bananas"))
    assert res.action.text == "Added Organic Bananas to your cart."
    assert cart.calls == [("add", "p1", 1, None)]


async def test_add_to_cart_explicit_quantity_and_variant_win(catalog_repo, cart):
    orch = make_orchestrator(catalog_repo, cart=cart)
    intent = ParsedIntent(
        intent=AssistantIntent.ADD_TO_CART,
        query="add 2 bananas",
        quantity=5,
        variant={"ripeness": "green"},
    )
    await orch.handle(intent)
    assert cart.calls == [("add", "p1", 5, {"ripeness": "green"})]


async def test_add_to_cart_defaults_to_one(catalog_repo, cart):
    orch = make_orchestrator(catalog_repo, cart=cart)
    await orch.handle(ParsedIntent(intent=AssistantIntent.ADD_TO_CART, query="paracetamol"))
    assert cart.calls == [("add", "p5", 1, None)]


async def test_add_to_cart_picks_top_even_when_close(catalog_repo, cart):
    orch = make_orchestrator(catalog_repo, cart=cart)
    res = await orch.handle(ParsedIntent(intent=AssistantIntent.ADD_TO_CART, query="add milk"))
    assert res.action.text == "Added Almond Milk to your cart."
    assert cart.calls == [("add", "p3", 1, None)]


async def test_add_to_cart_asks_when_ambiguous(catalog_repo, cart):
    orch = make_orchestrator(catalog_repo, cart=cart, ambiguity_threshold=0.9)
    res = await orch.handle(ParsedIntent(intent=AssistantIntent.ADD_TO_CART, query="add milk"))
    assert res.action.type == "MESSAGE"
    assert res.action.text == "Did you mean Almond Milk or Whole Milk?"
    assert cart.calls == []


async def test_add_to_cart_out_of_stock_per_stock_service(catalog_repo, cart):
    orch = make_orchestrator(catalog_repo, cart=cart, stock=FixedStock(answer=False))
    res = await orch.handle(ParsedIntent(intent=AssistantIntent.ADD_TO_CART, query="add bananas"))
    assert res.action.text == "Organic Bananas is currently out of stock."
    assert cart.calls == []


async def test_add_to_cart_stock_failure_does_not_block_by_default(catalog_repo, cart):
    orch = make_orchestrator(catalog_repo, cart=cart, stock=FixedStock(fail=True))
    res = await orch.handle(ParsedIntent(intent=AssistantIntent.ADD_TO_CART, query="add bananas"))
    assert res.action.text == "Added Organic Bananas to your cart."
    assert cart.calls == [("add", "p1", 1, None)]


async def test_add_to_cart_stock_failure_blocks_when_policy_says_out_of_stock(catalog_repo, cart):
    orch = make_orchestrator(
        catalog_repo, cart=cart, stock=FixedStock(fail=True), assume_in_stock_on_error=False
    )
    res = await orch.handle(ParsedIntent(intent=AssistantIntent.ADD_TO_CART, query="add bananas"))
    assert res.action.text == "Organic Bananas is currently out of stock."
    assert cart.calls == []


async def test_cart_failure_becomes_message(catalog_repo):
    orch = make_orchestrator(catalog_repo, cart=RecordingCart(fail=True))
    res = await orch.handle(ParsedIntent(intent=AssistantIntent.ADD_TO_CART, query="add bananas"))
    assert res.action.type == "MESSAGE"
    assert res.action.text == MSG_CART_FAILED


@pytest.mark.parametrize("intent", [AssistantIntent.FIND_PRODUCT, AssistantIntent.ADD_TO_CART])
async def test_catalog_failure_becomes_message(catalog_repo, cart, intent):
    orch = make_orchestrator(catalog_repo, cart=cart, get_catalog=_broken_catalog)
    res = await orch.handle(ParsedIntent(intent=intent, query="bananas"))
    assert res.action.type == "MESSAGE"
    assert res.action.text == MSG_SEARCH_FAILED
    assert cart.calls == []


async def test_update_quantity(catalog_repo, cart):
    orch = make_orchestrator(catalog_repo, cart=cart)
    res = await orch.handle(ParsedIntent(intent=AssistantIntent.UPDATE_QUANTITY, product_id="p2", quantity=3))
    assert res.model_dump() == {"action": {"type": "UPDATE_CART_QTY", "product_id": "p2", "quantity": 3}}
    assert cart.calls == [("update", "p2", 3)]


async def test_update_quantity_without_target_falls_back(catalog_repo, cart):
    orch = make_orchestrator(catalog_repo, cart=cart)
    res = await orch.handle(ParsedIntent(intent=AssistantIntent.UPDATE_QUANTITY, quantity=3))
    assert res.action.text == MSG_FALLBACK
    assert cart.calls == []


async def test_update_quantity_failure_becomes_message(catalog_repo, real_cart):
    orch = make_orchestrator(catalog_repo, cart=real_cart)
    res = await orch.handle(ParsedIntent(intent=AssistantIntent.UPDATE_QUANTITY, product_id="p2", quantity=3))
    assert res.action.text == MSG_CART_FAILED  # p2 was never added


@pytest.mark.parametrize(
    "intent",
    [
        AssistantIntent.FIND_SIMILAR,
        AssistantIntent.FIND_BY_IMAGE,
        AssistantIntent.REPLACE_ITEM,
        AssistantIntent.TRACK_ORDER,
        AssistantIntent.HELP,
        AssistantIntent.VOICE_QUERY,
    ],
)
async def test_unwired_intents_fall_back(catalog_repo, cart, intent):
    orch = make_orchestrator(catalog_repo, cart=cart)
    res = await orch.handle(ParsedIntent(intent=intent, query="bananas"))
    assert res.model_dump() == {"action": {"type": "MESSAGE", "text": "Working on that capability..."}}
    assert cart.calls == []


async def test_split_basket_totals_are_sums(catalog_repo, real_cart):
    await real_cart.add_to_cart("p1", 3)
    await real_cart.add_to_cart("p3", 2)
    await real_cart.add_to_cart("p2", 1)
    orch = make_orchestrator(catalog_repo, cart=real_cart)

    res = await orch.handle(ParsedIntent(intent=AssistantIntent.SPLIT_BASKET))
    assert res.action.type == "SPLIT_PROPOSAL"
    proposal = res.action.proposal
    assert [s.store_id for s in proposal.stores] == ["ns1", "ns2"]
    assert proposal.total_items == sum(s.item_count for s in proposal.stores) == 6
    assert proposal.total_delivery == sum(s.delivery_fee for s in proposal.stores)
    assert proposal.subtotal == sum(s.subtotal for s in proposal.stores)


async def test_split_basket_empty_cart(catalog_repo, real_cart):
    orch = make_orchestrator(catalog_repo, cart=real_cart)
    res = await orch.handle(ParsedIntent(intent=AssistantIntent.SPLIT_BASKET))
    assert res.action.text == MSG_EMPTY_CART


async def test_split_basket_failure_becomes_message(catalog_repo):
    orch = make_orchestrator(catalog_repo, cart=RecordingCart(fail=True))
    res = await orch.handle(ParsedIntent(intent=AssistantIntent.SPLIT_BASKET))
    assert res.action.text == MSG_SPLIT_FAILED


async def test_split_basket_from_cart_lines(catalog_repo):
    lines = [
        CartLine(product_id="a", store_id="ns1", name="A", price=40.0, quantity=3),
        CartLine(product_id="b", store_id="ns2", name="B", price=37.5, quantity=2),
    ]
    orch = make_orchestrator(catalog_repo, cart=RecordingCart(lines=lines))
    res = await orch.handle(ParsedIntent(intent=AssistantIntent.SPLIT_BASKET))
    stores = res.action.proposal.stores
    assert [(s.store_name, s.item_count, s.eta, s.subtotal) for s in stores] == [
        ("Sunrise Supermarket", 3, "20-30 min", 120.0),
        ("MedCare Pharmacy", 2, "25-35 min", 75.0),
    ]
    assert res.action.proposal.subtotal == 195.0


async def test_concurrent_handles_are_independent(catalog_repo, cart):
    orch = make_orchestrator(catalog_repo, cart=cart)
    intents = [
        ParsedIntent(intent=AssistantIntent.FIND_PRODUCT, query="milk"),
        ParsedIntent(intent=AssistantIntent.ADD_TO_CART, query="add bananas"),
        ParsedIntent(intent=AssistantIntent.ADD_TO_CART, query="add paracetamol"),
        ParsedIntent(intent=AssistantIntent.HELP),
    ]
    results = await asyncio.gather(*(orch.handle(i) for i in intents))
    assert [r.action.type for r in results] == ["SHOW_PRODUCTS", "MESSAGE", "MESSAGE", "MESSAGE"]
    assert sorted(cart.calls) == [("add", "p1", 1, None), ("add", "p5", 1, None)]


async def test_any_in_stock_item_scores_for_unmatched_query(catalog_repo, cart):
    # in-stock and rating boosts alone keep a record above zero
    orch = make_orchestrator(catalog_repo, cart=cart)
    res = await orch.handle(ParsedIntent(intent=AssistantIntent.FIND_PRODUCT, query="unobtainium"))
    products = res.action.products
    assert products and products[0].confidence == 1.0
    assert all(p.confidence < 1.0 for p in products[1:])
