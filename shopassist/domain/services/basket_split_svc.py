from __future__ import annotations
from typing import Dict, List, Optional
import logging

from shopassist.domain.models.actions import SplitProposal, StoreSplit
from shopassist.domain.models.cart import CartLine
from shopassist.domain.services.collaborators import CartService, StoreDirectory

logger = logging.getLogger(__name__)


class BasketSplitService:
    """
    Groups a multi-store cart into one sub-order per store.

    Per store: item_count = sum of quantities, subtotal = sum of price * qty,
    name/ETA from the store directory, flat delivery fee per store.
    Stores appear in the order their first item was added.
    Totals come from SplitProposal.from_stores, i.e. sums over the groups.
    """

    def __init__(
        self,
        cart: CartService,
        stores: StoreDirectory,
        delivery_fee_per_store: float = 5.0,
        default_eta: str = "30-45 min",
    ):
        self.cart = cart
        self.stores = stores
        self.delivery_fee_per_store = delivery_fee_per_store
        self.default_eta = default_eta

    def _group(self, lines: List[CartLine]) -> List[StoreSplit]:
        groups: Dict[str, List[CartLine]] = {}
        for line in lines:
            groups.setdefault(line.store_id, []).append(line)

        out: List[StoreSplit] = []
        for store_id, store_lines in groups.items():
            store = self.stores.get_store(store_id)
            out.append(
                StoreSplit(
                    store_id=store_id,
                    store_name=store.name if store else store_id,
                    item_count=sum(l.quantity for l in store_lines),
                    eta=(store.delivery_time if store and store.delivery_time else self.default_eta),
                    delivery_fee=self.delivery_fee_per_store,
                    subtotal=sum(l.line_total for l in store_lines),
                )
            )
        return out

    async def propose(self) -> Optional[SplitProposal]:
        lines = await self.cart.lines()
        if not lines:
            return None
        proposal = SplitProposal.from_stores(self._group(lines))
        logger.info(
            "basket split stores=%s items=%s delivery=%.2f subtotal=%.2f",
            len(proposal.stores), proposal.total_items, proposal.total_delivery, proposal.subtotal,
        )
        return proposal
