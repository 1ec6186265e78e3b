from __future__ import annotations
from typing import Annotated, Dict, List, Literal, Optional, Sequence, Union
import math
from pydantic import BaseModel, Field, model_validator

from shopassist.domain.models.intents import ProductCandidate


class StoreSplit(BaseModel):
    store_id: str
    store_name: str
    item_count: int = Field(ge=0)
    eta: str
    delivery_fee: float = Field(ge=0)
    subtotal: float = Field(ge=0)

    model_config = {"frozen": True}


class SplitProposal(BaseModel):
    """
    One sub-order per store. Totals are always the sums over `stores`;
    build with `from_stores` rather than passing totals by hand.
    """
    stores: List[StoreSplit]
    total_delivery: float
    total_items: int
    subtotal: float

    model_config = {"frozen": True}

    @classmethod
    def from_stores(cls, stores: Sequence[StoreSplit]) -> "SplitProposal":
        return cls(
            stores=list(stores),
            total_delivery=sum(s.delivery_fee for s in stores),
            total_items=sum(s.item_count for s in stores),
            subtotal=sum(s.subtotal for s in stores),
        )

    @model_validator(mode="after")
    def _check_totals(self) -> "SplitProposal":
        if self.total_items != sum(s.item_count for s in self.stores):
            raise ValueError("total_items must equal the sum of per-store item counts")
        if not math.isclose(self.total_delivery, sum(s.delivery_fee for s in self.stores), abs_tol=1e-9):
            raise ValueError("total_delivery must equal the sum of per-store delivery fees")
        if not math.isclose(self.subtotal, sum(s.subtotal for s in self.stores), abs_tol=1e-9):
            raise ValueError("subtotal must equal the sum of per-store subtotals")
        return self


class ShowProductsAction(BaseModel):
    type: Literal["SHOW_PRODUCTS"] = "SHOW_PRODUCTS"
    products: List[ProductCandidate]
    model_config = {"frozen": True}


class AddToCartAction(BaseModel):
    type: Literal["ADD_TO_CART"] = "ADD_TO_CART"
    product_id: str
    quantity: int = Field(ge=1)
    variant: Optional[Dict[str, str]] = None
    model_config = {"frozen": True}


class UpdateCartQtyAction(BaseModel):
    type: Literal["UPDATE_CART_QTY"] = "UPDATE_CART_QTY"
    product_id: str
    quantity: int = Field(ge=1)
    model_config = {"frozen": True}


class MessageAction(BaseModel):
    type: Literal["MESSAGE"] = "MESSAGE"
    text: str
    model_config = {"frozen": True}


class SplitProposalAction(BaseModel):
    type: Literal["SPLIT_PROPOSAL"] = "SPLIT_PROPOSAL"
    proposal: SplitProposal
    model_config = {"frozen": True}


AssistantAction = Annotated[
    Union[ShowProductsAction, AddToCartAction, UpdateCartQtyAction, MessageAction, SplitProposalAction],
    Field(discriminator="type"),
]


class AssistantResponse(BaseModel):
    action: AssistantAction
    model_config = {"frozen": True}
