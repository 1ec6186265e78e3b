from enum import Enum
from typing import Dict, FrozenSet, Optional
from pydantic import BaseModel, Field


class AssistantIntent(str, Enum):
    FIND_PRODUCT = "FIND_PRODUCT"
    FIND_SIMILAR = "FIND_SIMILAR"
    FIND_BY_IMAGE = "FIND_BY_IMAGE"
    ADD_TO_CART = "ADD_TO_CART"
    UPDATE_QUANTITY = "UPDATE_QUANTITY"
    REPLACE_ITEM = "REPLACE_ITEM"
    TRACK_ORDER = "TRACK_ORDER"
    HELP = "HELP"
    VOICE_QUERY = "VOICE_QUERY"
    SPLIT_BASKET = "SPLIT_BASKET"


class ProductFilter(BaseModel):
    """Optional predicates, ANDed together. Unset fields impose no constraint."""
    category: Optional[str] = None
    price_min: Optional[float] = None
    price_max: Optional[float] = None
    distance_km: Optional[float] = Field(default=None, ge=0)
    store_ids: Optional[FrozenSet[str]] = None
    dietary: Optional[FrozenSet[str]] = None
    brand: Optional[str] = None
    in_stock_only: bool = False

    model_config = {"frozen": True}


class AssistantInput(BaseModel):
    text: Optional[str] = None
    image_uri: Optional[str] = None
    locale: Optional[str] = None

    model_config = {"frozen": True}


class ParsedIntent(BaseModel):
    intent: AssistantIntent
    query: Optional[str] = None
    image_uri: Optional[str] = None
    product_id: Optional[str] = None
    quantity: Optional[int] = Field(default=None, ge=1)
    variant: Optional[Dict[str, str]] = None
    filters: Optional[ProductFilter] = None
    locale: Optional[str] = None

    model_config = {"frozen": True}


class ProductCandidate(BaseModel):
    id: str
    store_id: str
    name: str
    category: str
    price: float
    rating: Optional[float] = None
    distance_km: Optional[float] = None
    image_url: Optional[str] = None
    in_stock: Optional[bool] = None
    confidence: float = Field(ge=0, le=1)

    model_config = {"frozen": True}
