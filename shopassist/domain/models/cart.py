from typing import Dict, Optional
from pydantic import BaseModel, Field


class CartLine(BaseModel):
    product_id: str
    store_id: str
    name: str
    price: float = Field(ge=0)
    quantity: int = Field(ge=1)
    variant: Optional[Dict[str, str]] = None

    model_config = {"frozen": True}

    @property
    def line_total(self) -> float:
        return self.price * self.quantity
