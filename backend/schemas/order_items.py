from pydantic import BaseModel, Field
from typing import Optional
from decimal import Decimal

class OrderItemCreateRequest(BaseModel):
    product_id: int
    quantity: int = Field(default=1, ge=1)
    # Defaults to the product's selling price (or purchase price) when omitted
    price: Optional[Decimal] = Field(default=None, ge=0)

class OrderItem(BaseModel):
    id: int
    order_id: int
    product_id: int
    product_name: str
    quantity: int
    price: Decimal
    line_total: Decimal

    class Config:
        from_attributes = True
