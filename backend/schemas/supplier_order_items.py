from pydantic import BaseModel, Field
from decimal import Decimal

class SupplierOrderItemCreateRequest(BaseModel):
    product_id: int
    quantity: int = Field(default=1, ge=1)
    price: Decimal = Field(ge=0) # Negotiated purchase price

class SupplierOrderItem(BaseModel):
    id: int
    supplier_order_id: int
    product_id: int
    product_name: str
    quantity: int
    price: Decimal
    total: Decimal

    class Config:
        from_attributes = True
