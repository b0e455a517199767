from pydantic import BaseModel, Field, field_validator
from typing import Optional
from decimal import Decimal
from datetime import datetime
from schemas.validators import required_text

class ProductBase(BaseModel):
    name: str
    description: Optional[str] = None
    category_id: Optional[int] = None
    price: Decimal = Field(default=Decimal("0"), ge=0) # Purchase cost
    selling_price: Optional[Decimal] = Field(default=None, ge=0)
    image: Optional[str] = None

    @field_validator("name")
    @classmethod
    def _name_required(cls, v):
        return required_text(v)

class ProductCreate(ProductBase):
    stock: int = Field(default=0, ge=0)

class ProductUpdate(BaseModel):
    name: Optional[str] = None
    description: Optional[str] = None
    category_id: Optional[int] = None
    price: Optional[Decimal] = Field(default=None, ge=0)
    selling_price: Optional[Decimal] = Field(default=None, ge=0)
    image: Optional[str] = None
    # stock changes go through the stock endpoint or order reconciliation

    @field_validator("name")
    @classmethod
    def _name_not_blank(cls, v):
        return required_text(v) if v is not None else v

class ProductStockUpdate(BaseModel):
    stock: int = Field(ge=0)

class Product(ProductBase):
    id: int
    stock: int
    category_name: str = "Uncategorized"
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True

class ProductSnapshot(BaseModel):
    """Product state read once before a batch of stock/price updates."""
    id: int
    name: str
    stock: int
    price: Decimal
    selling_price: Optional[Decimal] = None

    class Config:
        from_attributes = True
