from pydantic import BaseModel
from typing import List, Optional
from decimal import Decimal

class StockAdjustment(BaseModel):
    product_id: int
    name: str
    old_stock: int
    new_stock: int

class PriceChange(BaseModel):
    product_id: int
    name: str
    old_price: Decimal
    new_price: Decimal

class FailedAdjustment(BaseModel):
    product_id: int
    name: Optional[str] = None
    error: str

class ReconciliationResult(BaseModel):
    """Outcome of a best-effort batch of per-product updates."""
    succeeded: List[StockAdjustment] = []
    failed: List[FailedAdjustment] = []
    price_changes: List[PriceChange] = []
    notification: Optional[str] = None

    @property
    def has_failures(self) -> bool:
        return bool(self.failed)
