from pydantic import BaseModel
from typing import Optional, List, Union
from datetime import datetime
from decimal import Decimal
from models.supplier_orders import SupplierOrderStatus
from schemas.supplier_order_items import SupplierOrderItemCreateRequest, SupplierOrderItem
from schemas.suppliers import SupplierSummary
from schemas.reconciliation import ReconciliationResult

class SupplierOrderCreate(BaseModel):
    # Optional here so a missing supplier is reported as a business validation error
    supplier_id: Optional[int] = None
    invoice_number: Optional[str] = None
    invoice_image: Optional[Union[str, List[str]]] = None
    notes: Optional[str] = None
    items: List[SupplierOrderItemCreateRequest] = []

class SupplierOrderEdit(SupplierOrderCreate):
    # Replaces the whole item set; status is changed via the status endpoint
    pass

class SupplierOrderStatusUpdate(BaseModel):
    status: SupplierOrderStatus

class SupplierOrder(BaseModel):
    id: int
    supplier_id: int
    supplier: Optional[SupplierSummary] = None
    invoice_number: Optional[str] = None
    invoice_image: Optional[str] = None
    invoice_images: List[str] = []
    total_amount: Decimal
    status: SupplierOrderStatus
    notes: Optional[str] = None
    created_by: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    items: List[SupplierOrderItem] = []

    class Config:
        from_attributes = True

class SupplierOrderSummary(BaseModel):
    """Row of the supplier order list; only the columns the list shows."""
    id: int
    status: SupplierOrderStatus
    total_amount: Decimal
    created_at: Optional[datetime] = None
    invoice_number: Optional[str] = None
    supplier_id: int
    supplier: Optional[SupplierSummary] = None

    class Config:
        from_attributes = True

class SupplierOrderSaveResult(BaseModel):
    order: SupplierOrder
    items_saved: bool
    reconciliation: Optional[ReconciliationResult] = None
    warnings: List[str] = []

class InvoiceImageUploadRequest(BaseModel):
    filename: str
