from pydantic import BaseModel
from typing import Optional, List
from datetime import datetime
from decimal import Decimal
from models.orders import OrderStatus
from schemas.order_items import OrderItemCreateRequest, OrderItem
from schemas.clients import ClientSummary
from schemas.invoices import InvoiceLanguage
from schemas.reconciliation import ReconciliationResult

class OrderCreate(BaseModel):
    # Optional here so a missing client is reported as a business validation error
    client_id: Optional[int] = None
    invoice_number: Optional[str] = None
    status: OrderStatus = OrderStatus.COMPLETED
    items: List[OrderItemCreateRequest] = []
    language: Optional[InvoiceLanguage] = None
    share_via_whatsapp: bool = False

class OrderStatusUpdate(BaseModel):
    status: OrderStatus

class Order(BaseModel):
    id: int
    invoice_number: Optional[str] = None
    client_id: int
    client: Optional[ClientSummary] = None
    status: OrderStatus
    total_amount: Decimal
    created_by: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    items: List[OrderItem] = []

    class Config:
        from_attributes = True

class CheckoutResult(BaseModel):
    order: Order
    items_saved: bool
    stock_updates: Optional[ReconciliationResult] = None
    invoice_html: Optional[str] = None
    share_url: Optional[str] = None
    warnings: List[str] = []

class ShareLink(BaseModel):
    url: str
    message: str
