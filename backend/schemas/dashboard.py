from pydantic import BaseModel
from typing import Dict, List
from datetime import date
from decimal import Decimal
import enum

class Timeframe(str, enum.Enum):
    TODAY = "today"
    WEEK = "week"
    FIFTEEN_DAYS = "15days"
    MONTH = "month"
    ALL = "all"

class RevenuePoint(BaseModel):
    date: date
    label: str # e.g. "Mar 04"
    total: Decimal

class AdminDashboard(BaseModel):
    timeframe: Timeframe
    currency: str
    total_clients: int
    total_products: int
    total_orders: int
    revenue: Decimal
    revenue_by_timeframe: Dict[Timeframe, Decimal]
    profit_margin: Decimal
    estimated_profit: Decimal
    inventory_value: Decimal # Sum of purchase price x stock
    revenue_by_date: List[RevenuePoint] = []

class SupplierDashboard(BaseModel):
    currency: str
    total_suppliers: int
    total_products: int
    total_orders: int
    pending_orders: int
    total_spent: Decimal # Received supplier orders only
