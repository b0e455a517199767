from sqlalchemy.orm import Session
from sqlalchemy import func
from datetime import datetime, time, timedelta
from decimal import Decimal
from typing import Dict, List, Optional
import os

import pytz

from models import Client, Order, Product, Supplier, SupplierOrder
from models.audit_mixin import APP_TIMEZONE, local_now
from models.orders import OrderStatus
from models.supplier_orders import SupplierOrderStatus
from schemas.dashboard import AdminDashboard, RevenuePoint, SupplierDashboard, Timeframe
from utils.formatting import to_money

# Rough margin applied to revenue for the profit card
PROFIT_MARGIN = Decimal(os.getenv("DASHBOARD_PROFIT_MARGIN", "0.30"))

TIMEFRAME_DAYS = {
    Timeframe.TODAY: 0,
    Timeframe.WEEK: 7,
    Timeframe.FIFTEEN_DAYS: 15,
    Timeframe.MONTH: 30,
}


def timeframe_start(timeframe: Timeframe, now: Optional[datetime] = None) -> Optional[datetime]:
    """Local midnight `n` days back; None means no lower bound."""
    if timeframe not in TIMEFRAME_DAYS:
        return None
    tz = pytz.timezone(APP_TIMEZONE)
    now = now or local_now()
    first_day = now.astimezone(tz).date() - timedelta(days=TIMEFRAME_DAYS[timeframe])
    return tz.localize(datetime.combine(first_day, time.min))


def _counted_orders(db: Session, start: Optional[datetime]):
    # Cancelled sales never brought money in
    query = db.query(Order).filter(Order.status != OrderStatus.CANCELLED)
    if start is not None:
        query = query.filter(Order.created_at >= start)
    return query


def get_revenue(db: Session, start: Optional[datetime] = None) -> Decimal:
    total = _counted_orders(db, start).with_entities(func.sum(Order.total_amount)).scalar()
    return to_money(total)


def get_revenue_by_date(db: Session, start: Optional[datetime] = None) -> List[RevenuePoint]:
    tz = pytz.timezone(APP_TIMEZONE)
    rows = _counted_orders(db, start).with_entities(Order.created_at, Order.total_amount).all()

    per_day: Dict = {}
    for created_at, amount in rows:
        if created_at is None:
            continue
        # SQLite hands back naive local times, PostgreSQL aware ones
        day = (created_at.astimezone(tz) if created_at.tzinfo else created_at).date()
        per_day[day] = per_day.get(day, Decimal("0")) + (amount or Decimal("0"))

    return [
        RevenuePoint(date=day, label=day.strftime("%b %d"), total=to_money(per_day[day]))
        for day in sorted(per_day)
    ]


def get_inventory_value(db: Session) -> Decimal:
    total = db.query(func.sum(Product.price * Product.stock)).scalar()
    return to_money(total)


def get_admin_dashboard(db: Session, timeframe: Timeframe, currency: str = "MAD") -> AdminDashboard:
    now = local_now()
    start = timeframe_start(timeframe, now)
    revenue = get_revenue(db, start)

    return AdminDashboard(
        timeframe=timeframe,
        currency=currency,
        total_clients=db.query(func.count(Client.id)).scalar() or 0,
        total_products=db.query(func.count(Product.id)).scalar() or 0,
        total_orders=db.query(func.count(Order.id)).scalar() or 0,
        revenue=revenue,
        revenue_by_timeframe={tf: get_revenue(db, timeframe_start(tf, now)) for tf in Timeframe},
        profit_margin=PROFIT_MARGIN,
        estimated_profit=to_money(revenue * PROFIT_MARGIN),
        inventory_value=get_inventory_value(db),
        revenue_by_date=get_revenue_by_date(db, start),
    )


def get_supplier_dashboard(db: Session, currency: str = "MAD") -> SupplierDashboard:
    total_spent = db.query(func.sum(SupplierOrder.total_amount)).filter(
        SupplierOrder.status == SupplierOrderStatus.RECEIVED
    ).scalar()

    return SupplierDashboard(
        currency=currency,
        total_suppliers=db.query(func.count(Supplier.id)).scalar() or 0,
        total_products=db.query(func.count(Product.id)).scalar() or 0,
        total_orders=db.query(func.count(SupplierOrder.id)).scalar() or 0,
        pending_orders=db.query(func.count(SupplierOrder.id)).filter(
            SupplierOrder.status == SupplierOrderStatus.PENDING
        ).scalar() or 0,
        total_spent=to_money(total_spent),
    )
