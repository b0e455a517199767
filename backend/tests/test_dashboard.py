from datetime import datetime, timedelta
from decimal import Decimal

import pytz

from crud.dashboard import timeframe_start
from models.audit_mixin import APP_TIMEZONE, local_now
from models.orders import Order, OrderStatus
from models.supplier_orders import SupplierOrder, SupplierOrderStatus
from schemas.dashboard import Timeframe
from tests.conftest import money


def add_order(db, customer, total, days_ago=0, status=OrderStatus.COMPLETED):
    order = Order(
        client_id=customer.id,
        status=status,
        total_amount=Decimal(total),
        created_at=local_now() - timedelta(days=days_ago),
    )
    db.add(order)
    db.commit()
    return order


def add_supplier_order(db, supplier, total, status):
    db.add(SupplierOrder(supplier_id=supplier.id, status=status, total_amount=Decimal(total)))
    db.commit()


def test_timeframe_start_is_local_midnight():
    tz = pytz.timezone(APP_TIMEZONE)
    now = tz.localize(datetime(2024, 3, 20, 15, 30))

    assert timeframe_start(Timeframe.TODAY, now).replace(tzinfo=None) == datetime(2024, 3, 20)
    assert timeframe_start(Timeframe.WEEK, now).replace(tzinfo=None) == datetime(2024, 3, 13)
    assert timeframe_start(Timeframe.MONTH, now).replace(tzinfo=None) == datetime(2024, 2, 19)
    assert timeframe_start(Timeframe.ALL, now) is None


def test_admin_revenue_follows_timeframe(client, db, make_client):
    customer = make_client()
    add_order(db, customer, "100.00")
    add_order(db, customer, "50.00")
    add_order(db, customer, "200.00", days_ago=10)
    add_order(db, customer, "999.00", status=OrderStatus.CANCELLED)

    today = client.get("/dashboard/admin").json()
    assert today["timeframe"] == "today"
    assert money(today["revenue"]) == Decimal("150.00")
    assert money(today["estimated_profit"]) == Decimal("45.00")
    assert today["total_orders"] == 4
    assert today["total_clients"] == 1

    by_timeframe = {key: money(value) for key, value in today["revenue_by_timeframe"].items()}
    assert by_timeframe == {
        "today": Decimal("150.00"),
        "week": Decimal("150.00"),
        "15days": Decimal("350.00"),
        "month": Decimal("350.00"),
        "all": Decimal("350.00"),
    }

    month = client.get("/dashboard/admin", params={"timeframe": "month"}).json()
    assert money(month["revenue"]) == Decimal("350.00")
    assert [money(point["total"]) for point in month["revenue_by_date"]] == [Decimal("200.00"), Decimal("150.00")]
    old_day = (local_now() - timedelta(days=10)).date()
    assert month["revenue_by_date"][0]["label"] == old_day.strftime("%b %d")


def test_admin_inventory_value(client, make_product):
    make_product(price="10.00", stock=3)
    make_product(price="2.50", stock=4)
    make_product(price="99.00", stock=0)

    body = client.get("/dashboard/admin", params={"timeframe": "all"}).json()

    assert money(body["inventory_value"]) == Decimal("40.00")
    assert body["total_products"] == 3
    assert money(body["revenue"]) == Decimal("0.00")
    assert body["revenue_by_date"] == []


def test_unknown_timeframe_is_rejected(client):
    assert client.get("/dashboard/admin", params={"timeframe": "year"}).status_code == 422


def test_supplier_dashboard_counts_only_received_spend(as_supplier, db, make_supplier, make_product):
    supplier = make_supplier()
    make_product()
    add_supplier_order(db, supplier, "120.00", SupplierOrderStatus.RECEIVED)
    add_supplier_order(db, supplier, "30.00", SupplierOrderStatus.RECEIVED)
    add_supplier_order(db, supplier, "500.00", SupplierOrderStatus.PENDING)
    add_supplier_order(db, supplier, "70.00", SupplierOrderStatus.CANCELLED)

    body = as_supplier.get("/dashboard/supplier").json()

    assert body == {
        "currency": "MAD",
        "total_suppliers": 1,
        "total_products": 1,
        "total_orders": 4,
        "pending_orders": 1,
        "total_spent": "150.00",
    }


def test_supplier_role_cannot_see_sales_figures(as_supplier):
    assert as_supplier.get("/dashboard/admin").status_code == 403
