from decimal import Decimal

from crud.products import update_product_fields
from models.products import Product
from schemas.reconciliation import PriceChange
from schemas.supplier_order_items import SupplierOrderItemCreateRequest
from services.reconciliation import (
    load_product_snapshot,
    price_change_notification,
    reconcile_sale,
    reconcile_supplier_order,
)


def line(product, quantity, price):
    return SupplierOrderItemCreateRequest(product_id=product.id, quantity=quantity, price=Decimal(price))


def stored(db, product):
    db.expire_all()
    return db.get(Product, product.id)


def test_stock_is_incremented_not_overwritten(db, make_product):
    product = make_product(name="Olive Oil", price="10.00", stock=10)
    lines = [line(product, 5, "10.00")]

    result = reconcile_supplier_order(db, lines, load_product_snapshot(db, [product.id]))

    assert stored(db, product).stock == 15
    assert [(s.old_stock, s.new_stock) for s in result.succeeded] == [(10, 15)]
    assert result.failed == []


def test_price_change_produces_one_notification_entry(db, make_product):
    product = make_product(name="Olive Oil", price="10.00", stock=0)

    result = reconcile_supplier_order(db, [line(product, 1, "12.00")], load_product_snapshot(db, [product.id]))

    assert stored(db, product).price == Decimal("12.00")
    assert len(result.price_changes) == 1
    change = result.price_changes[0]
    assert (change.name, change.old_price, change.new_price) == ("Olive Oil", Decimal("10.00"), Decimal("12.00"))
    assert result.notification == "Updated price for 1 product: Olive Oil: 10.00 MAD → 12.00 MAD"


def test_unchanged_price_gives_no_notification(db, make_product):
    product = make_product(name="Flour", price="4.50", stock=2)

    result = reconcile_supplier_order(db, [line(product, 3, "4.50")], load_product_snapshot(db, [product.id]))

    assert result.price_changes == []
    assert result.notification is None
    assert stored(db, product).price == Decimal("4.50")


def test_failed_update_does_not_stop_the_batch(db, make_product):
    first = make_product(name="First", price="1.00", stock=1)
    second = make_product(name="Second", price="2.00", stock=2)
    third = make_product(name="Third", price="3.00", stock=3)
    lines = [line(first, 1, "1.00"), line(second, 1, "2.00"), line(third, 1, "3.00")]

    def flaky_update(db, product_id, updates, user_id=None):
        if product_id == first.id:
            raise RuntimeError("update rejected")
        return update_product_fields(db, product_id, updates, user_id)

    result = reconcile_supplier_order(
        db, lines, load_product_snapshot(db, [first.id, second.id, third.id]), update_product=flaky_update
    )

    assert stored(db, first).stock == 1
    assert stored(db, second).stock == 3
    assert stored(db, third).stock == 4
    assert [f.product_id for f in result.failed] == [first.id]
    assert result.failed[0].error == "update rejected"
    assert result.has_failures
    assert {s.product_id for s in result.succeeded} == {second.id, third.id}


def test_repeated_product_accumulates(db, make_product):
    product = make_product(name="Sugar", price="6.00", stock=10)
    lines = [line(product, 5, "6.00"), line(product, 2, "6.00")]

    reconcile_supplier_order(db, lines, load_product_snapshot(db, [product.id]))

    assert stored(db, product).stock == 17


def test_missing_product_is_reported_as_failure(db, make_product):
    product = make_product(stock=1)
    lines = [SupplierOrderItemCreateRequest(product_id=9999, quantity=1, price=Decimal("1")), line(product, 1, "10.00")]

    result = reconcile_supplier_order(db, lines, load_product_snapshot(db, [9999, product.id]))

    assert [f.product_id for f in result.failed] == [9999]
    assert stored(db, product).stock == 2


def test_sale_decrements_stock_floored_at_zero_and_updates_selling_price(db, make_product):
    product = make_product(name="Tea", price="3.00", selling_price="5.00", stock=2)
    lines = [SupplierOrderItemCreateRequest(product_id=product.id, quantity=5, price=Decimal("6.00"))]

    result = reconcile_sale(db, lines, load_product_snapshot(db, [product.id]))

    refreshed = stored(db, product)
    assert refreshed.stock == 0
    assert refreshed.selling_price == Decimal("6.00")
    assert refreshed.price == Decimal("3.00")
    assert result.price_changes[0].old_price == Decimal("5.00")


def test_notification_lists_every_change():
    changes = [
        PriceChange(product_id=1, name="Rice", old_price=Decimal("8"), new_price=Decimal("9")),
        PriceChange(product_id=2, name="Salt", old_price=Decimal("2"), new_price=Decimal("1.5")),
    ]

    message = price_change_notification(changes, currency="EUR")

    assert message == "Updated price for 2 products: Rice: 8.00 EUR → 9.00 EUR; Salt: 2.00 EUR → 1.50 EUR"
    assert price_change_notification([]) is None
