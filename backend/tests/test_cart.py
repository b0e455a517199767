from decimal import Decimal
from types import SimpleNamespace

import pytest

from services.cart import Cart, CartItem


def product(id, name, price, selling_price=None):
    return SimpleNamespace(id=id, name=name, price=Decimal(price), selling_price=selling_price)


def test_total_is_sum_of_price_times_quantity():
    cart = Cart([
        CartItem(id="1", name="A", price=Decimal("70"), quantity=2),
        CartItem(id="4", name="B", price=Decimal("1300"), quantity=1),
    ])
    assert cart.total() == Decimal("1440.00")


def test_adding_same_product_twice_merges_into_one_line():
    cart = Cart()
    widget = product(1, "Widget", "5.00")
    cart.add(widget, quantity=2)
    cart.add(widget, quantity=3)

    assert len(cart) == 1
    assert cart.items[0].quantity == 5
    assert cart.total() == Decimal("25.00")


def test_add_uses_selling_price_then_purchase_price():
    cart = Cart()
    cart.add(product(1, "Sold", "4.00", selling_price=Decimal("6.50")))
    cart.add(product(2, "Cost only", "3.00"))
    cart.add(product(3, "Custom", "3.00"), price=Decimal("9.99"))

    prices = {item.id: item.price for item in cart}
    assert prices == {1: Decimal("6.50"), 2: Decimal("3.00"), 3: Decimal("9.99")}


def test_price_is_snapshotted_when_first_added():
    cart = Cart()
    widget = product(1, "Widget", "5.00")
    cart.add(widget)
    widget.price = Decimal("8.00")
    cart.add(widget)

    assert cart.items[0].price == Decimal("5.00")
    assert cart.total() == Decimal("10.00")


def test_add_rejects_non_positive_quantity():
    with pytest.raises(ValueError):
        Cart().add(product(1, "Widget", "5.00"), quantity=0)


@pytest.mark.parametrize("requested", [0, -3])
def test_set_quantity_never_drops_below_one(requested):
    cart = Cart()
    cart.add(product(1, "Widget", "5.00"), quantity=4)
    cart.set_quantity(1, requested)

    assert cart.items[0].quantity == 1
    assert cart.total() == Decimal("5.00")


def test_adjust_quantity_steps_and_clamps():
    cart = Cart()
    cart.add(product(1, "Widget", "2.00"))
    cart.adjust_quantity(1, +2)
    assert cart.items[0].quantity == 3
    cart.adjust_quantity(1, -10)
    assert cart.items[0].quantity == 1


def test_set_quantity_unknown_product_raises():
    with pytest.raises(KeyError):
        Cart().set_quantity(99, 2)


def test_remove_updates_total_and_ignores_missing_ids():
    cart = Cart()
    cart.add(product(1, "A", "1.00"), quantity=3)
    cart.add(product(2, "B", "2.50"))
    cart.remove(1)
    cart.remove(42)

    assert 1 not in cart
    assert [item.id for item in cart] == [2]
    assert cart.total() == Decimal("2.50")


def test_empty_cart_total_is_zero():
    assert Cart().total() == Decimal("0.00")
