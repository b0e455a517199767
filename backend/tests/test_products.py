from decimal import Decimal

from tests.conftest import money


def test_create_product_with_category(client):
    category_id = client.post("/categories/", json={"name": "Oils"}).json()["id"]

    response = client.post("/products/", json={
        "name": "Olive Oil", "price": "45.00", "selling_price": "60.00", "stock": 12, "category_id": category_id,
    })

    assert response.status_code == 201
    body = response.json()
    assert body["category_name"] == "Oils"
    assert body["stock"] == 12
    assert money(body["selling_price"]) == Decimal("60.00")


def test_uncategorized_product_and_unknown_category(client):
    plain = client.post("/products/", json={"name": "Water"}).json()
    assert plain["category_name"] == "Uncategorized"
    assert plain["stock"] == 0

    assert client.post("/products/", json={"name": "Ghost", "category_id": 77}).status_code == 400


def test_negative_values_are_rejected(client):
    assert client.post("/products/", json={"name": "Bad", "stock": -1}).status_code == 422
    assert client.post("/products/", json={"name": "Bad", "price": "-5"}).status_code == 422


def test_search_and_filter(client, make_product):
    make_product(name="Green Tea")
    make_product(name="Black Tea")
    make_product(name="Coffee")

    names = [row["name"] for row in client.get("/products/", params={"search": "tea"}).json()]

    assert names == ["Black Tea", "Green Tea"]


def test_update_does_not_touch_stock(client, make_product):
    product = make_product(name="Rice", stock=7)

    response = client.patch(f"/products/{product.id}", json={"selling_price": "12.50", "stock": 100})

    assert money(response.json()["selling_price"]) == Decimal("12.50")
    assert response.json()["stock"] == 7


def test_manual_stock_set(client, make_product):
    product = make_product(stock=7)

    assert client.patch(f"/products/{product.id}/stock", json={"stock": 3}).json()["stock"] == 3
    assert client.patch(f"/products/{product.id}/stock", json={"stock": -1}).status_code == 422


def test_delete_product_used_in_sales_is_refused(client, make_client, make_product):
    product = make_product(stock=5)
    client.post("/orders/", json={"client_id": make_client().id, "items": [{"product_id": product.id}]})

    response = client.delete(f"/products/{product.id}")

    assert response.status_code == 409
    assert response.json()["detail"].startswith("Cannot delete product because it's used in 1 sales/orders")


def test_delete_product_used_in_supplier_orders_is_refused(client, make_supplier, make_product):
    product = make_product()
    client.post("/supplier-orders/", json={
        "supplier_id": make_supplier().id,
        "items": [{"product_id": product.id, "quantity": 1, "price": "1.00"}],
    })

    response = client.delete(f"/products/{product.id}")

    assert response.status_code == 409
    assert "1 supplier orders" in response.json()["detail"]


def test_delete_unused_product(client, make_product):
    product = make_product()

    assert client.delete(f"/products/{product.id}").status_code == 204
    assert client.get(f"/products/{product.id}").status_code == 404


def test_supplier_can_read_but_not_delete(as_supplier, make_product):
    product = make_product()

    assert as_supplier.get(f"/products/{product.id}").status_code == 200
    assert as_supplier.delete(f"/products/{product.id}").status_code == 403
