def test_supplier_crud(as_supplier):
    created = as_supplier.post("/suppliers/", json={"name": "Atlas", "contact_person": "Omar", "phone": ""})
    assert created.status_code == 201
    supplier_id = created.json()["id"]
    assert created.json()["phone"] is None

    updated = as_supplier.patch(f"/suppliers/{supplier_id}", json={"email": "sales@atlas.example"})
    assert updated.json()["email"] == "sales@atlas.example"
    assert updated.json()["contact_person"] == "Omar"

    assert [row["name"] for row in as_supplier.get("/suppliers/", params={"search": "atl"}).json()] == ["Atlas"]
    assert as_supplier.delete(f"/suppliers/{supplier_id}").status_code == 204


def test_invalid_email_is_rejected(client):
    assert client.post("/suppliers/", json={"name": "Atlas", "email": "not-an-email"}).status_code == 422


def test_delete_supplier_with_orders_is_refused(client, make_supplier, make_product):
    supplier = make_supplier()
    client.post("/supplier-orders/", json={
        "supplier_id": supplier.id,
        "items": [{"product_id": make_product().id, "quantity": 1, "price": "1.00"}],
    })

    response = client.delete(f"/suppliers/{supplier.id}")

    assert response.status_code == 409
    assert response.json()["detail"] == "Cannot delete supplier because it's used by 1 supplier orders"
