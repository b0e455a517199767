def test_category_names_are_unique_case_insensitively(client):
    assert client.post("/categories/", json={"name": "Spices"}).status_code == 201
    duplicate = client.post("/categories/", json={"name": "spices"})

    assert duplicate.status_code == 400


def test_rename_category(client):
    category_id = client.post("/categories/", json={"name": "Oils"}).json()["id"]
    client.post("/categories/", json={"name": "Flours"})

    assert client.patch(f"/categories/{category_id}", json={"name": "Flours"}).status_code == 400
    renamed = client.patch(f"/categories/{category_id}", json={"description": "Cooking oils"})
    assert renamed.json()["description"] == "Cooking oils"


def test_delete_category_in_use_is_refused(client, make_product):
    category_id = client.post("/categories/", json={"name": "Oils"}).json()["id"]
    make_product(name="Olive Oil", category_id=category_id)

    response = client.delete(f"/categories/{category_id}")

    assert response.status_code == 409
    assert response.json()["detail"] == "Cannot delete category because it's used by 1 products"


def test_delete_unused_category(client):
    category_id = client.post("/categories/", json={"name": "Empty"}).json()["id"]

    assert client.delete(f"/categories/{category_id}").status_code == 204
    assert client.get(f"/categories/{category_id}").status_code == 404
