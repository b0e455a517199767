from crud.audit_log import get_audit_logs
from models.clients import Client


def test_create_and_search_clients(client):
    created = client.post("/clients/", json={"name": "  Sara  ", "phone": "0612345678", "email": ""})
    client.post("/clients/", json={"name": "Youssef"})

    assert created.status_code == 201
    assert created.json()["name"] == "Sara"
    assert created.json()["email"] is None
    assert [row["name"] for row in client.get("/clients/", params={"search": "sar"}).json()] == ["Sara"]


def test_blank_name_is_rejected(client):
    assert client.post("/clients/", json={"name": "   "}).status_code == 422


def test_update_client_writes_audit_entry(client, db, make_client):
    record = make_client(name="Old Name")

    response = client.patch(f"/clients/{record.id}", json={"name": "New Name"})

    assert response.json()["name"] == "New Name"
    logs = get_audit_logs(db, "clients", record.id)
    assert [log.action for log in logs] == ["UPDATE"]
    assert logs[0].old_values["name"] == "Old Name"
    assert logs[0].changed_by == "admin@example.com"


def test_delete_client_with_orders_is_refused(client, db, make_client, make_product):
    record = make_client()
    client.post("/orders/", json={"client_id": record.id, "items": [{"product_id": make_product(stock=2).id}]})

    response = client.delete(f"/clients/{record.id}")

    assert response.status_code == 409
    assert response.json()["detail"] == "Cannot delete client because it's used by 1 orders"
    db.expire_all()
    assert db.get(Client, record.id) is not None


def test_delete_client_without_orders(client, db, make_client):
    record = make_client()

    assert client.delete(f"/clients/{record.id}").status_code == 204
    assert client.get(f"/clients/{record.id}").status_code == 404
    assert [log.action for log in get_audit_logs(db, "clients", record.id)] == ["DELETE"]


def test_missing_client_is_404(client):
    assert client.get("/clients/999").status_code == 404
    assert client.patch("/clients/999", json={"name": "x"}).status_code == 404
    assert client.delete("/clients/999").status_code == 404


def test_supplier_role_cannot_manage_clients(as_supplier):
    assert as_supplier.get("/clients/").status_code == 403
