import pytest
from pydantic import ValidationError

from crud.audit_log import get_audit_logs
from models.app_config import AppConfig
from schemas.audit_log import AuditAction, AuditLogCreate


def test_settings_history_records_create_then_update(client, db):
    client.put("/configurations/currency", json={"value": "EUR"})
    client.put("/configurations/currency", json={"value": "USD"})
    config_id = db.query(AppConfig).filter(AppConfig.name == "currency").one().id

    history = get_audit_logs(db, "app_config", config_id)
    assert [log.action for log in history] == ["CREATE", "UPDATE"]
    assert history[1].old_values["value"] == "EUR"
    assert history[1].new_values["value"] == "USD"

    updates = get_audit_logs(db, "app_config", config_id, action=AuditAction.UPDATE)
    assert [log.id for log in updates] == [history[1].id]


def test_manual_stock_correction_is_logged_as_stock(client, db, make_product):
    product = make_product(stock=7)

    client.patch(f"/products/{product.id}/stock", json={"stock": 2})

    (entry,) = get_audit_logs(db, "products", product.id, action="STOCK")
    assert (entry.old_values["stock"], entry.new_values["stock"]) == (7, 2)
    assert entry.changed_by == "admin@example.com"


def test_unknown_action_is_rejected():
    with pytest.raises(ValidationError):
        AuditLogCreate(table_name="products", record_id=1, changed_by="1", action="INSERT")
