def test_store_settings_defaults(client):
    assert client.get("/configurations/store").json() == {
        "currency": "MAD",
        "share_country_code": "+212",
        "share_domain": "wa.me",
        "invoice_language": "ar",
    }


def test_put_config_upserts(client):
    assert client.put("/configurations/invoice_language", json={"value": "en"}).status_code == 200
    assert client.put("/configurations/invoice_language", json={"value": "ar"}).json()["value"] == "ar"

    rows = client.get("/configurations/", params={"name": "invoice_language"}).json()
    assert [(row["name"], row["value"]) for row in rows] == [("invoice_language", "ar")]


def test_invalid_settings_are_rejected(client):
    assert client.put("/configurations/invoice_language", json={"value": "fr"}).status_code == 400
    assert client.put("/configurations/currency", json={"value": "  "}).status_code == 400


def test_only_admin_changes_settings(as_supplier):
    assert as_supplier.put("/configurations/currency", json={"value": "EUR"}).status_code == 403
