import pytest

from utils import s3_utils


@pytest.fixture
def offline_s3(monkeypatch):
    monkeypatch.setenv("AWS_ACCESS_KEY_ID", "testing")
    monkeypatch.setenv("AWS_SECRET_ACCESS_KEY", "testing")
    monkeypatch.setattr(s3_utils, "_s3_client", None)
    yield
    s3_utils._s3_client = None


def test_invoice_image_key_is_scoped_to_the_order():
    key = s3_utils.invoice_image_key(42, "Scan.JPG")

    assert key.startswith(f"{s3_utils.INVOICE_IMAGE_PREFIX}/42/")
    assert key.endswith(".jpg")


@pytest.mark.parametrize("filename", ["notes.txt", "no-extension"])
def test_invoice_image_key_rejects_other_files(filename):
    with pytest.raises(ValueError):
        s3_utils.invoice_image_key(1, filename)


def test_split_s3_path():
    bucket = s3_utils.S3_BUCKET_NAME
    assert s3_utils.split_s3_path(f"s3://{bucket}/a/b.png") == (bucket, "a/b.png")
    with pytest.raises(ValueError):
        s3_utils.split_s3_path("s3://someone-elses-bucket/a.png")


def test_presigned_upload_url(offline_s3):
    data = s3_utils.generate_presigned_upload_url(7, "invoice.png")

    assert data["s3_path"].startswith(f"s3://{s3_utils.S3_BUCKET_NAME}/{s3_utils.INVOICE_IMAGE_PREFIX}/7/")
    assert "X-Amz-Signature" in data["upload_url"] or "Signature" in data["upload_url"]


def test_upload_url_endpoint_rejects_unsupported_files(client, make_product, make_supplier):
    order_id = client.post("/supplier-orders/", json={
        "supplier_id": make_supplier().id,
        "items": [{"product_id": make_product().id, "quantity": 1, "price": "1.00"}],
    }).json()["order"]["id"]

    response = client.post(f"/supplier-orders/{order_id}/invoice-image-upload-url", json={"filename": "notes.txt"})

    assert response.status_code == 400
