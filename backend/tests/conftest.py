import os
import tempfile

# Point the app at an in-memory database before anything imports `database`
os.environ["DATABASE_URL"] = "sqlite://"
os.environ.setdefault("LOG_DIR", tempfile.mkdtemp(prefix="inventory-logs-"))

from decimal import Decimal

import pytest
from fastapi.testclient import TestClient

from database import Base, SessionLocal, engine
import models
from main import app
from schemas.users import UserContext, UserRole
from utils.auth_utils import get_current_user


ADMIN = UserContext(id="1", name="Admin", email="admin@example.com", role=UserRole.ADMIN)
SUPPLIER = UserContext(id="2", name="Supplier Desk", email="supplier@example.com", role=UserRole.SUPPLIER)


@pytest.fixture
def db():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def client(db):
    app.dependency_overrides[get_current_user] = lambda: ADMIN
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def as_supplier(client):
    app.dependency_overrides[get_current_user] = lambda: SUPPLIER
    return client


@pytest.fixture
def make_product(db):
    def _make(name="Widget", price="10.00", stock=0, selling_price=None, category_id=None):
        product = models.Product(
            name=name,
            price=Decimal(str(price)),
            selling_price=Decimal(str(selling_price)) if selling_price is not None else None,
            stock=stock,
            category_id=category_id,
        )
        db.add(product)
        db.commit()
        db.refresh(product)
        return product
    return _make


@pytest.fixture
def make_client(db):
    def _make(name="Acme Client", phone="0612345678"):
        record = models.Client(name=name, phone=phone)
        db.add(record)
        db.commit()
        db.refresh(record)
        return record
    return _make


@pytest.fixture
def make_supplier(db):
    def _make(name="Atlas Supply"):
        record = models.Supplier(name=name)
        db.add(record)
        db.commit()
        db.refresh(record)
        return record
    return _make


def money(value) -> Decimal:
    """Decimals come back from the API as JSON strings."""
    return Decimal(str(value))
