from typing import Iterable, Optional
from sqlalchemy.orm import Session, selectinload
from models.products import Product
from models.order_items import OrderItem
from models.supplier_order_items import SupplierOrderItem
from schemas.products import ProductCreate, ProductUpdate
from services.exceptions import RecordNotFoundError, ReferentialIntegrityError
from crud.audit_log import create_audit_log
from schemas.audit_log import AuditAction, AuditLogCreate
from utils import sqlalchemy_to_dict
from models.audit_mixin import local_now

# Columns the reconciliation loop may write
RECONCILED_FIELDS = {"stock", "price", "selling_price"}

def get_product(db: Session, product_id: int):
    return (
        db.query(Product)
        .options(selectinload(Product.category))
        .filter(Product.id == product_id)
        .first()
    )

def get_products(db: Session, search: Optional[str] = None, category_id: Optional[int] = None,
                 skip: int = 0, limit: int = 100):
    query = db.query(Product).options(selectinload(Product.category))
    if search:
        query = query.filter(Product.name.ilike(f"%{search}%"))
    if category_id:
        query = query.filter(Product.category_id == category_id)
    return query.order_by(Product.name).offset(skip).limit(limit).all()

def get_products_by_ids(db: Session, product_ids: Iterable[int]):
    ids = set(product_ids)
    if not ids:
        return []
    return db.query(Product).filter(Product.id.in_(ids)).all()

def create_product(db: Session, product: ProductCreate, user_id: str):
    db_product = Product(**product.model_dump(), created_by=user_id)
    db.add(db_product)
    db.commit()
    db.refresh(db_product)
    return db_product

def update_product(db: Session, db_product: Product, product: ProductUpdate, user_id: str):
    old_values = sqlalchemy_to_dict(db_product)
    for key, value in product.model_dump(exclude_unset=True).items():
        setattr(db_product, key, value)
    db_product.updated_at = local_now()
    db_product.updated_by = user_id
    db.commit()
    db.refresh(db_product)
    create_audit_log(db, AuditLogCreate(
        table_name='products',
        record_id=db_product.id,
        changed_by=user_id,
        action=AuditAction.UPDATE,
        old_values=old_values,
        new_values=sqlalchemy_to_dict(db_product)
    ))
    return db_product

def update_product_fields(db: Session, product_id: int, updates: dict, user_id: str = None):
    """
    Write stock/price fields of a single product and commit.

    This is the per-product update used by order reconciliation; each call is
    its own unit of work so one failing product does not undo the others.
    """
    unknown = set(updates) - RECONCILED_FIELDS
    if unknown:
        raise ValueError(f"Unsupported product fields: {sorted(unknown)}")
    db_product = db.query(Product).filter(Product.id == product_id).first()
    if db_product is None:
        raise RecordNotFoundError(f"Product {product_id} not found")
    for key, value in updates.items():
        setattr(db_product, key, value)
    db_product.updated_at = local_now()
    db_product.updated_by = user_id
    db.commit()
    db.refresh(db_product)
    return db_product

def set_product_stock(db: Session, db_product: Product, stock: int, user_id: str):
    old_values = sqlalchemy_to_dict(db_product)
    db_product.stock = stock
    db_product.updated_at = local_now()
    db_product.updated_by = user_id
    db.commit()
    db.refresh(db_product)
    create_audit_log(db, AuditLogCreate(
        table_name='products',
        record_id=db_product.id,
        changed_by=user_id,
        action=AuditAction.STOCK,
        old_values=old_values,
        new_values=sqlalchemy_to_dict(db_product)
    ))
    return db_product

def delete_product(db: Session, db_product: Product, user_id: str):
    sales_using = db.query(OrderItem).filter(OrderItem.product_id == db_product.id).count()
    if sales_using > 0:
        raise ReferentialIntegrityError(
            f"Cannot delete product because it's used in {sales_using} sales/orders. Consider updating the stock to 0 instead."
        )
    supplier_items_using = db.query(SupplierOrderItem).filter(SupplierOrderItem.product_id == db_product.id).count()
    if supplier_items_using > 0:
        raise ReferentialIntegrityError(
            f"Cannot delete product because it's used in {supplier_items_using} supplier orders. Consider updating the stock to 0 instead."
        )

    old_values = sqlalchemy_to_dict(db_product)
    record_id = db_product.id
    db.delete(db_product)
    db.commit()
    create_audit_log(db, AuditLogCreate(
        table_name='products',
        record_id=record_id,
        changed_by=user_id,
        action=AuditAction.DELETE,
        old_values=old_values,
        new_values=None
    ))
    return True
