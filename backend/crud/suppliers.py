from typing import Optional
from sqlalchemy.orm import Session
from models.suppliers import Supplier
from models.supplier_orders import SupplierOrder
from schemas.suppliers import SupplierCreate, SupplierUpdate
from services.exceptions import ReferentialIntegrityError
from crud.audit_log import create_audit_log
from schemas.audit_log import AuditAction, AuditLogCreate
from utils import sqlalchemy_to_dict
from models.audit_mixin import local_now

def get_supplier(db: Session, supplier_id: int):
    return db.query(Supplier).filter(Supplier.id == supplier_id).first()

def get_suppliers(db: Session, search: Optional[str] = None, skip: int = 0, limit: int = 100):
    query = db.query(Supplier)
    if search:
        query = query.filter(Supplier.name.ilike(f"%{search}%"))
    return query.order_by(Supplier.name).offset(skip).limit(limit).all()

def create_supplier(db: Session, supplier: SupplierCreate, user_id: str):
    db_supplier = Supplier(**supplier.model_dump(), created_by=user_id)
    db.add(db_supplier)
    db.commit()
    db.refresh(db_supplier)
    return db_supplier

def update_supplier(db: Session, db_supplier: Supplier, supplier: SupplierUpdate, user_id: str):
    old_values = sqlalchemy_to_dict(db_supplier)
    for key, value in supplier.model_dump(exclude_unset=True).items():
        setattr(db_supplier, key, value)
    db_supplier.updated_at = local_now()
    db_supplier.updated_by = user_id
    db.commit()
    db.refresh(db_supplier)
    create_audit_log(db, AuditLogCreate(
        table_name='suppliers',
        record_id=db_supplier.id,
        changed_by=user_id,
        action=AuditAction.UPDATE,
        old_values=old_values,
        new_values=sqlalchemy_to_dict(db_supplier)
    ))
    return db_supplier

def count_supplier_orders(db: Session, supplier_id: int) -> int:
    return db.query(SupplierOrder).filter(SupplierOrder.supplier_id == supplier_id).count()

def delete_supplier(db: Session, db_supplier: Supplier, user_id: str):
    order_count = count_supplier_orders(db, db_supplier.id)
    if order_count > 0:
        raise ReferentialIntegrityError(f"Cannot delete supplier because it's used by {order_count} supplier orders")

    old_values = sqlalchemy_to_dict(db_supplier)
    record_id = db_supplier.id
    db.delete(db_supplier)
    db.commit()
    create_audit_log(db, AuditLogCreate(
        table_name='suppliers',
        record_id=record_id,
        changed_by=user_id,
        action=AuditAction.DELETE,
        old_values=old_values,
        new_values=None
    ))
    return True
