from typing import List, Optional
from sqlalchemy.orm import Session, selectinload, load_only
from models.supplier_orders import SupplierOrder, SupplierOrderStatus
from models.supplier_order_items import SupplierOrderItem
from models.suppliers import Supplier
from schemas.supplier_order_items import SupplierOrderItemCreateRequest
from crud.audit_log import create_audit_log
from schemas.audit_log import AuditAction, AuditLogCreate
from utils import sqlalchemy_to_dict
from utils.formatting import to_money
from models.audit_mixin import local_now

SUMMARY_PAGE_SIZE = 20

def create_supplier_order(db: Session, data: dict, user_id: str = None) -> SupplierOrder:
    db_order = SupplierOrder(**data, created_by=user_id)
    db.add(db_order)
    db.commit()
    db.refresh(db_order)
    return db_order

def create_supplier_order_items(db: Session, supplier_order_id: int,
                                lines: List[SupplierOrderItemCreateRequest]) -> List[SupplierOrderItem]:
    db_items = [
        SupplierOrderItem(
            supplier_order_id=supplier_order_id,
            product_id=line.product_id,
            quantity=line.quantity,
            price=to_money(line.price),
            total=to_money(line.price * line.quantity),
        )
        for line in lines
    ]
    db.add_all(db_items)
    try:
        db.commit()
    except Exception:
        db.rollback()
        raise
    for db_item in db_items:
        db.refresh(db_item)
    return db_items

def update_supplier_order(db: Session, db_order: SupplierOrder, data: dict, user_id: str = None) -> SupplierOrder:
    old_values = sqlalchemy_to_dict(db_order)
    for key, value in data.items():
        setattr(db_order, key, value)
    db_order.updated_at = local_now()
    db_order.updated_by = user_id
    db.commit()
    db.refresh(db_order)
    create_audit_log(db, AuditLogCreate(
        table_name='supplier_orders',
        record_id=db_order.id,
        changed_by=user_id,
        action=AuditAction.UPDATE,
        old_values=old_values,
        new_values=sqlalchemy_to_dict(db_order)
    ))
    return db_order

def delete_supplier_order_items(db: Session, supplier_order_id: int) -> int:
    deleted = (
        db.query(SupplierOrderItem)
        .filter(SupplierOrderItem.supplier_order_id == supplier_order_id)
        .delete(synchronize_session=False)
    )
    db.commit()
    db.expire_all()
    return deleted

def get_supplier_order(db: Session, supplier_order_id: int) -> Optional[SupplierOrder]:
    return (
        db.query(SupplierOrder)
        .options(
            selectinload(SupplierOrder.supplier),
            selectinload(SupplierOrder.items).selectinload(SupplierOrderItem.product),
        )
        .filter(SupplierOrder.id == supplier_order_id)
        .first()
    )

def list_supplier_order_summaries(db: Session, skip: int = 0, limit: int = SUMMARY_PAGE_SIZE,
                                  status: Optional[SupplierOrderStatus] = None,
                                  supplier_id: Optional[int] = None) -> List[SupplierOrder]:
    """
    Rows for the supplier order list.

    Only the columns the list displays are loaded, plus the supplier's id and
    name. Newest orders come first.
    """
    query = db.query(SupplierOrder).options(
        load_only(
            SupplierOrder.id,
            SupplierOrder.status,
            SupplierOrder.total_amount,
            SupplierOrder.created_at,
            SupplierOrder.invoice_number,
            SupplierOrder.supplier_id,
        ),
        selectinload(SupplierOrder.supplier).load_only(Supplier.id, Supplier.name),
    )
    if status:
        query = query.filter(SupplierOrder.status == status)
    if supplier_id:
        query = query.filter(SupplierOrder.supplier_id == supplier_id)
    return (
        query.order_by(SupplierOrder.created_at.desc(), SupplierOrder.id.desc())
        .offset(skip)
        .limit(limit)
        .all()
    )

def set_supplier_order_status(db: Session, db_order: SupplierOrder, status: SupplierOrderStatus,
                              user_id: str) -> SupplierOrder:
    return update_supplier_order(db, db_order, {"status": status}, user_id)

def delete_supplier_order(db: Session, db_order: SupplierOrder, user_id: str):
    old_values = sqlalchemy_to_dict(db_order)
    record_id = db_order.id
    delete_supplier_order_items(db, record_id)
    db.delete(db_order)
    db.commit()
    create_audit_log(db, AuditLogCreate(
        table_name='supplier_orders',
        record_id=record_id,
        changed_by=user_id,
        action=AuditAction.DELETE,
        old_values=old_values,
        new_values=None
    ))
    return True
