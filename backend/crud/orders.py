from typing import List, Optional
from sqlalchemy.orm import Session, selectinload
from models.orders import Order, OrderStatus
from models.order_items import OrderItem
from services.cart import CartItem
from crud.audit_log import create_audit_log
from schemas.audit_log import AuditAction, AuditLogCreate
from utils import sqlalchemy_to_dict
from utils.formatting import to_money
from models.audit_mixin import local_now

def create_order_header(db: Session, data: dict, user_id: str = None) -> Order:
    """Insert the order row on its own; items are written by a separate call."""
    db_order = Order(**data, created_by=user_id)
    db.add(db_order)
    db.commit()
    db.refresh(db_order)
    return db_order

def create_order_items(db: Session, order_id: int, lines: List[CartItem]) -> List[OrderItem]:
    """Batch insert of order lines. Price is a snapshot of the cart line price."""
    db_items = [
        OrderItem(
            order_id=order_id,
            product_id=line.id,
            quantity=line.quantity,
            price=to_money(line.price),
            line_total=line.line_total,
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

def get_order(db: Session, order_id: int) -> Optional[Order]:
    return (
        db.query(Order)
        .options(
            selectinload(Order.client),
            selectinload(Order.items).selectinload(OrderItem.product),
        )
        .filter(Order.id == order_id)
        .first()
    )

def list_orders(db: Session, skip: int = 0, limit: int = 100, status: Optional[OrderStatus] = None,
                client_id: Optional[int] = None) -> List[Order]:
    query = db.query(Order).options(
        selectinload(Order.client),
        selectinload(Order.items).selectinload(OrderItem.product),
    )
    if status:
        query = query.filter(Order.status == status)
    if client_id:
        query = query.filter(Order.client_id == client_id)
    return query.order_by(Order.created_at.desc(), Order.id.desc()).offset(skip).limit(limit).all()

def update_order_status(db: Session, db_order: Order, status: OrderStatus, user_id: str) -> Order:
    old_values = sqlalchemy_to_dict(db_order)
    db_order.status = status
    db_order.updated_at = local_now()
    db_order.updated_by = user_id
    db.commit()
    db.refresh(db_order)
    create_audit_log(db, AuditLogCreate(
        table_name='orders',
        record_id=db_order.id,
        changed_by=user_id,
        action=AuditAction.UPDATE,
        old_values=old_values,
        new_values=sqlalchemy_to_dict(db_order)
    ))
    return db_order

def delete_order(db: Session, db_order: Order, user_id: str):
    old_values = sqlalchemy_to_dict(db_order)
    record_id = db_order.id
    db.delete(db_order)  # items go with it (delete-orphan cascade)
    db.commit()
    create_audit_log(db, AuditLogCreate(
        table_name='orders',
        record_id=record_id,
        changed_by=user_id,
        action=AuditAction.DELETE,
        old_values=old_values,
        new_values=None
    ))
    return True
