from typing import Optional
from sqlalchemy.orm import Session
from models.clients import Client
from models.orders import Order
from schemas.clients import ClientCreate, ClientUpdate
from services.exceptions import ReferentialIntegrityError
from crud.audit_log import create_audit_log
from schemas.audit_log import AuditAction, AuditLogCreate
from utils import sqlalchemy_to_dict
from models.audit_mixin import local_now

def get_client(db: Session, client_id: int):
    return db.query(Client).filter(Client.id == client_id).first()

def get_clients(db: Session, search: Optional[str] = None, skip: int = 0, limit: int = 100):
    query = db.query(Client)
    if search:
        query = query.filter(Client.name.ilike(f"%{search}%"))
    return query.order_by(Client.name).offset(skip).limit(limit).all()

def create_client(db: Session, client: ClientCreate, user_id: str):
    db_client = Client(**client.model_dump(), created_by=user_id)
    db.add(db_client)
    db.commit()
    db.refresh(db_client)
    return db_client

def update_client(db: Session, db_client: Client, client: ClientUpdate, user_id: str):
    old_values = sqlalchemy_to_dict(db_client)
    for key, value in client.model_dump(exclude_unset=True).items():
        setattr(db_client, key, value)
    db_client.updated_at = local_now()
    db_client.updated_by = user_id
    db.commit()
    db.refresh(db_client)
    create_audit_log(db, AuditLogCreate(
        table_name='clients',
        record_id=db_client.id,
        changed_by=user_id,
        action=AuditAction.UPDATE,
        old_values=old_values,
        new_values=sqlalchemy_to_dict(db_client)
    ))
    return db_client

def count_client_orders(db: Session, client_id: int) -> int:
    return db.query(Order).filter(Order.client_id == client_id).count()

def delete_client(db: Session, db_client: Client, user_id: str):
    order_count = count_client_orders(db, db_client.id)
    if order_count > 0:
        raise ReferentialIntegrityError(f"Cannot delete client because it's used by {order_count} orders")

    old_values = sqlalchemy_to_dict(db_client)
    record_id = db_client.id
    db.delete(db_client)
    db.commit()
    create_audit_log(db, AuditLogCreate(
        table_name='clients',
        record_id=record_id,
        changed_by=user_id,
        action=AuditAction.DELETE,
        old_values=old_values,
        new_values=None
    ))
    return True
