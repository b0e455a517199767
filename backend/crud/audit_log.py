from sqlalchemy.orm import Session
from typing import Optional
from models.audit_log import AuditLog
from schemas.audit_log import AuditAction, AuditLogCreate

def create_audit_log(db: Session, log_entry: AuditLogCreate) -> AuditLog:
    db_log_entry = AuditLog(**log_entry.model_dump())
    db.add(db_log_entry)
    db.commit()
    db.refresh(db_log_entry)
    return db_log_entry

def get_audit_logs(db: Session, table_name: str, record_id: int, action: Optional[AuditAction] = None):
    """History of one record, oldest change first."""
    query = db.query(AuditLog).filter(AuditLog.table_name == table_name, AuditLog.record_id == record_id)
    if action is not None:
        query = query.filter(AuditLog.action == AuditAction(action).value)
    return query.order_by(AuditLog.id).all()
