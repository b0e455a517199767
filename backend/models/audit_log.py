from sqlalchemy import Column, Integer, String, DateTime, JSON
from database import Base
from models.audit_mixin import local_now

class AuditLog(Base):
    """Change history for catalogue, contact, order and settings records."""
    __tablename__ = "audit_log"

    id = Column(Integer, primary_key=True, index=True)
    table_name = Column(String, nullable=False, index=True)
    record_id = Column(Integer, nullable=False, index=True)
    changed_at = Column(DateTime(timezone=True), default=local_now)
    changed_by = Column(String, nullable=False) # Email or id of the acting user
    action = Column(String, nullable=False) # schemas.audit_log.AuditAction value
    old_values = Column(JSON) # Column snapshot before the change
    new_values = Column(JSON)
