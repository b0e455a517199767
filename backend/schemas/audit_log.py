from pydantic import BaseModel
from typing import Optional, Dict, Any
import enum

class AuditAction(str, enum.Enum):
    CREATE = "CREATE"
    UPDATE = "UPDATE"
    DELETE = "DELETE"
    STOCK = "STOCK" # Manual stock correction

class AuditLogCreate(BaseModel):
    """One change to a record, with column snapshots before and after."""
    table_name: str
    record_id: int
    changed_by: str
    action: AuditAction
    old_values: Optional[Dict[str, Any]] = None
    new_values: Optional[Dict[str, Any]] = None

    class Config:
        use_enum_values = True
