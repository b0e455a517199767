from pydantic import BaseModel
from typing import Optional
import enum

class UserRole(str, enum.Enum):
    ADMIN = "admin"
    CLIENT = "client"
    SUPPLIER = "supplier"

class UserContext(BaseModel):
    """Identity of the caller, resolved once per request from the bearer token."""
    id: str
    name: Optional[str] = None
    email: Optional[str] = None
    role: UserRole
