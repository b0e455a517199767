from pydantic import BaseModel, EmailStr, field_validator
from typing import Optional
from datetime import datetime
from schemas.validators import required_text, blank_to_none

class SupplierBase(BaseModel):
    name: str
    phone: Optional[str] = None
    email: Optional[EmailStr] = None
    address: Optional[str] = None
    contact_person: Optional[str] = None

    @field_validator("name")
    @classmethod
    def _name_required(cls, v):
        return required_text(v)

    @field_validator("phone", "email", "address", "contact_person", mode="before")
    @classmethod
    def _empty_is_none(cls, v):
        return blank_to_none(v)

class SupplierCreate(SupplierBase):
    pass

class SupplierUpdate(BaseModel):
    name: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[EmailStr] = None
    address: Optional[str] = None
    contact_person: Optional[str] = None

    @field_validator("name")
    @classmethod
    def _name_not_blank(cls, v):
        return required_text(v) if v is not None else v

    @field_validator("phone", "email", "address", "contact_person", mode="before")
    @classmethod
    def _empty_is_none(cls, v):
        return blank_to_none(v)

class Supplier(SupplierBase):
    id: int
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True

class SupplierSummary(BaseModel):
    id: int
    name: str

    class Config:
        from_attributes = True
