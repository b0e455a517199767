from pydantic import BaseModel, EmailStr, field_validator
from typing import Optional
from datetime import datetime
from schemas.validators import required_text, blank_to_none

class ClientBase(BaseModel):
    name: str
    phone: Optional[str] = None
    email: Optional[EmailStr] = None
    address: Optional[str] = None

    @field_validator("name")
    @classmethod
    def _name_required(cls, v):
        return required_text(v)

    @field_validator("phone", "email", "address", mode="before")
    @classmethod
    def _empty_is_none(cls, v):
        return blank_to_none(v)

class ClientCreate(ClientBase):
    pass

class ClientUpdate(BaseModel):
    name: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[EmailStr] = None
    address: Optional[str] = None

    @field_validator("name")
    @classmethod
    def _name_not_blank(cls, v):
        return required_text(v) if v is not None else v

    @field_validator("phone", "email", "address", mode="before")
    @classmethod
    def _empty_is_none(cls, v):
        return blank_to_none(v)

class Client(ClientBase):
    id: int
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True

class ClientSummary(BaseModel):
    id: int
    name: str
    phone: Optional[str] = None

    class Config:
        from_attributes = True
