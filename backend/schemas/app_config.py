from pydantic import BaseModel
from typing import Optional

class AppConfigBase(BaseModel):
    name: str
    value: str

class AppConfigUpdate(BaseModel):
    value: str

class AppConfigOut(AppConfigBase):
    id: Optional[int] = None

    class Config:
        from_attributes = True

class StoreSettings(BaseModel):
    """Resolved store settings (DB values over environment defaults)."""
    currency: str
    share_country_code: str
    share_domain: str
    invoice_language: str
