from pydantic import BaseModel
from typing import Optional
from datetime import datetime
from decimal import Decimal
import enum

class InvoiceLanguage(str, enum.Enum):
    EN = "en"  # left-to-right
    AR = "ar"  # right-to-left

class InvoiceFormat(str, enum.Enum):
    HTML = "html"
    PDF = "pdf"

class InvoiceMode(str, enum.Enum):
    PRINT = "print"
    DOWNLOAD = "download"

class InvoiceOrder(BaseModel):
    """Header data the invoice is rendered from."""
    id: int
    invoice_number: Optional[str] = None
    client_name: Optional[str] = None
    created_at: Optional[datetime] = None
    # Informational only; the rendered total is recomputed from the lines
    total_amount: Optional[Decimal] = None
