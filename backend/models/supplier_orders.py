from sqlalchemy import Column, Integer, String, Text, Numeric, ForeignKey, Enum
from sqlalchemy.orm import relationship
from database import Base
import enum
from models.audit_mixin import TimestampMixin
from utils.invoice_images import parse_invoice_images

class SupplierOrderStatus(enum.Enum):
    PENDING = "pending"
    RECEIVED = "received"
    CANCELLED = "cancelled"

class SupplierOrder(Base, TimestampMixin):
    __tablename__ = "supplier_orders"

    id = Column(Integer, primary_key=True, index=True)
    supplier_id = Column(Integer, ForeignKey("suppliers.id"), nullable=False)
    invoice_number = Column(String, nullable=True)
    invoice_image = Column(Text, nullable=True) # Single reference or JSON-encoded array
    total_amount = Column(Numeric(12, 2), default=0, nullable=False)
    status = Column(Enum(SupplierOrderStatus), default=SupplierOrderStatus.PENDING, nullable=False)
    notes = Column(Text, nullable=True)

    # Relationships
    supplier = relationship("Supplier", back_populates="supplier_orders")
    items = relationship("SupplierOrderItem", back_populates="supplier_order", cascade="all, delete-orphan")

    @property
    def invoice_images(self):
        return parse_invoice_images(self.invoice_image)
