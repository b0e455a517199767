from sqlalchemy import Column, Integer, Numeric, ForeignKey
from sqlalchemy.orm import relationship
from database import Base

class SupplierOrderItem(Base):
    __tablename__ = "supplier_order_items"

    id = Column(Integer, primary_key=True, index=True)
    supplier_order_id = Column(Integer, ForeignKey("supplier_orders.id", ondelete="CASCADE"), nullable=False)
    product_id = Column(Integer, ForeignKey("products.id"), nullable=False)
    quantity = Column(Integer, nullable=False)
    price = Column(Numeric(10, 2), nullable=False) # Negotiated purchase price
    total = Column(Numeric(12, 2), nullable=False)

    # Relationships
    supplier_order = relationship("SupplierOrder", back_populates="items")
    product = relationship("Product", back_populates="supplier_order_items")

    @property
    def product_name(self):
        return self.product.name if self.product else "Unknown Product"
