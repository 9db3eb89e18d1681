# backend/models/purchase.py
import enum
from sqlalchemy import Column, Integer, String, Float, ForeignKey, DateTime, Enum, CheckConstraint, func
from sqlalchemy.orm import relationship
from database import Base

# Purchase order lifecycle
class PurchaseStatus(str, enum.Enum):
    PENDING = "pending"
    APPROVED = "approved"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"

# Purchase order header. total_value is always written from utils.purchases.purchase_total
class Purchase(Base):
    __tablename__ = "purchases"

    id = Column(Integer, primary_key=True, index=True)
    date = Column(DateTime(timezone=True), nullable=False)
    supplier_id = Column(Integer, ForeignKey("suppliers.id", ondelete="SET NULL"), nullable=True)
    supplier_name = Column(String, nullable=True)
    document_number = Column(String, nullable=True, index=True)
    notes = Column(String, nullable=True)
    expected_delivery_date = Column(DateTime(timezone=True), nullable=True)
    status = Column(Enum(PurchaseStatus, values_callable=lambda e: [m.value for m in e]),
                    nullable=False, default=PurchaseStatus.PENDING)

    # Order-level discount; line items never carry it
    discount = Column(Float, CheckConstraint("discount >= 0"), nullable=False, default=0.0)
    total_value = Column(Float, nullable=False, default=0.0)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    created_by = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)

    items = relationship("PurchaseItem", back_populates="purchase", cascade="all, delete-orphan")

class PurchaseItem(Base):
    __tablename__ = "purchase_items"

    id = Column(Integer, primary_key=True, index=True)
    purchase_id = Column(Integer, ForeignKey("purchases.id", ondelete="CASCADE"), nullable=False)
    product_id = Column(Integer, ForeignKey("products.id", ondelete="SET NULL"), nullable=True)
    product_name = Column(String, nullable=False)
    quantity = Column(Integer, CheckConstraint("quantity > 0"), nullable=False)
    unit_price = Column(Float, CheckConstraint("unit_price >= 0"), nullable=False)
    total_price = Column(Float, nullable=False)

    purchase = relationship("Purchase", back_populates="items")
