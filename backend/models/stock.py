# backend/models/stock.py
import enum
from sqlalchemy import Column, Integer, String, Float, ForeignKey, DateTime, Enum, CheckConstraint, func
from sqlalchemy.orm import relationship
from database import Base

class MovementType(str, enum.Enum):
    ENTRY = "entry"
    EXIT = "exit"

# Append-only ledger line. Rows are never updated after insertion.
class StockMovement(Base):
    __tablename__ = "stock_movements"

    id = Column(Integer, primary_key=True, index=True)

    # Business date of the movement vs. system insertion time
    date = Column(DateTime(timezone=True), nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    type = Column(Enum(MovementType, values_callable=lambda e: [m.value for m in e]), nullable=False, index=True)
    product_id = Column(Integer, ForeignKey("products.id", ondelete="SET NULL"), nullable=True, index=True)
    product_name = Column(String, nullable=True) # Snapshot, survives product deletion
    quantity = Column(Integer, CheckConstraint("quantity > 0"), nullable=False)

    # Entries only: acquisition cost
    unit_price = Column(Float, nullable=True)
    total_value = Column(Float, nullable=True)
    supplier_id = Column(Integer, ForeignKey("suppliers.id", ondelete="SET NULL"), nullable=True)
    supplier_name = Column(String, nullable=True)
    document_number = Column(String, nullable=True)

    # Exits only: who took it and why
    requested_by = Column(String, nullable=True)
    department = Column(String, nullable=True)
    reason = Column(String, nullable=True)

    notes = Column(String, nullable=True)
    created_by = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)

    product = relationship("Product")
    supplier = relationship("Supplier")
