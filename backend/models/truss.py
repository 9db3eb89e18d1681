# backend/models/truss.py
import enum
from sqlalchemy import Column, Integer, String, ForeignKey, DateTime, Enum, CheckConstraint, func
from sqlalchemy.orm import relationship
from database import Base

class TrussMovementType(str, enum.Enum):
    WITHDRAWAL = "withdrawal"
    RETURN = "return"

class LoanStatus(str, enum.Enum):
    ACTIVE = "active"
    RETURNED = "returned"

# Truss (scaffolding) equipment lent out to services and returned later
class Truss(Base):
    __tablename__ = "trusses"

    id = Column(Integer, primary_key=True, index=True)
    code = Column(String, unique=True, nullable=False, index=True)
    name = Column(String, nullable=False)
    description = Column(String, nullable=True)
    unit = Column(String, nullable=False, default="unidade")
    category = Column(String, nullable=False, default="")
    max_stock = Column(Integer, CheckConstraint("max_stock >= 0"), nullable=False, default=0)
    current_stock = Column(Integer, CheckConstraint("current_stock >= 0"), nullable=False, default=0)
    location = Column(String, nullable=True)
    last_updated = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

# Loan ledger line; only `status` changes after insertion (active -> returned)
class TrussMovement(Base):
    __tablename__ = "truss_movements"

    id = Column(Integer, primary_key=True, index=True)
    date = Column(DateTime(timezone=True), nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    type = Column(Enum(TrussMovementType, values_callable=lambda e: [m.value for m in e]), nullable=False)
    truss_id = Column(Integer, ForeignKey("trusses.id", ondelete="SET NULL"), nullable=True, index=True)
    truss_name = Column(String, nullable=True)
    quantity = Column(Integer, CheckConstraint("quantity > 0"), nullable=False)
    taken_by = Column(String, nullable=True)
    service_description = Column(String, nullable=True)
    notes = Column(String, nullable=True)
    status = Column(Enum(LoanStatus, values_callable=lambda e: [m.value for m in e]),
                    nullable=False, default=LoanStatus.ACTIVE)
    created_by = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)

    truss = relationship("Truss")
