# backend/models/supplier.py
from sqlalchemy import Column, Integer, String, Boolean, ForeignKey, JSON
from sqlalchemy.orm import relationship
from database import Base

# Represents a supplier; inactive suppliers are hidden from movement/purchase forms
class Supplier(Base):
    __tablename__ = "suppliers"

    id = Column(Integer, primary_key=True, index=True)
    code = Column(String, unique=True, nullable=False, index=True)
    name = Column(String, nullable=False, index=True)
    trade_name = Column(String, nullable=True)
    cnpj = Column(String, nullable=False) # Brazilian company registry number

    # Contact details
    contact = Column(String, nullable=True)
    email = Column(String, nullable=True)
    phone = Column(String, nullable=True)

    # Address
    address = Column(String, nullable=True)
    city = Column(String, nullable=True)
    state = Column(String, nullable=True)
    zip_code = Column(String, nullable=True)

    active = Column(Boolean, nullable=False, default=True)

    materials = relationship("SupplierMaterial", back_populates="supplier", cascade="all, delete-orphan")

# Free-form list of materials a supplier is known to provide
class SupplierMaterial(Base):
    __tablename__ = "supplier_materials"

    id = Column(Integer, primary_key=True, index=True)
    supplier_id = Column(Integer, ForeignKey("suppliers.id", ondelete="CASCADE"), nullable=False, unique=True)
    materials = Column(JSON, nullable=False, default=list)

    supplier = relationship("Supplier", back_populates="materials")
