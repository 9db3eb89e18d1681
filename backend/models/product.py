# backend/models/product.py
from sqlalchemy import Column, Integer, String, DateTime, CheckConstraint, func
from database import Base

# Catalog item kept in the warehouse.
# current_stock is the authoritative quantity on the shelf; it only changes
# together with a StockMovement (see routes/stock.py).
class Product(Base):
    __tablename__ = "products"

    id = Column(Integer, primary_key=True, index=True)
    code = Column(String, unique=True, nullable=False, index=True)
    name = Column(String, nullable=False, index=True)
    description = Column(String, nullable=True)
    unit = Column(String, nullable=False, default="unidade")
    category = Column(String, nullable=False, default="", index=True)

    # Reorder threshold and quantity on hand
    min_stock = Column(Integer, CheckConstraint("min_stock >= 0"), nullable=False, default=0)
    current_stock = Column(Integer, CheckConstraint("current_stock >= 0"), nullable=False, default=0)

    location = Column(String, nullable=True)
    last_updated = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
