# backend/schemas/product.py
from datetime import datetime
from pydantic import BaseModel, Field, ConfigDict
from typing import Optional, List

from utils.stock_status import StockStatus


# Base configuration for ORM compatibility
class ORMBase(BaseModel):
    model_config = ConfigDict(from_attributes=True)


# Shared base attributes for product entities
class ProductBase(ORMBase):
    code: str = Field(min_length=1)
    name: str = Field(min_length=1)
    description: Optional[str] = None
    unit: str = "unidade"
    category: str = ""
    min_stock: int = Field(default=0, ge=0)
    location: Optional[str] = None


# Schema for creating a new product; current_stock is its opening balance
class ProductCreate(ProductBase):
    current_stock: int = Field(default=0, ge=0)


# Schema for partial product updates.
# Stock is not editable here: it only changes through stock movements.
class ProductEditRequest(ORMBase):
    """Schema for PATCH requests - all fields optional."""
    code: Optional[str] = Field(None, min_length=1)
    name: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = None
    unit: Optional[str] = None
    category: Optional[str] = None
    min_stock: Optional[int] = Field(None, ge=0)
    location: Optional[str] = None


# Full product representation including ID and the derived status
class ProductOut(ProductBase):
    id: int
    current_stock: int
    last_updated: Optional[datetime] = None
    status: Optional[StockStatus] = None


# Paginated response for product listings
class ProductListPage(ORMBase):
    items: List[ProductOut]
    total: int
    page: int
    page_size: int
