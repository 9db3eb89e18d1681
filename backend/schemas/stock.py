# backend/schemas/stock.py
from pydantic import BaseModel, Field, ConfigDict
from datetime import datetime
from typing import List, Optional

from models.stock import MovementType

# Fields shared by entry and exit forms
class MovementBase(BaseModel):
    product_id: Optional[int] = None  # Required; checked by the route so the error names the field
    quantity: int = Field(gt=0)
    date: Optional[datetime] = None   # Business date, defaults to now
    notes: Optional[str] = None

# Material received into stock
class EntryCreate(MovementBase):
    unit_price: Optional[float] = Field(default=None, ge=0)
    supplier_id: Optional[int] = None
    document_number: Optional[str] = None

# Material handed out of stock
class ExitCreate(MovementBase):
    requested_by: Optional[str] = None
    department: Optional[str] = None
    reason: Optional[str] = None

# Schema for returning stock movement details
class MovementResponse(BaseModel):
    id: int
    date: datetime
    created_at: Optional[datetime] = None
    type: MovementType
    product_id: Optional[int] = None
    product_name: Optional[str] = None
    quantity: int
    unit_price: Optional[float] = None
    total_value: Optional[float] = None
    supplier_id: Optional[int] = None
    supplier_name: Optional[str] = None
    document_number: Optional[str] = None
    requested_by: Optional[str] = None
    department: Optional[str] = None
    reason: Optional[str] = None
    notes: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)

# Paginated response for stock movement history
class MovementPage(BaseModel):
    items: List[MovementResponse]
    total: int
    page: int
    page_size: int
