# backend/schemas/purchase.py
from pydantic import BaseModel, Field, ConfigDict
from datetime import datetime
from typing import List, Optional

from models.purchase import PurchaseStatus

# A single order line as typed in the purchase form
class PurchaseItemIn(BaseModel):
    product_id: Optional[int] = None
    product_name: Optional[str] = None  # Taken from the product when product_id is given
    quantity: int = Field(gt=0)
    unit_price: float = Field(ge=0)

class PurchaseItemOut(BaseModel):
    product_id: Optional[int] = None
    product_name: str
    quantity: int
    unit_price: float
    total_price: float

    model_config = ConfigDict(from_attributes=True)

class PurchaseCreate(BaseModel):
    date: Optional[datetime] = None
    supplier_id: Optional[int] = None
    document_number: Optional[str] = None
    notes: Optional[str] = None
    expected_delivery_date: Optional[datetime] = None
    discount: float = Field(default=0.0, ge=0)
    items: List[PurchaseItemIn] = Field(min_length=1)

class PurchaseOut(BaseModel):
    id: int
    date: datetime
    supplier_id: Optional[int] = None
    supplier_name: Optional[str] = None
    document_number: Optional[str] = None
    notes: Optional[str] = None
    expected_delivery_date: Optional[datetime] = None
    status: PurchaseStatus
    discount: float
    total_value: float
    items: List[PurchaseItemOut]

    model_config = ConfigDict(from_attributes=True)

class PurchaseStatusUpdate(BaseModel):
    status: PurchaseStatus

class PurchasePage(BaseModel):
    items: List[PurchaseOut]
    total: int
    page: int
    page_size: int
