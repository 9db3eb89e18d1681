# backend/schemas/truss.py
from pydantic import BaseModel, Field, ConfigDict
from datetime import datetime
from typing import List, Optional

from models.truss import LoanStatus, TrussMovementType


class TrussCreate(BaseModel):
    code: str = Field(min_length=1)
    name: str = Field(min_length=1)
    description: Optional[str] = None
    unit: str = "unidade"
    category: str = ""
    max_stock: int = Field(default=0, ge=0)
    current_stock: int = Field(default=0, ge=0)
    location: Optional[str] = None


class TrussOut(TrussCreate):
    id: int
    last_updated: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


# One truss line in a withdrawal batch
class WithdrawalItem(BaseModel):
    truss_id: int
    quantity: int = Field(gt=0)


# Withdrawal of one or more trusses by the same person for the same service
class WithdrawalCreate(BaseModel):
    items: List[WithdrawalItem] = Field(min_length=1)
    taken_by: str = Field(min_length=1)
    service_description: Optional[str] = None
    notes: Optional[str] = None
    date: Optional[datetime] = None


class TrussMovementOut(BaseModel):
    id: int
    date: datetime
    created_at: Optional[datetime] = None
    type: TrussMovementType
    truss_id: Optional[int] = None
    truss_name: Optional[str] = None
    quantity: int
    taken_by: Optional[str] = None
    service_description: Optional[str] = None
    notes: Optional[str] = None
    status: LoanStatus

    model_config = ConfigDict(from_attributes=True)
