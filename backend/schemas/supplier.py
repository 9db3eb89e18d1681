# backend/schemas/supplier.py
from pydantic import BaseModel, Field, ConfigDict
from typing import List, Optional


class SupplierBase(BaseModel):
    code: str = Field(min_length=1)
    name: str = Field(min_length=1)
    trade_name: Optional[str] = None
    cnpj: str = Field(min_length=1)
    contact: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip_code: Optional[str] = None
    active: bool = True


class SupplierCreate(SupplierBase):
    pass


# Partial update - all fields optional
class SupplierUpdate(BaseModel):
    code: Optional[str] = Field(None, min_length=1)
    name: Optional[str] = Field(None, min_length=1)
    trade_name: Optional[str] = None
    cnpj: Optional[str] = None
    contact: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip_code: Optional[str] = None


class SupplierActiveUpdate(BaseModel):
    active: bool


class SupplierOut(SupplierBase):
    id: int

    model_config = ConfigDict(from_attributes=True)


# Materials a supplier provides, saved as one list per supplier
class SupplierMaterialCreate(BaseModel):
    supplier_id: int
    materials: List[str] = Field(min_length=1)


class SupplierMaterialOut(BaseModel):
    id: int
    supplier_id: int
    supplier_name: Optional[str] = None
    materials: List[str]


# Registry data used to prefill the supplier form
class CnpjLookup(BaseModel):
    cnpj: str
    name: Optional[str] = None
    trade_name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip_code: Optional[str] = None
