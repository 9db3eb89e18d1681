# backend/schemas/inventory.py
from datetime import date
from typing import List, Optional
from pydantic import BaseModel

from utils.stock_status import StockStatus

# Figures reconstructed from a product's movement ledger
class LedgerSummary(BaseModel):
    product_id: int
    current_stock: int
    entries: int = 0
    exits: int = 0
    initial_stock: int = 0       # may be negative when stock and ledger drifted apart
    average_cost: float = 0.0
    last_purchase_price: float = 0.0

# Same reconstruction for the truss loan ledger
class LoanSummary(BaseModel):
    truss_id: int
    current_stock: int
    withdrawals: int = 0
    returns: int = 0
    outstanding: int = 0
    initial_stock: int = 0

# One row of the inventory control table
class InventoryRow(BaseModel):
    product_id: int
    code: str
    name: str
    category: Optional[str] = None
    unit: Optional[str] = None
    initial_stock: int
    entries: int
    exits: int
    min_stock: int
    current_stock: int
    status: StockStatus
    percentage: Optional[int] = None
    location: Optional[str] = None
    average_cost: float = 0.0
    last_purchase_price: float = 0.0

class InventoryPage(BaseModel):
    items: List[InventoryRow]
    total: int

# Chart point: entries/exits recorded on one local calendar day
class DailyMovementCount(BaseModel):
    date: date
    label: str
    entries: int = 0
    exits: int = 0

class DailyMovementResponse(BaseModel):
    data: List[DailyMovementCount]

class StatusCount(BaseModel):
    status: StockStatus
    count: int

class StatusBreakdownResponse(BaseModel):
    data: List[StatusCount]

class CategoryTotal(BaseModel):
    category: str
    quantity: int
    value: float

class CategoryRollupResponse(BaseModel):
    data: List[CategoryTotal]

class DashboardSummary(BaseModel):
    total_products: int
    low_stock_items: int
    total_value: float
    recent_movements: int
    pending_purchases: int
    active_suppliers: int
