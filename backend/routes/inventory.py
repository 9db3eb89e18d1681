# backend/routes/inventory.py
from typing import Optional

from fastapi import APIRouter, Depends, Query
from fastapi.responses import Response
from sqlalchemy.orm import Session

from database import get_db
from models.product import Product
from models.purchase import Purchase, PurchaseItem
from models.stock import StockMovement
from models.supplier import Supplier, SupplierMaterial
from models.truss import Truss, TrussMovement
from models.users import User
from schemas.inventory import InventoryPage
from utils.export import to_csv, csv_filename, to_json_backup
from utils.permissions import Action
from utils.stock_status import StockStatus
from utils.tokenJWT import capability_required
from utils.views import inventory_rows

router = APIRouter(prefix="/inventory", tags=["Inventory"])

INVENTORY_COLUMNS = [
    "Code", "Product", "Category", "Unit", "Initial stock", "Entries", "Exits",
    "Minimum", "Current", "Status", "Location", "Average cost", "Last purchase price",
]


def _rows(db: Session, q: Optional[str] = None, status: Optional[StockStatus] = None):
    query = db.query(Product)
    if q:
        like = f"%{q}%"
        query = query.filter(Product.name.ilike(like) | Product.code.ilike(like))
    products = query.order_by(Product.name.asc()).all()
    rows = inventory_rows(products, db.query(StockMovement).all())
    if status:
        rows = [r for r in rows if r.status == status]
    return rows


# Inventory control table: one row per product with its ledger reconstruction
@router.get("", response_model=InventoryPage)
def get_inventory(
    q: Optional[str] = Query(None, description="Search by product name or code"),
    status: Optional[StockStatus] = Query(None),
    db: Session = Depends(get_db),
    current_user: User = Depends(capability_required(Action.VIEW_INVENTORY)),
):
    rows = _rows(db, q, status)
    return {"items": rows, "total": len(rows)}


@router.get("/export")
def export_inventory(
    q: Optional[str] = Query(None),
    status: Optional[StockStatus] = Query(None),
    db: Session = Depends(get_db),
    current_user: User = Depends(capability_required(Action.EXPORT_DATA)),
):
    rows = [{
        "Code": r.code,
        "Product": r.name,
        "Category": r.category or "",
        "Unit": r.unit or "",
        "Initial stock": r.initial_stock,
        "Entries": r.entries,
        "Exits": r.exits,
        "Minimum": r.min_stock,
        "Current": r.current_stock,
        "Status": r.status,
        "Location": r.location or "",
        "Average cost": r.average_cost,
        "Last purchase price": r.last_purchase_price,
    } for r in _rows(db, q, status)]
    return Response(
        content=to_csv(rows, columns=INVENTORY_COLUMNS),
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": f'attachment; filename="{csv_filename("inventory")}"'},
    )


def _dump(rows):
    return [{c.name: getattr(row, c.name) for c in row.__table__.columns} for row in rows]


# Full JSON backup of the warehouse collections (users are left out)
@router.get("/backup")
def backup(
    db: Session = Depends(get_db),
    current_user: User = Depends(capability_required(Action.MANAGE_USERS)),
):
    content = to_json_backup({
        "products": _dump(db.query(Product).all()),
        "stock_movements": _dump(db.query(StockMovement).all()),
        "suppliers": _dump(db.query(Supplier).all()),
        "supplier_materials": _dump(db.query(SupplierMaterial).all()),
        "purchases": _dump(db.query(Purchase).all()),
        "purchase_items": _dump(db.query(PurchaseItem).all()),
        "trusses": _dump(db.query(Truss).all()),
        "truss_movements": _dump(db.query(TrussMovement).all()),
    })
    return Response(
        content=content,
        media_type="application/json",
        headers={"Content-Disposition": f'attachment; filename="{csv_filename("backup").replace(".csv", ".json")}"'},
    )
