# backend/routes/stock.py
from datetime import datetime, timezone
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import Response
from sqlalchemy.orm import Session

from config import settings
from database import get_db, commit
from models.stock import StockMovement, MovementType
from models.product import Product
from models.supplier import Supplier
from models.users import User
from utils.audit import write_log, client_ip
from utils.changefeed import ChangeFeed, get_change_feed
from utils.dates import as_utc, resolve_timezone
from utils.errors import InsufficientStockError, NotFoundError, ValidationError
from utils.export import to_csv, csv_filename
from utils.permissions import Action
from utils.tokenJWT import capability_required
from utils.views import sort_recent
import schemas.stock as stock_schemas

router = APIRouter(prefix="/stock", tags=["Stock"])

_viewer = capability_required(Action.VIEW_INVENTORY)


# Product referenced by a movement form; a missing selection is a validation error
def _product_for(db: Session, product_id: Optional[int]) -> Product:
    if product_id is None:
        raise ValidationError("Select a product before recording the movement")
    product = db.query(Product).filter(Product.id == product_id).first()
    if not product:
        raise NotFoundError("Product not found")
    return product


def _record(db: Session, product: Product, movement: StockMovement, delta: int) -> StockMovement:
    # Stock and ledger line are written in the same transaction
    product.current_stock = product.current_stock + delta
    product.last_updated = datetime.now(timezone.utc)
    db.add(movement)
    commit(db)
    db.refresh(movement)
    return movement


@router.get("/movements", response_model=stock_schemas.MovementPage)
def list_movements(
    type: Optional[MovementType] = Query(None),
    product_id: Optional[int] = Query(None),
    q: Optional[str] = Query(None, description="Search by product name or document number"),
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=500),
    db: Session = Depends(get_db),
    current_user: User = Depends(_viewer),
):
    query = db.query(StockMovement)
    if type:
        query = query.filter(StockMovement.type == type)
    if product_id is not None:
        query = query.filter(StockMovement.product_id == product_id)
    if q:
        like = f"%{q}%"
        query = query.filter(StockMovement.product_name.ilike(like) | StockMovement.document_number.ilike(like))

    movements = sort_recent(query.all())
    total = len(movements)
    items = movements[(page - 1) * page_size: page * page_size]
    return {"items": items, "total": total, "page": page, "page_size": page_size}


# Latest movements for the side tables of the entry/exit screens
@router.get("/recent", response_model=List[stock_schemas.MovementResponse])
def recent_movements(
    type: Optional[MovementType] = Query(None),
    limit: int = Query(10, ge=1, le=100),
    db: Session = Depends(get_db),
    current_user: User = Depends(_viewer),
):
    query = db.query(StockMovement)
    if type:
        query = query.filter(StockMovement.type == type)
    return sort_recent(query.all(), limit=limit)


@router.post("/entries", response_model=stock_schemas.MovementResponse, status_code=201)
def record_entry(
    payload: stock_schemas.EntryCreate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(capability_required(Action.RECORD_ENTRY)),
    feed: ChangeFeed = Depends(get_change_feed),
):
    product = _product_for(db, payload.product_id)

    supplier = None
    if payload.supplier_id is not None:
        supplier = db.query(Supplier).filter(Supplier.id == payload.supplier_id).first()
        if not supplier:
            raise NotFoundError("Supplier not found")
        if not supplier.active:
            raise ValidationError(f"Supplier {supplier.name} is inactive")

    unit_price = payload.unit_price or None
    movement = StockMovement(
        date=as_utc(payload.date) or datetime.now(timezone.utc),
        type=MovementType.ENTRY,
        product_id=product.id,
        product_name=product.name,
        quantity=payload.quantity,
        unit_price=unit_price,
        total_value=round(unit_price * payload.quantity, 2) if unit_price else None,
        supplier_id=supplier.id if supplier else None,
        supplier_name=supplier.name if supplier else None,
        document_number=payload.document_number,
        notes=payload.notes,
        created_by=current_user.id,
    )
    movement = _record(db, product, movement, payload.quantity)
    feed.publish("stock_movements", "products")

    write_log(db, user_id=current_user.id, action="STOCK_ENTRY", resource="stock", ip=client_ip(request),
              meta={"id": movement.id, "product_id": product.id, "quantity": payload.quantity})
    return movement


@router.post("/exits", response_model=stock_schemas.MovementResponse, status_code=201)
def record_exit(
    payload: stock_schemas.ExitCreate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(capability_required(Action.RECORD_EXIT)),
    feed: ChangeFeed = Depends(get_change_feed),
):
    product = _product_for(db, payload.product_id)

    if payload.quantity > product.current_stock:
        write_log(db, user_id=current_user.id, action="STOCK_EXIT", resource="stock", status="FAIL",
                  ip=client_ip(request),
                  meta={"product_id": product.id, "quantity": payload.quantity, "available": product.current_stock})
        raise InsufficientStockError(payload.quantity, product.current_stock, product.unit)

    movement = StockMovement(
        date=as_utc(payload.date) or datetime.now(timezone.utc),
        type=MovementType.EXIT,
        product_id=product.id,
        product_name=product.name,
        quantity=payload.quantity,
        requested_by=payload.requested_by,
        department=payload.department,
        reason=payload.reason,
        notes=payload.notes,
        created_by=current_user.id,
    )
    movement = _record(db, product, movement, -payload.quantity)
    feed.publish("stock_movements", "products")

    write_log(db, user_id=current_user.id, action="STOCK_EXIT", resource="stock", ip=client_ip(request),
              meta={"id": movement.id, "product_id": product.id, "quantity": payload.quantity})
    return movement


@router.get("/exits/export")
def export_exits(
    tz: Optional[str] = Query(None, description="Timezone used for the Date column"),
    db: Session = Depends(get_db),
    current_user: User = Depends(capability_required(Action.EXPORT_DATA)),
):
    exits = sort_recent(db.query(StockMovement).filter(StockMovement.type == MovementType.EXIT).all())
    rows = [{
        "Date": m.date,
        "Product": m.product_name,
        "Quantity": m.quantity,
        "Requested by": m.requested_by or "",
        "Department": m.department or "",
        "Reason": m.reason or "",
        "Notes": m.notes or "",
    } for m in exits]
    return Response(
        content=to_csv(rows, columns=["Date", "Product", "Quantity", "Requested by", "Department", "Reason", "Notes"],
                       tz=resolve_timezone(tz or settings.DEFAULT_TIMEZONE)),
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": f'attachment; filename="{csv_filename("exits")}"'},
    )
