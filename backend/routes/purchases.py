# backend/routes/purchases.py
from datetime import datetime, timezone
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import Response
from sqlalchemy.orm import Session, selectinload

from config import settings
from database import get_db, commit
from models.product import Product
from models.purchase import Purchase, PurchaseItem, PurchaseStatus
from models.supplier import Supplier
from models.users import User
import schemas.purchase as purchase_schemas
from utils.audit import write_log, client_ip
from utils.changefeed import ChangeFeed, get_change_feed
from utils.dates import as_utc, resolve_timezone
from utils.errors import NotFoundError, ValidationError
from utils.export import to_csv, csv_filename
from utils.pdf import purchase_order_pdf, STATUS_LABELS
from utils.permissions import Action
from utils.purchases import check_transition, line_total, purchase_total
from utils.tokenJWT import capability_required

router = APIRouter(prefix="/purchases", tags=["Purchases"])

_manager = capability_required(Action.MANAGE_PURCHASES)


def _get_purchase(db: Session, purchase_id: int) -> Purchase:
    purchase = (db.query(Purchase)
                .options(selectinload(Purchase.items))
                .filter(Purchase.id == purchase_id)
                .first())
    if not purchase:
        raise NotFoundError("Purchase not found")
    return purchase


@router.get("", response_model=purchase_schemas.PurchasePage)
def list_purchases(
    status: Optional[PurchaseStatus] = Query(None),
    supplier_id: Optional[int] = Query(None),
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
    db: Session = Depends(get_db),
    current_user: User = Depends(_manager),
):
    query = db.query(Purchase).options(selectinload(Purchase.items))
    if status:
        query = query.filter(Purchase.status == status)
    if supplier_id is not None:
        query = query.filter(Purchase.supplier_id == supplier_id)

    query = query.order_by(Purchase.date.desc(), Purchase.id.desc())
    total = query.count()
    items = query.offset((page - 1) * page_size).limit(page_size).all()
    return {"items": items, "total": total, "page": page, "page_size": page_size}


@router.get("/export")
def export_purchases(
    tz: Optional[str] = Query(None, description="Timezone used for the Date column"),
    db: Session = Depends(get_db),
    current_user: User = Depends(capability_required(Action.EXPORT_DATA)),
):
    purchases = (db.query(Purchase).options(selectinload(Purchase.items))
                 .order_by(Purchase.date.desc(), Purchase.id.desc()).all())
    rows = [{
        "Order no.": p.document_number or "",
        "Date": p.date,
        "Supplier": p.supplier_name or "",
        "Items": len(p.items),
        "Total": f"{p.total_value:.2f}",
        "Status": STATUS_LABELS.get(PurchaseStatus(p.status).value, ""),
    } for p in purchases]
    return Response(
        content=to_csv(rows, columns=["Order no.", "Date", "Supplier", "Items", "Total", "Status"],
                       tz=resolve_timezone(tz or settings.DEFAULT_TIMEZONE)),
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": f'attachment; filename="{csv_filename("purchases")}"'},
    )


@router.get("/{purchase_id}", response_model=purchase_schemas.PurchaseOut)
def get_purchase(purchase_id: int, db: Session = Depends(get_db), current_user: User = Depends(_manager)):
    return _get_purchase(db, purchase_id)


@router.get("/{purchase_id}/pdf")
def download_purchase_pdf(purchase_id: int, db: Session = Depends(get_db), current_user: User = Depends(_manager)):
    purchase = _get_purchase(db, purchase_id)
    number = purchase.document_number or f"PO-{purchase.id}"
    return Response(
        content=purchase_order_pdf(purchase),
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="{number}.pdf"'},
    )


@router.post("", response_model=purchase_schemas.PurchaseOut, status_code=201)
def create_purchase(
    payload: purchase_schemas.PurchaseCreate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(_manager),
    feed: ChangeFeed = Depends(get_change_feed),
):
    supplier = None
    if payload.supplier_id is not None:
        supplier = db.query(Supplier).filter(Supplier.id == payload.supplier_id).first()
        if not supplier:
            raise NotFoundError("Supplier not found")
        if not supplier.active:
            raise ValidationError(f"Supplier {supplier.name} is inactive")

    items = []
    for line in payload.items:
        name = (line.product_name or "").strip()
        if line.product_id is not None:
            product = db.query(Product).filter(Product.id == line.product_id).first()
            if not product:
                raise NotFoundError(f"Product {line.product_id} not found")
            name = name or product.name
        if not name:
            raise ValidationError("Every item needs a product or a description")
        items.append(PurchaseItem(
            product_id=line.product_id,
            product_name=name,
            quantity=line.quantity,
            unit_price=line.unit_price,
            total_price=line_total(line.quantity, line.unit_price),
        ))

    total = purchase_total(items, payload.discount)
    if total < 0:
        raise ValidationError("Discount is larger than the order subtotal")

    purchase = Purchase(
        date=as_utc(payload.date) or datetime.now(timezone.utc),
        supplier_id=supplier.id if supplier else None,
        supplier_name=supplier.name if supplier else None,
        document_number=payload.document_number,
        notes=payload.notes,
        expected_delivery_date=as_utc(payload.expected_delivery_date),
        status=PurchaseStatus.PENDING,
        discount=payload.discount,
        total_value=total,
        created_by=current_user.id,
        items=items,
    )
    db.add(purchase)
    commit(db)
    db.refresh(purchase)
    feed.publish("purchases")

    write_log(db, user_id=current_user.id, action="PURCHASE_CREATE", resource="purchases",
              ip=client_ip(request), meta={"id": purchase.id, "total": purchase.total_value})
    return _get_purchase(db, purchase.id)


@router.patch("/{purchase_id}/status", response_model=purchase_schemas.PurchaseOut)
def update_purchase_status(
    purchase_id: int,
    payload: purchase_schemas.PurchaseStatusUpdate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(_manager),
    feed: ChangeFeed = Depends(get_change_feed),
):
    purchase = _get_purchase(db, purchase_id)
    old = PurchaseStatus(purchase.status)
    check_transition(old, payload.status)

    purchase.status = payload.status
    commit(db)
    feed.publish("purchases")

    write_log(db, user_id=current_user.id, action="PURCHASE_STATUS", resource="purchases",
              ip=client_ip(request), meta={"id": purchase.id, "old": old.value, "new": payload.status.value})
    return _get_purchase(db, purchase.id)


@router.delete("/{purchase_id}")
def delete_purchase(
    purchase_id: int,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(_manager),
    feed: ChangeFeed = Depends(get_change_feed),
):
    purchase = _get_purchase(db, purchase_id)
    db.delete(purchase)
    commit(db)
    feed.publish("purchases")

    write_log(db, user_id=current_user.id, action="PURCHASE_DELETE", resource="purchases",
              ip=client_ip(request), meta={"id": purchase_id})
    return {"message": "Purchase deleted"}
