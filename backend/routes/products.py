# backend/routes/products.py
from typing import Optional, List
from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.orm import Session
from sqlalchemy.sql.expression import ColumnElement

from database import get_db, commit
from models.product import Product
from models.stock import StockMovement
from models.users import User
from schemas.inventory import LedgerSummary
import schemas.product as product_schemas
from utils.audit import write_log, client_ip
from utils.changefeed import ChangeFeed, get_change_feed
from utils.errors import NotFoundError, ValidationError
from utils.ledger import aggregate
from utils.permissions import Action
from utils.stock_status import StockStatus, classify
from utils.tokenJWT import capability_required

router = APIRouter(tags=["Products"])

_viewer = capability_required(Action.VIEW_INVENTORY)
_editor = capability_required(Action.MANAGE_PRODUCTS)


# ---- HELPERS ----
def _norm_code(code: Optional[str]) -> Optional[str]:
    if code is None:
        return None
    c = code.strip().upper()
    return c if c else None

def _get_unique_values(db: Session, column: ColumnElement) -> List[str]:
    values = db.query(column).distinct().filter(column != None, column != "").order_by(column).all()  # noqa: E711
    return [v[0] for v in values]

def _get_product(db: Session, product_id: int) -> Product:
    product = db.query(Product).filter(Product.id == product_id).first()
    if not product:
        raise NotFoundError("Product not found")
    return product

def _to_out(product: Product) -> product_schemas.ProductOut:
    out = product_schemas.ProductOut.model_validate(product)
    out.status = classify(product.current_stock, product.min_stock)
    return out

def _ensure_code_free(db: Session, code: str, exclude_id: Optional[int] = None) -> None:
    query = db.query(Product).filter(Product.code == code)
    if exclude_id is not None:
        query = query.filter(Product.id != exclude_id)
    if query.first():
        raise ValidationError(f"Product code {code} already exists")


# =========================
# PRODUCT LIST
# =========================
@router.get("/products", response_model=product_schemas.ProductListPage)
def list_products(
    q: Optional[str] = Query(None, description="Search by name or code"),
    category: Optional[str] = Query(None),
    status: Optional[StockStatus] = Query(None),
    page: int = Query(1, ge=1),
    page_size: int = Query(50, ge=1, le=1000),
    sort_by: str = Query("name"),
    order: str = Query("asc", pattern="^(asc|desc)$"),
    db: Session = Depends(get_db),
    current_user: User = Depends(_viewer),
):
    query = db.query(Product)

    if q:
        like = f"%{q}%"
        query = query.filter(Product.name.ilike(like) | Product.code.ilike(like))
    if category:
        query = query.filter(Product.category == category)

    allowed = {
        "id": Product.id, "code": Product.code, "name": Product.name,
        "category": Product.category, "current_stock": Product.current_stock,
        "last_updated": Product.last_updated,
    }
    sort_col = allowed.get(sort_by.lower(), Product.name)
    query = query.order_by(sort_col.asc() if order == "asc" else sort_col.desc())

    products = [_to_out(p) for p in query.all()]
    # Status is derived, so it is filtered after loading
    if status:
        products = [p for p in products if p.status == status]

    total = len(products)
    items = products[(page - 1) * page_size: page * page_size]
    return {"items": items, "total": total, "page": page, "page_size": page_size}


@router.get("/products/unique/categories", response_model=List[str])
def get_product_categories(db: Session = Depends(get_db), current_user: User = Depends(_viewer)):
    return _get_unique_values(db, Product.category)


# =========================
# SINGLE PRODUCT
# =========================
@router.get("/products/{product_id}", response_model=product_schemas.ProductOut)
def get_product(product_id: int, db: Session = Depends(get_db), current_user: User = Depends(_viewer)):
    return _to_out(_get_product(db, product_id))


# Entries, exits and the reconstructed opening stock of one product
@router.get("/products/{product_id}/ledger", response_model=LedgerSummary)
def get_product_ledger(product_id: int, db: Session = Depends(get_db), current_user: User = Depends(_viewer)):
    product = _get_product(db, product_id)
    movements = db.query(StockMovement).filter(StockMovement.product_id == product.id).all()
    return aggregate(movements, product.id, product.current_stock)


# =========================
# CREATE / EDIT / DELETE
# =========================
@router.post("/products", response_model=product_schemas.ProductOut, status_code=201)
def create_product(
    payload: product_schemas.ProductCreate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(_editor),
    feed: ChangeFeed = Depends(get_change_feed),
):
    data = payload.model_dump()
    data["code"] = _norm_code(data["code"])
    if not data["code"]:
        raise ValidationError("Product code is required")
    _ensure_code_free(db, data["code"])

    product = Product(**data)
    db.add(product)
    commit(db)
    db.refresh(product)
    feed.publish("products")

    write_log(db, user_id=current_user.id, action="PRODUCT_CREATE", resource="products",
              ip=client_ip(request), meta={"id": product.id, "code": product.code})
    return _to_out(product)


@router.patch("/products/{product_id}", response_model=product_schemas.ProductOut)
def update_product(
    product_id: int,
    payload: product_schemas.ProductEditRequest,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(_editor),
    feed: ChangeFeed = Depends(get_change_feed),
):
    product = _get_product(db, product_id)
    changes = payload.model_dump(exclude_unset=True)

    if "code" in changes:
        changes["code"] = _norm_code(changes["code"])
        if not changes["code"]:
            raise ValidationError("Product code is required")
        _ensure_code_free(db, changes["code"], exclude_id=product.id)

    for field, value in changes.items():
        setattr(product, field, value)
    commit(db)
    db.refresh(product)
    feed.publish("products")

    write_log(db, user_id=current_user.id, action="PRODUCT_UPDATE", resource="products",
              ip=client_ip(request), meta={"id": product.id, "fields": sorted(changes)})
    return _to_out(product)


@router.delete("/products/{product_id}")
def delete_product(
    product_id: int,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(_editor),
    feed: ChangeFeed = Depends(get_change_feed),
):
    product = _get_product(db, product_id)
    code = product.code
    db.delete(product)
    commit(db)
    feed.publish("products")

    write_log(db, user_id=current_user.id, action="PRODUCT_DELETE", resource="products",
              ip=client_ip(request), meta={"id": product_id, "code": code})
    return {"message": f"Product {code} deleted"}
