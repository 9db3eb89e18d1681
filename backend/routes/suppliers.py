# backend/routes/suppliers.py
import logging
from typing import List, Optional

import httpx
from fastapi import APIRouter, Depends, HTTPException, Query, Request
from sqlalchemy.orm import Session

from database import get_db, commit
from models.supplier import Supplier, SupplierMaterial
from models.users import User
import schemas.supplier as supplier_schemas
from utils.audit import write_log, client_ip
from utils.changefeed import ChangeFeed, get_change_feed
from utils.cnpj_client import CnpjClient, get_cnpj_client
from utils.errors import NotFoundError, ValidationError
from utils.permissions import Action
from utils.tokenJWT import capability_required

router = APIRouter(prefix="/suppliers", tags=["Suppliers"])
logger = logging.getLogger(__name__)

_viewer = capability_required(Action.VIEW_INVENTORY)
_manager = capability_required(Action.MANAGE_SUPPLIERS)


def _get_supplier(db: Session, supplier_id: int) -> Supplier:
    supplier = db.query(Supplier).filter(Supplier.id == supplier_id).first()
    if not supplier:
        raise NotFoundError("Supplier not found")
    return supplier

def _ensure_code_free(db: Session, code: str, exclude_id: Optional[int] = None) -> None:
    query = db.query(Supplier).filter(Supplier.code == code)
    if exclude_id is not None:
        query = query.filter(Supplier.id != exclude_id)
    if query.first():
        raise ValidationError(f"Supplier code {code} already exists")

def _material_out(sm: SupplierMaterial) -> supplier_schemas.SupplierMaterialOut:
    return supplier_schemas.SupplierMaterialOut(
        id=sm.id,
        supplier_id=sm.supplier_id,
        supplier_name=sm.supplier.name if sm.supplier else None,
        materials=list(sm.materials or []),
    )


# List suppliers; forms ask for active ones only
@router.get("", response_model=List[supplier_schemas.SupplierOut])
def list_suppliers(
    q: Optional[str] = Query(None, description="Search by name, code or CNPJ"),
    active: Optional[bool] = Query(None),
    db: Session = Depends(get_db),
    current_user: User = Depends(_viewer),
):
    query = db.query(Supplier)
    if q:
        like = f"%{q}%"
        query = query.filter(Supplier.name.ilike(like) | Supplier.code.ilike(like) | Supplier.cnpj.ilike(like))
    if active is not None:
        query = query.filter(Supplier.active == active)
    return query.order_by(Supplier.name.asc()).all()


# Registry lookup to prefill the supplier form
@router.get("/cnpj/{cnpj}", response_model=supplier_schemas.CnpjLookup)
async def lookup_cnpj(
    cnpj: str,
    client: CnpjClient = Depends(get_cnpj_client),
    current_user: User = Depends(_manager),
):
    try:
        result = await client.lookup(cnpj)
    except (httpx.RequestError, httpx.HTTPStatusError):
        raise HTTPException(status_code=502, detail="CNPJ registry unavailable")
    if result is None:
        raise NotFoundError("CNPJ not found")
    return result


# ---- Materials per supplier ----
@router.get("/materials", response_model=List[supplier_schemas.SupplierMaterialOut])
def list_supplier_materials(db: Session = Depends(get_db), current_user: User = Depends(_viewer)):
    return [_material_out(sm) for sm in db.query(SupplierMaterial).order_by(SupplierMaterial.id.asc()).all()]


# Saving replaces the supplier's whole list (the form edits it as one unit)
@router.post("/materials", response_model=supplier_schemas.SupplierMaterialOut)
def save_supplier_materials(
    payload: supplier_schemas.SupplierMaterialCreate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(_manager),
    feed: ChangeFeed = Depends(get_change_feed),
):
    supplier = _get_supplier(db, payload.supplier_id)
    if not supplier.active:
        raise ValidationError(f"Supplier {supplier.name} is inactive")

    materials = [m.strip() for m in payload.materials if m and m.strip()]
    if not materials:
        raise ValidationError("Add at least one material")

    sm = db.query(SupplierMaterial).filter(SupplierMaterial.supplier_id == supplier.id).first()
    if sm is None:
        sm = SupplierMaterial(supplier_id=supplier.id)
        db.add(sm)
    sm.materials = materials
    commit(db)
    db.refresh(sm)
    feed.publish("supplier_materials")

    write_log(db, user_id=current_user.id, action="SUPPLIER_MATERIALS", resource="suppliers",
              ip=client_ip(request), meta={"supplier_id": supplier.id, "count": len(materials)})
    return _material_out(sm)


@router.delete("/materials/{material_id}")
def delete_supplier_materials(
    material_id: int,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(_manager),
    feed: ChangeFeed = Depends(get_change_feed),
):
    sm = db.query(SupplierMaterial).filter(SupplierMaterial.id == material_id).first()
    if not sm:
        raise NotFoundError("Supplier materials not found")
    db.delete(sm)
    commit(db)
    feed.publish("supplier_materials")

    write_log(db, user_id=current_user.id, action="SUPPLIER_MATERIALS_DELETE", resource="suppliers",
              ip=client_ip(request), meta={"id": material_id})
    return {"message": "Supplier materials deleted"}


# ---- Single supplier ----
@router.get("/{supplier_id}", response_model=supplier_schemas.SupplierOut)
def get_supplier(supplier_id: int, db: Session = Depends(get_db), current_user: User = Depends(_viewer)):
    return _get_supplier(db, supplier_id)


@router.post("", response_model=supplier_schemas.SupplierOut, status_code=201)
def create_supplier(
    payload: supplier_schemas.SupplierCreate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(_manager),
    feed: ChangeFeed = Depends(get_change_feed),
):
    data = payload.model_dump()
    data["code"] = data["code"].strip().upper()
    _ensure_code_free(db, data["code"])

    supplier = Supplier(**data)
    db.add(supplier)
    commit(db)
    db.refresh(supplier)
    feed.publish("suppliers")

    write_log(db, user_id=current_user.id, action="SUPPLIER_CREATE", resource="suppliers",
              ip=client_ip(request), meta={"id": supplier.id, "code": supplier.code})
    return supplier


@router.patch("/{supplier_id}", response_model=supplier_schemas.SupplierOut)
def update_supplier(
    supplier_id: int,
    payload: supplier_schemas.SupplierUpdate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(_manager),
    feed: ChangeFeed = Depends(get_change_feed),
):
    supplier = _get_supplier(db, supplier_id)
    changes = payload.model_dump(exclude_unset=True)
    if "code" in changes:
        changes["code"] = changes["code"].strip().upper()
        _ensure_code_free(db, changes["code"], exclude_id=supplier.id)

    for field, value in changes.items():
        setattr(supplier, field, value)
    commit(db)
    db.refresh(supplier)
    feed.publish("suppliers")

    write_log(db, user_id=current_user.id, action="SUPPLIER_UPDATE", resource="suppliers",
              ip=client_ip(request), meta={"id": supplier.id, "fields": sorted(changes)})
    return supplier


@router.patch("/{supplier_id}/active", response_model=supplier_schemas.SupplierOut)
def set_supplier_active(
    supplier_id: int,
    payload: supplier_schemas.SupplierActiveUpdate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(_manager),
    feed: ChangeFeed = Depends(get_change_feed),
):
    supplier = _get_supplier(db, supplier_id)
    supplier.active = payload.active
    commit(db)
    db.refresh(supplier)
    feed.publish("suppliers")

    write_log(db, user_id=current_user.id, action="SUPPLIER_ACTIVE", resource="suppliers",
              ip=client_ip(request), meta={"id": supplier.id, "active": supplier.active})
    return supplier


@router.delete("/{supplier_id}")
def delete_supplier(
    supplier_id: int,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(_manager),
    feed: ChangeFeed = Depends(get_change_feed),
):
    supplier = _get_supplier(db, supplier_id)
    name = supplier.name
    db.delete(supplier)
    commit(db)
    feed.publish("suppliers", "supplier_materials")

    write_log(db, user_id=current_user.id, action="SUPPLIER_DELETE", resource="suppliers",
              ip=client_ip(request), meta={"id": supplier_id})
    return {"message": f"Supplier {name} deleted"}
