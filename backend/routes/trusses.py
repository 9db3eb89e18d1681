# backend/routes/trusses.py
from datetime import datetime, timezone
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.orm import Session

from database import get_db, commit
from models.truss import Truss, TrussMovement, TrussMovementType, LoanStatus
from models.users import User
from schemas.inventory import LoanSummary
import schemas.truss as truss_schemas
from utils.audit import write_log, client_ip
from utils.changefeed import ChangeFeed, get_change_feed
from utils.dates import as_utc
from utils.errors import InsufficientStockError, NotFoundError, ValidationError
from utils.ledger import aggregate_loans
from utils.permissions import Action
from utils.tokenJWT import capability_required
from utils.views import sort_recent

router = APIRouter(prefix="/trusses", tags=["Trusses"])

_manager = capability_required(Action.MANAGE_TRUSSES)


def _get_truss(db: Session, truss_id: int) -> Truss:
    truss = db.query(Truss).filter(Truss.id == truss_id).first()
    if not truss:
        raise NotFoundError("Truss not found")
    return truss


@router.get("", response_model=List[truss_schemas.TrussOut])
def list_trusses(db: Session = Depends(get_db), current_user: User = Depends(_manager)):
    return db.query(Truss).order_by(Truss.name.asc()).all()


@router.post("", response_model=truss_schemas.TrussOut, status_code=201)
def create_truss(
    payload: truss_schemas.TrussCreate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(_manager),
    feed: ChangeFeed = Depends(get_change_feed),
):
    code = payload.code.strip().upper()
    if db.query(Truss).filter(Truss.code == code).first():
        raise ValidationError(f"Truss code {code} already exists")

    truss = Truss(**payload.model_dump(exclude={"code"}), code=code)
    db.add(truss)
    commit(db)
    db.refresh(truss)
    feed.publish("trusses")

    write_log(db, user_id=current_user.id, action="TRUSS_CREATE", resource="trusses",
              ip=client_ip(request), meta={"id": truss.id, "code": truss.code})
    return truss


@router.delete("/{truss_id}")
def delete_truss(
    truss_id: int,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(_manager),
    feed: ChangeFeed = Depends(get_change_feed),
):
    truss = _get_truss(db, truss_id)
    code = truss.code
    db.delete(truss)
    commit(db)
    feed.publish("trusses")

    write_log(db, user_id=current_user.id, action="TRUSS_DELETE", resource="trusses",
              ip=client_ip(request), meta={"id": truss_id, "code": code})
    return {"message": f"Truss {code} deleted"}


@router.get("/{truss_id}/ledger", response_model=LoanSummary)
def get_truss_ledger(truss_id: int, db: Session = Depends(get_db), current_user: User = Depends(_manager)):
    truss = _get_truss(db, truss_id)
    movements = db.query(TrussMovement).filter(TrussMovement.truss_id == truss.id).all()
    return aggregate_loans(movements, truss.id, truss.current_stock)


@router.get("/movements", response_model=List[truss_schemas.TrussMovementOut])
def list_truss_movements(
    status: Optional[LoanStatus] = Query(None),
    type: Optional[TrussMovementType] = Query(None),
    db: Session = Depends(get_db),
    current_user: User = Depends(_manager),
):
    query = db.query(TrussMovement)
    if status:
        query = query.filter(TrussMovement.status == status)
    if type:
        query = query.filter(TrussMovement.type == type)
    return sort_recent(query.all())


# Several trusses leave together; the batch is checked in full before anything is written
@router.post("/withdrawals", response_model=List[truss_schemas.TrussMovementOut], status_code=201)
def withdraw_trusses(
    payload: truss_schemas.WithdrawalCreate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(_manager),
    feed: ChangeFeed = Depends(get_change_feed),
):
    requested = {}
    for item in payload.items:
        requested[item.truss_id] = requested.get(item.truss_id, 0) + item.quantity

    trusses = {}
    for truss_id, quantity in requested.items():
        truss = _get_truss(db, truss_id)
        if quantity > truss.current_stock:
            raise InsufficientStockError(quantity, truss.current_stock, truss.unit)
        trusses[truss_id] = truss

    # SQLite keeps the wall time only, so offsets are resolved before storing
    moved_at = as_utc(payload.date) or datetime.now(timezone.utc)
    movements = []
    for item in payload.items:
        truss = trusses[item.truss_id]
        truss.current_stock -= item.quantity
        movement = TrussMovement(
            date=moved_at,
            type=TrussMovementType.WITHDRAWAL,
            truss_id=truss.id,
            truss_name=truss.name,
            quantity=item.quantity,
            taken_by=payload.taken_by,
            service_description=payload.service_description,
            notes=payload.notes,
            status=LoanStatus.ACTIVE,
            created_by=current_user.id,
        )
        db.add(movement)
        movements.append(movement)
    commit(db)
    for m in movements:
        db.refresh(m)
    feed.publish("truss_movements", "trusses")

    write_log(db, user_id=current_user.id, action="TRUSS_WITHDRAWAL", resource="trusses",
              ip=client_ip(request), meta={"ids": [m.id for m in movements], "taken_by": payload.taken_by})
    return movements


# Closes a withdrawal: stock comes back and a return line is added to the ledger
@router.post("/movements/{movement_id}/return", response_model=truss_schemas.TrussMovementOut)
def return_trusses(
    movement_id: int,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(_manager),
    feed: ChangeFeed = Depends(get_change_feed),
):
    withdrawal = db.query(TrussMovement).filter(TrussMovement.id == movement_id).first()
    if not withdrawal:
        raise NotFoundError("Movement not found")
    if withdrawal.type != TrussMovementType.WITHDRAWAL:
        raise ValidationError("Only withdrawals can be returned")
    if withdrawal.status == LoanStatus.RETURNED:
        raise ValidationError("This withdrawal has already been returned")
    if withdrawal.truss_id is None:
        raise ValidationError("The truss of this withdrawal no longer exists")

    truss = _get_truss(db, withdrawal.truss_id)
    truss.current_stock += withdrawal.quantity
    withdrawal.status = LoanStatus.RETURNED
    db.add(TrussMovement(
        date=datetime.now(timezone.utc),
        type=TrussMovementType.RETURN,
        truss_id=truss.id,
        truss_name=truss.name,
        quantity=withdrawal.quantity,
        taken_by=withdrawal.taken_by,
        service_description=withdrawal.service_description,
        notes=f"Return of withdrawal #{withdrawal.id}",
        status=LoanStatus.RETURNED,
        created_by=current_user.id,
    ))
    commit(db)
    db.refresh(withdrawal)
    feed.publish("truss_movements", "trusses")

    write_log(db, user_id=current_user.id, action="TRUSS_RETURN", resource="trusses",
              ip=client_ip(request), meta={"id": withdrawal.id, "quantity": withdrawal.quantity})
    return withdrawal
