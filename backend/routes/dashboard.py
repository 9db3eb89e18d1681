# backend/routes/dashboard.py

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from config import settings
from database import get_db
from models.product import Product
from models.purchase import Purchase
from models.stock import StockMovement
from models.supplier import Supplier
from models.users import User
from schemas.inventory import (
    CategoryRollupResponse, DailyMovementResponse, DashboardSummary, StatusBreakdownResponse,
)
from utils.dates import local_today, resolve_timezone
from utils.permissions import Action
from utils.tokenJWT import capability_required
from utils.views import category_rollup, dashboard_metrics, ledger_summaries, movements_by_day, status_breakdown

router = APIRouter(
    prefix="/dashboard",
    tags=["Dashboard"]
)

_viewer = capability_required(Action.VIEW_DASHBOARD)

TZ_QUERY = Query(None, description="IANA timezone of the viewer, e.g. America/Sao_Paulo")


def _tz(name: Optional[str]):
    return resolve_timezone(name or settings.DEFAULT_TIMEZONE)


# === Endpoint 1: Dashboard Summary ===

@router.get("/summary", response_model=DashboardSummary)
def get_summary(
    tz: Optional[str] = TZ_QUERY,
    db: Session = Depends(get_db),
    current_user: User = Depends(_viewer),
):
    zone = _tz(tz)
    return dashboard_metrics(
        db.query(Product).all(),
        db.query(StockMovement).all(),
        db.query(Purchase).all(),
        db.query(Supplier).all(),
        today=local_today(zone),
        tz=zone,
    )

# === Endpoint 2: Chart Data ===

# Entries and exits per local day for the last week, missing days are zero
@router.get("/movements-by-day", response_model=DailyMovementResponse)
def get_movements_by_day(
    tz: Optional[str] = TZ_QUERY,
    db: Session = Depends(get_db),
    current_user: User = Depends(_viewer),
):
    zone = _tz(tz)
    data = movements_by_day(db.query(StockMovement).all(), local_today(zone), zone)
    return DailyMovementResponse(data=data)

# === Endpoint 3: Stock status pie ===

@router.get("/stock-status", response_model=StatusBreakdownResponse)
def get_stock_status(
    db: Session = Depends(get_db),
    current_user: User = Depends(_viewer),
):
    return StatusBreakdownResponse(data=status_breakdown(db.query(Product).all()))

# === Endpoint 4: Categories ===

@router.get("/categories", response_model=CategoryRollupResponse)
def get_categories(
    db: Session = Depends(get_db),
    current_user: User = Depends(_viewer),
):
    products = db.query(Product).all()
    summaries = ledger_summaries(products, db.query(StockMovement).all())
    return CategoryRollupResponse(data=category_rollup(products, summaries))
