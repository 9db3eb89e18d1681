# backend/utils/ledger.py
"""
Stock figures reconstructed from the append-only movement ledger.

Nothing here touches the database: callers load the complete movement history
(unpaginated) and the product's authoritative current stock, and get back the
numbers needed to audit that stock by hand. Movements can be ORM rows or any
object exposing the same attributes.
"""
from datetime import datetime, timezone
from typing import Iterable, List, Optional

from models.stock import MovementType
from models.truss import LoanStatus, TrussMovementType
from schemas.inventory import LedgerSummary, LoanSummary
from utils.dates import as_utc

_OLDEST = datetime.min.replace(tzinfo=timezone.utc)


def _for_owner(movements: Iterable, attr: str, owner_id) -> List:
    return [m for m in movements if getattr(m, attr) == owner_id]


def _total(movements: Iterable, movement_type) -> int:
    return sum(int(m.quantity or 0) for m in movements if m.type == movement_type)


def _is_priced(movement) -> bool:
    # A zero price is how the entry form says "no price given"
    return bool(movement.unit_price)


def average_cost(entries: Iterable) -> float:
    """Quantity-weighted mean unit price over priced entries, 0 without any."""
    value = 0.0
    quantity = 0
    for m in entries:
        if not _is_priced(m):
            continue
        value += float(m.unit_price) * m.quantity
        quantity += m.quantity
    if quantity == 0:
        return 0.0
    return value / quantity


def last_purchase_price(entries: Iterable) -> float:
    """Unit price of the latest priced entry by business date.

    Entries sharing the latest date resolve to the first one in the given order.
    """
    latest = None
    latest_date: Optional[datetime] = None
    for m in entries:
        if not _is_priced(m):
            continue
        moved_at = as_utc(m.date) or _OLDEST
        if latest is None or moved_at > latest_date:
            latest, latest_date = m, moved_at
    return float(latest.unit_price) if latest is not None else 0.0


def aggregate(movements: Iterable, product_id, current_stock: int) -> LedgerSummary:
    own = _for_owner(movements, "product_id", product_id)
    entries = [m for m in own if m.type == MovementType.ENTRY]

    entered = _total(own, MovementType.ENTRY)
    exited = _total(own, MovementType.EXIT)

    return LedgerSummary(
        product_id=product_id,
        current_stock=current_stock,
        entries=entered,
        exits=exited,
        initial_stock=current_stock - entered + exited,
        average_cost=average_cost(entries),
        last_purchase_price=last_purchase_price(entries),
    )


def aggregate_loans(movements: Iterable, truss_id, current_stock: int) -> LoanSummary:
    own = _for_owner(movements, "truss_id", truss_id)

    withdrawn = _total(own, TrussMovementType.WITHDRAWAL)
    returned = _total(own, TrussMovementType.RETURN)
    outstanding = sum(
        m.quantity for m in own
        if m.type == TrussMovementType.WITHDRAWAL and m.status == LoanStatus.ACTIVE
    )

    return LoanSummary(
        truss_id=truss_id,
        current_stock=current_stock,
        withdrawals=withdrawn,
        returns=returned,
        outstanding=outstanding,
        initial_stock=current_stock + withdrawn - returned,
    )
