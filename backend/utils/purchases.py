# backend/utils/purchases.py
from typing import Dict, FrozenSet, Iterable

from models.purchase import PurchaseStatus
from utils.errors import ValidationError

# Allowed purchase order status changes; delivered and cancelled are final
TRANSITIONS: Dict[PurchaseStatus, FrozenSet[PurchaseStatus]] = {
    PurchaseStatus.PENDING: frozenset({PurchaseStatus.APPROVED, PurchaseStatus.CANCELLED}),
    PurchaseStatus.APPROVED: frozenset({PurchaseStatus.DELIVERED, PurchaseStatus.CANCELLED}),
    PurchaseStatus.DELIVERED: frozenset(),
    PurchaseStatus.CANCELLED: frozenset(),
}


def line_total(quantity: float, unit_price: float) -> float:
    return round(quantity * unit_price, 2)


def purchase_total(items: Iterable, discount: float = 0.0) -> float:
    """Sum of quantity x unit_price over the items, minus the order discount."""
    subtotal = sum(item.quantity * item.unit_price for item in items)
    return round(subtotal - (discount or 0.0), 2)


def check_transition(current: PurchaseStatus, new: PurchaseStatus) -> None:
    current, new = PurchaseStatus(current), PurchaseStatus(new)
    if new == current:
        return
    if new not in TRANSITIONS[current]:
        raise ValidationError(f"Cannot change purchase status from {current.value} to {new.value}")
