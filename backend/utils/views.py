# backend/utils/views.py
# View-model builders for the dashboard and inventory screens.
# Inputs are plain collections (ORM rows); outputs are schema objects ready to serialize.
from collections import defaultdict
from datetime import date, datetime, timedelta, timezone, tzinfo
from typing import Dict, Iterable, List, Optional

from models.purchase import PurchaseStatus
from models.stock import MovementType
from schemas.inventory import (
    CategoryTotal, DailyMovementCount, DashboardSummary, InventoryRow,
    LedgerSummary, StatusCount,
)
from utils.dates import as_utc, local_day_bounds
from utils.ledger import aggregate
from utils.stock_status import StockStatus, classify, stock_percentage

WINDOW_DAYS = 7
UNCATEGORIZED = "Uncategorized"

_OLDEST = datetime.min.replace(tzinfo=timezone.utc)


def _window(today: date) -> List[date]:
    return [today - timedelta(days=WINDOW_DAYS - 1 - i) for i in range(WINDOW_DAYS)]


def movements_by_day(movements: Iterable, today: date, tz: tzinfo) -> List[DailyMovementCount]:
    """Entry/exit counts for the 7 local calendar days ending with `today`."""
    movements = list(movements)
    result = []
    for day in _window(today):
        start, end = local_day_bounds(day, tz)
        bucket = [m for m in movements if start <= as_utc(m.date) < end]
        result.append(DailyMovementCount(
            date=day,
            label=day.strftime("%a %d/%m"),
            entries=sum(1 for m in bucket if m.type == MovementType.ENTRY),
            exits=sum(1 for m in bucket if m.type == MovementType.EXIT),
        ))
    return result


def count_in_window(movements: Iterable, today: date, tz: tzinfo) -> int:
    start, _ = local_day_bounds(_window(today)[0], tz)
    _, end = local_day_bounds(today, tz)
    return sum(1 for m in movements if start <= as_utc(m.date) < end)


def recency_key(movement) -> datetime:
    # Insertion time first: a late entry for a past date is still "recent"
    return as_utc(movement.created_at) or as_utc(movement.date) or _OLDEST


def sort_recent(movements: Iterable, limit: Optional[int] = None) -> List:
    ordered = sorted(movements, key=recency_key, reverse=True)
    return ordered[:limit] if limit is not None else ordered


def group_by_product(movements: Iterable) -> Dict[int, List]:
    grouped = defaultdict(list)
    for m in movements:
        grouped[m.product_id].append(m)
    return grouped


def ledger_summaries(products: Iterable, movements: Iterable) -> Dict[int, LedgerSummary]:
    grouped = group_by_product(movements)
    return {p.id: aggregate(grouped.get(p.id, []), p.id, p.current_stock) for p in products}


def inventory_rows(products: Iterable, movements: Iterable) -> List[InventoryRow]:
    products = list(products)
    summaries = ledger_summaries(products, movements)
    rows = []
    for p in products:
        s = summaries[p.id]
        rows.append(InventoryRow(
            product_id=p.id,
            code=p.code,
            name=p.name,
            category=p.category,
            unit=p.unit,
            initial_stock=s.initial_stock,
            entries=s.entries,
            exits=s.exits,
            min_stock=p.min_stock,
            current_stock=p.current_stock,
            status=classify(p.current_stock, p.min_stock),
            percentage=stock_percentage(p.current_stock, p.min_stock),
            location=p.location,
            average_cost=s.average_cost,
            last_purchase_price=s.last_purchase_price,
        ))
    return rows


def status_breakdown(products: Iterable) -> List[StatusCount]:
    counts = {status: 0 for status in StockStatus}
    for p in products:
        counts[classify(p.current_stock, p.min_stock)] += 1
    return [StatusCount(status=s, count=counts[s])
            for s in (StockStatus.NORMAL, StockStatus.WARNING, StockStatus.CRITICAL)]


def category_rollup(products: Iterable, summaries: Dict[int, LedgerSummary]) -> List[CategoryTotal]:
    """Quantity and value on hand per category, valued at each product's average cost."""
    totals: Dict[str, CategoryTotal] = {}
    for p in products:
        name = p.category or UNCATEGORIZED
        total = totals.setdefault(name, CategoryTotal(category=name, quantity=0, value=0.0))
        total.quantity += p.current_stock
        summary = summaries.get(p.id)
        if summary is not None:
            total.value += p.current_stock * summary.average_cost
    for total in totals.values():
        total.value = round(total.value, 2)
    return sorted(totals.values(), key=lambda t: t.category)


def stock_value(products: Iterable, summaries: Dict[int, LedgerSummary]) -> float:
    value = 0.0
    for p in products:
        summary = summaries.get(p.id)
        if summary is not None:
            value += p.current_stock * summary.average_cost
    return round(value, 2)


def dashboard_metrics(products, movements, purchases, suppliers, today: date, tz: tzinfo) -> DashboardSummary:
    products = list(products)
    movements = list(movements)
    summaries = ledger_summaries(products, movements)
    return DashboardSummary(
        total_products=len(products),
        low_stock_items=sum(1 for p in products if classify(p.current_stock, p.min_stock) != StockStatus.NORMAL),
        total_value=stock_value(products, summaries),
        recent_movements=count_in_window(movements, today, tz),
        pending_purchases=sum(1 for p in purchases if p.status == PurchaseStatus.PENDING),
        active_suppliers=sum(1 for s in suppliers if s.active),
    )
