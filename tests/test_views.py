from datetime import date, datetime, timedelta, timezone
from types import SimpleNamespace

import pytest

from models.purchase import PurchaseStatus
from models.stock import MovementType
from utils.stock_status import StockStatus
from utils.views import (
    category_rollup, count_in_window, dashboard_metrics, inventory_rows, ledger_summaries,
    movements_by_day, sort_recent, status_breakdown,
)

SAO_PAULO = timezone(timedelta(hours=-3))
TODAY = date(2024, 3, 7)


def movement(when, type_=MovementType.ENTRY, created_at=None, product_id=1, qty=1, price=None):
    return SimpleNamespace(date=when, created_at=created_at, type=type_, product_id=product_id,
                           quantity=qty, unit_price=price)


def product(id, current, minimum=0, category="Elétrica", code=None):
    return SimpleNamespace(id=id, code=code or f"P{id}", name=f"Product {id}", category=category,
                           unit="un", min_stock=minimum, current_stock=current, location=None)


def _bucket(result, day):
    return next(b for b in result if b.date == day)


def test_week_has_seven_days_ending_today():
    result = movements_by_day([], TODAY, SAO_PAULO)

    assert [b.date for b in result] == [TODAY - timedelta(days=6 - i) for i in range(7)]
    assert all(b.entries == 0 and b.exits == 0 for b in result)


def test_last_second_of_the_day_stays_in_that_day():
    late = movement(datetime(2024, 3, 5, 23, 59, 59, tzinfo=SAO_PAULO))
    midnight = movement(datetime(2024, 3, 6, 0, 0, 0, tzinfo=SAO_PAULO), MovementType.EXIT)
    result = movements_by_day([late, midnight], TODAY, SAO_PAULO)

    assert _bucket(result, date(2024, 3, 5)).entries == 1
    assert _bucket(result, date(2024, 3, 5)).exits == 0
    assert _bucket(result, date(2024, 3, 6)).exits == 1
    assert _bucket(result, date(2024, 3, 6)).entries == 0


def test_buckets_follow_the_viewer_timezone():
    # 01:30 UTC on the 6th is still the evening of the 5th in São Paulo
    m = movement(datetime(2024, 3, 6, 1, 30, tzinfo=timezone.utc))

    assert _bucket(movements_by_day([m], TODAY, SAO_PAULO), date(2024, 3, 5)).entries == 1
    assert _bucket(movements_by_day([m], TODAY, timezone.utc), date(2024, 3, 6)).entries == 1


def test_naive_datetimes_are_read_as_utc():
    m = movement(datetime(2024, 3, 6, 1, 30))
    assert _bucket(movements_by_day([m], TODAY, SAO_PAULO), date(2024, 3, 5)).entries == 1


def test_window_count_excludes_older_and_future_days():
    inside = movement(datetime(2024, 3, 1, 12, 0, tzinfo=SAO_PAULO))
    before = movement(datetime(2024, 2, 29, 23, 59, tzinfo=SAO_PAULO))
    after = movement(datetime(2024, 3, 8, 0, 0, tzinfo=SAO_PAULO))

    assert count_in_window([inside, before, after], TODAY, SAO_PAULO) == 1


def test_recent_sorts_by_insertion_then_business_date():
    old_business_new_insert = movement(
        datetime(2024, 1, 1, tzinfo=timezone.utc), created_at=datetime(2024, 3, 7, 9, tzinfo=timezone.utc))
    newer_business = movement(
        datetime(2024, 3, 6, tzinfo=timezone.utc), created_at=datetime(2024, 3, 6, 9, tzinfo=timezone.utc))
    legacy = movement(datetime(2024, 3, 5, tzinfo=timezone.utc))

    ordered = sort_recent([legacy, newer_business, old_business_new_insert])
    assert ordered == [old_business_new_insert, newer_business, legacy]
    assert sort_recent([legacy, newer_business], limit=1) == [newer_business]


def test_status_breakdown_counts_every_status():
    products = [product(1, 5, 10), product(2, 12, 10), product(3, 50, 10), product(4, 1, 10)]
    breakdown = {s.status: s.count for s in status_breakdown(products)}

    assert breakdown == {StockStatus.CRITICAL: 2, StockStatus.WARNING: 1, StockStatus.NORMAL: 1}


def test_category_rollup_uses_average_cost():
    products = [product(1, 10, category="Elétrica"), product(2, 4, category="Elétrica"),
                product(3, 3, category="")]
    movements = [
        movement(datetime(2024, 3, 1, tzinfo=timezone.utc), product_id=1, qty=10, price=2.0),
        movement(datetime(2024, 3, 1, tzinfo=timezone.utc), product_id=2, qty=4, price=5.5),
    ]
    rollup = category_rollup(products, ledger_summaries(products, movements))

    assert [c.category for c in rollup] == ["Elétrica", "Uncategorized"]
    assert rollup[0].quantity == 14
    assert rollup[0].value == pytest.approx(42.0)
    assert rollup[1].quantity == 3
    assert rollup[1].value == 0


def test_inventory_rows():
    products = [product(1, 12, 10)]
    movements = [
        movement(datetime(2024, 3, 1, tzinfo=timezone.utc), qty=10, price=5.0),
        movement(datetime(2024, 3, 2, tzinfo=timezone.utc), qty=5, price=6.0),
        movement(datetime(2024, 3, 3, tzinfo=timezone.utc), MovementType.EXIT, qty=3),
    ]
    row = inventory_rows(products, movements)[0]

    assert (row.initial_stock, row.entries, row.exits, row.current_stock) == (0, 15, 3, 12)
    assert row.status == StockStatus.WARNING
    assert row.percentage == 120
    assert row.last_purchase_price == 6.0


def test_dashboard_metrics():
    products = [product(1, 10, 20), product(2, 100, 10)]
    movements = [
        movement(datetime(2024, 3, 7, 10, tzinfo=SAO_PAULO), product_id=2, qty=100, price=1.5),
        movement(datetime(2024, 1, 1, tzinfo=SAO_PAULO), product_id=1, qty=10),
    ]
    purchases = [SimpleNamespace(status=PurchaseStatus.PENDING), SimpleNamespace(status=PurchaseStatus.DELIVERED)]
    suppliers = [SimpleNamespace(active=True), SimpleNamespace(active=False)]

    metrics = dashboard_metrics(products, movements, purchases, suppliers, TODAY, SAO_PAULO)

    assert metrics.total_products == 2
    assert metrics.low_stock_items == 1
    assert metrics.total_value == 150.0
    assert metrics.recent_movements == 1
    assert metrics.pending_purchases == 1
    assert metrics.active_suppliers == 1
