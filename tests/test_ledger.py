from datetime import datetime, timezone
from types import SimpleNamespace

import pytest

from models.stock import MovementType
from models.truss import LoanStatus, TrussMovementType
from utils.ledger import aggregate, aggregate_loans, average_cost, last_purchase_price

D1 = datetime(2024, 3, 1, 10, 0, tzinfo=timezone.utc)
D2 = datetime(2024, 3, 5, 10, 0, tzinfo=timezone.utc)


def entry(qty, price=None, date=D1, product_id=1):
    return SimpleNamespace(type=MovementType.ENTRY, quantity=qty, unit_price=price, date=date, product_id=product_id)


def exit_(qty, date=D1, product_id=1):
    return SimpleNamespace(type=MovementType.EXIT, quantity=qty, unit_price=None, date=date, product_id=product_id)


def test_two_priced_entries_and_exits():
    movements = [entry(10, 5.0, D1), entry(5, 6.0, D2), exit_(3, D2)]
    summary = aggregate(movements, 1, 12)

    assert summary.entries == 15
    assert summary.exits == 3
    assert summary.initial_stock == 0
    assert summary.average_cost == pytest.approx(80 / 15)
    assert round(summary.average_cost, 2) == 5.33
    assert summary.last_purchase_price == 6.0


def test_empty_history():
    summary = aggregate([], 1, 20)

    assert summary.entries == 0
    assert summary.exits == 0
    assert summary.initial_stock == 20
    assert summary.average_cost == 0
    assert summary.last_purchase_price == 0


def test_other_products_are_ignored():
    movements = [entry(10, 5.0, product_id=2), exit_(4, product_id=2), entry(3, 2.0)]
    summary = aggregate(movements, 1, 3)

    assert summary.entries == 3
    assert summary.exits == 0
    assert summary.initial_stock == 0


def test_initial_plus_entries_minus_exits_is_current():
    movements = [entry(7, 1.5), exit_(2), entry(4), exit_(9), entry(1, 3.0)]
    for current in (0, 5, 40):
        s = aggregate(movements, 1, current)
        assert s.initial_stock + s.entries - s.exits == current
        assert s.entries >= 0 and s.exits >= 0


def test_aggregate_is_idempotent_and_does_not_mutate():
    movements = [entry(10, 5.0, D1), exit_(2)]
    snapshot = [vars(m).copy() for m in movements]

    assert aggregate(movements, 1, 8) == aggregate(movements, 1, 8)
    assert [vars(m) for m in movements] == snapshot


def test_initial_stock_can_go_negative_when_stock_drifted():
    # 10 entered but current stock was corrected down to 2 without a movement
    summary = aggregate([entry(10, 1.0)], 1, 2)
    assert summary.initial_stock == -8


def test_unpriced_entries_give_zero_cost():
    entries = [entry(5), entry(3, 0)]
    assert average_cost(entries) == 0.0
    assert last_purchase_price(entries) == 0.0


def test_unpriced_entries_do_not_dilute_average():
    assert average_cost([entry(10, 4.0), entry(90)]) == pytest.approx(4.0)


def test_last_price_tie_goes_to_first_in_list():
    assert last_purchase_price([entry(1, 7.0, D2), entry(1, 9.0, D2)]) == 7.0
    assert last_purchase_price([entry(1, 9.0, D2), entry(1, 7.0, D2)]) == 9.0


def test_last_price_uses_business_date_not_list_order():
    assert last_purchase_price([entry(1, 8.0, D2), entry(1, 3.0, D1)]) == 8.0


def test_naive_dates_are_compared_as_utc():
    naive = datetime(2024, 3, 6, 0, 0)
    assert last_purchase_price([entry(1, 8.0, D2), entry(1, 4.0, naive)]) == 4.0


def loan(type_, qty, status=LoanStatus.ACTIVE, truss_id=1):
    return SimpleNamespace(type=type_, quantity=qty, status=status, truss_id=truss_id)


def test_loan_summary():
    movements = [
        loan(TrussMovementType.WITHDRAWAL, 3, LoanStatus.RETURNED),
        loan(TrussMovementType.RETURN, 3, LoanStatus.RETURNED),
        loan(TrussMovementType.WITHDRAWAL, 2),
        loan(TrussMovementType.WITHDRAWAL, 4, truss_id=2),
    ]
    summary = aggregate_loans(movements, 1, 8)

    assert summary.withdrawals == 5
    assert summary.returns == 3
    assert summary.outstanding == 2
    assert summary.initial_stock == 10
