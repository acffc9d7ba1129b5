"""
Stock adjustment tests.

Tests:
1. Deltas apply and commit with the caller
2. Negative results are rejected and leave stock untouched
3. Unknown medicines and non-integer deltas
4. Two sales competing for the last units, in turn and from two threads
"""
import threading
from datetime import date
from decimal import Decimal

import pytest

from conftest import insert, stock_of
from pharmacare.core.exceptions import InsufficientStockError, MedicineNotFoundError, ValidationError
from pharmacare.models import Medicine
from pharmacare.services.stock_service import adjust_stock, validate_stock_availability


def test_positive_and_negative_deltas(db, make_medicine):
    medicine = make_medicine(stock=10)

    updated = adjust_stock(db, medicine.id, 5, reason="recount")
    db.commit()
    assert updated.stock == 15

    adjust_stock(db, medicine.id, -15)
    db.commit()
    assert stock_of(db, medicine.id) == 0


def test_delta_below_zero_rejected(db, make_medicine):
    medicine = make_medicine(stock=3)

    with pytest.raises(InsufficientStockError) as exc:
        adjust_stock(db, medicine.id, -4)
    db.rollback()

    assert exc.value.requested == 4
    assert exc.value.available == 3
    assert stock_of(db, medicine.id) == 3


def test_unknown_medicine(db):
    with pytest.raises(MedicineNotFoundError):
        adjust_stock(db, 999, 1)


@pytest.mark.parametrize("delta", [1.5, "2", True])
def test_non_integer_delta_rejected(db, make_medicine, delta):
    medicine = make_medicine(stock=10)
    with pytest.raises(ValidationError):
        adjust_stock(db, medicine.id, delta)
    assert stock_of(db, medicine.id) == 10


def test_two_sales_for_last_units(db, make_medicine):
    """Stock 3, two attempts of 2: the second one must fail."""
    medicine = make_medicine(stock=3)

    adjust_stock(db, medicine.id, -2, reason="sale")
    db.commit()
    with pytest.raises(InsufficientStockError):
        adjust_stock(db, medicine.id, -2, reason="sale")
    db.rollback()

    assert stock_of(db, medicine.id) == 1


def test_validate_stock_availability(db, make_medicine):
    medicine = make_medicine(stock=5)
    assert validate_stock_availability(db, medicine.id, 5) is True
    assert validate_stock_availability(db, medicine.id, 6) is False
    with pytest.raises(MedicineNotFoundError):
        validate_stock_availability(db, 12345, 1)


def test_concurrent_sales_for_last_units(file_session_factory):
    """Stock 3, two terminals selling 2 at the same moment: exactly one wins."""
    medicine_id = insert(file_session_factory, Medicine(
        name="Insulin Glargine", manufacturer="DiabCare", price=Decimal("45.00"),
        stock=3, expiry_date=date(2030, 1, 1), category="Diabetes", barcode="2401010009999",
    ))
    barrier = threading.Barrier(2)
    outcomes = []

    def sell():
        session = file_session_factory()
        try:
            barrier.wait(timeout=10)
            adjust_stock(session, medicine_id, -2, reason="sale")
            session.commit()
            outcomes.append("sold")
        except InsufficientStockError:
            session.rollback()
            outcomes.append("rejected")
        finally:
            session.close()

    threads = [threading.Thread(target=sell) for _ in range(2)]
    for t in threads:
        t.start()
    for t in threads:
        t.join(timeout=30)

    assert sorted(outcomes) == ["rejected", "sold"]
    check = file_session_factory()
    try:
        assert stock_of(check, medicine_id) == 1
    finally:
        check.close()
