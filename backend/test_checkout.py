"""
Checkout tests: a confirmed cart becomes sale records, all or nothing.
"""
import json
import logging
from decimal import Decimal

import pytest

from conftest import stock_of
from pharmacare.core.exceptions import CartStateError
from pharmacare.models import Medicine, SaleTransaction
from pharmacare.services.cart import CHECKOUT_PENDING, EMPTY
from pharmacare.services.checkout_service import checkout, load_cart, save_cart


def fill_cart(db, user, *adds):
    record, cart = load_cart(db, user.id)
    for medicine, times in adds:
        for _ in range(times):
            cart.add(medicine)
    cart.begin_checkout()
    save_cart(db, record, cart)
    return cart


def audit_events(caplog):
    return [json.loads(r.getMessage())["event_type"] for r in caplog.records if r.name == "audit"]


def test_successful_checkout_records_every_line(db, make_user, make_medicine):
    user = make_user("cashier")
    paracetamol = make_medicine(name="Paracetamol", price="9.99", stock=150)
    amoxicillin = make_medicine(name="Amoxicillin", price="24.99", stock=80)
    fill_cart(db, user, (paracetamol, 5), (amoxicillin, 2))

    result = checkout(db, user.id)

    assert result.success is True
    assert result.total == Decimal("99.93")
    assert len(result.sale_ids) == 2
    assert stock_of(db, paracetamol.id) == 145
    assert stock_of(db, amoxicillin.id) == 78
    totals = [s.total_amount for s in db.query(SaleTransaction).order_by(SaleTransaction.id)]
    assert totals == [Decimal("49.95"), Decimal("49.98")]
    assert [m.id for m in result.medicines] == [paracetamol.id, amoxicillin.id]

    _, cart = load_cart(db, user.id)
    assert cart.state == EMPTY
    assert cart.is_empty()


def test_failing_line_commits_nothing(db, make_user, make_medicine):
    user = make_user("cashier")
    first = make_medicine(stock=10)
    second = make_medicine(stock=5)
    third = make_medicine(stock=10)
    fill_cart(db, user, (first, 2), (second, 3), (third, 1))

    # someone else sells the second item's stock after it went into the cart
    db.query(Medicine).filter(Medicine.id == second.id).update({"stock": 1})
    db.commit()

    result = checkout(db, user.id)

    assert result.success is False
    assert result.sale_ids == []
    assert result.failed.line.medicine_id == second.id
    assert "Insufficient stock" in result.failed.reason
    assert [l.medicine_id for l in result.not_attempted] == [third.id]
    assert db.query(SaleTransaction).count() == 0
    assert stock_of(db, first.id) == 10
    assert stock_of(db, second.id) == 1
    assert stock_of(db, third.id) == 10

    # cart kept for another attempt
    _, cart = load_cart(db, user.id)
    assert cart.state == CHECKOUT_PENDING
    assert cart.item_count == 6


def test_checkout_requires_confirmed_cart(db, make_user, make_medicine):
    user = make_user("cashier")
    medicine = make_medicine()
    record, cart = load_cart(db, user.id)
    cart.add(medicine)
    save_cart(db, record, cart)

    with pytest.raises(CartStateError):
        checkout(db, user.id)
    assert db.query(SaleTransaction).count() == 0


def test_checkout_with_customer(db, make_user, make_medicine, customer):
    user = make_user("cashier")
    medicine = make_medicine(price="19.99", stock=100)
    fill_cart(db, user, (medicine, 1))

    result = checkout(db, user.id, customer_id=customer.id)

    assert result.success is True
    db.refresh(customer)
    assert customer.total_purchases == Decimal("19.99")
    sale = db.get(SaleTransaction, result.sale_ids[0])
    assert sale.customer_id == customer.id


def test_committed_checkout_is_audited(db, make_user, make_medicine, caplog):
    caplog.set_level(logging.INFO, logger="audit")
    user = make_user("cashier")
    first = make_medicine(stock=10)
    second = make_medicine(stock=5)
    fill_cart(db, user, (first, 1), (second, 2))

    assert checkout(db, user.id).success is True

    assert audit_events(caplog) == ["stock.adjust", "sale.create", "stock.adjust", "sale.create"]


def test_rolled_back_checkout_leaves_no_audit_entries(db, make_user, make_medicine, caplog):
    caplog.set_level(logging.INFO, logger="audit")
    user = make_user("cashier")
    first = make_medicine(stock=10)
    second = make_medicine(stock=5)
    fill_cart(db, user, (first, 1), (second, 1))

    db.query(Medicine).filter(Medicine.id == second.id).update({"stock": 0})
    db.commit()

    result = checkout(db, user.id)

    assert result.success is False
    assert db.query(SaleTransaction).count() == 0
    assert audit_events(caplog) == []
