"""
Cart tests: line arithmetic, barcode matching and the checkout state machine.
"""
from decimal import Decimal
from types import SimpleNamespace

import pytest

from pharmacare.core.exceptions import BarcodeNotFoundError, CartStateError, ValidationError
from pharmacare.services.cart import (
    CHECKOUT_PENDING,
    COMMITTING,
    EMPTY,
    POPULATED,
    Cart,
)


def med(id, price="9.99", stock=10, barcode=None, name=None):
    return SimpleNamespace(id=id, name=name or f"Med {id}", price=Decimal(price), stock=stock, barcode=barcode)


PARACETAMOL = med(1, "9.99", stock=150, barcode="2403150123456", name="Paracetamol")
AMOXICILLIN = med(2, "24.99", stock=80, barcode="2403150987654", name="Amoxicillin")


def expected_total(cart):
    return sum((line.unit_price * line.quantity for line in cart.lines), Decimal("0"))


def test_add_new_and_existing_line():
    cart = Cart()
    assert cart.state == EMPTY

    cart.add(PARACETAMOL)
    cart.add(PARACETAMOL)
    cart.add(AMOXICILLIN)

    assert cart.state == POPULATED
    assert [(l.medicine_id, l.quantity) for l in cart.lines] == [(1, 2), (2, 1)]
    assert cart.total == Decimal("44.97")
    assert cart.item_count == 3


def test_total_tracks_every_edit():
    cart = Cart()
    steps = [
        lambda: cart.add(PARACETAMOL),
        lambda: cart.add(AMOXICILLIN),
        lambda: cart.change_quantity(1, 3),
        lambda: cart.change_quantity(2, -1),
        lambda: cart.add(AMOXICILLIN),
        lambda: cart.change_quantity(1, -2),
    ]
    for step in steps:
        step()
        assert cart.total == expected_total(cart)
    assert cart.total == Decimal("9.99") * 2 + Decimal("24.99")


def test_decrement_to_zero_removes_line():
    cart = Cart()
    cart.add(PARACETAMOL)
    cart.add(AMOXICILLIN)

    cart.change_quantity(1, -1)
    assert cart.get_line(1) is None
    cart.change_quantity(2, -5)

    assert cart == Cart()
    assert cart.state == EMPTY
    assert cart.total == Decimal("0")


def test_change_quantity_of_missing_line():
    with pytest.raises(ValidationError):
        Cart().change_quantity(7, 1)


def test_out_of_stock_and_stock_bound():
    cart = Cart()
    with pytest.raises(CartStateError):
        cart.add(med(3, stock=0))

    cart.add(med(4, stock=2))
    cart.add(med(4, stock=2))
    with pytest.raises(CartStateError):
        cart.add(med(4, stock=2))
    with pytest.raises(CartStateError):
        cart.change_quantity(4, 1)
    assert cart.get_line(4).quantity == 2


def test_barcode_exact_match_only():
    catalog = [PARACETAMOL, AMOXICILLIN]
    cart = Cart()

    cart.add_by_barcode("2403150987654", catalog)
    assert cart.get_line(2).quantity == 1

    for near_miss in (" 2403150987654", "2403150987654 ", "240315098765", "2403150987654\n"):
        with pytest.raises(BarcodeNotFoundError):
            cart.add_by_barcode(near_miss, catalog)
    assert cart.item_count == 1


def test_barcode_case_sensitive():
    catalog = [med(5, barcode="ABC123")]
    with pytest.raises(BarcodeNotFoundError):
        Cart().add_by_barcode("abc123", catalog)


def test_checkout_state_machine():
    cart = Cart()
    with pytest.raises(CartStateError):
        cart.begin_checkout()

    cart.add(PARACETAMOL)
    total = cart.begin_checkout()
    assert total == Decimal("9.99")
    assert cart.state == CHECKOUT_PENDING

    with pytest.raises(CartStateError):
        cart.add(AMOXICILLIN)
    with pytest.raises(CartStateError):
        cart.remove(1)

    cart.cancel_checkout()
    assert cart.state == POPULATED

    with pytest.raises(CartStateError):
        cart.begin_commit()

    cart.begin_checkout()
    cart.begin_commit()
    assert cart.state == COMMITTING
    cart.abort_commit()
    assert cart.state == CHECKOUT_PENDING


def test_payload_round_trip_keeps_state():
    cart = Cart()
    cart.add(PARACETAMOL)
    cart.add(AMOXICILLIN)
    cart.begin_checkout()

    restored = Cart.from_payload(cart.to_payload(), state=cart.state)

    assert restored == cart
    assert restored.total == cart.total
    assert restored.get_line(1).stock_at_add == 150


def test_clear_from_any_state():
    cart = Cart()
    cart.add(PARACETAMOL)
    cart.begin_checkout()
    cart.clear()
    assert cart == Cart()


def test_cancel_releases_interrupted_commit():
    cart = Cart.from_payload([{"medicine_id": 1, "name": "Paracetamol", "unit_price": "9.99", "quantity": 2}],
                             state=COMMITTING)
    cart.cancel_checkout()

    assert cart.state == POPULATED
    cart.add(PARACETAMOL)
    assert cart.get_line(1).quantity == 3
