"""Point of sale: per-user cart, barcode scan and checkout.

Flow: add/scan/adjust lines -> POST /checkout (freeze total) ->
POST /checkout/confirm (record sales, all or nothing) or /checkout/cancel.
"""
from typing import Iterable, Optional

from fastapi import APIRouter, Depends, Response
from sqlalchemy.orm import Session

from pharmacare.api.deps import get_db, require_permission, service_errors
from pharmacare.core.exceptions import InsufficientStockError, MedicineNotFoundError
from pharmacare.core.permissions import MANAGE_SALES, PROCESS_SALES
from pharmacare.models.medicine import Medicine
from pharmacare.models.user import User
from pharmacare.schemas.transactions import (
    BarcodeScan, CartAdd, CartLineResponse, CartResponse,
    CheckoutConfirm, CheckoutResponse, FailedLineResponse, QuantityChange,
)
from pharmacare.services.cart import Cart, CartLine
from pharmacare.services.checkout_service import checkout, load_cart, save_cart
from pharmacare.services.stock_service import validate_stock_availability

router = APIRouter()

can_sell = require_permission(PROCESS_SALES, MANAGE_SALES)


def _lines(lines: Iterable[CartLine]):
    return [
        CartLineResponse(
            medicine_id=line.medicine_id,
            name=line.name,
            unit_price=line.unit_price,
            quantity=line.quantity,
            line_total=line.line_total,
        )
        for line in lines
    ]


def _cart_response(cart: Cart) -> CartResponse:
    return CartResponse(state=cart.state, lines=_lines(cart.lines), total=cart.total, item_count=cart.item_count)


def _check_live_stock(db: Session, cart: Cart, medicine: Medicine) -> None:
    """Early answer from live stock before the line grows. Checkout stays the real guard."""
    line = cart.get_line(medicine.id)
    requested = (line.quantity if line else 0) + 1
    if not validate_stock_availability(db, medicine.id, requested):
        raise InsufficientStockError(medicine.id, requested=requested, available=medicine.stock)


@router.get("/cart", response_model=CartResponse)
def get_cart(db: Session = Depends(get_db), current_user: User = Depends(can_sell)):
    _, cart = load_cart(db, current_user.id)
    return _cart_response(cart)


@router.post("/cart/items", response_model=CartResponse)
def add_item(data: CartAdd, db: Session = Depends(get_db), current_user: User = Depends(can_sell)):
    """Add one unit, or bump the existing line by one."""
    with service_errors(db):
        record, cart = load_cart(db, current_user.id)
        medicine = db.get(Medicine, data.medicine_id)
        if medicine is None:
            raise MedicineNotFoundError(data.medicine_id)
        _check_live_stock(db, cart, medicine)
        cart.add(medicine)
        save_cart(db, record, cart)
    return _cart_response(cart)


@router.post("/cart/scan", response_model=CartResponse)
def scan_barcode(data: BarcodeScan, db: Session = Depends(get_db), current_user: User = Depends(can_sell)):
    """Add the medicine whose barcode equals the scanned code exactly."""
    with service_errors(db):
        record, cart = load_cart(db, current_user.id)
        matches = db.query(Medicine).filter(Medicine.barcode == data.code).all()
        if matches:
            _check_live_stock(db, cart, matches[0])
        cart.add_by_barcode(data.code, matches)
        save_cart(db, record, cart)
    return _cart_response(cart)


@router.patch("/cart/items/{medicine_id}", response_model=CartResponse)
def change_quantity(
    medicine_id: int,
    data: QuantityChange,
    db: Session = Depends(get_db),
    current_user: User = Depends(can_sell),
):
    """Adjust a line by delta; reaching zero removes it."""
    with service_errors(db):
        record, cart = load_cart(db, current_user.id)
        cart.change_quantity(medicine_id, data.delta)
        save_cart(db, record, cart)
    return _cart_response(cart)


@router.delete("/cart/items/{medicine_id}", response_model=CartResponse)
def remove_item(medicine_id: int, db: Session = Depends(get_db), current_user: User = Depends(can_sell)):
    with service_errors(db):
        record, cart = load_cart(db, current_user.id)
        cart.remove(medicine_id)
        save_cart(db, record, cart)
    return _cart_response(cart)


@router.delete("/cart", response_model=CartResponse)
def clear_cart(db: Session = Depends(get_db), current_user: User = Depends(can_sell)):
    with service_errors(db):
        record, cart = load_cart(db, current_user.id)
        cart.clear()
        save_cart(db, record, cart)
    return _cart_response(cart)


@router.post("/checkout", response_model=CartResponse)
def begin_checkout(db: Session = Depends(get_db), current_user: User = Depends(can_sell)):
    """Freeze the cart and return the total for confirmation."""
    with service_errors(db):
        record, cart = load_cart(db, current_user.id)
        cart.begin_checkout()
        save_cart(db, record, cart)
    return _cart_response(cart)


@router.post("/checkout/cancel", response_model=CartResponse)
def cancel_checkout(db: Session = Depends(get_db), current_user: User = Depends(can_sell)):
    with service_errors(db):
        record, cart = load_cart(db, current_user.id)
        cart.cancel_checkout()
        save_cart(db, record, cart)
    return _cart_response(cart)


@router.post("/checkout/confirm", response_model=CheckoutResponse)
def confirm_checkout(
    response: Response,
    data: Optional[CheckoutConfirm] = None,
    db: Session = Depends(get_db),
    current_user: User = Depends(can_sell),
):
    """
    Record every line as a sale, in cart order.

    On failure nothing is committed, the cart stays in checkout_pending and
    the response (409) names the failed line and the lines never attempted.
    """
    with service_errors(db):
        result = checkout(db, current_user.id, customer_id=data.customer_id if data else None)
        _, cart = load_cart(db, current_user.id)

    failed = None
    if result.failed is not None:
        response.status_code = 409
        failed = FailedLineResponse(
            medicine_id=result.failed.line.medicine_id,
            name=result.failed.line.name,
            quantity=result.failed.line.quantity,
            reason=result.failed.reason,
        )
    return CheckoutResponse(
        success=result.success,
        total=result.total,
        sale_ids=result.sale_ids,
        failed=failed,
        not_attempted=_lines(result.not_attempted),
        cart=_cart_response(cart),
    )
