"""
Checkout: turn a confirmed cart into sale records.

Lines are recorded strictly in cart order, one at a time, inside a single
database transaction. The first failing line stops processing, everything is
rolled back and the result names the failed line and the lines never tried.
A successful checkout clears the cart.
"""
import logging
from dataclasses import dataclass, field
from decimal import Decimal
from typing import List, Optional, Tuple

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from pharmacare.core.exceptions import PharmacyError
from pharmacare.models.cart import CartSession
from pharmacare.models.medicine import Medicine
from pharmacare.services.cart import Cart, CartLine
from pharmacare.services.transaction_service import log_recorded_sale, record_sale

logger = logging.getLogger(__name__)


@dataclass
class FailedLine:
    line: CartLine
    reason: str


@dataclass
class CheckoutResult:
    success: bool
    total: Decimal
    sale_ids: List[int] = field(default_factory=list)
    processed: List[CartLine] = field(default_factory=list)
    failed: Optional[FailedLine] = None
    not_attempted: List[CartLine] = field(default_factory=list)
    medicines: List[Medicine] = field(default_factory=list)


def load_cart(db: Session, user_id: int) -> Tuple[CartSession, Cart]:
    """Get or create the user's persisted cart."""
    record = db.query(CartSession).filter(CartSession.user_id == user_id).first()
    if record is None:
        record = CartSession(user_id=user_id, state="empty", payload=[])
        db.add(record)
        db.commit()
        db.refresh(record)
    return record, Cart.from_payload(record.payload, state=record.state)


def save_cart(db: Session, record: CartSession, cart: Cart) -> None:
    record.state = cart.state
    record.payload = cart.to_payload()
    db.commit()


def checkout(db: Session, user_id: int, customer_id: Optional[int] = None) -> CheckoutResult:
    """Record every cart line as a sale, all or nothing.

    The cart must be in checkout_pending (see Cart.begin_checkout).
    """
    record, cart = load_cart(db, user_id)
    cart.begin_commit()
    save_cart(db, record, cart)

    result = CheckoutResult(success=False, total=cart.total)
    lines = list(cart.lines)
    sales = []
    logger.info(f"Checkout for user {user_id}: {len(lines)} lines, total {result.total}")

    for index, line in enumerate(lines):
        try:
            sale = record_sale(
                db,
                medicine_id=line.medicine_id,
                quantity=line.quantity,
                unit_price=line.unit_price,
                customer_id=customer_id,
                commit=False,
            )
        except (PharmacyError, SQLAlchemyError) as e:
            db.rollback()
            if isinstance(e, SQLAlchemyError):
                logger.error(f"Store error on checkout line {line.medicine_id}: {e}", exc_info=True)
                reason = "Store error while recording sale"
            else:
                logger.info(f"Checkout line {line.medicine_id} rejected: {e}")
                reason = str(e)
            result.failed = FailedLine(line=line, reason=reason)
            result.not_attempted = lines[index + 1:]
            result.sale_ids = []
            result.processed = []
            record, cart = load_cart(db, user_id)
            cart.abort_commit()
            save_cart(db, record, cart)
            return result
        sales.append(sale)
        result.sale_ids.append(sale.id)
        result.processed.append(line)

    cart.clear()
    record.state = cart.state
    record.payload = cart.to_payload()
    db.commit()

    for sale in sales:
        log_recorded_sale(db, sale)
    result.success = True
    result.medicines = db.query(Medicine).order_by(Medicine.id).all()
    logger.info(f"Checkout for user {user_id} committed sales {result.sale_ids}")
    return result
