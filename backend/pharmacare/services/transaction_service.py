"""Transaction recorder: sales and purchase receipts.

Each recording is one database transaction: the stock delta and the
transaction record are committed together or not at all, so a stock change
without its record (an orphaned adjustment) cannot be left behind.
"""
import logging
from datetime import date as date_type
from decimal import Decimal
from typing import Optional

from sqlalchemy import func, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from pharmacare.core.audit import AuditLog
from pharmacare.core.exceptions import (
    DuplicateError,
    InvalidStatusTransitionError,
    MedicineNotFoundError,
    NotFoundError,
    ValidationError,
)
from pharmacare.models.directory import Customer, Supplier
from pharmacare.models.medicine import Medicine
from pharmacare.models.purchase import PURCHASE_STATUSES, PurchaseReceipt, PurchaseTransaction
from pharmacare.models.sale import SaleTransaction
from pharmacare.services.codes import generate_invoice_number
from pharmacare.services.stock_service import adjust_stock

logger = logging.getLogger(__name__)

# current status -> statuses it may move to
PURCHASE_TRANSITIONS = {
    "pending": {"received", "cancelled"},
    "received": set(),
    "cancelled": set(),
}


def _money(value) -> Decimal:
    return Decimal(str(value))


def line_total(quantity: int, unit_price) -> Decimal:
    """quantity * unit_price, rounded to cents."""
    return (_money(unit_price) * quantity).quantize(Decimal("0.01"))


def _validate_line(quantity: int, unit_price, allow_zero_price: bool = True) -> None:
    if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity <= 0:
        raise ValidationError("Quantity must be a positive integer")
    price = _money(unit_price)
    if price < 0 or (not allow_zero_price and price == 0):
        raise ValidationError("Unit price must be positive")


def record_sale(
    db: Session,
    medicine_id: int,
    quantity: int,
    unit_price,
    customer_id: Optional[int] = None,
    commit: bool = True,
) -> SaleTransaction:
    """Decrement stock and append an immutable sale record.

    Args:
        commit: If True, commits immediately and rolls back on failure.
            If False, the caller owns the transaction (checkout batches lines this way).

    Raises:
        ValidationError, MedicineNotFoundError, InsufficientStockError
    """
    _validate_line(quantity, unit_price)
    if customer_id is not None and db.get(Customer, customer_id) is None:
        raise NotFoundError("Customer", customer_id)

    try:
        adjust_stock(db, medicine_id, -quantity, reason="sale")
        sale = SaleTransaction(
            medicine_id=medicine_id,
            customer_id=customer_id,
            quantity=quantity,
            unit_price=_money(unit_price),
            total_amount=line_total(quantity, unit_price),
            type="sale",
            status="completed",
        )
        db.add(sale)
        if customer_id is not None:
            db.execute(
                update(Customer)
                .where(Customer.id == customer_id)
                .values(
                    total_purchases=func.coalesce(Customer.total_purchases, 0) + sale.total_amount,
                    last_purchase=date_type.today(),
                )
                .execution_options(synchronize_session=False)
            )
        db.flush()
        if commit:
            db.commit()
            db.refresh(sale)
    except Exception:
        if commit:
            db.rollback()
        raise

    if commit:
        log_recorded_sale(db, sale)
    return sale


def log_recorded_sale(db: Session, sale: SaleTransaction) -> None:
    """Audit entries for a sale. Only call once its transaction has committed."""
    stock_after = db.query(Medicine.stock).filter(Medicine.id == sale.medicine_id).scalar()
    logger.info(f"Recorded sale {sale.id}: medicine={sale.medicine_id} qty={sale.quantity} total={sale.total_amount}")
    AuditLog.log_stock_adjustment(sale.medicine_id, -sale.quantity, stock_after, "sale")
    AuditLog.log_action("create", "sale", sale.id, changes={
        "medicine_id": sale.medicine_id,
        "quantity": sale.quantity,
        "total_amount": str(sale.total_amount),
    })


def _receive(db: Session, purchase: PurchaseTransaction) -> None:
    """Stock increment plus receipt log row. Caller commits, then calls _log_receipt."""
    adjust_stock(db, purchase.medicine_id, purchase.quantity, reason=f"purchase:{purchase.invoice_number}")
    db.add(PurchaseReceipt(
        purchase_id=purchase.id,
        medicine_id=purchase.medicine_id,
        supplier_id=purchase.supplier_id,
        quantity=purchase.quantity,
        unit_price=purchase.unit_price,
        total_amount=purchase.total_amount,
        invoice_number=purchase.invoice_number,
        type="purchase",
    ))
    db.flush()


def _log_receipt(db: Session, purchase: PurchaseTransaction) -> None:
    stock_after = db.query(Medicine.stock).filter(Medicine.id == purchase.medicine_id).scalar()
    AuditLog.log_stock_adjustment(
        purchase.medicine_id, purchase.quantity, stock_after, f"purchase:{purchase.invoice_number}"
    )


def record_purchase(
    db: Session,
    medicine_id: int,
    quantity: int,
    unit_price,
    supplier_id: int,
    invoice_number: Optional[str] = None,
    status: str = "received",
    date: Optional[date_type] = None,
) -> PurchaseTransaction:
    """Write a purchase. Stock increases only when status is "received".

    Raises:
        ValidationError, NotFoundError, MedicineNotFoundError, DuplicateError
    """
    _validate_line(quantity, unit_price, allow_zero_price=False)
    if status not in PURCHASE_STATUSES:
        raise ValidationError(f"Status must be one of {', '.join(PURCHASE_STATUSES)}")
    if db.get(Medicine, medicine_id) is None:
        raise MedicineNotFoundError(medicine_id)
    if db.get(Supplier, supplier_id) is None:
        raise NotFoundError("Supplier", supplier_id)
    invoice_number = (invoice_number or "").strip() or generate_invoice_number()

    purchase = PurchaseTransaction(
        medicine_id=medicine_id,
        supplier_id=supplier_id,
        quantity=quantity,
        unit_price=_money(unit_price),
        total_amount=line_total(quantity, unit_price),
        invoice_number=invoice_number,
        date=date or date_type.today(),
        status=status,
    )
    try:
        db.add(purchase)
        db.flush()
        if status == "received":
            _receive(db, purchase)
        db.commit()
    except IntegrityError as e:
        db.rollback()
        logger.info(f"Purchase rejected, invoice number {invoice_number!r} taken: {e.orig}")
        raise DuplicateError(f"Invoice number {invoice_number} already exists")
    except Exception:
        db.rollback()
        raise

    db.refresh(purchase)
    if status == "received":
        _log_receipt(db, purchase)
    logger.info(f"Recorded purchase {purchase.id} ({invoice_number}) status={status} qty={quantity}")
    AuditLog.log_action("create", "purchase", purchase.id, changes={"status": status, "quantity": quantity})
    return purchase


def update_purchase_status(db: Session, purchase_id: int, status: str) -> PurchaseTransaction:
    """Move a purchase along pending -> received | cancelled.

    Reaching "received" applies the stock increment exactly once.
    """
    if status not in PURCHASE_STATUSES:
        raise ValidationError(f"Status must be one of {', '.join(PURCHASE_STATUSES)}")
    purchase = db.get(PurchaseTransaction, purchase_id)
    if purchase is None:
        raise NotFoundError("Purchase", purchase_id)
    if status == purchase.status:
        return purchase
    if status not in PURCHASE_TRANSITIONS[purchase.status]:
        raise InvalidStatusTransitionError(purchase.status, status)

    previous = purchase.status
    try:
        purchase.status = status
        if status == "received":
            _receive(db, purchase)
        db.commit()
    except Exception:
        db.rollback()
        raise

    db.refresh(purchase)
    if status == "received":
        _log_receipt(db, purchase)
    logger.info(f"Purchase {purchase_id} status {previous} -> {status}")
    AuditLog.log_action("update", "purchase", purchase_id, changes={"status": [previous, status]})
    return purchase


def delete_purchase(db: Session, purchase_id: int) -> None:
    """Only purchases that never moved stock can be deleted."""
    purchase = db.get(PurchaseTransaction, purchase_id)
    if purchase is None:
        raise NotFoundError("Purchase", purchase_id)
    if purchase.status == "received":
        raise InvalidStatusTransitionError(purchase.status, "deleted")
    db.delete(purchase)
    db.commit()
    AuditLog.log_action("delete", "purchase", purchase_id)
