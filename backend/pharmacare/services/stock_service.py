"""Stock adjustment. Used by the sale and purchase-receipt paths."""
import logging

from sqlalchemy import update
from sqlalchemy.orm import Session

from pharmacare.core.exceptions import InsufficientStockError, MedicineNotFoundError, ValidationError
from pharmacare.models.medicine import Medicine

logger = logging.getLogger(__name__)


def adjust_stock(db: Session, medicine_id: int, delta: int, reason: str = "adjustment") -> Medicine:
    """Apply a signed delta to a medicine's stock. Does not commit or audit;
    callers write the stock.adjust entry once their transaction has committed.

    The check and the write are one conditional UPDATE, so two concurrent
    sales of the same item cannot both pass and drive stock below zero.

    Raises:
        MedicineNotFoundError: no such medicine
        InsufficientStockError: the delta would make stock negative
    """
    if isinstance(delta, bool) or not isinstance(delta, int):
        raise ValidationError("Stock delta must be an integer")

    result = db.execute(
        update(Medicine)
        .where(Medicine.id == medicine_id, Medicine.stock + delta >= 0)
        .values(stock=Medicine.stock + delta)
        .execution_options(synchronize_session=False)
    )

    if result.rowcount == 0:
        current = db.query(Medicine.stock).filter(Medicine.id == medicine_id).scalar()
        if current is None:
            raise MedicineNotFoundError(medicine_id)
        logger.info(f"Rejected stock delta {delta} for medicine {medicine_id} (stock {current})")
        raise InsufficientStockError(medicine_id, requested=-delta, available=current)

    logger.debug(f"Stock delta {delta} for medicine {medicine_id} ({reason})")
    return db.get(Medicine, medicine_id, populate_existing=True)


def validate_stock_availability(db: Session, medicine_id: int, quantity: int) -> bool:
    """Early read-only check. Advisory only: adjust_stock is the real guard."""
    current = db.query(Medicine.stock).filter(Medicine.id == medicine_id).scalar()
    if current is None:
        raise MedicineNotFoundError(medicine_id)
    return current >= quantity
