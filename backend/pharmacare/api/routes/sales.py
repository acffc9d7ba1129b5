"""Sales ledger: list recorded sales and manual sale entry."""
from datetime import date, datetime, time, timedelta
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from pharmacare.api.deps import get_db, require_permission, service_errors
from pharmacare.core.exceptions import MedicineNotFoundError
from pharmacare.core.permissions import MANAGE_SALES, PROCESS_SALES, VIEW_SALES
from pharmacare.models.medicine import Medicine
from pharmacare.models.sale import SaleTransaction
from pharmacare.models.user import User
from pharmacare.schemas.transactions import SaleCreate, SaleResponse
from pharmacare.services.transaction_service import record_sale

router = APIRouter()

can_view = require_permission(VIEW_SALES, MANAGE_SALES)
can_record = require_permission(PROCESS_SALES, MANAGE_SALES)


@router.get("", response_model=List[SaleResponse])
def list_sales(
    start: Optional[date] = Query(None, description="First day to include"),
    end: Optional[date] = Query(None, description="Last day to include"),
    medicine_id: Optional[int] = Query(None),
    db: Session = Depends(get_db),
    current_user: User = Depends(can_view),
):
    """Newest first."""
    q = db.query(SaleTransaction)
    if start:
        q = q.filter(SaleTransaction.created_at >= datetime.combine(start, time.min))
    if end:
        q = q.filter(SaleTransaction.created_at < datetime.combine(end + timedelta(days=1), time.min))
    if medicine_id is not None:
        q = q.filter(SaleTransaction.medicine_id == medicine_id)
    return q.order_by(SaleTransaction.created_at.desc(), SaleTransaction.id.desc()).all()


@router.post("", response_model=SaleResponse, status_code=201)
def create_sale(data: SaleCreate, db: Session = Depends(get_db), current_user: User = Depends(can_record)):
    """Record a single sale. Without unit_price the catalog price is used."""
    with service_errors(db):
        unit_price = data.unit_price
        if unit_price is None:
            medicine = db.get(Medicine, data.medicine_id)
            if medicine is None:
                raise MedicineNotFoundError(data.medicine_id)
            unit_price = medicine.price
        return record_sale(
            db,
            medicine_id=data.medicine_id,
            quantity=data.quantity,
            unit_price=unit_price,
            customer_id=data.customer_id,
        )
