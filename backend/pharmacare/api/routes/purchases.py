"""Purchases from suppliers: pending -> received | cancelled."""
from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from pharmacare.api.deps import get_db, require_permission, service_errors
from pharmacare.core.permissions import MANAGE_INVENTORY
from pharmacare.models.purchase import PurchaseTransaction
from pharmacare.models.user import User
from pharmacare.schemas.transactions import PurchaseCreate, PurchaseStatusUpdate, PurchaseResponse
from pharmacare.services import crud
from pharmacare.services import transaction_service

router = APIRouter()

can_manage = require_permission(MANAGE_INVENTORY)


@router.get("", response_model=List[PurchaseResponse])
def list_purchases(
    status: Optional[str] = Query(None),
    start: Optional[date] = Query(None),
    end: Optional[date] = Query(None),
    db: Session = Depends(get_db),
    current_user: User = Depends(can_manage),
):
    q = db.query(PurchaseTransaction)
    if status:
        q = q.filter(PurchaseTransaction.status == status)
    if start:
        q = q.filter(PurchaseTransaction.date >= start)
    if end:
        q = q.filter(PurchaseTransaction.date <= end)
    return q.order_by(PurchaseTransaction.date.desc(), PurchaseTransaction.id.desc()).all()


@router.get("/{purchase_id}", response_model=PurchaseResponse)
def get_purchase(purchase_id: int, db: Session = Depends(get_db), current_user: User = Depends(can_manage)):
    with service_errors(db):
        return crud.get_by_id(db, PurchaseTransaction, purchase_id)


@router.post("", response_model=PurchaseResponse, status_code=201)
def create_purchase(data: PurchaseCreate, db: Session = Depends(get_db), current_user: User = Depends(can_manage)):
    """Stock increases immediately only when the purchase is created as received."""
    with service_errors(db):
        return transaction_service.record_purchase(
            db,
            medicine_id=data.medicine_id,
            quantity=data.quantity,
            unit_price=data.unit_price,
            supplier_id=data.supplier_id,
            invoice_number=data.invoice_number,
            status=data.status,
            date=data.date,
        )


@router.patch("/{purchase_id}/status", response_model=PurchaseResponse)
def update_status(
    purchase_id: int,
    data: PurchaseStatusUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(can_manage),
):
    with service_errors(db):
        return transaction_service.update_purchase_status(db, purchase_id, data.status)


@router.delete("/{purchase_id}")
def delete_purchase(purchase_id: int, db: Session = Depends(get_db), current_user: User = Depends(can_manage)):
    with service_errors(db):
        transaction_service.delete_purchase(db, purchase_id)
    return {"message": "Purchase deleted"}
