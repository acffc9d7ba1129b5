"""Medicine catalog: list/search, barcode lookup, CRUD and manual stock adjustment."""
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from pharmacare.api.deps import get_db, require_permission, service_errors
from pharmacare.core.audit import AuditLog
from pharmacare.core.permissions import MANAGE_INVENTORY, VIEW_INVENTORY
from pharmacare.models.medicine import Medicine
from pharmacare.models.user import User
from pharmacare.schemas.medicine import MedicineCreate, MedicineUpdate, MedicineResponse, StockAdjustment
from pharmacare.services import catalog_service, crud
from pharmacare.services.stock_service import adjust_stock

router = APIRouter()

can_view = require_permission(VIEW_INVENTORY, MANAGE_INVENTORY)
can_manage = require_permission(MANAGE_INVENTORY)


@router.get("", response_model=List[MedicineResponse])
def list_medicines(
    search: Optional[str] = Query(None),
    category: Optional[str] = Query(None, description='Category name or "all"'),
    db: Session = Depends(get_db),
    current_user: User = Depends(can_view),
):
    return catalog_service.list_medicines(db, search=search, category=category)


@router.get("/categories", response_model=List[str])
def list_categories(db: Session = Depends(get_db), current_user: User = Depends(can_view)):
    return catalog_service.list_categories(db)


@router.get("/barcode/{code}", response_model=MedicineResponse)
def lookup_barcode(code: str, db: Session = Depends(get_db), current_user: User = Depends(can_view)):
    """Exact barcode match; no trimming or case folding."""
    with service_errors(db):
        return catalog_service.find_by_barcode(db, code)


@router.get("/{medicine_id}", response_model=MedicineResponse)
def get_medicine(medicine_id: int, db: Session = Depends(get_db), current_user: User = Depends(can_view)):
    with service_errors(db):
        return crud.get_by_id(db, Medicine, medicine_id)


@router.post("", response_model=MedicineResponse, status_code=201)
def create_medicine(data: MedicineCreate, db: Session = Depends(get_db), current_user: User = Depends(can_manage)):
    with service_errors(db):
        return catalog_service.add_medicine(db, data.model_dump())


@router.patch("/{medicine_id}", response_model=MedicineResponse)
def update_medicine(
    medicine_id: int,
    data: MedicineUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(can_manage),
):
    with service_errors(db):
        return catalog_service.update_medicine(db, medicine_id, data.model_dump(exclude_unset=True))


@router.delete("/{medicine_id}")
def delete_medicine(medicine_id: int, db: Session = Depends(get_db), current_user: User = Depends(can_manage)):
    with service_errors(db):
        catalog_service.delete_medicine(db, medicine_id)
    return {"message": "Medicine deleted"}


@router.post("/{medicine_id}/adjust-stock", response_model=MedicineResponse)
def adjust_medicine_stock(
    medicine_id: int,
    data: StockAdjustment,
    db: Session = Depends(get_db),
    current_user: User = Depends(can_manage),
):
    """Manual correction (stock count, damage). Rejected if stock would go negative."""
    with service_errors(db):
        medicine = adjust_stock(db, medicine_id, data.delta, reason=data.reason)
        db.commit()
        db.refresh(medicine)
    AuditLog.log_stock_adjustment(medicine.id, data.delta, medicine.stock, data.reason)
    return medicine
