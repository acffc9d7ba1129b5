"""Customer, supplier and vendor directories: plain CRUD over one table each."""
from typing import List, Type

from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlalchemy.orm import Session

from pharmacare.api.deps import get_db, require_permission, service_errors
from pharmacare.core.audit import AuditLog
from pharmacare.core.permissions import MANAGE_INVENTORY
from pharmacare.models.directory import Customer, Supplier, Vendor
from pharmacare.models.user import User
from pharmacare.schemas.directory import (
    CustomerCreate, CustomerUpdate, CustomerResponse,
    SupplierCreate, SupplierUpdate, SupplierResponse,
    VendorCreate, VendorUpdate, VendorResponse,
)
from pharmacare.services import crud

can_manage = require_permission(MANAGE_INVENTORY)


def build_router(
    model: Type,
    create_schema: Type[BaseModel],
    update_schema: Type[BaseModel],
    response_schema: Type[BaseModel],
) -> APIRouter:
    router = APIRouter()
    label = model.__name__
    resource = model.__tablename__

    @router.get("", response_model=List[response_schema])
    def list_entries(db: Session = Depends(get_db), current_user: User = Depends(can_manage)):
        return crud.get_all(db, model)

    @router.get("/{entry_id}", response_model=response_schema)
    def get_entry(entry_id: int, db: Session = Depends(get_db), current_user: User = Depends(can_manage)):
        with service_errors(db):
            return crud.get_by_id(db, model, entry_id)

    @router.post("", response_model=response_schema, status_code=201)
    def create_entry(data: create_schema, db: Session = Depends(get_db), current_user: User = Depends(can_manage)):
        with service_errors(db):
            entry = crud.add(db, model, data.model_dump())
        AuditLog.log_action("create", resource, entry.id, user_id=current_user.id)
        return entry

    @router.patch("/{entry_id}", response_model=response_schema)
    def update_entry(
        entry_id: int,
        data: update_schema,
        db: Session = Depends(get_db),
        current_user: User = Depends(can_manage),
    ):
        changes = data.model_dump(exclude_unset=True)
        with service_errors(db):
            entry = crud.update_by_id(db, model, entry_id, changes)
        AuditLog.log_action("update", resource, entry_id, user_id=current_user.id, changes={"fields": sorted(changes)})
        return entry

    @router.delete("/{entry_id}")
    def delete_entry(entry_id: int, db: Session = Depends(get_db), current_user: User = Depends(can_manage)):
        with service_errors(db):
            crud.delete_by_id(db, model, entry_id)
        AuditLog.log_action("delete", resource, entry_id, user_id=current_user.id)
        return {"message": f"{label} deleted"}

    return router


customers = build_router(Customer, CustomerCreate, CustomerUpdate, CustomerResponse)
suppliers = build_router(Supplier, SupplierCreate, SupplierUpdate, SupplierResponse)
vendors = build_router(Vendor, VendorCreate, VendorUpdate, VendorResponse)
