"""Medicine catalog: add/edit/delete, search and barcode lookup."""
import logging
from typing import List, Optional

from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from pharmacare.core.exceptions import BarcodeNotFoundError, DuplicateError, ValidationError
from pharmacare.models.medicine import Medicine
from pharmacare.services import crud
from pharmacare.services.codes import generate_barcode

logger = logging.getLogger(__name__)


def _check_values(data: dict) -> None:
    if "name" in data and not (data["name"] or "").strip():
        raise ValidationError("Medicine name cannot be empty")
    if data.get("price") is not None and data["price"] < 0:
        raise ValidationError("Price cannot be negative")
    if data.get("stock") is not None and data["stock"] < 0:
        raise ValidationError("Stock cannot be negative")


def _barcode_taken(db: Session, barcode: str, exclude_id: Optional[int] = None) -> bool:
    q = db.query(Medicine.id).filter(Medicine.barcode == barcode)
    if exclude_id is not None:
        q = q.filter(Medicine.id != exclude_id)
    return q.first() is not None


def add_medicine(db: Session, data: dict) -> Medicine:
    """Create a catalog entry. A barcode is generated when none is given."""
    data = dict(data)
    _check_values(data)
    data["name"] = data["name"].strip()
    barcode = (data.get("barcode") or "").strip() or generate_barcode()
    if _barcode_taken(db, barcode):
        raise DuplicateError(f"Barcode {barcode} is already assigned")
    data["barcode"] = barcode
    try:
        return crud.add(db, Medicine, data)
    except IntegrityError:
        db.rollback()
        raise DuplicateError(f"Barcode {barcode} is already assigned")


def update_medicine(db: Session, medicine_id: int, changes: dict) -> Medicine:
    _check_values(changes)
    if "name" in changes:
        changes["name"] = changes["name"].strip()
    if changes.get("barcode"):
        if _barcode_taken(db, changes["barcode"], exclude_id=medicine_id):
            raise DuplicateError(f"Barcode {changes['barcode']} is already assigned")
    try:
        return crud.update_by_id(db, Medicine, medicine_id, changes)
    except IntegrityError:
        db.rollback()
        raise DuplicateError("Medicine update conflicts with an existing record")


def delete_medicine(db: Session, medicine_id: int) -> Medicine:
    return crud.delete_by_id(db, Medicine, medicine_id)


def list_medicines(db: Session, search: Optional[str] = None, category: Optional[str] = None) -> List[Medicine]:
    """Catalog in insertion order, filtered by category and a name/category search."""
    q = db.query(Medicine)
    if category and category != "all":
        q = q.filter(Medicine.category == category)
    if search:
        pattern = f"%{search}%"
        q = q.filter(or_(Medicine.name.ilike(pattern), Medicine.category.ilike(pattern)))
    return q.order_by(Medicine.id).all()


def list_categories(db: Session) -> List[str]:
    rows = db.query(Medicine.category).distinct().order_by(Medicine.category).all()
    return [r[0] for r in rows if r[0]]


def find_by_barcode(db: Session, code: str) -> Medicine:
    """Exact match only."""
    medicine = db.query(Medicine).filter(Medicine.barcode == code).first()
    if medicine is None:
        raise BarcodeNotFoundError(code)
    return medicine
