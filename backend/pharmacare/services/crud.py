"""Per-table store operations shared by the catalog and directory services."""
import logging
from typing import Any, Dict, List, Optional, Type, TypeVar

from sqlalchemy.orm import Session

from pharmacare.core.exceptions import NotFoundError

logger = logging.getLogger(__name__)

T = TypeVar("T")


def add(db: Session, model: Type[T], data: Dict[str, Any]) -> T:
    obj = model(**data)
    db.add(obj)
    db.commit()
    db.refresh(obj)
    logger.info(f"Created {model.__tablename__} #{obj.id}")
    return obj


def get_by_id(db: Session, model: Type[T], obj_id: int) -> T:
    obj = db.get(model, obj_id)
    if obj is None:
        raise NotFoundError(model.__name__, obj_id)
    return obj


def get_all(db: Session, model: Type[T], order_by=None) -> List[T]:
    q = db.query(model)
    q = q.order_by(order_by if order_by is not None else model.id)
    return q.all()


def query_by_field(db: Session, model: Type[T], field: str, value: Any) -> List[T]:
    column = getattr(model, field)
    return db.query(model).filter(column == value).order_by(model.id).all()


def update_by_id(db: Session, model: Type[T], obj_id: int, changes: Dict[str, Any]) -> T:
    """Apply only the keys present in `changes`. Unknown keys are an error."""
    obj = get_by_id(db, model, obj_id)
    for key, value in changes.items():
        if not hasattr(model, key):
            raise AttributeError(f"{model.__name__} has no field {key!r}")
        setattr(obj, key, value)
    db.commit()
    db.refresh(obj)
    logger.info(f"Updated {model.__tablename__} #{obj_id}: {sorted(changes)}")
    return obj


def delete_by_id(db: Session, model: Type[T], obj_id: int) -> Optional[T]:
    obj = get_by_id(db, model, obj_id)
    db.delete(obj)
    db.commit()
    logger.info(f"Deleted {model.__tablename__} #{obj_id}")
    return obj
