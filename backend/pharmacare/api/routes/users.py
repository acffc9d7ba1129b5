"""User administration (admin only)."""
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from pharmacare.api.deps import get_db, require_permission, service_errors
from pharmacare.core.exceptions import BusinessError
from pharmacare.core.permissions import MANAGE_USERS
from pharmacare.models.user import User
from pharmacare.schemas.user import UserCreate, UserUpdate, UserResponse
from pharmacare.services import crud, user_service

router = APIRouter()

can_manage = require_permission(MANAGE_USERS)


@router.get("", response_model=List[UserResponse])
def list_users(
    role: Optional[str] = Query(None),
    email: Optional[str] = Query(None),
    db: Session = Depends(get_db),
    current_user: User = Depends(can_manage),
):
    if email:
        user = user_service.get_user_by_email(db, email)
        return [user] if user else []
    return user_service.list_users(db, role=role)


@router.get("/{user_id}", response_model=UserResponse)
def get_user(user_id: int, db: Session = Depends(get_db), current_user: User = Depends(can_manage)):
    with service_errors(db):
        return crud.get_by_id(db, User, user_id)


@router.post("", response_model=UserResponse, status_code=201)
def create_user(data: UserCreate, db: Session = Depends(get_db), current_user: User = Depends(can_manage)):
    """Create a staff account. Permissions default to the role's set."""
    with service_errors(db):
        return user_service.create_user(
            db,
            email=data.email,
            password=data.password,
            name=data.name,
            role=data.role,
            status=data.status,
            permissions=data.permissions,
            avatar=data.avatar,
            created_by=current_user.id,
        )


@router.patch("/{user_id}", response_model=UserResponse)
def update_user(
    user_id: int,
    data: UserUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(can_manage),
):
    with service_errors(db):
        return user_service.update_user(db, user_id, data.model_dump(exclude_unset=True), changed_by=current_user.id)


@router.delete("/{user_id}")
def delete_user(user_id: int, db: Session = Depends(get_db), current_user: User = Depends(can_manage)):
    if user_id == current_user.id:
        raise BusinessError.bad_request("You cannot delete your own account")
    with service_errors(db):
        user_service.delete_user(db, user_id)
    return {"message": "User deleted"}
