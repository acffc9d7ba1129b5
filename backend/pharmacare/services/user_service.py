"""User administration and sign-up. Permissions always come from core.permissions."""
import logging
from datetime import datetime, timezone
from typing import List, Optional
from urllib.parse import quote

from sqlalchemy.orm import Session

from pharmacare.core.audit import AuditLog
from pharmacare.core.config import settings
from pharmacare.core.exceptions import DuplicateError, NotFoundError, ValidationError
from pharmacare.core.permissions import DEFAULT_ROLE, ROLES, resolve_permissions
from pharmacare.core.security import get_password_hash, verify_password
from pharmacare.models.cart import CartSession
from pharmacare.models.user import User
from pharmacare.services import crud

logger = logging.getLogger(__name__)


def avatar_url(name: str) -> str:
    return f"https://ui-avatars.com/api/?name={quote(name)}&background=random"


def _check_password(password: str) -> None:
    if len(password) < settings.MIN_PASSWORD_LENGTH:
        raise ValidationError(f"Password must be at least {settings.MIN_PASSWORD_LENGTH} characters")


def get_user_by_email(db: Session, email: str) -> Optional[User]:
    return db.query(User).filter(User.email == email.lower()).first()


def create_user(
    db: Session,
    email: str,
    password: str,
    name: str,
    role: str = DEFAULT_ROLE,
    status: str = "active",
    permissions: Optional[List[str]] = None,
    avatar: Optional[str] = None,
    created_by: Optional[int] = None,
) -> User:
    """Create credentials and the linked profile in one step."""
    if role not in ROLES:
        raise ValidationError(f"Role must be one of {', '.join(ROLES)}")
    _check_password(password)
    if get_user_by_email(db, email):
        raise DuplicateError("Email is already registered")

    user = User(
        email=email.lower(),
        hashed_password=get_password_hash(password),
        name=name,
        role=role,
        status=status,
        permissions=resolve_permissions(role, permissions),
        avatar=avatar or avatar_url(name),
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    logger.info(f"Created user {user.id} ({user.role})")
    AuditLog.log_permission_change(user.id, created_by, user.role, user.permissions)
    return user


def authenticate(db: Session, email: str, password: str) -> Optional[User]:
    """Return the user for valid credentials and stamp last_login, else None."""
    user = get_user_by_email(db, email)
    if not user or not verify_password(password, user.hashed_password):
        AuditLog.log_authentication("login", email, False, reason="Invalid credentials")
        return None
    if user.status != "active":
        AuditLog.log_authentication("login", email, False, reason="Inactive account")
        return None
    user.last_login = datetime.now(timezone.utc)
    db.commit()
    db.refresh(user)
    AuditLog.log_authentication("login", email, True)
    return user


def update_user(db: Session, user_id: int, changes: dict, changed_by: Optional[int] = None) -> User:
    """Apply profile changes.

    A role change re-derives permissions unless an explicit list is supplied;
    admins always keep every permission.
    """
    user = db.get(User, user_id)
    if user is None:
        raise NotFoundError("User", user_id)

    role = changes.get("role") or user.role
    if role not in ROLES:
        raise ValidationError(f"Role must be one of {', '.join(ROLES)}")

    if "email" in changes and changes["email"]:
        email = changes["email"].lower()
        other = get_user_by_email(db, email)
        if other and other.id != user.id:
            raise DuplicateError("Email is already registered")
        user.email = email
    if changes.get("password"):
        _check_password(changes["password"])
        user.hashed_password = get_password_hash(changes["password"])
    for key in ("name", "status", "avatar"):
        if changes.get(key) is not None:
            setattr(user, key, changes[key])

    permissions_changed = changes.get("role") is not None or changes.get("permissions") is not None
    if permissions_changed:
        requested = changes.get("permissions")
        if changes.get("role") is not None and requested is None:
            user.permissions = resolve_permissions(role)
        else:
            user.permissions = resolve_permissions(role, requested)
        user.role = role

    db.commit()
    db.refresh(user)
    if permissions_changed:
        AuditLog.log_permission_change(user.id, changed_by, user.role, user.permissions)
    return user


def list_users(db: Session, role: Optional[str] = None) -> List[User]:
    if role:
        return crud.query_by_field(db, User, "role", role)
    return crud.get_all(db, User)


def delete_user(db: Session, user_id: int) -> None:
    user = db.get(User, user_id)
    if user is None:
        raise NotFoundError("User", user_id)
    db.query(CartSession).filter(CartSession.user_id == user_id).delete()
    db.delete(user)
    db.commit()
    logger.info(f"Deleted user {user_id}")
