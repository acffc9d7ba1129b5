"""FastAPI dependencies: DB session, current user from JWT, permission checks.

JWT is accepted from:
1. Authorization header (for API clients)
2. httpOnly cookie (for the web frontend)
"""
from contextlib import contextmanager
from typing import Callable, Generator, Optional

from fastapi import Depends, HTTPException, status, Request
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from pharmacare.db.session import SessionLocal
from pharmacare.core.config import settings
from pharmacare.core.exceptions import BusinessError, PharmacyError
from pharmacare.core.permissions import has_any_permission
from pharmacare.core.security import decode_access_token
from pharmacare.models.user import User

security = HTTPBearer(auto_error=False)


def get_db() -> Generator[Session, None, None]:
    """Get database session."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_current_user_id(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> int:
    """
    Extract user ID from JWT token.
    Header takes precedence over cookie.
    """
    token = None

    if credentials:
        token = credentials.credentials
    elif settings.AUTH_COOKIE_NAME in request.cookies:
        token = request.cookies[settings.AUTH_COOKIE_NAME]

    if not token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )

    sub = decode_access_token(token)
    if not sub:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
            headers={"WWW-Authenticate": "Bearer"},
        )

    try:
        return int(sub)
    except ValueError:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token")


def get_current_user(
    db: Session = Depends(get_db),
    user_id: int = Depends(get_current_user_id),
) -> User:
    """Load current user from DB. Inactive accounts are treated as signed out."""
    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="User not found")
    if user.status != "active":
        raise BusinessError.unauthorized(f"inactive user {user_id}")
    return user


def require_permission(*permissions: str) -> Callable[..., User]:
    """Dependency factory: the current user must hold at least one of `permissions`."""

    def checker(current_user: User = Depends(get_current_user)) -> User:
        if current_user.role == "admin" or has_any_permission(current_user.permissions, *permissions):
            return current_user
        raise BusinessError.forbidden(
            f"user {current_user.id} lacks any of {', '.join(permissions)}"
        )

    return checker


@contextmanager
def service_errors(db: Session) -> Generator[None, None, None]:
    """Translate service failures into HTTP responses, rolling back the session."""
    try:
        yield
    except PharmacyError as e:
        db.rollback()
        raise BusinessError.from_domain(e)
    except IntegrityError:
        db.rollback()
        raise BusinessError.conflict("Change conflicts with existing records")
    except SQLAlchemyError as e:
        db.rollback()
        raise BusinessError.server_error(e)
