"""Auth: sign-up, sign-in, sign-out.

- Password hashing with bcrypt
- httpOnly, Secure, SameSite cookies
- Same error for unknown email and wrong password
"""
from fastapi import APIRouter, Depends, Response
from sqlalchemy.orm import Session

from pharmacare.api.deps import get_db, get_current_user, service_errors
from pharmacare.core.audit import AuditLog
from pharmacare.core.config import settings
from pharmacare.core.exceptions import BusinessError
from pharmacare.core.security import create_access_token
from pharmacare.models.user import User
from pharmacare.schemas.user import UserRegister, UserLogin, UserResponse, Token
from pharmacare.services import user_service

router = APIRouter()


@router.post("/register", response_model=UserResponse)
def register(data: UserRegister, db: Session = Depends(get_db)):
    """
    Create credentials and the linked profile.

    New accounts get role "user" (view_inventory, view_sales).
    """
    with service_errors(db):
        return user_service.create_user(db, email=data.email, password=data.password, name=data.name)


@router.post("/login", response_model=Token)
def login(data: UserLogin, response: Response, db: Session = Depends(get_db)):
    """Sign in. The token is returned and also set as an httpOnly cookie."""
    user = user_service.authenticate(db, data.email, data.password)
    if not user:
        raise BusinessError.unauthorized(f"login failed for {data.email}")

    token = create_access_token(subject=str(user.id))
    response.set_cookie(
        key=settings.AUTH_COOKIE_NAME,
        value=token,
        max_age=settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60,
        secure=settings.SECURE_COOKIES,
        httponly=True,
        samesite=settings.SAME_SITE_COOKIE,
    )
    return Token(access_token=token)


@router.post("/logout")
def logout(response: Response, current_user: User = Depends(get_current_user)):
    """Sign out by clearing the auth cookie."""
    response.delete_cookie(
        key=settings.AUTH_COOKIE_NAME,
        secure=settings.SECURE_COOKIES,
        httponly=True,
        samesite=settings.SAME_SITE_COOKIE,
    )
    AuditLog.log_authentication("logout", current_user.email, True)
    return {"message": "Logged out successfully"}


@router.get("/me", response_model=UserResponse)
def me(current_user: User = Depends(get_current_user)):
    """Get current authenticated user."""
    return current_user
