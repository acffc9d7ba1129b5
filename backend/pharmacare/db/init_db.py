"""Create all tables. Run on app startup.

Creates an admin account with a random password when no users exist.
The password is printed once; change it after first login.
"""
import secrets
import logging

from pharmacare.core.config import settings
from pharmacare.core.permissions import resolve_permissions
from pharmacare.core.security import get_password_hash
from pharmacare.db.base import Base
from pharmacare.db.session import engine, SessionLocal
from pharmacare import models  # noqa: F401 - register models
from pharmacare.models.user import User

logger = logging.getLogger(__name__)


def init_db(bind=None, session_factory=None):
    Base.metadata.create_all(bind=bind or engine)

    db = (session_factory or SessionLocal)()
    try:
        if db.query(User).count() == 0:
            default_password = secrets.token_urlsafe(16)
            admin = User(
                email=settings.DEFAULT_ADMIN_EMAIL,
                name="Administrator",
                role="admin",
                status="active",
                permissions=resolve_permissions("admin"),
                hashed_password=get_password_hash(default_password),
            )
            db.add(admin)
            db.commit()
            logger.warning(f"Created default admin user {settings.DEFAULT_ADMIN_EMAIL}")

            print("\n" + "=" * 70)
            print("DEFAULT ADMIN USER CREATED")
            print("=" * 70)
            print(f"Email:    {settings.DEFAULT_ADMIN_EMAIL}")
            print(f"Password: {default_password}")
            print("\nChange this password immediately after first login!")
            print("=" * 70 + "\n")
    finally:
        db.close()
