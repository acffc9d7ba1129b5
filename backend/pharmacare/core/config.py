"""Application configuration.

Environment variables override all defaults.
SECRET_KEY must be set in .env for production; startup fails fast without it.
"""

import os
import warnings
from pathlib import Path
from typing import List

from dotenv import load_dotenv

_BACKEND_DIR = Path(__file__).resolve().parents[2]
load_dotenv(dotenv_path=_BACKEND_DIR / ".env", override=False)


def _csv_env(name: str, default: str) -> List[str]:
    return [v.strip() for v in os.getenv(name, default).split(",") if v.strip()]


class Settings:
    # Database
    DATABASE_URL: str = os.getenv("DATABASE_URL", "sqlite:///./pharmacare.db")
    # Upper bound for waiting on the store (pool checkout, SQLite busy lock)
    STORE_TIMEOUT_SECONDS: int = int(os.getenv("STORE_TIMEOUT_SECONDS", "10"))

    # JWT
    SECRET_KEY: str = os.getenv("SECRET_KEY", "")
    if not SECRET_KEY:
        if os.getenv("ENVIRONMENT", "development") == "production":
            raise ValueError(
                "SECRET_KEY must be set in production environment. "
                "Generate with: python -c 'import secrets; print(secrets.token_urlsafe(32))'"
            )
        warnings.warn(
            "SECRET_KEY not set in environment. Using development default. "
            "Set SECRET_KEY in .env before deploying.",
            RuntimeWarning,
        )
        SECRET_KEY = "development-only-weak-default-change-in-production"

    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "60"))
    AUTH_COOKIE_NAME: str = "pharmacare_token"

    # CORS (specific origins only)
    CORS_ORIGINS: List[str] = _csv_env(
        "CORS_ORIGINS",
        "http://localhost:5173,http://127.0.0.1:5173,http://localhost:3000,http://127.0.0.1:3000",
    )

    ENVIRONMENT: str = os.getenv("ENVIRONMENT", "development")
    DEBUG: bool = ENVIRONMENT == "development"
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    # Cookies
    SECURE_COOKIES: bool = ENVIRONMENT == "production"
    SAME_SITE_COOKIE: str = "strict"

    # Password policy
    MIN_PASSWORD_LENGTH: int = int(os.getenv("MIN_PASSWORD_LENGTH", "6"))

    # Bootstrap admin account (password is generated on first start)
    DEFAULT_ADMIN_EMAIL: str = os.getenv("DEFAULT_ADMIN_EMAIL", "admin@pharmacare.com")

    # Reporting
    LOW_STOCK_THRESHOLD: int = int(os.getenv("LOW_STOCK_THRESHOLD", "100"))
    # Dashboard alert window (days); the inventory report flag uses its own window
    DASHBOARD_EXPIRY_DAYS: int = int(os.getenv("DASHBOARD_EXPIRY_DAYS", "5"))
    INVENTORY_EXPIRY_DAYS: int = int(os.getenv("INVENTORY_EXPIRY_DAYS", "90"))
    TOP_SELLING_LIMIT: int = int(os.getenv("TOP_SELLING_LIMIT", "5"))


settings = Settings()
