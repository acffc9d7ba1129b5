"""Database session. SQLite compatible with connection pooling."""
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from pharmacare.core.config import settings


def build_engine(url: str, **overrides):
    """Engine with a bounded wait on the store for every backend."""
    if url.startswith("sqlite"):
        # SQLite: NullPool for thread-safety, busy timeout bounds lock waits
        from sqlalchemy.pool import NullPool
        kwargs = {
            "connect_args": {"check_same_thread": False, "timeout": settings.STORE_TIMEOUT_SECONDS},
            "poolclass": NullPool,
        }
    else:
        # PostgreSQL/MySQL: QueuePool with sensible defaults
        kwargs = {
            "pool_size": 5,
            "max_overflow": 10,
            "pool_timeout": settings.STORE_TIMEOUT_SECONDS,
            "pool_recycle": 3600,
            "pool_pre_ping": True,
        }
    kwargs.update(overrides)
    return create_engine(url, **kwargs)


engine = build_engine(settings.DATABASE_URL)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
