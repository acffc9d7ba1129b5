"""
PharmaCare Backend: catalog, point of sale, purchases, directories and reports.

ARCHITECTURE:
- FastAPI routes: auth + permission checks, request validation
- Services: business rules (stock, recording, checkout, reporting)
- SQLAlchemy store: source of truth; stock changes are conditional UPDATEs
"""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from pharmacare import __version__
from pharmacare.api.routes import auth, directory, medicines, pos, purchases, reports, sales, users
from pharmacare.core.config import settings
from pharmacare.db.init_db import init_db

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create tables (and the bootstrap admin) before serving."""
    try:
        logger.info("Initializing database...")
        init_db()
        logger.info("Database initialized")
    except Exception as e:
        logger.error(f"Startup error: {e}", exc_info=True)
        raise
    yield
    logger.info("Shutting down")


app = FastAPI(
    title="PharmaCare API",
    description="Pharmacy inventory, point of sale, purchasing and reporting.",
    version=__version__,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
    allow_headers=[
        "Content-Type",
        "Authorization",
        "Accept",
        "Origin",
    ],
    max_age=600,
    expose_headers=["Content-Type", "Content-Disposition"],
)


@app.middleware("http")
async def add_security_headers(request, call_next):
    response = await call_next(request)
    response.headers["X-Content-Type-Options"] = "nosniff"
    response.headers["X-Frame-Options"] = "DENY"
    response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
    if settings.SECURE_COOKIES:
        response.headers["Strict-Transport-Security"] = "max-age=31536000; includeSubDomains"
    return response


app.include_router(auth.router, prefix="/auth", tags=["auth"])
app.include_router(medicines.router, prefix="/medicines", tags=["medicines"])
app.include_router(directory.customers, prefix="/customers", tags=["customers"])
app.include_router(directory.suppliers, prefix="/suppliers", tags=["suppliers"])
app.include_router(directory.vendors, prefix="/vendors", tags=["vendors"])
app.include_router(users.router, prefix="/users", tags=["users"])
app.include_router(sales.router, prefix="/sales", tags=["sales"])
app.include_router(purchases.router, prefix="/purchases", tags=["purchases"])
app.include_router(pos.router, prefix="/pos", tags=["pos"])
app.include_router(reports.router, prefix="/reports", tags=["reports"])


@app.get("/health")
def health():
    return {"status": "ok", "version": __version__}
