"""
Clinic Rx Backend — prescriptions, patients and medicine stock.

ARCHITECTURE:
- FastAPI Backend: validation, prescription save, stock bookkeeping
- SQL DB (SQLite by default): source of truth for all state
- Web front end: prescription form, stock page, prescription list/print

SAVE MODEL:
- A prescription save upserts the patient, stores the prescription and
  decrements stock in ONE transaction. All or nothing.
- Prescribing is never blocked by low stock; stock floors at zero.
"""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.trustedhost import TrustedHostMiddleware

from app.api.routes import patients, prescriptions, stocks
from app.core.config import settings
from app.db.init_db import init_db

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL, logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan handler.

    Startup:
    1. Initialize database tables
    """
    logger.info("[*] Initializing database...")
    init_db()
    logger.info("[OK] Database initialized")

    yield


app = FastAPI(
    title="Clinic Rx API",
    description="Prescriptions with atomic stock adjustment.",
    version="0.1.0",
    lifespan=lifespan,
)

# SECURITY: Trust only specific hosts
app.add_middleware(TrustedHostMiddleware, allowed_hosts=settings.ALLOWED_HOSTS)

# SECURITY: Restrict CORS to specific methods and headers (not wildcards)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=[
        "Content-Type",
        "Accept",
        "Origin",
    ],
    max_age=600,  # Cache preflight for 10 minutes
    expose_headers=["Content-Type", "Content-Disposition"],
)


@app.middleware("http")
async def add_security_headers(request, call_next):
    response = await call_next(request)
    response.headers["X-Content-Type-Options"] = "nosniff"  # Prevent MIME sniffing
    response.headers["X-Frame-Options"] = "DENY"  # Prevent clickjacking
    response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
    return response

app.include_router(patients.router, prefix="/patients", tags=["patients"])
app.include_router(prescriptions.router, prefix="/prescriptions", tags=["prescriptions"])
app.include_router(stocks.router, prefix="/stocks", tags=["stocks"])


@app.get("/health")
def health():
    return {"status": "ok"}
