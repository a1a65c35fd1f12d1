"""
Settlement Sam Backend - FastAPI Application
Main entry point with all routes configured.
"""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from settlement_sam.config import settings
from settlement_sam.core.exceptions import register_exception_handlers
from settlement_sam.database import init_db
from settlement_sam.schemas.common import HealthResponse

# Import all API routers
from settlement_sam.api import public, sms, leads, attorney, admin, distribute, billing

VERSION = "1.0.0"

logging.basicConfig(
    level=logging.DEBUG if settings.DEV_MODE else logging.INFO,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown events."""
    # Startup
    if settings.DATASTORE == "sql":
        await init_db()
    logger.info("Settlement Sam API started (datastore=%s)", settings.DATASTORE)
    yield
    # Shutdown


app = FastAPI(
    title="Settlement Sam API",
    description="Verified personal injury lead scoring, verification and delivery",
    version=VERSION,
    lifespan=lifespan
)

# CORS Configuration
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)

# Include all routers
app.include_router(public.router)
app.include_router(sms.router)
app.include_router(leads.router)
app.include_router(attorney.router)
app.include_router(admin.router)
app.include_router(distribute.router)
app.include_router(billing.router)  # Stripe invoices + webhook


@app.get("/")
async def root():
    """Health check endpoint."""
    return {
        "message": "Settlement Sam API is running",
        "version": VERSION,
        "docs": "/docs"
    }


@app.get("/health", response_model=HealthResponse)
async def health():
    """Detailed health check."""
    return HealthResponse(version=VERSION, datastore=settings.DATASTORE)
