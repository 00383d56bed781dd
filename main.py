"""
Event Finance Manager - FastAPI Application Entry Point

This is the main entry point for the FastAPI application.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from eventfinance.config import settings
from eventfinance.database import init_db, close_db
from eventfinance.utils.error_handling import (
    setup_exception_handlers,
    ErrorTrackingMiddleware,
)

# Configure logging
logging.basicConfig(
    level=logging.INFO if not settings.debug else logging.DEBUG,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifespan context manager for FastAPI.
    Handles startup and shutdown events.
    """
    # Startup
    logger.info(f"Starting {settings.app_name}...")
    logger.info(f"Environment: {settings.app_env}")
    if settings.demo_mode:
        logger.warning("Demo mode is ON: every request has full budget capabilities")

    # Initialize database (dev only - use migrations in production)
    if settings.is_development:
        await init_db()
        logger.info("Database tables initialized")

    yield

    # Shutdown
    logger.info(f"Shutting down {settings.app_name}...")
    await close_db()
    logger.info("Database connections closed")


# Create FastAPI application
app = FastAPI(
    title=settings.app_name,
    description="Event budgets, expenses and approvals",
    version="0.1.0",
    docs_url="/api/docs" if settings.is_development else None,
    redoc_url="/api/redoc" if settings.is_development else None,
    lifespan=lifespan,
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Error handling
setup_exception_handlers(app)
app.add_middleware(ErrorTrackingMiddleware)


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {
        "status": "healthy",
        "app": settings.app_name,
        "environment": settings.app_env,
    }


# ===========================================
# API ROUTERS
# ===========================================

from eventfinance.routers import (  # noqa: E402
    events,
    budget_items,
    expenses,
    dashboard,
    me,
)

api_prefix = f"/api/{settings.api_version}"

app.include_router(events.router, prefix=api_prefix, tags=["Events"])
app.include_router(budget_items.router, prefix=api_prefix, tags=["Budget Items"])
app.include_router(expenses.router, prefix=api_prefix, tags=["Expenses"])
app.include_router(dashboard.router, prefix=api_prefix, tags=["Dashboard"])
app.include_router(me.router, prefix=api_prefix, tags=["Current User"])
