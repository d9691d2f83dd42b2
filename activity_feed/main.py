"""
TuChonga Activity Feed - FastAPI Application

Derives a ranked feed of notable marketplace activity (review streaks,
sentiment trends, new items, engagement, controversy, rating milestones)
from the products, services, reviews and comments tables.

Run with:
    uvicorn activity_feed.main:app --reload --host 0.0.0.0 --port 8000
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from activity_feed import __version__
from activity_feed.api import router
from activity_feed.config import get_settings
from activity_feed.database import engine, init_db

settings = get_settings()

# Configure logging
logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager for startup and shutdown."""
    logger.info(f"Starting {settings.app_name}...")

    # Create tables (development only)
    if settings.debug:
        await init_db()

    yield

    # Shutdown
    await engine.dispose()
    logger.info("Shutdown complete")


app = FastAPI(
    title=settings.app_name,
    description="""
    Activity feed for the TuChonga marketplace.

    ## Features
    - Review streaks, sentiment trends and swings
    - New products and services
    - Engagement, discussion and controversy signals
    - Quick-rating milestones

    ## Architecture
    - Single PostgreSQL database, read-only
    - No caching layer
    - Feed computed at read time
    """,
    version=__version__,
    lifespan=lifespan,
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Exception handlers
@app.exception_handler(SQLAlchemyError)
async def database_error_handler(request: Request, exc: SQLAlchemyError):
    logger.error(f"Database error on {request.url.path}: {exc}")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Activity feed unavailable", "error": "feed_unavailable"},
    )


# Include routes
app.include_router(router)


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "service": settings.app_name,
        "version": __version__,
        "docs": "/docs",
    }
