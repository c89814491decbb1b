"""
Badge Engine API

FastAPI application serving badge progress and scheduled group detection.
"""

from contextlib import asynccontextmanager
import logging
import sys

from fastapi import FastAPI

from badge_engine import __version__
from badge_engine.config import settings
from badge_engine.db.session import init_db, AsyncSessionLocal
from badge_engine.api.v1.router import api_router
from badge_engine.features.group_activity import background_group_detection


# === Logging Setup ===
logging.basicConfig(
    level=getattr(logging, settings.log_level.upper()),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    handlers=[
        logging.StreamHandler(sys.stdout),
    ]
)
logger = logging.getLogger(__name__)


# === Lifespan ===
@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown events."""
    # Startup
    logger.info("Starting Badge Engine API...")
    init_db()
    logger.info("Database initialized")

    if settings.group_detection_enabled:
        await background_group_detection.start(AsyncSessionLocal)

    yield

    # Shutdown
    if settings.group_detection_enabled:
        await background_group_detection.stop()
    logger.info("Shutting down...")


# === App Creation ===
app = FastAPI(
    title="Badge Engine API",
    description="Badge progress, tier awards and group activity detection",
    version=__version__,
    lifespan=lifespan,
    docs_url="/docs" if settings.debug else None,
    redoc_url="/redoc" if settings.debug else None,
)


# === Routes ===
app.include_router(api_router, prefix="/api/v1")


# === Health Check ===
@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy", "version": __version__}
