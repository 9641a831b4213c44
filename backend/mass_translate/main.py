"""
Mass Translate Server - Main Application

This is the entry point for the FastAPI application.
It handles:
- REST API endpoints (health, DeepL translate, auth, user admin)
- Static file serving under /app
- Startup/shutdown of Redis, the database and the DeepL client
"""
from contextlib import asynccontextmanager
import logging

from fastapi import FastAPI
from fastapi.staticfiles import StaticFiles

from mass_translate.api import router as api_router
from mass_translate.config.redis import get_redis, close_redis
from mass_translate.config.settings import settings
from mass_translate.models.database import AsyncSessionLocal, init_db
from mass_translate.services.translation import close_deepl_client
from mass_translate.services.user_service import user_service

# Configure logging
logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan manager.

    Handles startup and shutdown events using the modern FastAPI pattern.
    """
    # === STARTUP ===
    logger.info("🚀 Starting Mass Translate Server...")

    await init_db()
    logger.info("✅ Database tables created")

    redis = await get_redis()
    await redis.ping()
    logger.info("✅ Redis connected")

    async with AsyncSessionLocal() as db:
        await user_service.ensure_admin(db)

    logger.info(f"✅ Serving files from {settings.STATIC_DIR} on port: {settings.API_PORT}")

    yield  # Application runs here

    # === SHUTDOWN ===
    logger.info("🛑 Shutting down...")
    await close_deepl_client()
    await close_redis()


app = FastAPI(
    title="Mass Translate Server",
    description="DeepL translation front-end with a shared Redis result cache",
    version="1.0.0",
    lifespan=lifespan
)

# Include REST API routes
app.include_router(api_router, prefix="/api")

# Static files
app.mount("/app", StaticFiles(directory=settings.STATIC_DIR, check_dir=False), name="static")
