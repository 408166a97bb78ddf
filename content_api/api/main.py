"""FastAPI application entry point."""

import logging
import os
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from content_api.api.errors import register_exception_handlers
from content_api.api.routes import (
    auth,
    awards,
    events,
    hero,
    seasons,
    sponsors,
    story_hero,
    timeline,
    uploads,
)
from content_api.api.schemas import HealthResponse
from content_api.mongodb.client import get_mongodb_client
from content_api.mongodb.config import get_mongodb_config

load_dotenv()

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)

logger = logging.getLogger(__name__)

DEFAULT_CORS_ORIGINS = "http://localhost:5173,http://localhost:3000"


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Initialize and cleanup resources."""
    logger.info("Content API starting, database %s", get_mongodb_config().database_name)
    yield
    # Shutdown
    await get_mongodb_client().close()


app = FastAPI(
    title="Content API",
    description="Website content management API with server-managed ordering",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        origin.strip()
        for origin in os.environ.get("CORS_ALLOWED_ORIGINS", DEFAULT_CORS_ORIGINS).split(",")
        if origin.strip()
    ],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)

app.include_router(auth.router, prefix="/api/auth", tags=["auth"])
app.include_router(events.router, prefix="/api/events", tags=["events"])
app.include_router(events.home_router, prefix="/api/home-events", tags=["home-events"])
app.include_router(events.page_router, prefix="/api/page-events", tags=["page-events"])
app.include_router(hero.router, prefix="/api/hero", tags=["hero"])
app.include_router(sponsors.router, prefix="/api/sponsors", tags=["sponsors"])
app.include_router(awards.router, prefix="/api/awards", tags=["awards"])
app.include_router(seasons.router, prefix="/api/seasons", tags=["seasons"])
app.include_router(timeline.router, prefix="/api/timeline", tags=["timeline"])
app.include_router(story_hero.router, prefix="/api/story-hero", tags=["story-hero"])
app.include_router(uploads.router, prefix="/api/upload", tags=["uploads"])
app.include_router(uploads.files_router, prefix="/api/files", tags=["files"])


@app.get("/api/health", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """Health check endpoint."""
    connected = await get_mongodb_client().ping()
    return HealthResponse(status="healthy", database="connected" if connected else "disconnected")
