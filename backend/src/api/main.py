"""FastAPI application main entry point."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from dotenv import load_dotenv
from fastapi import FastAPI

load_dotenv()

from .middleware import register_error_handlers
from .routes import tags
from ..services.hashtags import get_hashtag_service

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan handler to run startup tasks."""
    service = get_hashtag_service()
    logger.info(
        "Running startup: scanning workspace for hashtags",
        extra={"workspace_root": str(service.config.workspace_root)},
    )
    try:
        summary = await service.initialize()
        logger.info(
            "Startup complete: tag index ready",
            extra={"files_indexed": summary.files_indexed, "occurrences": summary.occurrences},
        )
    except Exception as exc:
        logger.exception("Startup scan failed: %s", exc)
        logger.error("App starting with an empty tag index due to initialization error")
    yield


app = FastAPI(
    title="Markdown Hashtags API",
    description="Hierarchical hashtag index for a workspace of Markdown documents",
    version="0.1.0",
    lifespan=lifespan,
)

register_error_handlers(app)

app.include_router(tags.router, tags=["tags"])


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy"}


__all__ = ["app"]
