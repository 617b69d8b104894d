#!/usr/bin/env python3
"""
Circles API - HTTP API layer for the connection suggestion engine.

This is the FastAPI application in front of the engine. It serves:
- Ranked connection suggestions (mutual, popularity, recency, proximity)
- Friend search with mutual-connection annotations
- The connection request write path
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from circles.logging_config import configure_logging, get_logger

from .dependencies import authenticate_pb
from .settings import get_settings

# Format: 2026-01-06T14:05:52Z [api] LEVEL message
configure_logging(source="api")
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Manage application lifecycle - startup and shutdown."""
    settings = get_settings()

    if settings.graph_backend == "pocketbase" and not settings.skip_pb_auth:
        await authenticate_pb()
    else:
        logger.warning(
            f"Skipping PocketBase authentication (GRAPH_BACKEND={settings.graph_backend}, "
            f"SKIP_PB_AUTH={settings.skip_pb_auth})"
        )

    yield


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    app = FastAPI(title="Circles API", description="Connection suggestion API", lifespan=lifespan)

    settings = get_settings()

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "DELETE", "OPTIONS"],
        allow_headers=["*"],
    )

    from .routers import connection_requests, suggestions

    app.include_router(suggestions.router)
    app.include_router(connection_requests.router)

    @app.get("/health")
    async def health_check() -> dict[str, str]:
        """Health check endpoint."""
        return {"status": "healthy", "service": "circles-api"}

    return app


# Create app instance for uvicorn
app = create_app()
