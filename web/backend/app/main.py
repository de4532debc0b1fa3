"""FastAPI application for the Sift moderation service.

Provides REST API endpoints wrapping the Sift Python package for:
- Single, batch and real-time comment moderation
- Decision policy inspection
- Audit log listing, stats and export

Run with ``uvicorn web.backend.app.main:create_app --factory``.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from sift import __version__
from sift.config import SiftConfig, load_config
from sift.moderation.engine import ModerationEngine
from web.backend.app.routers import audit, moderation


def create_app(config: Optional[SiftConfig] = None) -> FastAPI:
    """Build the app and its engine. The engine lives on ``app.state``."""
    config = config or load_config()
    engine = ModerationEngine.from_config(config)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        yield
        engine.close()

    app = FastAPI(
        title="Sift API",
        description=(
            "REST API for the Sift comment moderation engine. "
            "Provides endpoints for comment analysis, real-time moderation, "
            "and audit log review."
        ),
        version=__version__,
        lifespan=lifespan,
    )
    app.state.config = config
    app.state.engine = engine

    # -----------------------------------------------------------------------
    # CORS middleware (allow all origins for development)
    # -----------------------------------------------------------------------
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(moderation.router)
    app.include_router(audit.router)

    @app.get("/", tags=["meta"])
    async def root():
        """Return basic API information."""
        return {
            "name": "Sift API",
            "version": __version__,
            "description": "Comment moderation REST API",
            "docs": "/docs",
            "openapi": "/openapi.json",
        }

    @app.get("/health", tags=["meta"])
    async def health_check():
        """Health check endpoint."""
        return {"status": "healthy"}

    return app
