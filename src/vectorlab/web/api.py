"""FastAPI application factory.

Main entry point for the VectorLab Web API.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncGenerator

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from vectorlab.config import load_app_config
from vectorlab.db import init_db
from vectorlab.web.drafts import get_draft_manager
from vectorlab.web.routes import (
    exercises_router,
    health_router,
    practice_router,
    structure_router,
)

logger = structlog.get_logger(__name__)


def _make_lifespan(db_path: Path | None):
    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        """Open the store on startup; drop pending drafts on shutdown."""
        path = db_path or load_app_config().database.resolved_path()
        init_db(path)
        logger.info("api_startup", db_path=str(path))
        yield
        get_draft_manager().cancel_all()
        logger.info("api_shutdown")

    return lifespan


def create_app(db_path: Path | None = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        db_path: SQLite file to use (defaults to the configured path)

    Returns:
        Configured FastAPI app instance
    """
    config = load_app_config()

    app = FastAPI(
        title="VectorLab API",
        description="Linear algebra practice: authoring, grading and progress",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=_make_lifespan(db_path),
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.web.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(health_router)
    app.include_router(structure_router)
    app.include_router(practice_router)
    app.include_router(exercises_router)

    return app


# Default app instance for uvicorn
app = create_app()
