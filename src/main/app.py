"""
Main Application - Main Layer

This module serves as the entry point for the FastAPI application.
It initializes the container, creates the FastAPI app, and includes
the API routers.
"""

from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from src.main.config import AppSettings, get_settings
from src.main.container import app_lifespan, init_container
from src.presentation.controllers import (
    planning_router,
    system_router,
    workflows_router,
)
from src.shared import configure_logging, get_logger, update_logging_from_settings

# Bootstrap logging from the environment so settings loading is logged too
configure_logging()

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan management.

    Records the start time used by /info and delegates resource checks to
    the container's app_lifespan.
    """
    app.state.started_at = datetime.now(timezone.utc)
    logger.info("app.startup")

    async with app_lifespan() as container:
        app.state.container = container
        yield

    logger.info("app.shutdown")


def create_app(settings: Optional[AppSettings] = None) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        settings: Pre-built settings; loaded from the environment when omitted

    Returns:
        FastAPI: The configured FastAPI application
    """
    settings = settings or get_settings()
    update_logging_from_settings(settings)

    # Initialize dependency injection container
    init_container(settings)

    app = FastAPI(
        title=settings.app.title,
        description=settings.app.description,
        version=settings.app.version,
        debug=settings.app.debug,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(system_router)
    app.include_router(workflows_router)
    app.include_router(planning_router)

    return app
