"""
app.py - FastAPI application factory and startup lifecycle.

This is the ASGI application object imported by uvicorn.
It wires the repository and services, registers routers, and runs startup
initialization.

Usage (via launcher):
    python main.py

Usage (direct uvicorn):
    uvicorn app:app --reload
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI

from rentops.controllers.timeline_controller import router as timeline_router
from rentops.repository.data_repository import DataRepository
from rentops.services.checkout_timeline_service import CheckoutTimelineService
from rentops.services.cleaning_schedule_service import CleaningScheduleService
from rentops.utils.config import Settings, get_settings
from rentops.utils.logger import get_logger


logger = get_logger(__name__)


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    Build and wire the FastAPI application.

    Instantiates all services with explicit dependency injection via app.state.
    No global singletons - every dependency is traceable from this function.
    """
    settings = settings or get_settings()

    # --- Repository (single SQLite connection factory) ---
    repository = DataRepository(settings)

    # --- Services (business logic, no direct DB access) ---
    timeline_service = CheckoutTimelineService(
        repository=repository,
        settings=settings,
    )
    cleaning_schedule_service = CleaningScheduleService(
        repository=repository,
        settings=settings,
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Run startup initialization before accepting requests."""
        _startup(app, settings)
        yield

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        lifespan=lifespan,
    )

    # --- Routers ---
    app.include_router(timeline_router)

    # --- Inject services into app.state for dependency resolution ---
    app.state.repository = repository
    app.state.timeline_service = timeline_service
    app.state.cleaning_schedule_service = cleaning_schedule_service

    return app


def _startup(app: FastAPI, settings: Settings) -> None:
    """
    Idempotent startup sequence. Safe to re-run on server restarts.

    Order matters:
      1. Schema must exist before seeding.
      2. Demo data is seeded only into an empty database, anchored on tomorrow.
    """
    repository: DataRepository = app.state.repository

    logger.info("Startup: initializing database schema")
    repository.initialize_database()

    if settings.seed_demo_data:
        logger.info("Startup: seeding demo apartments and reservations (skipped if not empty)")
        repository.seed_demo_data()

    logger.info("Startup complete - system ready")


# Module-level app object for uvicorn
app = create_app()
