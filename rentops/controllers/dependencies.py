"""Shared FastAPI dependency providers for controller layer."""

from __future__ import annotations

from fastapi import HTTPException, Request, status

from rentops.services.checkout_timeline_service import CheckoutTimelineService
from rentops.services.cleaning_schedule_service import CleaningScheduleService
from rentops.utils.config import get_settings


def get_timeline_service(request: Request) -> CheckoutTimelineService:
    service = getattr(request.app.state, "timeline_service", None)
    if service is None:
        repository = getattr(request.app.state, "repository", None)
        if repository is not None:
            service = CheckoutTimelineService(repository=repository, settings=get_settings())
            request.app.state.timeline_service = service
    if service is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Timeline service is not initialized",
        )
    return service


def get_cleaning_schedule_service(request: Request) -> CleaningScheduleService:
    service = getattr(request.app.state, "cleaning_schedule_service", None)
    if service is None:
        repository = getattr(request.app.state, "repository", None)
        if repository is not None:
            service = CleaningScheduleService(repository=repository, settings=get_settings())
            request.app.state.cleaning_schedule_service = service
    if service is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Cleaning schedule service is not initialized",
        )
    return service
