"""HTTP controller layer for the checkout timeline dashboard."""

from __future__ import annotations

from dataclasses import asdict
from datetime import date, datetime
from typing import Any, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from pydantic import BaseModel, Field, field_validator

from rentops.controllers.dependencies import get_cleaning_schedule_service, get_timeline_service
from rentops.domain.models import (
    CLEANING_STATUS_SCHEDULED,
    Apartment,
    CleaningAssignment,
    ReservationRecordError,
    TimelineDashboard,
    build_reservation,
)
from rentops.domain.timeline_position import timeline_percentage, timeline_position
from rentops.services.checkout_timeline_service import (
    CheckoutTimelineService,
    TimelineValidationError,
)
from rentops.services.cleaning_schedule_service import (
    CleaningScheduleService,
    CleaningScheduleValidationError,
)
from rentops.utils.config import get_settings
from rentops.utils.logger import get_logger


logger = get_logger(__name__)
settings = get_settings()

router = APIRouter(tags=["timeline"])


class ApartmentPayload(BaseModel):
    apartment_id: str = Field(min_length=1)
    name: str = Field(min_length=1)
    is_active: bool = True


class GuestPayload(BaseModel):
    first_name: str = ""
    last_name: str = ""
    contact_phone: Optional[str] = None


class ReservationPayload(BaseModel):
    """Loosely-typed snapshot record; identity is checked by the domain boundary."""

    reservation_id: Optional[str | int] = None
    apartment_id: Optional[str | int] = None
    planned_check_in: Optional[date] = None
    planned_check_out: Optional[date] = None
    planned_arrival_time: Optional[Any] = None
    planned_checkout_time: Optional[Any] = None
    status: str = "active"
    created_at: Optional[datetime] = None
    guest: Optional[GuestPayload] = None


class CleaningPayload(BaseModel):
    cleaning_id: str = Field(min_length=1)
    reservation_id: str = Field(min_length=1)
    apartment_id: str = Field(min_length=1)
    assigned_to: str = Field(min_length=1)
    scheduled_start_time: datetime
    status: str = CLEANING_STATUS_SCHEDULED
    notes: Optional[str] = None


class TimelinePreviewRequest(BaseModel):
    date: date
    apartments: list[ApartmentPayload]
    reservations: list[ReservationPayload]
    cleanings: list[CleaningPayload] = Field(default_factory=list)

    @field_validator("apartments")
    @classmethod
    def validate_unique_apartments(cls, value: list[ApartmentPayload]) -> list[ApartmentPayload]:
        apartment_ids = [item.apartment_id for item in value]
        if len(apartment_ids) != len(set(apartment_ids)):
            raise ValueError("apartments must not contain duplicate apartment_id values")
        return value


class ApartmentResponse(BaseModel):
    apartment_id: str
    name: str
    is_active: bool


class GuestResponse(BaseModel):
    first_name: str
    last_name: str
    contact_phone: Optional[str] = None


class ReservationResponse(BaseModel):
    reservation_id: str
    apartment_id: str
    planned_check_in: date
    planned_check_out: date
    planned_arrival_time: Optional[str] = None
    planned_checkout_time: Optional[str] = None
    status: str
    created_at: Optional[datetime] = None
    guest: Optional[GuestResponse] = None


class CleaningWindowResponse(BaseModel):
    start_time: str
    end_time: str
    duration_minutes: int
    duration_formatted: str
    is_critical: bool
    is_invalid: bool


class CleaningResponse(BaseModel):
    cleaning_id: str
    reservation_id: str
    apartment_id: str
    assigned_to: str
    scheduled_start_time: datetime
    status: str
    notes: Optional[str] = None


class ScheduleWarningResponse(BaseModel):
    code: str
    message: str


class DashboardEntryResponse(BaseModel):
    apartment: ApartmentResponse
    checkout_reservation: ReservationResponse
    checkin_reservation: Optional[ReservationResponse] = None
    cleaning_window: Optional[CleaningWindowResponse] = None
    is_late_checkout: bool
    is_early_checkin: bool
    scheduled_cleanings: list[CleaningResponse]
    warnings: list[ScheduleWarningResponse]
    error: Optional[str] = None


class TimelineDashboardResponse(BaseModel):
    date: date
    apartments: list[DashboardEntryResponse]
    ignored_reservation_ids: list[str]
    has_warnings: bool


class TimelinePositionResponse(BaseModel):
    time: str
    position_fraction: float = Field(ge=0.0, le=1.0)
    position_percentage: float = Field(ge=0.0, le=100.0)


class MyCleaningsResponse(BaseModel):
    assignee_id: str
    cleanings: list[CleaningResponse]


class HealthResponse(BaseModel):
    status: str
    app_name: str
    app_version: str


def _to_dashboard_response(dashboard: TimelineDashboard) -> TimelineDashboardResponse:
    payload = asdict(dashboard)
    return TimelineDashboardResponse(
        date=payload["date"],
        apartments=payload["apartments"],
        ignored_reservation_ids=list(payload["ignored_reservation_ids"]),
        has_warnings=dashboard.has_warnings,
    )


@router.get("/", response_model=HealthResponse, include_in_schema=False)
@router.get("/health", response_model=HealthResponse, status_code=status.HTTP_200_OK)
async def health() -> HealthResponse:
    return HealthResponse(
        status="ok",
        app_name=settings.app_name,
        app_version=settings.app_version,
    )


@router.get(
    "/checkout_timeline",
    response_model=TimelineDashboardResponse,
    status_code=status.HTTP_200_OK,
)
async def checkout_timeline(
    target_date: Optional[date] = Query(default=None, alias="date"),
    service: CheckoutTimelineService = Depends(get_timeline_service),
) -> TimelineDashboardResponse:
    """Dashboard for `date` (tomorrow when omitted) from persisted reservations."""
    try:
        dashboard = service.build_dashboard(target_date=target_date)
        return _to_dashboard_response(dashboard)
    except TimelineValidationError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(exc),
        ) from exc
    except Exception as exc:  # pragma: no cover - defensive fallback
        logger.exception("Unexpected checkout timeline failure")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to build checkout timeline",
        ) from exc


@router.post(
    "/checkout_timeline/preview",
    response_model=TimelineDashboardResponse,
    status_code=status.HTTP_200_OK,
)
async def preview_checkout_timeline(
    payload: TimelinePreviewRequest,
    service: CheckoutTimelineService = Depends(get_timeline_service),
) -> TimelineDashboardResponse:
    """Run the timeline engine on a caller-supplied snapshot without persisting it."""
    try:
        reservations = [build_reservation(item.model_dump()) for item in payload.reservations]
        dashboard = service.build_dashboard_from_snapshot(
            target_date=payload.date,
            apartments=[Apartment(**item.model_dump()) for item in payload.apartments],
            reservations=reservations,
            cleanings=[CleaningAssignment(**item.model_dump()) for item in payload.cleanings],
        )
        return _to_dashboard_response(dashboard)
    except ReservationRecordError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(exc),
        ) from exc
    except Exception as exc:  # pragma: no cover - defensive fallback
        logger.exception("Unexpected checkout timeline preview failure")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to build checkout timeline preview",
        ) from exc


@router.get(
    "/timeline_position",
    response_model=TimelinePositionResponse,
    status_code=status.HTTP_200_OK,
)
async def get_timeline_position(
    clock_time: str = Query(alias="time", pattern=settings.clock_time_regex),
) -> TimelinePositionResponse:
    return TimelinePositionResponse(
        time=clock_time,
        position_fraction=timeline_position(clock_time),
        position_percentage=timeline_percentage(clock_time),
    )


@router.get(
    "/cleanings/mine",
    response_model=MyCleaningsResponse,
    status_code=status.HTTP_200_OK,
)
async def my_cleanings(
    assignee_id: str = Query(min_length=1),
    cleaning_status: str = Query(default=CLEANING_STATUS_SCHEDULED, alias="status"),
    service: CleaningScheduleService = Depends(get_cleaning_schedule_service),
) -> MyCleaningsResponse:
    try:
        cleanings = service.list_my_cleanings(assignee_id, status=cleaning_status)
        return MyCleaningsResponse(
            assignee_id=assignee_id,
            cleanings=[asdict(item) for item in cleanings],
        )
    except CleaningScheduleValidationError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(exc),
        ) from exc
    except Exception as exc:  # pragma: no cover - defensive fallback
        logger.exception("Unexpected cleaning schedule failure")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to load cleanings",
        ) from exc
