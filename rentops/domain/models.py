"""Domain models for reservations, cleanings and the checkout timeline."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Mapping, Optional


RESERVATION_STATUS_ACTIVE = "active"
RESERVATION_STATUS_CANCELED = "canceled"
RESERVATION_STATUS_COMPLETED = "completed"
RESERVATION_STATUSES = frozenset(
    {
        RESERVATION_STATUS_ACTIVE,
        RESERVATION_STATUS_CANCELED,
        RESERVATION_STATUS_COMPLETED,
    }
)

CLEANING_STATUS_SCHEDULED = "scheduled"
CLEANING_STATUS_COMPLETED = "completed"
CLEANING_STATUS_CANCELLED = "cancelled"
CLEANING_STATUSES = frozenset(
    {
        CLEANING_STATUS_SCHEDULED,
        CLEANING_STATUS_COMPLETED,
        CLEANING_STATUS_CANCELLED,
    }
)

WARNING_MALFORMED_TIME_INPUT = "MALFORMED_TIME_INPUT"
WARNING_AMBIGUOUS_CHECKOUT = "AMBIGUOUS_CHECKOUT"
WARNING_AMBIGUOUS_CHECKIN = "AMBIGUOUS_CHECKIN"


class ReservationRecordError(ValueError):
    """Raised when a reservation payload lacks apartment or date identity."""


@dataclass(frozen=True)
class Apartment:
    apartment_id: str
    name: str
    is_active: bool = True


@dataclass(frozen=True)
class GuestSummary:
    first_name: str
    last_name: str
    contact_phone: Optional[str] = None

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()


@dataclass(frozen=True)
class Reservation:
    reservation_id: str
    apartment_id: str
    planned_check_in: date
    planned_check_out: date
    planned_arrival_time: Optional[str] = None
    planned_checkout_time: Optional[str] = None
    status: str = RESERVATION_STATUS_ACTIVE
    created_at: Optional[datetime] = None
    guest: Optional[GuestSummary] = None

    @property
    def is_active(self) -> bool:
        return self.status == RESERVATION_STATUS_ACTIVE


@dataclass(frozen=True)
class CleaningAssignment:
    cleaning_id: str
    reservation_id: str
    apartment_id: str
    assigned_to: str
    scheduled_start_time: datetime
    status: str = CLEANING_STATUS_SCHEDULED
    notes: Optional[str] = None


@dataclass(frozen=True)
class CleaningWindow:
    start_time: str
    end_time: str
    duration_minutes: int
    duration_formatted: str
    is_critical: bool
    is_invalid: bool


@dataclass(frozen=True)
class ScheduleWarning:
    code: str
    message: str


@dataclass(frozen=True)
class DashboardEntry:
    apartment: Apartment
    checkout_reservation: Reservation
    checkin_reservation: Optional[Reservation]
    cleaning_window: Optional[CleaningWindow]
    is_late_checkout: bool
    is_early_checkin: bool
    scheduled_cleanings: tuple[CleaningAssignment, ...] = ()
    warnings: tuple[ScheduleWarning, ...] = ()
    error: Optional[str] = None


@dataclass(frozen=True)
class TimelineDashboard:
    date: date
    apartments: list[DashboardEntry]
    ignored_reservation_ids: tuple[str, ...] = field(default=())

    @property
    def failed_entries(self) -> list[DashboardEntry]:
        return [entry for entry in self.apartments if entry.error is not None]

    @property
    def has_warnings(self) -> bool:
        return any(entry.warnings for entry in self.apartments)


def as_calendar_day(value: Any) -> date:
    """Reduce a date, datetime or ISO string to its calendar day."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str) and value.strip():
        text = value.strip()
        try:
            return date.fromisoformat(text[:10])
        except ValueError as exc:
            raise ReservationRecordError(f"Unparseable date {value!r}") from exc
    raise ReservationRecordError(f"Unparseable date {value!r}")


def _optional_text(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _optional_datetime(value: Any) -> Optional[datetime]:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value
    try:
        return datetime.fromisoformat(str(value))
    except ValueError as exc:
        raise ReservationRecordError(f"Unparseable created_at {value!r}") from exc


def build_reservation(payload: Mapping[str, Any]) -> Reservation:
    """Validate a loosely-typed reservation payload at the system boundary.

    Apartment and date identity are required; times stay unvalidated so a bad
    time only fails the affected apartment's dashboard entry later on.
    """
    missing = [
        key
        for key in ("reservation_id", "apartment_id", "planned_check_in", "planned_check_out")
        if payload.get(key) in (None, "")
    ]
    if missing:
        raise ReservationRecordError(
            f"Reservation record is missing required fields: {', '.join(missing)}"
        )

    status = str(payload.get("status") or RESERVATION_STATUS_ACTIVE).lower()
    if status not in RESERVATION_STATUSES:
        raise ReservationRecordError(f"Unknown reservation status {status!r}")

    guest_payload = payload.get("guest")
    guest = None
    if isinstance(guest_payload, GuestSummary):
        guest = guest_payload
    elif isinstance(guest_payload, Mapping):
        guest = GuestSummary(
            first_name=str(guest_payload.get("first_name") or ""),
            last_name=str(guest_payload.get("last_name") or ""),
            contact_phone=_optional_text(guest_payload.get("contact_phone")),
        )

    return Reservation(
        reservation_id=str(payload["reservation_id"]),
        apartment_id=str(payload["apartment_id"]),
        planned_check_in=as_calendar_day(payload["planned_check_in"]),
        planned_check_out=as_calendar_day(payload["planned_check_out"]),
        planned_arrival_time=_optional_text(payload.get("planned_arrival_time")),
        planned_checkout_time=_optional_text(payload.get("planned_checkout_time")),
        status=status,
        created_at=_optional_datetime(payload.get("created_at")),
        guest=guest,
    )
