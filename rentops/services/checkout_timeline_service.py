"""Checkout/check-in timeline assembly for the cleaning dashboard."""

from __future__ import annotations

from collections import defaultdict
from datetime import date, datetime, time, timedelta
from typing import Iterable, Optional, Sequence

from rentops.domain.cleaning_window import classify_cleaning_window
from rentops.domain.clock_time import MalformedTimeInputError, hour_of
from rentops.domain.constraints import SchedulingPolicy, validate_scheduling_policy
from rentops.domain.models import (
    CLEANING_STATUS_SCHEDULED,
    WARNING_AMBIGUOUS_CHECKIN,
    WARNING_AMBIGUOUS_CHECKOUT,
    WARNING_MALFORMED_TIME_INPUT,
    Apartment,
    CleaningAssignment,
    DashboardEntry,
    Reservation,
    ScheduleWarning,
    TimelineDashboard,
)
from rentops.domain.reservation_index import ReservationIndex
from rentops.repository.data_repository import DataRepository
from rentops.utils.config import Settings, get_settings
from rentops.utils.logger import get_logger


logger = get_logger(__name__)


class TimelineValidationError(Exception):
    """Raised when timeline request inputs are invalid."""


def _ambiguity_warnings(
    index: ReservationIndex,
    apartment: Apartment,
    target_date: date,
) -> list[ScheduleWarning]:
    warnings: list[ScheduleWarning] = []
    checkout_losers = index.checkout_conflicts(apartment.apartment_id, target_date)
    if checkout_losers:
        warnings.append(
            ScheduleWarning(
                code=WARNING_AMBIGUOUS_CHECKOUT,
                message=(
                    f"Multiple active checkouts for {apartment.name} on {target_date.isoformat()}; "
                    f"ignored reservations: {', '.join(checkout_losers)}"
                ),
            )
        )
    checkin_losers = index.checkin_conflicts(apartment.apartment_id, target_date)
    if checkin_losers:
        warnings.append(
            ScheduleWarning(
                code=WARNING_AMBIGUOUS_CHECKIN,
                message=(
                    f"Multiple active check-ins for {apartment.name} on {target_date.isoformat()}; "
                    f"ignored reservations: {', '.join(checkin_losers)}"
                ),
            )
        )
    return warnings


def _build_entry(
    apartment: Apartment,
    checkout: Reservation,
    checkin: Optional[Reservation],
    policy: SchedulingPolicy,
    cleanings: tuple[CleaningAssignment, ...],
    warnings: list[ScheduleWarning],
) -> DashboardEntry:
    checkout_time = checkout.planned_checkout_time or policy.default_checkout_time
    if checkin is not None and checkin.planned_arrival_time:
        checkin_time = checkin.planned_arrival_time
    else:
        checkin_time = policy.default_checkin_time

    try:
        cleaning_window = classify_cleaning_window(
            checkout_time,
            checkin_time,
            critical_threshold_minutes=policy.critical_window_minutes,
        )
        is_late_checkout = hour_of(checkout_time) > hour_of(policy.default_checkout_time)
        is_early_checkin = hour_of(checkin_time) < hour_of(policy.default_checkin_time)
    except MalformedTimeInputError as exc:
        logger.warning(
            "Apartment %s (%s): %s",
            apartment.name,
            apartment.apartment_id,
            exc,
        )
        return DashboardEntry(
            apartment=apartment,
            checkout_reservation=checkout,
            checkin_reservation=checkin,
            cleaning_window=None,
            is_late_checkout=False,
            is_early_checkin=False,
            scheduled_cleanings=cleanings,
            warnings=tuple(
                [*warnings, ScheduleWarning(code=WARNING_MALFORMED_TIME_INPUT, message=str(exc))]
            ),
            error=str(exc),
        )

    return DashboardEntry(
        apartment=apartment,
        checkout_reservation=checkout,
        checkin_reservation=checkin,
        cleaning_window=cleaning_window,
        is_late_checkout=is_late_checkout,
        is_early_checkin=is_early_checkin,
        scheduled_cleanings=cleanings,
        warnings=tuple(warnings),
    )


def assemble_checkout_timeline(
    target_date: date,
    apartments: Sequence[Apartment],
    index: ReservationIndex,
    policy: SchedulingPolicy,
    cleanings: Iterable[CleaningAssignment] = (),
) -> TimelineDashboard:
    """Build one dashboard entry per active apartment with a checkout on `target_date`.

    Apartments are emitted in (name, id) order whatever the input order. An
    apartment without a checkout is omitted. A malformed time only fails its
    own entry; the rest of the dashboard is still produced.
    """
    if apartments is None:
        raise TypeError("apartments must be a sequence of Apartment, not None")

    cleanings_by_apartment: dict[str, list[CleaningAssignment]] = defaultdict(list)
    for cleaning in cleanings:
        if cleaning.status != CLEANING_STATUS_SCHEDULED:
            continue
        if cleaning.scheduled_start_time.date() != target_date:
            continue
        cleanings_by_apartment[cleaning.apartment_id].append(cleaning)

    entries: list[DashboardEntry] = []
    for apartment in sorted(apartments, key=lambda item: (item.name, item.apartment_id)):
        if not apartment.is_active:
            continue
        checkout = index.find_checkout(apartment.apartment_id, target_date)
        if checkout is None:
            continue
        checkin = index.find_checkin(apartment.apartment_id, target_date)

        warnings = _ambiguity_warnings(index, apartment, target_date)
        for warning in warnings:
            logger.warning("%s: %s", warning.code, warning.message)

        apartment_cleanings = tuple(
            sorted(
                cleanings_by_apartment.get(apartment.apartment_id, []),
                key=lambda item: (item.scheduled_start_time, item.cleaning_id),
            )
        )
        entries.append(
            _build_entry(
                apartment=apartment,
                checkout=checkout,
                checkin=checkin,
                policy=policy,
                cleanings=apartment_cleanings,
                warnings=warnings,
            )
        )

    return TimelineDashboard(
        date=target_date,
        apartments=entries,
        ignored_reservation_ids=index.ignored_reservation_ids,
    )


class CheckoutTimelineService:
    """Reads the current snapshot and assembles the checkout dashboard."""

    def __init__(
        self,
        repository: Optional[DataRepository] = None,
        settings: Optional[Settings] = None,
        policy: Optional[SchedulingPolicy] = None,
    ) -> None:
        self._settings = settings or get_settings()
        self._repository = repository or DataRepository(self._settings)
        self._policy = policy or SchedulingPolicy.from_settings(self._settings)
        validate_scheduling_policy(self._policy)

    @property
    def policy(self) -> SchedulingPolicy:
        return self._policy

    def resolve_target_date(
        self,
        target_date: date | str | None = None,
        today: Optional[date] = None,
    ) -> date:
        """Explicit dates win; otherwise the configured offset from today (tomorrow)."""
        if target_date is None:
            base = today or date.today()
            return base + timedelta(days=self._settings.timeline_default_day_offset)
        if isinstance(target_date, datetime):
            return target_date.date()
        if isinstance(target_date, date):
            return target_date
        try:
            return datetime.strptime(target_date, "%Y-%m-%d").date()
        except ValueError as exc:
            raise TimelineValidationError("date must follow YYYY-MM-DD format") from exc

    def build_dashboard(
        self,
        target_date: date | str | None = None,
        today: Optional[date] = None,
    ) -> TimelineDashboard:
        resolved_date = self.resolve_target_date(target_date, today=today)
        apartments = self._repository.list_active_apartments()
        reservations = self._repository.list_reservations_touching_date(resolved_date)
        day_start = datetime.combine(resolved_date, time.min)
        cleanings = self._repository.list_cleanings(
            apartment_ids=[apartment.apartment_id for apartment in apartments],
            status=CLEANING_STATUS_SCHEDULED,
            start=day_start,
            end=day_start + timedelta(days=1),
        )
        return self.build_dashboard_from_snapshot(
            target_date=resolved_date,
            apartments=apartments,
            reservations=reservations,
            cleanings=cleanings,
        )

    def build_dashboard_from_snapshot(
        self,
        *,
        target_date: date,
        apartments: Sequence[Apartment],
        reservations: Iterable[Reservation],
        cleanings: Iterable[CleaningAssignment] = (),
    ) -> TimelineDashboard:
        active_apartments = [apartment for apartment in apartments if apartment.is_active]
        index = ReservationIndex(
            reservations,
            apartment_ids=[apartment.apartment_id for apartment in active_apartments],
        )
        dashboard = assemble_checkout_timeline(
            target_date=target_date,
            apartments=active_apartments,
            index=index,
            policy=self._policy,
            cleanings=cleanings,
        )
        if dashboard.ignored_reservation_ids:
            logger.info(
                "Ignored %s reservation(s) referencing unknown or inactive apartments",
                len(dashboard.ignored_reservation_ids),
            )
        logger.info(
            "Checkout timeline for %s: %s apartment(s), %s failed",
            target_date.isoformat(),
            len(dashboard.apartments),
            len(dashboard.failed_entries),
        )
        return dashboard
