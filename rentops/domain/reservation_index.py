"""Apartment/date keyed lookup over a reservation snapshot."""

from __future__ import annotations

from collections import defaultdict
from datetime import date, datetime, timezone
from typing import Iterable, Optional

from rentops.domain.models import Reservation, as_calendar_day


IndexKey = tuple[str, date]


def _tie_break_key(reservation: Reservation) -> tuple[int, datetime, str]:
    # Earliest created_at wins; records without one sort after dated records.
    # Naive timestamps are read as UTC.
    if reservation.created_at is None:
        return (1, datetime.min, reservation.reservation_id)
    created_at = reservation.created_at
    if created_at.tzinfo is not None:
        created_at = created_at.astimezone(timezone.utc).replace(tzinfo=None)
    return (0, created_at, reservation.reservation_id)


class ReservationIndex:
    """Read-only index of active reservations keyed by (apartment, day)."""

    def __init__(
        self,
        reservations: Iterable[Reservation],
        apartment_ids: Optional[Iterable[str]] = None,
    ) -> None:
        if reservations is None:
            raise TypeError("reservations must be an iterable of Reservation, not None")

        known_apartments = set(apartment_ids) if apartment_ids is not None else None
        checkouts: dict[IndexKey, list[Reservation]] = defaultdict(list)
        checkins: dict[IndexKey, list[Reservation]] = defaultdict(list)
        ignored: list[str] = []

        for reservation in reservations:
            if not reservation.is_active:
                continue
            if known_apartments is not None and reservation.apartment_id not in known_apartments:
                ignored.append(reservation.reservation_id)
                continue
            apartment_id = reservation.apartment_id
            checkouts[(apartment_id, as_calendar_day(reservation.planned_check_out))].append(
                reservation
            )
            checkins[(apartment_id, as_calendar_day(reservation.planned_check_in))].append(
                reservation
            )

        self._checkouts = {key: sorted(items, key=_tie_break_key) for key, items in checkouts.items()}
        self._checkins = {key: sorted(items, key=_tie_break_key) for key, items in checkins.items()}
        self._ignored_reservation_ids = tuple(sorted(ignored))

    @property
    def ignored_reservation_ids(self) -> tuple[str, ...]:
        """Active reservations whose apartment is not in the known set."""
        return self._ignored_reservation_ids

    def find_checkout(self, apartment_id: str, day: date | datetime) -> Optional[Reservation]:
        candidates = self._checkouts.get((apartment_id, as_calendar_day(day)))
        return candidates[0] if candidates else None

    def find_checkin(self, apartment_id: str, day: date | datetime) -> Optional[Reservation]:
        candidates = self._checkins.get((apartment_id, as_calendar_day(day)))
        return candidates[0] if candidates else None

    def checkout_conflicts(self, apartment_id: str, day: date | datetime) -> list[str]:
        """Ids of reservations that lost the checkout tie-break."""
        candidates = self._checkouts.get((apartment_id, as_calendar_day(day)), [])
        return [item.reservation_id for item in candidates[1:]]

    def checkin_conflicts(self, apartment_id: str, day: date | datetime) -> list[str]:
        candidates = self._checkins.get((apartment_id, as_calendar_day(day)), [])
        return [item.reservation_id for item in candidates[1:]]

    def __len__(self) -> int:
        return sum(len(items) for items in self._checkouts.values())
