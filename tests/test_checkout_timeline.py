"""Tests for the pure checkout timeline assembly."""

from __future__ import annotations

from datetime import date, datetime

from rentops.domain.constraints import SchedulingPolicy
from rentops.domain.models import (
    CLEANING_STATUS_COMPLETED,
    WARNING_AMBIGUOUS_CHECKOUT,
    WARNING_MALFORMED_TIME_INPUT,
    Apartment,
    CleaningAssignment,
    Reservation,
)
from rentops.domain.reservation_index import ReservationIndex
from rentops.services.checkout_timeline_service import assemble_checkout_timeline


TARGET = date(2026, 3, 14)
POLICY = SchedulingPolicy()


def _checkout(reservation_id: str, apartment_id: str, checkout_time: str | None = None, **extra) -> Reservation:
    return Reservation(
        reservation_id=reservation_id,
        apartment_id=apartment_id,
        planned_check_in=date(2026, 3, 11),
        planned_check_out=TARGET,
        planned_checkout_time=checkout_time,
        **extra,
    )


def _checkin(reservation_id: str, apartment_id: str, arrival_time: str | None = None) -> Reservation:
    return Reservation(
        reservation_id=reservation_id,
        apartment_id=apartment_id,
        planned_check_in=TARGET,
        planned_check_out=date(2026, 3, 18),
        planned_arrival_time=arrival_time,
    )


def _assemble(apartments, reservations, cleanings=()):
    index = ReservationIndex(reservations, apartment_ids=[item.apartment_id for item in apartments])
    return assemble_checkout_timeline(TARGET, apartments, index, POLICY, cleanings=cleanings)


def test_standard_turnover_is_normal() -> None:
    apartments = [Apartment("a1", "Harbour View")]
    dashboard = _assemble(apartments, [_checkout("r1", "a1", "11:00"), _checkin("r2", "a1", "14:00")])

    assert dashboard.date == TARGET
    [entry] = dashboard.apartments
    assert entry.checkout_reservation.reservation_id == "r1"
    assert entry.checkin_reservation.reservation_id == "r2"
    assert entry.cleaning_window.duration_minutes == 180
    assert not entry.cleaning_window.is_critical
    assert not entry.cleaning_window.is_invalid
    assert not entry.is_late_checkout
    assert not entry.is_early_checkin
    assert entry.error is None


def test_late_checkout_makes_window_critical() -> None:
    apartments = [Apartment("a1", "Harbour View")]
    dashboard = _assemble(apartments, [_checkout("r1", "a1", "12:30"), _checkin("r2", "a1", "14:00")])

    [entry] = dashboard.apartments
    assert entry.cleaning_window.duration_minutes == 90
    assert entry.cleaning_window.is_critical
    assert not entry.cleaning_window.is_invalid
    assert entry.is_late_checkout


def test_arrival_before_departure_is_invalid() -> None:
    apartments = [Apartment("a1", "Harbour View")]
    dashboard = _assemble(apartments, [_checkout("r1", "a1", "14:00"), _checkin("r2", "a1", "12:00")])

    [entry] = dashboard.apartments
    assert entry.cleaning_window.duration_minutes == -120
    assert entry.cleaning_window.is_invalid
    assert entry.is_late_checkout
    assert entry.is_early_checkin


def test_apartment_without_checkout_is_omitted() -> None:
    apartments = [Apartment("a1", "Harbour View"), Apartment("a2", "Garden Studio")]
    dashboard = _assemble(apartments, [_checkout("r1", "a1"), _checkin("r2", "a2", "13:00")])

    assert [entry.apartment.apartment_id for entry in dashboard.apartments] == ["a1"]


def test_empty_apartment_list_yields_empty_dashboard() -> None:
    dashboard = _assemble([], [_checkout("r1", "a1")])
    assert dashboard.date == TARGET
    assert dashboard.apartments == []


def test_defaults_fill_missing_times_without_next_reservation() -> None:
    apartments = [Apartment("a1", "Harbour View")]
    dashboard = _assemble(apartments, [_checkout("r1", "a1")])

    [entry] = dashboard.apartments
    assert entry.checkin_reservation is None
    assert entry.cleaning_window.start_time == "11:00"
    assert entry.cleaning_window.end_time == "14:00"
    assert entry.cleaning_window.duration_minutes == 180
    assert not entry.cleaning_window.is_critical


def test_checkin_without_arrival_time_uses_default() -> None:
    apartments = [Apartment("a1", "Harbour View")]
    dashboard = _assemble(apartments, [_checkout("r1", "a1", "10:00"), _checkin("r2", "a1")])

    [entry] = dashboard.apartments
    assert entry.cleaning_window.end_time == "14:00"
    assert entry.cleaning_window.duration_minutes == 240


def test_late_and_early_flags_compare_hours_only() -> None:
    apartments = [Apartment("a1", "Harbour View")]
    dashboard = _assemble(apartments, [_checkout("r1", "a1", "11:45"), _checkin("r2", "a1", "13:59")])

    [entry] = dashboard.apartments
    assert not entry.is_late_checkout
    assert entry.is_early_checkin


def test_entries_are_ordered_by_name_then_id() -> None:
    apartments = [
        Apartment("z9", "Bell Tower"),
        Apartment("b2", "Attic"),
        Apartment("a7", "Bell Tower"),
    ]
    reservations = [_checkout(f"r-{item.apartment_id}", item.apartment_id) for item in apartments]

    forward = _assemble(apartments, reservations)
    backward = _assemble(list(reversed(apartments)), list(reversed(reservations)))

    expected = ["b2", "a7", "z9"]
    assert [entry.apartment.apartment_id for entry in forward.apartments] == expected
    assert [entry.apartment.apartment_id for entry in backward.apartments] == expected


def test_assembly_is_idempotent() -> None:
    apartments = [Apartment("a1", "Harbour View"), Apartment("a2", "Garden Studio")]
    reservations = [
        _checkout("r1", "a1", "12:00"),
        _checkin("r2", "a1", "13:00"),
        _checkout("r3", "a2"),
    ]
    assert _assemble(apartments, reservations) == _assemble(apartments, reservations)


def test_malformed_time_fails_only_its_apartment() -> None:
    apartments = [Apartment("a1", "Harbour View"), Apartment("a2", "Garden Studio")]
    reservations = [
        _checkout("r1", "a1", "half past eleven"),
        _checkout("r3", "a2", "10:30"),
    ]
    dashboard = _assemble(apartments, reservations)

    by_id = {entry.apartment.apartment_id: entry for entry in dashboard.apartments}
    broken = by_id["a1"]
    assert broken.cleaning_window is None
    assert broken.error is not None
    assert [warning.code for warning in broken.warnings] == [WARNING_MALFORMED_TIME_INPUT]
    assert not broken.is_late_checkout

    healthy = by_id["a2"]
    assert healthy.error is None
    assert healthy.cleaning_window.duration_minutes == 210
    assert dashboard.failed_entries == [broken]
    assert dashboard.has_warnings


def test_ambiguous_checkout_is_reported() -> None:
    apartments = [Apartment("a1", "Harbour View")]
    reservations = [
        _checkout("r1", "a1", "12:00", created_at=datetime(2026, 2, 2)),
        _checkout("r2", "a1", "10:00", created_at=datetime(2026, 1, 5)),
    ]
    dashboard = _assemble(apartments, reservations)

    [entry] = dashboard.apartments
    assert entry.checkout_reservation.reservation_id == "r2"
    assert [warning.code for warning in entry.warnings] == [WARNING_AMBIGUOUS_CHECKOUT]
    assert "r1" in entry.warnings[0].message


def test_inactive_apartment_and_orphan_reservation_are_skipped() -> None:
    apartments = [Apartment("a1", "Harbour View"), Apartment("a2", "Closed Flat", is_active=False)]
    reservations = [_checkout("r1", "a1"), _checkout("r2", "a2"), _checkout("r3", "ghost")]
    index = ReservationIndex(reservations, apartment_ids=["a1"])
    dashboard = assemble_checkout_timeline(TARGET, apartments, index, POLICY)

    assert [entry.apartment.apartment_id for entry in dashboard.apartments] == ["a1"]
    assert dashboard.ignored_reservation_ids == ("r2", "r3")


def test_scheduled_cleanings_for_target_day_are_attached_in_order() -> None:
    apartments = [Apartment("a1", "Harbour View")]
    cleanings = [
        CleaningAssignment("c2", "r1", "a1", "cleaner_b", datetime(2026, 3, 14, 13, 0)),
        CleaningAssignment("c1", "r1", "a1", "cleaner_a", datetime(2026, 3, 14, 11, 30)),
        CleaningAssignment("c3", "r1", "a1", "cleaner_a", datetime(2026, 3, 15, 11, 30)),
        CleaningAssignment(
            "c4", "r1", "a1", "cleaner_a", datetime(2026, 3, 14, 12, 0),
            status=CLEANING_STATUS_COMPLETED,
        ),
    ]
    dashboard = _assemble(apartments, [_checkout("r1", "a1")], cleanings=cleanings)

    [entry] = dashboard.apartments
    assert [item.cleaning_id for item in entry.scheduled_cleanings] == ["c1", "c2"]


def test_custom_policy_defaults_are_applied() -> None:
    apartments = [Apartment("a1", "Harbour View")]
    index = ReservationIndex([_checkout("r1", "a1")])
    policy = SchedulingPolicy(
        default_checkout_time="10:00",
        default_checkin_time="15:00",
        critical_window_minutes=360,
    )
    dashboard = assemble_checkout_timeline(TARGET, apartments, index, policy)

    [entry] = dashboard.apartments
    assert entry.cleaning_window.start_time == "10:00"
    assert entry.cleaning_window.end_time == "15:00"
    assert entry.cleaning_window.is_critical
    assert not entry.is_late_checkout
    assert not entry.is_early_checkin
