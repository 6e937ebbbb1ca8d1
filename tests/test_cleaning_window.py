"""Tests for clock-time parsing and cleaning window classification."""

from __future__ import annotations

import pytest

from rentops.domain.cleaning_window import classify_cleaning_window, format_duration
from rentops.domain.clock_time import MalformedTimeInputError, hour_of, parse_clock_time, to_minutes


# --- clock time parsing ---

def test_parse_clock_time_accepts_single_digit_hour() -> None:
    assert parse_clock_time("9:05") == (9, 5)
    assert to_minutes("09:05") == 545


def test_to_minutes_covers_full_day() -> None:
    assert to_minutes("00:00") == 0
    assert to_minutes("23:59") == 1439


def test_hour_of_ignores_minutes() -> None:
    assert hour_of("11:59") == 11


@pytest.mark.parametrize("value", ["", "11", "11:60", "24:00", "ab:cd", "11:00:00", None])
def test_malformed_clock_time_raises(value) -> None:
    with pytest.raises(MalformedTimeInputError):
        parse_clock_time(value)


# --- duration formatting ---

def test_format_duration_whole_hours_keeps_minutes() -> None:
    assert format_duration(120) == "2h 0m"


def test_format_duration_mixed() -> None:
    assert format_duration(90) == "1h 30m"
    assert format_duration(45) == "0h 45m"


def test_format_duration_negative_has_leading_minus() -> None:
    assert format_duration(-120) == "-2h 0m"
    assert format_duration(-5) == "-0h 5m"


# --- classification ---

def test_standard_window_is_normal() -> None:
    window = classify_cleaning_window("11:00", "14:00")
    assert window.start_time == "11:00"
    assert window.end_time == "14:00"
    assert window.duration_minutes == 180
    assert window.duration_formatted == "3h 0m"
    assert not window.is_critical
    assert not window.is_invalid


def test_short_window_is_critical() -> None:
    window = classify_cleaning_window("12:30", "14:00")
    assert window.duration_minutes == 90
    assert window.is_critical
    assert not window.is_invalid


def test_checkin_before_checkout_is_invalid_not_critical() -> None:
    window = classify_cleaning_window("14:00", "12:00")
    assert window.duration_minutes == -120
    assert window.duration_formatted == "-2h 0m"
    assert window.is_invalid
    assert not window.is_critical


def test_threshold_boundary_is_normal() -> None:
    window = classify_cleaning_window("12:00", "14:00")
    assert window.duration_minutes == 120
    assert not window.is_critical


def test_zero_minute_window_is_critical() -> None:
    window = classify_cleaning_window("13:00", "13:00")
    assert window.duration_minutes == 0
    assert window.is_critical
    assert not window.is_invalid


def test_no_wraparound_past_midnight() -> None:
    window = classify_cleaning_window("23:00", "01:00")
    assert window.duration_minutes == -1320
    assert window.is_invalid


def test_custom_threshold_is_respected() -> None:
    window = classify_cleaning_window("11:00", "14:00", critical_threshold_minutes=240)
    assert window.is_critical


@pytest.mark.parametrize(
    ("start", "end"),
    [("00:00", "23:59"), ("10:15", "11:45"), ("18:00", "06:30"), ("11:00", "11:01")],
)
def test_classification_is_consistent_with_duration(start: str, end: str) -> None:
    window = classify_cleaning_window(start, end)
    assert window.duration_minutes == to_minutes(end) - to_minutes(start)
    assert window.is_invalid == (window.duration_minutes < 0)
    assert window.is_critical == (0 <= window.duration_minutes < 120)
    assert not (window.is_invalid and window.is_critical)


def test_malformed_time_propagates() -> None:
    with pytest.raises(MalformedTimeInputError):
        classify_cleaning_window("late", "14:00")
