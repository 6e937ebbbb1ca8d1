"""Coordinate transform from clock time to a position on a 24-hour axis."""

from __future__ import annotations

from rentops.domain.clock_time import MINUTES_PER_DAY, MINUTES_PER_HOUR, MalformedTimeInputError
from rentops.domain.models import CleaningWindow


def _axis_minutes(clock_time: str) -> int:
    # Range is the caller's contract; only the HH:MM shape is checked here.
    try:
        hours, minutes = (int(part) for part in clock_time.split(":"))
    except (AttributeError, ValueError) as exc:
        raise MalformedTimeInputError(clock_time) from exc
    return hours * MINUTES_PER_HOUR + minutes


def timeline_position(clock_time: str) -> float:
    """Fraction of the day elapsed at `clock_time` (00:00 -> 0.0, 12:00 -> 0.5)."""
    return _axis_minutes(clock_time) / MINUTES_PER_DAY


def timeline_percentage(clock_time: str) -> float:
    return timeline_position(clock_time) * 100


def cleaning_window_span(window: CleaningWindow) -> tuple[float, float]:
    """Return (left, width) percentages of the bar between checkout and check-in.

    The width is negative for invalid windows; renderers decide how to draw it.
    """
    left = timeline_percentage(window.start_time)
    right = timeline_percentage(window.end_time)
    return left, right - left
