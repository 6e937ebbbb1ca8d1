"""Classification of the cleaning window between a checkout and a check-in."""

from __future__ import annotations

from rentops.domain.clock_time import MINUTES_PER_HOUR, to_minutes
from rentops.domain.models import CleaningWindow
from rentops.utils.config import DEFAULT_CRITICAL_WINDOW_MINUTES


def format_duration(minutes: int) -> str:
    """Render a duration as "<H>h <M>m"; negative durations keep a leading "-"."""
    sign = "-" if minutes < 0 else ""
    hours, remainder = divmod(abs(minutes), MINUTES_PER_HOUR)
    return f"{sign}{hours}h {remainder}m"


def classify_cleaning_window(
    start_time: str,
    end_time: str,
    critical_threshold_minutes: int = DEFAULT_CRITICAL_WINDOW_MINUTES,
) -> CleaningWindow:
    """Build the cleaning window from checkout (`start_time`) to check-in (`end_time`).

    Both times are taken on the same calendar day; a check-in earlier than the
    checkout yields a negative duration and an invalid window rather than a
    window wrapping past midnight.

    Raises:
        MalformedTimeInputError: if either time is not a valid "HH:MM" value.
    """
    start_minutes = to_minutes(start_time)
    end_minutes = to_minutes(end_time)
    duration_minutes = end_minutes - start_minutes

    is_invalid = duration_minutes < 0
    is_critical = not is_invalid and duration_minutes < critical_threshold_minutes

    return CleaningWindow(
        start_time=start_time,
        end_time=end_time,
        duration_minutes=duration_minutes,
        duration_formatted=format_duration(duration_minutes),
        is_critical=is_critical,
        is_invalid=is_invalid,
    )
