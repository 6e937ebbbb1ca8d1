"""Parsing helpers for guest-supplied "HH:MM" clock times."""

from __future__ import annotations

import re


MINUTES_PER_HOUR = 60
MINUTES_PER_DAY = 24 * MINUTES_PER_HOUR

_CLOCK_TIME_PATTERN = re.compile(r"^([01]?[0-9]|2[0-3]):([0-5][0-9])$")


class MalformedTimeInputError(ValueError):
    """Raised when a clock time cannot be parsed into hours and minutes."""

    def __init__(self, value: object) -> None:
        super().__init__(f"Malformed clock time {value!r}; expected HH:MM (00:00-23:59)")
        self.value = value


def parse_clock_time(value: str) -> tuple[int, int]:
    """Split a clock time into (hours, minutes)."""
    if not isinstance(value, str):
        raise MalformedTimeInputError(value)
    match = _CLOCK_TIME_PATTERN.fullmatch(value.strip())
    if match is None:
        raise MalformedTimeInputError(value)
    return int(match.group(1)), int(match.group(2))


def to_minutes(value: str) -> int:
    """Minutes since midnight, 0-1439."""
    hours, minutes = parse_clock_time(value)
    return hours * MINUTES_PER_HOUR + minutes


def hour_of(value: str) -> int:
    hours, _ = parse_clock_time(value)
    return hours
