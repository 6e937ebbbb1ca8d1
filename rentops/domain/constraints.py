"""Domain-level scheduling policy and its validation rules."""

from __future__ import annotations

from dataclasses import dataclass

from rentops.domain.clock_time import MalformedTimeInputError, to_minutes
from rentops.utils.config import (
    DEFAULT_CHECKIN_TIME,
    DEFAULT_CHECKOUT_TIME,
    DEFAULT_CRITICAL_WINDOW_MINUTES,
    Settings,
)


@dataclass(frozen=True)
class SchedulingPolicy:
    default_checkout_time: str = DEFAULT_CHECKOUT_TIME
    default_checkin_time: str = DEFAULT_CHECKIN_TIME
    critical_window_minutes: int = DEFAULT_CRITICAL_WINDOW_MINUTES

    @classmethod
    def from_settings(cls, settings: Settings) -> "SchedulingPolicy":
        return cls(
            default_checkout_time=settings.default_checkout_time,
            default_checkin_time=settings.default_checkin_time,
            critical_window_minutes=settings.critical_window_minutes,
        )


def validate_scheduling_policy(policy: SchedulingPolicy) -> None:
    try:
        to_minutes(policy.default_checkout_time)
    except MalformedTimeInputError as exc:
        raise ValueError("default_checkout_time must follow HH:MM format") from exc
    try:
        to_minutes(policy.default_checkin_time)
    except MalformedTimeInputError as exc:
        raise ValueError("default_checkin_time must follow HH:MM format") from exc
    if policy.critical_window_minutes <= 0:
        raise ValueError("critical_window_minutes must be > 0")
