"""Environment-backed application settings."""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path


PROJECT_ROOT = Path(__file__).resolve().parents[2]

DEFAULT_CHECKOUT_TIME = "11:00"
DEFAULT_CHECKIN_TIME = "14:00"
DEFAULT_CRITICAL_WINDOW_MINUTES = 120


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return int(raw)


@dataclass(frozen=True)
class Settings:
    app_name: str
    app_version: str
    log_level: str
    database_path: Path
    default_checkout_time: str
    default_checkin_time: str
    critical_window_minutes: int
    timeline_default_day_offset: int
    clock_time_regex: str
    seed_demo_data: bool
    demo_random_seed: int
    demo_apartment_count: int


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Read settings once per process; tests derive variants with `replace`."""
    return Settings(
        app_name=os.getenv("APP_NAME", "Rental Operations Timeline"),
        app_version=os.getenv("APP_VERSION", "1.0.0"),
        log_level=os.getenv("LOG_LEVEL", "INFO"),
        database_path=Path(
            os.getenv("DATABASE_PATH", str(PROJECT_ROOT / "data" / "rentops.db"))
        ),
        default_checkout_time=os.getenv("DEFAULT_CHECKOUT_TIME", DEFAULT_CHECKOUT_TIME),
        default_checkin_time=os.getenv("DEFAULT_CHECKIN_TIME", DEFAULT_CHECKIN_TIME),
        critical_window_minutes=_env_int("CRITICAL_WINDOW_MINUTES", DEFAULT_CRITICAL_WINDOW_MINUTES),
        timeline_default_day_offset=_env_int("TIMELINE_DEFAULT_DAY_OFFSET", 1),
        clock_time_regex=r"^([01]?[0-9]|2[0-3]):[0-5][0-9]$",
        seed_demo_data=_env_bool("SEED_DEMO_DATA", True),
        demo_random_seed=_env_int("DEMO_RANDOM_SEED", 42),
        demo_apartment_count=_env_int("DEMO_APARTMENT_COUNT", 8),
    )
