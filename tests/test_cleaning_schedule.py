from __future__ import annotations

from dataclasses import replace
from datetime import date, datetime

import pytest

from rentops.domain.models import CLEANING_STATUS_CANCELLED, CLEANING_STATUS_COMPLETED
from rentops.repository.data_repository import DataRepository
from rentops.services.cleaning_schedule_service import (
    CleaningScheduleService,
    CleaningScheduleValidationError,
)
from rentops.utils.config import get_settings


def _build_service(tmp_path, filename: str) -> tuple[CleaningScheduleService, DataRepository]:
    settings = replace(get_settings(), database_path=tmp_path / filename, seed_demo_data=False)
    repository = DataRepository(settings)
    repository.initialize_database()
    return CleaningScheduleService(repository=repository, settings=settings), repository


def _seed_cleanings(repository: DataRepository) -> dict[str, str]:
    first_apartment = repository.create_apartment("Harbour View")
    second_apartment = repository.create_apartment("Garden Studio")
    first_stay = repository.create_reservation(first_apartment, date(2026, 3, 10), date(2026, 3, 14))
    second_stay = repository.create_reservation(second_apartment, date(2026, 3, 11), date(2026, 3, 15))
    return {
        "late": repository.create_cleaning(
            second_stay, second_apartment, "cleaner_ivana", datetime(2026, 3, 15, 11, 30)
        ),
        "early": repository.create_cleaning(
            first_stay, first_apartment, "cleaner_ivana", datetime(2026, 3, 14, 11, 15),
            notes="Extra towels",
        ),
        "other": repository.create_cleaning(
            first_stay, first_apartment, "cleaner_petra", datetime(2026, 3, 14, 9, 0)
        ),
        "done": repository.create_cleaning(
            first_stay, first_apartment, "cleaner_ivana", datetime(2026, 3, 9, 12, 0),
            status=CLEANING_STATUS_COMPLETED,
        ),
        "dropped": repository.create_cleaning(
            second_stay, second_apartment, "cleaner_ivana", datetime(2026, 3, 13, 10, 0),
            status=CLEANING_STATUS_CANCELLED,
        ),
    }


def test_scheduled_cleanings_for_assignee_are_sorted_ascending(tmp_path):
    service, repository = _build_service(tmp_path, "mine.db")
    ids = _seed_cleanings(repository)

    cleanings = service.list_my_cleanings("cleaner_ivana")

    assert [item.cleaning_id for item in cleanings] == [ids["early"], ids["late"]]
    assert cleanings[0].notes == "Extra towels"
    assert all(item.assigned_to == "cleaner_ivana" for item in cleanings)


def test_status_filter_returns_only_matching_cleanings(tmp_path):
    service, repository = _build_service(tmp_path, "status.db")
    ids = _seed_cleanings(repository)

    completed = service.list_my_cleanings("cleaner_ivana", status=CLEANING_STATUS_COMPLETED)
    assert [item.cleaning_id for item in completed] == [ids["done"]]


def test_unknown_assignee_has_no_cleanings(tmp_path):
    service, repository = _build_service(tmp_path, "nobody.db")
    _seed_cleanings(repository)

    assert service.list_my_cleanings("cleaner_marko") == []


@pytest.mark.parametrize("assignee_id", ["", "   "])
def test_blank_assignee_is_rejected(tmp_path, assignee_id):
    service, _ = _build_service(tmp_path, "blank.db")
    with pytest.raises(CleaningScheduleValidationError):
        service.list_my_cleanings(assignee_id)


def test_unknown_status_is_rejected(tmp_path):
    service, _ = _build_service(tmp_path, "bad_status.db")
    with pytest.raises(CleaningScheduleValidationError):
        service.list_my_cleanings("cleaner_ivana", status="postponed")
