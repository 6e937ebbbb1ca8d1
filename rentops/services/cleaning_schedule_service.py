"""Per-assignee view over scheduled cleanings."""

from __future__ import annotations

from typing import Optional

from rentops.domain.models import CLEANING_STATUS_SCHEDULED, CLEANING_STATUSES, CleaningAssignment
from rentops.repository.data_repository import DataRepository
from rentops.utils.config import Settings, get_settings


class CleaningScheduleValidationError(Exception):
    """Raised when a cleaning schedule query is invalid."""


class CleaningScheduleService:
    def __init__(
        self,
        repository: Optional[DataRepository] = None,
        settings: Optional[Settings] = None,
    ) -> None:
        self._settings = settings or get_settings()
        self._repository = repository or DataRepository(self._settings)

    def list_my_cleanings(
        self,
        assignee_id: str,
        status: str = CLEANING_STATUS_SCHEDULED,
    ) -> list[CleaningAssignment]:
        """Cleanings assigned to `assignee_id` in `status`, earliest start first."""
        if not assignee_id or not assignee_id.strip():
            raise CleaningScheduleValidationError("assignee_id must be non-empty")
        if status not in CLEANING_STATUSES:
            raise CleaningScheduleValidationError(f"Unknown cleaning status {status!r}")
        cleanings = self._repository.list_cleanings(
            assigned_to=assignee_id.strip(),
            status=status,
        )
        return sorted(cleanings, key=lambda item: (item.scheduled_start_time, item.cleaning_id))
