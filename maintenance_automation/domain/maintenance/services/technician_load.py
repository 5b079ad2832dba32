"""
Technician load calculation.

Builds point-in-time workload snapshots for technicians. Snapshots are not
cached and do not reserve anything: two snapshots taken moments apart may
differ, and two concurrent assignment calls can both see the same
technician as least loaded.
"""

import math
from datetime import datetime, timedelta
from uuid import UUID

from pydantic import BaseModel, Field, computed_field

from maintenance_automation.core.config import settings
from maintenance_automation.infrastructure.database.models import Technician
from maintenance_automation.infrastructure.database.repositories import (
    ExecutionHistoryRepository,
    TaskRepository,
    TechnicianRepository,
)

from ..value_objects.enums import LoadLevel


def compute_load_score(pending_count: int, completed_count: int) -> float:
    return (
        pending_count * settings.PENDING_WEIGHT
        + completed_count * settings.COMPLETED_WEIGHT
    )


def classify_load(pending_count: int) -> LoadLevel:
    if pending_count <= settings.LOAD_LOW_MAX:
        return LoadLevel.LOW
    if pending_count <= settings.LOAD_MEDIUM_MAX:
        return LoadLevel.MEDIUM
    return LoadLevel.HIGH


class TechnicianLoadSnapshot(BaseModel):
    """Derived workload of one technician; never persisted."""

    technician_id: UUID
    name: str = ""
    function_type: str = ""
    priority_order: int | None = None
    pending_count: int = Field(ge=0, default=0)
    completed_in_window: int = Field(ge=0, default=0)
    last_task_type: str | None = None

    @computed_field  # type: ignore[prop-decorator]
    @property
    def load_score(self) -> float:
        return compute_load_score(self.pending_count, self.completed_in_window)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def load_level(self) -> LoadLevel:
        return classify_load(self.pending_count)


class LoadStatistics(BaseModel):
    """Load snapshots plus their spread, for dashboard views."""

    snapshots: list[TechnicianLoadSnapshot] = Field(default_factory=list)
    mean_load: float = 0.0
    load_std_dev: float = 0.0


class TechnicianLoadCalculator:
    """Computes workload snapshots from the task store."""

    def __init__(
        self,
        task_repository: TaskRepository,
        technician_repository: TechnicianRepository,
        history_repository: ExecutionHistoryRepository | None = None,
        window_days: int | None = None,
    ) -> None:
        self._task_repository = task_repository
        self._technician_repository = technician_repository
        self._history_repository = history_repository
        self._window_days = window_days or settings.LOAD_WINDOW_DAYS

    def snapshot(
        self, technician: Technician, now: datetime | None = None
    ) -> TechnicianLoadSnapshot:
        now = now or datetime.utcnow()
        window_start = now - timedelta(days=self._window_days)

        open_tasks = self._task_repository.list_open_for_technician(technician.id)
        # Recurring tasks return to pending once rescheduled, so their
        # completions live in the execution history.
        completed = self._task_repository.count_completed_since(
            technician.id, window_start
        )
        if self._history_repository is not None:
            completed += self._history_repository.count_for_technician_since(
                technician.id, window_start
            )

        last_task_type = None
        if open_tasks:
            latest = max(
                open_tasks,
                key=lambda t: (
                    t.scheduled_at or datetime.min,
                    t.next_execution or datetime.min.date(),
                    t.created_at,
                ),
            )
            last_task_type = latest.task_type

        return TechnicianLoadSnapshot(
            technician_id=technician.id,
            name=technician.name,
            function_type=technician.function_type,
            priority_order=technician.priority_order,
            pending_count=len(open_tasks),
            completed_in_window=completed,
            last_task_type=last_task_type,
        )

    def snapshots(
        self, technicians: list[Technician], now: datetime | None = None
    ) -> list[TechnicianLoadSnapshot]:
        return [self.snapshot(technician, now) for technician in technicians]

    def statistics(
        self, function_type: str | None = None, now: datetime | None = None
    ) -> LoadStatistics:
        """Snapshots for active technicians (all, or one function) with mean and population std dev."""
        technicians = self._technician_repository.list_active(function_type)
        snapshots = self.snapshots(technicians, now)
        if not snapshots:
            return LoadStatistics()

        scores = [s.load_score for s in snapshots]
        mean = sum(scores) / len(scores)
        variance = sum((score - mean) ** 2 for score in scores) / len(scores)
        return LoadStatistics(
            snapshots=snapshots,
            mean_load=mean,
            load_std_dev=math.sqrt(variance),
        )
