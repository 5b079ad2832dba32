"""
Rescheduler

Moves a recurring task to its next due date once it has been executed and
keeps an execution history row for every completion.
"""

from datetime import date, datetime, timedelta
from uuid import UUID

from maintenance_automation.core.observability import get_logger
from maintenance_automation.domain.shared.exceptions import ValidationError
from maintenance_automation.infrastructure.database.models import (
    ExecutionRecord,
    MaintenanceTask,
)
from maintenance_automation.infrastructure.database.repositories import (
    ExecutionHistoryRepository,
    TaskRepository,
)

from ..value_objects.enums import TaskStatus

logger = get_logger(__name__)


class Rescheduler:
    def __init__(
        self,
        task_repository: TaskRepository,
        history_repository: ExecutionHistoryRepository | None = None,
    ) -> None:
        self._task_repository = task_repository
        self._history_repository = history_repository

    def reschedule(
        self,
        task_id: UUID,
        now: datetime | None = None,
        today: date | None = None,
    ) -> MaintenanceTask:
        """
        Set the next due date to today + period_days and reopen the task.

        Plain calendar-day arithmetic; weekends and holidays are not skipped.
        today defaults to the local date, the same one automation runs
        measure due dates against; now is the UTC execution timestamp.

        Raises:
            EntityNotFoundError: If the task does not exist
            ValidationError: If the task has no positive period
        """
        now = now or datetime.utcnow()
        today = today or date.today()
        task = self._task_repository.get_by_id_required(task_id)
        if not task.period_days or task.period_days < 1:
            raise ValidationError(
                "period_days", task.period_days, "must be a positive number of days"
            )

        task.next_execution = today + timedelta(days=task.period_days)
        task.status = TaskStatus.PENDING
        task.last_execution_at = now
        task.updated_at = now
        self._task_repository.add(task)

        logger.info(
            "Task rescheduled",
            task_id=str(task.id),
            next_execution=task.next_execution.isoformat(),
            period_days=task.period_days,
        )
        return task

    def complete_task(
        self,
        task_id: UUID,
        actual_minutes: int | None = None,
        notes: str | None = None,
        now: datetime | None = None,
        today: date | None = None,
    ) -> MaintenanceTask:
        """
        Record an execution of the task and reschedule it.

        Raises:
            EntityNotFoundError: If the task does not exist
            ValidationError: If the task has no positive period
        """
        now = now or datetime.utcnow()
        task = self._task_repository.get_by_id_required(task_id)

        task.last_execution_at = now
        task.completed_at = now
        task.status = TaskStatus.COMPLETED
        self._task_repository.add(task)

        if self._history_repository is not None:
            self._history_repository.add(
                ExecutionRecord(
                    task_id=task.id,
                    task_description=task.description,
                    machine_id=task.machine_id,
                    machine_name=task.machine_name,
                    technician_id=task.assigned_technician_id,
                    technician_name=task.technician_name,
                    task_type=task.task_type,
                    executed_at=now,
                    estimated_minutes=task.estimated_minutes,
                    actual_minutes=actual_minutes,
                    notes=notes,
                    period_days=task.period_days,
                )
            )

        logger.info("Task completed", task_id=str(task.id), actual_minutes=actual_minutes)
        return self.reschedule(task.id, now, today)
