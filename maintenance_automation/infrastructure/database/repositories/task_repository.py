"""Maintenance task repository."""

from datetime import datetime
from uuid import UUID

from sqlmodel import col, func, select

from maintenance_automation.domain.maintenance.value_objects.enums import (
    OPEN_TASK_STATUSES,
    TaskStatus,
)
from maintenance_automation.infrastructure.database.models import MaintenanceTask

from .base import BaseRepository


class TaskRepository(BaseRepository[MaintenanceTask]):
    @property
    def entity_class(self) -> type[MaintenanceTask]:
        return MaintenanceTask

    def list_by_status(self, status: TaskStatus) -> list[MaintenanceTask]:
        statement = (
            select(MaintenanceTask)
            .where(MaintenanceTask.status == status)
            .order_by(col(MaintenanceTask.next_execution), col(MaintenanceTask.created_at))
        )
        return self._all(statement, "list_by_status")

    def list_pending(self) -> list[MaintenanceTask]:
        return self.list_by_status(TaskStatus.PENDING)

    def list_orphans(self) -> list[MaintenanceTask]:
        """Open tasks with no technician assigned."""
        statement = (
            select(MaintenanceTask)
            .where(col(MaintenanceTask.assigned_technician_id).is_(None))
            .where(col(MaintenanceTask.status).in_(OPEN_TASK_STATUSES))
            .order_by(col(MaintenanceTask.next_execution))
        )
        return self._all(statement, "list_orphans")

    def list_open_for_technician(self, technician_id: UUID) -> list[MaintenanceTask]:
        statement = select(MaintenanceTask).where(
            MaintenanceTask.assigned_technician_id == technician_id,
            col(MaintenanceTask.status).in_(OPEN_TASK_STATUSES),
        )
        return self._all(statement, "list_open_for_technician")

    def count_completed_since(self, technician_id: UUID, since: datetime) -> int:
        statement = select(func.count()).select_from(MaintenanceTask).where(
            MaintenanceTask.assigned_technician_id == technician_id,
            MaintenanceTask.status == TaskStatus.COMPLETED,
            col(MaintenanceTask.completed_at).is_not(None),
            col(MaintenanceTask.completed_at) >= since,
        )
        return self._first(statement, "count_completed_since") or 0

    def latest_completed_of_type(self, task_type: str) -> MaintenanceTask | None:
        """Most recently completed task of a type, used for round-robin rotation."""
        statement = (
            select(MaintenanceTask)
            .where(
                MaintenanceTask.task_type == task_type,
                MaintenanceTask.status == TaskStatus.COMPLETED,
                col(MaintenanceTask.completed_at).is_not(None),
            )
            .order_by(col(MaintenanceTask.completed_at).desc())
            .limit(1)
        )
        return self._first(statement, "latest_completed_of_type")
