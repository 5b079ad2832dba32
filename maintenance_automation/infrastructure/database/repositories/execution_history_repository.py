"""Execution history repository."""

from datetime import datetime
from uuid import UUID

from sqlmodel import col, func, select

from maintenance_automation.infrastructure.database.models import ExecutionRecord

from .base import BaseRepository


class ExecutionHistoryRepository(BaseRepository[ExecutionRecord]):
    @property
    def entity_class(self) -> type[ExecutionRecord]:
        return ExecutionRecord

    def list_for_technician(
        self, technician_id: UUID, limit: int = 50
    ) -> list[ExecutionRecord]:
        statement = (
            select(ExecutionRecord)
            .where(ExecutionRecord.technician_id == technician_id)
            .order_by(col(ExecutionRecord.executed_at).desc())
            .limit(limit)
        )
        return self._all(statement, "list_for_technician")

    def list_for_machine(self, machine_id: str, limit: int = 50) -> list[ExecutionRecord]:
        statement = (
            select(ExecutionRecord)
            .where(ExecutionRecord.machine_id == machine_id)
            .order_by(col(ExecutionRecord.executed_at).desc())
            .limit(limit)
        )
        return self._all(statement, "list_for_machine")

    def count_for_technician_since(self, technician_id: UUID, since: datetime) -> int:
        statement = select(func.count()).select_from(ExecutionRecord).where(
            ExecutionRecord.technician_id == technician_id,
            col(ExecutionRecord.executed_at) >= since,
        )
        return self._first(statement, "count_for_technician_since") or 0

    def latest_of_type(self, task_type: str) -> ExecutionRecord | None:
        statement = (
            select(ExecutionRecord)
            .where(ExecutionRecord.task_type == task_type)
            .order_by(col(ExecutionRecord.executed_at).desc())
            .limit(1)
        )
        return self._first(statement, "latest_of_type")
