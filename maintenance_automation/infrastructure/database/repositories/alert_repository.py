"""Alert repository."""

from uuid import UUID

from sqlmodel import col, select

from maintenance_automation.infrastructure.database.models import Alert

from .base import BaseRepository


class AlertRepository(BaseRepository[Alert]):
    @property
    def entity_class(self) -> type[Alert]:
        return Alert

    def find_unread_for_task(self, task_id: UUID) -> Alert | None:
        statement = (
            select(Alert)
            .where(Alert.task_id == task_id, Alert.is_read == False)  # noqa: E712
            .order_by(col(Alert.created_at).desc())
        )
        return self._first(statement, "find_unread_for_task")

    def list_unread(self) -> list[Alert]:
        statement = (
            select(Alert)
            .where(Alert.is_read == False)  # noqa: E712
            .order_by(col(Alert.days_remaining))
        )
        return self._all(statement, "list_unread")
