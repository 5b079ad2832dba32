"""Automation configuration and run log repositories."""

from sqlmodel import col, select

from maintenance_automation.core.config import settings
from maintenance_automation.infrastructure.database.models import (
    AutomationConfig,
    AutomationRunLog,
)

from .base import BaseRepository


class AutomationConfigRepository(BaseRepository[AutomationConfig]):
    @property
    def entity_class(self) -> type[AutomationConfig]:
        return AutomationConfig

    def get_current(self) -> AutomationConfig | None:
        statement = select(AutomationConfig).order_by(col(AutomationConfig.created_at))
        return self._first(statement, "get_current")

    def get_or_default(self) -> AutomationConfig:
        """Stored config, or an unsaved one built from settings defaults."""
        return self.get_current() or AutomationConfig(
            active=settings.AUTOMATION_DEFAULT_ACTIVE,
            lead_time_days=settings.AUTOMATION_DEFAULT_LEAD_TIME_DAYS,
            per_type_lead_time={},
            auto_generate_work_orders=settings.AUTOMATION_DEFAULT_AUTO_WORK_ORDERS,
            preferred_execution_time=settings.AUTOMATION_DEFAULT_EXECUTION_TIME,
        )


class AutomationLogRepository(BaseRepository[AutomationRunLog]):
    @property
    def entity_class(self) -> type[AutomationRunLog]:
        return AutomationRunLog

    def list_recent(self, limit: int = 50) -> list[AutomationRunLog]:
        statement = (
            select(AutomationRunLog)
            .order_by(col(AutomationRunLog.created_at).desc())
            .limit(limit)
        )
        return self._all(statement, "list_recent")
