"""Structured records of every automation run."""

from typing import Any

from maintenance_automation.core.observability import get_logger
from maintenance_automation.infrastructure.database.models import AutomationRunLog
from maintenance_automation.infrastructure.database.repositories import (
    AutomationLogRepository,
)

from ..value_objects.enums import RunLogKind

logger = get_logger(__name__)


class RunLogRecorder:
    def __init__(self, log_repository: AutomationLogRepository) -> None:
        self._log_repository = log_repository

    def record_scan(
        self,
        message: str,
        tasks_scanned: int = 0,
        work_orders_created: int = 0,
        alerts_created: int = 0,
        details: dict[str, Any] | None = None,
    ) -> AutomationRunLog:
        entry = AutomationRunLog(
            kind=RunLogKind.SCAN,
            message=message,
            tasks_scanned=tasks_scanned,
            work_orders_created=work_orders_created,
            alerts_created=alerts_created,
            details=details or {},
        )
        self._log_repository.add(entry)
        logger.info(
            "Automation run recorded",
            kind=entry.kind.value,
            message=message,
            tasks_scanned=tasks_scanned,
            work_orders_created=work_orders_created,
            alerts_created=alerts_created,
        )
        return entry

    def record_error(
        self, message: str, error: str, details: dict[str, Any] | None = None
    ) -> AutomationRunLog:
        entry = AutomationRunLog(
            kind=RunLogKind.ERROR,
            message=message,
            error_detail=error,
            details=details or {},
        )
        self._log_repository.add(entry)
        logger.error("Automation run failed", message=message, error=error)
        return entry
