"""
Automation Orchestrator

Drives one preventive maintenance scan: loads the automation config,
walks the pending tasks, and for every task inside its lead-time window
raises a work order and an alert unless open ones already exist. Each task
is processed and committed on its own, so one failing task is rolled back
and reported without blocking the rest of the scan. A run never raises to
its caller; failures are reported in the RunResult and in the run log.
"""

import time
from datetime import date, datetime
from typing import Any
from uuid import UUID

from pydantic import BaseModel, Field
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session

from maintenance_automation.core.config import settings
from maintenance_automation.core.observability import (
    ALERTS_CREATED,
    AUTOMATION_RUN_DURATION,
    AUTOMATION_RUNS,
    TASK_FAILURES,
    WORK_ORDERS_CREATED,
    get_logger,
    set_correlation_id,
)
from maintenance_automation.domain.shared.exceptions import ConflictError, DomainError
from maintenance_automation.infrastructure.database.models import (
    Alert,
    AutomationConfig,
    MaintenanceTask,
    WorkOrder,
)
from maintenance_automation.infrastructure.database.repositories import (
    AlertRepository,
    AutomationConfigRepository,
    AutomationLogRepository,
    TaskRepository,
    WorkOrderRepository,
)

from ..value_objects.enums import WorkOrderStatus
from .deduplicator import AlertDeduplicator
from .run_log_recorder import RunLogRecorder
from .urgency_classifier import classify_due_status, classify_urgency, days_until
from .work_order_sequencer import WorkOrderSequencer

logger = get_logger(__name__)

DEFAULT_SECTOR = "Preventive Maintenance"


class TaskFailure(BaseModel):
    task_id: UUID
    error_type: str
    message: str


class TaskOutcome(BaseModel):
    work_order_created: bool = False
    alert_created: bool = False


class RunResult(BaseModel):
    success: bool
    message: str = ""
    tasks_scanned: int = 0
    work_orders_created: int = 0
    alerts_created: int = 0
    error: str | None = None
    run_id: str = ""
    processed_task_ids: list[UUID] = Field(default_factory=list)
    failures: list[TaskFailure] = Field(default_factory=list)


class AutomationOrchestrator:
    """Runs the scan against one database session."""

    def __init__(self, session: Session) -> None:
        self._session = session
        self._config_repository = AutomationConfigRepository(session)
        self._task_repository = TaskRepository(session)
        self._alert_repository = AlertRepository(session)
        self._work_order_repository = WorkOrderRepository(session)
        self._recorder = RunLogRecorder(AutomationLogRepository(session))
        self._deduplicator = AlertDeduplicator(
            self._alert_repository, self._work_order_repository
        )
        self._sequencer = WorkOrderSequencer(self._work_order_repository)

    def run(self, today: date | None = None) -> RunResult:
        run_id = set_correlation_id()
        today = today or date.today()
        start_time = time.time()
        log = logger.bind(run_id=run_id)
        log.info("Automation run started", today=today.isoformat())

        try:
            config = self._config_repository.get_or_default()
            if not config.active:
                self._recorder.record_scan("Automation disabled")
                self._session.commit()
                AUTOMATION_RUNS.labels(status="disabled").inc()
                log.info("Automation disabled; nothing to do")
                return RunResult(
                    success=True, message="automation disabled", run_id=run_id
                )

            # Ids only; every per-task commit expires the loaded rows.
            task_ids = [task.id for task in self._task_repository.list_pending()]
        except Exception as e:
            return self._abort(run_id, e, start_time)

        result = RunResult(success=True, tasks_scanned=len(task_ids), run_id=run_id)
        for task_id in task_ids:
            try:
                task = self._task_repository.get_by_id(task_id)
                if task is None:
                    log.info("Task removed during scan; skipped", task_id=str(task_id))
                    continue
                outcome = self._process_with_retry(task, config, today)
            except Exception as e:
                self._safe_rollback()
                failure = TaskFailure(
                    task_id=task_id, error_type=type(e).__name__, message=str(e)
                )
                result.failures.append(failure)
                TASK_FAILURES.labels(error_type=failure.error_type).inc()
                log.error(
                    "Task processing failed",
                    task_id=str(task_id),
                    error=str(e),
                    error_type=failure.error_type,
                    exc_info=not isinstance(e, DomainError),
                )
                continue

            if outcome is None:
                continue
            result.processed_task_ids.append(task_id)
            if outcome.work_order_created:
                result.work_orders_created += 1
                WORK_ORDERS_CREATED.inc()
            if outcome.alert_created:
                result.alerts_created += 1
                ALERTS_CREATED.inc()

        if result.failures:
            result.message = (
                f"Automation completed with {len(result.failures)} failed task(s)"
            )
        else:
            result.message = "Automation completed successfully"

        try:
            self._recorder.record_scan(
                result.message,
                tasks_scanned=result.tasks_scanned,
                work_orders_created=result.work_orders_created,
                alerts_created=result.alerts_created,
                details=self._details(result),
            )
            self._session.commit()
        except Exception as e:
            self._safe_rollback()
            log.error("Could not write run log", error=str(e))

        duration = time.time() - start_time
        AUTOMATION_RUNS.labels(status="success").inc()
        AUTOMATION_RUN_DURATION.observe(duration)
        log.info(
            "Automation run completed",
            tasks_scanned=result.tasks_scanned,
            work_orders_created=result.work_orders_created,
            alerts_created=result.alerts_created,
            failures=len(result.failures),
            duration_seconds=duration,
        )
        return result

    def _process_with_retry(
        self, task: MaintenanceTask, config: AutomationConfig, today: date
    ) -> TaskOutcome | None:
        attempts = max(1, settings.SEQUENCER_MAX_RETRIES)
        for attempt in range(1, attempts + 1):
            try:
                outcome = self._process_task(task, config, today)
                self._session.commit()
                return outcome
            except IntegrityError as e:
                self._session.rollback()
                error: ConflictError = ConflictError(
                    f"Commit rejected for task {task.id}: {e.orig}"
                )
            except ConflictError as e:
                self._session.rollback()
                error = e
            logger.warning(
                "Work order id conflict, retrying",
                task_id=str(task.id),
                attempt=attempt,
                error=error.message,
            )
        raise error

    def _process_task(
        self, task: MaintenanceTask, config: AutomationConfig, today: date
    ) -> TaskOutcome | None:
        """Returns None when the task is not yet inside its lead-time window."""
        if task.next_execution is None:
            logger.debug("Task has no due date; skipped", task_id=str(task.id))
            return None

        days_remaining = days_until(task.next_execution, today)
        urgency = classify_urgency(days_remaining)
        if days_remaining > config.lead_time_for(task.task_type):
            return None

        outcome = TaskOutcome()
        alert = self._deduplicator.existing_unread_alert(task)
        work_order = self._deduplicator.existing_open_work_order(task)

        if work_order is None and config.auto_generate_work_orders:
            work_order = self._create_work_order(task, days_remaining, today)
            outcome.work_order_created = True

        if alert is None:
            self._alert_repository.add(
                Alert(
                    task_id=task.id,
                    task_description=task.description,
                    machine_id=task.machine_id,
                    machine_name=task.machine_name,
                    due_date=task.next_execution,
                    days_remaining=days_remaining,
                    urgency=urgency,
                    work_order_id=work_order.id if work_order else None,
                )
            )
            outcome.alert_created = True
            logger.info(
                "Alert created",
                task_id=str(task.id),
                days_remaining=days_remaining,
                urgency=urgency.value,
            )
        elif alert.work_order_id is None and work_order is not None:
            # Alert raised while work order generation was off; link it now.
            alert.work_order_id = work_order.id
            alert.updated_at = datetime.utcnow()
            self._alert_repository.add(alert)

        return outcome

    def _create_work_order(
        self, task: MaintenanceTask, days_remaining: int, today: date
    ) -> WorkOrder:
        human_id = self._sequencer.next_human_id(today)
        scheduled_date = (
            task.scheduled_at.date() if task.scheduled_at else task.next_execution
        )
        work_order = WorkOrder(
            human_id=human_id,
            source_task_id=task.id,
            machine_id=task.machine_id,
            machine_name=task.machine_name,
            sector=task.sector or DEFAULT_SECTOR,
            task_type=task.task_type,
            description=f"Preventive maintenance: {task.description}",
            notes=(
                f"Scheduled for: {task.next_execution.isoformat()}\n"
                f"Type: {task.task_type}\n"
                f"Estimated time: {task.estimated_minutes} minutes"
            ),
            priority=task.priority or classify_due_status(days_remaining).value,
            status=WorkOrderStatus.PENDING,
            generated_automatically=True,
            scheduled_date=scheduled_date,
            estimated_minutes=task.estimated_minutes,
            assigned_technician_id=task.assigned_technician_id,
        )
        self._work_order_repository.add(work_order)

        task.work_order_id = work_order.id
        task.work_order_human_id = human_id
        task.updated_at = datetime.utcnow()
        self._task_repository.add(task)

        logger.info(
            "Work order created",
            task_id=str(task.id),
            work_order_id=str(work_order.id),
            human_id=human_id,
        )
        return work_order

    def _safe_rollback(self) -> None:
        try:
            self._session.rollback()
        except Exception as e:
            logger.error("Rollback failed", error=str(e))

    def _abort(self, run_id: str, error: Exception, start_time: float) -> RunResult:
        self._safe_rollback()
        logger.error(
            "Automation run aborted",
            run_id=run_id,
            error=str(error),
            error_type=type(error).__name__,
        )
        try:
            self._recorder.record_error("Error during automation", str(error))
            self._session.commit()
        except Exception as log_error:
            self._safe_rollback()
            logger.error("Could not write error log", error=str(log_error))

        AUTOMATION_RUNS.labels(status="error").inc()
        AUTOMATION_RUN_DURATION.observe(time.time() - start_time)
        return RunResult(
            success=False,
            message="Error during automation",
            error=str(error),
            run_id=run_id,
        )

    @staticmethod
    def _details(result: RunResult) -> dict[str, Any]:
        return {
            "run_id": result.run_id,
            "processed_task_ids": [str(t) for t in result.processed_task_ids],
            "failures": [f.model_dump(mode="json") for f in result.failures],
        }


def run_automation_now(session: Session, today: date | None = None) -> RunResult:
    """Entry point for manual triggers and external schedulers."""
    return AutomationOrchestrator(session).run(today)
