"""
Automation Orchestrator Tests

End-to-end runs against an in-memory database: lead-time filtering,
idempotence across runs, configuration switches, and per-task failure
isolation.
"""

from datetime import date, timedelta

import pytest
from sqlmodel import select

from maintenance_automation.domain.maintenance.services import (
    AutomationOrchestrator,
    run_automation_now,
)
from maintenance_automation.domain.maintenance.value_objects import (
    RunLogKind,
    TaskStatus,
    UrgencyLevel,
)
from maintenance_automation.domain.shared.exceptions import ConflictError, StoreError
from maintenance_automation.infrastructure.database.models import (
    Alert,
    AutomationRunLog,
    MaintenanceTask,
    WorkOrder,
)
from maintenance_automation.tests.factories import (
    ConfigFactory,
    TaskFactory,
    TechnicianFactory,
)

TODAY = date(2025, 1, 15)


def _alerts(session):
    return list(session.exec(select(Alert)).all())


def _work_orders(session):
    return list(session.exec(select(WorkOrder)).all())


def _logs(session):
    return list(session.exec(select(AutomationRunLog)).all())


@pytest.fixture
def technician(session):
    return TechnicianFactory.create(session, name="Joana")


class TestRun:
    def test_creates_work_order_and_alert_for_due_task(self, session, technician):
        ConfigFactory.create(session, lead_time_days=3)
        task = TaskFactory.create(
            session,
            next_execution=TODAY + timedelta(days=2),
            technician=technician,
            estimated_minutes=40,
        )
        session.commit()

        result = run_automation_now(session, TODAY)

        assert result.success
        assert result.tasks_scanned == 1
        assert result.work_orders_created == 1
        assert result.alerts_created == 1
        assert result.processed_task_ids == [task.id]

        [work_order] = _work_orders(session)
        assert work_order.human_id == "OS-20250115-0001"
        assert work_order.source_task_id == task.id
        assert work_order.generated_automatically
        assert work_order.assigned_technician_id == technician.id
        assert work_order.description == "Preventive maintenance: Lubricate main bearing"
        assert work_order.priority == "upcoming"

        [alert] = _alerts(session)
        assert alert.days_remaining == 2
        assert alert.urgency == UrgencyLevel.MEDIUM
        assert alert.work_order_id == work_order.id

        session.refresh(task)
        assert task.work_order_human_id == "OS-20250115-0001"

        [log] = _logs(session)
        assert log.kind == RunLogKind.SCAN
        assert log.tasks_scanned == 1
        assert log.details["processed_task_ids"] == [str(task.id)]

    def test_second_run_is_idempotent(self, session, technician):
        ConfigFactory.create(session)
        TaskFactory.create(
            session, next_execution=TODAY + timedelta(days=1), technician=technician
        )
        session.commit()

        first = run_automation_now(session, TODAY)
        second = run_automation_now(session, TODAY)

        assert (first.work_orders_created, first.alerts_created) == (1, 1)
        assert second.tasks_scanned == 1
        assert (second.work_orders_created, second.alerts_created) == (0, 0)
        assert len(_work_orders(session)) == 1
        assert len(_alerts(session)) == 1
        assert len(_logs(session)) == 2

    def test_task_outside_lead_time_is_left_alone(self, session):
        ConfigFactory.create(session, lead_time_days=3)
        TaskFactory.create(session, next_execution=TODAY + timedelta(days=4))
        session.commit()

        result = run_automation_now(session, TODAY)

        assert result.tasks_scanned == 1
        assert result.processed_task_ids == []
        assert _alerts(session) == []

    def test_overdue_task_is_critical(self, session):
        ConfigFactory.create(session)
        TaskFactory.create(session, next_execution=TODAY - timedelta(days=2))
        session.commit()

        run_automation_now(session, TODAY)

        [alert] = _alerts(session)
        assert alert.days_remaining == -2
        assert alert.urgency == UrgencyLevel.CRITICAL
        assert _work_orders(session)[0].priority == "overdue"

    def test_per_type_lead_time_override(self, session):
        ConfigFactory.create(
            session, lead_time_days=3, per_type_lead_time={"Electrical": 10}
        )
        electrical = TaskFactory.create(
            session, task_type="Electrical", next_execution=TODAY + timedelta(days=8)
        )
        TaskFactory.create(
            session,
            task_type="Mechanical",
            machine_id="M-02",
            next_execution=TODAY + timedelta(days=8),
        )
        session.commit()

        result = run_automation_now(session, TODAY)

        assert result.processed_task_ids == [electrical.id]

    def test_task_without_due_date_is_skipped(self, session):
        ConfigFactory.create(session)
        TaskFactory.create(session, next_execution=None)
        session.commit()

        result = run_automation_now(session, TODAY)

        assert result.success
        assert result.tasks_scanned == 1
        assert result.alerts_created == 0

    def test_only_pending_tasks_are_scanned(self, session):
        ConfigFactory.create(session)
        TaskFactory.create(
            session, next_execution=TODAY, status=TaskStatus.IN_PROGRESS
        )
        TaskFactory.create(session, next_execution=TODAY, status=TaskStatus.COMPLETED)
        session.commit()

        result = run_automation_now(session, TODAY)

        assert result.tasks_scanned == 0

    def test_missing_config_uses_defaults(self, session):
        due = TaskFactory.create(session, next_execution=TODAY + timedelta(days=3))
        TaskFactory.create(
            session, machine_id="M-02", next_execution=TODAY + timedelta(days=5)
        )
        session.commit()

        result = run_automation_now(session, TODAY)

        assert result.processed_task_ids == [due.id]
        assert result.work_orders_created == 1


class TestConfiguration:
    def test_disabled_automation_does_nothing(self, session):
        ConfigFactory.create(session, active=False)
        TaskFactory.create(session, next_execution=TODAY)
        session.commit()

        result = run_automation_now(session, TODAY)

        assert result.success
        assert result.tasks_scanned == 0
        assert _alerts(session) == []
        [log] = _logs(session)
        assert log.message == "Automation disabled"

    def test_alert_without_work_order_is_linked_later(self, session):
        config = ConfigFactory.create(session, auto_generate_work_orders=False)
        TaskFactory.create(session, next_execution=TODAY + timedelta(days=1))
        session.commit()

        first = run_automation_now(session, TODAY)

        assert (first.work_orders_created, first.alerts_created) == (0, 1)
        assert _alerts(session)[0].work_order_id is None

        config.auto_generate_work_orders = True
        session.add(config)
        session.commit()

        second = run_automation_now(session, TODAY)

        assert (second.work_orders_created, second.alerts_created) == (1, 0)
        [alert] = _alerts(session)
        assert alert.work_order_id == _work_orders(session)[0].id


class TestFailureHandling:
    def test_failing_task_does_not_block_the_rest(self, session, monkeypatch):
        ConfigFactory.create(session)
        bad = TaskFactory.create(session, machine_id="M-BAD", next_execution=TODAY)
        good = TaskFactory.create(
            session, machine_id="M-GOOD", next_execution=TODAY + timedelta(days=1)
        )
        session.commit()

        orchestrator = AutomationOrchestrator(session)
        real = orchestrator._process_task

        def flaky(task, config, today):
            if task.machine_id == "M-BAD":
                raise StoreError("disk full")
            return real(task, config, today)

        monkeypatch.setattr(orchestrator, "_process_task", flaky)

        result = orchestrator.run(TODAY)

        assert result.success
        assert result.processed_task_ids == [good.id]
        assert result.work_orders_created == 1
        assert [f.task_id for f in result.failures] == [bad.id]
        assert result.failures[0].error_type == "StoreError"

        [log] = _logs(session)
        assert log.details["failures"][0]["message"] == "disk full"

    def test_id_conflict_is_retried(self, session, monkeypatch):
        ConfigFactory.create(session)
        TaskFactory.create(session, next_execution=TODAY)
        session.commit()

        orchestrator = AutomationOrchestrator(session)
        real = orchestrator._sequencer.next_human_id
        calls = []

        def conflicting_once(today):
            calls.append(today)
            if len(calls) == 1:
                raise ConflictError("counter row created concurrently")
            return real(today)

        monkeypatch.setattr(orchestrator._sequencer, "next_human_id", conflicting_once)

        result = orchestrator.run(TODAY)

        assert len(calls) == 2
        assert result.work_orders_created == 1
        assert result.failures == []

    def test_store_failure_before_scan_aborts_run(self, session, monkeypatch):
        orchestrator = AutomationOrchestrator(session)

        def broken():
            raise StoreError("connection refused")

        monkeypatch.setattr(orchestrator._task_repository, "list_pending", broken)

        result = orchestrator.run(TODAY)

        assert not result.success
        assert result.error == "connection refused"
        [log] = _logs(session)
        assert log.kind == RunLogKind.ERROR
        assert log.error_detail == "connection refused"

    def test_task_deleted_during_scan_is_skipped(self, session, monkeypatch):
        ConfigFactory.create(session)
        first = TaskFactory.create(session, machine_id="M-01", next_execution=TODAY)
        second = TaskFactory.create(
            session, machine_id="M-02", next_execution=TODAY + timedelta(days=1)
        )
        first_id, second_id = first.id, second.id
        session.commit()

        orchestrator = AutomationOrchestrator(session)
        real = orchestrator._process_task

        def delete_second_after_first(task, config, today):
            outcome = real(task, config, today)
            if task.id == first_id:
                session.delete(session.get(MaintenanceTask, second_id))
            return outcome

        monkeypatch.setattr(orchestrator, "_process_task", delete_second_after_first)

        result = orchestrator.run(TODAY)

        assert result.success
        assert result.tasks_scanned == 2
        assert result.processed_task_ids == [first_id]
        assert result.failures == []
        assert session.get(MaintenanceTask, second_id) is None
