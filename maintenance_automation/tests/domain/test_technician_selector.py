"""
Technician Selector Tests

Covers least-load ranking, the anti-repetition rule, the random tie-break
and the rotation/replacement variants.
"""

from datetime import datetime, timedelta
from unittest.mock import Mock
from uuid import uuid4

import pytest

from maintenance_automation.domain.maintenance.services import (
    TechnicianLoadSnapshot,
    TechnicianSelector,
)
from maintenance_automation.domain.maintenance.value_objects import TaskStatus
from maintenance_automation.domain.shared.exceptions import EntityNotFoundError
from maintenance_automation.infrastructure.database.models import ExecutionRecord
from maintenance_automation.infrastructure.database.repositories import (
    ExecutionHistoryRepository,
    TaskRepository,
    TechnicianRepository,
)
from maintenance_automation.tests.factories import TaskFactory, TechnicianFactory


def _snapshot(name, pending, last_type=None, completed=0):
    return TechnicianLoadSnapshot(
        technician_id=uuid4(),
        name=name,
        pending_count=pending,
        completed_in_window=completed,
        last_task_type=last_type,
    )


@pytest.fixture
def pinned_rng():
    """Random source that always picks the last tied candidate."""
    rng = Mock()
    rng.choice.side_effect = lambda seq: seq[-1]
    return rng


@pytest.fixture
def selector(session, pinned_rng):
    return TechnicianSelector(
        TechnicianRepository(session),
        TaskRepository(session),
        rng=pinned_rng,
        history_repository=ExecutionHistoryRepository(session),
    )


class TestChoose:
    def test_lower_pending_count_wins(self, selector):
        a = _snapshot("A", 2, last_type="Electrical")
        b = _snapshot("B", 3, last_type="Electrical")

        result = selector.choose([b, a], "Mechanical")

        assert result.snapshot is a
        assert "pending_count=2" in result.reason
        assert not result.anti_repetition_applied

    def test_anti_repetition_prefers_runner_up_with_comparable_load(self, selector):
        a = _snapshot("A", 2, last_type="Mechanical")
        b = _snapshot("B", 3, last_type="Hydraulic")

        result = selector.choose([a, b], "Mechanical")

        assert result.snapshot is b
        assert result.anti_repetition_applied
        assert "anti-repetition" in result.reason

    def test_anti_repetition_needs_runner_up_within_margin(self, selector):
        a = _snapshot("A", 2, last_type="Mechanical")
        b = _snapshot("B", 5, last_type="Hydraulic")

        result = selector.choose([a, b], "Mechanical")

        assert result.snapshot is a
        assert not result.anti_repetition_applied

    def test_load_score_breaks_pending_ties(self, selector, pinned_rng):
        a = _snapshot("A", 2, completed=4)
        b = _snapshot("B", 2, completed=0)

        result = selector.choose([a, b], "Mechanical")

        assert result.snapshot is b
        pinned_rng.choice.assert_not_called()

    def test_exact_ties_use_injected_random_source(self, selector, pinned_rng):
        a = _snapshot("A", 1)
        b = _snapshot("B", 1)
        c = _snapshot("C", 4)

        result = selector.choose([a, b, c], "Mechanical")

        pinned_rng.choice.assert_called_once()
        tied = pinned_rng.choice.call_args.args[0]
        assert {s.name for s in tied} == {"A", "B"}
        assert result.snapshot is tied[-1]
        assert result.random_tie_break

    def test_identical_snapshots_give_identical_result_without_ties(self, selector):
        snapshots = [_snapshot("A", 1), _snapshot("B", 2), _snapshot("C", 6)]

        first = selector.choose(snapshots, "Mechanical")
        second = selector.choose(list(reversed(snapshots)), "Mechanical")

        assert first.snapshot is second.snapshot


class TestSelect:
    def test_no_active_technician_returns_empty_selection(self, selector, session):
        TechnicianFactory.create(session, function_type="Electrical")
        TechnicianFactory.create(session, function_type="Mechanical", active=False)

        result = selector.select("Mechanical")

        assert result.technician is None
        assert not result.selected
        assert result.reason == "no active technician for type Mechanical"

    def test_single_candidate_is_returned(self, selector, session):
        only = TechnicianFactory.create(session, name="Solo")
        TaskFactory.create_many_open(session, only, 4, "Mechanical")

        result = selector.select("Mechanical")

        assert result.technician.id == only.id
        assert "pending_count=4" in result.reason

    def test_selects_least_loaded_technician(self, selector, session):
        busy = TechnicianFactory.create(session, name="Busy")
        free = TechnicianFactory.create(session, name="Free")
        TaskFactory.create_many_open(session, busy, 5, "Electrical")
        TaskFactory.create(session, task_type="Electrical", technician=free)

        result = selector.select("Mechanical")

        assert result.technician.id == free.id

    def test_anti_repetition_against_store(self, selector, session):
        a = TechnicianFactory.create(session, name="A")
        b = TechnicianFactory.create(session, name="B")
        TaskFactory.create_many_open(session, a, 2, "Mechanical")
        TaskFactory.create_many_open(session, b, 3, "Hydraulic")

        result = selector.select("Mechanical")

        assert result.technician.id == b.id
        assert result.anti_repetition_applied


class TestAssignTask:
    def test_assigns_orphan_task(self, selector, session):
        technician = TechnicianFactory.create(
            session, name="Rui", email="rui@example.com"
        )
        task = TaskFactory.create(session)
        assert task.is_orphan

        updated, result = selector.assign_task(task.id)

        assert result.selected
        assert updated.assigned_technician_id == technician.id
        assert updated.technician_email == "rui@example.com"
        assert TaskRepository(session).list_orphans() == []

    def test_task_left_unassigned_without_candidates(self, selector, session):
        task = TaskFactory.create(session, task_type="Pneumatic")

        updated, result = selector.assign_task(task.id)

        assert not result.selected
        assert updated.assigned_technician_id is None

    def test_unknown_task_raises_not_found(self, selector):
        with pytest.raises(EntityNotFoundError):
            selector.assign_task(uuid4())


class TestRotation:
    def test_starts_with_first_priority_when_nothing_completed(self, selector, session):
        TechnicianFactory.create(session, name="Second", priority_order=2)
        first = TechnicianFactory.create(session, name="First", priority_order=1)

        result = selector.select_by_rotation("Mechanical")

        assert result.technician.id == first.id

    def test_moves_to_next_after_last_executor(self, selector, session):
        first = TechnicianFactory.create(session, name="First", priority_order=1)
        second = TechnicianFactory.create(session, name="Second", priority_order=2)
        session.add(
            ExecutionRecord(
                task_id=uuid4(),
                machine_id="M-01",
                technician_id=first.id,
                task_type="Mechanical",
                executed_at=datetime.utcnow(),
                period_days=7,
            )
        )
        session.flush()

        result = selector.select_by_rotation("Mechanical")

        assert result.technician.id == second.id

    def test_wraps_around(self, selector, session):
        first = TechnicianFactory.create(session, name="First", priority_order=1)
        second = TechnicianFactory.create(session, name="Second", priority_order=2)
        TaskFactory.create_completed(
            session, second, datetime.utcnow() - timedelta(hours=1)
        )

        result = selector.select_by_rotation("Mechanical")

        assert result.technician.id == first.id

    def test_restarts_when_last_executor_inactive(self, selector, session):
        gone = TechnicianFactory.create(session, name="Gone", active=False)
        first = TechnicianFactory.create(session, name="First", priority_order=1)
        TechnicianFactory.create(session, name="Second", priority_order=2)
        TaskFactory.create_completed(session, gone, datetime.utcnow())

        result = selector.select_by_rotation("Mechanical")

        assert result.technician.id == first.id
        assert "inactive" in result.reason


class TestReplacement:
    def test_excludes_current_technician(self, selector, session):
        current = TechnicianFactory.create(session, name="Current")
        other = TechnicianFactory.create(session, name="Other")
        TaskFactory.create_many_open(session, other, 3, "Mechanical")

        result = selector.select_replacement("Mechanical", current.id)

        assert result.technician.id == other.id

    def test_single_technician_is_kept(self, selector, session):
        only = TechnicianFactory.create(session)

        result = selector.select_replacement("Mechanical", only.id)

        assert result.technician.id == only.id

    def test_completed_work_is_not_open_load(self, selector, session):
        current = TechnicianFactory.create(session, name="Current")
        a = TechnicianFactory.create(session, name="A")
        b = TechnicianFactory.create(session, name="B")
        TaskFactory.create(session, technician=a, status=TaskStatus.IN_PROGRESS)
        TaskFactory.create_completed(session, b, datetime.utcnow())

        result = selector.select_replacement("Mechanical", current.id)

        assert result.technician.id == b.id
