"""
Technician Selector

Chooses which technician should receive a maintenance task of a given
function type. Candidates are ranked by open workload, with an
anti-repetition rule that avoids giving the same person two tasks of the
same type back to back when an alternative with comparable load exists.
Remaining exact ties are broken with an injected random source so tests can
pin the outcome.
"""

import random
from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict

from maintenance_automation.core.config import settings
from maintenance_automation.core.observability import TECHNICIAN_SELECTIONS, get_logger
from maintenance_automation.infrastructure.database.models import (
    MaintenanceTask,
    Technician,
)
from maintenance_automation.infrastructure.database.repositories import (
    ExecutionHistoryRepository,
    TaskRepository,
    TechnicianRepository,
)

from .technician_load import TechnicianLoadCalculator, TechnicianLoadSnapshot

logger = get_logger(__name__)


class SelectionResult(BaseModel):
    """Outcome of a selection; technician is None when nobody is eligible."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    technician: Technician | None = None
    reason: str
    function_type: str
    snapshot: TechnicianLoadSnapshot | None = None
    anti_repetition_applied: bool = False
    random_tie_break: bool = False

    @property
    def selected(self) -> bool:
        return self.technician is not None


class TechnicianSelector:
    """Load-balanced technician selection."""

    def __init__(
        self,
        technician_repository: TechnicianRepository,
        task_repository: TaskRepository,
        load_calculator: TechnicianLoadCalculator | None = None,
        rng: random.Random | None = None,
        history_repository: ExecutionHistoryRepository | None = None,
    ) -> None:
        self._technician_repository = technician_repository
        self._task_repository = task_repository
        self._history_repository = history_repository
        self._load_calculator = load_calculator or TechnicianLoadCalculator(
            task_repository, technician_repository, history_repository
        )
        self._rng = rng or random.Random()

    def select(
        self, function_type: str, now: datetime | None = None
    ) -> SelectionResult:
        candidates = self._technician_repository.list_active(function_type)
        if not candidates:
            TECHNICIAN_SELECTIONS.labels(outcome="none").inc()
            logger.warning("No eligible technician", function_type=function_type)
            return SelectionResult(
                reason=f"no active technician for type {function_type}",
                function_type=function_type,
            )

        by_id = {technician.id: technician for technician in candidates}
        snapshots = self._load_calculator.snapshots(candidates, now)

        if len(snapshots) == 1:
            only = snapshots[0]
            return self._result(
                by_id[only.technician_id],
                only,
                function_type,
                f"only active technician for {function_type}; "
                f"pending_count={only.pending_count}",
            )

        result = self.choose(snapshots, function_type)
        result.technician = by_id[result.snapshot.technician_id]
        self._record(result)
        return result

    def choose(
        self, snapshots: list[TechnicianLoadSnapshot], function_type: str
    ) -> SelectionResult:
        """
        Pick among pre-computed snapshots.

        Deterministic for identical snapshots except for the final random
        tie-break. The returned result carries the chosen snapshot but no
        Technician row; select() attaches it.
        """
        ranked = sorted(snapshots, key=lambda s: (s.pending_count, s.load_score))
        top = ranked[0]

        if len(ranked) > 1:
            runner_up = ranked[1]
            if (
                top.last_task_type == function_type
                and runner_up.pending_count - top.pending_count
                <= settings.ANTI_REPETITION_MARGIN
            ):
                return SelectionResult(
                    reason=(
                        f"pending_count={runner_up.pending_count}, function={function_type}; "
                        f"anti-repetition: {top.name or top.technician_id} "
                        f"last handled {function_type}"
                    ),
                    function_type=function_type,
                    snapshot=runner_up,
                    anti_repetition_applied=True,
                )

        tied = [
            s
            for s in ranked
            if s.pending_count == top.pending_count and s.load_score == top.load_score
        ]
        chosen = top
        if len(tied) > 1:
            chosen = self._rng.choice(tied)

        reason = f"pending_count={chosen.pending_count}, function={function_type}"
        if len(tied) > 1:
            reason += f"; random tie-break among {len(tied)}"
        return SelectionResult(
            reason=reason,
            function_type=function_type,
            snapshot=chosen,
            random_tie_break=len(tied) > 1,
        )

    def select_by_rotation(self, function_type: str) -> SelectionResult:
        """
        Circular rotation by priority order.

        The technician after whoever completed the most recent task of this
        type is chosen; rotation starts over at the first technician when
        nothing was completed yet or that technician is no longer active.
        """
        candidates = self._technician_repository.list_active(function_type)
        if not candidates:
            TECHNICIAN_SELECTIONS.labels(outcome="none").inc()
            return SelectionResult(
                reason=f"no active technician for type {function_type}",
                function_type=function_type,
            )

        ordered = sorted(
            candidates,
            key=lambda t: (
                t.priority_order
                if t.priority_order is not None
                else settings.DEFAULT_PRIORITY_ORDER,
                t.name,
            ),
        )
        last_technician_id = self._last_technician_for(function_type)
        index = 0
        reason = "rotation start"
        if last_technician_id is not None:
            ids = [t.id for t in ordered]
            if last_technician_id in ids:
                index = (ids.index(last_technician_id) + 1) % len(ordered)
                reason = "next in rotation"
            else:
                reason = "rotation restart; previous technician inactive"

        result = SelectionResult(
            technician=ordered[index],
            reason=f"{reason} for {function_type}",
            function_type=function_type,
        )
        self._record(result)
        return result

    def select_replacement(
        self,
        function_type: str,
        current_technician_id: UUID | None,
        now: datetime | None = None,
    ) -> SelectionResult:
        """Least loaded technician other than the current one."""
        candidates = self._technician_repository.list_active(function_type)
        if not candidates:
            TECHNICIAN_SELECTIONS.labels(outcome="none").inc()
            return SelectionResult(
                reason=f"no active technician for type {function_type}",
                function_type=function_type,
            )
        if len(candidates) == 1:
            return self._result(
                candidates[0],
                None,
                function_type,
                f"only active technician for {function_type}",
            )

        others = [t for t in candidates if t.id != current_technician_id]
        if not others:
            others = candidates
        by_id = {t.id: t for t in others}
        snapshots = sorted(
            self._load_calculator.snapshots(others, now), key=lambda s: s.load_score
        )
        best = snapshots[0]
        return self._result(
            by_id[best.technician_id],
            best,
            function_type,
            f"replacement with lowest load={best.load_score}, function={function_type}",
        )

    def assign_task(
        self, task_id: UUID, now: datetime | None = None
    ) -> tuple[MaintenanceTask, SelectionResult]:
        """
        Select a technician for the task's type and write it onto the task.

        The task is left untouched when nobody is eligible.

        Raises:
            EntityNotFoundError: If the task does not exist
        """
        task = self._task_repository.get_by_id_required(task_id)
        result = self.select(task.task_type, now)
        if result.technician is not None:
            task.assigned_technician_id = result.technician.id
            task.technician_name = result.technician.name
            task.technician_email = result.technician.email
            task.updated_at = datetime.utcnow()
            self._task_repository.add(task)
            logger.info(
                "Technician assigned",
                task_id=str(task.id),
                technician_id=str(result.technician.id),
                reason=result.reason,
            )
        return task, result

    def _last_technician_for(self, function_type: str) -> UUID | None:
        if self._history_repository is not None:
            record = self._history_repository.latest_of_type(function_type)
            if record is not None:
                return record.technician_id
        task = self._task_repository.latest_completed_of_type(function_type)
        return task.assigned_technician_id if task is not None else None

    def _result(
        self,
        technician: Technician,
        snapshot: TechnicianLoadSnapshot | None,
        function_type: str,
        reason: str,
    ) -> SelectionResult:
        result = SelectionResult(
            technician=technician,
            reason=reason,
            function_type=function_type,
            snapshot=snapshot,
        )
        self._record(result)
        return result

    def _record(self, result: SelectionResult) -> None:
        outcome = "anti_repetition" if result.anti_repetition_applied else "selected"
        TECHNICIAN_SELECTIONS.labels(outcome=outcome).inc()
        logger.info(
            "Technician selected",
            function_type=result.function_type,
            technician_id=str(result.technician.id) if result.technician else None,
            reason=result.reason,
        )
