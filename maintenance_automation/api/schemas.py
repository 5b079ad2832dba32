"""Response models for the maintenance automation API."""

from datetime import date, datetime
from uuid import UUID

from pydantic import BaseModel

from maintenance_automation.domain.maintenance.services import SelectionResult
from maintenance_automation.domain.maintenance.value_objects import (
    LoadLevel,
    MaintenancePeriod,
    RunLogKind,
    TaskStatus,
)


class SelectionResponse(BaseModel):
    selected: bool
    technician_id: UUID | None = None
    technician_name: str | None = None
    function_type: str
    reason: str
    pending_count: int | None = None
    load_score: float | None = None
    load_level: LoadLevel | None = None
    anti_repetition_applied: bool = False

    @classmethod
    def from_result(cls, result: SelectionResult) -> "SelectionResponse":
        snapshot = result.snapshot
        return cls(
            selected=result.selected,
            technician_id=result.technician.id if result.technician else None,
            technician_name=result.technician.name if result.technician else None,
            function_type=result.function_type,
            reason=result.reason,
            pending_count=snapshot.pending_count if snapshot else None,
            load_score=snapshot.load_score if snapshot else None,
            load_level=snapshot.load_level if snapshot else None,
            anti_repetition_applied=result.anti_repetition_applied,
        )


class TaskResponse(BaseModel):
    id: UUID
    task_type: str
    machine_id: str
    machine_name: str
    description: str
    period_days: int
    period_label: MaintenancePeriod | None = None
    status: TaskStatus
    next_execution: date | None = None
    last_execution_at: datetime | None = None
    assigned_technician_id: UUID | None = None
    technician_name: str | None = None
    work_order_id: UUID | None = None
    work_order_human_id: str | None = None


class TechnicianResponse(BaseModel):
    id: UUID
    name: str
    email: str | None = None
    function_type: str
    active: bool
    priority_order: int | None = None


class AssignmentResponse(BaseModel):
    task: TaskResponse
    selection: SelectionResponse


class RunLogResponse(BaseModel):
    id: UUID
    kind: RunLogKind
    message: str
    tasks_scanned: int
    work_orders_created: int
    alerts_created: int
    error_detail: str | None = None
    created_at: datetime
