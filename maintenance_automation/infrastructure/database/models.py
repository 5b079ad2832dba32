"""
SQLModel table definitions for the preventive maintenance domain.

These models serve as both Pydantic models for API serialization and
SQLAlchemy ORM models for database operations. Tasks and work orders
reference each other by id only; neither embeds the other.
"""

import re
from datetime import date, datetime
from typing import Any
from uuid import UUID, uuid4

from pydantic import field_validator, model_validator
from sqlalchemy import JSON, Column
from sqlmodel import Field, SQLModel

from maintenance_automation.domain.maintenance.value_objects.enums import (
    MaintenancePeriod,
    RunLogKind,
    TaskStatus,
    UrgencyLevel,
    WorkOrderStatus,
)


_HH_MM = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")


def utcnow() -> datetime:
    return datetime.utcnow()


# Base classes for shared fields
class TimestampedModel(SQLModel):
    """Base model with timestamp fields."""

    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime | None = None


class IdentifiedModel(TimestampedModel):
    """Base model with UUID primary key and timestamps."""

    id: UUID = Field(default_factory=uuid4, primary_key=True)


# Maintenance task tables
class MaintenanceTaskBase(SQLModel):
    """Recurring preventive maintenance obligation."""

    task_type: str = Field(min_length=1, max_length=50, index=True)
    machine_id: str = Field(min_length=1, max_length=100, index=True)
    machine_name: str = Field(default="", max_length=200)
    sector: str | None = Field(None, max_length=100)
    system: str | None = Field(None, max_length=100)
    subassembly: str | None = Field(None, max_length=100)
    component: str | None = Field(None, max_length=100)
    description: str = Field(default="", max_length=1000)

    period_days: int = Field(ge=1)
    period_label: MaintenancePeriod | None = None
    estimated_minutes: int = Field(default=0, ge=0)
    priority: str | None = Field(None, max_length=20)

    assigned_technician_id: UUID | None = Field(None, index=True)
    technician_name: str | None = Field(None, max_length=200)
    technician_email: str | None = Field(None, max_length=200)

    next_execution: date | None = None
    scheduled_at: datetime | None = None
    status: TaskStatus = Field(default=TaskStatus.PENDING, index=True)


class MaintenanceTask(MaintenanceTaskBase, IdentifiedModel, table=True):
    """Maintenance task table definition."""

    __tablename__ = "maintenance_tasks"

    work_order_id: UUID | None = None
    work_order_human_id: str | None = Field(None, max_length=30)
    last_execution_at: datetime | None = None
    completed_at: datetime | None = None

    @property
    def is_orphan(self) -> bool:
        return self.assigned_technician_id is None


class MaintenanceTaskCreate(MaintenanceTaskBase):
    """Maintenance task creation model; period_days may come from period_label."""

    period_days: int | None = Field(default=None, ge=1)  # type: ignore[assignment]

    @model_validator(mode="after")
    def _resolve_period(self) -> "MaintenanceTaskCreate":
        if self.period_days is None:
            if self.period_label is None:
                raise ValueError("either period_days or period_label is required")
            self.period_days = self.period_label.days
        return self


# Technician tables
class TechnicianBase(SQLModel):
    name: str = Field(min_length=1, max_length=200)
    email: str | None = Field(None, max_length=200)
    function_type: str = Field(min_length=1, max_length=50, index=True)
    active: bool = Field(default=True, index=True)
    priority_order: int | None = None
    daily_capacity: int = Field(default=8, ge=0)


class Technician(TechnicianBase, IdentifiedModel, table=True):
    """Technician table definition."""

    __tablename__ = "technicians"


class TechnicianCreate(TechnicianBase):
    pass


# Alert tables
class Alert(IdentifiedModel, table=True):
    """Maintenance alert; at most one unread alert exists per task."""

    __tablename__ = "alerts"

    task_id: UUID = Field(index=True)
    task_description: str = ""
    machine_id: str = Field(index=True)
    machine_name: str = ""
    due_date: date
    days_remaining: int
    urgency: UrgencyLevel
    is_read: bool = Field(default=False, index=True)
    work_order_id: UUID | None = None


# Work order tables
class WorkOrder(IdentifiedModel, table=True):
    """Work order table definition."""

    __tablename__ = "work_orders"

    human_id: str = Field(max_length=30, unique=True, index=True)
    source_task_id: UUID = Field(index=True)
    machine_id: str = Field(index=True)
    machine_name: str = ""
    sector: str | None = None
    task_type: str | None = None
    description: str = ""
    notes: str = ""
    priority: str | None = None
    status: WorkOrderStatus = Field(default=WorkOrderStatus.PENDING, index=True)
    generated_automatically: bool = False
    scheduled_date: date | None = None
    estimated_minutes: int = 0
    assigned_technician_id: UUID | None = None
    created_by: str = "automation"


class WorkOrderCounter(SQLModel, table=True):
    """Per-day work order sequence counter."""

    __tablename__ = "work_order_counters"

    date_key: str = Field(primary_key=True, max_length=8)
    last_value: int = Field(default=0, ge=0)


# Automation configuration and run logs
class AutomationConfigBase(SQLModel):
    active: bool = True
    lead_time_days: int = Field(default=3, ge=0)
    per_type_lead_time: dict[str, int] = Field(
        default_factory=dict, sa_column=Column(JSON)
    )
    auto_generate_work_orders: bool = True
    preferred_execution_time: str = Field(default="06:00", max_length=5)


class AutomationConfig(AutomationConfigBase, IdentifiedModel, table=True):
    """Singleton automation configuration row."""

    __tablename__ = "automation_config"

    def lead_time_for(self, task_type: str) -> int:
        override = (self.per_type_lead_time or {}).get(task_type)
        return override if override is not None else self.lead_time_days


class AutomationConfigUpdate(AutomationConfigBase):
    """Settings payload; preferred_execution_time is advisory for the external scheduler."""

    @field_validator("preferred_execution_time")
    @classmethod
    def _check_execution_time(cls, v: str) -> str:
        if not _HH_MM.match(v):
            raise ValueError(f"expected HH:mm, got {v!r}")
        return v

    @field_validator("per_type_lead_time")
    @classmethod
    def _check_overrides(cls, v: dict[str, int]) -> dict[str, int]:
        for task_type, days in v.items():
            if days < 0:
                raise ValueError(f"lead time for {task_type!r} must be >= 0")
        return v


class AutomationRunLog(IdentifiedModel, table=True):
    """Append-only record of an automation run."""

    __tablename__ = "automation_logs"

    kind: RunLogKind
    message: str
    tasks_scanned: int = 0
    work_orders_created: int = 0
    alerts_created: int = 0
    error_detail: str | None = None
    details: dict[str, Any] = Field(default_factory=dict, sa_column=Column(JSON))


class ExecutionRecord(IdentifiedModel, table=True):
    """One completed execution of a maintenance task."""

    __tablename__ = "execution_history"

    task_id: UUID = Field(index=True)
    task_description: str = ""
    machine_id: str = Field(index=True)
    machine_name: str = ""
    technician_id: UUID | None = Field(None, index=True)
    technician_name: str | None = None
    task_type: str
    executed_at: datetime
    estimated_minutes: int = 0
    actual_minutes: int | None = None
    notes: str | None = None
    period_days: int
