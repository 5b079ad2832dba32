"""Domain enums for preventive maintenance."""

from enum import Enum


class TaskStatus(str, Enum):
    """Maintenance task status enumeration."""

    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class WorkOrderStatus(str, Enum):
    """Work order status enumeration."""

    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"


OPEN_TASK_STATUSES = (TaskStatus.PENDING, TaskStatus.IN_PROGRESS)
OPEN_WORK_ORDER_STATUSES = (WorkOrderStatus.PENDING, WorkOrderStatus.IN_PROGRESS)


class UrgencyLevel(str, Enum):
    """Alert urgency derived from days remaining until due."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class LoadLevel(str, Enum):
    """Technician workload bucket."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class RunLogKind(str, Enum):
    """Automation run log entry kind."""

    SCAN = "scan"
    ERROR = "error"


class DueStatus(str, Enum):
    """Coarse status of a due date relative to today."""

    OVERDUE = "overdue"
    TODAY = "today"
    UPCOMING = "upcoming"  # due within a week
    OK = "ok"


class MaintenancePeriod(str, Enum):
    """Named recurrence intervals."""

    DAILY = "daily"
    WEEKLY = "weekly"
    BIWEEKLY = "biweekly"
    MONTHLY = "monthly"
    BIMONTHLY = "bimonthly"
    QUARTERLY = "quarterly"
    SEMIANNUAL = "semiannual"
    ANNUAL = "annual"

    @property
    def days(self) -> int:
        return PERIOD_DAYS[self]


PERIOD_DAYS: dict[MaintenancePeriod, int] = {
    MaintenancePeriod.DAILY: 1,
    MaintenancePeriod.WEEKLY: 7,
    MaintenancePeriod.BIWEEKLY: 15,
    MaintenancePeriod.MONTHLY: 30,
    MaintenancePeriod.BIMONTHLY: 60,
    MaintenancePeriod.QUARTERLY: 90,
    MaintenancePeriod.SEMIANNUAL: 180,
    MaintenancePeriod.ANNUAL: 365,
}
