from .enums import (
    PERIOD_DAYS,
    DueStatus,
    LoadLevel,
    MaintenancePeriod,
    RunLogKind,
    TaskStatus,
    UrgencyLevel,
    WorkOrderStatus,
)

__all__ = [
    "PERIOD_DAYS",
    "DueStatus",
    "LoadLevel",
    "MaintenancePeriod",
    "RunLogKind",
    "TaskStatus",
    "UrgencyLevel",
    "WorkOrderStatus",
]
