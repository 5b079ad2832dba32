from .alert_repository import AlertRepository
from .automation_repository import AutomationConfigRepository, AutomationLogRepository
from .base import BaseRepository
from .execution_history_repository import ExecutionHistoryRepository
from .task_repository import TaskRepository
from .technician_repository import TechnicianRepository
from .work_order_repository import WorkOrderRepository

__all__ = [
    "AlertRepository",
    "AutomationConfigRepository",
    "AutomationLogRepository",
    "BaseRepository",
    "ExecutionHistoryRepository",
    "TaskRepository",
    "TechnicianRepository",
    "WorkOrderRepository",
]
