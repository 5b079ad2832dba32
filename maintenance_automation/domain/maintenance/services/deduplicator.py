"""Read-only existence checks that keep automation runs idempotent."""

from maintenance_automation.infrastructure.database.models import (
    Alert,
    MaintenanceTask,
    WorkOrder,
)
from maintenance_automation.infrastructure.database.repositories import (
    AlertRepository,
    WorkOrderRepository,
)


class AlertDeduplicator:
    def __init__(
        self,
        alert_repository: AlertRepository,
        work_order_repository: WorkOrderRepository,
    ) -> None:
        self._alert_repository = alert_repository
        self._work_order_repository = work_order_repository

    def existing_unread_alert(self, task: MaintenanceTask) -> Alert | None:
        return self._alert_repository.find_unread_for_task(task.id)

    def existing_open_work_order(self, task: MaintenanceTask) -> WorkOrder | None:
        """Open work order for the task's machine that was raised from this task."""
        for work_order in self._work_order_repository.list_open_for_machine(
            task.machine_id
        ):
            if work_order.source_task_id == task.id:
                return work_order
        return None
