"""Work order repository and per-day sequence counters."""

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlmodel import col, select

from maintenance_automation.domain.maintenance.value_objects.enums import (
    OPEN_WORK_ORDER_STATUSES,
)
from maintenance_automation.domain.shared.exceptions import ConflictError, StoreError
from maintenance_automation.infrastructure.database.models import (
    WorkOrder,
    WorkOrderCounter,
)

from .base import BaseRepository


class WorkOrderRepository(BaseRepository[WorkOrder]):
    @property
    def entity_class(self) -> type[WorkOrder]:
        return WorkOrder

    def list_open_for_machine(self, machine_id: str) -> list[WorkOrder]:
        statement = select(WorkOrder).where(
            WorkOrder.machine_id == machine_id,
            col(WorkOrder.status).in_(OPEN_WORK_ORDER_STATUSES),
        )
        return self._all(statement, "list_open_for_machine")

    def human_ids_in_range(self, lower: str, upper: str) -> list[str]:
        """Human ids with lower <= human_id < upper."""
        statement = select(WorkOrder.human_id).where(
            col(WorkOrder.human_id) >= lower,
            col(WorkOrder.human_id) < upper,
        )
        return self._all(statement, "human_ids_in_range")

    def increment_counter(self, date_key: str, floor: int) -> int:
        """
        Atomically advance the counter for date_key and return the new value.

        The counter never goes below floor, so identifiers issued before the
        counter row existed are not reused. The row is locked for update on
        databases that support it.

        Raises:
            ConflictError: If a concurrent transaction created the row first
            StoreError: If the database rejects the write
        """
        try:
            statement = (
                select(WorkOrderCounter)
                .where(WorkOrderCounter.date_key == date_key)
                .with_for_update()
            )
            counter = self.session.exec(statement).first()
            if counter is None:
                counter = WorkOrderCounter(date_key=date_key, last_value=floor)
            counter.last_value = max(counter.last_value, floor) + 1
            self.session.add(counter)
            self.session.flush()
            return counter.last_value
        except IntegrityError as e:
            raise ConflictError(
                f"Work order counter for {date_key} was created concurrently",
                {"date_key": date_key},
            ) from e
        except SQLAlchemyError as e:
            raise StoreError(f"Database error during increment_counter: {str(e)}") from e
