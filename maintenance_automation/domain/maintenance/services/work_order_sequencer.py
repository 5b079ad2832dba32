"""
Work Order Sequencer

Issues human-readable work order identifiers of the form
``OS-YYYYMMDD-NNNN``, numbered per calendar day.

The next number comes from a per-day counter row advanced inside the
caller's transaction. The counter is floored at the highest suffix already
present for that day, so identifiers issued before the counter existed are
never handed out again. The unique constraint on ``work_orders.human_id``
remains the final guard; a collision surfaces as ConflictError and the
caller retries.
"""

from datetime import date

from maintenance_automation.core.config import settings
from maintenance_automation.infrastructure.database.repositories import (
    WorkOrderRepository,
)

SEQUENCE_WIDTH = 4


def date_prefix(today: date, prefix: str | None = None) -> str:
    return f"{prefix or settings.WORK_ORDER_PREFIX}-{today.strftime('%Y%m%d')}"


def format_human_id(today: date, sequence: int, prefix: str | None = None) -> str:
    return f"{date_prefix(today, prefix)}-{sequence:0{SEQUENCE_WIDTH}d}"


def parse_sequence(human_id: str, day_prefix: str) -> int | None:
    """Numeric suffix of human_id if it belongs to day_prefix, else None."""
    if not human_id.startswith(day_prefix + "-"):
        return None
    suffix = human_id[len(day_prefix) + 1 :]
    return int(suffix) if suffix.isdigit() else None


def max_sequence(human_ids: list[str], day_prefix: str) -> int:
    sequences = [parse_sequence(h, day_prefix) for h in human_ids]
    return max((s for s in sequences if s is not None), default=0)


class WorkOrderSequencer:
    """Date-scoped sequential identifier generator."""

    def __init__(
        self, work_order_repository: WorkOrderRepository, prefix: str | None = None
    ) -> None:
        self._work_order_repository = work_order_repository
        self._prefix = prefix or settings.WORK_ORDER_PREFIX

    def highest_issued(self, today: date) -> int:
        day_prefix = date_prefix(today, self._prefix)
        # "Z" sorts after every digit, so this range covers the whole day.
        human_ids = self._work_order_repository.human_ids_in_range(
            day_prefix, f"{day_prefix}Z"
        )
        return max_sequence(human_ids, day_prefix)

    def next_human_id(self, today: date) -> str:
        """
        Reserve and return the next identifier for today.

        Raises:
            ConflictError: If the day's counter row was created concurrently
            StoreError: If the database rejects the write
        """
        date_key = today.strftime("%Y%m%d")
        sequence = self._work_order_repository.increment_counter(
            date_key, floor=self.highest_issued(today)
        )
        return format_human_id(today, sequence, self._prefix)
