"""Technician repository."""

from sqlmodel import col, select

from maintenance_automation.infrastructure.database.models import Technician

from .base import BaseRepository


class TechnicianRepository(BaseRepository[Technician]):
    @property
    def entity_class(self) -> type[Technician]:
        return Technician

    def list_active(self, function_type: str | None = None) -> list[Technician]:
        """Active technicians, optionally restricted to one function type."""
        statement = select(Technician).where(Technician.active == True)  # noqa: E712
        if function_type is not None:
            statement = statement.where(Technician.function_type == function_type)
        statement = statement.order_by(col(Technician.name))
        return self._all(statement, "list_active")
