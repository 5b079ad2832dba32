"""
Base repository implementation providing generic persistence operations.

Concrete repositories extend this class with the queries each part of the
automation engine needs. SQLAlchemy failures are translated into domain
StoreError / ConflictError so callers never see driver exceptions.
"""

from abc import ABC, abstractmethod
from typing import Generic, TypeVar
from uuid import UUID

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlmodel import Session, SQLModel

from maintenance_automation.domain.shared.exceptions import (
    ConflictError,
    EntityNotFoundError,
    StoreError,
)

EntityType = TypeVar("EntityType", bound=SQLModel)


class BaseRepository(Generic[EntityType], ABC):
    """
    Base repository class providing generic operations.

    Writes are flushed, not committed; the caller owns the transaction
    boundary so several writes can succeed or fail together.
    """

    def __init__(self, session: Session):
        self.session = session

    @property
    @abstractmethod
    def entity_class(self) -> type[EntityType]:
        """Return the SQLModel entity class managed by this repository."""
        pass

    def add(self, entity: EntityType) -> EntityType:
        """
        Stage a new or modified entity and flush it.

        Raises:
            ConflictError: If a unique constraint is violated
            StoreError: If the database rejects the write
        """
        try:
            self.session.add(entity)
            self.session.flush()
            return entity
        except IntegrityError as e:
            raise ConflictError(
                f"{self.entity_class.__name__} violates a uniqueness constraint: {e.orig}"
            ) from e
        except SQLAlchemyError as e:
            raise StoreError(f"Database error during add: {str(e)}") from e

    def get_by_id(self, entity_id: UUID) -> EntityType | None:
        try:
            return self.session.get(self.entity_class, entity_id)
        except SQLAlchemyError as e:
            raise StoreError(f"Database error during get_by_id: {str(e)}") from e

    def get_by_id_required(self, entity_id: UUID) -> EntityType:
        """
        Get entity by ID, raising exception if not found.

        Raises:
            EntityNotFoundError: If entity not found
            StoreError: If database operation fails
        """
        entity = self.get_by_id(entity_id)
        if entity is None:
            raise EntityNotFoundError(self.entity_class.__name__, entity_id)
        return entity

    def _all(self, statement, operation: str) -> list[EntityType]:
        try:
            return list(self.session.exec(statement).all())
        except SQLAlchemyError as e:
            raise StoreError(f"Database error during {operation}: {str(e)}") from e

    def _first(self, statement, operation: str) -> EntityType | None:
        try:
            return self.session.exec(statement).first()
        except SQLAlchemyError as e:
            raise StoreError(f"Database error during {operation}: {str(e)}") from e
