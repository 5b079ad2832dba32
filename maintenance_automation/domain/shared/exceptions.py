"""
Domain Exceptions

Error kinds raised by the maintenance automation engine. Each carries an
ErrorType discriminator so callers and the API layer can map them without
isinstance chains.
"""

from enum import Enum


class ErrorType(str, Enum):
    """Error type enumeration for discriminated unions."""

    VALIDATION = "validation"
    NOT_FOUND = "not_found"
    STORE = "store"
    CONFLICT = "conflict"


class DomainError(Exception):
    """Base class for all domain errors with type discrimination."""

    def __init__(
        self,
        message: str,
        error_type: ErrorType,
        details: dict[str, str | int | bool | None] | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.error_type = error_type
        self.details = details or {}

    def to_dict(self) -> dict[str, str | dict[str, str | int | bool | None]]:
        """Convert error to dictionary for API responses."""
        return {
            "type": self.error_type.value,
            "message": self.message,
            "details": self.details,
        }


class ValidationError(DomainError):
    """Raised when a record is malformed, e.g. a task without a due date."""

    def __init__(
        self,
        field_name: str,
        value: str | int | float | bool | None,
        message: str,
    ) -> None:
        self.field_name = field_name
        self.value = value
        super().__init__(
            f"Validation failed for field '{field_name}': {message}",
            ErrorType.VALIDATION,
            {"field": field_name, "value": str(value) if value is not None else None},
        )


class EntityNotFoundError(DomainError):
    """Raised when an entity cannot be found."""

    def __init__(self, entity_type: str, entity_id: object) -> None:
        self.entity_type = entity_type
        self.entity_id = entity_id
        super().__init__(
            f"{entity_type} with ID {entity_id} not found",
            ErrorType.NOT_FOUND,
            {"entity_type": entity_type, "entity_id": str(entity_id)},
        )


class StoreError(DomainError):
    """Raised when the persistence layer is unreachable or rejects a write."""

    def __init__(
        self, message: str, details: dict[str, str | int | bool | None] | None = None
    ) -> None:
        super().__init__(message, ErrorType.STORE, details)


class ConflictError(DomainError):
    """Raised when a uniqueness constraint cannot be satisfied, e.g. duplicate work order ids."""

    def __init__(
        self, message: str, details: dict[str, str | int | bool | None] | None = None
    ) -> None:
        super().__init__(message, ErrorType.CONFLICT, details)
