"""Custom exceptions for the application."""
from typing import Any


class EntityNotFound(Exception):
    """Raised when an entity is not found in the database."""

    def __init__(self, entity_name: str, entity_id: Any):
        """
        Initialize the exception.

        Args:
            entity_name: Name of the entity that was not found
            entity_id: ID of the entity that was not found
        """
        super().__init__(f"{entity_name} with ID {entity_id} not found")
        self.entity_name = entity_name
        self.entity_id = entity_id


class DataAccessError(Exception):
    """
    Normalized backend failure.

    Every error coming out of the persistence layer is converted into this type
    before it reaches a caller.

    Attributes:
        message: Human-readable description of the failure
        code: Backend error code (SQLSTATE when the driver provides one)
        details: The raw exception or payload that caused the failure
        retryable: Whether repeating the operation may succeed
    """

    def __init__(
        self,
        message: str,
        code: str | None = None,
        details: Any = None,
        retryable: bool = False,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.details = details
        self.retryable = retryable

    def __repr__(self) -> str:
        return f"DataAccessError({self.message!r}, code={self.code!r}, retryable={self.retryable})"
