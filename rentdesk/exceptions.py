"""Custom exception hierarchy for rentdesk."""


class RentDeskError(Exception):
    """Base exception for all rentdesk errors."""


class ValidationError(RentDeskError):
    """Raised when a command carries missing or invalid data."""


class ReferentialIntegrityError(ValidationError):
    """Raised when a record references an entity that does not exist."""


class InvalidEntityStateError(ValidationError):
    """Raised when an entity is in an invalid state for the operation."""


class PropertyAlreadyOccupiedError(InvalidEntityStateError):
    """Raised when a property is already bound to a different active tenant."""


class EntityNotFoundError(RentDeskError):
    """Raised when an operation targets a stale or deleted id."""

    def __init__(self, message: str, collection: str | None = None) -> None:
        super().__init__(message)
        self.collection = collection


class StorageUnavailableError(RentDeskError):
    """Raised when the storage backend cannot be read or written."""


class ConfigurationError(RentDeskError):
    """Raised when configuration is invalid or missing."""
