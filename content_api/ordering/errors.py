"""Error taxonomy for content and ordering operations."""

from typing import Any


class ContentError(Exception):
    """Base class for errors surfaced to API clients."""

    status_code: int = 500
    retryable: bool = False

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def to_payload(self) -> dict[str, Any]:
        """Build the JSON error body for this error."""
        return {"message": self.message}


class NotFoundError(ContentError):
    """The id does not exist (or not where the caller claimed it is)."""

    status_code = 404

    def __init__(self, entity: str, identifier: object) -> None:
        super().__init__(f"{entity} not found")
        self.entity = entity
        self.identifier = identifier


class InvalidTargetError(ContentError):
    """A move or batch reorder cannot be applied to the partition."""

    status_code = 400


class ValidationFailure(ContentError):
    """Payload or identifier failed validation before reaching the store."""

    status_code = 400

    def __init__(self, message: str, errors: list[dict[str, str]] | None = None) -> None:
        super().__init__(message)
        self.errors = errors or []

    def to_payload(self) -> dict[str, Any]:
        payload = super().to_payload()
        if self.errors:
            payload["details"] = self.errors
        return payload


class StoreFailure(ContentError):
    """The atomic unit could not complete; nothing was applied."""

    status_code = 500
    retryable = True


class TransactionConflictError(StoreFailure):
    """The transaction kept conflicting with concurrent writers."""


class InvariantViolationError(ContentError):
    """An ordering invariant does not hold. Indicates a bug or bad data."""

    status_code = 500

    def to_payload(self) -> dict[str, Any]:
        return {"message": "Internal Server Error"}
