"""
Domain exceptions raised by the catalog, availability and booking services.

Each carries the HTTP status the API layer answers with, so routers can let
them propagate and rely on ``domain_error_handler`` for the response shape.
"""
from __future__ import annotations

from typing import Any, Dict, Optional

from fastapi import status


class DomainError(Exception):
    """Base class for errors reported back to the caller."""

    status_code: int = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str, details: Optional[Any] = None) -> None:
        self.message = message
        self.details = details
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        body: Dict[str, Any] = {"error": self.message}
        if self.details is not None:
            body["details"] = self.details
        return body


class ValidationError(DomainError):
    """Malformed input shape or range."""

    def __init__(self, message: str = "Validation failed", details: Optional[Any] = None) -> None:
        super().__init__(message, details)


class NotFoundError(DomainError):
    status_code = status.HTTP_404_NOT_FOUND

    def __init__(self, resource: str, resource_id: Optional[str] = None) -> None:
        self.resource = resource
        self.resource_id = resource_id
        super().__init__(f"{resource} not found", {"resource": resource, "resource_id": resource_id})


class ConflictError(DomainError):
    status_code = status.HTTP_409_CONFLICT


class InvalidStateError(DomainError):
    """Illegal lifecycle transition."""


class InvalidArgumentError(DomainError):
    """Unrecognised enumerated value, e.g. an unknown booking status."""


class PersistenceError(DomainError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str = "Database operation failed", details: Optional[Any] = None) -> None:
        super().__init__(message, details)
