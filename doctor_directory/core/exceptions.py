"""Error taxonomy shared by the service layer and the HTTP transport.

Services raise these; the API renders them through a single exception
handler so route functions never translate errors themselves.
"""

from __future__ import annotations

from typing import Any


class DirectoryError(Exception):
    """Base class for every error surfaced by the directory core."""

    code = "UNKNOWN_ERROR"
    http_status = 500

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert the error into a JSON-friendly payload."""

        return {
            "error": self.code,
            "message": self.message,
            "details": self.details,
        }


class ValidationError(DirectoryError):
    """Malformed or missing required input."""

    code = "VALIDATION_ERROR"
    http_status = 400


class NotFoundError(DirectoryError):
    """A referenced office or referral does not exist."""

    code = "NOT_FOUND"
    http_status = 404

    def __init__(self, resource: str, identifier: Any) -> None:
        super().__init__(
            f"{resource} with id {identifier} not found",
            details={"resource": resource, "id": identifier},
        )
        self.resource = resource
        self.identifier = identifier


class StoreError(DirectoryError):
    """Persistence failure not otherwise classified."""

    code = "STORE_ERROR"
    http_status = 503


__all__ = ["DirectoryError", "NotFoundError", "StoreError", "ValidationError"]
