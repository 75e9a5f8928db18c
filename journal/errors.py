"""Error taxonomy shared by the journal services and routes."""
from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Iterable


@dataclass(frozen=True)
class Issue:
    """A single field-level problem."""

    field: str
    message: str
    value: Any = None

    def to_mapping(self) -> dict[str, Any]:
        payload = asdict(self)
        if payload["value"] is None:
            payload.pop("value")
        return payload


class JournalError(RuntimeError):
    """Base class for errors converted into structured API responses."""

    status_code = 500


class NotFound(JournalError):
    """Raised when a user or tenant does not exist."""

    status_code = 404


class ConfigNotFound(NotFound):
    """Raised when neither the requested nor the default tenant can be read."""


class ValidationFailed(JournalError):
    """Raised when a document or request body is malformed."""

    status_code = 400

    def __init__(self, message: str, issues: Iterable[Issue] = ()) -> None:
        super().__init__(message)
        self.issues = list(issues)


class ConfigValidationError(ValidationFailed):
    """Raised when a tenant configuration document fails validation."""


class InvalidRequest(ValidationFailed):
    """Raised when request parameters or body fields are invalid."""


class ServiceUnavailable(JournalError):
    """Raised when storage or an external dependency is unreachable."""

    status_code = 503


__all__ = [
    "ConfigNotFound",
    "ConfigValidationError",
    "InvalidRequest",
    "Issue",
    "JournalError",
    "NotFound",
    "ServiceUnavailable",
    "ValidationFailed",
]
