# flask_app/services/errors.py
"""
Error taxonomy shared by the contact services and the JSON error handlers.
"""

from __future__ import annotations

from enum import Enum


class ErrorKind(str, Enum):
    """Classification attached to every service failure."""

    VALIDATION_ERROR = "validation_error"
    INVALID_VALUE = "invalid_value"
    NOT_FOUND = "not_found"
    DATA_INTEGRITY = "data_integrity"
    PERSISTENCE_FAILURE = "persistence_failure"


class ContactServiceError(Exception):
    """Base exception for request-scoped service failures."""

    kind = ErrorKind.VALIDATION_ERROR
    status_code = 400

    def __init__(self, message: str, *, details: dict | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> dict:
        payload = {"message": self.message, "error": self.kind.value}
        if self.details:
            payload["details"] = self.details
        return payload


class ValidationError(ContactServiceError):
    """Malformed or empty input."""


class InvalidValueError(ValidationError):
    """Value outside a field's closed set of choices."""

    kind = ErrorKind.INVALID_VALUE


class NotFoundError(ContactServiceError):
    """Referenced contact, event, task or staff member does not exist."""

    kind = ErrorKind.NOT_FOUND
    status_code = 404


class AmbiguousContactError(ContactServiceError):
    """More than one contact shares a normalized phone number."""

    kind = ErrorKind.DATA_INTEGRITY
    status_code = 409

    def __init__(self, normalized_phone: str, contact_ids: list[int]):
        super().__init__(
            f"{len(contact_ids)} contacts share mobile number {normalized_phone}; resolve the duplicates first.",
            details={"mobile": normalized_phone, "contact_ids": contact_ids},
        )
        self.normalized_phone = normalized_phone
        self.contact_ids = contact_ids


class PersistenceFailure(ContactServiceError):
    """Underlying store error. Not retried."""

    kind = ErrorKind.PERSISTENCE_FAILURE
    status_code = 500
