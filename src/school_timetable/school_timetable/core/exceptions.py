from __future__ import annotations

from typing import Any, Optional

from .enums import Reason


class DomainError(Exception):
    """Base exception for business rule violations.

    `reason` is a stable code for callers; `details` names the entity that
    caused the failure (occupying subject, conflicting time range, ...).
    """

    def __init__(self, message: str, *, reason: Optional[Reason] = None, details: Optional[dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.reason = reason
        self.details = dict(details or {})


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class ConflictError(DomainError):
    """Raised when a write would violate a timetable or attendance invariant."""


class NotFoundError(DomainError):
    """Raised when a referenced entity does not exist for the caller."""


class AuthorizationError(DomainError):
    """Raised when a caller lacks permission or context for an action."""
