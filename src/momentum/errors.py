"""Typed business-rule failures raised by services.

Routers translate these into HTTP responses; services never build HTTP errors.
"""

from __future__ import annotations


class DuplicateUserError(ValueError):
    """Raised when registering an email that already has an account."""


class InvalidCredentialsError(ValueError):
    """Raised for an unknown email or a wrong password (never distinguished)."""


class InvalidTokenError(PermissionError):
    """Raised for any bearer token that fails validation."""


class CheckinValidationError(ValueError):
    """Raised when check-in fields break a rule the request schema cannot check."""

    def __init__(self, messages: list[str]) -> None:
        super().__init__("; ".join(messages))
        self.messages = messages


class InvalidDaysError(ValueError):
    """Raised when a look-back window is outside the allowed range."""


class InvalidDateRangeError(ValueError):
    """Raised for an inverted or oversized date range."""


class CheckinConflictError(ValueError):
    """Raised when a write would create a second check-in for the same user and date."""
