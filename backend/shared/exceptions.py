"""
Base exception classes for the Turnstile backend.

Each module should define its own exceptions that inherit from these bases.
This enables consistent error handling across the application: the API
layer maps each base class to exactly one HTTP status.
"""

from typing import Optional, Any


class TurnstileError(Exception):
    """
    Base exception for all Turnstile errors.

    All custom exceptions should inherit from this class.
    """

    status_code: int = 500
    retryable: bool = False

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code or self.__class__.__name__
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to a dictionary for API responses."""
        return {
            "error": self.code,
            "message": self.message,
            "details": self.details,
        }


class NotFoundError(TurnstileError):
    """Resource not found."""

    status_code = 404


class ValidationError(TurnstileError):
    """Input validation failed."""

    status_code = 422


class ConflictError(TurnstileError):
    """Resource already exists or collides with another one."""

    status_code = 409


class AuthenticationError(TurnstileError):
    """Authentication failed (invalid or missing credentials)."""

    status_code = 401


class AuthorizationError(TurnstileError):
    """Authorization failed (credential recognized but not accepted)."""

    status_code = 403


class ExternalServiceError(TurnstileError):
    """Error communicating with an external service."""

    status_code = 502

    def __init__(
        self,
        message: str,
        service: str,
        code: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ):
        super().__init__(message, code, details)
        self.service = service
        self.details["service"] = service


class UpstreamUnavailableError(ExternalServiceError):
    """
    The user store or signing backend failed or did not answer in time.

    Retryable by the caller; never retried internally.
    """

    status_code = 503
    retryable = True

    def __init__(
        self,
        message: str,
        service: str,
        details: Optional[dict[str, Any]] = None,
    ):
        super().__init__(message, service, code="UPSTREAM_UNAVAILABLE", details=details)
