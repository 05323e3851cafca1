"""
Authentication module exceptions.

These exceptions are raised by the auth module and can be caught
by API error handlers to return appropriate HTTP responses.
"""

from shared.exceptions import (
    AuthenticationError,
    AuthorizationError,
    TurnstileError,
)


class InvalidCredentialsError(AuthenticationError):
    """Raised when the email is unknown or the password does not match."""

    def __init__(self, message: str = "Incorrect email or password"):
        super().__init__(message, code="INVALID_CREDENTIALS")


class MissingTokenError(AuthenticationError):
    """Raised when no token is provided."""

    def __init__(self, message: str = "Missing token"):
        super().__init__(message, code="MISSING_TOKEN")


class InvalidTokenError(AuthorizationError):
    """
    Raised when a refresh token is not in any user's collection.

    Maps to 403, not 401: the request carried a token, it just is not
    one we accept.
    """

    def __init__(self, message: str = "Invalid token"):
        super().__init__(message, code="INVALID_TOKEN")


class ExpiredTokenError(AuthenticationError):
    """Raised when an access token has expired."""

    def __init__(self, message: str = "Access token has expired"):
        super().__init__(message, code="TOKEN_EXPIRED")


class BadAccessTokenError(AuthenticationError):
    """Raised when an access token fails signature or claim checks."""

    def __init__(self, message: str = "Invalid access token"):
        super().__init__(message, code="BAD_ACCESS_TOKEN")


class SigningError(TurnstileError):
    """Raised when a token cannot be signed (no secret, or payload rejected)."""

    status_code = 500

    def __init__(self, message: str = "Token signing failed"):
        super().__init__(message, code="SIGNING_ERROR")
