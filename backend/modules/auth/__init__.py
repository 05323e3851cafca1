"""
Authentication module.

Handles credential verification, access/refresh token issuance, refresh
token storage and logout invalidation.

Public API:
- IAuthService: Interface for session operations
- ITokenSigner: Interface for signing backends
- TokenPayload, TokenIssuerConfig, SessionResult: Models
- Auth exceptions: InvalidCredentialsError, MissingTokenError, etc.
"""

from .interfaces import IAuthService, ITokenSigner
from .models import (
    AuthErrorKind,
    SessionFailure,
    SessionResult,
    SessionState,
    TokenIssuerConfig,
    TokenPayload,
)
from .exceptions import (
    InvalidCredentialsError,
    MissingTokenError,
    InvalidTokenError,
    ExpiredTokenError,
    BadAccessTokenError,
    SigningError,
)

__all__ = [
    # Interfaces
    "IAuthService",
    "ITokenSigner",
    # Models
    "AuthErrorKind",
    "SessionFailure",
    "SessionResult",
    "SessionState",
    "TokenIssuerConfig",
    "TokenPayload",
    # Exceptions
    "InvalidCredentialsError",
    "MissingTokenError",
    "InvalidTokenError",
    "ExpiredTokenError",
    "BadAccessTokenError",
    "SigningError",
]
