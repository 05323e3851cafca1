"""
Authentication module data models.

These models define the data structures used by the auth module
and exposed to other modules through the interface.
"""

import time
import uuid
from datetime import timedelta
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field

from shared.config import Settings
from shared.exceptions import NotFoundError, TurnstileError, UpstreamUnavailableError

from .exceptions import (
    InvalidCredentialsError,
    InvalidTokenError,
    MissingTokenError,
    SigningError,
)


def now_ms() -> int:
    """Wall-clock milliseconds since the epoch."""
    return int(time.time() * 1000)


class TokenPayload(BaseModel):
    """
    Claims placed in both access and refresh tokens.

    Built fresh from the user record for every issuance and never
    mutated afterwards. Serialized with the claim names sub, firstName,
    lastName, role, iat and jti. iat is milliseconds and is only used
    for auditing; expiry is the signer's concern.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    subject: str = Field(..., alias="sub", description="User ID")
    first_name: str = Field(..., alias="firstName")
    last_name: str = Field(..., alias="lastName")
    role: str = Field(...)
    issued_at: int = Field(default_factory=now_ms, alias="iat", description="Epoch ms")
    token_id: str = Field(default_factory=lambda: uuid.uuid4().hex, alias="jti")

    @classmethod
    def for_user(cls, user: Any) -> "TokenPayload":
        """Build a payload from the user's current identity fields."""
        return cls(
            subject=user.id,
            first_name=user.first_name,
            last_name=user.last_name,
            role=user.role,
        )

    def to_claims(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True)


class TokenIssuerConfig(BaseModel):
    """
    Signing configuration handed to the TokenIssuer at construction.

    Secrets are not validated here so an empty one surfaces as a
    SigningError at issue time; Settings rejects them at startup.
    """

    model_config = ConfigDict(frozen=True)

    access_secret: str
    refresh_secret: str
    algorithm: str = "HS256"
    access_expires: timedelta = timedelta(minutes=60)
    refresh_expires: Optional[timedelta] = None
    timeout_seconds: float = 2.0

    @classmethod
    def from_settings(cls, settings: Settings) -> "TokenIssuerConfig":
        refresh_expires = None
        if settings.refresh_token_expire_minutes:
            refresh_expires = timedelta(minutes=settings.refresh_token_expire_minutes)
        return cls(
            access_secret=settings.access_token_secret,
            refresh_secret=settings.refresh_token_secret,
            algorithm=settings.jwt_algorithm,
            access_expires=timedelta(minutes=settings.access_token_expire_minutes),
            refresh_expires=refresh_expires,
            timeout_seconds=settings.signing_timeout_seconds,
        )


# -----------------------------------------------------------------------------
# Session outcomes
# -----------------------------------------------------------------------------


class SessionState(str, Enum):
    """Where a login/refresh/logout attempt ended up."""

    UNAUTHENTICATED = "unauthenticated"
    VERIFYING = "verifying"
    ISSUING = "issuing"
    ISSUED = "issued"
    REJECTED = "rejected"


class AuthErrorKind(str, Enum):
    """Failure kinds a session operation can report."""

    INVALID_CREDENTIALS = "INVALID_CREDENTIALS"
    MISSING_TOKEN = "MISSING_TOKEN"
    INVALID_TOKEN = "INVALID_TOKEN"
    SIGNING_ERROR = "SIGNING_ERROR"
    UPSTREAM_UNAVAILABLE = "UPSTREAM_UNAVAILABLE"
    NOT_FOUND = "NOT_FOUND"


class SessionFailure(BaseModel):
    """Why a session operation was rejected."""

    model_config = ConfigDict(frozen=True)

    kind: AuthErrorKind
    message: str
    retryable: bool = False

    @classmethod
    def from_error(cls, error: TurnstileError) -> "SessionFailure":
        for error_type, kind in _KINDS_BY_ERROR:
            if isinstance(error, error_type):
                return cls(kind=kind, message=error.message, retryable=error.retryable)
        raise ValueError(f"No session failure kind for {error.code}")

    def to_error(self) -> TurnstileError:
        """Build the exception that corresponds to this failure."""
        if self.kind is AuthErrorKind.UPSTREAM_UNAVAILABLE:
            return UpstreamUnavailableError(self.message, service="session")
        if self.kind is AuthErrorKind.NOT_FOUND:
            return NotFoundError(self.message, code=self.kind.value)
        return _ERRORS_BY_KIND[self.kind](self.message)


_KINDS_BY_ERROR = [
    (InvalidCredentialsError, AuthErrorKind.INVALID_CREDENTIALS),
    (MissingTokenError, AuthErrorKind.MISSING_TOKEN),
    (InvalidTokenError, AuthErrorKind.INVALID_TOKEN),
    (SigningError, AuthErrorKind.SIGNING_ERROR),
    (UpstreamUnavailableError, AuthErrorKind.UPSTREAM_UNAVAILABLE),
    (NotFoundError, AuthErrorKind.NOT_FOUND),
]

_ERRORS_BY_KIND = {
    AuthErrorKind.INVALID_CREDENTIALS: InvalidCredentialsError,
    AuthErrorKind.MISSING_TOKEN: MissingTokenError,
    AuthErrorKind.INVALID_TOKEN: InvalidTokenError,
    AuthErrorKind.SIGNING_ERROR: SigningError,
}


class SessionResult(BaseModel):
    """
    Explicit outcome of a session operation.

    On success `failure` is None and the token fields relevant to the
    operation are set. On failure no token is ever set.
    """

    model_config = ConfigDict(frozen=True)

    state: SessionState
    access_token: Optional[str] = None
    refresh_token: Optional[str] = None
    failure: Optional[SessionFailure] = None

    @property
    def ok(self) -> bool:
        return self.failure is None

    @classmethod
    def rejected(cls, failure: SessionFailure) -> "SessionResult":
        return cls(state=SessionState.REJECTED, failure=failure)

    def raise_for_failure(self) -> "SessionResult":
        """Raise the matching exception if this result is a failure."""
        if self.failure is not None:
            raise self.failure.to_error()
        return self


# -----------------------------------------------------------------------------
# Request / response bodies
# -----------------------------------------------------------------------------


class LoginRequest(BaseModel):
    """Credentials submitted to /login."""

    email: str = Field(..., max_length=320)
    password: str = Field(..., max_length=255)


class LoginResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    access_token: str = Field(..., alias="accessToken")
    refresh_token: str = Field(..., alias="refreshToken")


class RefreshRequest(BaseModel):
    """Body of /token/refresh. A missing token is reported as 401, not 422."""

    token: Optional[str] = None


class RefreshResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    access_token: str = Field(..., alias="accessToken")


class LogoutResponse(BaseModel):
    success: bool = True
