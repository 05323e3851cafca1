"""Tests for auth module models."""

from datetime import timedelta

import pytest
from pydantic import ValidationError

from modules.auth.exceptions import (
    InvalidCredentialsError,
    InvalidTokenError,
    MissingTokenError,
    SigningError,
)
from modules.auth.models import (
    AuthErrorKind,
    LoginResponse,
    RefreshRequest,
    SessionFailure,
    SessionResult,
    SessionState,
    TokenIssuerConfig,
    TokenPayload,
    now_ms,
)
from shared.config import Settings
from shared.exceptions import NotFoundError, TurnstileError, UpstreamUnavailableError


class TestTokenPayload:

    def test_for_user(self, test_user):
        before = now_ms()
        payload = TokenPayload.for_user(test_user)
        assert payload.subject == "u1"
        assert payload.first_name == "Ada"
        assert payload.last_name == "Lovelace"
        assert payload.role == "user"
        assert payload.issued_at >= before

    def test_claim_names(self, test_user):
        claims = TokenPayload.for_user(test_user).to_claims()
        assert set(claims) == {"sub", "firstName", "lastName", "role", "iat", "jti"}

    def test_immutable(self, test_user):
        payload = TokenPayload.for_user(test_user)
        with pytest.raises(ValidationError):
            payload.role = "admin"

    def test_unique_token_ids(self, test_user):
        assert TokenPayload.for_user(test_user).token_id != TokenPayload.for_user(test_user).token_id


class TestTokenIssuerConfig:

    def test_from_settings(self):
        settings = Settings(
            _env_file=None,
            access_token_secret="a",
            refresh_token_secret="r",
            access_token_expire_minutes=30,
            signing_timeout_seconds=0.5,
        )
        config = TokenIssuerConfig.from_settings(settings)
        assert config.access_secret == "a"
        assert config.refresh_secret == "r"
        assert config.access_expires == timedelta(minutes=30)
        assert config.refresh_expires is None
        assert config.timeout_seconds == 0.5

    def test_refresh_expiry_from_settings(self):
        settings = Settings(
            _env_file=None,
            access_token_secret="a",
            refresh_token_secret="r",
            refresh_token_expire_minutes=1440,
        )
        assert TokenIssuerConfig.from_settings(settings).refresh_expires == timedelta(days=1)

    def test_defaults(self):
        config = TokenIssuerConfig(access_secret="a", refresh_secret="r")
        assert config.access_expires == timedelta(minutes=60)
        assert config.refresh_expires is None


class TestSessionFailure:

    @pytest.mark.parametrize(
        "error,kind",
        [
            (InvalidCredentialsError(), AuthErrorKind.INVALID_CREDENTIALS),
            (MissingTokenError(), AuthErrorKind.MISSING_TOKEN),
            (InvalidTokenError(), AuthErrorKind.INVALID_TOKEN),
            (SigningError(), AuthErrorKind.SIGNING_ERROR),
            (UpstreamUnavailableError("slow", service="user-store"), AuthErrorKind.UPSTREAM_UNAVAILABLE),
            (NotFoundError("gone"), AuthErrorKind.NOT_FOUND),
        ],
    )
    def test_from_error(self, error, kind):
        failure = SessionFailure.from_error(error)
        assert failure.kind is kind
        assert failure.message == error.message
        assert failure.retryable == (kind is AuthErrorKind.UPSTREAM_UNAVAILABLE)

    def test_unmapped_error(self):
        with pytest.raises(ValueError):
            SessionFailure.from_error(TurnstileError("other"))

    @pytest.mark.parametrize(
        "kind,error_type",
        [
            (AuthErrorKind.INVALID_CREDENTIALS, InvalidCredentialsError),
            (AuthErrorKind.MISSING_TOKEN, MissingTokenError),
            (AuthErrorKind.INVALID_TOKEN, InvalidTokenError),
            (AuthErrorKind.SIGNING_ERROR, SigningError),
            (AuthErrorKind.UPSTREAM_UNAVAILABLE, UpstreamUnavailableError),
            (AuthErrorKind.NOT_FOUND, NotFoundError),
        ],
    )
    def test_to_error(self, kind, error_type):
        error = SessionFailure(kind=kind, message="msg").to_error()
        assert isinstance(error, error_type)
        assert error.message == "msg"


class TestSessionResult:

    def test_ok(self):
        result = SessionResult(state=SessionState.ISSUED, access_token="a", refresh_token="r")
        assert result.ok
        assert result.raise_for_failure() is result

    def test_rejected_carries_no_tokens(self):
        result = SessionResult.rejected(SessionFailure.from_error(InvalidTokenError()))
        assert not result.ok
        assert result.state is SessionState.REJECTED
        assert result.access_token is None
        assert result.refresh_token is None

    def test_raise_for_failure(self):
        result = SessionResult.rejected(SessionFailure.from_error(MissingTokenError()))
        with pytest.raises(MissingTokenError):
            result.raise_for_failure()


class TestRequestResponseModels:

    def test_login_response_aliases(self):
        body = LoginResponse(access_token="a", refresh_token="r")
        assert body.model_dump(by_alias=True) == {"accessToken": "a", "refreshToken": "r"}

    def test_refresh_request_token_optional(self):
        assert RefreshRequest().token is None
        assert RefreshRequest.model_validate({"token": "t"}).token == "t"
