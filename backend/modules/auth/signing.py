"""
Token issuance.

TokenIssuer signs TokenPayloads through a pluggable ITokenSigner backend.
Access and refresh tokens use different secrets, so a leaked access
secret cannot mint refresh tokens and vice versa. Access tokens expire
after a fixed lifetime; refresh tokens carry no exp claim by default and
stay valid for as long as they are stored on the user record.
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Optional

import jwt

from shared.exceptions import UpstreamUnavailableError
from shared.timeouts import call_with_timeout

from .exceptions import (
    BadAccessTokenError,
    ExpiredTokenError,
    MissingTokenError,
    SigningError,
)
from .interfaces import ITokenSigner
from .models import TokenIssuerConfig, TokenPayload

logger = logging.getLogger(__name__)

SIGNER_SERVICE = "token-signer"


class JWTSigner(ITokenSigner):
    """
    HMAC JWT signer backed by PyJWT.

    iat is carried in milliseconds, so PyJWT's own iat check (which
    expects seconds) is disabled on decode.
    """

    def __init__(self, algorithm: str = "HS256"):
        self._algorithm = algorithm

    async def sign(
        self,
        claims: dict[str, Any],
        secret: str,
        expires_in: Optional[timedelta] = None,
    ) -> str:
        to_encode = dict(claims)
        if expires_in is not None:
            to_encode["exp"] = datetime.now(timezone.utc) + expires_in
        try:
            return jwt.encode(to_encode, secret, algorithm=self._algorithm)
        except (jwt.PyJWTError, TypeError, ValueError) as e:
            raise SigningError(f"Token signing failed: {e}") from e

    async def verify(self, token: str, secret: str) -> dict[str, Any]:
        try:
            return jwt.decode(
                token,
                secret,
                algorithms=[self._algorithm],
                options={"verify_iat": False, "require": ["sub"]},
            )
        except jwt.ExpiredSignatureError:
            raise ExpiredTokenError()
        except jwt.InvalidTokenError as e:
            raise BadAccessTokenError(f"Invalid access token: {e}")


class TokenIssuer:
    """
    Signs access and refresh tokens.

    Usage:
        issuer = TokenIssuer(TokenIssuerConfig.from_settings(get_settings()))
        access = await issuer.issue_access_token(TokenPayload.for_user(user))
    """

    def __init__(self, config: TokenIssuerConfig, signer: Optional[ITokenSigner] = None):
        self._config = config
        self._signer = signer or JWTSigner(config.algorithm)

    @property
    def config(self) -> TokenIssuerConfig:
        return self._config

    async def issue(
        self,
        payload: TokenPayload,
        secret: str,
        expires_in: Optional[timedelta] = None,
    ) -> str:
        """
        Sign a payload with the given secret.

        Raises:
            SigningError: If the secret is empty or the backend rejects the payload
            UpstreamUnavailableError: If the backend does not answer in time
        """
        if not secret:
            raise SigningError("Signing secret is not configured")

        try:
            token = await call_with_timeout(
                self._signer.sign(payload.to_claims(), secret, expires_in),
                self._config.timeout_seconds,
                SIGNER_SERVICE,
            )
        except (SigningError, UpstreamUnavailableError):
            raise
        except (TypeError, ValueError) as e:
            raise SigningError(f"Token signing failed: {e}") from e

        if not token:
            raise SigningError("Signing backend returned an empty token")
        return token

    async def issue_access_token(self, payload: TokenPayload) -> str:
        return await self.issue(payload, self._config.access_secret, self._config.access_expires)

    async def issue_refresh_token(self, payload: TokenPayload) -> str:
        return await self.issue(payload, self._config.refresh_secret, self._config.refresh_expires)

    async def verify_access_token(self, token: Optional[str]) -> dict[str, Any]:
        """
        Verify an access token and return its claims.

        Refresh tokens fail here: they are signed with the other secret.

        Raises:
            MissingTokenError: If no token was given
            ExpiredTokenError: If the token has expired
            BadAccessTokenError: If the signature or claims are invalid
        """
        if not token:
            raise MissingTokenError()
        return await call_with_timeout(
            self._signer.verify(token, self._config.access_secret),
            self._config.timeout_seconds,
            SIGNER_SERVICE,
        )

    async def verify_refresh_token(self, token: str) -> dict[str, Any]:
        """
        Verify a refresh token's signature and expiry with the refresh secret.

        Only meaningful when refresh tokens carry an expiry; presence in the
        store is still what makes a token valid.

        Raises:
            ExpiredTokenError: If the token has expired
            BadAccessTokenError: If the signature or claims are invalid
        """
        return await call_with_timeout(
            self._signer.verify(token, self._config.refresh_secret),
            self._config.timeout_seconds,
            SIGNER_SERVICE,
        )
