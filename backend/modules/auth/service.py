"""
Session service implementation.

Combines the password verifier, the token issuer and the refresh token
store into the login, refresh and logout transitions:

    unauthenticated -> verifying -> issuing -> issued
    unauthenticated -> verifying -> rejected

Domain failures are returned as SessionResult values, never raised.
"""

import logging
from typing import Optional

from modules.users.interfaces import IUserStore
from shared.exceptions import AuthenticationError, UpstreamUnavailableError
from shared.timeouts import call_with_timeout

from .exceptions import (
    InvalidCredentialsError,
    InvalidTokenError,
    MissingTokenError,
    SigningError,
)
from .interfaces import IAuthService
from .models import SessionFailure, SessionResult, SessionState, TokenPayload
from .passwords import DUMMY_HASH, DUMMY_SALT, verify_password
from .signing import TokenIssuer
from .token_store import STORE_SERVICE, RefreshTokenStore

logger = logging.getLogger(__name__)


class AuthService(IAuthService):
    """
    Implementation of the session service.

    Holds no mutable state of its own: the refresh token collections live
    in the user store, so any number of requests can run concurrently.
    """

    def __init__(
        self,
        users: IUserStore,
        issuer: TokenIssuer,
        tokens: RefreshTokenStore,
        store_timeout: float = 5.0,
    ):
        self._users = users
        self._issuer = issuer
        self._tokens = tokens
        self._store_timeout = store_timeout

    async def login(self, email: str, password: str) -> SessionResult:
        """
        Verify credentials and issue an access/refresh token pair.

        Unknown emails still run one password hash against a dummy record,
        so the two rejection paths take about the same time.
        """
        logger.debug("login: verifying credentials")
        try:
            user = await call_with_timeout(
                self._users.get(email=email), self._store_timeout, STORE_SERVICE
            )
        except UpstreamUnavailableError as e:
            return SessionResult.rejected(SessionFailure.from_error(e))

        if user is None:
            verify_password(password, DUMMY_HASH, DUMMY_SALT)
            return self._reject_credentials()
        if not verify_password(password, user.password_hash, user.password_salt):
            return self._reject_credentials()

        logger.debug(f"login: issuing tokens for user {user.id}")
        payload = TokenPayload.for_user(user)
        try:
            access_token = await self._issuer.issue_access_token(payload)
            refresh_token = await self._issuer.issue_refresh_token(payload)
            stored = await self._tokens.append(user.id, refresh_token)
        except (SigningError, UpstreamUnavailableError) as e:
            logger.warning(f"login failed for user {user.id}: {e.message}")
            return SessionResult.rejected(SessionFailure.from_error(e))

        if not stored:
            # The record was deleted between lookup and append.
            return self._reject_credentials()

        logger.info(f"login: session issued for user {user.id}")
        return SessionResult(
            state=SessionState.ISSUED,
            access_token=access_token,
            refresh_token=refresh_token,
        )

    async def refresh(self, token: Optional[str]) -> SessionResult:
        """
        Issue a new access token for a stored refresh token.

        The payload is rebuilt from the current user record, so role or name
        changes made since login show up in the new access token.
        When refresh tokens are configured to expire, an expired or forged
        token is rejected before the store lookup.
        """
        if not token:
            return SessionResult.rejected(SessionFailure.from_error(MissingTokenError()))

        if self._issuer.config.refresh_expires is not None:
            try:
                await self._issuer.verify_refresh_token(token)
            except AuthenticationError as e:
                logger.warning(f"refresh: token rejected by issuer: {e.message}")
                return SessionResult.rejected(SessionFailure.from_error(InvalidTokenError()))
            except UpstreamUnavailableError as e:
                return SessionResult.rejected(SessionFailure.from_error(e))

        try:
            user = await self._tokens.find_by_token(token)
        except UpstreamUnavailableError as e:
            return SessionResult.rejected(SessionFailure.from_error(e))

        if user is None:
            logger.warning("refresh: token not held by any user")
            return SessionResult.rejected(SessionFailure.from_error(InvalidTokenError()))

        try:
            access_token = await self._issuer.issue_access_token(TokenPayload.for_user(user))
        except (SigningError, UpstreamUnavailableError) as e:
            logger.warning(f"refresh failed for user {user.id}: {e.message}")
            return SessionResult.rejected(SessionFailure.from_error(e))

        logger.debug(f"refresh: access token issued for user {user.id}")
        return SessionResult(state=SessionState.ISSUED, access_token=access_token)

    async def logout(self, user_id: str) -> SessionResult:
        """
        Clear every refresh token for the user, ending all their sessions.
        """
        try:
            cleared = await self._tokens.clear_all(user_id)
        except UpstreamUnavailableError as e:
            return SessionResult.rejected(SessionFailure.from_error(e))

        if not cleared:
            logger.info(f"logout: user {user_id} no longer exists")
        else:
            logger.info(f"logout: all sessions ended for user {user_id}")
        return SessionResult(state=SessionState.UNAUTHENTICATED)

    def _reject_credentials(self) -> SessionResult:
        logger.warning("login rejected: invalid credentials")
        return SessionResult.rejected(SessionFailure.from_error(InvalidCredentialsError()))
