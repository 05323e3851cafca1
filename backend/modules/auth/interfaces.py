"""
Authentication module interfaces.

Other modules should depend on these protocols, not the concrete
implementations. This enables testing with mocks and swapping the
signing backend (e.g. a KMS or HSM client) without touching the
session logic.
"""

from datetime import timedelta
from typing import Any, Optional, Protocol, runtime_checkable

from .models import SessionResult


@runtime_checkable
class ITokenSigner(Protocol):
    """
    Signing backend used by the TokenIssuer.

    Methods are async so that backends which sign remotely can suspend.
    """

    async def sign(
        self,
        claims: dict[str, Any],
        secret: str,
        expires_in: Optional[timedelta] = None,
    ) -> str:
        """
        Sign claims with secret.

        Args:
            claims: Token claims; an exp claim is added when expires_in is set
            secret: Signing key
            expires_in: Lifetime from now, or None for no expiry

        Returns:
            The encoded token
        """
        ...

    async def verify(self, token: str, secret: str) -> dict[str, Any]:
        """
        Verify a token signature and expiry and return its claims.

        Raises:
            ExpiredTokenError: If the token has expired
            BadAccessTokenError: If the token is malformed or forged
        """
        ...


@runtime_checkable
class IAuthService(Protocol):
    """
    Interface for session operations.

    Every method returns a SessionResult instead of raising for domain
    failures; the API layer translates failure kinds to HTTP statuses.
    """

    async def login(self, email: str, password: str) -> SessionResult:
        """
        Verify credentials and issue an access/refresh token pair.

        The refresh token is stored before the result is returned; if
        storing fails the result is a failure and carries no tokens.
        """
        ...

    async def refresh(self, token: Optional[str]) -> SessionResult:
        """
        Issue a new access token for a stored refresh token.

        The claims come from the user's current record. The refresh
        token stays valid.
        """
        ...

    async def logout(self, user_id: str) -> SessionResult:
        """
        Drop every refresh token the user holds, on all devices.
        """
        ...
