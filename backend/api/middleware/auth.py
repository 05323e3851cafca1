"""
Access token authentication.

Verifies bearer access tokens issued by the TokenIssuer and exposes the
caller as an AuthenticatedUser. Refresh tokens are rejected here because
they are signed with a different secret.
"""

from typing import Optional
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from modules.auth.signing import TokenIssuer
from shared.exceptions import AuthenticationError
from shared.models import AuthenticatedUser

from ..dependencies import get_token_issuer

# Bearer token extractor
bearer_scheme = HTTPBearer(auto_error=False)


class AuthError(HTTPException):
    """Authentication error with consistent format."""
    def __init__(self, detail: str):
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=detail,
            headers={"WWW-Authenticate": "Bearer"},
        )


def get_user_from_claims(claims: dict) -> AuthenticatedUser:
    """
    Convert verified access token claims to an AuthenticatedUser.

    Args:
        claims: Decoded token claims

    Returns:
        AuthenticatedUser instance
    """
    return AuthenticatedUser(
        id=claims["sub"],
        first_name=claims.get("firstName"),
        last_name=claims.get("lastName"),
        role=claims.get("role") or "user",
    )


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    issuer: TokenIssuer = Depends(get_token_issuer),
) -> AuthenticatedUser:
    """
    Dependency that requires a valid access token.

    Usage:
        @router.post("/logout")
        async def logout(user: AuthenticatedUser = Depends(get_current_user)):
            ...
    """
    if credentials is None:
        raise AuthError("Missing authorization header")

    try:
        claims = await issuer.verify_access_token(credentials.credentials)
    except AuthenticationError as e:
        raise AuthError(e.message)
    return get_user_from_claims(claims)

