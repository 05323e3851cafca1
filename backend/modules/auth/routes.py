"""
Session API endpoints.

Translates SessionResult values into HTTP responses. The status for each
failure kind is fixed in STATUS_BY_KIND; nothing else in the auth module
knows about HTTP.
"""

from typing import Optional

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from api.dependencies import get_auth_service
from api.middleware.auth import get_current_user
from shared.models import AuthenticatedUser

from .interfaces import IAuthService
from .models import (
    AuthErrorKind,
    LoginRequest,
    LoginResponse,
    LogoutResponse,
    RefreshRequest,
    RefreshResponse,
    SessionResult,
)

router = APIRouter()

STATUS_BY_KIND = {
    AuthErrorKind.INVALID_CREDENTIALS: 401,
    AuthErrorKind.MISSING_TOKEN: 401,
    AuthErrorKind.INVALID_TOKEN: 403,
    AuthErrorKind.SIGNING_ERROR: 500,
    AuthErrorKind.UPSTREAM_UNAVAILABLE: 503,
    AuthErrorKind.NOT_FOUND: 404,
}


def failure_response(result: SessionResult) -> JSONResponse:
    """Render a failed SessionResult as an error response."""
    error = result.failure.to_error()
    headers = {"Cache-Control": "no-store"}
    if result.failure.retryable:
        headers["Retry-After"] = "1"
    return JSONResponse(
        status_code=STATUS_BY_KIND[result.failure.kind],
        content=error.to_dict(),
        headers=headers,
    )


@router.post("/login", response_model=LoginResponse)
async def login(
    request: LoginRequest,
    service: IAuthService = Depends(get_auth_service),
):
    """
    Exchange email and password for an access token and a refresh token.

    Returns 401 for an unknown email or a wrong password alike.
    """
    result = await service.login(request.email, request.password)
    if not result.ok:
        return failure_response(result)
    body = LoginResponse(access_token=result.access_token, refresh_token=result.refresh_token)
    return JSONResponse(
        content=body.model_dump(by_alias=True),
        headers={"Cache-Control": "no-store"},
    )


@router.post("/logout", response_model=LogoutResponse)
async def logout(
    user: AuthenticatedUser = Depends(get_current_user),
    service: IAuthService = Depends(get_auth_service),
):
    """
    End every session of the authenticated user.

    All refresh tokens the user holds stop working, on every device.
    """
    result = await service.logout(user.id)
    if not result.ok:
        return failure_response(result)
    return LogoutResponse(success=True)


@router.post("/token/refresh", response_model=RefreshResponse)
async def refresh_access_token(
    request: Optional[RefreshRequest] = None,
    service: IAuthService = Depends(get_auth_service),
):
    """
    Exchange a stored refresh token for a new access token.

    401 when no token is sent, 403 when the token is not recognized.
    """
    token = request.token if request else None
    result = await service.refresh(token)
    if not result.ok:
        return failure_response(result)
    body = RefreshResponse(access_token=result.access_token)
    return JSONResponse(
        content=body.model_dump(by_alias=True),
        headers={"Cache-Control": "no-store"},
    )
