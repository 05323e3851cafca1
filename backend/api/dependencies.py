"""
Dependency injection setup for FastAPI.

This module provides the "container" that wires together all module
implementations. Each module exposes its service through an interface,
and this file creates the concrete implementations:

    user store -> refresh token store -> auth service
               -> user service
    settings   -> token issuer         -> auth service
"""

from typing import TYPE_CHECKING

from shared.config import get_settings

# Type checking imports for interfaces (avoids circular imports)
if TYPE_CHECKING:
    from modules.auth.interfaces import IAuthService
    from modules.auth.signing import TokenIssuer
    from modules.auth.token_store import RefreshTokenStore
    from modules.users.interfaces import IUserService, IUserStore


class ServiceContainer:
    """
    Container for all service instances.

    This class manages the lifecycle of service instances and their
    dependencies. Services are created lazily on first access.

    All services are cached as singletons within the container.
    Use reset() to clear all cached services for testing.
    """

    def __init__(self) -> None:
        self._user_store: "IUserStore | None" = None
        self._token_issuer: "TokenIssuer | None" = None
        self._refresh_tokens: "RefreshTokenStore | None" = None
        self._auth_service: "IAuthService | None" = None
        self._user_service: "IUserService | None" = None

    @property
    def user_store(self) -> "IUserStore":
        """Get the user record store selected by TURNSTILE_USER_STORE_BACKEND."""
        if self._user_store is None:
            settings = get_settings()
            if settings.user_store_backend == "supabase":
                from modules.users.repository import SupabaseUserRepository
                from shared.database import get_supabase_client
                self._user_store = SupabaseUserRepository(get_supabase_client())
            else:
                from modules.users.store import InMemoryUserStore
                self._user_store = InMemoryUserStore()
        return self._user_store

    @property
    def token_issuer(self) -> "TokenIssuer":
        """Get the token issuer, configured once from settings."""
        if self._token_issuer is None:
            from modules.auth.models import TokenIssuerConfig
            from modules.auth.signing import TokenIssuer
            self._token_issuer = TokenIssuer(TokenIssuerConfig.from_settings(get_settings()))
        return self._token_issuer

    @property
    def refresh_tokens(self) -> "RefreshTokenStore":
        """Get the refresh token store."""
        if self._refresh_tokens is None:
            from modules.auth.token_store import RefreshTokenStore
            settings = get_settings()
            self._refresh_tokens = RefreshTokenStore(
                self.user_store,
                timeout=settings.store_timeout_seconds,
                cap=settings.refresh_token_cap,
            )
        return self._refresh_tokens

    @property
    def auth(self) -> "IAuthService":
        """Get the auth service instance."""
        if self._auth_service is None:
            from modules.auth.service import AuthService
            self._auth_service = AuthService(
                users=self.user_store,
                issuer=self.token_issuer,
                tokens=self.refresh_tokens,
                store_timeout=get_settings().store_timeout_seconds,
            )
        return self._auth_service

    @property
    def users(self) -> "IUserService":
        """Get the user service instance."""
        if self._user_service is None:
            from modules.users.service import UserService
            self._user_service = UserService(
                self.user_store,
                timeout=get_settings().store_timeout_seconds,
            )
        return self._user_service

    def reset(self) -> None:
        """
        Reset all cached services.

        This is primarily for testing - allows tests to get fresh
        service instances with different mock dependencies.
        """
        self._user_store = None
        self._token_issuer = None
        self._refresh_tokens = None
        self._auth_service = None
        self._user_service = None


# Module-level container singleton
_container: ServiceContainer | None = None


def get_container() -> ServiceContainer:
    """Get the singleton service container."""
    global _container
    if _container is None:
        _container = ServiceContainer()
    return _container


def reset_container() -> None:
    """
    Reset the service container.

    This clears the cached container, so the next call to get_container()
    will create a fresh container with new service instances.

    Primarily used for testing.
    """
    global _container
    _container = None


# FastAPI dependency functions
# These are the functions that should be used in route Depends() calls


def get_auth_service() -> "IAuthService":
    """FastAPI dependency for auth service."""
    return get_container().auth


def get_user_service() -> "IUserService":
    """FastAPI dependency for user service."""
    return get_container().users


def get_token_issuer() -> "TokenIssuer":
    """FastAPI dependency for the token issuer."""
    return get_container().token_issuer


def get_user_store() -> "IUserStore":
    """FastAPI dependency for the user record store."""
    return get_container().user_store
