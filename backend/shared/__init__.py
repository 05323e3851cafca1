"""
Shared infrastructure for Turnstile backend.

This package contains cross-cutting concerns that are used by multiple modules:
- config: Centralized settings management
- database: Supabase client factory
- exceptions: Base exception classes
- timeouts: Upstream call guard
- logging_config: Root logger setup

Note: Business logic should NOT go here. This is for infrastructure only.
"""

from .config import Settings, get_settings
from .database import get_supabase_client, reset_client_cache
from .exceptions import (
    TurnstileError,
    NotFoundError,
    ValidationError,
    ConflictError,
    AuthenticationError,
    AuthorizationError,
    ExternalServiceError,
    UpstreamUnavailableError,
)
from .models import AuthenticatedUser
from .timeouts import call_with_timeout
from .logging_config import configure_logging

__all__ = [
    "Settings",
    "get_settings",
    "get_supabase_client",
    "reset_client_cache",
    "TurnstileError",
    "NotFoundError",
    "ValidationError",
    "ConflictError",
    "AuthenticationError",
    "AuthorizationError",
    "ExternalServiceError",
    "UpstreamUnavailableError",
    "AuthenticatedUser",
    "call_with_timeout",
    "configure_logging",
]
